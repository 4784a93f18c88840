"""Hybrid multi-strategy rules system.

Each rule declares an ordered list of detection strategies. A strategy is
either symbol-based (runs on the semantic engine's parsed view of a file) or
heuristic (runs on the raw text). Per rule and per file, the orchestrator
picks the first strategy that can run, falls back when the semantic engine
cannot serve the file, and merges "always run" strategies through the
deduplicator. Final severities come from the severity resolver, never from
detectors.

Quick Start:

    from lintweave.rules import (
        create_engine_with_builtins,
        define_rule,
        heuristic_strategy,
        symbol_strategy,
    )

    def find_todo_functions(parsed, ctx):
        '''Functions whose name starts with "todo_".'''
        return [
            {"message": f"Unfinished function {node.name}", "line": node.lineno}
            for node in ast.walk(parsed.tree)
            if isinstance(node, ast.FunctionDef) and node.name.startswith("todo_")
        ]

    def grep_todo_functions(source, ctx):
        return [
            {"message": "Unfinished function", "line": n}
            for n, line in enumerate(source.splitlines(), 1)
            if line.lstrip().startswith("def todo_")
        ]

    rule = define_rule(
        "no-todo-function",
        [symbol_strategy(find_todo_functions), heuristic_strategy(grep_todo_functions)],
        category="quality",
    )

    engine = create_engine_with_builtins(custom_rules=[rule])
    result = engine.check_directory(Path("."))

Pattern Rules (Shorthand):

    from lintweave.rules import pattern_rule

    pattern_rule("no-debug", r"import pdb", "Remove debug imports", category="debug")
    pattern_rule("no-global", "Global", "Avoid global", backend="python")
"""

from .adapters import (
    HeuristicStrategy,
    StrategyAdapter,
    SymbolStrategy,
    adapt_detector,
    make_adapter,
)
from .backends import Match, get_backend, list_backends
from .base import (
    DetectionContext,
    Diagnostic,
    DiagnosticKind,
    Finding,
    RuleSpec,
    Severity,
    StrategyKind,
    StrategySpec,
    Violation,
)
from .builtins import get_builtin_rules
from .catalog import (
    load_rules_from_config,
    load_rules_from_file,
    load_rules_from_toml,
    load_rules_from_yaml,
    rule_from_dict,
    rules_from_entries,
)
from .decorator import (
    clear_registry,
    define_rule,
    detector,
    get_registered_rules,
    get_rule,
    heuristic_strategy,
    pattern_rule,
    register_rule,
    symbol_strategy,
)
from .dedup import deduplicate
from .engine import RuleEngine, create_engine_with_builtins
from .orchestrator import AttemptStatus, RuleOrchestrator, RuleOutcome, StrategyAttempt
from .session import AnalysisSession, SerializedEngine, SessionResult, rule_matches_file
from .severity import CATEGORY_DEFAULTS, GLOBAL_DEFAULT, SeverityResolver, parse_severity

__all__ = [
    "CATEGORY_DEFAULTS",
    "GLOBAL_DEFAULT",
    "AnalysisSession",
    "AttemptStatus",
    "DetectionContext",
    "Diagnostic",
    "DiagnosticKind",
    "Finding",
    "HeuristicStrategy",
    "Match",
    "RuleEngine",
    "RuleOrchestrator",
    "RuleOutcome",
    "RuleSpec",
    "SerializedEngine",
    "SessionResult",
    "Severity",
    "SeverityResolver",
    "StrategyAdapter",
    "StrategyAttempt",
    "StrategyKind",
    "StrategySpec",
    "SymbolStrategy",
    "Violation",
    "adapt_detector",
    "clear_registry",
    "create_engine_with_builtins",
    "deduplicate",
    "define_rule",
    "detector",
    "get_backend",
    "get_builtin_rules",
    "get_registered_rules",
    "get_rule",
    "heuristic_strategy",
    "list_backends",
    "load_rules_from_config",
    "load_rules_from_file",
    "load_rules_from_toml",
    "load_rules_from_yaml",
    "make_adapter",
    "parse_severity",
    "pattern_rule",
    "register_rule",
    "rule_from_dict",
    "rule_matches_file",
    "rules_from_entries",
    "symbol_strategy",
]
