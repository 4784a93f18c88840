"""Rule engine: the in-memory rule catalog and its entry points.

The engine holds rules by id and opens one ``AnalysisSession`` per check:

1. File discovery and filtering
2. Semantic engine setup (when any rule has a symbol-based strategy)
3. Session run (severity resolution, orchestration, deduplication)

Usage:
    from lintweave.rules import create_engine_with_builtins

    engine = create_engine_with_builtins()
    result = engine.check_directory(Path("."))

    for violation in result.violations:
        print(f"{violation.location}: {violation.message}")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from lintweave.config import LintweaveConfig, SessionOptions
from lintweave.discovery import discover_files
from lintweave.logging import get_logger
from lintweave.semantic import PythonProject

from .base import RuleSpec, StrategyKind
from .builtins import get_builtin_rules
from .session import AnalysisSession, SessionResult

if TYPE_CHECKING:
    from collections.abc import Iterable

    from lintweave.semantic import SemanticEngine

logger = get_logger("engine")


class RuleEngine:
    """Engine for executing rules against code.

    The engine manages:
    - Rule registration and filtering
    - Semantic engine setup per run
    - Session creation and attempt statistics
    """

    def __init__(
        self,
        config: LintweaveConfig | None = None,
        semantic_engine: SemanticEngine | None = None,
        verbose: bool = False,
    ) -> None:
        self.config = config or LintweaveConfig()
        self.semantic_engine = semantic_engine
        self.verbose = verbose
        self.rules: dict[str, RuleSpec] = {}
        self.last_stats: dict[str, int] = {}

    def add_rule(self, rule: RuleSpec) -> None:
        """Add a rule to the engine, replacing any rule with the same id."""
        self.rules[rule.id] = rule

    def add_rules(self, rules: Iterable[RuleSpec]) -> None:
        """Add multiple rules."""
        for rule in rules:
            self.add_rule(rule)

    def remove_rule(self, rule_id: str) -> bool:
        """Remove a rule by id."""
        if rule_id in self.rules:
            del self.rules[rule_id]
            return True
        return False

    def get_enabled_rules(self) -> list[RuleSpec]:
        """Get all enabled rules."""
        return [r for r in self.rules.values() if r.enabled]

    def check_file(
        self,
        file_path: Path,
        rules: list[RuleSpec] | None = None,
        options: SessionOptions | None = None,
    ) -> SessionResult:
        """Check a single file against rules."""
        return self.check_files([file_path], rules, options)

    def check_files(
        self,
        files: Iterable[Path],
        rules: list[RuleSpec] | None = None,
        options: SessionOptions | None = None,
    ) -> SessionResult:
        """Check an ordered list of files.

        Args:
            files: Files to check
            rules: Rules to apply (defaults to all enabled)
            options: Session options (defaults to the engine config's)

        Returns:
            SessionResult for the run
        """
        files = [Path(f).resolve() for f in files]
        rules = self.get_enabled_rules() if rules is None else rules
        options = options or self.config.session_options(verbose=self.verbose)

        session = AnalysisSession(
            rules,
            files,
            options,
            semantic_engine=self._semantic_engine_for(files, rules),
        )
        result = session.run()
        self.last_stats = session.orchestrator.stats.snapshot()
        return result

    def check_directory(
        self,
        directory: Path,
        rules: list[RuleSpec] | None = None,
        options: SessionOptions | None = None,
    ) -> SessionResult:
        """Check all files in a directory that match the configured patterns."""
        files = discover_files(
            directory,
            self.config.include_patterns,
            self.config.exclude_patterns,
        )
        if not files:
            logger.info("No files to check", directory=str(directory))
        return self.check_files(files, rules, options)

    def _semantic_engine_for(
        self,
        files: list[Path],
        rules: list[RuleSpec],
    ) -> SemanticEngine | None:
        if self.semantic_engine is not None:
            return self.semantic_engine
        if not self.config.semantic or not files:
            return None
        if not any(rule.uses(StrategyKind.SYMBOL) for rule in rules):
            return None
        return PythonProject(f for f in files if f.suffix == ".py").initialize()


def create_engine_with_builtins(
    include_builtins: bool = True,
    custom_rules: list[RuleSpec] | None = None,
    config: LintweaveConfig | None = None,
    semantic_engine: SemanticEngine | None = None,
    verbose: bool = False,
) -> RuleEngine:
    """Create a rule engine with optional built-in rules.

    Args:
        include_builtins: Include built-in rules
        custom_rules: Additional custom rules
        config: Project configuration
        semantic_engine: Semantic engine to use instead of building one per run
        verbose: Collect detector trace notes as diagnostics

    Returns:
        Configured RuleEngine
    """
    engine = RuleEngine(config, semantic_engine=semantic_engine, verbose=verbose)

    if include_builtins:
        engine.add_rules(get_builtin_rules())

    if custom_rules:
        engine.add_rules(custom_rules)

    return engine
