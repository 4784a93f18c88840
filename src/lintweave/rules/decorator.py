"""Helpers for defining rules.

A rule is a list of strategies. Each helper wraps a detector in the right
adapter at definition time, so a detector with an unsupported shape fails
here rather than in the middle of a run:

    from lintweave.rules import define_rule, heuristic_strategy, symbol_strategy

    def find_bare_excepts(parsed, ctx):
        '''Symbol-based: walk the AST.'''
        ...

    def grep_bare_excepts(source, ctx):
        '''Heuristic: scan the text.'''
        ...

    define_rule(
        "no-bare-except",
        [symbol_strategy(find_bare_excepts), heuristic_strategy(grep_bare_excepts)],
        category="error-handling",
    )

The ``@detector`` decorator turns a function into a strategy directly:

    @detector("symbol", always_run=True)
    def find_secrets(parsed, ctx):
        ...

Pattern rules need no detector function at all:

    pattern_rule("no-breakpoint", r"\\bbreakpoint\\s*\\(", "Remove breakpoint() call")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .adapters import make_adapter
from .backends import get_backend
from .base import Finding, RuleSpec, Severity, StrategyKind, StrategySpec
from .severity import parse_severity

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable

    from .base import DetectionContext

# Global registry of rules
_RULE_REGISTRY: dict[str, RuleSpec] = {}


def _strategy(
    detector: Any,
    kind: StrategyKind,
    name: str | None,
    always_run: bool,
) -> StrategySpec:
    adapter = make_adapter(detector, kind, name)
    return StrategySpec(name=adapter.name, kind=kind, adapter=adapter, always_run=always_run)


def symbol_strategy(
    detector: Any, *, name: str | None = None, always_run: bool = False
) -> StrategySpec:
    """Declare a symbol-based strategy (detector receives a ``ParsedFile``)."""
    return _strategy(detector, StrategyKind.SYMBOL, name, always_run)


def heuristic_strategy(
    detector: Any, *, name: str | None = None, always_run: bool = False
) -> StrategySpec:
    """Declare a heuristic strategy (detector receives the source text)."""
    return _strategy(detector, StrategyKind.HEURISTIC, name, always_run)


def detector(
    kind: str | StrategyKind = StrategyKind.HEURISTIC,
    *,
    name: str | None = None,
    always_run: bool = False,
) -> Callable[[Callable[..., Any]], StrategySpec]:
    """Decorator that turns a detection function into a ``StrategySpec``.

    Args:
        kind: "symbol" / "symbol-based" or "heuristic"
        name: Strategy name (defaults to function name)
        always_run: Run on every file instead of only as a fallback
    """
    strategy_kind = _parse_kind(kind)

    def decorator(func: Callable[..., Any]) -> StrategySpec:
        return _strategy(func, strategy_kind, name or func.__name__, always_run)

    return decorator


def _parse_kind(kind: str | StrategyKind) -> StrategyKind:
    if isinstance(kind, StrategyKind):
        return kind
    if kind == "symbol":
        return StrategyKind.SYMBOL
    return StrategyKind(kind)


def _normalize_severity(severity: str | int | Severity | None) -> Severity | None:
    return None if severity is None else parse_severity(severity)


def define_rule(
    rule_id: str,
    strategies: Iterable[StrategySpec],
    *,
    category: str = "custom",
    severity: str | int | Severity | None = None,
    description: str = "",
    file_pattern: str | list[str] = "**/*.py",
    tags: list[str] | None = None,
    enabled: bool = True,
    register: bool = True,
) -> RuleSpec:
    """Define a rule and (by default) add it to the global registry.

    Args:
        rule_id: Stable rule identifier
        strategies: Strategies in precedence order
        category: Rule category; drives the default severity
        severity: The rule's own default severity (None: category default)
        description: Human-readable description
        file_pattern: Glob pattern(s) for applicable files
        tags: Optional tags for filtering rules
        enabled: Whether rule is enabled by default
        register: Add the rule to the global registry

    Raises:
        ValueError: If no strategies are given
    """
    strategies = list(strategies)
    if not strategies:
        raise ValueError(f"Rule {rule_id!r} declares no strategies")

    spec = RuleSpec(
        id=rule_id,
        category=category,
        strategies=strategies,
        severity=_normalize_severity(severity),
        description=description,
        file_patterns=[file_pattern] if isinstance(file_pattern, str) else list(file_pattern),
        enabled=enabled,
        tags=tags or [],
    )
    if register:
        register_rule(spec)
    return spec


def get_registered_rules() -> dict[str, RuleSpec]:
    """Get all registered rules."""
    return dict(_RULE_REGISTRY)


def get_rule(rule_id: str) -> RuleSpec | None:
    """Get a rule by id."""
    return _RULE_REGISTRY.get(rule_id)


def clear_registry() -> None:
    """Clear the rule registry (for testing)."""
    _RULE_REGISTRY.clear()


def register_rule(spec: RuleSpec) -> None:
    """Manually register a rule spec."""
    _RULE_REGISTRY[spec.id] = spec


# =============================================================================
# Convenience functions for common patterns
# =============================================================================


def pattern_rule(
    rule_id: str,
    pattern: str,
    message: str,
    *,
    backend: str = "regex",
    severity: str | int | Severity | None = None,
    category: str = "custom",
    file_pattern: str | list[str] = "**/*.py",
    description: str = "",
    enabled: bool = True,
    case_sensitive: bool = True,
    register: bool = True,
) -> RuleSpec:
    """Create a single-strategy rule that reports every match of a pattern.

    The backend decides the strategy kind: ``regex`` patterns run
    heuristically on the source text, ``python`` patterns (AST node type
    names) run symbol-based on the parsed file.

    Raises:
        ValueError: If the backend is unknown or the pattern is invalid
    """
    impl = get_backend(backend)
    compiled = impl.compile(pattern, case_sensitive=case_sensitive, multiline=True)

    def check(data: Any, ctx: DetectionContext) -> list[Finding]:
        return [
            Finding(message=message, line=m.line, column=m.column)
            for m in impl.find(data, compiled)
        ]

    strategy = _strategy(check, impl.kind, f"{backend}:{rule_id}", always_run=False)
    return define_rule(
        rule_id,
        [strategy],
        category=category,
        severity=severity,
        description=description or message,
        file_pattern=file_pattern,
        enabled=enabled,
        register=register,
    )
