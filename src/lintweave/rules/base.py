"""Core types for the rules system.

A rule declares an ordered list of detection strategies. Each strategy is
either **symbol-based** (needs the semantic engine's parsed view of a file)
or **heuristic** (works on raw text and never touches the engine):

    RuleSpec(
        id="no-bare-except",
        category="error-handling",
        strategies=[
            symbol_strategy(find_bare_excepts),      # primary
            heuristic_strategy(grep_bare_excepts),   # fallback
        ],
    )

Whatever a detector returns is normalized into ``Violation`` records that all
share one schema, regardless of which strategy produced them.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lintweave.semantic import SemanticEngine

    from .adapters import StrategyAdapter


class Severity(Enum):
    """Severity level for rule violations."""

    OFF = "off"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    @property
    def rank(self) -> int:
        return _SEVERITY_RANK[self]


_SEVERITY_RANK = {
    Severity.OFF: 0,
    Severity.INFO: 1,
    Severity.WARNING: 2,
    Severity.ERROR: 3,
}


class StrategyKind(Enum):
    """Which kind of detector produced a violation."""

    SYMBOL = "symbol-based"
    HEURISTIC = "heuristic"


@dataclass
class Finding:
    """Raw detector output, before the adapter normalizes it.

    Detectors may return these, plain dicts with the same keys, or
    ready-made ``Violation`` objects.
    """

    message: str
    line: int | None = None
    column: int | None = None
    source: str | None = None


@dataclass(frozen=True)
class Violation:
    """A rule violation found in code."""

    rule_id: str
    message: str
    file_path: Path
    line: int | None = None
    column: int | None = None
    severity: Severity = Severity.WARNING
    category: str = "custom"
    strategy: StrategyKind = StrategyKind.HEURISTIC
    source: str | None = None

    @property
    def location(self) -> str:
        if self.line is None:
            return str(self.file_path)
        if self.column is None:
            return f"{self.file_path}:{self.line}"
        return f"{self.file_path}:{self.line}:{self.column}"

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "rule": self.rule_id,
            "message": self.message,
            "file": str(self.file_path),
            "line": self.line,
            "column": self.column,
            "severity": self.severity.value,
            "category": self.category,
            "strategy": self.strategy.value,
            "source": self.source,
        }


@dataclass(frozen=True)
class StrategySpec:
    """One declared detection strategy of a rule."""

    name: str
    kind: StrategyKind
    adapter: StrategyAdapter
    always_run: bool = False


@dataclass
class RuleSpec:
    """Catalog entry for one check.

    ``severity`` is the rule's own default; None defers to the category
    default table in ``lintweave.rules.severity``.
    """

    id: str
    category: str
    strategies: list[StrategySpec]
    severity: Severity | None = None
    description: str = ""
    file_patterns: list[str] = field(default_factory=lambda: ["**/*.py"])
    enabled: bool = True
    tags: list[str] = field(default_factory=list)

    @property
    def always_run_strategies(self) -> list[StrategySpec]:
        return [s for s in self.strategies if s.always_run]

    @property
    def fallback_strategies(self) -> list[StrategySpec]:
        return [s for s in self.strategies if not s.always_run]

    def uses(self, kind: StrategyKind) -> bool:
        return any(s.kind == kind for s in self.strategies)


@dataclass
class DetectionContext:
    """Context passed to every ``detect`` call.

    ``verbose`` replaces any ambient debug flag: detectors call ``trace()``
    and the notes end up in the session's diagnostics, never on stdout.
    """

    file_path: Path
    rule_id: str = ""
    category: str = "custom"
    semantic_engine: SemanticEngine | None = None
    verbose: bool = False
    options: dict[str, Any] = field(default_factory=dict)
    notes: list[str] = field(default_factory=list)

    def trace(self, message: str) -> None:
        if self.verbose:
            self.notes.append(message)


class DiagnosticKind(Enum):
    """Kind of run diagnostic."""

    DETECTION_FAILED = "detection-failed"
    ENGINE_UNAVAILABLE = "engine-unavailable"
    FILE_UNREADABLE = "file-unreadable"
    CONFIG_ERROR = "config-error"
    TRACE = "trace"
    INTERNAL = "internal"


@dataclass(frozen=True)
class Diagnostic:
    """Something that happened during a run that is not a violation."""

    kind: DiagnosticKind
    message: str
    rule_id: str | None = None
    file_path: Path | None = None
    strategy: StrategyKind | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind.value,
            "message": self.message,
            "rule": self.rule_id,
            "file": str(self.file_path) if self.file_path else None,
            "strategy": self.strategy.value if self.strategy else None,
        }
