"""Detection backends for declarative rules.

A backend turns a pattern into matches on one kind of input:

- regex: pattern matching over raw source text (heuristic)
- python: AST node-type matching over a parsed file (symbol-based)

``pattern_rule`` looks backends up by name, so a rule declared in a catalog
file only needs ``backend = "regex"`` or ``backend = "python"``.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any

from ..base import StrategyKind


@dataclass(frozen=True)
class Match:
    """A single pattern match (1-based positions)."""

    line: int
    column: int
    end_line: int | None = None
    end_column: int | None = None
    text: str = ""
    metadata: dict[str, Any] = field(default_factory=dict, compare=False)


class Backend(ABC):
    """Base class for detection backends."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Backend identifier (e.g., "regex", "python")."""
        ...

    @property
    @abstractmethod
    def kind(self) -> StrategyKind:
        """Strategy kind of detectors built on this backend."""
        ...

    @abstractmethod
    def compile(self, pattern: str, **options: Any) -> Any:
        """Validate and prepare a pattern.

        Raises:
            ValueError: If the pattern is not valid for this backend
        """
        ...

    @abstractmethod
    def find(self, data: Any, compiled: Any) -> list[Match]:
        """Find all matches of a compiled pattern in the backend's input."""
        ...

    def supports_pattern(self, pattern: str) -> bool:
        try:
            self.compile(pattern)
        except ValueError:
            return False
        return True


_BACKENDS: dict[str, type[Backend]] = {}


def register_backend(cls: type[Backend]) -> type[Backend]:
    """Register a backend class."""
    instance = cls()
    _BACKENDS[instance.name] = cls
    return cls


def get_backend(name: str) -> Backend:
    """Get a backend instance by name.

    Raises:
        ValueError: If backend not found
    """
    if name not in _BACKENDS:
        available = ", ".join(_BACKENDS.keys())
        raise ValueError(f"Unknown backend: {name}. Available: {available}")
    return _BACKENDS[name]()


def list_backends() -> list[str]:
    """List available backend names."""
    return list(_BACKENDS.keys())


# Import backends to trigger registration (must be after registry definition)
from . import python as _python  # noqa: E402, F401
from . import regex as _regex  # noqa: E402, F401

__all__ = [
    "Backend",
    "Match",
    "get_backend",
    "list_backends",
    "register_backend",
]
