"""Semantic engine contract.

The rule engine never parses code itself. Symbol-based strategies ask a
semantic engine for the parsed representation of a file and the engine only
ever issues two read-only queries:

    engine.is_ready() -> bool
    engine.get_parsed_file(path) -> ParsedFile | None

Engines that cannot serve concurrent reads set ``thread_safe = False`` and the
session serializes access to them.
"""

from __future__ import annotations

import ast
from dataclasses import dataclass, field
from pathlib import Path
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ParsedFile:
    """A source file as seen by the semantic engine."""

    path: Path
    source: str
    tree: ast.Module
    lines: tuple[str, ...] = field(default=(), compare=False)

    def __post_init__(self) -> None:
        if not self.lines:
            object.__setattr__(self, "lines", tuple(self.source.splitlines()))

    def line_text(self, line: int) -> str | None:
        """Return the text of a 1-based line, or None if out of range."""
        if 1 <= line <= len(self.lines):
            return self.lines[line - 1]
        return None


@runtime_checkable
class SemanticEngine(Protocol):
    """Read-only provider of parsed source files."""

    def is_ready(self) -> bool:
        """Whether the engine has finished building its project model."""
        ...

    def get_parsed_file(self, path: Path) -> ParsedFile | None:
        """Return the parsed file, or None if it is not part of the project."""
        ...
