"""Regex-based pattern matching backend.

The simplest backend: matches patterns over raw source text using Python
regex. Fast but not AST-aware, so every detector built on it is heuristic.

Usage:
    backend = get_backend("regex")
    compiled = backend.compile(r"\\bprint\\s*\\(")
    for match in backend.find(source, compiled):
        ...
"""

from __future__ import annotations

import bisect
import re
from typing import Any

from ..base import StrategyKind
from . import Backend, Match, register_backend


def line_offsets(source: str) -> list[int]:
    """Offset of each line start in ``source``."""
    offsets = [0]
    for line in source.splitlines(keepends=True):
        offsets.append(offsets[-1] + len(line))
    return offsets


def offset_to_line_col(offset: int, offsets: list[int]) -> tuple[int, int]:
    """Convert a character offset to (line, column), both 1-based."""
    # An offset at the very end of the text belongs to the last line
    index = min(bisect.bisect_right(offsets, offset) - 1, max(len(offsets) - 2, 0))
    return index + 1, offset - offsets[index] + 1


@register_backend
class RegexBackend(Backend):
    """Regex pattern matching backend."""

    @property
    def name(self) -> str:
        return "regex"

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.HEURISTIC

    def compile(self, pattern: str, **options: Any) -> re.Pattern[str]:
        """Compile a pattern.

        Args:
            pattern: Regex pattern
            **options:
                - case_sensitive: bool = True
                - multiline: bool = False (``^``/``$`` match at line boundaries)

        Raises:
            ValueError: If the pattern is not a valid regex
        """
        flags = 0
        if not options.get("case_sensitive", True):
            flags |= re.IGNORECASE
        if options.get("multiline", False):
            flags |= re.MULTILINE

        try:
            return re.compile(pattern, flags)
        except re.error as e:
            raise ValueError(f"Invalid regex pattern {pattern!r}: {e}") from e

    def find(self, data: str, compiled: re.Pattern[str]) -> list[Match]:
        """Find all matches in source text, with line and column info."""
        offsets = line_offsets(data)
        matches: list[Match] = []

        for m in compiled.finditer(data):
            line, col = offset_to_line_col(m.start(), offsets)
            end_line, end_col = offset_to_line_col(m.end(), offsets)
            matches.append(
                Match(
                    line=line,
                    column=col,
                    end_line=end_line,
                    end_column=end_col,
                    text=m.group(),
                    metadata={"groups": m.groups(), "groupdict": m.groupdict()},
                )
            )

        return matches
