"""Cross-strategy deduplication.

When more than one detector runs for the same rule and file (an AST pass
plus a regex sweep, say), both may report the same defect. Two violations
are the same defect when they share ``rule_id``, ``file_path`` and ``line``;
whole-file violations (no line) collapse on ``rule_id`` and ``file_path``.

Symbol-based results are the more precise ones, so a symbol-based violation
replaces a heuristic duplicate, taking over its first-seen position.
Otherwise the first one seen wins.
"""

from __future__ import annotations

from collections.abc import Hashable, Iterable

from .base import StrategyKind, Violation


def dedup_key(violation: Violation) -> Hashable:
    """Identity of the defect a violation reports."""
    if violation.line is None:
        return (violation.rule_id, violation.file_path)
    return (violation.rule_id, violation.file_path, violation.line)


def _outranks(candidate: Violation, kept: Violation) -> bool:
    return candidate.strategy == StrategyKind.SYMBOL and kept.strategy == StrategyKind.HEURISTIC


def deduplicate(violations: Iterable[Violation]) -> list[Violation]:
    """Drop duplicate violations, preserving first-seen order.

    Args:
        violations: Violations from one or more detectors

    Returns:
        At most one violation per (rule_id, file_path, line)
    """
    kept: dict[Hashable, Violation] = {}
    for violation in violations:
        key = dedup_key(violation)
        existing = kept.get(key)
        if existing is None:
            kept[key] = violation
        elif _outranks(violation, existing):
            # Reassigning an existing key keeps its insertion position
            kept[key] = violation
    return list(kept.values())
