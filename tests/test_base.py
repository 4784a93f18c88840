"""Tests for core rule types."""

import dataclasses
from pathlib import Path

import pytest

from lintweave.rules import (
    DetectionContext,
    Diagnostic,
    DiagnosticKind,
    RuleSpec,
    Severity,
    StrategyKind,
    Violation,
    heuristic_strategy,
    symbol_strategy,
)


def _noop(data, ctx):
    return []


class TestSeverity:
    """Tests for Severity enum."""

    def test_rank_order(self):
        ranks = [s.rank for s in (Severity.OFF, Severity.INFO, Severity.WARNING, Severity.ERROR)]
        assert ranks == sorted(ranks)

    def test_values(self):
        assert Severity("warning") == Severity.WARNING
        assert Severity.OFF.value == "off"


class TestViolation:
    """Tests for Violation dataclass."""

    def test_location_with_line_and_column(self):
        v = Violation(rule_id="r", message="m", file_path=Path("a.py"), line=3, column=7)
        assert v.location == "a.py:3:7"

    def test_location_without_column(self):
        v = Violation(rule_id="r", message="m", file_path=Path("a.py"), line=3)
        assert v.location == "a.py:3"

    def test_location_whole_file(self):
        v = Violation(rule_id="r", message="m", file_path=Path("a.py"))
        assert v.location == "a.py"

    def test_defaults(self):
        v = Violation(rule_id="r", message="m", file_path=Path("a.py"))
        assert v.severity == Severity.WARNING
        assert v.strategy == StrategyKind.HEURISTIC
        assert v.category == "custom"

    def test_to_dict(self):
        v = Violation(
            rule_id="no-print",
            message="Use logging",
            file_path=Path("a.py"),
            line=5,
            column=1,
            severity=Severity.ERROR,
            category="security",
            strategy=StrategyKind.SYMBOL,
            source="print(x)",
        )

        d = v.to_dict()

        assert d["rule"] == "no-print"
        assert d["line"] == 5
        assert d["severity"] == "error"
        assert d["category"] == "security"
        assert d["strategy"] == "symbol-based"
        assert d["source"] == "print(x)"
        assert d["file"] == "a.py"

    def test_frozen(self):
        v = Violation(rule_id="r", message="m", file_path=Path("a.py"))
        with pytest.raises(dataclasses.FrozenInstanceError):
            v.line = 2  # type: ignore[misc]


class TestRuleSpec:
    """Tests for RuleSpec."""

    def test_strategy_partition(self):
        primary = symbol_strategy(_noop, name="primary")
        sweep = heuristic_strategy(_noop, name="sweep", always_run=True)
        fallback = heuristic_strategy(_noop, name="fallback")
        rule = RuleSpec(id="r", category="quality", strategies=[primary, sweep, fallback])

        assert rule.always_run_strategies == [sweep]
        assert rule.fallback_strategies == [primary, fallback]

    def test_uses(self):
        rule = RuleSpec(id="r", category="quality", strategies=[heuristic_strategy(_noop)])
        assert rule.uses(StrategyKind.HEURISTIC)
        assert not rule.uses(StrategyKind.SYMBOL)

    def test_defaults(self):
        rule = RuleSpec(id="r", category="quality", strategies=[])
        assert rule.severity is None
        assert rule.enabled
        assert rule.file_patterns == ["**/*.py"]


class TestDetectionContext:
    """Tests for DetectionContext."""

    def test_trace_when_verbose(self):
        ctx = DetectionContext(file_path=Path("a.py"), verbose=True)
        ctx.trace("looked at 3 nodes")
        assert ctx.notes == ["looked at 3 nodes"]

    def test_trace_ignored_when_quiet(self):
        ctx = DetectionContext(file_path=Path("a.py"))
        ctx.trace("looked at 3 nodes")
        assert ctx.notes == []


class TestDiagnostic:
    """Tests for Diagnostic."""

    def test_to_dict(self):
        d = Diagnostic(
            kind=DiagnosticKind.DETECTION_FAILED,
            message="boom",
            rule_id="r",
            file_path=Path("a.py"),
            strategy=StrategyKind.SYMBOL,
        )
        assert d.to_dict() == {
            "kind": "detection-failed",
            "message": "boom",
            "rule": "r",
            "file": "a.py",
            "strategy": "symbol-based",
        }

    def test_to_dict_without_location(self):
        d = Diagnostic(kind=DiagnosticKind.CONFIG_ERROR, message="bad")
        assert d.to_dict()["file"] is None
        assert d.to_dict()["strategy"] is None
