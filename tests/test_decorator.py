"""Tests for rule definition helpers and the rule registry."""

import pytest

from lintweave.errors import ConfigError
from lintweave.rules import (
    AnalysisSession,
    HeuristicStrategy,
    Severity,
    StrategyKind,
    StrategySpec,
    SymbolStrategy,
    define_rule,
    detector,
    get_registered_rules,
    get_rule,
    heuristic_strategy,
    pattern_rule,
    symbol_strategy,
)
from lintweave.semantic import PythonProject


class TestStrategyHelpers:
    """Tests for symbol_strategy, heuristic_strategy and @detector."""

    def test_symbol_strategy(self):
        def find_things(parsed, ctx):
            return []

        spec = symbol_strategy(find_things)

        assert spec.name == "find_things"
        assert spec.kind == StrategyKind.SYMBOL
        assert isinstance(spec.adapter, SymbolStrategy)
        assert not spec.always_run

    def test_heuristic_strategy_options(self):
        spec = heuristic_strategy(lambda s, c: [], name="grep", always_run=True)

        assert spec.name == "grep"
        assert spec.kind == StrategyKind.HEURISTIC
        assert isinstance(spec.adapter, HeuristicStrategy)
        assert spec.always_run

    def test_detector_decorator(self):
        @detector("symbol", always_run=True)
        def find_globals(parsed, ctx):
            return []

        assert isinstance(find_globals, StrategySpec)
        assert find_globals.name == "find_globals"
        assert find_globals.kind == StrategyKind.SYMBOL
        assert find_globals.always_run

    def test_detector_decorator_defaults_to_heuristic(self):
        @detector(name="scan")
        def scan_text(source, ctx):
            return []

        assert scan_text.kind == StrategyKind.HEURISTIC
        assert scan_text.name == "scan"

    def test_detector_accepts_kind_values(self):
        @detector("symbol-based")
        def f(parsed, ctx):
            return []

        assert f.kind == StrategyKind.SYMBOL

    def test_unknown_kind(self):
        with pytest.raises(ValueError):
            detector("telepathic")

    def test_unsupported_detector_shape(self):
        with pytest.raises(TypeError):
            heuristic_strategy("not a detector")


class TestDefineRule:
    """Tests for define_rule and the registry."""

    def test_registers_by_default(self):
        rule = define_rule("my-rule", [heuristic_strategy(lambda s, c: [])])

        assert get_rule("my-rule") is rule
        assert "my-rule" in get_registered_rules()

    def test_register_false(self):
        define_rule("private", [heuristic_strategy(lambda s, c: [])], register=False)
        assert get_rule("private") is None

    def test_fields(self):
        rule = define_rule(
            "r",
            [heuristic_strategy(lambda s, c: [])],
            category="security",
            severity="warn",
            description="Something",
            file_pattern=["*.py", "*.pyi"],
            tags=["experimental"],
            enabled=False,
        )

        assert rule.category == "security"
        assert rule.severity == Severity.WARNING
        assert rule.description == "Something"
        assert rule.file_patterns == ["*.py", "*.pyi"]
        assert rule.tags == ["experimental"]
        assert not rule.enabled

    def test_numeric_severity(self):
        rule = define_rule("r", [heuristic_strategy(lambda s, c: [])], severity=2)
        assert rule.severity == Severity.ERROR

    def test_invalid_severity(self):
        with pytest.raises(ConfigError):
            define_rule("r", [heuristic_strategy(lambda s, c: [])], severity="loud")

    def test_no_strategies(self):
        with pytest.raises(ValueError, match="no strategies"):
            define_rule("empty", [])

    def test_registry_cleared_between_tests(self):
        assert get_registered_rules() == {}


class TestPatternRule:
    """Tests for pattern_rule."""

    def test_regex_rule(self, write_py):
        path = write_py("a.py", "import os\nimport pdb\n")
        rule = pattern_rule("no-pdb", r"^import pdb", "Remove pdb import", severity="error")

        result = AnalysisSession([rule], [path]).run()

        assert [(v.line, v.column) for v in result.violations] == [(2, 1)]
        violation = result.violations[0]
        assert violation.message == "Remove pdb import"
        assert violation.severity == Severity.ERROR
        assert violation.strategy == StrategyKind.HEURISTIC
        assert rule.strategies[0].name == "regex:no-pdb"
        assert rule.description == "Remove pdb import"

    def test_python_rule(self, write_py):
        source = "counter = 0\n\ndef bump():\n    global counter\n    counter += 1\n"
        path = write_py("a.py", source)
        rule = pattern_rule("no-global", "Global", "Avoid global", backend="python")
        project = PythonProject([path]).initialize()

        result = AnalysisSession([rule], [path], semantic_engine=project).run()

        assert [v.line for v in result.violations] == [4]
        assert result.violations[0].strategy == StrategyKind.SYMBOL
        assert result.violations[0].source == "global counter"

    def test_case_insensitive(self, write_py):
        path = write_py("a.py", "# todo: later\n")
        rule = pattern_rule("todo", "TODO", "Resolve TODO", case_sensitive=False)
        assert len(AnalysisSession([rule], [path]).run().violations) == 1

    def test_invalid_pattern(self):
        with pytest.raises(ValueError):
            pattern_rule("bad", "(unclosed", "never")

    def test_unknown_backend(self):
        with pytest.raises(ValueError, match="Unknown backend"):
            pattern_rule("bad", "x", "never", backend="semgrep")
