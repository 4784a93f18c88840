"""Tests for RuleEngine."""

from pathlib import Path

from lintweave.config import LintweaveConfig, SessionOptions
from lintweave.rules import (
    DiagnosticKind,
    Finding,
    RuleEngine,
    StrategyKind,
    create_engine_with_builtins,
    define_rule,
    heuristic_strategy,
    symbol_strategy,
)
from lintweave.semantic import PythonProject

SAMPLE = """\
import os


def load():
    try:
        return os.environ["HOME"]
    except:
        raise Exception("no home")
"""


def _rule(rule_id, *strategies, **kwargs):
    return define_rule(rule_id, list(strategies), register=False, **kwargs)


class TestRuleManagement:
    """Tests for adding and removing rules."""

    def test_add_and_remove(self):
        engine = RuleEngine()
        rule = _rule("r", heuristic_strategy(lambda s, c: []))

        engine.add_rule(rule)
        assert engine.rules == {"r": rule}

        assert engine.remove_rule("r")
        assert not engine.remove_rule("r")
        assert engine.rules == {}

    def test_add_replaces_same_id(self):
        engine = RuleEngine()
        first = _rule("r", heuristic_strategy(lambda s, c: []))
        second = _rule("r", heuristic_strategy(lambda s, c: []))

        engine.add_rules([first, second])

        assert engine.rules["r"] is second

    def test_enabled_rules(self):
        engine = RuleEngine()
        engine.add_rules(
            [
                _rule("on", heuristic_strategy(lambda s, c: [])),
                _rule("off", heuristic_strategy(lambda s, c: []), enabled=False),
            ]
        )
        assert [r.id for r in engine.get_enabled_rules()] == ["on"]

    def test_create_with_builtins(self):
        custom = _rule("custom", heuristic_strategy(lambda s, c: []))

        engine = create_engine_with_builtins(custom_rules=[custom])

        assert "no-bare-except" in engine.rules
        assert "custom" in engine.rules

    def test_create_without_builtins(self):
        assert create_engine_with_builtins(include_builtins=False).rules == {}


class TestChecking:
    """Tests for running the engine."""

    def test_check_file_uses_semantic_model(self, write_py):
        path = write_py("sample.py", SAMPLE)
        engine = create_engine_with_builtins()

        result = engine.check_file(path)

        by_rule = {v.rule_id: v for v in result.violations}
        assert set(by_rule) == {"no-bare-except", "no-generic-exception"}
        assert by_rule["no-bare-except"].line == 7
        assert by_rule["no-generic-exception"].line == 8
        assert all(v.strategy == StrategyKind.SYMBOL for v in result.violations)
        assert result.fallback_pairs == []

    def test_semantic_disabled_falls_back(self, write_py):
        path = write_py("sample.py", SAMPLE)
        engine = create_engine_with_builtins(config=LintweaveConfig(semantic=False))

        result = engine.check_file(path)

        assert {v.rule_id for v in result.violations} == {"no-bare-except", "no-generic-exception"}
        assert all(v.strategy == StrategyKind.HEURISTIC for v in result.violations)
        assert ("no-bare-except", path) in result.fallback_pairs

    def test_supplied_semantic_engine_used(self, write_py, make_engine):
        path = write_py("a.py", "x = 1\n")
        engine_double = make_engine([path])

        def detector(parsed, ctx):
            return [Finding("seen", line=1)]

        engine = RuleEngine(semantic_engine=engine_double)
        engine.add_rule(_rule("r", symbol_strategy(detector)))

        result = engine.check_file(path)

        assert [v.message for v in result.violations] == ["seen"]
        assert engine_double.queries > 0

    def test_no_semantic_model_for_heuristic_rules(self, write_py, monkeypatch):
        path = write_py("a.py", "x = 1\n")
        built = []
        monkeypatch.setattr(PythonProject, "initialize", lambda self: built.append(self) or self)

        engine = RuleEngine()
        engine.add_rule(_rule("r", heuristic_strategy(lambda s, c: [])))
        engine.check_file(path)

        assert built == []

    def test_relative_paths_resolved(self, write_py, monkeypatch, tmp_path: Path):
        write_py("a.py", "print('x')\n")
        monkeypatch.chdir(tmp_path)
        engine = create_engine_with_builtins()

        result = engine.check_files([Path("a.py")])

        assert result.violations[0].file_path == (tmp_path / "a.py").resolve()

    def test_explicit_rules_and_options(self, write_py):
        path = write_py("a.py", "print('x')\nbreakpoint()\n")
        engine = create_engine_with_builtins()
        rules = [engine.rules["no-print"]]

        result = engine.check_file(path, rules=rules, options=SessionOptions(parallel=False))

        assert [v.rule_id for v in result.violations] == ["no-print"]

    def test_check_directory(self, write_py, tmp_path: Path):
        write_py("pkg/a.py", "print('a')\n")
        write_py("pkg/b.py", "breakpoint()\n")
        write_py("pkg/__pycache__/c.py", "print('cached')\n")
        write_py("notes.txt", "print('not python')\n")
        engine = create_engine_with_builtins()

        result = engine.check_directory(tmp_path)

        assert result.files_checked == 2
        assert sorted(v.rule_id for v in result.violations) == ["no-breakpoint", "no-print"]

    def test_empty_directory(self, tmp_path: Path):
        result = create_engine_with_builtins().check_directory(tmp_path)
        assert result.files_checked == 0
        assert result.violations == []

    def test_last_stats(self, write_py):
        path = write_py("a.py", "x = 1\n")
        engine = create_engine_with_builtins(config=LintweaveConfig(semantic=False))

        engine.check_file(path)

        assert engine.last_stats["skipped"] == 4
        assert engine.last_stats["fallback_runs"] == 4

    def test_verbose_collects_traces(self, write_py):
        path = write_py("a.py", "def f():\n    pass\n")
        engine = create_engine_with_builtins(verbose=True)

        result = engine.check_file(path)

        traces = result.diagnostics_of(DiagnosticKind.TRACE)
        assert [d.rule_id for d in traces] == ["no-duplicate-definition"]
