"""Tests for the built-in rules and their detectors."""

import ast
import textwrap
from pathlib import Path

import pytest

from lintweave.rules import DetectionContext, StrategyKind, get_builtin_rules
from lintweave.rules.builtins import (
    find_bare_excepts,
    find_duplicate_definitions,
    find_generic_raises,
    find_hardcoded_secrets,
    grep_bare_excepts,
    grep_duplicate_definitions,
    grep_generic_raises,
    grep_hardcoded_secrets,
)
from lintweave.semantic import ParsedFile


def _parsed(source: str) -> ParsedFile:
    source = textwrap.dedent(source)
    return ParsedFile(path=Path("mod.py"), source=source, tree=ast.parse(source))


def _ctx(verbose=False) -> DetectionContext:
    return DetectionContext(file_path=Path("mod.py"), verbose=verbose)


def _lines(findings):
    return [f.line for f in findings]


class TestBuiltinCatalog:
    """Tests for the shape of the built-in rule set."""

    def test_rule_ids(self):
        ids = [r.id for r in get_builtin_rules()]
        assert ids == [
            "no-duplicate-definition",
            "no-generic-exception",
            "no-bare-except",
            "no-hardcoded-secret",
            "no-print",
            "no-breakpoint",
        ]

    def test_fallback_rules_pair_symbol_with_heuristic(self):
        rules = {r.id: r for r in get_builtin_rules()}
        for rule_id in ("no-duplicate-definition", "no-generic-exception", "no-bare-except"):
            kinds = [s.kind for s in rules[rule_id].strategies]
            assert kinds == [StrategyKind.SYMBOL, StrategyKind.HEURISTIC]
            assert rules[rule_id].always_run_strategies == []

    def test_secret_rule_always_runs_both(self):
        rule = next(r for r in get_builtin_rules() if r.id == "no-hardcoded-secret")
        assert len(rule.always_run_strategies) == 2

    def test_returns_copy(self):
        rules = get_builtin_rules()
        rules.clear()
        assert get_builtin_rules()


DUPLICATES = """\
def helper():
    pass


class Service:
    def run(self):
        pass

    def stop(self):
        pass

    def run(self):
        pass


def helper():
    pass
"""

INTENTIONAL = """\
from typing import overload


class Box:
    @property
    def value(self):
        return 1

    @value.setter
    def value(self, v):
        pass

    @overload
    def get(self, key: int) -> int: ...

    @overload
    def get(self, key: str) -> str: ...

    def get(self, key):
        return key
"""


class TestDuplicateDefinitions:
    """Tests for the no-duplicate-definition detectors."""

    def test_symbol_detector(self):
        findings = find_duplicate_definitions(_parsed(DUPLICATES), _ctx())
        assert sorted(_lines(findings)) == [12, 16]
        messages = {f.line: f.message for f in findings}
        assert messages[16] == "'helper' is already defined on line 1"
        assert messages[12] == "'run' is already defined on line 6"

    def test_heuristic_detector_agrees(self):
        assert sorted(_lines(grep_duplicate_definitions(DUPLICATES, _ctx()))) == [12, 16]

    def test_same_name_in_different_scopes(self):
        source = """\
        def run():
            pass


        class A:
            def run(self):
                pass
        """
        assert find_duplicate_definitions(_parsed(source), _ctx()) == []
        assert grep_duplicate_definitions(textwrap.dedent(source), _ctx()) == []

    def test_intentional_redefinitions_skipped(self):
        assert find_duplicate_definitions(_parsed(INTENTIONAL), _ctx()) == []
        assert grep_duplicate_definitions(INTENTIONAL, _ctx()) == []

    def test_trace_when_verbose(self):
        ctx = _ctx(verbose=True)
        find_duplicate_definitions(_parsed(DUPLICATES), ctx)
        assert ctx.notes == ["symbol pass found 2 duplicate definitions"]


class TestGenericException:
    """Tests for the no-generic-exception detectors."""

    SOURCE = """\
    def a():
        raise Exception("bad")

    def b():
        raise ValueError("fine")

    def c():
        raise BaseException
    """

    def test_symbol_detector(self):
        findings = find_generic_raises(_parsed(self.SOURCE), _ctx())
        assert _lines(findings) == [2, 8]
        assert findings[0].message == "Raise a specific exception type instead of Exception"
        assert findings[0].column == 5

    def test_heuristic_detector(self):
        findings = grep_generic_raises(textwrap.dedent(self.SOURCE), _ctx())
        assert _lines(findings) == [2, 8]
        assert findings[1].message == "Raise a specific exception type instead of BaseException"

    def test_subclass_names_not_matched(self):
        source = "raise ExceptionGroup('x', [])\n"
        assert find_generic_raises(_parsed(source), _ctx()) == []
        assert grep_generic_raises(source, _ctx()) == []


class TestBareExcept:
    """Tests for the no-bare-except detectors."""

    SOURCE = """\
    try:
        pass
    except:
        pass

    try:
        pass
    except ValueError:
        pass
    """

    def test_symbol_detector(self):
        findings = find_bare_excepts(_parsed(self.SOURCE), _ctx())
        assert _lines(findings) == [3]
        assert findings[0].message == "Avoid bare except clauses"

    def test_heuristic_detector(self):
        assert _lines(grep_bare_excepts(textwrap.dedent(self.SOURCE), _ctx())) == [3]


class TestHardcodedSecrets:
    """Tests for the no-hardcoded-secret detectors."""

    @pytest.mark.parametrize(
        "source",
        [
            "password = 'hunter22'\n",
            "API_KEY: str = 'abcd1234'\n",
            "self.auth_token = 'abcdef'\n",
            "connect(secret='s3cr3t')\n",
            "config = {'private_key': 'abcdef'}\n",
        ],
    )
    def test_detected_by_both(self, source):
        assert _lines(find_hardcoded_secrets(_parsed(source), _ctx())) == [1]
        assert _lines(grep_hardcoded_secrets(source, _ctx())) == [1]

    @pytest.mark.parametrize(
        "source",
        [
            "password = os.environ['PASSWORD']\n",
            "password = ''\n",
            "token = 'abc'\n",
            "username = 'administrator'\n",
            "password_hint = 'ask admin'\n",
        ],
    )
    def test_not_secrets(self, source):
        assert find_hardcoded_secrets(_parsed(source), _ctx()) == []
        assert grep_hardcoded_secrets(source, _ctx()) == []

    def test_symbol_message_names_target(self):
        findings = find_hardcoded_secrets(_parsed("db_password = 'hunter22'\n"), _ctx())
        assert findings[0].message == "Possible hardcoded secret in 'db_password'"

    def test_heuristic_sees_unparsable_code(self):
        source = "def broken(:\n    api_key = 'abcdef12'\n"
        assert _lines(grep_hardcoded_secrets(source, _ctx())) == [2]
