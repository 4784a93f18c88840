"""Built-in rules.

Each rule shows one way of combining strategies:

- ``no-duplicate-definition``, ``no-generic-exception``, ``no-bare-except``:
  an AST detector with a text-scanning fallback for files the semantic
  engine cannot serve
- ``no-hardcoded-secret``: AST and regex detectors that always both run;
  their overlapping findings are deduplicated
- ``no-print``, ``no-breakpoint``: heuristic pattern rules
"""

from __future__ import annotations

import ast
import re
from typing import TYPE_CHECKING

from .backends.python import (
    decorator_name,
    exception_name,
    iter_scopes,
    string_value,
    target_name,
)
from .base import Finding, RuleSpec
from .decorator import define_rule, heuristic_strategy, pattern_rule, symbol_strategy

if TYPE_CHECKING:
    from lintweave.semantic import ParsedFile

    from .base import DetectionContext

# Decorators that make a repeated name intentional
_REDEFINITION_DECORATORS = re.compile(r"(^|\.)(overload|setter|getter|deleter|register)$")

_DEF_LINE = re.compile(r"^(?P<indent>[ \t]*)(?:async[ \t]+)?(?:def|class)[ \t]+(?P<name>\w+)")
_DECORATOR_LINE = re.compile(r"^[ \t]*@(?P<name>[\w.]+)")

_GENERIC_EXCEPTIONS = frozenset({"Exception", "BaseException"})
_GENERIC_RAISE_LINE = re.compile(r"^[ \t]*raise[ \t]+(?P<name>Exception|BaseException)\b")

_BARE_EXCEPT_LINE = re.compile(r"^[ \t]*except[ \t]*:")

_SECRET_NAME = r"(?:password|passwd|pwd|secret|api_?key|access_?key|auth_?token|private_?key|token)"
_SECRET_IDENTIFIER = re.compile(rf"{_SECRET_NAME}$", re.IGNORECASE)
_SECRET_ASSIGNMENT = re.compile(
    # optional ": annotation" before the "=" of an annotated assignment
    rf"""\b\w*{_SECRET_NAME}["']?\s*(?::[^=\n]*)?[:=]\s*"""
    r"""(?P<quote>["'])(?P<value>[^"'\n]{4,})(?P=quote)""",
    re.IGNORECASE,
)
_MIN_SECRET_LENGTH = 4


# =============================================================================
# no-duplicate-definition
# =============================================================================


def _is_intentional_redefinition(
    node: ast.FunctionDef | ast.AsyncFunctionDef | ast.ClassDef,
) -> bool:
    return any(_REDEFINITION_DECORATORS.search(decorator_name(d)) for d in node.decorator_list)


def find_duplicate_definitions(parsed: ParsedFile, ctx: DetectionContext) -> list[Finding]:
    """Functions or classes defined twice in the same scope."""
    findings: list[Finding] = []
    for scope in iter_scopes(parsed.tree):
        seen: dict[str, int] = {}
        for node in scope.body:
            if not isinstance(node, (ast.FunctionDef, ast.AsyncFunctionDef, ast.ClassDef)):
                continue
            if _is_intentional_redefinition(node):
                continue
            first = seen.get(node.name)
            if first is None:
                seen[node.name] = node.lineno
                continue
            findings.append(
                Finding(
                    message=f"'{node.name}' is already defined on line {first}",
                    line=node.lineno,
                    column=node.col_offset + 1,
                )
            )
    ctx.trace(f"symbol pass found {len(findings)} duplicate definitions")
    return findings


def grep_duplicate_definitions(source: str, ctx: DetectionContext) -> list[Finding]:
    """Indentation-based approximation of ``find_duplicate_definitions``."""
    findings: list[Finding] = []
    # Stack of (block indent, {name: first line})
    blocks: list[tuple[int, dict[str, int]]] = [(0, {})]
    pending_decorators: list[str] = []

    for lineno, line in enumerate(source.splitlines(), start=1):
        stripped = line.strip()
        if not stripped or stripped.startswith("#"):
            continue
        indent = len(line) - len(line.lstrip())

        while len(blocks) > 1 and blocks[-1][0] > indent:
            blocks.pop()

        decorator = _DECORATOR_LINE.match(line)
        if decorator:
            pending_decorators.append(decorator.group("name"))
            continue

        definition = _DEF_LINE.match(line)
        decorators, pending_decorators = pending_decorators, []
        if not definition:
            continue
        if any(_REDEFINITION_DECORATORS.search(d) for d in decorators):
            continue

        if blocks[-1][0] != indent:
            blocks.append((indent, {}))
        names = blocks[-1][1]
        name = definition.group("name")
        if name in names:
            findings.append(
                Finding(
                    message=f"'{name}' is already defined on line {names[name]}",
                    line=lineno,
                    column=indent + 1,
                )
            )
        else:
            names[name] = lineno

    return findings


# =============================================================================
# no-generic-exception
# =============================================================================


def find_generic_raises(parsed: ParsedFile, ctx: DetectionContext) -> list[Finding]:
    """``raise Exception(...)`` and ``raise BaseException(...)``."""
    findings: list[Finding] = []
    for node in ast.walk(parsed.tree):
        name = exception_name(node.exc) if isinstance(node, ast.Raise) else None
        if name in _GENERIC_EXCEPTIONS:
            findings.append(
                Finding(
                    message=f"Raise a specific exception type instead of {name}",
                    line=node.lineno,
                    column=node.col_offset + 1,
                )
            )
    return sorted(findings, key=lambda f: (f.line, f.column))


def grep_generic_raises(source: str, ctx: DetectionContext) -> list[Finding]:
    findings: list[Finding] = []
    for lineno, line in enumerate(source.splitlines(), start=1):
        m = _GENERIC_RAISE_LINE.match(line)
        if m:
            findings.append(
                Finding(
                    message=f"Raise a specific exception type instead of {m.group('name')}",
                    line=lineno,
                    column=len(line) - len(line.lstrip()) + 1,
                )
            )
    return findings


# =============================================================================
# no-bare-except
# =============================================================================


def find_bare_excepts(parsed: ParsedFile, ctx: DetectionContext) -> list[Finding]:
    findings = [
        Finding(message="Avoid bare except clauses", line=node.lineno, column=node.col_offset + 1)
        for node in ast.walk(parsed.tree)
        if isinstance(node, ast.ExceptHandler) and node.type is None
    ]
    return sorted(findings, key=lambda f: (f.line, f.column))


def grep_bare_excepts(source: str, ctx: DetectionContext) -> list[Finding]:
    findings: list[Finding] = []
    for lineno, line in enumerate(source.splitlines(), start=1):
        if _BARE_EXCEPT_LINE.match(line):
            findings.append(
                Finding(
                    message="Avoid bare except clauses",
                    line=lineno,
                    column=len(line) - len(line.lstrip()) + 1,
                )
            )
    return findings


# =============================================================================
# no-hardcoded-secret
# =============================================================================


def _secret_finding(name: str, node: ast.AST) -> Finding:
    return Finding(
        message=f"Possible hardcoded secret in '{name}'",
        line=node.lineno,
        column=node.col_offset + 1,
    )


def _looks_secret(name: str | None, value: str | None) -> bool:
    return (
        name is not None
        and value is not None
        and len(value) >= _MIN_SECRET_LENGTH
        and _SECRET_IDENTIFIER.search(name) is not None
    )


def find_hardcoded_secrets(parsed: ParsedFile, ctx: DetectionContext) -> list[Finding]:
    """String literals bound to secret-looking names.

    Covers assignments, annotated assignments, keyword arguments and dict
    literal keys.
    """
    findings: list[Finding] = []
    for node in ast.walk(parsed.tree):
        if isinstance(node, ast.Assign):
            value = string_value(node.value)
            for target in node.targets:
                name = target_name(target)
                if _looks_secret(name, value):
                    findings.append(_secret_finding(name, node))
        elif isinstance(node, ast.AnnAssign):
            name = target_name(node.target)
            if _looks_secret(name, string_value(node.value)):
                findings.append(_secret_finding(name, node))
        elif isinstance(node, ast.keyword):
            if _looks_secret(node.arg, string_value(node.value)):
                findings.append(_secret_finding(node.arg, node))
        elif isinstance(node, ast.Dict):
            for key, value in zip(node.keys, node.values, strict=True):
                name = string_value(key)
                if _looks_secret(name, string_value(value)):
                    findings.append(_secret_finding(name, key))
    return sorted(findings, key=lambda f: (f.line, f.column))


def grep_hardcoded_secrets(source: str, ctx: DetectionContext) -> list[Finding]:
    """Line-based secret scan; also sees code the parser rejects."""
    findings: list[Finding] = []
    for lineno, line in enumerate(source.splitlines(), start=1):
        m = _SECRET_ASSIGNMENT.search(line)
        if m:
            findings.append(
                Finding(
                    message="Possible hardcoded secret",
                    line=lineno,
                    column=m.start() + 1,
                )
            )
    return findings


# =============================================================================
# Registry
# =============================================================================


def _build_builtin_rules() -> list[RuleSpec]:
    return [
        define_rule(
            "no-duplicate-definition",
            [
                symbol_strategy(find_duplicate_definitions),
                heuristic_strategy(grep_duplicate_definitions),
            ],
            category="quality",
            description="Functions and classes should not be redefined in the same scope",
            register=False,
        ),
        define_rule(
            "no-generic-exception",
            [
                symbol_strategy(find_generic_raises),
                heuristic_strategy(grep_generic_raises),
            ],
            category="error-handling",
            description="Raise specific exception types, not Exception or BaseException",
            register=False,
        ),
        define_rule(
            "no-bare-except",
            [
                symbol_strategy(find_bare_excepts),
                heuristic_strategy(grep_bare_excepts),
            ],
            category="error-handling",
            description="Avoid bare except clauses",
            register=False,
        ),
        define_rule(
            "no-hardcoded-secret",
            [
                symbol_strategy(find_hardcoded_secrets, always_run=True),
                heuristic_strategy(grep_hardcoded_secrets, always_run=True),
            ],
            category="security",
            description="Secrets should come from the environment, not source code",
            register=False,
        ),
        pattern_rule(
            "no-print",
            r"\bprint\s*\(",
            "Consider using logging instead of print statements",
            category="best-practice",
            register=False,
        ),
        pattern_rule(
            "no-breakpoint",
            r"\bbreakpoint\s*\(",
            "Remove breakpoint() call before committing",
            category="debug",
            register=False,
        ),
    ]


_BUILTIN_RULES = _build_builtin_rules()


def get_builtin_rules() -> list[RuleSpec]:
    """Get all built-in rules."""
    return list(_BUILTIN_RULES)
