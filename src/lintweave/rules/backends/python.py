"""Python AST backend.

Symbol-based detectors receive the semantic engine's ``ParsedFile`` and walk
its tree. This module holds the AST helpers they share, plus a backend that
lets declarative rules match AST node types by name:

    pattern_rule(
        "no-global-statement",
        "Global",
        "Avoid the global statement",
        backend="python",
    )

Patterns are one or more ``ast`` node class names separated by commas
(``"Global, Nonlocal"``).
"""

from __future__ import annotations

import ast
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from ..base import StrategyKind
from . import Backend, Match, register_backend

if TYPE_CHECKING:
    from lintweave.semantic import ParsedFile

ScopeNode = ast.Module | ast.ClassDef | ast.FunctionDef | ast.AsyncFunctionDef


def iter_scopes(tree: ast.AST) -> Iterator[ScopeNode]:
    """Yield every node that opens a definition scope, module first."""
    for node in ast.walk(tree):
        if isinstance(node, (ast.Module, ast.ClassDef, ast.FunctionDef, ast.AsyncFunctionDef)):
            yield node


def decorator_name(node: ast.expr) -> str:
    """Get string representation of a decorator, without call arguments."""
    if isinstance(node, ast.Call):
        node = node.func
    try:
        return ast.unparse(node)
    except ValueError:
        if isinstance(node, ast.Name):
            return node.id
        if isinstance(node, ast.Attribute):
            return f"...{node.attr}"
        return "?"


def target_name(node: ast.expr) -> str | None:
    """Name bound by an assignment target (``x`` or ``obj.x``)."""
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


def string_value(node: ast.expr | None) -> str | None:
    """Value of a string literal node, or None."""
    if isinstance(node, ast.Constant) and isinstance(node.value, str):
        return node.value
    return None


def exception_name(node: ast.expr | None) -> str | None:
    """Name of the exception class in ``raise X`` or ``raise X(...)``."""
    if isinstance(node, ast.Call):
        node = node.func
    if isinstance(node, ast.Name):
        return node.id
    if isinstance(node, ast.Attribute):
        return node.attr
    return None


@register_backend
class PythonBackend(Backend):
    """AST node-type matching backend."""

    @property
    def name(self) -> str:
        return "python"

    @property
    def kind(self) -> StrategyKind:
        return StrategyKind.SYMBOL

    def compile(self, pattern: str, **options: Any) -> tuple[type[ast.AST], ...]:
        """Resolve node class names to ``ast`` classes.

        Raises:
            ValueError: If a name is not an ``ast`` node class
        """
        node_types: list[type[ast.AST]] = []
        for name in (part.strip() for part in pattern.split(",")):
            node_type = getattr(ast, name, None)
            if not (isinstance(node_type, type) and issubclass(node_type, ast.AST)):
                raise ValueError(f"Unknown AST node type: {name!r}")
            node_types.append(node_type)
        return tuple(node_types)

    def find(self, data: ParsedFile, compiled: tuple[type[ast.AST], ...]) -> list[Match]:
        """Find nodes of the given types, in source order."""
        matches: list[Match] = []
        for node in ast.walk(data.tree):
            if not isinstance(node, compiled) or not hasattr(node, "lineno"):
                continue
            matches.append(
                Match(
                    line=node.lineno,
                    column=node.col_offset + 1,
                    end_line=getattr(node, "end_lineno", None),
                    end_column=_end_column(node),
                    text=(data.line_text(node.lineno) or "").strip(),
                    metadata={"node_type": type(node).__name__},
                )
            )
        matches.sort(key=lambda m: (m.line, m.column))
        return matches


def _end_column(node: ast.AST) -> int | None:
    end = getattr(node, "end_col_offset", None)
    return end + 1 if end is not None else None
