"""Shared fixtures for lintweave tests."""

import ast
import logging
import textwrap
from pathlib import Path

import pytest

from lintweave.rules import clear_registry
from lintweave.semantic import ParsedFile


class StubEngine:
    """Semantic engine double with controllable readiness.

    Parses the given files eagerly and counts every query.
    """

    def __init__(self, files=(), ready=True, thread_safe=True):
        self.ready = ready
        self.thread_safe = thread_safe
        self.queries = 0
        self.parsed = {}
        for path in files:
            path = Path(path)
            source = path.read_text()
            self.parsed[path] = ParsedFile(path=path, source=source, tree=ast.parse(source))

    def is_ready(self):
        self.queries += 1
        return self.ready

    def get_parsed_file(self, path):
        self.queries += 1
        if not self.ready:
            return None
        return self.parsed.get(Path(path))


@pytest.fixture(autouse=True)
def _clean_registry():
    yield
    clear_registry()


@pytest.fixture(autouse=True)
def _reset_logging():
    yield
    root = logging.getLogger("lintweave")
    root.handlers.clear()
    root.setLevel(logging.NOTSET)


@pytest.fixture
def write_py(tmp_path: Path):
    """Write a dedented source file under tmp_path and return its path."""

    def _write(name: str, source: str) -> Path:
        path = tmp_path / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(textwrap.dedent(source))
        return path.resolve()

    return _write


@pytest.fixture
def make_engine():
    """Factory for StubEngine instances."""

    def _make(files=(), ready=True, thread_safe=True) -> StubEngine:
        return StubEngine(files, ready=ready, thread_safe=thread_safe)

    return _make
