"""Tests for the semantic engine."""

import ast
from pathlib import Path

import pytest

from lintweave.semantic import ParsedFile, PythonProject, SemanticEngine


class TestParsedFile:
    """Tests for ParsedFile."""

    def test_lines(self):
        source = "x = 1\ny = 2\n"
        parsed = ParsedFile(path=Path("a.py"), source=source, tree=ast.parse(source))
        assert parsed.lines == ("x = 1", "y = 2")
        assert parsed.line_text(2) == "y = 2"
        assert parsed.line_text(0) is None
        assert parsed.line_text(3) is None


class TestPythonProject:
    """Tests for PythonProject."""

    def test_satisfies_protocol(self):
        assert isinstance(PythonProject(), SemanticEngine)

    def test_not_ready_before_initialize(self, write_py):
        path = write_py("a.py", "x = 1\n")
        project = PythonProject([path])

        assert not project.is_ready()
        assert project.get_parsed_file(path) is None

    def test_initialize(self, write_py):
        path = write_py("a.py", "x = 1\n")
        project = PythonProject([path]).initialize()

        parsed = project.get_parsed_file(path)
        assert project.is_ready()
        assert parsed.source == "x = 1\n"
        assert isinstance(parsed.tree, ast.Module)
        assert project.files == [path]
        assert len(project) == 1

    def test_lookup_resolves_relative_paths(self, write_py, monkeypatch, tmp_path: Path):
        path = write_py("pkg/a.py", "x = 1\n")
        project = PythonProject([path]).initialize()
        monkeypatch.chdir(tmp_path)

        assert project.get_parsed_file(Path("pkg/a.py")) is not None

    def test_syntax_errors_left_out(self, write_py):
        good = write_py("good.py", "x = 1\n")
        bad = write_py("bad.py", "def f(:\n")
        project = PythonProject([good, bad]).initialize()

        assert project.get_parsed_file(bad) is None
        assert project.get_parsed_file(good) is not None
        assert "Syntax error" in project.parse_errors[bad]

    def test_unreadable_files_left_out(self, tmp_path: Path):
        missing = tmp_path / "missing.py"
        undecodable = tmp_path / "latin1.py"
        undecodable.write_bytes(b"name = '\xe9'\n")

        project = PythonProject([missing, undecodable]).initialize()

        assert len(project) == 0
        assert set(project.parse_errors) == {missing.resolve(), undecodable.resolve()}

    def test_add_file(self, write_py):
        path = write_py("a.py", "x = 1\n")
        project = PythonProject()
        project.add_file(path)
        project.initialize()

        assert project.get_parsed_file(path) is not None
        with pytest.raises(RuntimeError):
            project.add_file(path)

    def test_unknown_file(self, write_py, tmp_path: Path):
        project = PythonProject([write_py("a.py", "x = 1\n")]).initialize()
        assert project.get_parsed_file(tmp_path / "other.py") is None
