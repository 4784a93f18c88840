"""Tests for file discovery."""

from pathlib import Path

import pytest

from lintweave.discovery import discover_files, expand_paths, is_excluded


@pytest.fixture
def tree(write_py):
    write_py("pkg/a.py", "")
    write_py("pkg/b.py", "")
    write_py("pkg/__pycache__/a.py", "")
    write_py("scripts/run.py", "")
    write_py("README.md", "")


class TestDiscoverFiles:
    """Tests for discover_files."""

    def test_sorted_and_filtered(self, tmp_path: Path, tree):
        files = discover_files(tmp_path, ["**/*.py"], ["**/__pycache__/*"])
        root = tmp_path.resolve()
        assert files == [root / "pkg/a.py", root / "pkg/b.py", root / "scripts/run.py"]

    def test_multiple_includes_deduplicated(self, tmp_path: Path, tree):
        files = discover_files(tmp_path, ["**/*.py", "pkg/*.py"], ["**/__pycache__/*"])
        assert len(files) == 3

    def test_relative_exclude(self, tmp_path: Path, tree):
        files = discover_files(tmp_path, ["**/*.py"], ["scripts/*", "**/__pycache__/*"])
        assert [f.name for f in files] == ["a.py", "b.py"]

    def test_is_excluded(self, tmp_path: Path):
        assert is_excluded(tmp_path / "build" / "x.py", tmp_path, ["build/*"])
        assert not is_excluded(tmp_path / "src" / "x.py", tmp_path, ["build/*"])
        assert is_excluded(Path("/elsewhere/x.py"), tmp_path, ["/elsewhere/*"])


class TestExpandPaths:
    """Tests for expand_paths."""

    def test_files_and_directories(self, tmp_path: Path, tree):
        root = tmp_path.resolve()
        paths = [root / "scripts/run.py", root / "pkg"]

        files = expand_paths(paths, ["**/*.py"], ["**/__pycache__/*"])

        assert files == [root / "scripts/run.py", root / "pkg/a.py", root / "pkg/b.py"]

    def test_explicit_file_kept_regardless_of_patterns(self, tmp_path: Path, tree):
        readme = tmp_path.resolve() / "README.md"
        assert expand_paths([readme], ["**/*.py"]) == [readme]

    def test_duplicates_listed_once(self, tmp_path: Path, tree):
        root = tmp_path.resolve()
        files = expand_paths([root / "pkg/a.py", root / "pkg"], ["**/*.py"], ["**/__pycache__/*"])
        assert files == [root / "pkg/a.py", root / "pkg/b.py"]

    def test_missing_path(self, tmp_path: Path):
        with pytest.raises(FileNotFoundError):
            expand_paths([tmp_path / "nope"], ["**/*.py"])
