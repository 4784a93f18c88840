"""File discovery for rule runs."""

from __future__ import annotations

import fnmatch
from collections.abc import Iterable
from pathlib import Path


def is_excluded(path: Path, root: Path, exclude_patterns: Iterable[str]) -> bool:
    """Whether a path matches any exclude pattern (relative or absolute)."""
    try:
        rel_path = str(path.relative_to(root))
    except ValueError:
        rel_path = str(path)
    return any(
        fnmatch.fnmatch(rel_path, pattern) or fnmatch.fnmatch(str(path), pattern)
        for pattern in exclude_patterns
    )


def discover_files(
    directory: Path,
    include_patterns: Iterable[str],
    exclude_patterns: Iterable[str] = (),
) -> list[Path]:
    """Find files under a directory matching include patterns.

    Returns:
        Sorted, de-duplicated absolute paths
    """
    directory = Path(directory).resolve()
    exclude_patterns = list(exclude_patterns)

    files: set[Path] = set()
    for pattern in include_patterns:
        files.update(f for f in directory.glob(pattern) if f.is_file())

    return sorted(f for f in files if not is_excluded(f, directory, exclude_patterns))


def expand_paths(
    paths: Iterable[Path],
    include_patterns: Iterable[str],
    exclude_patterns: Iterable[str] = (),
) -> list[Path]:
    """Turn a mix of files and directories into an ordered file list.

    Files named explicitly are kept even if no include pattern matches them.
    Order follows ``paths``; a file reached twice is listed once.

    Raises:
        FileNotFoundError: If a path does not exist
    """
    include_patterns = list(include_patterns)
    exclude_patterns = list(exclude_patterns)

    result: list[Path] = []
    seen: set[Path] = set()
    for path in paths:
        path = Path(path).resolve()
        if path.is_dir():
            candidates = discover_files(path, include_patterns, exclude_patterns)
        elif path.exists():
            candidates = [path]
        else:
            raise FileNotFoundError(f"Path does not exist: {path}")
        for candidate in candidates:
            if candidate not in seen:
                seen.add(candidate)
                result.append(candidate)
    return result
