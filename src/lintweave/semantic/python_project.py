"""AST-backed semantic engine for Python projects.

``PythonProject`` parses a fixed set of files up front and afterwards only
answers read-only queries, so it is safe to share between worker threads.

    project = PythonProject(files)
    project.initialize()
    parsed = project.get_parsed_file(Path("pkg/mod.py"))
"""

from __future__ import annotations

import ast
from collections.abc import Iterable
from pathlib import Path

from lintweave.logging import get_logger
from lintweave.semantic.protocol import ParsedFile

logger = get_logger("semantic")


class PythonProject:
    """Parsed model of a set of Python files.

    Files that fail to read or parse are left out of the model; asking for
    them returns None, which lets symbol-based strategies fall back to
    heuristics for exactly those files.
    """

    thread_safe = True

    def __init__(self, files: Iterable[Path] = ()) -> None:
        self._pending: list[Path] = [Path(f).resolve() for f in files]
        self._parsed: dict[Path, ParsedFile] = {}
        self.parse_errors: dict[Path, str] = {}
        self._ready = False

    def add_file(self, path: Path) -> None:
        """Queue a file for parsing. Only valid before ``initialize()``."""
        if self._ready:
            raise RuntimeError("Cannot add files to an initialized project")
        self._pending.append(Path(path).resolve())

    def initialize(self) -> PythonProject:
        """Parse every queued file and mark the project ready."""
        with logger.timed("project initialization", files=len(self._pending)):
            for path in self._pending:
                if path in self._parsed or path in self.parse_errors:
                    continue
                try:
                    with open(path, encoding="utf-8") as fh:
                        source = fh.read()
                    tree = ast.parse(source, filename=str(path))
                except (OSError, UnicodeDecodeError) as e:
                    self.parse_errors[path] = f"Could not read file: {e}"
                    continue
                except (SyntaxError, ValueError) as e:
                    self.parse_errors[path] = f"Syntax error: {e}"
                    continue
                self._parsed[path] = ParsedFile(path=path, source=source, tree=tree)

        self._pending.clear()
        self._ready = True
        if self.parse_errors:
            logger.debug(
                "Some files were left out of the project model",
                skipped=len(self.parse_errors),
            )
        return self

    def is_ready(self) -> bool:
        return self._ready

    def get_parsed_file(self, path: Path) -> ParsedFile | None:
        if not self._ready:
            return None
        return self._parsed.get(Path(path).resolve())

    @property
    def files(self) -> list[Path]:
        """Paths successfully parsed into the model."""
        return list(self._parsed)

    def __len__(self) -> int:
        return len(self._parsed)
