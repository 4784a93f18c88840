"""Semantic engine: read-only provider of parsed source files."""

from .protocol import ParsedFile, SemanticEngine
from .python_project import PythonProject

__all__ = [
    "ParsedFile",
    "PythonProject",
    "SemanticEngine",
]
