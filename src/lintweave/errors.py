"""Structured errors for the rule engine.

Every failure the engine knows how to recover from has its own type, so the
orchestrator and session can tell "skip to the next strategy" apart from
"this detector crashed" and "this file cannot be read":

- ``EngineUnavailable``: a symbol-based strategy's precondition is unmet
- ``DetectionError``: a detector raised while analyzing a file
- ``ConfigError``: an invalid severity override or malformed config file
- ``SourceReadError``: a file could not be read or decoded

Usage:
    from lintweave.errors import DetectionError, handle_error

    try:
        risky_operation()
    except Exception as e:
        result = handle_error(e)
        print(result.to_compact())
"""

from __future__ import annotations

import builtins
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Any


class ErrorCategory(Enum):
    """Categories of errors for appropriate handling."""

    FILE_NOT_FOUND = auto()
    PERMISSION_DENIED = auto()
    IO = auto()  # Unreadable or undecodable source
    PARSE_ERROR = auto()
    CONFIG = auto()
    ENGINE_UNAVAILABLE = auto()  # Semantic engine cannot serve a file
    DETECTION = auto()  # A rule detector crashed
    VALIDATION = auto()
    INTERNAL = auto()


@dataclass
class ErrorResult:
    """Structured error result with context and suggestions."""

    category: ErrorCategory
    message: str
    original: Exception | None = None
    suggestion: str | None = None
    context: dict[str, Any] | None = None
    recoverable: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "category": self.category.name,
            "message": self.message,
            "suggestion": self.suggestion,
            "recoverable": self.recoverable,
            "context": self.context,
        }

    def to_compact(self) -> str:
        """Format as compact string."""
        parts = [f"[{self.category.name}] {self.message}"]
        if self.suggestion:
            parts.append(f"  Try: {self.suggestion}")
        return "\n".join(parts)


class LintweaveError(Exception):
    """Base exception for lintweave with structured error handling."""

    def __init__(
        self,
        message: str,
        category: ErrorCategory = ErrorCategory.INTERNAL,
        suggestion: str | None = None,
        context: dict[str, Any] | None = None,
        recoverable: bool = True,
    ):
        super().__init__(message)
        self.category = category
        self.suggestion = suggestion
        self.context = context or {}
        self.recoverable = recoverable

    def to_result(self) -> ErrorResult:
        """Convert to ErrorResult."""
        return ErrorResult(
            category=self.category,
            message=str(self),
            original=self,
            suggestion=self.suggestion,
            context=self.context,
            recoverable=self.recoverable,
        )


class EngineUnavailable(LintweaveError):
    """The semantic engine cannot serve this file (not ready or not parsed)."""

    def __init__(self, file_path: str | Path, reason: str = "semantic engine not ready"):
        super().__init__(
            f"Symbol analysis unavailable for {file_path}: {reason}",
            category=ErrorCategory.ENGINE_UNAVAILABLE,
            context={"path": str(file_path), "reason": reason},
        )
        self.file_path = Path(file_path)
        self.reason = reason


class DetectionError(LintweaveError):
    """A strategy's detection logic failed for one file."""

    def __init__(
        self,
        rule_id: str,
        file_path: str | Path,
        strategy: str,
        detail: str = "",
    ):
        msg = f"Rule '{rule_id}' ({strategy}) failed on {file_path}"
        if detail:
            msg += f": {detail}"
        super().__init__(
            msg,
            category=ErrorCategory.DETECTION,
            suggestion="Run with --debug to see the detector traceback",
            context={"rule_id": rule_id, "path": str(file_path), "strategy": strategy},
        )
        self.rule_id = rule_id
        self.file_path = Path(file_path)
        self.strategy = strategy
        self.detail = detail


class ConfigError(LintweaveError):
    """Configuration file or setting issue."""

    def __init__(
        self,
        message: str,
        file: str | None = None,
        context: dict[str, Any] | None = None,
    ):
        super().__init__(
            message,
            category=ErrorCategory.CONFIG,
            suggestion="Check lintweave.toml or pyproject.toml [tool.lintweave]",
            context={"file": file, **(context or {})},
        )


class SourceReadError(LintweaveError):
    """A source file could not be read or decoded."""

    def __init__(self, file_path: str | Path, detail: str = ""):
        msg = f"Could not read {file_path}"
        if detail:
            msg += f": {detail}"
        super().__init__(
            msg,
            category=ErrorCategory.IO,
            suggestion="Check the file exists, is readable and is UTF-8 encoded",
            context={"path": str(file_path)},
        )
        self.file_path = Path(file_path)


_ERROR_PATTERNS: list[tuple[type, ErrorCategory, str | None]] = [
    (builtins.FileNotFoundError, ErrorCategory.FILE_NOT_FOUND, "Check path exists"),
    (builtins.PermissionError, ErrorCategory.PERMISSION_DENIED, "Check file permissions"),
    (builtins.UnicodeDecodeError, ErrorCategory.IO, "Check the file encoding"),
    (builtins.SyntaxError, ErrorCategory.PARSE_ERROR, "Check file syntax"),
    (builtins.OSError, ErrorCategory.IO, None),
    (builtins.ValueError, ErrorCategory.VALIDATION, None),
    (builtins.TypeError, ErrorCategory.VALIDATION, None),
]


def handle_error(error: Exception, context: dict[str, Any] | None = None) -> ErrorResult:
    """Convert any exception to a structured ErrorResult."""
    if isinstance(error, LintweaveError):
        result = error.to_result()
        if context:
            result.context = {**(result.context or {}), **context}
        return result

    for error_type, category, suggestion in _ERROR_PATTERNS:
        if isinstance(error, error_type):
            return ErrorResult(
                category=category,
                message=str(error),
                original=error,
                suggestion=suggestion,
                context=context,
            )

    return ErrorResult(
        category=ErrorCategory.INTERNAL,
        message=f"{type(error).__name__}: {error}",
        original=error,
        suggestion="This may be a bug in lintweave",
        context=context,
        recoverable=False,
    )


class ErrorCollector:
    """Collect multiple errors without stopping execution."""

    def __init__(self) -> None:
        self.errors: list[ErrorResult] = []
        self.successes: int = 0

    def record(self, error: Exception, context: dict[str, Any] | None = None) -> None:
        self.errors.append(handle_error(error, context))

    def success(self) -> None:
        self.successes += 1

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def summary(self) -> str:
        """Get summary of collected errors."""
        total = self.successes + len(self.errors)
        if not self.errors:
            return f"All {total} operations succeeded"

        lines = [f"{self.successes}/{total} succeeded, {len(self.errors)} errors:"]
        for i, err in enumerate(self.errors[:10], 1):
            lines.append(f"  {i}. {err.to_compact()}")
        if len(self.errors) > 10:
            lines.append(f"  ... and {len(self.errors) - 10} more")
        return "\n".join(lines)
