"""Structured logging for lintweave.

Every engine component logs through a ``LintweaveLogger`` so that rule ids,
file paths and strategy tags travel as fields instead of being baked into
message strings. Output can be human-readable or JSON.

Usage:
    from lintweave.logging import get_logger

    logger = get_logger("orchestrator")
    logger.warning("Detection failed", rule_id="no-print", file="a.py")
"""

import json
import logging
import sys
import time
from contextlib import contextmanager
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class LogFormat(Enum):
    """Log output format."""

    TEXT = "text"
    JSON = "json"


@dataclass
class LogContext:
    """Context information for structured logging."""

    component: str = ""
    operation: str = ""
    extra: dict[str, Any] = field(default_factory=dict)

    def with_extra(self, **kwargs: Any) -> "LogContext":
        """Create new context with additional fields."""
        return LogContext(
            component=self.component,
            operation=self.operation,
            extra={**self.extra, **kwargs},
        )


class StructuredFormatter(logging.Formatter):
    """Formatter that outputs one JSON object per record."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: dict[str, Any] = {
            "timestamp": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        ctx = getattr(record, "context", None)
        if isinstance(ctx, LogContext):
            if ctx.component:
                log_data["component"] = ctx.component
            if ctx.operation:
                log_data["operation"] = ctx.operation
            log_data.update(ctx.extra)

        return json.dumps(log_data, default=str)


class TextFormatter(logging.Formatter):
    """Formatter that outputs human-readable logs with context."""

    def format(self, record: logging.LogRecord) -> str:
        prefix_parts = []

        ctx = getattr(record, "context", None)
        if isinstance(ctx, LogContext):
            if ctx.component:
                prefix_parts.append(f"[{ctx.component}]")
            if ctx.operation:
                prefix_parts.append(f"({ctx.operation})")

        prefix = " ".join(prefix_parts)
        if prefix:
            prefix = f"{prefix} "

        base = super().format(record)

        extra_str = ""
        if isinstance(ctx, LogContext) and ctx.extra:
            extra_str = " " + " ".join(f"{k}={v}" for k, v in ctx.extra.items())

        return f"{prefix}{base}{extra_str}"


def _build_handler(level: int, log_format: LogFormat) -> logging.Handler:
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    if log_format == LogFormat.JSON:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(TextFormatter("%(asctime)s %(levelname)s %(message)s"))
    return handler


class LintweaveLogger:
    """Structured logger for lintweave components.

    Records propagate to the ``lintweave`` root logger, which is the only
    logger that gets a handler (see ``configure_logging``).
    """

    def __init__(self, name: str, level: int | None = None) -> None:
        self._logger = logging.getLogger(f"lintweave.{name}")
        if level is not None:
            self._logger.setLevel(level)
        self._context = LogContext(component=name)

    def with_context(self, **kwargs: Any) -> "LintweaveLogger":
        """Create a new logger sharing this one's sink, with extra fields."""
        new_logger = LintweaveLogger.__new__(LintweaveLogger)
        new_logger._logger = self._logger
        new_logger._context = self._context.with_extra(**kwargs)
        return new_logger

    def with_operation(self, operation: str) -> "LintweaveLogger":
        """Create a new logger for a specific operation."""
        new_logger = LintweaveLogger.__new__(LintweaveLogger)
        new_logger._logger = self._logger
        new_logger._context = LogContext(
            component=self._context.component,
            operation=operation,
            extra=self._context.extra,
        )
        return new_logger

    def is_enabled_for(self, level: int) -> bool:
        return self._logger.isEnabledFor(level)

    def _log(self, level: int, msg: str, exc_info: bool = False, **kwargs: Any) -> None:
        if not self._logger.isEnabledFor(level):
            return

        record = self._logger.makeRecord(
            self._logger.name,
            level,
            "(unknown file)",
            0,
            msg,
            (),
            sys.exc_info() if exc_info else None,
        )
        record.context = self._context.with_extra(**kwargs) if kwargs else self._context
        self._logger.handle(record)

    def debug(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, msg, **kwargs)

    def info(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.INFO, msg, **kwargs)

    def warning(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, msg, **kwargs)

    def error(self, msg: str, **kwargs: Any) -> None:
        self._log(logging.ERROR, msg, **kwargs)

    def exception(self, msg: str, **kwargs: Any) -> None:
        """Log an error with the active exception's traceback."""
        self._log(logging.ERROR, msg, exc_info=True, **kwargs)

    @contextmanager
    def timed(self, operation: str, **kwargs: Any):
        """Time a block and log its duration at debug level.

        Yields:
            Dict where 'elapsed_ms' will be set after completion
        """
        start = time.perf_counter()
        result: dict[str, Any] = {}
        try:
            yield result
        finally:
            elapsed_ms = (time.perf_counter() - start) * 1000
            result["elapsed_ms"] = elapsed_ms
            self.debug(
                f"{operation} completed",
                operation=operation,
                elapsed_ms=f"{elapsed_ms:.2f}",
                **kwargs,
            )


_loggers: dict[str, LintweaveLogger] = {}


def get_logger(name: str) -> LintweaveLogger:
    """Get or create the logger for a component."""
    if name not in _loggers:
        _loggers[name] = LintweaveLogger(name)
    return _loggers[name]


def configure_logging(
    level: int = logging.WARNING,
    log_format: LogFormat = LogFormat.TEXT,
) -> None:
    """Configure the ``lintweave`` root logger.

    Args:
        level: Minimum level emitted
        log_format: Output format
    """
    root = logging.getLogger("lintweave")
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(_build_handler(level, log_format))
