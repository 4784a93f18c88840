"""Strategy detector adapters.

Every detector, whatever its shape, is wrapped once at rule definition time
in a ``StrategyAdapter`` with a single entry point:

    adapter.detect(file_path, content, context) -> list[Violation]

The adapter boundary is the only place where detector exceptions are
translated. Detectors can simply raise or return; the orchestrator only ever
sees ``Violation`` lists, ``EngineUnavailable``, ``SourceReadError`` or
``DetectionError``.

Accepted detector shapes (see ``adapt_detector``):

- a callable ``fn(input, context)``
- an object (or class, instantiated without arguments) with
  ``detect(input, context)``
- an object with ``analyze_file(file_path, input, context)``
- an object with ``analyze(input)``

``input`` is a ``ParsedFile`` for symbol-based strategies and the raw source
text for heuristic ones.
"""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable, Iterable, Mapping, Sequence
from pathlib import Path
from typing import Any

from lintweave.errors import DetectionError, EngineUnavailable, SourceReadError
from lintweave.logging import get_logger

from .base import DetectionContext, Finding, StrategyKind, Violation

logger = get_logger("adapters")

Detector = Callable[[Any, DetectionContext], Iterable[Any]]


def read_source(file_path: Path) -> str:
    """Read a source file as UTF-8.

    Raises:
        SourceReadError: If the file cannot be opened or decoded
    """
    try:
        with open(file_path, encoding="utf-8") as fh:
            return fh.read()
    except (OSError, UnicodeDecodeError) as e:
        raise SourceReadError(file_path, str(e)) from e


def adapt_detector(obj: Any) -> tuple[Detector, str]:
    """Normalize a detector of any supported shape to ``fn(input, context)``.

    Returns:
        Tuple of (callable, display name)

    Raises:
        TypeError: If the object has no recognized entry point
    """
    if isinstance(obj, type):
        name = obj.__name__
        obj = obj()
    else:
        name = getattr(obj, "__name__", type(obj).__name__)

    detect = getattr(obj, "detect", None)
    if callable(detect):
        return detect, name

    analyze_file = getattr(obj, "analyze_file", None)
    if callable(analyze_file):
        return (lambda data, ctx: analyze_file(ctx.file_path, data, ctx)), name

    analyze = getattr(obj, "analyze", None)
    if callable(analyze):
        return (lambda data, ctx: analyze(data)), name

    if callable(obj):
        return obj, name

    raise TypeError(
        f"Cannot adapt {name!r} as a detector: expected a callable or an object "
        "with detect(), analyze_file() or analyze()"
    )


class StrategyAdapter(ABC):
    """Uniform wrapper around one concrete detection routine."""

    kind: StrategyKind

    def __init__(self, detector: Any, name: str | None = None) -> None:
        self._detector, default_name = adapt_detector(detector)
        self.name = name or default_name

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name!r})"

    def is_ready(self, file_path: Path, context: DetectionContext) -> bool:
        """Whether this strategy can run for the file right now."""
        return True

    @abstractmethod
    def _invoke(
        self,
        file_path: Path,
        content: str | None,
        context: DetectionContext,
    ) -> tuple[Iterable[Any], Sequence[str]]:
        """Run the detector; return its raw output and the file's lines."""
        ...

    def _tolerates(self, error: Exception) -> bool:
        """Whether an error means "nothing to report" rather than a failure."""
        return False

    def detect(
        self,
        file_path: Path,
        content: str | None,
        context: DetectionContext,
    ) -> list[Violation]:
        """Run the detector on one file and normalize its output.

        Args:
            file_path: Absolute path of the file
            content: Pre-read file content, or None to read it here
            context: Detection context for this (rule, file) pair

        Returns:
            Violations tagged with this adapter's strategy kind

        Raises:
            EngineUnavailable: Symbol analysis cannot serve this file
            SourceReadError: The file could not be read
            DetectionError: The detector failed or returned malformed output
        """
        try:
            raw, lines = self._invoke(file_path, content, context)
            findings = list(raw or ())
        except (EngineUnavailable, SourceReadError):
            raise
        except Exception as e:
            if self._tolerates(e):
                logger.debug(
                    "Detector could not interpret file, reporting nothing",
                    rule_id=context.rule_id,
                    file=str(file_path),
                    error=f"{type(e).__name__}: {e}",
                )
                return []
            raise DetectionError(
                context.rule_id,
                file_path,
                self.kind.value,
                f"{type(e).__name__}: {e}",
            ) from e

        return [self._normalize(item, file_path, lines, context) for item in findings]

    def _normalize(
        self,
        item: Any,
        file_path: Path,
        lines: Sequence[str],
        context: DetectionContext,
    ) -> Violation:
        if isinstance(item, (Violation, Finding)):
            message, line, column, source = item.message, item.line, item.column, item.source
        elif isinstance(item, Mapping):
            message = item.get("message")
            line = item.get("line")
            column = item.get("column")
            source = item.get("source")
        else:
            raise DetectionError(
                context.rule_id,
                file_path,
                self.kind.value,
                f"unsupported finding type {type(item).__name__}",
            )

        if not isinstance(message, str) or not message.strip():
            raise DetectionError(context.rule_id, file_path, self.kind.value, "empty message")

        line = self._check_position(line, "line", file_path, context)
        column = self._check_position(column, "column", file_path, context)

        if source is None and line is not None and line <= len(lines):
            source = lines[line - 1].strip()

        return Violation(
            rule_id=context.rule_id,
            message=message,
            file_path=file_path,
            line=line,
            column=column,
            category=context.category,
            strategy=self.kind,
            source=source,
        )

    def _check_position(
        self,
        value: Any,
        field_name: str,
        file_path: Path,
        context: DetectionContext,
    ) -> int | None:
        if value is None:
            return None
        if isinstance(value, bool) or not isinstance(value, int) or value < 1:
            raise DetectionError(
                context.rule_id,
                file_path,
                self.kind.value,
                f"invalid {field_name} {value!r} (positions are 1-based)",
            )
        return value


class SymbolStrategy(StrategyAdapter):
    """Detector that runs on the semantic engine's parsed view of a file.

    Never guesses: if the engine is missing, not ready, or does not know the
    file, ``detect`` raises ``EngineUnavailable``.
    """

    kind = StrategyKind.SYMBOL

    def is_ready(self, file_path: Path, context: DetectionContext) -> bool:
        engine = context.semantic_engine
        if engine is None:
            return False
        try:
            return engine.is_ready() and engine.get_parsed_file(file_path) is not None
        except Exception as e:
            logger.debug(
                "Semantic engine query failed, treating as unavailable",
                file=str(file_path),
                error=f"{type(e).__name__}: {e}",
            )
            return False

    def _invoke(self, file_path, content, context):
        engine = context.semantic_engine
        if engine is None:
            raise EngineUnavailable(file_path, "no semantic engine")
        if not engine.is_ready():
            raise EngineUnavailable(file_path)
        parsed = engine.get_parsed_file(file_path)
        if parsed is None:
            raise EngineUnavailable(file_path, "file is not part of the parsed project")
        return self._detector(parsed, context), parsed.lines


class HeuristicStrategy(StrategyAdapter):
    """Detector that runs on raw source text.

    Tolerates any content: a detector that chokes on malformed input
    (``SyntaxError``, ``ValueError``, ``UnicodeError``, a bad regex) reports
    nothing instead of failing.
    """

    kind = StrategyKind.HEURISTIC

    def _invoke(self, file_path, content, context):
        if content is None:
            content = read_source(file_path)
        return self._detector(content, context), content.splitlines()

    def _tolerates(self, error: Exception) -> bool:
        return isinstance(error, (SyntaxError, ValueError, UnicodeError, re.error))


def make_adapter(
    detector: Any,
    kind: StrategyKind | str,
    name: str | None = None,
) -> StrategyAdapter:
    """Create the adapter for a detector of the given kind."""
    kind = StrategyKind(kind)
    if kind == StrategyKind.SYMBOL:
        return SymbolStrategy(detector, name)
    return HeuristicStrategy(detector, name)
