"""Verbosity-aware output for the CLI.

Usage:
    from lintweave.output import configure_output

    output = configure_output(verbosity=Verbosity.VERBOSE, json_format=False)
    output.header("Found 3 violations")
    output.violation(v)
    output.data(result.to_dict())
"""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from enum import IntEnum
from typing import IO, TYPE_CHECKING, Any

if TYPE_CHECKING:
    from lintweave.rules.base import Violation


class Verbosity(IntEnum):
    """Output verbosity levels."""

    QUIET = 0  # Only errors
    NORMAL = 1
    VERBOSE = 2  # Diagnostics and fallback runs
    DEBUG = 3


@dataclass
class OutputStyle:
    """Styling configuration for output."""

    use_colors: bool = True
    indent_size: int = 2
    max_width: int = 100

    colors: dict[str, str] = field(
        default_factory=lambda: {
            "reset": "\033[0m",
            "bold": "\033[1m",
            "dim": "\033[2m",
            "red": "\033[31m",
            "green": "\033[32m",
            "yellow": "\033[33m",
            "blue": "\033[34m",
            "cyan": "\033[36m",
        }
    )

    markers: dict[str, str] = field(
        default_factory=lambda: {
            "error": "X",
            "warning": "!",
            "success": "+",
            "info": "*",
            "debug": "#",
            "step": ">",
        }
    )


# Severity value -> message level used for coloring
_SEVERITY_LEVELS = {"error": "error", "warning": "warning", "info": "info"}


class OutputFormatter:
    """Base class for output formatters."""

    def format_message(self, level: str, message: str, style: OutputStyle, use_tty: bool) -> str:
        return message

    def format_data(self, data: Any, style: OutputStyle) -> str:
        return str(data)


class TextFormatter(OutputFormatter):
    """Plain text formatter with optional colors."""

    def format_message(self, level: str, message: str, style: OutputStyle, use_tty: bool) -> str:
        marker = style.markers.get(level, "")
        prefix = f"[{marker}] " if marker else ""

        if style.use_colors and use_tty:
            color = self._level_color(level, style)
            return f"{color}{prefix}{message}{style.colors['reset']}"

        return f"{prefix}{message}"

    def _level_color(self, level: str, style: OutputStyle) -> str:
        color_map = {
            "error": style.colors["red"],
            "warning": style.colors["yellow"],
            "success": style.colors["green"],
            "info": style.colors["blue"],
            "debug": style.colors["dim"],
            "step": style.colors["cyan"],
        }
        return color_map.get(level, "")

    def format_data(self, data: Any, style: OutputStyle) -> str:
        if isinstance(data, dict):
            return self._format_dict(data, style)
        if isinstance(data, list):
            return self._format_list(data, style)
        return str(data)

    def _format_dict(self, data: dict, style: OutputStyle, indent: int = 0) -> str:
        lines = []
        prefix = " " * (indent * style.indent_size)
        for key, value in data.items():
            if isinstance(value, dict):
                lines.append(f"{prefix}{key}:")
                lines.append(self._format_dict(value, style, indent + 1))
            elif isinstance(value, list):
                lines.append(f"{prefix}{key}:")
                lines.append(self._format_list(value, style, indent + 1))
            else:
                lines.append(f"{prefix}{key}: {value}")
        return "\n".join(lines)

    def _format_list(self, data: list, style: OutputStyle, indent: int = 0) -> str:
        lines = []
        prefix = " " * (indent * style.indent_size)
        for item in data:
            if isinstance(item, dict):
                lines.append(f"{prefix}-")
                lines.append(self._format_dict(item, style, indent + 1))
            else:
                lines.append(f"{prefix}- {item}")
        return "\n".join(lines)


class JSONFormatter(OutputFormatter):
    """JSON output formatter."""

    def format_message(self, level: str, message: str, style: OutputStyle, use_tty: bool) -> str:
        return json.dumps({"level": level, "message": message})

    def format_data(self, data: Any, style: OutputStyle) -> str:
        return json.dumps(data, indent=2, default=str)


class CompactFormatter(OutputFormatter):
    """Compact single-line formatter."""

    def format_message(self, level: str, message: str, style: OutputStyle, use_tty: bool) -> str:
        level_char = level[0].upper() if level else " "
        return f"[{level_char}] {message}"

    def format_data(self, data: Any, style: OutputStyle) -> str:
        if isinstance(data, (dict, list)):
            return json.dumps(data, separators=(",", ":"), default=str)
        return str(data)


class Output:
    """Configurable output for CLI commands."""

    def __init__(
        self,
        verbosity: Verbosity = Verbosity.NORMAL,
        style: OutputStyle | None = None,
        formatter: OutputFormatter | None = None,
        stdout: IO[str] | None = None,
        stderr: IO[str] | None = None,
    ) -> None:
        self.verbosity = verbosity
        self.style = style or OutputStyle()
        self.formatter = formatter or TextFormatter()
        self.stdout = stdout or sys.stdout
        self.stderr = stderr or sys.stderr

    def use_json(self) -> None:
        """Switch to JSON output format."""
        self.formatter = JSONFormatter()
        self.style.use_colors = False

    def use_compact(self) -> None:
        """Switch to compact output format."""
        self.formatter = CompactFormatter()

    @property
    def structured(self) -> bool:
        """Whether results should be emitted as data rather than text."""
        return isinstance(self.formatter, (JSONFormatter, CompactFormatter))

    def write(
        self,
        message: str,
        level: str = "info",
        min_verbosity: Verbosity = Verbosity.NORMAL,
    ) -> None:
        """Write a message if verbosity allows."""
        if self.verbosity < min_verbosity:
            return

        stream = self.stderr if level == "error" else self.stdout
        formatted = self.formatter.format_message(level, message, self.style, stream.isatty())
        stream.write(f"{formatted}\n")
        stream.flush()

    def error(self, message: str) -> None:
        """Output an error message (shown even in quiet mode)."""
        self.write(message, "error", Verbosity.QUIET)

    def warning(self, message: str) -> None:
        self.write(message, "warning", Verbosity.NORMAL)

    def success(self, message: str) -> None:
        self.write(message, "success", Verbosity.NORMAL)

    def info(self, message: str) -> None:
        self.write(message, "info", Verbosity.NORMAL)

    def verbose(self, message: str) -> None:
        """Output a message only in verbose mode."""
        self.write(message, "info", Verbosity.VERBOSE)

    def debug(self, message: str) -> None:
        self.write(message, "debug", Verbosity.DEBUG)

    def step(self, message: str) -> None:
        self.write(message, "step", Verbosity.NORMAL)

    def violation(self, v: Violation, path_label: str | None = None) -> None:
        """Output one violation as ``line:col [severity] rule: message``.

        Violations are report content, so they go to stdout whatever their
        severity.
        """
        if self.verbosity < Verbosity.NORMAL:
            return

        position = f"{v.line or '-'}:{v.column or '-'}"
        label = f"{path_label}:" if path_label else ""
        formatted = self.formatter.format_message(
            _SEVERITY_LEVELS.get(v.severity.value, "info"),
            f"  {label}{position} [{v.severity.value}] {v.rule_id}: {v.message}",
            self.style,
            self.stdout.isatty(),
        )
        self.stdout.write(f"{formatted}\n")
        self.stdout.flush()

    def data(self, data: Any, min_verbosity: Verbosity = Verbosity.QUIET) -> None:
        """Output structured data."""
        if self.verbosity < min_verbosity:
            return
        self.stdout.write(f"{self.formatter.format_data(data, self.style)}\n")
        self.stdout.flush()

    def header(self, text: str) -> None:
        """Output a section header."""
        if self.verbosity < Verbosity.NORMAL:
            return

        if self.style.use_colors and self.stdout.isatty():
            self.stdout.write(f"\n{self.style.colors['bold']}{text}{self.style.colors['reset']}\n")
        else:
            self.stdout.write(f"\n{text}\n")
        self.stdout.write("-" * min(len(text), self.style.max_width) + "\n")
        self.stdout.flush()

    def blank(self) -> None:
        if self.verbosity >= Verbosity.NORMAL:
            self.stdout.write("\n")
            self.stdout.flush()


_output: Output | None = None


def get_output() -> Output:
    """Get the global output instance."""
    global _output
    if _output is None:
        _output = Output()
    return _output


def reset_output() -> None:
    """Drop the global output instance so the next one picks up fresh streams."""
    global _output
    _output = None


def configure_output(
    verbosity: Verbosity | None = None,
    json_format: bool = False,
    compact: bool = False,
    no_color: bool = False,
) -> Output:
    """Configure the global output instance.

    Args:
        verbosity: Verbosity level
        json_format: Use JSON output format
        compact: Use compact single-line output
        no_color: Disable colors

    Returns:
        Configured Output instance
    """
    output = get_output()

    if verbosity is not None:
        output.verbosity = verbosity

    if compact:
        output.use_compact()
    elif json_format:
        output.use_json()

    if no_color:
        output.style.use_colors = False

    return output
