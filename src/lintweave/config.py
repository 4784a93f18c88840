"""Configuration for rule runs.

Three layers, from the innermost out:

- ``ConfigOverrides``: per-rule and per-category severity overrides
- ``SessionOptions``: the options bag of one analysis session
- ``LintweaveConfig``: project-level settings (file discovery, builtins,
  custom rule catalogs), usually loaded from ``lintweave.toml``
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from lintweave.errors import ConfigError


def split_override(value: Any) -> tuple[Any | None, dict[str, Any]]:
    """Split a rule override into (raw severity, rule options).

    Accepts a bare severity, a ``{severity, options}`` mapping or a
    ``[severity, options]`` list. The raw severity is returned unparsed.
    """
    if value is None:
        return None, {}
    if isinstance(value, Mapping):
        options = value.get("options") or {}
        return value.get("severity"), dict(options) if isinstance(options, Mapping) else {}
    if isinstance(value, (list, tuple)):
        if not value:
            return "off", {}
        options = value[1] if len(value) > 1 and isinstance(value[1], Mapping) else {}
        return value[0], dict(options)
    return value, {}


@dataclass
class ConfigOverrides:
    """User overrides keyed by rule id and by category."""

    rules: dict[str, Any] = field(default_factory=dict)
    categories: dict[str, Any] = field(default_factory=dict)

    def options_for(self, rule_id: str) -> dict[str, Any]:
        """Rule options attached to an override, if any."""
        _, options = split_override(self.rules.get(rule_id))
        return options

    @classmethod
    def from_dict(cls, data: Mapping[str, Any] | None, file: str | None = None) -> ConfigOverrides:
        """Build overrides from a ``{rules: {...}, categories: {...}}`` mapping.

        Raises:
            ConfigError: If either section is not a mapping
        """
        data = data or {}
        rules = data.get("rules", {})
        categories = data.get("categories", {})
        if not isinstance(rules, Mapping):
            raise ConfigError("'rules' must be a table of rule id to severity", file=file)
        if not isinstance(categories, Mapping):
            raise ConfigError("'categories' must be a table of category to severity", file=file)
        return cls(rules=dict(rules), categories=dict(categories))


@dataclass
class SessionOptions:
    """Options for one analysis session."""

    verbose: bool = False
    config: ConfigOverrides = field(default_factory=ConfigOverrides)
    language: str = "python"
    parallel: bool = True
    max_workers: int = 4


@dataclass
class LintweaveConfig:
    """Project-level configuration."""

    project_root: Path = field(default_factory=Path.cwd)

    # File discovery
    include_patterns: list[str] = field(default_factory=lambda: ["**/*.py"])
    exclude_patterns: list[str] = field(
        default_factory=lambda: [
            "**/__pycache__/*",
            "**/.venv/*",
            "**/venv/*",
            "**/node_modules/*",
            "**/.git/*",
            "**/*.pyc",
        ]
    )

    # Rules
    builtins: bool = True
    rule_files: list[Path] = field(default_factory=list)
    custom_rules: list[dict[str, Any]] = field(default_factory=list)
    overrides: ConfigOverrides = field(default_factory=ConfigOverrides)

    # Execution
    semantic: bool = True
    parallel: bool = True
    max_workers: int = 4

    def session_options(self, verbose: bool = False) -> SessionOptions:
        return SessionOptions(
            verbose=verbose,
            config=self.overrides,
            parallel=self.parallel,
            max_workers=self.max_workers,
        )
