"""Loading declarative pattern rules from catalog files.

Catalog files hold a top-level ``rules`` list. TOML:

    [[rules]]
    id = "no-debug-import"
    pattern = "^\\s*import pdb"
    message = "Remove debug imports"
    category = "debug"

YAML:

    rules:
      - id: no-global-statement
        pattern: Global
        backend: python
        message: Avoid the global statement
        category: style

Project configuration files carry the same entries under ``custom_rules``
(``[[custom_rules]]`` in ``lintweave.toml``,
``[[tool.lintweave.custom_rules]]`` in ``pyproject.toml``), since their
``[rules]`` table is taken by severity overrides.
"""

from __future__ import annotations

import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from lintweave.errors import ConfigError
from lintweave.logging import get_logger

from .base import RuleSpec
from .decorator import pattern_rule

logger = get_logger("catalog")

RULES_DIR_CATALOG = Path(".lintweave") / "rules.toml"

_YAML_SUFFIXES = {".yaml", ".yml"}


def load_rules_from_toml(path: Path) -> list[RuleSpec]:
    """Load pattern rules from a TOML catalog file.

    Raises:
        ConfigError: If the file cannot be read, parsed or contains an invalid rule
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except OSError as e:
        raise ConfigError(f"Could not read rule catalog: {e}", file=str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in rule catalog: {e}", file=str(path)) from e
    return rules_from_entries(data.get("rules", []), source=str(path))


def load_rules_from_yaml(path: Path) -> list[RuleSpec]:
    """Load pattern rules from a YAML catalog file.

    Raises:
        ConfigError: If the file cannot be read, parsed or contains an invalid rule
    """
    import yaml

    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read rule catalog: {e}", file=str(path)) from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in rule catalog: {e}", file=str(path)) from e

    if data is None:
        return []
    if not isinstance(data, Mapping):
        raise ConfigError("Rule catalog must be a mapping with a 'rules' list", file=str(path))
    return rules_from_entries(data.get("rules", []), source=str(path))


def load_rules_from_file(path: Path) -> list[RuleSpec]:
    """Load a catalog file, choosing the format by extension."""
    path = Path(path)
    if path.suffix.lower() in _YAML_SUFFIXES:
        return load_rules_from_yaml(path)
    return load_rules_from_toml(path)


def rules_from_entries(entries: Any, source: str | None = None) -> list[RuleSpec]:
    """Build rules from a list of rule tables.

    Raises:
        ConfigError: If ``entries`` is not a list or an entry is invalid
    """
    if not isinstance(entries, list):
        raise ConfigError("'rules' must be a list of rule tables", file=source)

    rules = [rule_from_dict(entry, source) for entry in entries]
    logger.debug("Loaded rule catalog", file=source, rules=len(rules))
    return rules


def rule_from_dict(data: Any, source: str | None = None) -> RuleSpec:
    """Create a pattern rule from one catalog entry.

    Supported fields:
        id: Rule id (required; ``name`` is accepted as an alias)
        pattern: Pattern to match (required)
        message: Violation message (required)
        backend: "regex" (default) or "python"
        severity: Rule default severity (off/info/warn/warning/error, 0/1/2)
        category: Category string (default "custom")
        file_pattern: Glob pattern(s) for applicable files
        description: Longer description
        enabled: Whether rule is enabled (default True)
        case_sensitive: Regex case sensitivity (default True)

    Raises:
        ConfigError: If a required field is missing or a value is invalid
    """
    if not isinstance(data, Mapping):
        raise ConfigError(f"Rule entry must be a table, got {type(data).__name__}", file=source)

    rule_id = data.get("id") or data.get("name")
    missing = [
        key
        for key, value in (
            ("id", rule_id),
            ("pattern", data.get("pattern")),
            ("message", data.get("message")),
        )
        if not value
    ]
    if missing:
        raise ConfigError(
            f"Rule entry is missing required field(s): {', '.join(missing)}",
            file=source,
            context={"rule_id": rule_id},
        )

    try:
        return pattern_rule(
            rule_id,
            data["pattern"],
            data["message"],
            backend=data.get("backend", "regex"),
            severity=data.get("severity"),
            category=data.get("category", "custom"),
            file_pattern=data.get("file_pattern", "**/*.py"),
            description=data.get("description", ""),
            enabled=data.get("enabled", True),
            case_sensitive=data.get("case_sensitive", True),
            register=False,
        )
    except ConfigError as e:
        e.context.update({"file": source, "rule_id": rule_id})
        raise
    except ValueError as e:
        raise ConfigError(str(e), file=source, context={"rule_id": rule_id}) from e


def load_rules_from_config(directory: Path, custom_rules: Any = None) -> list[RuleSpec]:
    """Load the project's declarative rules.

    Looks for rules in:
    1. ``custom_rules`` entries from the project configuration
    2. ``.lintweave/rules.toml``

    Raises:
        ConfigError: If any source is invalid
    """
    directory = Path(directory).resolve()
    rules: list[RuleSpec] = []

    if custom_rules:
        rules.extend(rules_from_entries(custom_rules, source="custom_rules"))

    catalog = directory / RULES_DIR_CATALOG
    if catalog.exists():
        rules.extend(load_rules_from_toml(catalog))

    return rules
