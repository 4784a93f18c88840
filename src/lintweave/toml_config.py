"""TOML configuration files.

Usage:
    from lintweave.toml_config import find_config_file, load_toml_config

    config_path = find_config_file(Path.cwd())
    config = load_toml_config(config_path) if config_path else LintweaveConfig()

Example lintweave.toml:
    include = ["src/**/*.py"]
    exclude = ["**/migrations/*"]
    builtins = true
    rule_files = ["lint/rules.yaml"]

    [execution]
    parallel = true
    max_workers = 8
    semantic = true

    [rules]
    no-print = "off"
    no-bare-except = 2
    no-generic-exception = ["error", { strict = true }]

    [categories]
    best-practice = "warn"

    [[custom_rules]]
    id = "no-debug-import"
    pattern = "^\\s*import pdb"
    message = "Remove debug imports"
    category = "debug"

In ``pyproject.toml`` the same keys live under ``[tool.lintweave]``.
"""

from __future__ import annotations

import tomllib
from pathlib import Path
from typing import Any

from lintweave.config import ConfigOverrides, LintweaveConfig
from lintweave.errors import ConfigError

# Config file names to search for (in order of preference)
CONFIG_FILE_NAMES = ["lintweave.toml", ".lintweave.toml", "pyproject.toml"]


def find_config_file(
    start_dir: Path,
    config_names: list[str] | None = None,
) -> Path | None:
    """Find a config file by searching up the directory hierarchy.

    A ``pyproject.toml`` only counts if it has a ``[tool.lintweave]`` section.

    Returns:
        Path to the config file, or None if not found
    """
    config_names = config_names or CONFIG_FILE_NAMES
    current = Path(start_dir).resolve()

    while True:
        for name in config_names:
            config_path = current / name
            if not config_path.is_file():
                continue
            if name != "pyproject.toml" or _has_lintweave_section(config_path):
                return config_path

        parent = current.parent
        if parent == current:
            break
        current = parent

    return None


def _has_lintweave_section(pyproject_path: Path) -> bool:
    """Check if pyproject.toml has a [tool.lintweave] section."""
    try:
        with open(pyproject_path, "rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return False
    return "lintweave" in data.get("tool", {})


def read_toml_section(path: Path) -> dict[str, Any]:
    """Read the lintweave settings table from a config file.

    Raises:
        ConfigError: If the file is missing, unparsable or has no lintweave section
    """
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}", file=str(path)) from e
    except OSError as e:
        raise ConfigError(f"Could not read config file: {e}", file=str(path)) from e
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML: {e}", file=str(path)) from e

    if path.name == "pyproject.toml":
        if "lintweave" not in data.get("tool", {}):
            raise ConfigError(f"No [tool.lintweave] section in {path}", file=str(path))
        data = data["tool"]["lintweave"]
    return data


def load_toml_config(path: Path) -> LintweaveConfig:
    """Load a LintweaveConfig from a TOML file.

    Raises:
        ConfigError: If the file is invalid
    """
    path = Path(path).resolve()
    return build_config(read_toml_section(path), path.parent, source=str(path))


def _list_of_str(data: dict[str, Any], key: str, source: str | None) -> list[str] | None:
    value = data.get(key)
    if value is None:
        return None
    if isinstance(value, str):
        return [value]
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise ConfigError(f"'{key}' must be a string or a list of strings", file=source)
    return list(value)


def build_config(
    data: dict[str, Any],
    project_root: Path,
    source: str | None = None,
) -> LintweaveConfig:
    """Build a LintweaveConfig from a settings table.

    Raises:
        ConfigError: If a setting has the wrong type
    """
    config = LintweaveConfig(project_root=project_root)

    include = _list_of_str(data, "include", source)
    if include is not None:
        config.include_patterns = include
    exclude = _list_of_str(data, "exclude", source)
    if exclude is not None:
        config.exclude_patterns = exclude

    if "builtins" in data:
        config.builtins = bool(data["builtins"])

    rule_files = _list_of_str(data, "rule_files", source)
    if rule_files is not None:
        config.rule_files = [project_root / p for p in rule_files]

    execution = data.get("execution", {})
    if not isinstance(execution, dict):
        raise ConfigError("'execution' must be a table", file=source)
    if "parallel" in execution:
        config.parallel = bool(execution["parallel"])
    if "semantic" in execution:
        config.semantic = bool(execution["semantic"])
    if "max_workers" in execution:
        workers = execution["max_workers"]
        if isinstance(workers, bool) or not isinstance(workers, int) or workers < 1:
            raise ConfigError("'execution.max_workers' must be a positive integer", file=source)
        config.max_workers = workers

    config.overrides = ConfigOverrides.from_dict(data, file=source)

    custom_rules = data.get("custom_rules", [])
    if not isinstance(custom_rules, list):
        raise ConfigError("'custom_rules' must be an array of tables", file=source)
    config.custom_rules = custom_rules

    return config
