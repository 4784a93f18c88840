"""Severity resolution.

A violation's final severity never comes from the detector. It is resolved
per rule, in this order:

1. an explicit per-rule override in the run configuration
2. a configured override for the rule's category
3. the rule's own default severity
4. the process-wide category default table (``CATEGORY_DEFAULTS``)
5. the global default (``warning``)

Override values may be written the ESLint way:

    [rules]
    no-print = "off"                              # name
    no-bare-except = 2                            # 0 off, 1 warn, 2 error
    no-hardcoded-secret = { severity = "warn" }   # table
    no-generic-exception = ["error", { strict = true }]

Invalid values never raise out of the resolver: a warning is logged, a
``ConfigError`` is recorded and the next precedence level applies.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from lintweave.config import split_override
from lintweave.errors import ConfigError
from lintweave.logging import get_logger

from .base import Severity

if TYPE_CHECKING:
    from lintweave.config import ConfigOverrides

    from .base import RuleSpec

logger = get_logger("severity")

CATEGORY_DEFAULTS: dict[str, Severity] = {
    "security": Severity.ERROR,
    "error-handling": Severity.WARNING,
    "quality": Severity.WARNING,
    "debug": Severity.WARNING,
    "performance": Severity.WARNING,
    "best-practice": Severity.INFO,
    "style": Severity.INFO,
    "documentation": Severity.INFO,
}

GLOBAL_DEFAULT = Severity.WARNING

_ALIASES: dict[str, Severity] = {
    "off": Severity.OFF,
    "info": Severity.INFO,
    "warn": Severity.WARNING,
    "warning": Severity.WARNING,
    "error": Severity.ERROR,
}

_NUMERIC_LEVELS: dict[int, Severity] = {
    0: Severity.OFF,
    1: Severity.WARNING,
    2: Severity.ERROR,
}


def parse_severity(value: Any) -> Severity:
    """Parse a severity name, alias or numeric level.

    Raises:
        ConfigError: If the value is not a recognized severity
    """
    if isinstance(value, Severity):
        return value
    # bool is an int subclass; True/False are not severities
    if isinstance(value, int) and not isinstance(value, bool):
        if value in _NUMERIC_LEVELS:
            return _NUMERIC_LEVELS[value]
    elif isinstance(value, str):
        severity = _ALIASES.get(value.strip().lower())
        if severity is not None:
            return severity
    raise ConfigError(
        f"Invalid severity {value!r}; expected one of off, info, warn, warning, error, 0, 1, 2"
    )


class SeverityResolver:
    """Resolves and caches the final severity of each rule for one run."""

    def __init__(
        self,
        category_overrides: Mapping[str, Any] | None = None,
        category_defaults: Mapping[str, Severity] | None = None,
        global_default: Severity = GLOBAL_DEFAULT,
    ) -> None:
        self.category_defaults = dict(category_defaults or CATEGORY_DEFAULTS)
        self.global_default = global_default
        self.errors: list[ConfigError] = []
        self._category_overrides: dict[str, Severity] = {}
        self._cache: dict[str, Severity] = {}
        self._lock = threading.Lock()

        for category, raw in (category_overrides or {}).items():
            try:
                self._category_overrides[category] = parse_severity(raw)
            except ConfigError as e:
                self._record(e, category=category)

    def resolve(
        self,
        rule_id: str,
        category: str,
        config_override: Any = None,
        rule_default: Severity | None = None,
    ) -> Severity:
        """Compute the final severity for a rule.

        Args:
            rule_id: Rule identifier (for diagnostics)
            category: Rule category
            config_override: Raw per-rule override from configuration
            rule_default: The rule's own default, if it declares one

        Returns:
            The resolved Severity; ``Severity.OFF`` disables the rule
        """
        raw, _ = split_override(config_override)
        if raw is not None:
            try:
                return parse_severity(raw)
            except ConfigError as e:
                self._record(e, rule_id=rule_id)

        if category in self._category_overrides:
            return self._category_overrides[category]
        if rule_default is not None:
            return rule_default
        return self.category_defaults.get(category, self.global_default)

    def resolve_rule(self, rule: RuleSpec, config: ConfigOverrides | None = None) -> Severity:
        """Resolve a rule against run configuration, caching the result."""
        with self._lock:
            cached = self._cache.get(rule.id)
            if cached is not None:
                return cached
            override = config.rules.get(rule.id) if config is not None else None
            severity = self.resolve(rule.id, rule.category, override, rule.severity)
            self._cache[rule.id] = severity
            return severity

    def _record(self, error: ConfigError, **fields: Any) -> None:
        error.context.update(fields)
        logger.warning(f"{error}; falling back to default", **fields)
        self.errors.append(error)
