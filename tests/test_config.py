"""Tests for configuration dataclasses."""

from pathlib import Path

import pytest

from lintweave.config import ConfigOverrides, LintweaveConfig, SessionOptions, split_override
from lintweave.errors import ConfigError


class TestSplitOverride:
    """Tests for split_override."""

    @pytest.mark.parametrize(
        "value,expected",
        [
            (None, (None, {})),
            ("warn", ("warn", {})),
            (2, (2, {})),
            ({"severity": "error"}, ("error", {})),
            ({"severity": "error", "options": {"max": 3}}, ("error", {"max": 3})),
            (["error", {"strict": True}], ("error", {"strict": True})),
            (["info"], ("info", {})),
            ([], ("off", {})),
        ],
    )
    def test_shapes(self, value, expected):
        assert split_override(value) == expected

    def test_non_mapping_options_ignored(self):
        assert split_override({"severity": "warn", "options": "oops"}) == ("warn", {})


class TestConfigOverrides:
    """Tests for ConfigOverrides."""

    def test_options_for(self):
        overrides = ConfigOverrides(rules={"r": ["error", {"strict": True}], "plain": "warn"})
        assert overrides.options_for("r") == {"strict": True}
        assert overrides.options_for("plain") == {}
        assert overrides.options_for("missing") == {}

    def test_from_dict(self):
        overrides = ConfigOverrides.from_dict(
            {"rules": {"no-print": "off"}, "categories": {"style": "warn"}, "include": ["x"]}
        )
        assert overrides.rules == {"no-print": "off"}
        assert overrides.categories == {"style": "warn"}

    def test_from_empty(self):
        assert ConfigOverrides.from_dict(None) == ConfigOverrides()

    @pytest.mark.parametrize("key", ["rules", "categories"])
    def test_sections_must_be_tables(self, key):
        with pytest.raises(ConfigError, match=key):
            ConfigOverrides.from_dict({key: ["no-print"]}, file="lintweave.toml")


class TestLintweaveConfig:
    """Tests for LintweaveConfig defaults."""

    def test_defaults(self):
        config = LintweaveConfig()
        assert config.project_root == Path.cwd()
        assert config.include_patterns == ["**/*.py"]
        assert "**/__pycache__/*" in config.exclude_patterns
        assert config.builtins
        assert config.semantic
        assert config.parallel

    def test_session_options(self):
        overrides = ConfigOverrides(rules={"no-print": "off"})
        config = LintweaveConfig(overrides=overrides, parallel=False, max_workers=2)

        options = config.session_options(verbose=True)

        assert options == SessionOptions(
            verbose=True, config=overrides, parallel=False, max_workers=2
        )
        assert options.language == "python"
