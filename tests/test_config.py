"""Tests for CLI defaults read from the environment."""

import pytest

from py_pcstat.config import FORMAT_VAR, MAX_SIZE_VAR, CliConfig, ConfigError, load_config
from py_pcstat.output import OutputFormat

LIMIT = 4096


class TestLoadConfig:
    """Verify environment parsing."""

    def test_defaults(self) -> None:
        """An empty environment yields the built-in defaults."""
        assert load_config({}) == CliConfig()

    def test_format(self) -> None:
        """The format variable is case-insensitive."""
        assert load_config({FORMAT_VAR: "JSON"}).output_format is OutputFormat.JSON

    def test_bad_format(self) -> None:
        """Unknown formats are rejected."""
        with pytest.raises(ConfigError, match="expected one of"):
            load_config({FORMAT_VAR: "yaml"})

    def test_max_size(self) -> None:
        """The size ceiling is parsed as an integer."""
        assert load_config({MAX_SIZE_VAR: str(LIMIT)}).max_size == LIMIT

    @pytest.mark.parametrize("value", ["lots", "-1"])
    def test_bad_max_size(self, value: str) -> None:
        """Non-integers and negative sizes are rejected."""
        with pytest.raises(ConfigError):
            load_config({MAX_SIZE_VAR: value})

    def test_reads_process_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Without an explicit mapping, os.environ is used."""
        monkeypatch.setenv(FORMAT_VAR, "terse")
        assert load_config().output_format is OutputFormat.TERSE
