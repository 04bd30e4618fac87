"""Tests for configuration loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from dropnote import ConfigError
from dropnote.config import get_config, validate_config


@pytest.fixture
def no_env_file(tmp_path: Path) -> str:
    return str(tmp_path / "missing.env")


@pytest.fixture
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    # setenv first so the variables are restored or removed after the test
    for key in [
        "DROPBOX_ACCESS_TOKEN",
        "DROPNOTE_ROOT",
        "DROPNOTE_TIMEOUT",
        "DROPNOTE_RETRY_BUDGET",
        "DROPNOTE_RETRY_DELAY_MS",
    ]:
        monkeypatch.setenv(key, "")
        monkeypatch.delenv(key)
    return monkeypatch


class TestGetConfig:
    """Tests for get_config."""

    def test_defaults(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        """Test that optional settings fall back to their defaults."""
        clean_env.setenv("DROPBOX_ACCESS_TOKEN", "token")

        config = get_config(no_env_file)

        assert config == {
            "DROPBOX_ACCESS_TOKEN": "token",
            "DROPNOTE_ROOT": "",
            "DROPNOTE_TIMEOUT": 30.0,
            "DROPNOTE_RETRY_BUDGET": 5,
            "DROPNOTE_RETRY_DELAY_MS": 2000,
        }

    def test_overrides(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        """Test that environment values are read and converted."""
        clean_env.setenv("DROPBOX_ACCESS_TOKEN", "token")
        clean_env.setenv("DROPNOTE_ROOT", "/Notes")
        clean_env.setenv("DROPNOTE_RETRY_BUDGET", "2")
        clean_env.setenv("DROPNOTE_TIMEOUT", "5.5")

        config = get_config(no_env_file)

        assert config["DROPNOTE_ROOT"] == "/Notes"
        assert config["DROPNOTE_RETRY_BUDGET"] == 2
        assert config["DROPNOTE_TIMEOUT"] == 5.5

    def test_env_file_is_loaded(self, clean_env: pytest.MonkeyPatch, tmp_path: Path) -> None:
        """Test that values come from a .env file when not in the environment."""
        env_file = tmp_path / ".env"
        env_file.write_text("DROPBOX_ACCESS_TOKEN=from-file\n")

        config = get_config(str(env_file))

        assert config["DROPBOX_ACCESS_TOKEN"] == "from-file"

    def test_missing_token(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        """Test that a missing token raises ConfigError."""
        with pytest.raises(ConfigError, match="DROPBOX_ACCESS_TOKEN"):
            get_config(no_env_file)

    def test_malformed_number(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        """Test that non-numeric settings are rejected."""
        clean_env.setenv("DROPBOX_ACCESS_TOKEN", "token")
        clean_env.setenv("DROPNOTE_RETRY_BUDGET", "many")

        with pytest.raises(ConfigError, match="DROPNOTE_RETRY_BUDGET"):
            get_config(no_env_file)

    def test_negative_budget(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        """Test that a negative retry budget is rejected."""
        clean_env.setenv("DROPBOX_ACCESS_TOKEN", "token")
        clean_env.setenv("DROPNOTE_RETRY_BUDGET", "-1")

        with pytest.raises(ConfigError, match="negative"):
            get_config(no_env_file)


class TestValidateConfig:
    """Tests for validate_config."""

    def test_valid(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        clean_env.setenv("DROPBOX_ACCESS_TOKEN", "token")

        assert validate_config(no_env_file)

    def test_invalid(self, clean_env: pytest.MonkeyPatch, no_env_file: str) -> None:
        assert not validate_config(no_env_file)
