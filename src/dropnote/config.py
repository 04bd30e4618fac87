"""
Configuration management for dropnote.
Loads environment variables (and a .env file when present) and validates them.
"""

from __future__ import annotations

import logging
import os
from typing import Any

from dotenv import load_dotenv

from dropnote.exceptions import ConfigError

logger = logging.getLogger(__name__)

REQUIRED = ["DROPBOX_ACCESS_TOKEN"]


def _number(config: dict[str, Any], key: str, kind: type) -> None:
    try:
        config[key] = kind(config[key])
    except (TypeError, ValueError) as e:
        raise ConfigError(f"{key} must be a number, got {config[key]!r}") from e


def get_config(env_file: str | None = None) -> dict[str, Any]:
    """
    Load and validate configuration from environment variables.
    Returns a dict with all configuration values.
    Raises ConfigError if required variables are missing or malformed.
    """
    load_dotenv(env_file)

    config: dict[str, Any] = {
        # Required
        "DROPBOX_ACCESS_TOKEN": os.getenv("DROPBOX_ACCESS_TOKEN"),
        # Optional with defaults
        "DROPNOTE_ROOT": os.getenv("DROPNOTE_ROOT", ""),
        "DROPNOTE_TIMEOUT": os.getenv("DROPNOTE_TIMEOUT", "30"),
        "DROPNOTE_RETRY_BUDGET": os.getenv("DROPNOTE_RETRY_BUDGET", "5"),
        "DROPNOTE_RETRY_DELAY_MS": os.getenv("DROPNOTE_RETRY_DELAY_MS", "2000"),
    }

    missing = [key for key in REQUIRED if not config[key]]
    if missing:
        raise ConfigError(f"Missing required environment variables: {', '.join(missing)}")

    _number(config, "DROPNOTE_TIMEOUT", float)
    _number(config, "DROPNOTE_RETRY_BUDGET", int)
    _number(config, "DROPNOTE_RETRY_DELAY_MS", int)
    if config["DROPNOTE_RETRY_BUDGET"] < 0:
        raise ConfigError("DROPNOTE_RETRY_BUDGET cannot be negative")

    return config


def validate_config(env_file: str | None = None) -> bool:
    """
    Validate that all required configuration is present.
    Call this at startup to fail fast if config is incomplete.
    """
    try:
        get_config(env_file)
        return True
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return False
