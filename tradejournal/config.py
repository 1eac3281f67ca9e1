"""Configuration for TradeJournal.

Settings live in a TOML file, ``~/.config/tradejournal/config.toml`` by
default, or wherever ``TRADEJOURNAL_CONFIG`` points. Every key has a
built-in default, so the file is optional.
"""

import copy
import logging
import os
from pathlib import Path
from typing import Optional

import toml

from tradejournal.models.account import (
    DEFAULT_ACCOUNT_ID,
    DEFAULT_ACCOUNT_NAME,
    DEFAULT_INITIAL_BALANCE,
)

logger = logging.getLogger(__name__)


CONFIG_DIR = Path.home() / ".config" / "tradejournal"
DEFAULT_CONFIG_PATH = CONFIG_DIR / "config.toml"
DEFAULT_DB_PATH = CONFIG_DIR / "journal.db"

DEFAULTS = {
    "journal": {
        "db_path": str(DEFAULT_DB_PATH),
        "account_id": DEFAULT_ACCOUNT_ID,
    },
    "account": {
        "default_name": DEFAULT_ACCOUNT_NAME,
        "default_initial_balance": DEFAULT_INITIAL_BALANCE,
    },
    "export": {
        "include_row_numbers": False,
    },
    "logging": {
        "level": "WARNING",
    },
}


def get_config_path() -> Path:
    """Resolve the config file location."""
    override = os.environ.get("TRADEJOURNAL_CONFIG")
    if override:
        return Path(override).expanduser()
    return DEFAULT_CONFIG_PATH


def _merge(base: dict, overrides: dict) -> dict:
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[Path] = None) -> dict:
    """Load configuration merged over the defaults.

    Args:
        config_path: Explicit file to read. Defaults to get_config_path().

    Returns:
        Configuration dictionary.
    """
    path = config_path or get_config_path()

    if not path.exists():
        return copy.deepcopy(DEFAULTS)

    try:
        return _merge(DEFAULTS, toml.load(path))
    except toml.TomlDecodeError as e:
        logger.warning("Ignoring unreadable config file %s: %s", path, e)
        return copy.deepcopy(DEFAULTS)


def create_template_config(config_path: Optional[Path] = None) -> Path:
    """Write a template configuration file.

    Args:
        config_path: Destination. Defaults to get_config_path().

    Returns:
        Path of the written file.
    """
    path = config_path or get_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w") as f:
        toml.dump(DEFAULTS, f)

    return path


def get_db_path(config: dict) -> Path:
    """Database file configured for the journal."""
    return Path(config["journal"]["db_path"]).expanduser()


def get_account_id(config: dict) -> str:
    """Account the journal operates on."""
    return config["journal"]["account_id"]
