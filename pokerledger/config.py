"""Ledger configuration management."""

import os
from functools import lru_cache
from pathlib import Path

from .schemas import LedgerConfig
from .utils import load_json

DEFAULT_CONFIG_PATH = Path(__file__).parent.parent / 'data' / 'ledger_config.json'


@lru_cache(maxsize=1)
def get_config() -> LedgerConfig:
    """
    Load ledger configuration.

    Reads the file named by POKER_LEDGER_CONFIG, or data/ledger_config.json
    by default. POKER_LEDGER_DB, when set, replaces the database path.
    Configuration is cached after first load.

    Returns:
        LedgerConfig object with validated settings

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file has invalid structure

    Example:
        from pokerledger.config import get_config
        config = get_config()
        print(f"Database: {config.database_path}")
    """
    config_path = os.environ.get('POKER_LEDGER_CONFIG') or DEFAULT_CONFIG_PATH
    config = load_json(config_path, schema=LedgerConfig)

    db_override = os.environ.get('POKER_LEDGER_DB')
    if db_override:
        config = config.model_copy(update={'database_path': db_override})
    return config


def get_database_path() -> str:
    """Get the SQLite database path from config."""
    return get_config().database_path


def get_match_settings() -> dict[str, float]:
    """Get fuzzy matching thresholds as keyword arguments for match_players."""
    config = get_config()
    return {
        'threshold': config.match_threshold,
        'suggestion_threshold': config.suggestion_threshold,
        'max_suggestions': config.max_suggestions,
    }


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file or environment changes during runtime.
    """
    get_config.cache_clear()
