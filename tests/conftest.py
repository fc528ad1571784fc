"""Shared fixtures for ledger tests."""

import pytest

from pokerledger.config import clear_config_cache
from pokerledger.database import open_database
from pokerledger.players import create_player


@pytest.fixture(autouse=True)
def default_config(monkeypatch):
    """Run every test against the bundled config file."""
    monkeypatch.delenv('POKER_LEDGER_CONFIG', raising=False)
    monkeypatch.delenv('POKER_LEDGER_DB', raising=False)
    clear_config_cache()
    yield
    clear_config_cache()


@pytest.fixture
def db():
    """Empty in-memory ledger."""
    database = open_database(':memory:')
    yield database
    database.close()


@pytest.fixture
def seeded_db():
    """In-memory ledger with the demo roster (Alice, Bob, Charlie, Diana)."""
    database = open_database(':memory:', seed_demo_data=True)
    yield database
    database.close()


@pytest.fixture
def players(db):
    """Three players created through the service layer, keyed by name."""
    return {name: create_player(db, name) for name in ('Alice', 'Bob', 'Charlie')}
