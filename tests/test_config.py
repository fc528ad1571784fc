"""Tests for configuration loading and JSON helpers."""

import json

import pytest

from pokerledger.config import (
    clear_config_cache,
    get_config,
    get_database_path,
    get_match_settings,
)
from pokerledger.schemas import LedgerConfig
from pokerledger.utils import load_json, round_money, save_json


def write_config(path, **overrides):
    data = {'database_path': 'ledger.db', **overrides}
    path.write_text(json.dumps(data))
    return path


class TestGetConfig:
    """Tests for the cached config loader."""

    def test_bundled_defaults(self):
        config = get_config()
        assert config.match_threshold == 0.7
        assert config.suggestion_threshold == 0.3
        assert config.max_suggestions == 3
        assert config.balance_tolerance == 0.01
        assert config.port == 5001
        assert get_match_settings() == {'threshold': 0.7, 'suggestion_threshold': 0.3, 'max_suggestions': 3}

    def test_cached(self):
        assert get_config() is get_config()

    def test_config_file_override(self, tmp_path, monkeypatch):
        path = write_config(tmp_path / 'config.json', match_threshold=0.8, port=6000)
        monkeypatch.setenv('POKER_LEDGER_CONFIG', str(path))
        clear_config_cache()

        config = get_config()
        assert config.match_threshold == 0.8
        assert config.port == 6000
        assert config.suggestion_threshold == 0.3

    def test_database_override(self, monkeypatch):
        monkeypatch.setenv('POKER_LEDGER_DB', '/tmp/other.db')
        clear_config_cache()
        assert get_database_path() == '/tmp/other.db'

    def test_invalid_thresholds(self, tmp_path, monkeypatch):
        """Test the suggestion bar may not sit above the match bar."""
        path = write_config(tmp_path / 'config.json', match_threshold=0.5, suggestion_threshold=0.6)
        monkeypatch.setenv('POKER_LEDGER_CONFIG', str(path))
        clear_config_cache()
        with pytest.raises(ValueError, match='exceeds match_threshold'):
            get_config()

    def test_unknown_setting(self, tmp_path, monkeypatch):
        path = write_config(tmp_path / 'config.json', colour='green')
        monkeypatch.setenv('POKER_LEDGER_CONFIG', str(path))
        clear_config_cache()
        with pytest.raises(ValueError):
            get_config()

    def test_missing_file(self, tmp_path, monkeypatch):
        monkeypatch.setenv('POKER_LEDGER_CONFIG', str(tmp_path / 'missing.json'))
        clear_config_cache()
        with pytest.raises(FileNotFoundError):
            get_config()


class TestJsonHelpers:
    """Tests for load_json/save_json."""

    def test_save_and_load(self, tmp_path):
        path = tmp_path / 'nested' / 'preview.json'
        save_json(path, {'players': [{'name': 'Zoë', 'profit': -5}]})
        assert load_json(path) == {'players': [{'name': 'Zoë', 'profit': -5}]}

    def test_save_model(self, tmp_path):
        path = tmp_path / 'config.json'
        save_json(path, LedgerConfig(database_path='x.db'))
        assert load_json(path, schema=LedgerConfig).database_path == 'x.db'

    def test_malformed_json(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text('{not json')
        with pytest.raises(json.JSONDecodeError):
            load_json(path)


class TestRoundMoney:
    def test_rounds_to_cents(self):
        assert round_money(10.004) == 10.0
        assert round_money(3.14159) == 3.14

    def test_no_negative_zero(self):
        assert str(round_money(-0.001)) == '0.0'
