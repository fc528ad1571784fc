"""Tests for the poker_ledger command line."""

import logging

import pytest

import poker_ledger
from pokerledger.config import clear_config_cache
from pokerledger.database import open_database
from pokerledger.games import list_games
from pokerledger.logging_config import setup_logging
from pokerledger.utils import load_json


@pytest.fixture(autouse=True)
def reset_logging():
    """Remove the handlers main() installs."""
    yield
    logging.getLogger('pokerledger').handlers = []


@pytest.fixture
def ledger_path(tmp_path, monkeypatch):
    """Point the CLI at a fresh database file."""
    path = tmp_path / 'ledger.db'
    monkeypatch.setenv('POKER_LEDGER_DB', str(path))
    clear_config_cache()
    return path


@pytest.fixture
def results_file(tmp_path):
    path = tmp_path / 'results.txt'
    path.write_text('Alice: +40\nBob: -25\nCharlie -15\n')
    return path


def run(*argv):
    return poker_ledger.main(['--no-log-file', *argv])


class TestCli:
    """Tests for the CLI subcommands against a file database."""

    def test_preview_writes_nothing(self, ledger_path, results_file, tmp_path, capsys):
        out = tmp_path / 'preview.json'
        assert run('preview', str(results_file), '--date', '2026-10-10', '--json', str(out)) == 0
        assert 'Players: 3' in capsys.readouterr().out
        assert load_json(out)['preview']['gameDate'] == '2026-10-10'

        db = open_database(ledger_path)
        assert list_games(db) == []
        db.close()

    def test_import_then_check(self, ledger_path, results_file, capsys):
        assert run('import', str(results_file), '--date', '2026-10-10') == 0
        assert '3 players, 3 new' in capsys.readouterr().out

        assert run('check') == 0
        assert 'consistent' in capsys.readouterr().out

        db = open_database(ledger_path)
        assert [g['date'] for g in list_games(db)] == ['2026-10-10']
        db.close()

    def test_import_refuses_new_players(self, ledger_path, results_file, capsys):
        assert run('import', str(results_file), '--no-create') == 1
        assert 'createNewPlayers is false' in capsys.readouterr().out

    def test_invalid_results(self, ledger_path, tmp_path, capsys):
        bad = tmp_path / 'bad.txt'
        bad.write_text('nothing useful\n')
        assert run('preview', str(bad)) == 1
        assert 'No valid player data found' in capsys.readouterr().out

    def test_export(self, ledger_path, results_file, tmp_path):
        run('import', str(results_file))
        out = tmp_path / 'ledger.xlsx'
        assert run('export', str(out)) == 0
        assert out.exists()


class TestSetupLogging:
    """Tests for the logging handlers."""

    def test_file_and_console(self, tmp_path):
        logger = setup_logging(log_dir=tmp_path / 'logs')
        assert len(logger.handlers) == 2

        logging.getLogger('pokerledger.games').info('Created game g1')
        for handler in logger.handlers:
            handler.flush()
        (log_file,) = (tmp_path / 'logs').glob('pokerledger_*.log')
        assert 'pokerledger.games - INFO' in log_file.read_text()

    def test_console_only(self, tmp_path):
        logger = setup_logging(level=logging.DEBUG, log_to_file=False, log_dir=tmp_path / 'logs')
        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert not (tmp_path / 'logs').exists()
