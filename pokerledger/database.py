"""SQLite storage for players, games, and settlements."""

import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Any, Generator, Optional

from .constants import DEMO_PLAYERS

logger = logging.getLogger('pokerledger.database')

SCHEMA = [
    """
    CREATE TABLE IF NOT EXISTS players (
        id TEXT PRIMARY KEY,
        name TEXT UNIQUE NOT NULL,
        net_profit REAL DEFAULT 0,
        total_games INTEGER DEFAULT 0,
        total_buyins REAL DEFAULT 0,
        total_cashouts REAL DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS games (
        id TEXT PRIMARY KEY,
        date TEXT NOT NULL,
        total_buyins REAL DEFAULT 0,
        total_cashouts REAL DEFAULT 0,
        discrepancy REAL DEFAULT 0,
        is_completed BOOLEAN DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        updated_at DATETIME DEFAULT CURRENT_TIMESTAMP
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS game_players (
        id TEXT PRIMARY KEY,
        game_id TEXT NOT NULL,
        player_id TEXT NOT NULL,
        buyin REAL DEFAULT 0,
        cashout REAL DEFAULT 0,
        profit REAL DEFAULT 0,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (game_id) REFERENCES games (id) ON DELETE CASCADE,
        FOREIGN KEY (player_id) REFERENCES players (id) ON DELETE CASCADE,
        UNIQUE(game_id, player_id)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS settlements (
        id TEXT PRIMARY KEY,
        from_player_id TEXT NOT NULL,
        to_player_id TEXT NOT NULL,
        from_player_name TEXT NOT NULL,
        to_player_name TEXT NOT NULL,
        amount REAL NOT NULL,
        date TEXT NOT NULL,
        notes TEXT,
        created_at DATETIME DEFAULT CURRENT_TIMESTAMP,
        FOREIGN KEY (from_player_id) REFERENCES players (id) ON DELETE CASCADE,
        FOREIGN KEY (to_player_id) REFERENCES players (id) ON DELETE CASCADE
    )
    """,
    'CREATE INDEX IF NOT EXISTS idx_game_players_game ON game_players(game_id)',
    'CREATE INDEX IF NOT EXISTS idx_game_players_player ON game_players(player_id)',
    'CREATE INDEX IF NOT EXISTS idx_games_date ON games(date)',
    'CREATE INDEX IF NOT EXISTS idx_settlements_from ON settlements(from_player_id)',
    'CREATE INDEX IF NOT EXISTS idx_settlements_to ON settlements(to_player_id)',
]


class LedgerDatabase:
    """
    Single SQLite connection shared by all requests.

    Every read and write goes through transaction(), which holds a lock for
    its duration, so one HTTP server thread at a time touches the connection.
    Using one connection also lets ':memory:' databases work.
    """

    def __init__(self, db_path: str | Path = ':memory:'):
        """
        Open the database.

        Args:
            db_path: Path to SQLite database file, or ':memory:'
        """
        self.db_path = str(db_path)
        if self.db_path != ':memory:':
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        self._lock = threading.RLock()
        self._depth = 0
        self._conn = sqlite3.connect(self.db_path, check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._conn.execute('PRAGMA foreign_keys = ON')
        logger.debug(f'Opened database: {self.db_path}')

    @contextmanager
    def transaction(self) -> Generator[sqlite3.Cursor, None, None]:
        """
        Run statements atomically.

        Commits when the block exits normally, rolls back and re-raises
        otherwise. Nested use joins the outer transaction.

        Yields:
            sqlite3.Cursor: Database cursor
        """
        with self._lock:
            outermost = self._depth == 0
            self._depth += 1
            cursor = self._conn.cursor()
            try:
                yield cursor
                if outermost:
                    self._conn.commit()
            except Exception:
                if outermost:
                    self._conn.rollback()
                raise
            finally:
                cursor.close()
                self._depth -= 1

    def fetch_one(self, query: str, params: tuple = ()) -> Optional[dict[str, Any]]:
        """Run a SELECT and return the first row as a dict, or None."""
        with self.transaction() as cursor:
            cursor.execute(query, params)
            row = cursor.fetchone()
        return dict(row) if row else None

    def fetch_all(self, query: str, params: tuple = ()) -> list[dict[str, Any]]:
        """Run a SELECT and return all rows as dicts."""
        with self.transaction() as cursor:
            cursor.execute(query, params)
            rows = cursor.fetchall()
        return [dict(row) for row in rows]

    def init_schema(self) -> None:
        """Create tables and indexes if they don't exist."""
        with self.transaction() as cursor:
            for statement in SCHEMA:
                cursor.execute(statement)
        logger.info(f'Database tables initialized: {self.db_path}')

    def seed_demo_players(self) -> int:
        """
        Insert the demo roster, skipping players that already exist.

        Returns:
            Number of players inserted
        """
        inserted = 0
        with self.transaction() as cursor:
            for player_id, name in DEMO_PLAYERS:
                cursor.execute(
                    'INSERT OR IGNORE INTO players (id, name) VALUES (?, ?)',
                    (player_id, name),
                )
                inserted += cursor.rowcount
        logger.info(f'Seeded {inserted} demo player(s)')
        return inserted

    def close(self) -> None:
        self._conn.close()


def open_database(db_path: str | Path, seed_demo_data: bool = False) -> LedgerDatabase:
    """
    Open a database and make sure its schema exists.

    Args:
        db_path: Path to SQLite database file, or ':memory:'
        seed_demo_data: Insert the demo players as well

    Returns:
        Ready-to-use LedgerDatabase
    """
    db = LedgerDatabase(db_path)
    db.init_schema()
    if seed_demo_data:
        db.seed_demo_players()
    return db
