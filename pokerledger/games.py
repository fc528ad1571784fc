"""Games, the players in them, and game-level totals.

Every change to a game's players keeps two sets of numbers in step: the
game's totals (buy-ins, cash-outs, discrepancy) and each player's running
totals in the players table.
"""

import datetime as dt
import logging
import uuid
from typing import Any, Optional

from .constants import OVERVIEW_RECENT_LIMIT
from .database import LedgerDatabase
from .errors import LedgerError, NotFoundError
from .players import apply_game_result, get_player

logger = logging.getLogger('pokerledger.games')

GAME_COLUMNS = """
    id, date, total_buyins, total_cashouts, discrepancy,
    is_completed, created_at, updated_at
"""


def _game_row(row: dict[str, Any]) -> dict[str, Any]:
    row['is_completed'] = bool(row['is_completed'])
    return row


def list_games(db: LedgerDatabase, player_id: Optional[str] = None) -> list[dict[str, Any]]:
    """
    Games with their player counts, newest first.

    Args:
        db: Ledger database
        player_id: Only games this player took part in

    Returns:
        List of game rows with `player_count`
    """
    query = """
        SELECT g.id, g.date, g.total_buyins, g.total_cashouts, g.discrepancy,
            g.is_completed, g.created_at, g.updated_at,
            (SELECT COUNT(*) FROM game_players gp2 WHERE gp2.game_id = g.id) AS player_count
        FROM games g
    """
    params: tuple = ()
    if player_id:
        query += ' WHERE g.id IN (SELECT game_id FROM game_players WHERE player_id = ?)'
        params = (player_id,)
    query += ' ORDER BY g.date DESC, g.created_at DESC'

    games = [_game_row(row) for row in db.fetch_all(query, params)]
    logger.debug(f'Listing {len(games)} games (player filter: {player_id})')
    return games


def get_game_players(db: LedgerDatabase, game_id: str) -> list[dict[str, Any]]:
    """Players of a game with their amounts, ordered by name."""
    return db.fetch_all(
        """
        SELECT gp.id, gp.buyin, gp.cashout, gp.profit,
            p.id AS player_id, p.name AS player_name
        FROM game_players gp
        JOIN players p ON gp.player_id = p.id
        WHERE gp.game_id = ?
        ORDER BY p.name ASC
        """,
        (game_id,),
    )


def _fetch_game(db: LedgerDatabase, game_id: str) -> dict[str, Any]:
    game = db.fetch_one(f'SELECT {GAME_COLUMNS} FROM games WHERE id = ?', (game_id,))
    if not game:
        raise NotFoundError('Game not found')
    return _game_row(game)


def get_game(db: LedgerDatabase, game_id: str) -> dict[str, Any]:
    """
    Get a game with its players.

    Raises:
        NotFoundError: If the game doesn't exist
    """
    game = _fetch_game(db, game_id)
    game['players'] = get_game_players(db, game_id)
    return game


def recalculate_game_totals(db: LedgerDatabase, cursor, game_id: str) -> None:
    """Recompute a game's totals from its player rows."""
    totals = db.fetch_one(
        """
        SELECT COALESCE(SUM(buyin), 0) AS total_buyins,
            COALESCE(SUM(cashout), 0) AS total_cashouts
        FROM game_players
        WHERE game_id = ?
        """,
        (game_id,),
    )
    discrepancy = totals['total_cashouts'] - totals['total_buyins']
    cursor.execute(
        """
        UPDATE games
        SET total_buyins = ?, total_cashouts = ?, discrepancy = ?, updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
        """,
        (totals['total_buyins'], totals['total_cashouts'], discrepancy, game_id),
    )


def insert_game(
    db: LedgerDatabase,
    cursor,
    game_date: dt.date | str,
    players: list[dict[str, Any]],
) -> str:
    """
    Write a game and its player rows inside the caller's transaction.

    Args:
        db: Ledger database
        cursor: Cursor of the open transaction
        game_date: Date the game was played
        players: Dicts with player_id, buyin, cashout (profit is derived)

    Returns:
        Id of the new game

    Raises:
        LedgerError: If a player appears twice or doesn't exist
    """
    player_ids = [p['player_id'] for p in players]
    duplicates = sorted({pid for pid in player_ids if player_ids.count(pid) > 1})
    if duplicates:
        raise LedgerError(f'Players listed more than once: {", ".join(duplicates)}')

    for player_id in player_ids:
        if not db.fetch_one('SELECT id FROM players WHERE id = ?', (player_id,)):
            raise LedgerError('One or more players not found')

    total_buyins = sum(p['buyin'] for p in players)
    total_cashouts = sum(p['cashout'] for p in players)

    game_id = str(uuid.uuid4())
    cursor.execute(
        """
        INSERT INTO games (id, date, total_buyins, total_cashouts, discrepancy)
        VALUES (?, ?, ?, ?, ?)
        """,
        (game_id, str(game_date), total_buyins, total_cashouts, total_cashouts - total_buyins),
    )

    for player in players:
        profit = player['cashout'] - player['buyin']
        cursor.execute(
            """
            INSERT INTO game_players (id, game_id, player_id, buyin, cashout, profit)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (str(uuid.uuid4()), game_id, player['player_id'], player['buyin'], player['cashout'], profit),
        )
        apply_game_result(cursor, player['player_id'], player['buyin'], player['cashout'], profit)

    return game_id


def create_game(db: LedgerDatabase, game_date: dt.date | str, players: list[dict[str, Any]]) -> dict[str, Any]:
    """
    Record a game from explicit buy-ins and cash-outs.

    Args:
        db: Ledger database
        game_date: Date the game was played
        players: Dicts with player_id, buyin, cashout

    Returns:
        The new game row (without players)
    """
    if not players:
        raise LedgerError('At least one player is required')

    with db.transaction() as cursor:
        game_id = insert_game(db, cursor, game_date, players)

    logger.info(f'Created game {game_id} on {game_date} with {len(players)} players')
    return _fetch_game(db, game_id)


def update_game(
    db: LedgerDatabase,
    game_id: str,
    game_date: dt.date | str | None = None,
    is_completed: bool | None = None,
) -> dict[str, Any]:
    """
    Change a game's date or completion flag.

    Raises:
        NotFoundError: If the game doesn't exist
        LedgerError: If neither field is given
    """
    fields = []
    values: list[Any] = []
    if game_date is not None:
        fields.append('date = ?')
        values.append(str(game_date))
    if is_completed is not None:
        fields.append('is_completed = ?')
        values.append(1 if is_completed else 0)

    with db.transaction() as cursor:
        _fetch_game(db, game_id)
        if not fields:
            raise LedgerError('No fields to update')
        fields.append('updated_at = CURRENT_TIMESTAMP')
        cursor.execute(f'UPDATE games SET {", ".join(fields)} WHERE id = ?', (*values, game_id))

    return _fetch_game(db, game_id)


def delete_game(db: LedgerDatabase, game_id: str) -> None:
    """
    Delete a game and take its amounts back out of each player's totals.

    Raises:
        NotFoundError: If the game doesn't exist
    """
    with db.transaction() as cursor:
        _fetch_game(db, game_id)
        rows = db.fetch_all(
            'SELECT player_id, buyin, cashout, profit FROM game_players WHERE game_id = ?',
            (game_id,),
        )
        for row in rows:
            apply_game_result(
                cursor, row['player_id'], -row['buyin'], -row['cashout'], -row['profit'], games_delta=-1
            )
        cursor.execute('DELETE FROM game_players WHERE game_id = ?', (game_id,))
        cursor.execute('DELETE FROM games WHERE id = ?', (game_id,))

    logger.info(f'Deleted game {game_id}, reversed totals for {len(rows)} players')


def add_player_to_game(
    db: LedgerDatabase,
    game_id: str,
    player_id: str,
    buyin: float,
    cashout: float,
) -> dict[str, Any]:
    """
    Add a player to an existing game.

    Raises:
        NotFoundError: If the game or player doesn't exist
        LedgerError: If the player is already in the game
    """
    profit = cashout - buyin

    with db.transaction() as cursor:
        _fetch_game(db, game_id)
        player = get_player(db, player_id)
        existing = db.fetch_one(
            'SELECT id FROM game_players WHERE game_id = ? AND player_id = ?', (game_id, player_id)
        )
        if existing:
            raise LedgerError('Player is already in this game')

        game_player_id = str(uuid.uuid4())
        cursor.execute(
            """
            INSERT INTO game_players (id, game_id, player_id, buyin, cashout, profit)
            VALUES (?, ?, ?, ?, ?, ?)
            """,
            (game_player_id, game_id, player_id, buyin, cashout, profit),
        )
        apply_game_result(cursor, player_id, buyin, cashout, profit)
        recalculate_game_totals(db, cursor, game_id)

    return {
        'id': game_player_id,
        'player_id': player_id,
        'player_name': player['name'],
        'buyin': buyin,
        'cashout': cashout,
        'profit': profit,
    }


def update_game_player(
    db: LedgerDatabase,
    game_id: str,
    player_id: str,
    buyin: float,
    cashout: float,
) -> dict[str, Any]:
    """
    Change a player's amounts in a game.

    The player's running totals move by the difference between the old and
    new amounts.

    Raises:
        NotFoundError: If the player is not in the game
    """
    profit = cashout - buyin

    with db.transaction() as cursor:
        old = db.fetch_one(
            'SELECT buyin, cashout, profit FROM game_players WHERE game_id = ? AND player_id = ?',
            (game_id, player_id),
        )
        if not old:
            raise NotFoundError('Player not found in this game')

        cursor.execute(
            """
            UPDATE game_players SET buyin = ?, cashout = ?, profit = ?
            WHERE game_id = ? AND player_id = ?
            """,
            (buyin, cashout, profit, game_id, player_id),
        )
        recalculate_game_totals(db, cursor, game_id)
        apply_game_result(
            cursor,
            player_id,
            buyin - old['buyin'],
            cashout - old['cashout'],
            profit - old['profit'],
            games_delta=0,
        )

    return {'player_id': player_id, 'buyin': buyin, 'cashout': cashout, 'profit': profit}


def get_game_overview(db: LedgerDatabase, recent_limit: int = OVERVIEW_RECENT_LIMIT) -> dict[str, Any]:
    """Totals across all games plus the most recent ones."""
    stats = db.fetch_one(
        """
        SELECT
            COUNT(*) AS total_games,
            COALESCE(SUM(CASE WHEN is_completed = 1 THEN 1 ELSE 0 END), 0) AS completed_games,
            COALESCE(SUM(total_buyins), 0) AS total_buyins,
            COALESCE(SUM(total_cashouts), 0) AS total_cashouts,
            AVG(discrepancy) AS avg_discrepancy,
            MAX(date) AS last_game_date
        FROM games
        """
    )
    recent = db.fetch_all(
        """
        SELECT id, date, total_buyins, total_cashouts, discrepancy, is_completed
        FROM games
        ORDER BY date DESC, created_at DESC
        LIMIT ?
        """,
        (recent_limit,),
    )
    return {**stats, 'recentGames': [_game_row(r) for r in recent]}
