"""Player records, running statistics, and settlement-adjusted profit."""

import logging
import uuid
from typing import Any

from .constants import RECENT_GAMES_LIMIT
from .database import LedgerDatabase
from .errors import LedgerError, NotFoundError
from .models import RosterEntry
from .utils import round_money

logger = logging.getLogger('pokerledger.players')

PLAYER_COLUMNS = """
    id, name, net_profit, total_games, total_buyins, total_cashouts,
    created_at, updated_at
"""


def list_players(db: LedgerDatabase) -> list[dict[str, Any]]:
    """All players, ordered by name."""
    return db.fetch_all(f'SELECT {PLAYER_COLUMNS} FROM players ORDER BY name ASC')


def get_player(db: LedgerDatabase, player_id: str) -> dict[str, Any]:
    """
    Get a player by id.

    Raises:
        NotFoundError: If no player has this id
    """
    player = db.fetch_one(f'SELECT {PLAYER_COLUMNS} FROM players WHERE id = ?', (player_id,))
    if not player:
        raise NotFoundError('Player not found')
    return player


def get_roster(db: LedgerDatabase) -> list[RosterEntry]:
    """Snapshot of existing players for name matching, ordered by name."""
    rows = db.fetch_all('SELECT id, name FROM players ORDER BY name')
    return [RosterEntry(id=row['id'], name=row['name']) for row in rows]


def find_player_by_name(db: LedgerDatabase, name: str) -> dict[str, Any] | None:
    return db.fetch_one('SELECT id, name FROM players WHERE name = ?', (name,))


def insert_player(db: LedgerDatabase, cursor, name: str) -> str:
    """Insert a player inside the caller's transaction and return its id."""
    if find_player_by_name(db, name):
        raise LedgerError(f'Player with this name already exists: {name}')
    player_id = str(uuid.uuid4())
    cursor.execute('INSERT INTO players (id, name) VALUES (?, ?)', (player_id, name))
    return player_id


def create_player(db: LedgerDatabase, name: str) -> dict[str, Any]:
    """
    Create a player with zeroed statistics.

    Args:
        db: Ledger database
        name: Display name, unique across players

    Returns:
        The new player row

    Raises:
        LedgerError: If the name is blank or already taken
    """
    name = name.strip()
    if not name:
        raise LedgerError('Player name is required')

    with db.transaction() as cursor:
        player_id = insert_player(db, cursor, name)

    logger.info(f'Created player {name} ({player_id})')
    return get_player(db, player_id)


def update_player(db: LedgerDatabase, player_id: str, name: str) -> dict[str, Any]:
    """
    Rename a player.

    Raises:
        NotFoundError: If the player doesn't exist
        LedgerError: If another player already has the name
    """
    name = name.strip()
    if not name:
        raise LedgerError('Player name is required')

    with db.transaction() as cursor:
        get_player(db, player_id)
        taken = db.fetch_one(
            'SELECT id FROM players WHERE name = ? AND id != ?', (name, player_id)
        )
        if taken:
            raise LedgerError('Player with this name already exists')
        cursor.execute(
            'UPDATE players SET name = ?, updated_at = CURRENT_TIMESTAMP WHERE id = ?',
            (name, player_id),
        )

    return get_player(db, player_id)


def delete_player(db: LedgerDatabase, player_id: str) -> None:
    """
    Delete a player that has no game records.

    Settlements involving the player are removed with them.

    Raises:
        NotFoundError: If the player doesn't exist
        LedgerError: If the player has played in any game
    """
    with db.transaction() as cursor:
        player = get_player(db, player_id)
        has_games = db.fetch_one(
            'SELECT id FROM game_players WHERE player_id = ? LIMIT 1', (player_id,)
        )
        if has_games:
            raise LedgerError(
                'Cannot delete player with game records. Please remove all game records first.'
            )
        cursor.execute('DELETE FROM players WHERE id = ?', (player_id,))

    logger.info(f'Deleted player {player["name"]} ({player_id})')


def apply_game_result(
    cursor,
    player_id: str,
    buyin: float,
    cashout: float,
    profit: float,
    games_delta: int = 1,
) -> None:
    """
    Add one game's amounts to a player's running totals.

    Pass negated amounts and games_delta=-1 to remove a game again.
    """
    cursor.execute(
        """
        UPDATE players SET
            net_profit = net_profit + ?,
            total_games = total_games + ?,
            total_buyins = total_buyins + ?,
            total_cashouts = total_cashouts + ?,
            updated_at = CURRENT_TIMESTAMP
        WHERE id = ?
        """,
        (profit, games_delta, buyin, cashout, player_id),
    )


def calculate_streak(profits: list[float]) -> dict[str, Any]:
    """
    Current win/loss streak from profits ordered most recent first.

    A game counts as a win when profit > 0; break-even continues a losing
    streak.
    """
    count = 0
    is_winning = None
    for profit in profits:
        won = profit > 0
        if is_winning is None:
            is_winning = won
            count = 1
        elif won == is_winning:
            count += 1
        else:
            break

    if is_winning is None:
        return {'count': 0, 'type': 'none'}
    return {'count': count, 'type': 'winning' if is_winning else 'losing'}


def get_player_stats(
    db: LedgerDatabase,
    player_id: str,
    recent_limit: int = RECENT_GAMES_LIMIT,
) -> dict[str, Any]:
    """
    Player totals with recent games and current streak.

    Args:
        db: Ledger database
        player_id: Player id
        recent_limit: Number of recent games to include

    Returns:
        Player row plus `recentGames` and `currentStreak`
    """
    player = get_player(db, player_id)

    recent_games = db.fetch_all(
        """
        SELECT g.id, g.date, g.is_completed, gp.buyin, gp.cashout, gp.profit
        FROM games g
        JOIN game_players gp ON g.id = gp.game_id
        WHERE gp.player_id = ?
        ORDER BY g.date DESC, g.created_at DESC
        LIMIT ?
        """,
        (player_id, recent_limit),
    )
    for game in recent_games:
        game['is_completed'] = bool(game['is_completed'])

    completed = db.fetch_all(
        """
        SELECT gp.profit
        FROM game_players gp
        JOIN games g ON gp.game_id = g.id
        WHERE gp.player_id = ? AND g.is_completed = 1
        ORDER BY g.date DESC, g.created_at DESC
        """,
        (player_id,),
    )

    return {
        **player,
        'recentGames': recent_games,
        'currentStreak': calculate_streak([row['profit'] for row in completed]),
    }


def _settlement_summary(player: dict[str, Any], settlements: list[dict[str, Any]]) -> dict[str, Any]:
    impact = 0.0
    count = 0
    for settlement in settlements:
        if settlement['from_player_id'] == player['id']:
            # Paying reduces what the player still owes
            impact += settlement['amount']
            count += 1
        elif settlement['to_player_id'] == player['id']:
            impact -= settlement['amount']
            count += 1

    game_net_profit = player['net_profit'] or 0.0
    return {
        'player_id': player['id'],
        'game_net_profit': game_net_profit,
        'settlement_impact': round_money(impact),
        'true_net_profit': round_money(game_net_profit + impact),
        'settlements_count': count,
    }


def get_net_profit(db: LedgerDatabase, player_id: str) -> dict[str, Any]:
    """
    Game profit adjusted for settlements.

    A settlement the player paid adds its amount, one they received subtracts
    it, so a fully settled player ends at zero.

    Raises:
        NotFoundError: If the player doesn't exist
    """
    player = get_player(db, player_id)
    settlements = db.fetch_all(
        """
        SELECT from_player_id, to_player_id, amount
        FROM settlements
        WHERE from_player_id = ? OR to_player_id = ?
        """,
        (player_id, player_id),
    )
    return _settlement_summary(player, settlements)


def get_all_net_profits(db: LedgerDatabase) -> list[dict[str, Any]]:
    """Settlement-adjusted profit for every player, ordered by name."""
    players = list_players(db)
    settlements = db.fetch_all('SELECT from_player_id, to_player_id, amount FROM settlements')

    by_player: dict[str, list[dict[str, Any]]] = {}
    for settlement in settlements:
        by_player.setdefault(settlement['from_player_id'], []).append(settlement)
        by_player.setdefault(settlement['to_player_id'], []).append(settlement)

    return [_settlement_summary(p, by_player.get(p['id'], [])) for p in players]
