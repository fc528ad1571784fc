"""Consistency checks between stored totals and the rows they summarize."""

from typing import Any

from .constants import CONSISTENCY_TOLERANCE
from .database import LedgerDatabase


def _differs(stored: float | None, computed: float) -> bool:
    return abs((stored or 0.0) - computed) > CONSISTENCY_TOLERANCE


def validate_game_totals(game: dict[str, Any], rows: list[dict[str, Any]]) -> list[str]:
    """
    Check a game's stored totals against its player rows.

    Checks:
    - total_buyins and total_cashouts equal the sums of the rows
    - discrepancy equals total_cashouts - total_buyins
    - each row's profit equals cashout - buyin

    Args:
        game: Game row
        rows: The game's player rows (buyin, cashout, profit)

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []
    label = f'Game {game["date"]} ({game["id"]})'

    buyins = sum(r['buyin'] for r in rows)
    cashouts = sum(r['cashout'] for r in rows)

    if _differs(game['total_buyins'], buyins):
        errors.append(f'{label} total buy-ins {game["total_buyins"]:.2f} != rows {buyins:.2f}')
    if _differs(game['total_cashouts'], cashouts):
        errors.append(
            f'{label} total cash-outs {game["total_cashouts"]:.2f} != rows {cashouts:.2f}'
        )
    if _differs(game['discrepancy'], game['total_cashouts'] - game['total_buyins']):
        errors.append(f'{label} discrepancy {game["discrepancy"]:.2f} does not match its totals')

    for row in rows:
        if _differs(row['profit'], row['cashout'] - row['buyin']):
            name = row.get('player_name', row.get('player_id'))
            errors.append(f'{label} has wrong profit for {name}: {row["profit"]:.2f}')

    return errors


def validate_player_totals(player: dict[str, Any], rows: list[dict[str, Any]]) -> list[str]:
    """
    Check a player's running totals against their game rows.

    Args:
        player: Player row
        rows: Every game row of the player (buyin, cashout, profit)

    Returns:
        List of validation error messages (empty if valid)
    """
    errors = []

    if player['total_games'] != len(rows):
        errors.append(f'{player["name"]} has total_games {player["total_games"]}, played {len(rows)}')

    for field, column in (
        ('net_profit', 'profit'),
        ('total_buyins', 'buyin'),
        ('total_cashouts', 'cashout'),
    ):
        computed = sum(r[column] for r in rows)
        if _differs(player[field], computed):
            errors.append(f'{player["name"]} {field} {player[field]:.2f} != games {computed:.2f}')

    return errors


def validate_ledger(db: LedgerDatabase) -> tuple[list[str], list[str]]:
    """
    Validate every game and player in the ledger.

    Args:
        db: Ledger database

    Returns:
        Tuple of (errors, warnings)
        - errors: Stored totals that disagree with the underlying rows
        - warnings: Games whose cash-outs and buy-ins don't balance
    """
    errors: list[str] = []
    warnings: list[str] = []

    rows = db.fetch_all(
        """
        SELECT gp.game_id, gp.player_id, p.name AS player_name, gp.buyin, gp.cashout, gp.profit
        FROM game_players gp
        JOIN players p ON gp.player_id = p.id
        """
    )
    by_game: dict[str, list[dict[str, Any]]] = {}
    by_player: dict[str, list[dict[str, Any]]] = {}
    for row in rows:
        by_game.setdefault(row['game_id'], []).append(row)
        by_player.setdefault(row['player_id'], []).append(row)

    games = db.fetch_all(
        'SELECT id, date, total_buyins, total_cashouts, discrepancy FROM games ORDER BY date'
    )
    for game in games:
        errors.extend(validate_game_totals(game, by_game.get(game['id'], [])))
        if abs(game['discrepancy'] or 0.0) > CONSISTENCY_TOLERANCE:
            warnings.append(
                f'Game {game["date"]} ({game["id"]}) is unbalanced by {game["discrepancy"]:.2f}'
            )

    players = db.fetch_all(
        'SELECT id, name, net_profit, total_games, total_buyins, total_cashouts FROM players ORDER BY name'
    )
    for player in players:
        errors.extend(validate_player_totals(player, by_player.get(player['id'], [])))

    return errors, warnings
