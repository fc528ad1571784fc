"""Create games from pasted results.

Two steps, mirroring the import dialog: parse_results turns text into a
preview and a roster match for the user to confirm, create_from_results
writes the confirmed rows as a game.
"""

import datetime as dt
import logging
from typing import Any, Optional

from .config import get_config, get_match_settings
from .database import LedgerDatabase
from .errors import BulkValidationError, LedgerError
from .games import get_game, insert_game
from .models import ParsedEntry
from .name_matcher import match_players
from .players import get_roster, insert_player
from .text_parser import (
    convert_profit_to_buyin_cashout,
    generate_preview,
    parse_text,
    validate_parsed_data,
)
from .utils import round_money

logger = logging.getLogger('pokerledger.bulk_import')


def parse_results(
    db: LedgerDatabase,
    text: str,
    game_date: Optional[dt.date] = None,
) -> dict[str, Any]:
    """
    Parse pasted results and match the names against existing players.

    The roster is read fresh on every call.

    Args:
        db: Ledger database
        text: Pasted results, one player per line
        game_date: Date for the preview (default: today)

    Returns:
        Dict with success, preview, matching, and validation sections

    Raises:
        BulkValidationError: If the parsed entries have validation errors
    """
    config = get_config()
    entries = parse_text(text)
    validation = validate_parsed_data(entries, tolerance=config.balance_tolerance)
    if not validation.is_valid:
        logger.warning(f'Rejected pasted results: {validation.errors}')
        raise BulkValidationError(validation.errors, validation.warnings)

    matching = match_players(entries, get_roster(db), **get_match_settings())
    preview = generate_preview(entries)

    logger.info(
        f'Parsed {preview.player_count} players: {len(matching.matched)} matched, '
        f'{len(matching.unmatched)} unmatched'
    )
    return {
        'success': True,
        'preview': {
            **preview.to_dict(),
            'gameDate': (game_date or dt.date.today()).isoformat(),
        },
        'matching': matching.to_dict(),
        'validation': {'errors': validation.errors, 'warnings': validation.warnings},
    }


def create_from_results(
    db: LedgerDatabase,
    game_date: dt.date | str,
    players: list[dict[str, Any]],
    create_new_players: bool = True,
) -> dict[str, Any]:
    """
    Record a game from confirmed name/profit rows.

    Rows with a playerId use that player; rows without one create a new
    player when create_new_players is set. Profit is split into buy-in and
    cash-out the same way as in the preview. Everything is written in one
    transaction.

    Args:
        db: Ledger database
        game_date: Date the game was played
        players: Dicts with name, profit, and optional playerId
        create_new_players: Create players for rows without a playerId

    Returns:
        Dict with success, game (including players), newPlayersCreated, summary

    Raises:
        BulkValidationError: If the rows fail validation
        LedgerError: If a row can't be resolved to a player
    """
    entries = [ParsedEntry(name=p['name'], profit=p['profit']) for p in players]
    validation = validate_parsed_data(entries, tolerance=get_config().balance_tolerance)
    if not validation.is_valid:
        raise BulkValidationError(validation.errors, validation.warnings)

    new_players = []
    rows = []
    with db.transaction() as cursor:
        for player in players:
            player_id = player.get('playerId')
            if not player_id:
                if not create_new_players:
                    raise LedgerError(
                        f'Player "{player["name"]}" not found and createNewPlayers is false'
                    )
                player_id = insert_player(db, cursor, player['name'])
                new_players.append({'id': player_id, 'name': player['name']})

            buyin, cashout = convert_profit_to_buyin_cashout(player['profit'])
            rows.append({'player_id': player_id, 'buyin': buyin, 'cashout': cashout})

        game_id = insert_game(db, cursor, game_date, rows)

    game = get_game(db, game_id)
    total_buyins = round_money(sum(r['buyin'] for r in rows))
    total_cashouts = round_money(sum(r['cashout'] for r in rows))

    logger.info(
        f'Imported game {game_id} on {game_date}: {len(rows)} players, '
        f'{len(new_players)} new'
    )
    return {
        'success': True,
        'game': game,
        'newPlayersCreated': new_players,
        'summary': {
            'totalPlayers': len(rows),
            'totalBuyins': total_buyins,
            'totalCashouts': total_cashouts,
            'discrepancy': round_money(total_cashouts - total_buyins),
            'newPlayersCount': len(new_players),
        },
    }


def rows_from_preview(result: dict[str, Any]) -> list[dict[str, Any]]:
    """
    Confirmed rows that accept every match of a parse preview.

    Matched names take the existing player's id and name; unmatched names
    are left without a playerId so they become new players.
    """
    rows = [
        {
            'name': m['existingPlayer']['name'],
            'profit': m['profit'],
            'playerId': m['existingPlayer']['id'],
        }
        for m in result['matching']['matched']
    ]
    rows.extend(
        {'name': u['parsedName'], 'profit': u['profit']} for u in result['matching']['unmatched']
    )
    return rows
