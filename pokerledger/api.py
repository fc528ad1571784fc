"""JSON API routes and request dispatch.

Handlers take (db, params, body, query) and return (status, data). The HTTP
layer in server.py only decodes requests and encodes responses, so every
route can be exercised directly through dispatch().
"""

import datetime as dt
import logging
import re
from typing import Any, Callable

from pydantic import ValidationError

from . import bulk_import, games, players, settlements
from .config import get_config
from .database import LedgerDatabase
from .errors import BulkValidationError, LedgerError, NotFoundError
from .schemas import (
    BulkCreateRequest,
    BulkParseRequest,
    GameCreate,
    GamePlayerAmounts,
    GamePlayerInput,
    GameUpdate,
    PlayerInput,
    SettlementCreate,
    SettlementUpdate,
)

logger = logging.getLogger('pokerledger.api')

Response = tuple[int, Any]
Handler = Callable[[LedgerDatabase, dict[str, str], Any, dict[str, str]], Response]


def _validation_messages(e: ValidationError) -> list[str]:
    messages = []
    for err in e.errors():
        loc = '.'.join(str(part) for part in err['loc'])
        messages.append(f'{loc}: {err["msg"]}' if loc else err['msg'])
    return messages


# Health

def health(db, params, body, query) -> Response:
    return 200, {
        'status': 'OK',
        'timestamp': dt.datetime.now(dt.timezone.utc).isoformat(),
        'database': db.db_path,
    }


# Players

def list_players(db, params, body, query) -> Response:
    return 200, players.list_players(db)


def create_player(db, params, body, query) -> Response:
    req = PlayerInput.model_validate(body)
    return 201, players.create_player(db, req.name)


def get_player(db, params, body, query) -> Response:
    return 200, players.get_player(db, params['id'])


def update_player(db, params, body, query) -> Response:
    req = PlayerInput.model_validate(body)
    return 200, players.update_player(db, params['id'], req.name)


def delete_player(db, params, body, query) -> Response:
    players.delete_player(db, params['id'])
    return 200, {'message': 'Player deleted successfully'}


def player_stats(db, params, body, query) -> Response:
    limit = get_config().recent_games_limit
    return 200, players.get_player_stats(db, params['id'], recent_limit=limit)


def player_net_profit(db, params, body, query) -> Response:
    return 200, players.get_net_profit(db, params['id'])


def all_net_profits(db, params, body, query) -> Response:
    return 200, players.get_all_net_profits(db)


# Games

def list_games(db, params, body, query) -> Response:
    return 200, games.list_games(db, player_id=query.get('playerId'))


def create_game(db, params, body, query) -> Response:
    req = GameCreate.model_validate(body)
    rows = [p.model_dump() for p in req.players]
    return 201, games.create_game(db, req.date, rows)


def get_game(db, params, body, query) -> Response:
    return 200, games.get_game(db, params['id'])


def update_game(db, params, body, query) -> Response:
    req = GameUpdate.model_validate(body)
    return 200, games.update_game(db, params['id'], req.date, req.is_completed)


def delete_game(db, params, body, query) -> Response:
    games.delete_game(db, params['id'])
    return 200, {'message': 'Game deleted successfully'}


def add_game_player(db, params, body, query) -> Response:
    req = GamePlayerInput.model_validate(body)
    player = games.add_player_to_game(db, params['id'], req.player_id, req.buyin, req.cashout)
    return 200, {'message': 'Player added to game successfully', 'player': player}


def update_game_player(db, params, body, query) -> Response:
    req = GamePlayerAmounts.model_validate(body)
    games.update_game_player(db, params['id'], params['player_id'], req.buyin, req.cashout)
    return 200, {'message': 'Player amounts updated successfully'}


def game_overview(db, params, body, query) -> Response:
    return 200, games.get_game_overview(db)


# Settlements

def list_settlements(db, params, body, query) -> Response:
    return 200, settlements.list_settlements(db)


def create_settlement(db, params, body, query) -> Response:
    req = SettlementCreate.model_validate(body)
    settlement = settlements.create_settlement(
        db, req.from_player_id, req.to_player_id, req.amount, req.date, req.notes
    )
    return 201, settlement


def get_settlement(db, params, body, query) -> Response:
    return 200, settlements.get_settlement(db, params['id'])


def update_settlement(db, params, body, query) -> Response:
    req = SettlementUpdate.model_validate(body)
    settlement = settlements.update_settlement(
        db, params['id'], amount=req.amount, settlement_date=req.date, notes=req.notes
    )
    return 200, settlement


def delete_settlement(db, params, body, query) -> Response:
    settlements.delete_settlement(db, params['id'])
    return 200, {'message': 'Settlement deleted successfully'}


def settlement_overview(db, params, body, query) -> Response:
    return 200, settlements.get_settlement_overview(db)


def player_debts(db, params, body, query) -> Response:
    return 200, settlements.get_player_debts(db, params['player_id'])


def settlement_suggestions(db, params, body, query) -> Response:
    return 200, settlements.get_settlement_plan(db)


# Bulk import

def bulk_parse(db, params, body, query) -> Response:
    req = BulkParseRequest.model_validate(body)
    return 200, bulk_import.parse_results(db, req.text, req.date)


def bulk_create(db, params, body, query) -> Response:
    req = BulkCreateRequest.model_validate(body)
    rows = [p.model_dump(by_alias=True) for p in req.players]
    return 201, bulk_import.create_from_results(db, req.date, rows, req.create_new_players)


def bulk_players(db, params, body, query) -> Response:
    roster = [{'id': p.id, 'name': p.name} for p in players.get_roster(db)]
    return 200, {'success': True, 'players': roster}


# Fixed path segments are listed before the {id} routes they would otherwise match
ROUTES: list[tuple[str, str, Handler]] = [
    ('GET', r'/api/health', health),
    ('GET', r'/api/players', list_players),
    ('POST', r'/api/players', create_player),
    ('GET', r'/api/players/net-profit/bulk', all_net_profits),
    ('GET', r'/api/players/(?P<id>[^/]+)/stats', player_stats),
    ('GET', r'/api/players/(?P<id>[^/]+)/net-profit', player_net_profit),
    ('GET', r'/api/players/(?P<id>[^/]+)', get_player),
    ('PUT', r'/api/players/(?P<id>[^/]+)', update_player),
    ('DELETE', r'/api/players/(?P<id>[^/]+)', delete_player),
    ('GET', r'/api/games', list_games),
    ('POST', r'/api/games', create_game),
    ('GET', r'/api/games/stats/overview', game_overview),
    ('POST', r'/api/games/(?P<id>[^/]+)/players', add_game_player),
    ('PUT', r'/api/games/(?P<id>[^/]+)/players/(?P<player_id>[^/]+)', update_game_player),
    ('GET', r'/api/games/(?P<id>[^/]+)', get_game),
    ('PUT', r'/api/games/(?P<id>[^/]+)', update_game),
    ('DELETE', r'/api/games/(?P<id>[^/]+)', delete_game),
    ('GET', r'/api/settlements', list_settlements),
    ('POST', r'/api/settlements', create_settlement),
    ('GET', r'/api/settlements/stats/overview', settlement_overview),
    ('GET', r'/api/settlements/suggestions', settlement_suggestions),
    ('GET', r'/api/settlements/player/(?P<player_id>[^/]+)/debts', player_debts),
    ('GET', r'/api/settlements/(?P<id>[^/]+)', get_settlement),
    ('PUT', r'/api/settlements/(?P<id>[^/]+)', update_settlement),
    ('DELETE', r'/api/settlements/(?P<id>[^/]+)', delete_settlement),
    ('POST', r'/api/bulk-game/parse', bulk_parse),
    ('POST', r'/api/bulk-game/create', bulk_create),
    ('GET', r'/api/bulk-game/players', bulk_players),
]

_COMPILED = [(method, re.compile(pattern + r'/?$'), handler) for method, pattern, handler in ROUTES]


def resolve(method: str, path: str) -> tuple[Handler, dict[str, str]] | None:
    """Find the handler and path parameters for a request, or None."""
    for route_method, pattern, handler in _COMPILED:
        if route_method != method:
            continue
        match = pattern.match(path)
        if match:
            return handler, match.groupdict()
    return None


def dispatch(
    db: LedgerDatabase,
    method: str,
    path: str,
    body: Any = None,
    query: dict[str, str] | None = None,
) -> Response:
    """
    Route a request and turn ledger errors into HTTP statuses.

    Args:
        db: Ledger database
        method: HTTP method
        path: Request path without query string
        body: Decoded JSON body (None for requests without one)
        query: Query string parameters

    Returns:
        Tuple of (status code, JSON-serializable data)
    """
    resolved = resolve(method.upper(), path)
    if resolved is None:
        return 404, {'error': 'Route not found'}
    handler, params = resolved

    try:
        return handler(db, params, body if body is not None else {}, query or {})
    except ValidationError as e:
        return 400, {'errors': _validation_messages(e)}
    except BulkValidationError as e:
        return 400, {'error': 'Invalid text format', 'details': e.errors, 'warnings': e.warnings}
    except NotFoundError as e:
        return 404, {'error': str(e)}
    except LedgerError as e:
        return 400, {'error': str(e)}
    except Exception:
        logger.exception(f'Unhandled error in {method} {path}')
        return 500, {'error': 'Internal server error'}
