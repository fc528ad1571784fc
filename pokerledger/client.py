"""Client for a running ledger server."""

import datetime as dt
import logging
from typing import Any, Optional

import requests

from .bulk_import import rows_from_preview
from .errors import LedgerAPIError

logger = logging.getLogger('pokerledger.client')


class LedgerClient:
    """Thin wrapper around the ledger's JSON API."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 10):
        """
        Initialize the client.

        Args:
            base_url: Server root, e.g. http://127.0.0.1:5001
            session: Session to reuse (default: a new one)
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, **kwargs) -> Any:
        url = f'{self.base_url}{path}'
        logger.debug(f'{method} {url}')
        response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        if response.status_code >= 400:
            try:
                payload = response.json()
            except ValueError:
                payload = {'error': response.text}
            raise LedgerAPIError(response.status_code, payload)
        return response.json()

    def health(self) -> dict[str, Any]:
        return self._request('GET', '/api/health')

    def list_players(self) -> list[dict[str, Any]]:
        return self._request('GET', '/api/players')

    def parse_text(self, text: str, game_date: Optional[dt.date] = None) -> dict[str, Any]:
        """Preview pasted results against the server's roster."""
        body: dict[str, Any] = {'text': text}
        if game_date:
            body['date'] = game_date.isoformat()
        return self._request('POST', '/api/bulk-game/parse', json=body)

    def create_game(
        self,
        game_date: dt.date,
        players: list[dict[str, Any]],
        create_new_players: bool = True,
    ) -> dict[str, Any]:
        """
        Record a game from confirmed rows.

        Args:
            game_date: Date the game was played
            players: Dicts with name, profit, and optional playerId
            create_new_players: Let the server create unknown players

        Returns:
            The server's bulk create response
        """
        body = {
            'date': game_date.isoformat(),
            'players': players,
            'createNewPlayers': create_new_players,
        }
        return self._request('POST', '/api/bulk-game/create', json=body)

    def import_text(self, text: str, game_date: dt.date) -> dict[str, Any]:
        """
        Parse results and create the game in one go.

        Matched names use the existing player; everything else becomes a new
        player.
        """
        preview = self.parse_text(text, game_date)
        return self.create_game(game_date, rows_from_preview(preview))
