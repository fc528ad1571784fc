"""HTTP server for the ledger API."""

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any
from urllib.parse import parse_qs, urlsplit

from .api import dispatch
from .config import get_config, get_database_path
from .database import LedgerDatabase, open_database

logger = logging.getLogger('pokerledger.server')


class LedgerRequestHandler(BaseHTTPRequestHandler):
    """Decodes JSON requests, dispatches them, and encodes JSON responses."""

    db: LedgerDatabase | None = None

    def _cors_origin(self) -> str:
        return get_config().cors_origin

    def _send_json(self, status: int, data: Any) -> None:
        """Send a JSON response with CORS headers."""
        payload = json.dumps(data, default=str).encode()
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Access-Control-Allow-Origin', self._cors_origin())
        self.send_header('Content-Length', str(len(payload)))
        self.end_headers()
        self.wfile.write(payload)

    def _get_db(self) -> LedgerDatabase:
        if self.db is None:
            LedgerRequestHandler.db = open_database(get_database_path(), get_config().seed_demo_data)
        return self.db

    def _handle(self, method: str) -> None:
        url = urlsplit(self.path)
        query = {key: values[0] for key, values in parse_qs(url.query).items()}

        body = None
        try:
            content_length = max(0, int(self.headers.get('Content-Length', 0)))
        except ValueError:
            self._send_json(400, {'error': 'Invalid Content-Length'})
            return
        if content_length:
            raw = self.rfile.read(content_length)
            try:
                body = json.loads(raw.decode())
            except (UnicodeDecodeError, json.JSONDecodeError):
                self._send_json(400, {'error': 'Invalid JSON'})
                return

        status, data = dispatch(self._get_db(), method, url.path, body, query)
        self._send_json(status, data)

    def do_OPTIONS(self):
        """Handle CORS preflight."""
        self.send_response(200)
        self.send_header('Access-Control-Allow-Origin', self._cors_origin())
        self.send_header('Access-Control-Allow-Methods', 'GET, POST, PUT, DELETE, OPTIONS')
        self.send_header('Access-Control-Allow-Headers', 'Content-Type')
        self.send_header('Access-Control-Max-Age', '86400')
        self.send_header('Content-Length', '0')
        self.end_headers()

    def do_GET(self):
        self._handle('GET')

    def do_POST(self):
        self._handle('POST')

    def do_PUT(self):
        self._handle('PUT')

    def do_DELETE(self):
        self._handle('DELETE')

    def log_message(self, format, *args):
        logger.info(f'{self.address_string()} {format % args}')


def make_server(db: LedgerDatabase, host: str, port: int) -> ThreadingHTTPServer:
    """
    Build a threaded server bound to a database.

    Args:
        db: Ledger database shared by all requests
        host: Interface to bind
        port: Port to bind (0 picks a free one)

    Returns:
        Server ready for serve_forever()
    """
    handler_class = type('BoundLedgerRequestHandler', (LedgerRequestHandler,), {'db': db})
    return ThreadingHTTPServer((host, port), handler_class)


def run_server(host: str | None = None, port: int | None = None) -> None:
    """Open the configured database and serve until interrupted."""
    config = get_config()
    db = open_database(get_database_path(), seed_demo_data=config.seed_demo_data)
    server = make_server(db, host or config.host, port if port is not None else config.port)

    logger.info(f'Poker ledger API listening on http://{server.server_address[0]}:{server.server_address[1]}')
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info('Shutting down')
    finally:
        server.server_close()
        db.close()
