"""Exceptions raised by ledger operations."""


class LedgerError(ValueError):
    """A request that cannot be applied to the ledger as given."""


class NotFoundError(LookupError):
    """A referenced player, game, or settlement does not exist."""


class BulkValidationError(LedgerError):
    """Pasted results failed validation and must not become a game."""

    def __init__(self, errors: list[str], warnings: list[str] | None = None):
        super().__init__('; '.join(errors))
        self.errors = errors
        self.warnings = warnings or []


class LedgerAPIError(Exception):
    """The ledger server answered a client request with an error status."""

    def __init__(self, status: int, payload: dict):
        message = payload.get('error') or '; '.join(payload.get('errors', [])) or f'HTTP {status}'
        super().__init__(message)
        self.status = status
        self.payload = payload
