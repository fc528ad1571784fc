"""Vercel Serverless Function serving the ledger API."""

from pokerledger.server import LedgerRequestHandler


class handler(LedgerRequestHandler):  # noqa: N801
    """Every /api/* request, answered from the configured database."""
