"""Data models for the poker ledger.

These are request-scoped values produced while parsing and matching pasted
results. Durable records live in SQLite and are passed around as dicts.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class ParsedEntry:
    """One `Name: +amount` line after parsing."""
    name: str
    profit: float


@dataclass
class ConvertedPlayer:
    """Parsed entry with its profit split into buy-in and cash-out."""
    name: str
    profit: float
    buyin: float
    cashout: float

    def to_dict(self) -> dict[str, Any]:
        return {
            'name': self.name,
            'profit': self.profit,
            'buyin': self.buyin,
            'cashout': self.cashout,
        }


@dataclass
class Preview:
    """Totals for a game built from parsed entries."""
    players: list[ConvertedPlayer]
    total_buyins: float
    total_cashouts: float
    discrepancy: float
    player_count: int

    def to_dict(self) -> dict[str, Any]:
        return {
            'players': [p.to_dict() for p in self.players],
            'totalBuyins': self.total_buyins,
            'totalCashouts': self.total_cashouts,
            'discrepancy': self.discrepancy,
            'playerCount': self.player_count,
        }


@dataclass
class ValidationResult:
    """Outcome of validating parsed entries. Only errors block a game."""
    errors: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class RosterEntry:
    """Existing player as seen by the matcher."""
    id: str
    name: str


@dataclass
class Suggestion:
    """Roster entry scored against a parsed name."""
    id: str
    name: str
    similarity: float

    def to_dict(self) -> dict[str, Any]:
        return {'id': self.id, 'name': self.name, 'similarity': self.similarity}


@dataclass
class MatchedPlayer:
    parsed_name: str
    player_id: str
    player_name: str
    similarity: float
    profit: float

    def to_dict(self) -> dict[str, Any]:
        return {
            'parsedName': self.parsed_name,
            'existingPlayer': {'id': self.player_id, 'name': self.player_name},
            'similarity': self.similarity,
            'profit': self.profit,
        }


@dataclass
class UnmatchedPlayer:
    parsed_name: str
    profit: float
    suggestions: list[Suggestion] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            'parsedName': self.parsed_name,
            'profit': self.profit,
            'suggestions': [s.to_dict() for s in self.suggestions],
        }


@dataclass
class MatchResult:
    """Parsed entries partitioned by whether they resolved to a roster entry."""
    matched: list[MatchedPlayer] = field(default_factory=list)
    unmatched: list[UnmatchedPlayer] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            'matched': [m.to_dict() for m in self.matched],
            'unmatched': [u.to_dict() for u in self.unmatched],
        }
