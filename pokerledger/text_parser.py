"""Parse pasted game results into player profit records.

Handles lines such as:
    "Alice: +100"
    "Bob: -50"
    "Charlie +25.5"
    "Diana 40"

Unparseable lines are dropped without being reported; validate_parsed_data
is the gate that decides whether a game may be created from the result.
"""

import logging
import math
import re
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from .constants import BALANCE_TOLERANCE
from .models import ConvertedPlayer, ParsedEntry, Preview, ValidationResult

logger = logging.getLogger('pokerledger.text_parser')


@dataclass(frozen=True)
class LinePattern:
    """A line format. Group 1 is the name, group 2 the amount."""
    name: str
    regex: re.Pattern


# Tried in order, first match wins. Amounts are ASCII digits only; an
# unsigned amount is a win.
LINE_PATTERNS = [
    LinePattern('colon_signed', re.compile(r'^([^:]+):\s*([+-]?[0-9]+(?:\.[0-9]+)?)$')),
    LinePattern('space_signed', re.compile(r'^([^+\-]+)\s+([+-]?[0-9]+(?:\.[0-9]+)?)$')),
    LinePattern('colon_unsigned', re.compile(r'^([^:]+):\s*([0-9]+(?:\.[0-9]+)?)$')),
    LinePattern('space_unsigned', re.compile(r'^([^+\-]+)\s+([0-9]+(?:\.[0-9]+)?)$')),
]


def parse_line(line: str, patterns: list[LinePattern] = LINE_PATTERNS) -> Optional[ParsedEntry]:
    """
    Parse a single line into a name and profit.

    Args:
        line: One trimmed line of input
        patterns: Ordered line formats to try

    Returns:
        ParsedEntry, or None if no pattern matches
    """
    for pattern in patterns:
        match = pattern.regex.match(line)
        if not match:
            continue
        return ParsedEntry(name=match.group(1).strip(), profit=float(match.group(2)))
    return None


def parse_text(text: str) -> list[ParsedEntry]:
    """
    Parse multi-line text into player entries, in input order.

    Blank lines are skipped and lines matching no known format are dropped.
    No deduplication is done here.

    Args:
        text: Raw pasted text

    Returns:
        List of ParsedEntry objects
    """
    if not text or not isinstance(text, str):
        return []

    lines = [line.strip() for line in text.split('\n')]
    entries = []
    dropped = 0
    for line in lines:
        if not line:
            continue
        entry = parse_line(line)
        if entry is None:
            dropped += 1
            continue
        entries.append(entry)

    if dropped:
        logger.debug(f'Dropped {dropped} unparseable line(s)')
    return entries


def convert_profit_to_buyin_cashout(profit: float) -> tuple[float, float]:
    """
    Split a net profit into (buyin, cashout).

    A win becomes a cash-out with no buy-in, a loss becomes a buy-in with no
    cash-out. The real amounts a player moved during the game are not
    recoverable from the net, only cashout - buyin == profit is.

    Args:
        profit: Net result for the player

    Returns:
        Tuple of (buyin, cashout), both non-negative
    """
    if profit >= 0:
        return 0.0, profit
    return abs(profit), 0.0


def _is_number(value) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return not math.isnan(value)


def validate_parsed_data(
    entries: list[ParsedEntry],
    tolerance: float = BALANCE_TOLERANCE,
) -> ValidationResult:
    """
    Check parsed entries before they are turned into a game.

    Errors (block game creation):
    - No entries at all
    - Duplicate names (case-insensitive)
    - Empty names
    - Profit that is not a number

    Warnings (informational):
    - Profits do not sum to zero within tolerance

    Args:
        entries: Parsed entries
        tolerance: Allowed absolute total profit before warning

    Returns:
        ValidationResult with errors and warnings
    """
    result = ValidationResult()

    if not entries:
        result.errors.append('No valid player data found')
        return result

    seen = set()
    duplicates = set()
    for entry in entries:
        key = (entry.name or '').strip().lower()
        if not key:
            continue
        if key in seen:
            duplicates.add(key)
        seen.add(key)
    if duplicates:
        result.errors.append(f'Duplicate player names found: {", ".join(sorted(duplicates))}')

    if any(not entry.name or not entry.name.strip() for entry in entries):
        result.errors.append('Some players have empty names')

    if any(not _is_number(entry.profit) for entry in entries):
        result.errors.append('Some players have invalid profit/loss values')

    total_profit = sum(entry.profit for entry in entries if _is_number(entry.profit))
    if abs(total_profit) > tolerance:
        result.warnings.append(
            f'Total profit/loss is {total_profit:.2f} (should be 0 for balanced game)'
        )

    return result


def generate_preview(entries: list[ParsedEntry]) -> Preview:
    """
    Build the game totals a set of entries would produce.

    Args:
        entries: Parsed entries

    Returns:
        Preview with converted players, totals, and discrepancy
    """
    players = []
    for entry in entries:
        buyin, cashout = convert_profit_to_buyin_cashout(entry.profit)
        players.append(
            ConvertedPlayer(name=entry.name, profit=entry.profit, buyin=buyin, cashout=cashout)
        )

    total_buyins = sum(p.buyin for p in players)
    total_cashouts = sum(p.cashout for p in players)

    return Preview(
        players=players,
        total_buyins=total_buyins,
        total_cashouts=total_cashouts,
        discrepancy=total_cashouts - total_buyins,
        player_count=len(entries),
    )


def format_entries(entries: list[ParsedEntry]) -> str:
    """Render entries back into `Name: +profit` lines that parse_text accepts."""
    lines = []
    for entry in entries:
        sign = '+' if entry.profit >= 0 else '-'
        amount = format(Decimal(repr(abs(float(entry.profit)))), 'f')
        lines.append(f'{entry.name}: {sign}{amount}')
    return '\n'.join(lines)
