"""Settlements between players and debt netting."""

import datetime as dt
import logging
import uuid
from typing import Any

from .constants import OVERVIEW_RECENT_LIMIT
from .database import LedgerDatabase
from .errors import LedgerError, NotFoundError
from .players import get_all_net_profits, get_player, list_players
from .utils import round_money

logger = logging.getLogger('pokerledger.settlements')

SETTLEMENT_COLUMNS = """
    id, from_player_id, to_player_id, from_player_name, to_player_name,
    amount, date, notes, created_at
"""


def list_settlements(db: LedgerDatabase) -> list[dict[str, Any]]:
    """All settlements, newest first."""
    return db.fetch_all(
        f'SELECT {SETTLEMENT_COLUMNS} FROM settlements ORDER BY date DESC, created_at DESC'
    )


def get_settlement(db: LedgerDatabase, settlement_id: str) -> dict[str, Any]:
    settlement = db.fetch_one(
        f'SELECT {SETTLEMENT_COLUMNS} FROM settlements WHERE id = ?', (settlement_id,)
    )
    if not settlement:
        raise NotFoundError('Settlement not found')
    return settlement


def create_settlement(
    db: LedgerDatabase,
    from_player_id: str,
    to_player_id: str,
    amount: float,
    settlement_date: dt.date | str,
    notes: str | None = None,
) -> dict[str, Any]:
    """
    Record a payment from one player to another.

    Player names are copied onto the settlement so it still reads correctly
    after a rename.

    Args:
        db: Ledger database
        from_player_id: Player who paid
        to_player_id: Player who was paid
        amount: Positive amount paid
        settlement_date: Date of the payment
        notes: Optional free text

    Returns:
        The new settlement row

    Raises:
        LedgerError: If the players are the same, unknown, or amount <= 0
    """
    if from_player_id == to_player_id:
        raise LedgerError('From and To players must be different')
    if amount <= 0:
        raise LedgerError('Amount must be positive')

    with db.transaction() as cursor:
        try:
            from_player = get_player(db, from_player_id)
            to_player = get_player(db, to_player_id)
        except NotFoundError as e:
            raise LedgerError('One or more players not found') from e

        settlement_id = str(uuid.uuid4())
        cursor.execute(
            """
            INSERT INTO settlements (
                id, from_player_id, to_player_id, from_player_name, to_player_name,
                amount, date, notes
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                settlement_id, from_player_id, to_player_id,
                from_player['name'], to_player['name'], amount, str(settlement_date), notes,
            ),
        )

    logger.info(f'{from_player["name"]} paid {to_player["name"]} {amount:.2f}')
    return get_settlement(db, settlement_id)


def update_settlement(
    db: LedgerDatabase,
    settlement_id: str,
    amount: float | None = None,
    settlement_date: dt.date | str | None = None,
    notes: str | None = None,
) -> dict[str, Any]:
    """
    Change a settlement's amount, date, or notes.

    Raises:
        NotFoundError: If the settlement doesn't exist
        LedgerError: If no field is given or the amount is not positive
    """
    fields = []
    values: list[Any] = []
    if amount is not None:
        if amount <= 0:
            raise LedgerError('Amount must be positive')
        fields.append('amount = ?')
        values.append(amount)
    if settlement_date is not None:
        fields.append('date = ?')
        values.append(str(settlement_date))
    if notes is not None:
        fields.append('notes = ?')
        values.append(notes)

    with db.transaction() as cursor:
        get_settlement(db, settlement_id)
        if not fields:
            raise LedgerError('No fields to update')
        cursor.execute(
            f'UPDATE settlements SET {", ".join(fields)} WHERE id = ?', (*values, settlement_id)
        )

    return get_settlement(db, settlement_id)


def delete_settlement(db: LedgerDatabase, settlement_id: str) -> None:
    with db.transaction() as cursor:
        get_settlement(db, settlement_id)
        cursor.execute('DELETE FROM settlements WHERE id = ?', (settlement_id,))


def get_settlement_overview(
    db: LedgerDatabase, recent_limit: int = OVERVIEW_RECENT_LIMIT
) -> dict[str, Any]:
    """
    Settlement totals, recent settlements, and per-player debt summary.

    The debt summary lists, for each player with a nonzero balance, the
    amount received minus the amount paid, largest balance first.
    """
    stats = db.fetch_one(
        """
        SELECT
            COUNT(*) AS total_settlements,
            COALESCE(SUM(amount), 0) AS total_amount,
            AVG(amount) AS avg_amount,
            MAX(date) AS last_settlement_date
        FROM settlements
        """
    )
    recent = db.fetch_all(
        """
        SELECT id, from_player_name, to_player_name, amount, date, notes
        FROM settlements
        ORDER BY date DESC, created_at DESC
        LIMIT ?
        """,
        (recent_limit,),
    )

    balances: dict[str, float] = {}
    for s in db.fetch_all('SELECT from_player_id, to_player_id, amount FROM settlements'):
        balances[s['from_player_id']] = balances.get(s['from_player_id'], 0.0) - s['amount']
        balances[s['to_player_id']] = balances.get(s['to_player_id'], 0.0) + s['amount']

    debt_summary = []
    for player in list_players(db):
        net_debt = round_money(balances.get(player['id'], 0.0))
        if net_debt:
            debt_summary.append({'name': player['name'], 'net_debt': net_debt})
    debt_summary.sort(key=lambda d: abs(d['net_debt']), reverse=True)

    return {**stats, 'recentSettlements': recent, 'debtSummary': debt_summary}


def get_player_debts(db: LedgerDatabase, player_id: str) -> dict[str, Any]:
    """
    Payments a player made and received.

    Returns:
        Dict with debtsOwed (paid by the player), debtsOwedTo (paid to the
        player), their totals, and netDebt = totalOwedTo - totalOwed

    Raises:
        NotFoundError: If the player doesn't exist
    """
    player = get_player(db, player_id)

    debts_owed = db.fetch_all(
        """
        SELECT id, to_player_name, amount, date, notes
        FROM settlements
        WHERE from_player_id = ?
        ORDER BY date DESC
        """,
        (player_id,),
    )
    debts_owed_to = db.fetch_all(
        """
        SELECT id, from_player_name, amount, date, notes
        FROM settlements
        WHERE to_player_id = ?
        ORDER BY date DESC
        """,
        (player_id,),
    )

    total_owed = round_money(sum(d['amount'] for d in debts_owed))
    total_owed_to = round_money(sum(d['amount'] for d in debts_owed_to))

    return {
        'player': {'id': player['id'], 'name': player['name']},
        'debtsOwed': debts_owed,
        'debtsOwedTo': debts_owed_to,
        'totalOwed': total_owed,
        'totalOwedTo': total_owed_to,
        'netDebt': round_money(total_owed_to - total_owed),
    }


def suggest_settlements(balances: dict[str, float]) -> list[tuple[str, str, float]]:
    """
    Plan payments that clear every outstanding balance.

    Positive balances are owed money, negative balances owe money. Debtors,
    largest first, pay creditors, largest first, each payment as large as
    both sides allow. Balances under a cent are ignored, and if the balances don't sum
    to zero the leftover simply stays unpaid.

    Args:
        balances: Mapping of player key -> outstanding balance

    Returns:
        List of (payer, payee, amount) tuples
    """
    creditors = sorted(
        ([key, round_money(v)] for key, v in balances.items() if round_money(v) > 0),
        key=lambda c: c[1],
        reverse=True,
    )
    debtors = sorted(
        ([key, round_money(-v)] for key, v in balances.items() if round_money(v) < 0),
        key=lambda d: d[1],
        reverse=True,
    )

    transfers = []
    ci = 0
    for debtor, owes in debtors:
        while owes > 0 and ci < len(creditors):
            creditor, needs = creditors[ci]
            pay = round_money(min(owes, needs))
            if pay > 0:
                transfers.append((debtor, creditor, pay))
            owes = round_money(owes - pay)
            creditors[ci][1] = round_money(needs - pay)
            if creditors[ci][1] <= 0:
                ci += 1

    return transfers


def get_settlement_plan(db: LedgerDatabase) -> list[dict[str, Any]]:
    """Suggested payments that settle the ledger's current true net profits."""
    names = {p['id']: p['name'] for p in list_players(db)}
    balances = {row['player_id']: row['true_net_profit'] for row in get_all_net_profits(db)}

    plan = [
        {
            'from_player_id': payer,
            'from_player_name': names[payer],
            'to_player_id': payee,
            'to_player_name': names[payee],
            'amount': amount,
        }
        for payer, payee, amount in suggest_settlements(balances)
    ]
    logger.debug(f'Settlement plan has {len(plan)} payment(s)')
    return plan
