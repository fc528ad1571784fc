"""Excel export of the ledger."""

import logging
from pathlib import Path

import openpyxl
from openpyxl.styles import Font

from .constants import EXPORT_SHEETS
from .database import LedgerDatabase
from .games import list_games
from .players import list_players
from .settlements import list_settlements

logger = logging.getLogger('pokerledger.excel_export')


def export_ledger_to_excel(db: LedgerDatabase, path: str | Path) -> Path:
    """
    Write players, games, and settlements to an Excel workbook.

    Each record type gets its own sheet with a bold header row.

    Args:
        db: Ledger database
        path: Output .xlsx path (parent directories are created)

    Returns:
        Path of the saved workbook
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    records = {
        'Players': list_players(db),
        'Games': list_games(db),
        'Settlements': list_settlements(db),
    }

    wb = openpyxl.Workbook()
    wb.remove(wb.active)

    for sheet_name, columns in EXPORT_SHEETS.items():
        ws = wb.create_sheet(sheet_name)
        for col_idx, (header, _key) in enumerate(columns, start=1):
            ws.cell(row=1, column=col_idx, value=header).font = Font(bold=True)

        for row_idx, record in enumerate(records[sheet_name], start=2):
            for col_idx, (_header, key) in enumerate(columns, start=1):
                ws.cell(row=row_idx, column=col_idx, value=record.get(key))

    wb.save(str(path))
    logger.info(
        f'Exported {len(records["Players"])} players, {len(records["Games"])} games, '
        f'{len(records["Settlements"])} settlements to {path}'
    )
    return path
