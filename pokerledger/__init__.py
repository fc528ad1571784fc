from .models import ParsedEntry, Preview, ValidationResult, RosterEntry, MatchResult
from .errors import LedgerError, NotFoundError, BulkValidationError, LedgerAPIError
from .text_parser import (
    parse_line,
    parse_text,
    convert_profit_to_buyin_cashout,
    validate_parsed_data,
    generate_preview,
    format_entries,
)
from .name_matcher import (
    normalize_for_matching,
    calculate_similarity,
    find_best_match,
    suggest_matches,
    match_players,
)
from .database import LedgerDatabase, open_database
from .bulk_import import parse_results, create_from_results
from .settlements import suggest_settlements
from .validators import validate_ledger
from .excel_export import export_ledger_to_excel
from .client import LedgerClient

__all__ = [
    # Models
    'ParsedEntry',
    'Preview',
    'ValidationResult',
    'RosterEntry',
    'MatchResult',
    # Errors
    'LedgerError',
    'NotFoundError',
    'BulkValidationError',
    'LedgerAPIError',
    # Text parsing
    'parse_line',
    'parse_text',
    'convert_profit_to_buyin_cashout',
    'validate_parsed_data',
    'generate_preview',
    'format_entries',
    # Name matching
    'normalize_for_matching',
    'calculate_similarity',
    'find_best_match',
    'suggest_matches',
    'match_players',
    # Storage
    'LedgerDatabase',
    'open_database',
    # Bulk import
    'parse_results',
    'create_from_results',
    # Settlements
    'suggest_settlements',
    # Checks and export
    'validate_ledger',
    'export_ledger_to_excel',
    # HTTP client
    'LedgerClient',
]
