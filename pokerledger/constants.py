"""Constants and defaults for the poker ledger."""

# Fuzzy matching
MATCH_THRESHOLD = 0.7        # minimum similarity to accept a roster match
SUGGESTION_THRESHOLD = 0.3   # suggestions must score strictly above this
MAX_SUGGESTIONS = 3

# Validation
BALANCE_TOLERANCE = 0.01     # total profit within this is treated as balanced
CONSISTENCY_TOLERANCE = 0.01

# Player statistics
RECENT_GAMES_LIMIT = 10
OVERVIEW_RECENT_LIMIT = 5

# Storage
DEFAULT_DB_PATH = 'data/poker_ledger.db'

# Players seeded when demo data is enabled
DEMO_PLAYERS = [
    ('player-1', 'Alice'),
    ('player-2', 'Bob'),
    ('player-3', 'Charlie'),
    ('player-4', 'Diana'),
]

# Excel export sheets: sheet name -> (column header, row key)
EXPORT_SHEETS = {
    'Players': [
        ('Name', 'name'),
        ('Games', 'total_games'),
        ('Buy-ins', 'total_buyins'),
        ('Cash-outs', 'total_cashouts'),
        ('Net Profit', 'net_profit'),
    ],
    'Games': [
        ('Date', 'date'),
        ('Players', 'player_count'),
        ('Buy-ins', 'total_buyins'),
        ('Cash-outs', 'total_cashouts'),
        ('Discrepancy', 'discrepancy'),
        ('Completed', 'is_completed'),
    ],
    'Settlements': [
        ('Date', 'date'),
        ('From', 'from_player_name'),
        ('To', 'to_player_name'),
        ('Amount', 'amount'),
        ('Notes', 'notes'),
    ],
}
