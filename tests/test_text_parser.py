"""Unit tests for pasted results parsing."""

import math

from pokerledger.models import ParsedEntry
from pokerledger.text_parser import (
    convert_profit_to_buyin_cashout,
    format_entries,
    generate_preview,
    parse_line,
    parse_text,
    validate_parsed_data,
)


class TestParseLine:
    """Tests for single line parsing."""

    def test_colon_with_sign(self):
        """Test 'Name: +amount' and 'Name: -amount'."""
        assert parse_line('Alice: +100') == ParsedEntry('Alice', 100.0)
        assert parse_line('Bob: -50') == ParsedEntry('Bob', -50.0)

    def test_space_with_sign(self):
        """Test 'Name +amount' without a colon."""
        assert parse_line('Charlie +25.5') == ParsedEntry('Charlie', 25.5)
        assert parse_line('Diana -40') == ParsedEntry('Diana', -40.0)

    def test_unsigned_amount_is_a_win(self):
        """Test that amounts without a sign are positive."""
        assert parse_line('Eve: 30') == ParsedEntry('Eve', 30.0)
        assert parse_line('Frank 12.75') == ParsedEntry('Frank', 12.75)

    def test_multi_word_name(self):
        """Test names containing spaces."""
        assert parse_line('Mary Ann -15') == ParsedEntry('Mary Ann', -15.0)
        assert parse_line('Big Joe: +15') == ParsedEntry('Big Joe', 15.0)

    def test_name_is_trimmed(self):
        """Test whitespace around the name is removed."""
        assert parse_line('Alice   :   +10').name == 'Alice'

    def test_hyphenated_name_needs_colon(self):
        """Test that names with '-' only parse in the colon form."""
        assert parse_line('Mary-Jane: -5') == ParsedEntry('Mary-Jane', -5.0)
        assert parse_line('Mary-Jane -5') is None

    def test_unparseable_lines(self):
        """Test lines with no amount or a non-numeric amount."""
        assert parse_line('Alice') is None
        assert parse_line('Alice: lots') is None
        assert parse_line('Alice: +1.2.3') is None

    def test_non_ascii_digits_rejected(self):
        """Test full-width and other Unicode digits are not amounts."""
        assert parse_line('Alice: +５０') is None
        assert parse_line('Bob ٣') is None
        assert parse_text('Alice: +５０\nBob: -50') == [ParsedEntry('Bob', -50.0)]


class TestParseText:
    """Tests for multi-line parsing."""

    def test_mixed_formats_in_order(self):
        """Test every supported format in one paste, keeping input order."""
        text = 'Alice: +100\nBob -60\n\n  Charlie: -40  \nDiana 0'
        entries = parse_text(text)
        assert [e.name for e in entries] == ['Alice', 'Bob', 'Charlie', 'Diana']
        assert [e.profit for e in entries] == [100.0, -60.0, -40.0, 0.0]

    def test_garbage_lines_dropped(self):
        """Test that unparseable lines are skipped silently."""
        text = 'Results from Friday\nAlice: +20\n-----\nBob: -20\nthanks all'
        entries = parse_text(text)
        assert entries == [ParsedEntry('Alice', 20.0), ParsedEntry('Bob', -20.0)]

    def test_duplicates_kept(self):
        """Test that parsing does not deduplicate names."""
        assert len(parse_text('Alice: +10\nalice: -10')) == 2

    def test_empty_and_non_string_input(self):
        """Test empty text and non-string values."""
        assert parse_text('') == []
        assert parse_text('\n\n   \n') == []
        assert parse_text(None) == []
        assert parse_text(123) == []

    def test_format_entries_parses_back(self):
        """Test that formatted entries are accepted by the parser."""
        entries = [ParsedEntry('Alice', 25.5), ParsedEntry('Bob', -10.0), ParsedEntry('Big Joe', 0.0)]
        text = format_entries(entries)
        assert text == 'Alice: +25.5\nBob: -10.0\nBig Joe: +0.0'
        assert parse_text(text) == entries


class TestConvertProfit:
    """Tests for splitting profit into buy-in and cash-out."""

    def test_win(self):
        assert convert_profit_to_buyin_cashout(100) == (0.0, 100)

    def test_loss(self):
        assert convert_profit_to_buyin_cashout(-50) == (50, 0.0)

    def test_break_even(self):
        """Test that zero profit is treated as a win of nothing."""
        assert convert_profit_to_buyin_cashout(0) == (0.0, 0)

    def test_difference_equals_profit(self):
        """Test cashout - buyin == profit for a range of values."""
        for profit in (-123.45, -0.01, 0.0, 0.01, 999.99):
            buyin, cashout = convert_profit_to_buyin_cashout(profit)
            assert buyin >= 0 and cashout >= 0
            assert cashout - buyin == profit


class TestValidateParsedData:
    """Tests for parsed entry validation."""

    def test_balanced_game_is_valid(self):
        """Test a clean, balanced game has no errors or warnings."""
        result = validate_parsed_data(parse_text('Alice: +30\nBob: -20\nCharlie: -10'))
        assert result.is_valid
        assert result.errors == []
        assert result.warnings == []

    def test_no_entries(self):
        """Test that an empty list is rejected with a single error."""
        result = validate_parsed_data([])
        assert result.errors == ['No valid player data found']
        assert result.warnings == []

    def test_duplicate_names_case_insensitive(self):
        """Test duplicates are detected ignoring case and surrounding space."""
        entries = [ParsedEntry('Alice', 10), ParsedEntry('alice ', -5), ParsedEntry('Bob', -5)]
        result = validate_parsed_data(entries)
        assert result.errors == ['Duplicate player names found: alice']

    def test_empty_name(self):
        result = validate_parsed_data([ParsedEntry('  ', 10), ParsedEntry('Bob', -10)])
        assert 'Some players have empty names' in result.errors

    def test_invalid_profit(self):
        """Test NaN and non-numeric profits are errors."""
        entries = [ParsedEntry('Alice', math.nan), ParsedEntry('Bob', 'ten'), ParsedEntry('Cy', 0)]
        result = validate_parsed_data(entries)
        assert 'Some players have invalid profit/loss values' in result.errors

    def test_unbalanced_is_only_a_warning(self):
        """Test a nonzero total warns but stays valid."""
        result = validate_parsed_data(parse_text('Alice: +30\nBob: -20'))
        assert result.is_valid
        assert result.warnings == ['Total profit/loss is 10.00 (should be 0 for balanced game)']

    def test_within_tolerance(self):
        """Test that float noise below a cent does not warn."""
        result = validate_parsed_data([ParsedEntry('Alice', 0.1), ParsedEntry('Bob', 0.2), ParsedEntry('Cy', -0.3)])
        assert result.warnings == []

    def test_custom_tolerance(self):
        result = validate_parsed_data(parse_text('Alice: +5\nBob: -4'), tolerance=2)
        assert result.warnings == []


class TestGeneratePreview:
    """Tests for game preview totals."""

    def test_balanced_preview(self):
        preview = generate_preview(parse_text('Alice: +100\nBob: -60\nCharlie: -40'))
        assert preview.player_count == 3
        assert preview.total_buyins == 100
        assert preview.total_cashouts == 100
        assert preview.discrepancy == 0
        assert [(p.buyin, p.cashout) for p in preview.players] == [(0, 100), (60, 0), (40, 0)]

    def test_discrepancy_is_cashouts_minus_buyins(self):
        preview = generate_preview(parse_text('Alice: +50\nBob: -20'))
        assert preview.discrepancy == 30

    def test_to_dict_keys(self):
        """Test the JSON shape of a preview."""
        data = generate_preview(parse_text('Alice: +5\nBob: -5')).to_dict()
        assert set(data) == {'players', 'totalBuyins', 'totalCashouts', 'discrepancy', 'playerCount'}
        assert data['players'][1] == {'name': 'Bob', 'profit': -5.0, 'buyin': 5.0, 'cashout': 0.0}

    def test_empty_preview(self):
        preview = generate_preview([])
        assert preview.player_count == 0
        assert preview.total_buyins == 0
        assert preview.discrepancy == 0
