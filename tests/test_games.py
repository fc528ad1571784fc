"""Tests for games and the bookkeeping they drive."""

import datetime as dt

import pytest

from pokerledger.errors import LedgerError, NotFoundError
from pokerledger.games import (
    add_player_to_game,
    create_game,
    delete_game,
    get_game,
    get_game_overview,
    list_games,
    update_game,
    update_game_player,
)
from pokerledger.players import get_player


@pytest.fixture
def ids(players):
    return {name: p['id'] for name, p in players.items()}


@pytest.fixture
def game(db, ids):
    """Alice wins 40, Bob loses 40."""
    return create_game(
        db,
        dt.date(2026, 4, 3),
        [
            {'player_id': ids['Alice'], 'buyin': 100, 'cashout': 140},
            {'player_id': ids['Bob'], 'buyin': 100, 'cashout': 60},
        ],
    )


class TestCreateGame:
    """Tests for recording games."""

    def test_totals(self, game):
        assert game['date'] == '2026-04-03'
        assert game['total_buyins'] == 200
        assert game['total_cashouts'] == 200
        assert game['discrepancy'] == 0
        assert game['is_completed'] is False

    def test_player_rows_and_aggregates(self, db, game, ids):
        rows = {r['player_name']: r for r in get_game(db, game['id'])['players']}
        assert rows['Alice']['profit'] == 40
        assert rows['Bob']['profit'] == -40

        alice = get_player(db, ids['Alice'])
        assert alice['net_profit'] == 40
        assert alice['total_games'] == 1
        assert alice['total_buyins'] == 100
        assert alice['total_cashouts'] == 140

    def test_unbalanced_game_records_discrepancy(self, db, ids):
        game = create_game(
            db,
            '2026-04-04',
            [
                {'player_id': ids['Alice'], 'buyin': 50, 'cashout': 80},
                {'player_id': ids['Bob'], 'buyin': 50, 'cashout': 10},
            ],
        )
        assert game['discrepancy'] == -10

    def test_duplicate_player_rejected(self, db, ids):
        with pytest.raises(LedgerError, match='more than once'):
            create_game(
                db,
                '2026-04-04',
                [
                    {'player_id': ids['Alice'], 'buyin': 10, 'cashout': 0},
                    {'player_id': ids['Alice'], 'buyin': 0, 'cashout': 10},
                ],
            )
        assert list_games(db) == []

    def test_unknown_player_rolls_back(self, db, ids):
        """Test nothing is written when any player is missing."""
        with pytest.raises(LedgerError, match='One or more players not found'):
            create_game(
                db,
                '2026-04-04',
                [
                    {'player_id': ids['Alice'], 'buyin': 10, 'cashout': 20},
                    {'player_id': 'ghost', 'buyin': 10, 'cashout': 0},
                ],
            )
        assert list_games(db) == []
        assert get_player(db, ids['Alice'])['total_games'] == 0

    def test_no_players(self, db):
        with pytest.raises(LedgerError):
            create_game(db, '2026-04-04', [])


class TestReadGames:
    """Tests for listing and fetching games."""

    def test_get_game_players_sorted_by_name(self, db, game):
        names = [p['player_name'] for p in get_game(db, game['id'])['players']]
        assert names == ['Alice', 'Bob']

    def test_missing_game(self, db):
        with pytest.raises(NotFoundError, match='Game not found'):
            get_game(db, 'nope')

    def test_list_newest_first_with_counts(self, db, game, ids):
        create_game(db, '2026-05-01', [{'player_id': ids['Charlie'], 'buyin': 0, 'cashout': 0}])
        games = list_games(db)
        assert [g['date'] for g in games] == ['2026-05-01', '2026-04-03']
        assert [g['player_count'] for g in games] == [1, 2]

    def test_filter_by_player(self, db, game, ids):
        create_game(db, '2026-05-01', [{'player_id': ids['Charlie'], 'buyin': 0, 'cashout': 0}])
        assert [g['id'] for g in list_games(db, player_id=ids['Alice'])] == [game['id']]
        assert list_games(db, player_id='nobody') == []


class TestUpdateGame:
    """Tests for changing games and their players."""

    def test_update_date_and_completion(self, db, game):
        updated = update_game(db, game['id'], game_date=dt.date(2026, 4, 5), is_completed=True)
        assert updated['date'] == '2026-04-05'
        assert updated['is_completed'] is True

    def test_update_needs_a_field(self, db, game):
        with pytest.raises(LedgerError, match='No fields to update'):
            update_game(db, game['id'])

    def test_update_missing_game(self, db):
        with pytest.raises(NotFoundError):
            update_game(db, 'nope', is_completed=True)

    def test_add_player(self, db, game, ids):
        added = add_player_to_game(db, game['id'], ids['Charlie'], 20, 35)
        assert added['player_name'] == 'Charlie'
        assert added['profit'] == 15

        refreshed = get_game(db, game['id'])
        assert refreshed['total_buyins'] == 220
        assert refreshed['total_cashouts'] == 235
        assert refreshed['discrepancy'] == 15
        assert get_player(db, ids['Charlie'])['total_games'] == 1

    def test_add_player_twice(self, db, game, ids):
        with pytest.raises(LedgerError, match='already in this game'):
            add_player_to_game(db, game['id'], ids['Alice'], 10, 10)

    def test_add_unknown_player(self, db, game):
        with pytest.raises(NotFoundError):
            add_player_to_game(db, game['id'], 'ghost', 10, 10)

    def test_update_player_amounts_applies_difference(self, db, game, ids):
        """Test aggregates move by new minus old without counting a new game."""
        update_game_player(db, game['id'], ids['Alice'], 100, 120)

        alice = get_player(db, ids['Alice'])
        assert alice['net_profit'] == 20
        assert alice['total_cashouts'] == 120
        assert alice['total_games'] == 1

        refreshed = get_game(db, game['id'])
        assert refreshed['total_cashouts'] == 180
        assert refreshed['discrepancy'] == -20

    def test_update_player_not_in_game(self, db, game, ids):
        with pytest.raises(NotFoundError, match='Player not found in this game'):
            update_game_player(db, game['id'], ids['Charlie'], 10, 10)


class TestDeleteGame:
    """Tests for removing games."""

    def test_delete_reverses_aggregates(self, db, game, ids):
        delete_game(db, game['id'])

        with pytest.raises(NotFoundError):
            get_game(db, game['id'])
        for name in ('Alice', 'Bob'):
            player = get_player(db, ids[name])
            assert player['net_profit'] == 0
            assert player['total_games'] == 0
            assert player['total_buyins'] == 0
            assert player['total_cashouts'] == 0

    def test_delete_missing_game(self, db):
        with pytest.raises(NotFoundError):
            delete_game(db, 'nope')


class TestGameOverview:
    """Tests for the games dashboard."""

    def test_overview(self, db, game, ids):
        create_game(db, '2026-05-01', [{'player_id': ids['Charlie'], 'buyin': 10, 'cashout': 20}])
        update_game(db, game['id'], is_completed=True)

        overview = get_game_overview(db)
        assert overview['total_games'] == 2
        assert overview['completed_games'] == 1
        assert overview['total_buyins'] == 210
        assert overview['total_cashouts'] == 220
        assert overview['avg_discrepancy'] == 5
        assert overview['last_game_date'] == '2026-05-01'
        assert [g['date'] for g in overview['recentGames']] == ['2026-05-01', '2026-04-03']

    def test_empty_overview(self, db):
        overview = get_game_overview(db)
        assert overview['total_games'] == 0
        assert overview['completed_games'] == 0
        assert overview['avg_discrepancy'] is None
        assert overview['recentGames'] == []
