"""Unit tests for standings aggregation."""

import pytest

from ffu.errors import ConfigError, IssueKind
from ffu.models import MatchRecord, PlacementResult, RosterSeasonStat
from ffu.schemas import EraConfig, LeagueConfig
from ffu.standings import (
    aggregate_standings,
    calculate_game_stats,
    calculate_promotions,
    calculate_relegations,
    roster_stats_from_payload,
)


def stat(participant, wins, losses, points_for, points_against=0.0):
    return RosterSeasonStat(participant, wins, losses, points_for, points_against)


def placed(participant, placement):
    return PlacementResult(participant, placement, f'{placement}th')


@pytest.fixture
def config():
    return LeagueConfig(
        league_tiers=['PREMIER', 'MASTERS', 'NATIONAL'],
        eras=[EraConfig(name='Sleeper', first_year=2021, playoff_weeks=[15, 16, 17])],
        promotion_spots=2,
        relegation_spots=2,
    )


class TestAggregateStandings:
    """Tests for ranking a season."""

    def test_regular_season_tiebreak_on_points(self):
        """Test equal wins are broken by points for."""
        rows, issues = aggregate_standings([
            stat('A', 10, 2, 1500.0),
            stat('B', 10, 2, 1550.0),
        ])
        assert [(r.participant, r.rank) for r in rows] == [('B', 1), ('A', 2)]
        assert issues == []

    def test_wins_before_points(self):
        rows, _ = aggregate_standings([
            stat('A', 8, 6, 1800.0),
            stat('B', 9, 5, 1400.0),
        ])
        assert [r.participant for r in rows] == ['B', 'A']

    def test_participant_id_final_tiebreak(self):
        """Test identical records fall back to participant id for a strict order."""
        rows, _ = aggregate_standings([
            stat('zed', 7, 7, 1400.0),
            stat('amy', 7, 7, 1400.0),
        ])
        assert [r.participant for r in rows] == ['amy', 'zed']
        assert [r.rank for r in rows] == [1, 2]

    def test_placement_is_primary(self):
        """Test playoff placement outranks a better regular season."""
        stats = [
            stat('A', 12, 2, 1900.0),
            stat('B', 8, 6, 1500.0),
            stat('C', 9, 5, 1600.0),
        ]
        rows, _ = aggregate_standings(stats, [placed('B', 1), placed('A', 2), placed('C', 3)])
        assert [r.participant for r in rows] == ['B', 'A', 'C']
        assert [r.placement for r in rows] == [1, 2, 3]

    def test_placed_rank_above_unplaced(self):
        """Test every placed participant ranks above every unplaced one."""
        stats = [
            stat('A', 13, 1, 2000.0),
            stat('B', 3, 11, 1100.0),
            stat('C', 2, 12, 1000.0),
            stat('D', 12, 2, 1950.0),
        ]
        rows, _ = aggregate_standings(stats, [placed('C', 1), placed('B', 2)])
        assert [r.participant for r in rows] == ['C', 'B', 'A', 'D']
        assert rows[2].placement is None

    def test_placement_without_stats_reported(self):
        rows, issues = aggregate_standings([stat('A', 5, 5, 1000.0)], [placed('ghost', 1)])
        assert [r.participant for r in rows] == ['A']
        assert rows[0].rank == 1
        assert issues[0].kind is IssueKind.UNRESOLVABLE_PARTICIPANT
        assert issues[0].context['participant'] == 'ghost'

    def test_duplicate_stats_keep_first(self):
        rows, issues = aggregate_standings([stat('A', 5, 5, 1000.0), stat('A', 9, 1, 1500.0)])
        assert len(rows) == 1
        assert rows[0].wins == 5
        assert issues[0].kind is IssueKind.DUPLICATE_PARTICIPANT

    def test_high_low_game(self):
        records = [
            MatchRecord(1, 'A', 'B', 130.5, 99.0),
            MatchRecord(2, 'B', 'A', 140.0, 87.25),
        ]
        rows, _ = aggregate_standings(
            [stat('A', 1, 1, 217.75), stat('B', 1, 1, 239.0), stat('C', 0, 0, 0.0)],
            records=records,
        )
        by_participant = {r.participant: r for r in rows}
        assert by_participant['A'].high_game == 130.5
        assert by_participant['A'].low_game == 87.25
        assert by_participant['B'].high_game == 140.0
        assert by_participant['C'].high_game == 0.0

    def test_empty_season(self):
        assert aggregate_standings([]) == ([], [])


class TestGameStats:
    """Tests for high/low game calculation."""

    def test_games_collected(self):
        records = [
            MatchRecord(1, 'A', 'B', 100.0, 90.0),
            MatchRecord(2, 'A', 'C', 110.0, 70.0),
        ]
        stats = calculate_game_stats(records)
        assert stats['A'].games == (100.0, 110.0)
        assert stats['C'].high_game == stats['C'].low_game == 70.0


class TestRosterPayload:
    """Tests for converting platform rosters."""

    def test_points_with_decimals(self):
        stats, owners, issues = roster_stats_from_payload([
            {
                'roster_id': 1,
                'owner_id': 'u1',
                'settings': {
                    'wins': 9, 'losses': 5, 'fpts': 1650, 'fpts_decimal': 42,
                    'fpts_against': 1500, 'fpts_against_decimal': 8,
                },
            },
            {'roster_id': 2, 'owner_id': None},
        ])
        assert owners == {1: 'u1'}
        assert stats[0].points_for == 1650.42
        assert stats[0].points_against == 1500.08
        assert stats[0].wins == 9
        assert issues[0].kind is IssueKind.UNRESOLVABLE_PARTICIPANT


class TestPromotionRelegation:
    """Tests for tier movement."""

    @pytest.fixture
    def rows(self):
        rows, _ = aggregate_standings([stat(p, 14 - i, i, 1000.0) for i, p in enumerate('ABCDEF')])
        return rows

    def test_top_tier_no_promotions(self, rows, config):
        assert calculate_promotions('PREMIER', rows, config) == []
        assert calculate_relegations('PREMIER', rows, config) == ['E', 'F']

    def test_middle_tier(self, rows, config):
        assert calculate_promotions('MASTERS', rows, config) == ['A', 'B']
        assert calculate_relegations('MASTERS', rows, config) == ['E', 'F']

    def test_bottom_tier_no_relegations(self, rows, config):
        assert calculate_relegations('NATIONAL', rows, config) == []

    def test_available_tiers(self, rows, config):
        """Test a season without the middle tier promotes straight to the top."""
        tiers = ['PREMIER', 'NATIONAL']
        assert calculate_promotions('NATIONAL', rows, config, tiers) == ['A', 'B']
        assert calculate_relegations('PREMIER', rows, config, tiers) == ['E', 'F']

    def test_unknown_tier(self, rows, config):
        with pytest.raises(ConfigError):
            calculate_promotions('CHAMPIONSHIP', rows, config)
