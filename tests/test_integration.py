"""Integration tests for the season pipeline."""

import json

import pytest

from ffu.errors import IssueKind
from ffu.models import RosterSeasonStat, ScoreRow, SeasonInput
from ffu.season import build_head_to_head, compute_season, compute_seasons, load_season_input
from ffu.validators import partition_issues, validate_placements, validate_standings


def week(number, *games):
    """Build platform rows: each game is (roster_a, points_a, roster_b, points_b)."""
    rows = []
    for matchup_id, (ra, pa, rb, pb) in enumerate(games, 1):
        rows.append({'roster_id': ra, 'matchup_id': matchup_id, 'points': pa})
        rows.append({'roster_id': rb, 'matchup_id': matchup_id, 'points': pb})
    return {'week': number, 'matchups': rows}


@pytest.fixture
def season_file(tmp_path):
    """Six-team 2023 Premier season with a 4-team playoff and 2-team toilet bowl."""
    records = {1: (4, 0), 2: (2, 2), 3: (2, 2), 4: (1, 3), 5: (1, 2), 6: (1, 2)}
    payload = {
        'league': 'PREMIER',
        'year': 2023,
        'rosters': [
            {
                'roster_id': rid,
                'owner_id': f'u{rid}',
                'settings': {'wins': w, 'losses': l, 'fpts': 400 - rid, 'fpts_decimal': 50},
            }
            for rid, (w, l) in records.items()
        ],
        'weeks': [
            week(1, (1, 110, 2, 100), (3, 90, 4, 95), (5, 80, 6, 80)),
            week(2, (1, 120, 3, 100), (2, 105, 4, 99), (5, 85, 6, 90)),
            week(15, (1, 130, 4, 100), (2, 115, 3, 120), (5, 70, 6, 60)),
            week(16, (1, 125, 3, 118), (2, 111, 4, 107)),
        ],
        'winners_bracket': [
            {'r': 1, 'm': 1, 't1': 1, 't2': 4, 'w': 1, 'l': 4},
            {'r': 1, 'm': 2, 't1': 2, 't2': 3, 'w': 3, 'l': 2},
            {'r': 2, 'm': 3, 'p': 1, 'w': 1, 'l': 3},
            {'r': 2, 'm': 4, 'p': 3, 'w': 2, 'l': 4},
        ],
        'losers_bracket': [
            {'r': 1, 'm': 1, 'p': 1, 'w': 5, 'l': 6},
        ],
    }
    path = tmp_path / 'premier_2023.json'
    path.write_text(json.dumps(payload))
    return path


@pytest.fixture
def result(season_file):
    season, issues = load_season_input(season_file)
    return compute_season(season, issues=issues)


class TestSeasonPipeline:
    """Tests for recomputing one season end to end."""

    def test_final_standings(self, result):
        assert [r.participant for r in result.standings] == ['u1', 'u3', 'u2', 'u4', 'u6', 'u5']
        assert [r.rank for r in result.standings] == [1, 2, 3, 4, 5, 6]
        assert result.champion == 'u1'
        assert validate_standings(result.standings) == []

    def test_toilet_bowl_winner_last(self, result):
        by_participant = {p.participant: p for p in result.placements}
        assert by_participant['u5'].placement == 6
        assert by_participant['u5'].bracket == 'losers'
        assert by_participant['u6'].placement == 5
        assert validate_placements(result.placements) == []

    def test_records(self, result):
        """Test tied games are dropped and playoff games labelled."""
        assert len(result.records) == 10
        playoff = [r for r in result.records if r.is_playoff]
        assert len(playoff) == 5
        labels = {(r.week, r.winner, r.loser): r.placement_type for r in playoff}
        assert labels[(16, 'u1', 'u3')] == 'Championship'
        assert labels[(16, 'u2', 'u4')] == '3rd Place'
        assert labels[(15, 'u3', 'u2')] == 'Semifinal'
        assert labels[(15, 'u5', 'u6')] == 'Toilet Bowl'

    def test_issues(self, result):
        warnings, notices = partition_issues(result.issues)
        assert [i.kind for i in warnings] == [IssueKind.TIED_SCORE]
        assert notices == []

    def test_game_stats_and_points(self, result):
        champion = result.standings[0]
        assert champion.high_game == 130
        assert champion.low_game == 110
        assert champion.points_for == 399.5

    def test_tier_movement(self, result):
        assert result.promotions == []
        assert result.relegations == ['u6', 'u5']

    def test_head_to_head(self, result):
        index = build_head_to_head([result])
        matches = index.matches('u3', 'u1')
        assert [(m.week, m.winner) for m in matches] == [(16, 'u1'), (2, 'u1')]
        assert index.stats('u1', 'u3').a_wins == 2
        assert index.matches('u5', 'u6')[0].placement_type == 'Toilet Bowl'


class TestSeasonWithoutPlayoffs:
    """Tests for seasons with no bracket data."""

    def test_regular_season_order(self):
        season = SeasonInput(
            league='NATIONAL',
            year=2019,
            rosters=[
                RosterSeasonStat('A', 10, 2, 1500.0),
                RosterSeasonStat('B', 10, 2, 1550.0),
                RosterSeasonStat('C', 3, 9, 1200.0),
            ],
            score_rows=[
                ScoreRow(14, 'A', 'B', 101.0),
                ScoreRow(14, 'B', 'A', 99.0),
            ],
        )
        result = compute_season(season)
        assert [(r.participant, r.rank) for r in result.standings] == [('B', 1), ('A', 2), ('C', 3)]
        assert result.placements == []
        assert result.records[0].is_playoff
        assert result.promotions == ['B', 'A']
        assert result.relegations == []
        _warnings, notices = partition_issues(result.issues)
        assert {i.kind for i in notices} == {IssueKind.EMPTY_BRACKET}

    def test_many_seasons(self):
        seasons = [
            SeasonInput('PREMIER', 2021, [RosterSeasonStat('A', 1, 0, 100.0)]),
            SeasonInput('NATIONAL', 2021, [RosterSeasonStat('B', 1, 0, 100.0)]),
        ]
        results = compute_seasons(seasons)
        assert [r.standings[0].participant for r in results] == ['A', 'B']


class TestSeasonPayload:
    """Tests for rejecting malformed season bundles."""

    def test_unknown_league(self, tmp_path):
        path = tmp_path / 'bad.json'
        path.write_text(json.dumps({'league': 'CHAMPIONSHIP', 'year': 2023, 'rosters': []}))
        with pytest.raises(ValueError, match='Schema validation failed'):
            load_season_input(path)

    def test_orphan_roster_reported(self, tmp_path):
        path = tmp_path / 'orphan.json'
        path.write_text(json.dumps({
            'league': 'MASTERS',
            'year': 2023,
            'rosters': [{'roster_id': 1, 'owner_id': 'u1'}, {'roster_id': 2}],
            'weeks': [week(1, (1, 100, 2, 90))],
        }))
        season, issues = load_season_input(path)
        assert [r.participant for r in season.rosters] == ['u1']
        kinds = [i.kind for i in issues]
        assert kinds == [IssueKind.UNRESOLVABLE_PARTICIPANT, IssueKind.UNRESOLVABLE_PARTICIPANT]
        assert season.score_rows == []
