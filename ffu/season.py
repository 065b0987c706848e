"""One-season pipeline that ties the engine components together."""

import logging
from collections.abc import Iterable
from pathlib import Path

from .bracket import bracket_nodes_from_payload, bracket_placement_types, resolve_brackets
from .config import get_available_leagues, get_config, get_playoff_weeks
from .errors import DataIssue
from .head_to_head import HeadToHeadIndex
from .matchups import normalize_matchups, score_rows_from_matchups
from .models import ScoreRow, SeasonInput, SeasonResult
from .schemas import LeagueConfig, SeasonPayload
from .standings import (
    aggregate_standings,
    calculate_promotions,
    calculate_relegations,
    roster_stats_from_payload,
)
from .utils import load_json
from .validators import partition_issues, validate_bracket_coverage, validate_records

logger = logging.getLogger('ffu.season')


def season_input_from_payload(payload: SeasonPayload) -> tuple[SeasonInput, list[DataIssue]]:
    """
    Convert a validated season payload into engine input.

    Platform weeks are converted through the roster -> owner mapping built
    from the rosters; legacy ``score_rows`` already name participants.

    Returns:
        Tuple of (season_input, issues found while converting)
    """
    stats, roster_to_owner, issues = roster_stats_from_payload(payload.rosters)

    score_rows = [
        ScoreRow(week=row.week, team=row.team, opponent=row.opponent, score=row.score)
        for row in payload.score_rows
    ]
    for week in payload.weeks:
        rows, week_issues = score_rows_from_matchups(week.matchups, week.week, roster_to_owner)
        score_rows.extend(rows)
        issues.extend(week_issues)

    season = SeasonInput(
        league=payload.league,
        year=payload.year,
        rosters=stats,
        score_rows=score_rows,
        winners_bracket=bracket_nodes_from_payload(payload.winners_bracket),
        losers_bracket=bracket_nodes_from_payload(payload.losers_bracket),
        roster_to_owner=roster_to_owner or None,
    )
    return season, issues


def load_season_input(path: Path | str) -> tuple[SeasonInput, list[DataIssue]]:
    """
    Load a season bundle JSON file.

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file doesn't match SeasonPayload
    """
    payload = load_json(path, schema=SeasonPayload)
    return season_input_from_payload(payload)


def compute_season(
    season: SeasonInput,
    config: LeagueConfig | None = None,
    issues: Iterable[DataIssue] = (),
) -> SeasonResult:
    """
    Recompute one season of one league from its complete input.

    Steps:
    - Normalize weekly score rows into match records (playoff weeks flagged)
    - Resolve winners and losers brackets into placements
    - Rank the standings and derive promotions/relegations
    - Collect every data issue found along the way

    Args:
        season: Complete input for the season
        config: League configuration (default: packaged config)
        issues: Issues already found upstream, carried into the result

    Returns:
        SeasonResult with records, placements, standings and issues
    """
    config = config or get_config()
    result = SeasonResult(league=season.league, year=season.year, issues=list(issues))

    playoff_weeks = get_playoff_weeks(season.year, config)
    placement_types = bracket_placement_types(
        season.winners_bracket, season.losers_bracket, playoff_weeks, season.roster_to_owner,
    )

    result.records, record_issues = normalize_matchups(
        season.score_rows, playoff_weeks, placement_types,
    )
    result.placements, bracket_issues = resolve_brackets(
        season.winners_bracket, season.losers_bracket, season.roster_to_owner,
    )
    result.standings, standings_issues = aggregate_standings(
        season.rosters, result.placements, result.records,
    )
    result.issues.extend(record_issues + bracket_issues + standings_issues)
    result.issues.extend(validate_bracket_coverage(season.rosters, result.placements))
    result.issues.extend(validate_records(result.records, season.rosters))

    available = get_available_leagues(season.year, config)
    result.promotions = calculate_promotions(season.league, result.standings, config, available)
    result.relegations = calculate_relegations(season.league, result.standings, config, available)

    warnings, _notices = partition_issues(result.issues)
    for issue in warnings:
        logger.warning(f'{season.year} {season.league}: {issue}')
    logger.info(
        f'{season.year} {season.league}: {len(result.standings)} ranked, '
        f'{len(result.placements)} placed, {len(result.records)} matches, '
        f'{len(warnings)} warning(s)'
    )
    return result


def compute_seasons(
    seasons: Iterable[SeasonInput],
    config: LeagueConfig | None = None,
) -> list[SeasonResult]:
    """Recompute several independent seasons."""
    config = config or get_config()
    return [compute_season(season, config) for season in seasons]


def build_head_to_head(results: Iterable[SeasonResult]) -> HeadToHeadIndex:
    """Index the match records of every computed season."""
    return HeadToHeadIndex.build((r.year, r.league, r.records) for r in results)
