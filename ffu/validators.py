"""Data-integrity checks across season stats, placements, and match records."""

from collections.abc import Iterable, Sequence

from .errors import DataIssue, IssueKind
from .models import MatchRecord, PlacementResult, RosterSeasonStat, StandingRow


def validate_bracket_coverage(
    stats: Sequence[RosterSeasonStat],
    placements: Sequence[PlacementResult],
) -> list[DataIssue]:
    """
    Report participants with season stats that no bracket placed.

    Only meaningful when the season had playoff data at all; with no
    placements every participant is ranked by record and nothing is missing.

    Args:
        stats: Season stats for the league
        placements: Resolved bracket placements

    Returns:
        List of UNRESOLVABLE_PARTICIPANT issues (empty if fully covered)
    """
    if not placements:
        return []

    placed = {p.participant for p in placements}
    return [
        DataIssue(
            IssueKind.UNRESOLVABLE_PARTICIPANT,
            f'{stat.participant} has season stats but appears in no bracket',
            {'participant': stat.participant},
        )
        for stat in stats
        if stat.participant not in placed
    ]


def validate_placements(placements: Sequence[PlacementResult]) -> list[DataIssue]:
    """
    Check that placements form a permutation of 1..N.

    Checks:
    - No placement is held by two participants
    - No participant holds two placements
    - No gaps between 1 and the worst placement

    Returns:
        List of issues (empty if valid)
    """
    issues = []
    holders: dict[int, str] = {}
    seen: set[str] = set()

    for result in placements:
        if result.participant in seen:
            issues.append(DataIssue(
                IssueKind.DUPLICATE_PARTICIPANT,
                f'{result.participant} holds more than one placement',
                {'participant': result.participant},
            ))
        seen.add(result.participant)

        if result.placement in holders:
            issues.append(DataIssue(
                IssueKind.CONFLICTING_PLACEMENT,
                f'Placement {result.placement} held by {holders[result.placement]} '
                f'and {result.participant}',
                {'placement': result.placement},
            ))
        holders.setdefault(result.placement, result.participant)

    if holders:
        missing = sorted(set(range(1, max(holders) + 1)) - set(holders))
        if missing:
            issues.append(DataIssue(
                IssueKind.UNPLACED_PARTICIPANT,
                f'No participant holds placement(s) {", ".join(map(str, missing))}',
                {'missing': missing},
            ))

    return issues


def validate_records(
    records: Iterable[MatchRecord],
    stats: Sequence[RosterSeasonStat],
) -> list[DataIssue]:
    """Report match records naming participants that have no season stats."""
    known = {stat.participant for stat in stats}
    unknown: dict[str, int] = {}
    for record in records:
        for participant in (record.winner, record.loser):
            if participant not in known:
                unknown.setdefault(participant, record.week)

    return [
        DataIssue(
            IssueKind.UNRESOLVABLE_PARTICIPANT,
            f'{participant} played in week {week} but has no season stats',
            {'participant': participant, 'week': week},
        )
        for participant, week in unknown.items()
    ]


def validate_standings(standings: Sequence[StandingRow]) -> list[str]:
    """
    Check that ranks are exactly 1..N in order.

    Returns:
        List of error messages (empty if valid)
    """
    errors = []
    ranks = [row.rank for row in standings]
    if ranks != list(range(1, len(standings) + 1)):
        errors.append(f'Ranks are not 1..{len(standings)} in order: {ranks}')

    placed_seen_after_unplaced = False
    unplaced_seen = False
    for row in standings:
        if row.placement is None:
            unplaced_seen = True
        elif unplaced_seen:
            placed_seen_after_unplaced = True
    if placed_seen_after_unplaced:
        errors.append('A placed participant ranks below an unplaced participant')

    return errors


def partition_issues(issues: Iterable[DataIssue]) -> tuple[list[DataIssue], list[DataIssue]]:
    """
    Split issues for reporting.

    Returns:
        Tuple of (warnings, notices)
        - warnings: Data defects the engine recovered from
        - notices: Informational findings such as an empty bracket
    """
    warnings: list[DataIssue] = []
    notices: list[DataIssue] = []
    for issue in issues:
        (warnings if issue.is_warning else notices).append(issue)
    return warnings, notices
