"""Weekly matchup normalization.

Upstream sources report each head-to-head game twice, once from each side.
This module folds those rows back into one ``MatchRecord`` per game.

Tie policy: a pairing whose two scores are equal produces no MatchRecord.
It is reported as a ``TIED_SCORE`` issue carrying both sides and the score,
so neither side is ever credited with a win it did not earn.
"""

import logging
from collections.abc import Collection, Iterable, Mapping

from .errors import DataIssue, IssueKind
from .models import MatchRecord, Participant, RosterRef, ScoreRow
from .schemas import SleeperMatchupRow

logger = logging.getLogger('ffu.matchups')

PairingKey = tuple[int, frozenset]


def pairing_key(week: int, team: Participant, opponent: Participant) -> PairingKey:
    """Key identifying a pairing regardless of which side reported it."""
    return (week, frozenset((team, opponent)))


def normalize_matchups(
    rows: Iterable[ScoreRow],
    playoff_weeks: Collection[int] = (),
    placement_types: Mapping[PairingKey, str] | None = None,
) -> tuple[list[MatchRecord], list[DataIssue]]:
    """
    Fold team-perspective score rows into canonical match records.

    Rows are grouped by week and unordered team pair. A pairing becomes a
    record only when both sides reported; a lone side (bye, missing export
    row) is dropped and reported as ``INCOMPLETE_WEEK_PAIRING``.

    Args:
        rows: Score rows, two per real game
        playoff_weeks: Weeks whose records are flagged ``is_playoff``
        placement_types: Optional advisory labels keyed by ``pairing_key``

    Returns:
        Tuple of (records, issues). Records are ordered by week, then by
        the order in which each pairing first appeared.
    """
    placement_types = placement_types or {}
    issues: list[DataIssue] = []
    sides: dict[PairingKey, dict[Participant, ScoreRow]] = {}

    for row in rows:
        if row.team == row.opponent:
            issues.append(DataIssue(
                IssueKind.INCOMPLETE_WEEK_PAIRING,
                f'Week {row.week}: {row.team} is listed as its own opponent',
                {'week': row.week, 'team': row.team},
            ))
            continue

        key = pairing_key(row.week, row.team, row.opponent)
        pairing = sides.setdefault(key, {})
        if row.team in pairing:
            issues.append(DataIssue(
                IssueKind.DUPLICATE_MATCH,
                f'Week {row.week}: duplicate score row for {row.team} vs {row.opponent}',
                {'week': row.week, 'team': row.team, 'opponent': row.opponent},
            ))
            continue
        pairing[row.team] = row

    records: list[MatchRecord] = []
    for key, pairing in sides.items():
        week = key[0]
        if len(pairing) != 2:
            (only,) = pairing.values()
            logger.debug(f'Week {week}: no opposing row for {only.team} vs {only.opponent}')
            issues.append(DataIssue(
                IssueKind.INCOMPLETE_WEEK_PAIRING,
                f'Week {week}: only {only.team} reported its game against {only.opponent}',
                {'week': week, 'team': only.team, 'opponent': only.opponent},
            ))
            continue

        first, second = pairing.values()
        if first.score == second.score:
            logger.warning(
                f'Week {week}: {first.team} and {second.team} tied at {first.score}, record dropped'
            )
            issues.append(DataIssue(
                IssueKind.TIED_SCORE,
                f'Week {week}: {first.team} and {second.team} tied at {first.score}',
                {'week': week, 'teams': (first.team, second.team), 'score': first.score},
            ))
            continue

        winner, loser = (first, second) if first.score > second.score else (second, first)
        records.append(MatchRecord(
            week=week,
            winner=winner.team,
            loser=loser.team,
            winner_score=winner.score,
            loser_score=loser.score,
            is_playoff=week in playoff_weeks,
            placement_type=placement_types.get(key),
        ))

    records.sort(key=lambda r: r.week)
    return records, issues


def normalize_week(
    rows: Iterable[ScoreRow],
    week: int,
    is_playoff: bool = False,
) -> tuple[list[MatchRecord], list[DataIssue]]:
    """Normalize only the rows belonging to one week."""
    week_rows = [row for row in rows if row.week == week]
    return normalize_matchups(week_rows, playoff_weeks=(week,) if is_playoff else ())


def score_rows_from_matchups(
    matchups: Iterable[SleeperMatchupRow | dict],
    week: int,
    roster_to_owner: Mapping[RosterRef, Participant] | None = None,
) -> tuple[list[ScoreRow], list[DataIssue]]:
    """
    Convert platform matchup rows into mirrored score rows.

    Platform rows share a ``matchup_id`` per game. Rows without one are
    byes and produce nothing. A group that does not hold exactly two rows
    is reported as ``INCOMPLETE_WEEK_PAIRING``.

    Args:
        matchups: Platform rows (models or raw dicts) for one week
        week: Week the rows belong to
        roster_to_owner: Roster id -> participant; identity when omitted

    Returns:
        Tuple of (score_rows, issues)
    """
    issues: list[DataIssue] = []
    groups: dict[int, list[SleeperMatchupRow]] = {}

    for raw in matchups:
        row = raw if isinstance(raw, SleeperMatchupRow) else SleeperMatchupRow.model_validate(raw)
        if row.matchup_id is None:
            continue
        groups.setdefault(row.matchup_id, []).append(row)

    score_rows: list[ScoreRow] = []
    for matchup_id, group in groups.items():
        if len(group) != 2:
            issues.append(DataIssue(
                IssueKind.INCOMPLETE_WEEK_PAIRING,
                f'Week {week}: matchup {matchup_id} has {len(group)} rosters',
                {'week': week, 'matchup_id': matchup_id, 'rosters': [r.roster_id for r in group]},
            ))
            continue

        owners = []
        for row in group:
            owner = _resolve_roster(row.roster_id, roster_to_owner)
            if owner is None:
                issues.append(DataIssue(
                    IssueKind.UNRESOLVABLE_PARTICIPANT,
                    f'Week {week}: roster {row.roster_id} has no owner',
                    {'week': week, 'roster_id': row.roster_id},
                ))
            owners.append(owner)
        if None in owners:
            continue

        a, b = group
        score_rows.append(ScoreRow(week=week, team=owners[0], opponent=owners[1], score=a.points))
        score_rows.append(ScoreRow(week=week, team=owners[1], opponent=owners[0], score=b.points))

    return score_rows, issues


def _resolve_roster(
    roster_id: RosterRef,
    roster_to_owner: Mapping[RosterRef, Participant] | None,
) -> Participant | None:
    if roster_to_owner is None:
        return str(roster_id)
    return roster_to_owner.get(roster_id)
