"""Season standings aggregation.

Playoff placement decides the order of everyone who reached a bracket.
Everyone else follows, ordered by regular-season wins and then points for.
Participant id is the last tiebreaker, so ranks are always 1..N with no
ties and no gaps.
"""

import logging
from collections.abc import Iterable, Sequence

from .config import get_config
from .errors import ConfigError, DataIssue, IssueKind
from .models import (
    GameStats,
    MatchRecord,
    Participant,
    PlacementResult,
    RosterSeasonStat,
    StandingRow,
)
from .schemas import LeagueConfig, RosterPayload

logger = logging.getLogger('ffu.standings')


def roster_stats_from_payload(
    rosters: Iterable[RosterPayload | dict],
) -> tuple[list[RosterSeasonStat], dict[int, str], list[DataIssue]]:
    """
    Convert platform rosters into season stats and a roster -> owner map.

    Rosters without an owner (orphaned teams) cannot be tracked across
    seasons and are reported as ``UNRESOLVABLE_PARTICIPANT``.

    Returns:
        Tuple of (stats, roster_to_owner, issues)
    """
    stats: list[RosterSeasonStat] = []
    roster_to_owner: dict[int, str] = {}
    issues: list[DataIssue] = []

    for raw in rosters:
        roster = raw if isinstance(raw, RosterPayload) else RosterPayload.model_validate(raw)
        if not roster.owner_id:
            issues.append(DataIssue(
                IssueKind.UNRESOLVABLE_PARTICIPANT,
                f'Roster {roster.roster_id} has no owner',
                {'roster_id': roster.roster_id},
            ))
            continue
        roster_to_owner[roster.roster_id] = roster.owner_id
        stats.append(RosterSeasonStat(
            participant=roster.owner_id,
            wins=roster.settings.wins,
            losses=roster.settings.losses,
            points_for=round(roster.settings.points_for, 2),
            points_against=round(roster.settings.points_against, 2),
        ))

    return stats, roster_to_owner, issues


def calculate_game_stats(records: Iterable[MatchRecord]) -> dict[Participant, GameStats]:
    """
    Calculate each participant's highest and lowest single-game score.

    Args:
        records: Match records for one season

    Returns:
        Dict mapping participant -> GameStats
    """
    games: dict[Participant, list[float]] = {}
    for record in records:
        games.setdefault(record.winner, []).append(record.winner_score)
        games.setdefault(record.loser, []).append(record.loser_score)

    return {
        participant: GameStats(
            participant=participant,
            high_game=max(scores),
            low_game=min(scores),
            games=tuple(scores),
        )
        for participant, scores in games.items()
    }


def standing_sort_key(stat: RosterSeasonStat, placement: int | None) -> tuple:
    """Sort key putting placed participants first, then wins, then points for."""
    if placement is not None:
        return (0, placement, 0, 0.0, stat.participant)
    return (1, 0, -stat.wins, -stat.points_for, stat.participant)


def aggregate_standings(
    stats: Sequence[RosterSeasonStat],
    placements: Sequence[PlacementResult] = (),
    records: Iterable[MatchRecord] = (),
) -> tuple[list[StandingRow], list[DataIssue]]:
    """
    Produce the fully ranked standings for one season of one league.

    Args:
        stats: Regular-season totals, one per participant
        placements: Bracket placements (empty when there was no playoff data)
        records: Season match records, used for high/low game

    Returns:
        Tuple of (standings ordered by rank, issues)
    """
    issues: list[DataIssue] = []

    by_participant: dict[Participant, RosterSeasonStat] = {}
    for stat in stats:
        if stat.participant in by_participant:
            issues.append(DataIssue(
                IssueKind.DUPLICATE_PARTICIPANT,
                f'{stat.participant} has more than one season stat row; keeping the first',
                {'participant': stat.participant},
            ))
            continue
        by_participant[stat.participant] = stat

    placement_map: dict[Participant, int] = {}
    for result in placements:
        if result.participant not in by_participant:
            logger.warning(f'{result.participant} placed {result.placement} but has no season stats')
            issues.append(DataIssue(
                IssueKind.UNRESOLVABLE_PARTICIPANT,
                f'{result.participant} finished {result.placement_name} but has no season stats',
                {'participant': result.participant, 'placement': result.placement},
            ))
            continue
        placement_map[result.participant] = result.placement

    game_stats = calculate_game_stats(records)
    ordered = sorted(
        by_participant.values(),
        key=lambda s: standing_sort_key(s, placement_map.get(s.participant)),
    )

    rows = []
    for rank, stat in enumerate(ordered, 1):
        games = game_stats.get(stat.participant)
        rows.append(StandingRow(
            participant=stat.participant,
            wins=stat.wins,
            losses=stat.losses,
            points_for=stat.points_for,
            points_against=stat.points_against,
            rank=rank,
            high_game=games.high_game if games else 0.0,
            low_game=games.low_game if games else 0.0,
            placement=placement_map.get(stat.participant),
        ))

    return rows, issues


def _require_tier(league: str, config: LeagueConfig) -> None:
    if league not in config.league_tiers:
        raise ConfigError(f'Unknown league tier: {league}')


def calculate_promotions(
    league: str,
    standings: Sequence[StandingRow],
    config: LeagueConfig | None = None,
    available_tiers: Sequence[str] | None = None,
) -> list[Participant]:
    """
    Get the participants promoted out of a league.

    The top tier has nobody to promote. When ``available_tiers`` is given,
    promotion goes to the next tier that existed that season.
    """
    config = config or get_config()
    tiers = list(available_tiers) if available_tiers is not None else config.league_tiers
    _require_tier(league, config)
    if league not in tiers or tiers.index(league) == 0:
        return []
    return [row.participant for row in standings[:config.promotion_spots]]


def calculate_relegations(
    league: str,
    standings: Sequence[StandingRow],
    config: LeagueConfig | None = None,
    available_tiers: Sequence[str] | None = None,
) -> list[Participant]:
    """Get the participants relegated out of a league (none from the bottom tier)."""
    config = config or get_config()
    tiers = list(available_tiers) if available_tiers is not None else config.league_tiers
    _require_tier(league, config)
    if league not in tiers or tiers.index(league) == len(tiers) - 1:
        return []
    if config.relegation_spots == 0:
        return []
    return [row.participant for row in standings[-config.relegation_spots:]]
