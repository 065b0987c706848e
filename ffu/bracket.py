"""Playoff bracket placement resolution.

Turns the winners bracket and the losers ("toilet bowl") bracket of one
season into a total order of placements.

Winners bracket (placements 1..K, K = distinct participants in it):
- The championship match of the final round locks placements 1 and 2.
- A match carrying an explicit placement ``p`` gives its winner ``p`` and,
  when ``p < K``, its loser ``p + 1``. Slots and participants that already
  hold a placement are never overwritten.
- Whoever is still unplaced fills the smallest unused slots from 3 upwards,
  in order of first appearance in the node list (winner before loser).

Losers bracket (placements K+1..K+M): resolved with exactly the same rules
into bracket-local placements 1..M, where winning advances toward local 1.
Because winning the toilet bowl is the worst outcome of the season, local
placements are then mapped through ``invert_losers_placement``.
"""

import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field

from .constants import (
    CHAMPION_PLACEMENT,
    FIRST_FALLBACK_PLACEMENT,
    LOSERS_BRACKET,
    RUNNER_UP_PLACEMENT,
    WINNERS_BRACKET,
)
from .errors import DataIssue, IssueKind
from .matchups import PairingKey, pairing_key
from .models import BracketMatchNode, Participant, PlacementResult, RosterRef
from .schemas import BracketNodePayload
from .utils import ordinal

logger = logging.getLogger('ffu.bracket')


@dataclass(frozen=True)
class _ResolvedNode:
    index: int
    round: int
    explicit_placement: int | None
    winner: Participant | None
    loser: Participant | None

    @property
    def is_complete(self) -> bool:
        return self.winner is not None and self.loser is not None


@dataclass
class BracketResolution:
    """Bracket-local placements (1..size) for one bracket tree."""

    bracket: str
    size: int = 0
    placements: dict[Participant, int] = field(default_factory=dict)
    unplaced: list[Participant] = field(default_factory=list)
    issues: list[DataIssue] = field(default_factory=list)


def invert_losers_placement(local_placement: int, winners_size: int, losers_size: int) -> int:
    """
    Map a losers-bracket local placement onto the season placement.

    Local placement 1 (the toilet bowl "champion") is the worst finish of
    the season, K + M; local placement M is the best losers-bracket finish,
    K + 1.

    Args:
        local_placement: Placement within the losers bracket (1..M)
        winners_size: K, number of participants in the winners bracket
        losers_size: M, number of participants in the losers bracket

    Returns:
        Season placement in K+1..K+M
    """
    if not 1 <= local_placement <= losers_size:
        raise ValueError(
            f'Local placement {local_placement} outside losers bracket of size {losers_size}'
        )
    return winners_size + losers_size + 1 - local_placement


def placement_name(placement: int) -> str:
    return ordinal(placement)


def bracket_nodes_from_payload(payload: Iterable[BracketNodePayload | dict]) -> list[BracketMatchNode]:
    """Convert platform bracket nodes into ``BracketMatchNode`` objects."""
    nodes = []
    for raw in payload:
        node = raw if isinstance(raw, BracketNodePayload) else BracketNodePayload.model_validate(raw)
        nodes.append(BracketMatchNode(
            round=node.r,
            explicit_placement=node.p,
            winner=node.w,
            loser=node.l,
            match_id=node.m,
        ))
    return nodes


def _resolve_nodes(
    nodes: Sequence[BracketMatchNode],
    bracket: str,
    roster_to_owner: Mapping[RosterRef, Participant] | None,
    exclude: Iterable[Participant],
    issues: list[DataIssue],
) -> list[_ResolvedNode]:
    excluded = set(exclude)
    reported_excluded: set[Participant] = set()

    def resolve_side(index: int, ref: RosterRef | None) -> Participant | None:
        if ref is None:
            return None
        if roster_to_owner is None:
            participant = str(ref)
        else:
            participant = roster_to_owner.get(ref)
            if participant is None:
                issues.append(DataIssue(
                    IssueKind.UNRESOLVABLE_PARTICIPANT,
                    f'{bracket} bracket node {index}: roster {ref} has no owner',
                    {'bracket': bracket, 'node': index, 'roster_id': ref},
                ))
                return None
        if participant in excluded:
            if participant not in reported_excluded:
                reported_excluded.add(participant)
                issues.append(DataIssue(
                    IssueKind.CONFLICTING_PLACEMENT,
                    f'{participant} appears in the winners and {bracket} brackets; '
                    f'keeping the winners bracket placement',
                    {'bracket': bracket, 'participant': participant},
                ))
            return None
        return participant

    resolved = []
    for index, node in enumerate(nodes):
        if node.winner is None or node.loser is None:
            issues.append(DataIssue(
                IssueKind.MALFORMED_BRACKET_NODE,
                f'{bracket} bracket node {index} (round {node.round}) is missing '
                f'its {"winner" if node.winner is None else "loser"}',
                {'bracket': bracket, 'node': index, 'round': node.round},
            ))
        resolved.append(_ResolvedNode(
            index=index,
            round=node.round,
            explicit_placement=node.explicit_placement,
            winner=resolve_side(index, node.winner),
            loser=resolve_side(index, node.loser),
        ))
    return resolved


def find_championship_node(nodes: Sequence[BracketMatchNode]) -> int | None:
    """
    Pick the index of the match that decides first place.

    Among the final-round nodes, prefer the one explicitly deciding 1st
    place, then the first one with no explicit placement (platforms label
    consolation games in the final round, not the title game), then simply
    the first one.
    """
    if not nodes:
        return None
    final_round = max(node.round for node in nodes)
    finals = [i for i, node in enumerate(nodes) if node.round == final_round]
    for i in finals:
        if nodes[i].explicit_placement == CHAMPION_PLACEMENT:
            return i
    for i in finals:
        if nodes[i].explicit_placement is None:
            return i
    return finals[0]


def resolve_bracket(
    nodes: Sequence[BracketMatchNode],
    roster_to_owner: Mapping[RosterRef, Participant] | None = None,
    bracket: str = WINNERS_BRACKET,
    exclude: Iterable[Participant] = (),
) -> BracketResolution:
    """
    Resolve one bracket tree into bracket-local placements 1..size.

    Args:
        nodes: Bracket match nodes in platform order
        roster_to_owner: Roster id -> participant; identity when omitted
        bracket: Bracket name used in issue messages
        exclude: Participants already placed by another bracket

    Returns:
        BracketResolution with placements keyed by participant
    """
    result = BracketResolution(bracket=bracket)
    if not nodes:
        result.issues.append(DataIssue(
            IssueKind.EMPTY_BRACKET,
            f'{bracket} bracket has no matches',
            {'bracket': bracket},
        ))
        return result

    resolved = _resolve_nodes(nodes, bracket, roster_to_owner, exclude, result.issues)

    # First-appearance order, winner before loser
    participants: dict[Participant, None] = {}
    for node in resolved:
        for participant in (node.winner, node.loser):
            if participant is not None:
                participants.setdefault(participant, None)
    size = result.size = len(participants)
    placements = result.placements
    taken: dict[int, Participant] = {}

    def conflict(message: str, **context) -> None:
        logger.warning(f'{bracket} bracket: {message}')
        result.issues.append(DataIssue(
            IssueKind.CONFLICTING_PLACEMENT, message, {'bracket': bracket, **context},
        ))

    def assign(participant: Participant, placement: int, node: _ResolvedNode) -> None:
        if not 1 <= placement <= size:
            conflict(
                f'node {node.index} places {participant} at {placement}, '
                f'outside 1..{size}',
                node=node.index, participant=participant, placement=placement,
            )
        elif participant in placements:
            if placements[participant] != placement:
                conflict(
                    f'node {node.index} places {participant} at {placement}, '
                    f'already placed {placements[participant]}',
                    node=node.index, participant=participant, placement=placement,
                )
        elif placement in taken:
            conflict(
                f'node {node.index} places {participant} at {placement}, '
                f'already held by {taken[placement]}',
                node=node.index, participant=participant, placement=placement,
            )
        else:
            placements[participant] = placement
            taken[placement] = participant

    championship_index = find_championship_node(nodes)
    championship = resolved[championship_index]
    if championship.is_complete:
        assign(championship.winner, CHAMPION_PLACEMENT, championship)
        assign(championship.loser, RUNNER_UP_PLACEMENT, championship)
    else:
        logger.warning(f'{bracket} bracket: championship match has no result')

    explicit = [
        node for node in resolved
        if node.is_complete
        and node.explicit_placement is not None
        and node.index != championship_index
    ]
    for node in explicit:
        assign(node.winner, node.explicit_placement, node)
    for node in explicit:
        if node.explicit_placement < size:
            assign(node.loser, node.explicit_placement + 1, node)

    open_slots = (
        slot for slot in range(FIRST_FALLBACK_PLACEMENT, size + 1) if slot not in taken
    )
    for participant in participants:
        if participant in placements:
            continue
        slot = next(open_slots, None)
        if slot is None:
            result.unplaced.append(participant)
            result.issues.append(DataIssue(
                IssueKind.UNPLACED_PARTICIPANT,
                f'{bracket} bracket: no open placement left for {participant}',
                {'bracket': bracket, 'participant': participant},
            ))
            continue
        logger.debug(f'{bracket} bracket: {participant} placed {slot} by appearance order')
        placements[participant] = slot
        taken[slot] = participant

    return result


def resolve_brackets(
    winners_bracket: Sequence[BracketMatchNode],
    losers_bracket: Sequence[BracketMatchNode],
    roster_to_owner: Mapping[RosterRef, Participant] | None = None,
) -> tuple[list[PlacementResult], list[DataIssue]]:
    """
    Resolve both bracket trees of a season into season placements.

    Args:
        winners_bracket: Nodes deciding the top placements
        losers_bracket: Nodes deciding the bottom placements (winning is bad)
        roster_to_owner: Roster id -> participant; identity when omitted

    Returns:
        Tuple of (placements sorted best first, issues)
    """
    winners = resolve_bracket(winners_bracket, roster_to_owner, WINNERS_BRACKET)
    losers = resolve_bracket(
        losers_bracket,
        roster_to_owner,
        LOSERS_BRACKET,
        exclude=winners.placements.keys() | set(winners.unplaced),
    )

    results = [
        PlacementResult(participant, placement, placement_name(placement), WINNERS_BRACKET)
        for participant, placement in winners.placements.items()
    ]
    for participant, local in losers.placements.items():
        placement = invert_losers_placement(local, winners.size, losers.size)
        results.append(
            PlacementResult(participant, placement, placement_name(placement), LOSERS_BRACKET)
        )
    results.sort(key=lambda r: r.placement)

    logger.debug(
        f'Resolved {len(results)} placements '
        f'(winners bracket {winners.size}, losers bracket {losers.size})'
    )
    return results, winners.issues + losers.issues


def bracket_placement_types(
    winners_bracket: Sequence[BracketMatchNode],
    losers_bracket: Sequence[BracketMatchNode],
    playoff_weeks: Sequence[int],
    roster_to_owner: Mapping[RosterRef, Participant] | None = None,
) -> dict[PairingKey, str]:
    """
    Label playoff pairings with the bracket game they were.

    Round ``r`` of a bracket is played in ``playoff_weeks[r - 1]``. Labels
    are advisory metadata for match records, e.g. 'Championship',
    '3rd Place', 'Semifinal', 'Toilet Bowl Semifinal'.

    Returns:
        Dict mapping ``pairing_key(week, a, b)`` -> label
    """
    labels: dict[PairingKey, str] = {}
    for bracket, nodes in ((WINNERS_BRACKET, winners_bracket), (LOSERS_BRACKET, losers_bracket)):
        if not nodes:
            continue
        prefix = '' if bracket == WINNERS_BRACKET else 'Toilet Bowl '
        championship_index = find_championship_node(nodes)
        final_round = nodes[championship_index].round
        for index, node in enumerate(nodes):
            if node.winner is None or node.loser is None or node.round > len(playoff_weeks):
                continue
            if roster_to_owner is None:
                winner, loser = str(node.winner), str(node.loser)
            else:
                winner, loser = roster_to_owner.get(node.winner), roster_to_owner.get(node.loser)
                if winner is None or loser is None:
                    continue

            if index == championship_index:
                label = 'Championship' if bracket == WINNERS_BRACKET else 'Toilet Bowl'
            elif node.explicit_placement is not None:
                label = f'{prefix}{ordinal(node.explicit_placement)} Place'
            elif node.round == final_round - 1:
                label = f'{prefix}Semifinal'
            elif node.round == final_round - 2:
                label = f'{prefix}Quarterfinal'
            else:
                label = f'{prefix}Round {node.round}'
            labels[pairing_key(playoff_weeks[node.round - 1], winner, loser)] = label
    return labels
