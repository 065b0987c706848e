"""Cross-season head-to-head index.

Every match is stored under both ``index[winner][loser]`` and
``index[loser][winner]`` so the games between any two participants are a
pair of dict lookups away, from either side. Within one participant pair
the ``(year, league, week)`` key is unique: a match fed to the builder twice
(e.g. from overlapping exports) is stored once and reported as
``DUPLICATE_MATCH``.

The index is rebuilt wholesale whenever the corpus changes; there is no
incremental update path.
"""

import logging
from collections.abc import Callable, Hashable, Iterable
from datetime import datetime, timedelta

from .config import get_config
from .errors import DataIssue, IssueKind
from .models import HeadToHeadStats, IndexedMatch, MatchRecord, Participant
from .schemas import LeagueConfig

logger = logging.getLogger('ffu.head_to_head')

SeasonRecords = tuple[int, str, Iterable[MatchRecord]]


class HeadToHeadIndex:
    """Bidirectional participant-pair index over all historical matches."""

    def __init__(self) -> None:
        self._index: dict[Participant, dict[Participant, list[IndexedMatch]]] = {}
        self._keys: set[tuple[frozenset, tuple[int, str, int]]] = set()
        self.issues: list[DataIssue] = []

    @classmethod
    def build(cls, corpus: Iterable[SeasonRecords]) -> 'HeadToHeadIndex':
        """
        Build an index from ``(year, league, records)`` triples.

        Args:
            corpus: Every season of every league, with its match records

        Returns:
            A fully built HeadToHeadIndex
        """
        index = cls()
        for year, league, records in corpus:
            for record in records:
                index._add(IndexedMatch.from_record(record, year, league))
        logger.debug(
            f'Indexed {len(index._keys)} matches across {len(index._index)} participants'
        )
        return index

    def _add(self, match: IndexedMatch) -> None:
        if match.winner == match.loser:
            self.issues.append(DataIssue(
                IssueKind.INCOMPLETE_WEEK_PAIRING,
                f'{match.year} {match.league} week {match.week}: {match.winner} played itself',
                {'key': match.key, 'participant': match.winner},
            ))
            return

        dedupe_key = (frozenset((match.winner, match.loser)), match.key)
        if dedupe_key in self._keys:
            self.issues.append(DataIssue(
                IssueKind.DUPLICATE_MATCH,
                f'{match.year} {match.league} week {match.week}: '
                f'{match.winner} vs {match.loser} already indexed',
                {'key': match.key, 'participants': (match.winner, match.loser)},
            ))
            return
        self._keys.add(dedupe_key)

        self._index.setdefault(match.winner, {}).setdefault(match.loser, []).append(match)
        self._index.setdefault(match.loser, {}).setdefault(match.winner, []).append(match)

    @property
    def participants(self) -> list[Participant]:
        return sorted(self._index)

    @property
    def match_count(self) -> int:
        return len(self._keys)

    def opponents(self, participant: Participant) -> list[Participant]:
        """Everyone ``participant`` has played at least once."""
        return sorted(self._index.get(participant, {}))

    def matches(self, a: Participant, b: Participant) -> list[IndexedMatch]:
        """
        Get every match between ``a`` and ``b``, most recent first.

        Results are de-duplicated by ``(year, league, week)`` and sorted by
        year descending, then week descending.
        """
        unique: dict[tuple[int, str, int], IndexedMatch] = {}
        for match in self._index.get(a, {}).get(b, []):
            unique.setdefault(match.key, match)
        return sorted(unique.values(), key=lambda m: (-m.year, -m.week, m.league))

    def stats(self, a: Participant, b: Participant) -> HeadToHeadStats:
        return calculate_head_to_head_stats(self.matches(a, b), a, b)


def calculate_head_to_head_stats(
    matches: Iterable[IndexedMatch],
    a: Participant,
    b: Participant,
) -> HeadToHeadStats:
    """
    Reduce a list of matches to the win/score record between ``a`` and ``b``.

    Args:
        matches: De-duplicated matches between the two participants
        a: Participant whose numbers fill the ``a_*`` fields
        b: Participant whose numbers fill the ``b_*`` fields

    Returns:
        HeadToHeadStats (all zeros when they never met)
    """
    matches = list(matches)
    if not matches:
        return HeadToHeadStats()

    a_scores = [m.score_for(a) for m in matches]
    b_scores = [m.score_for(b) for m in matches]
    return HeadToHeadStats(
        a_wins=sum(1 for m in matches if m.winner == a),
        b_wins=sum(1 for m in matches if m.winner == b),
        total_games=len(matches),
        a_avg_score=sum(a_scores) / len(a_scores),
        b_avg_score=sum(b_scores) / len(b_scores),
    )


def build_head_to_head_index(corpus: Iterable[SeasonRecords]) -> HeadToHeadIndex:
    return HeadToHeadIndex.build(corpus)


def get_head_to_head(index: HeadToHeadIndex, a: Participant, b: Participant) -> list[IndexedMatch]:
    """Get every match between two participants, most recent first."""
    return index.matches(a, b)


def get_stats(index: HeadToHeadIndex, a: Participant, b: Participant) -> HeadToHeadStats:
    """Get the aggregate head-to-head record between two participants."""
    return index.stats(a, b)


class HeadToHeadCache:
    """
    Caller-owned holder for one built index.

    The cached index is rebuilt when the caller reports a different corpus
    version, or when it is older than ``max_age`` (``None`` disables the age
    check). Nothing is cached at module level.

    Example:
        cache = HeadToHeadCache(max_age=timedelta(minutes=60))
        index = cache.get(corpus_version, load_corpus)
    """

    def __init__(
        self,
        max_age: timedelta | None = None,
        clock: Callable[[], datetime] = datetime.now,
    ) -> None:
        self.max_age = max_age
        self._clock = clock
        self._index: HeadToHeadIndex | None = None
        self._version: Hashable | None = None
        self._built_at: datetime | None = None

    @classmethod
    def from_config(cls, config: LeagueConfig | None = None) -> 'HeadToHeadCache':
        """Create a cache using the configured maximum index age."""
        minutes = (config or get_config()).head_to_head_max_age_minutes
        return cls(max_age=timedelta(minutes=minutes) if minutes else None)

    def is_stale(self, version: Hashable) -> bool:
        if self._index is None or version != self._version:
            return True
        if self.max_age is None:
            return False
        return self._clock() - self._built_at >= self.max_age

    def get(
        self,
        version: Hashable,
        load_corpus: Callable[[], Iterable[SeasonRecords]],
    ) -> HeadToHeadIndex:
        """
        Return the cached index, rebuilding it first if stale.

        Args:
            version: Caller's identifier for the current corpus
            load_corpus: Called only on rebuild, returns the full corpus

        Returns:
            HeadToHeadIndex built from the corpus matching ``version``
        """
        if self.is_stale(version):
            logger.info(f'Rebuilding head-to-head index for corpus version {version!r}')
            self._index = HeadToHeadIndex.build(load_corpus())
            self._version = version
            self._built_at = self._clock()
        return self._index

    def invalidate(self) -> None:
        self._index = None
        self._version = None
        self._built_at = None
