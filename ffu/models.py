"""Data models for the FFU standings engine."""

from dataclasses import dataclass, field
from typing import Optional

Participant = str
RosterRef = int | str


@dataclass(frozen=True)
class ScoreRow:
    """One side of a weekly pairing as reported upstream."""
    week: int
    team: Participant
    opponent: Participant
    score: float


@dataclass(frozen=True)
class MatchRecord:
    """Canonical result of one head-to-head pairing in one week."""
    week: int
    winner: Participant
    loser: Participant
    winner_score: float
    loser_score: float
    is_playoff: bool = False
    placement_type: Optional[str] = None  # advisory only, e.g. 'Championship'


@dataclass(frozen=True)
class BracketMatchNode:
    """One match of a single-elimination bracket tree."""
    round: int
    explicit_placement: Optional[int] = None
    winner: Optional[RosterRef] = None
    loser: Optional[RosterRef] = None
    match_id: Optional[int] = None


@dataclass(frozen=True)
class RosterSeasonStat:
    """Regular-season totals for one participant."""
    participant: Participant
    wins: int = 0
    losses: int = 0
    points_for: float = 0.0
    points_against: float = 0.0


@dataclass(frozen=True)
class PlacementResult:
    """Final bracket placement for one participant."""
    participant: Participant
    placement: int
    placement_name: str
    bracket: str = 'winners'


@dataclass(frozen=True)
class StandingRow:
    """One ranked row of a season's final standings."""
    participant: Participant
    wins: int
    losses: int
    points_for: float
    points_against: float
    rank: int
    high_game: float = 0.0
    low_game: float = 0.0
    placement: Optional[int] = None


@dataclass(frozen=True)
class GameStats:
    """Single-game extremes for one participant over a season."""
    participant: Participant
    high_game: float
    low_game: float
    games: tuple[float, ...] = ()


@dataclass(frozen=True)
class IndexedMatch:
    """A MatchRecord tagged with the season and league it was played in."""
    year: int
    league: str
    week: int
    winner: Participant
    loser: Participant
    winner_score: float
    loser_score: float
    is_playoff: bool = False
    placement_type: Optional[str] = None

    @property
    def key(self) -> tuple[int, str, int]:
        return (self.year, self.league, self.week)

    def score_for(self, participant: Participant) -> float:
        return self.winner_score if participant == self.winner else self.loser_score

    @classmethod
    def from_record(cls, record: MatchRecord, year: int, league: str) -> 'IndexedMatch':
        return cls(
            year=year,
            league=league,
            week=record.week,
            winner=record.winner,
            loser=record.loser,
            winner_score=record.winner_score,
            loser_score=record.loser_score,
            is_playoff=record.is_playoff,
            placement_type=record.placement_type,
        )


@dataclass(frozen=True)
class HeadToHeadStats:
    """Aggregate record between participant A and participant B."""
    a_wins: int = 0
    b_wins: int = 0
    total_games: int = 0
    a_avg_score: float = 0.0
    b_avg_score: float = 0.0


@dataclass
class SeasonInput:
    """Everything needed to recompute one season of one league."""
    league: str
    year: int
    rosters: list[RosterSeasonStat]
    score_rows: list[ScoreRow] = field(default_factory=list)
    winners_bracket: list[BracketMatchNode] = field(default_factory=list)
    losers_bracket: list[BracketMatchNode] = field(default_factory=list)
    roster_to_owner: Optional[dict[RosterRef, Participant]] = None


@dataclass
class SeasonResult:
    """Output of one season's recomputation."""
    league: str
    year: int
    records: list[MatchRecord] = field(default_factory=list)
    placements: list[PlacementResult] = field(default_factory=list)
    standings: list[StandingRow] = field(default_factory=list)
    promotions: list[Participant] = field(default_factory=list)
    relegations: list[Participant] = field(default_factory=list)
    issues: list = field(default_factory=list)  # list[DataIssue]

    @property
    def champion(self) -> Optional[Participant]:
        for row in self.standings:
            if row.placement == 1:
                return row.participant
        return None
