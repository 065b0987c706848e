"""Pydantic schemas for upstream payload validation."""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import DEFAULT_PROMOTION_SPOTS, DEFAULT_RELEGATION_SPOTS, LEAGUE_TIERS


class RosterSettings(BaseModel):
    """Season totals attached to an upstream roster."""

    wins: int = Field(default=0, ge=0)
    losses: int = Field(default=0, ge=0)
    ties: int = Field(default=0, ge=0)
    fpts: float = 0
    fpts_decimal: float = 0
    fpts_against: float = 0
    fpts_against_decimal: float = 0

    model_config = ConfigDict(extra='ignore')

    @property
    def points_for(self) -> float:
        return self.fpts + self.fpts_decimal / 100

    @property
    def points_against(self) -> float:
        return self.fpts_against + self.fpts_against_decimal / 100


class RosterPayload(BaseModel):
    """Roster as returned by the league platform."""

    roster_id: int
    owner_id: str | None = None
    settings: RosterSettings = Field(default_factory=RosterSettings)

    model_config = ConfigDict(extra='ignore')


class SleeperMatchupRow(BaseModel):
    """One roster's side of a weekly matchup."""

    roster_id: int
    matchup_id: int | None = None
    points: float = 0

    model_config = ConfigDict(extra='ignore')

    @field_validator('points', mode='before')
    @classmethod
    def coerce_missing_points(cls, v):
        """Platforms report unscored rosters as null."""
        return 0 if v is None else v


class BracketNodePayload(BaseModel):
    """Bracket node as returned by the league platform.

    ``r`` is the round, ``m`` the match id, ``p`` the optional placement the
    match decides, ``w``/``l`` the winning and losing roster ids.
    """

    r: int = Field(..., ge=1)
    m: int | None = None
    p: int | None = Field(default=None, ge=1)
    w: int | None = None
    l: int | None = None  # noqa: E741
    t1: int | dict | None = None
    t2: int | dict | None = None

    model_config = ConfigDict(extra='ignore')


class ScoreRowPayload(BaseModel):
    """Team-perspective score row (legacy export format)."""

    week: int = Field(..., ge=1, le=18)
    team: str = Field(..., min_length=1)
    opponent: str = Field(..., min_length=1)
    score: float


class WeekPayload(BaseModel):
    """Raw platform rows for one week."""

    week: int = Field(..., ge=1, le=18)
    matchups: list[SleeperMatchupRow]


class SeasonPayload(BaseModel):
    """Complete input bundle for one season of one league."""

    league: str = Field(..., pattern=r'^(PREMIER|MASTERS|NATIONAL)$')
    year: int = Field(..., ge=2018, le=2100)
    rosters: list[RosterPayload]
    weeks: list[WeekPayload] = Field(default_factory=list)
    score_rows: list[ScoreRowPayload] = Field(default_factory=list)
    winners_bracket: list[BracketNodePayload] = Field(default_factory=list)
    losers_bracket: list[BracketNodePayload] = Field(default_factory=list)

    model_config = ConfigDict(extra='forbid')


class EraConfig(BaseModel):
    """Platform era with its own playoff calendar."""

    name: str = Field(..., min_length=1)
    first_year: int
    last_year: int | None = None
    playoff_weeks: list[int] = Field(..., min_length=1)

    model_config = ConfigDict(extra='forbid')

    @field_validator('playoff_weeks')
    @classmethod
    def validate_playoff_weeks(cls, v):
        """Ensure playoff weeks are consecutive and ascending."""
        if v != list(range(v[0], v[0] + len(v))):
            raise ValueError(f'Playoff weeks must be consecutive, got {v}')
        if v[0] < 2:
            raise ValueError('Playoffs cannot start before week 2')
        return v


class LeagueConfig(BaseModel):
    """League configuration settings."""

    league_tiers: list[str] = Field(default_factory=lambda: list(LEAGUE_TIERS), min_length=1)
    tier_first_year: dict[str, int] = Field(default_factory=dict)
    eras: list[EraConfig] = Field(..., min_length=1)
    promotion_spots: int = Field(default=DEFAULT_PROMOTION_SPOTS, ge=0, le=6)
    relegation_spots: int = Field(default=DEFAULT_RELEGATION_SPOTS, ge=0, le=6)
    head_to_head_max_age_minutes: int | None = Field(default=60, ge=1)

    model_config = ConfigDict(extra='forbid')

    @model_validator(mode='after')
    def validate_eras(self):
        """Ensure eras are sorted and do not overlap."""
        previous_last = None
        for era in self.eras:
            if previous_last is None and era is not self.eras[0]:
                raise ValueError(f'Era {era.name} follows an open-ended era')
            if previous_last is not None and era.first_year <= previous_last:
                raise ValueError(f'Era {era.name} overlaps the previous era')
            previous_last = era.last_year
        for tier in self.tier_first_year:
            if tier not in self.league_tiers:
                raise ValueError(f'Unknown league tier: {tier}')
        return self
