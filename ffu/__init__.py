from .models import (
    ScoreRow,
    MatchRecord,
    BracketMatchNode,
    RosterSeasonStat,
    PlacementResult,
    StandingRow,
    GameStats,
    IndexedMatch,
    HeadToHeadStats,
    SeasonInput,
    SeasonResult,
)
from .errors import DataIssue, IssueKind, FFUError, ConfigError
from .matchups import normalize_matchups, normalize_week, score_rows_from_matchups
from .bracket import (
    resolve_bracket,
    resolve_brackets,
    invert_losers_placement,
    bracket_nodes_from_payload,
)
from .standings import (
    aggregate_standings,
    calculate_game_stats,
    calculate_promotions,
    calculate_relegations,
)
from .head_to_head import (
    HeadToHeadIndex,
    HeadToHeadCache,
    build_head_to_head_index,
    get_head_to_head,
    get_stats,
)
from .season import compute_season, compute_seasons, load_season_input, build_head_to_head

__all__ = [
    # Models
    'ScoreRow',
    'MatchRecord',
    'BracketMatchNode',
    'RosterSeasonStat',
    'PlacementResult',
    'StandingRow',
    'GameStats',
    'IndexedMatch',
    'HeadToHeadStats',
    'SeasonInput',
    'SeasonResult',
    # Issues and errors
    'DataIssue',
    'IssueKind',
    'FFUError',
    'ConfigError',
    # Matchup normalization
    'normalize_matchups',
    'normalize_week',
    'score_rows_from_matchups',
    # Bracket resolution
    'resolve_bracket',
    'resolve_brackets',
    'invert_losers_placement',
    'bracket_nodes_from_payload',
    # Standings
    'aggregate_standings',
    'calculate_game_stats',
    'calculate_promotions',
    'calculate_relegations',
    # Head-to-head
    'HeadToHeadIndex',
    'HeadToHeadCache',
    'build_head_to_head_index',
    'get_head_to_head',
    'get_stats',
    # Season pipeline
    'compute_season',
    'compute_seasons',
    'load_season_input',
    'build_head_to_head',
]
