"""Constants and mappings for the FFU standings engine."""

# League tiers, best first
LEAGUE_TIERS = ['PREMIER', 'MASTERS', 'NATIONAL']

# Bracket identifiers used in placement results
WINNERS_BRACKET = 'winners'
LOSERS_BRACKET = 'losers'

# Ordinal suffixes for placement names (11th-13th are irregular)
ORDINAL_SUFFIXES = {1: 'st', 2: 'nd', 3: 'rd'}

# Placement locked by the championship match
CHAMPION_PLACEMENT = 1
RUNNER_UP_PLACEMENT = 2
FIRST_FALLBACK_PLACEMENT = 3

DEFAULT_PROMOTION_SPOTS = 2
DEFAULT_RELEGATION_SPOTS = 2
