"""League configuration management."""

from functools import lru_cache
from pathlib import Path

from .errors import ConfigError
from .schemas import EraConfig, LeagueConfig
from .utils import load_json

DEFAULT_CONFIG_PATH = Path(__file__).parent / 'data' / 'league_config.json'


def load_config(path: Path | str) -> LeagueConfig:
    """
    Load a league configuration file without touching the cache.

    Args:
        path: Path to a league_config.json file

    Returns:
        LeagueConfig object with validated settings

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file has invalid structure
    """
    return load_json(path, schema=LeagueConfig)


@lru_cache(maxsize=1)
def get_config() -> LeagueConfig:
    """
    Load league configuration from ffu/data/league_config.json.

    Configuration is cached after first load.

    Example:
        from ffu.config import get_config
        config = get_config()
        print(config.league_tiers)
    """
    return load_config(DEFAULT_CONFIG_PATH)


def get_era(year: int, config: LeagueConfig | None = None) -> EraConfig:
    """Get the platform era a season belongs to."""
    config = config or get_config()
    for era in config.eras:
        if era.first_year <= year and (era.last_year is None or year <= era.last_year):
            return era
    raise ConfigError(f'No era configured for season {year}')


def get_playoff_weeks(year: int, config: LeagueConfig | None = None) -> list[int]:
    """Get list of playoff week numbers for a season."""
    return list(get_era(year, config).playoff_weeks)


def get_regular_season_weeks(year: int, config: LeagueConfig | None = None) -> list[int]:
    """Get list of regular season week numbers for a season."""
    first_playoff_week = get_playoff_weeks(year, config)[0]
    return list(range(1, first_playoff_week))


def is_playoff_week(week: int, year: int, config: LeagueConfig | None = None) -> bool:
    return week in get_playoff_weeks(year, config)


def get_available_leagues(year: int, config: LeagueConfig | None = None) -> list[str]:
    """Get the league tiers that existed in a season, best tier first."""
    config = config or get_config()
    return [
        tier for tier in config.league_tiers
        if config.tier_first_year.get(tier, 0) <= year
    ]


def clear_config_cache() -> None:
    """
    Clear the configuration cache.

    Use this if the config file is modified during runtime
    and you need to reload it.
    """
    get_config.cache_clear()
