"""Unit tests for league configuration."""

import json

import pytest

from ffu.config import (
    clear_config_cache,
    get_available_leagues,
    get_config,
    get_era,
    get_playoff_weeks,
    get_regular_season_weeks,
    is_playoff_week,
    load_config,
)
from ffu.errors import ConfigError


@pytest.fixture
def config_data():
    return {
        'league_tiers': ['PREMIER', 'NATIONAL'],
        'eras': [
            {'name': 'Old', 'first_year': 2015, 'last_year': 2019, 'playoff_weeks': [13, 14]},
            {'name': 'New', 'first_year': 2020, 'last_year': None, 'playoff_weeks': [15, 16, 17]},
        ],
    }


class TestPackagedConfig:
    """Tests for the packaged league_config.json."""

    def test_loads_and_caches(self):
        clear_config_cache()
        assert get_config() is get_config()

    def test_espn_era_playoffs(self):
        assert get_playoff_weeks(2019) == [14, 15, 16]
        assert get_regular_season_weeks(2020) == list(range(1, 14))

    def test_sleeper_era_playoffs(self):
        assert get_playoff_weeks(2024) == [15, 16, 17]
        assert is_playoff_week(17, 2024)
        assert not is_playoff_week(14, 2024)

    def test_available_leagues(self):
        assert get_available_leagues(2021) == ['PREMIER', 'NATIONAL']
        assert get_available_leagues(2022) == ['PREMIER', 'MASTERS', 'NATIONAL']

    def test_year_before_first_era(self):
        with pytest.raises(ConfigError):
            get_era(2010)


class TestLoadConfig:
    """Tests for loading alternative config files."""

    def test_custom_file(self, tmp_path, config_data):
        path = tmp_path / 'league_config.json'
        path.write_text(json.dumps(config_data))
        config = load_config(path)
        assert config.promotion_spots == 2
        assert get_era(2017, config).name == 'Old'
        assert get_playoff_weeks(2017, config) == [13, 14]

    def test_overlapping_eras(self, tmp_path, config_data):
        config_data['eras'][1]['first_year'] = 2019
        path = tmp_path / 'league_config.json'
        path.write_text(json.dumps(config_data))
        with pytest.raises(ValueError, match='overlaps'):
            load_config(path)

    def test_non_consecutive_playoff_weeks(self, tmp_path, config_data):
        config_data['eras'][0]['playoff_weeks'] = [13, 15]
        path = tmp_path / 'league_config.json'
        path.write_text(json.dumps(config_data))
        with pytest.raises(ValueError, match='consecutive'):
            load_config(path)

    def test_unknown_key(self, tmp_path, config_data):
        config_data['trade_deadline_week'] = 11
        path = tmp_path / 'league_config.json'
        path.write_text(json.dumps(config_data))
        with pytest.raises(ValueError):
            load_config(path)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_config(tmp_path / 'missing.json')
