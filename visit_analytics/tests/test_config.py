"""
Tests for environment-driven settings.
"""

import pytest
from pydantic import ValidationError

from visit_analytics.core.config import Settings, get_settings
from visit_analytics.models.enums import RangeKind


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'postgresql://u:p@db:5432/visits')
        settings = Settings(_env_file=None)

        assert settings.database_url == 'postgresql://u:p@db:5432/visits'
        assert settings.default_range_kind is RangeKind.LAST_6_MONTHS
        assert settings.top_performers_limit is None
        assert settings.comparison_window_days == 30
        assert settings.db_pool_min_size <= settings.db_pool_max_size

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'postgresql://localhost/visits')
        monkeypatch.setenv('default_range_kind', 'last-year')
        monkeypatch.setenv('TOP_PERFORMERS_LIMIT', '5')
        monkeypatch.setenv('COMPARISON_WINDOW_DAYS', '14')
        settings = Settings(_env_file=None)

        assert settings.default_range_kind is RangeKind.LAST_YEAR
        assert settings.top_performers_limit == 5
        assert settings.comparison_window_days == 14

    def test_database_url_required(self, monkeypatch):
        monkeypatch.delenv('DATABASE_URL', raising=False)
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_invalid_range_kind_rejected(self, monkeypatch):
        monkeypatch.setenv('DATABASE_URL', 'postgresql://localhost/visits')
        monkeypatch.setenv('DEFAULT_RANGE_KIND', 'forever')
        with pytest.raises(ValidationError):
            Settings(_env_file=None)

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()
