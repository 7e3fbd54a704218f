"""Tests for application settings."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from tunecraft.config import DatabaseSettings, Settings


class TestSettingsDefaults:
    def test_recommendation_defaults(self) -> None:
        settings = Settings(_env_file=None)

        rec = settings.recommendation
        assert (rec.lookback_months, rec.max_playlists, rec.tracks_per_playlist) == (3, 3, 20)
        assert rec.similar_artists_limit == 10

    def test_statistics_schedule_defaults_to_friday_2359(self) -> None:
        stats = Settings(_env_file=None).statistics

        assert stats.enabled is True
        assert (stats.run_weekday, stats.run_hour, stats.run_minute) == (4, 23, 59)


class TestSettingsEnvironment:
    """Nested sections come from TUNECRAFT_<SECTION>__<FIELD>."""

    def test_nested_override(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TUNECRAFT_RECOMMENDATION__MAX_PLAYLISTS", "5")
        monkeypatch.setenv("TUNECRAFT_STATISTICS__ENABLED", "false")

        settings = Settings(_env_file=None)

        assert settings.recommendation.max_playlists == 5
        assert settings.statistics.enabled is False

    def test_log_level_normalized(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("TUNECRAFT_LOG_LEVEL", "debug")
        assert Settings(_env_file=None).log_level == "DEBUG"

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, log_level="LOUD")

    def test_invalid_schedule(self) -> None:
        with pytest.raises(ValidationError):
            Settings(_env_file=None, statistics={"run_weekday": 7})


class TestSqliteDbPath:
    def test_file_path(self) -> None:
        settings = Settings(
            _env_file=None,
            database=DatabaseSettings(url="sqlite+aiosqlite:///./data/tunecraft.db"),
        )
        assert settings._get_sqlite_db_path() == Path("./data/tunecraft.db")

    @pytest.mark.parametrize(
        "url",
        [
            "sqlite+aiosqlite:///:memory:",
            "postgresql+asyncpg://user:pw@localhost/tunecraft",
        ],
    )
    def test_no_path(self, url: str) -> None:
        settings = Settings(_env_file=None, database=DatabaseSettings(url=url))
        assert settings._get_sqlite_db_path() is None
