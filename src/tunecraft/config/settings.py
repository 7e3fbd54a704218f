"""Application settings loaded from environment variables and .env files."""

from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class DatabaseSettings(BaseModel):
    """Database connection settings."""

    url: str = "sqlite+aiosqlite:///./data/tunecraft.db"
    echo: bool = False
    pool_pre_ping: bool = True
    # How long a writer waits for the SQLite write lock before "database is locked"
    busy_timeout_seconds: float = Field(default=30.0, gt=0)


class ObservabilitySettings(BaseModel):
    """Logging output settings."""

    log_json_format: bool = False


# Hey future me - these are the knobs of the recommendation engine. The defaults match the
# behaviour the product shipped with (3 month lookback, 3 mixes of 20 tracks, top 10 similar
# artists). Tests override them through Settings(recommendation={...}).
class RecommendationSettings(BaseModel):
    """Playlist generation and artist similarity settings."""

    lookback_months: int = Field(default=3, ge=1)
    max_playlists: int = Field(default=3, ge=0)
    tracks_per_playlist: int = Field(default=20, ge=1)
    similar_artists_limit: int = Field(default=10, ge=1)
    top_tracks_limit: int = Field(default=10, ge=1)


class StatisticsSettings(BaseModel):
    """Weekly statistics worker schedule.

    run_weekday follows ``date.weekday()``: Monday is 0, Friday is 4.
    All times are UTC.
    """

    enabled: bool = True
    run_weekday: int = Field(default=4, ge=0, le=6)
    run_hour: int = Field(default=23, ge=0, le=23)
    run_minute: int = Field(default=59, ge=0, le=59)


class Settings(BaseSettings):
    """Root settings object.

    Nested sections can be set from the environment with a double underscore,
    e.g. ``TUNECRAFT_DATABASE__URL`` or ``TUNECRAFT_STATISTICS__RUN_HOUR``.
    """

    model_config = SettingsConfigDict(
        env_prefix="TUNECRAFT_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "tunecraft"
    app_env: Literal["development", "test", "production"] = "development"
    log_level: str = "INFO"

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)
    recommendation: RecommendationSettings = Field(
        default_factory=RecommendationSettings
    )
    statistics: StatisticsSettings = Field(default_factory=StatisticsSettings)

    @field_validator("log_level")
    @classmethod
    def _normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {value}")
        return level

    def _get_sqlite_db_path(self) -> Path | None:
        """Return the SQLite database file path, or None for other backends.

        In-memory databases have no path either.
        """
        url = self.database.url
        if not url.startswith("sqlite"):
            return None
        _, _, raw_path = url.partition(":///")
        if not raw_path or raw_path == ":memory:":
            return None
        return Path(raw_path)


@lru_cache
def get_settings() -> Settings:
    """Get the cached application settings."""
    return Settings()
