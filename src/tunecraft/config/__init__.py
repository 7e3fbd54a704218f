"""Configuration module for TuneCraft."""

from .settings import (
    DatabaseSettings,
    ObservabilitySettings,
    RecommendationSettings,
    Settings,
    StatisticsSettings,
    get_settings,
)

__all__ = [
    "DatabaseSettings",
    "ObservabilitySettings",
    "RecommendationSettings",
    "Settings",
    "StatisticsSettings",
    "get_settings",
]
