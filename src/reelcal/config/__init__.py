"""Configuration module."""

from reelcal.config.settings import (
    CalendarSettings,
    ObservabilitySettings,
    Settings,
    SourceSettings,
    TMDbSettings,
    get_settings,
)

__all__ = [
    "CalendarSettings",
    "ObservabilitySettings",
    "Settings",
    "SourceSettings",
    "TMDbSettings",
    "get_settings",
]
