"""Application settings loaded from environment variables.

Hey future me - every setting has a sane default so `build_history.py` runs
with nothing but an export folder. Env vars use the REELCAL_ prefix and a
double underscore for nesting:

    REELCAL_CALENDAR__TIMEZONE=America/Chicago
    REELCAL_SOURCE__USERNAME=bayf
    REELCAL_TMDB__API_KEY=...
    REELCAL_OBSERVABILITY__LOG_LEVEL=DEBUG

A .env file in the working directory is read too (CI injects the TMDb key as
a secret env var instead).
"""

from functools import lru_cache
from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from reelcal.domain.value_objects.civil_date import DEFAULT_TIMEZONE

DATA_DIR = Path("src/_data")


class CalendarSettings(BaseModel):
    """Calendar projection settings."""

    timezone: str = Field(
        default=DEFAULT_TIMEZONE,
        description="IANA timezone every civil date is computed in",
    )
    quotes_path: Path = Field(
        default=DATA_DIR / "customQuotes.json",
        description="Optional JSON mapping of YYYY-MM-DD to a quote",
    )


class SourceSettings(BaseModel):
    """Letterboxd source settings."""

    username: str = Field(default="bayf", description="Letterboxd username")
    export_dir: Path = Field(
        default=Path("letterboxd-export"),
        description="Unzipped Letterboxd data export folder",
    )
    snapshot_path: Path = Field(
        default=DATA_DIR / "moviesHistorical.json",
        description="Persisted historical timeline",
    )
    custom_backdrops_path: Path = Field(
        default=DATA_DIR / "customBackdrops.json",
        description="Optional JSON mapping of film slug to backdrop URL",
    )
    feed_timeout: float = Field(default=30.0, gt=0, description="RSS feed timeout in seconds")

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        """Usernames end up in URLs, so no slashes or blanks."""
        v = v.strip()
        if not v or "/" in v:
            raise ValueError("username must be a non-empty Letterboxd username")
        return v


class TMDbSettings(BaseModel):
    """TMDb backdrop lookup settings."""

    api_key: str | None = Field(default=None, description="TMDb v3 API key")
    base_url: str = Field(default="https://api.themoviedb.org/3", description="TMDb API base URL")
    image_base_url: str = Field(
        default="https://image.tmdb.org/t/p/w1280",
        description="Prefix for backdrop_path values",
    )
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    max_concurrency: int = Field(default=4, ge=1, le=32, description="Lookups in flight at once")
    cache_ttl_seconds: int = Field(default=86400, ge=0, description="Lookup cache lifetime")

    @property
    def is_configured(self) -> bool:
        """True if an API key is present."""
        return bool(self.api_key and self.api_key.strip())


class ObservabilitySettings(BaseModel):
    """Logging settings."""

    log_level: str = Field(default="INFO", description="Root log level")
    log_json_format: bool = Field(default=False, description="Emit JSON log lines")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        level = v.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return level


class Settings(BaseSettings):
    """Root settings object."""

    model_config = SettingsConfigDict(
        env_prefix="REELCAL_",
        env_nested_delimiter="__",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    calendar: CalendarSettings = Field(default_factory=CalendarSettings)
    source: SourceSettings = Field(default_factory=SourceSettings)
    tmdb: TMDbSettings = Field(default_factory=TMDbSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)


# Cached so every module sees the same Settings. Tests that set env vars must call
# get_settings.cache_clear() first.
@lru_cache
def get_settings() -> Settings:
    """Get the application settings (cached)."""
    return Settings()
