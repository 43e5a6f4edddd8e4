"""Tests for environment based settings."""

import os
from pathlib import Path

import pytest
from pydantic import ValidationError

from reelcal.config import Settings, get_settings
from reelcal.config.settings import ObservabilitySettings, SourceSettings, TMDbSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch, tmp_path):
    """Isolate from the developer's environment and .env file."""
    for name in list(os.environ):
        if name.startswith("REELCAL_"):
            monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Test defaults and env overrides."""

    def test_defaults(self):
        settings = Settings()
        assert settings.calendar.timezone == "America/Chicago"
        assert settings.source.username == "bayf"
        assert settings.source.snapshot_path == Path("src/_data/moviesHistorical.json")
        assert settings.tmdb.is_configured is False
        assert settings.observability.log_level == "INFO"

    def test_nested_env_vars(self, monkeypatch):
        """Test REELCAL_ prefix with __ nesting."""
        monkeypatch.setenv("REELCAL_CALENDAR__TIMEZONE", "Europe/Berlin")
        monkeypatch.setenv("REELCAL_TMDB__API_KEY", "secret")
        monkeypatch.setenv("REELCAL_SOURCE__USERNAME", "someone")
        monkeypatch.setenv("REELCAL_OBSERVABILITY__LOG_LEVEL", "debug")

        settings = get_settings()

        assert settings.calendar.timezone == "Europe/Berlin"
        assert settings.tmdb.is_configured is True
        assert settings.source.username == "someone"
        assert settings.observability.log_level == "DEBUG"

    def test_dotenv_file(self, tmp_path):
        (tmp_path / ".env").write_text("REELCAL_TMDB__MAX_CONCURRENCY=8\n", encoding="utf-8")
        assert Settings().tmdb.max_concurrency == 8

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


class TestValidation:
    """Test field validators."""

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError):
            ObservabilitySettings(log_level="LOUD")

    @pytest.mark.parametrize("username", ["", "  ", "bayf/films"])
    def test_invalid_username(self, username):
        with pytest.raises(ValidationError):
            SourceSettings(username=username)

    def test_blank_api_key_not_configured(self):
        assert TMDbSettings(api_key="   ").is_configured is False

    def test_concurrency_bounds(self):
        with pytest.raises(ValidationError):
            TMDbSettings(max_concurrency=0)
