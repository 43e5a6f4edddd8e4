"""Shared fixtures for reelcal tests."""

from collections.abc import Callable
from datetime import datetime
from typing import Any

import pytest

from reelcal.domain.entities import WatchRecord
from reelcal.domain.value_objects import CivilDateNormalizer, ImagePaths


@pytest.fixture
def normalizer() -> CivilDateNormalizer:
    """Normalizer in the default civil zone (America/Chicago)."""
    return CivilDateNormalizer("America/Chicago")


@pytest.fixture
def make_record(normalizer: CivilDateNormalizer) -> Callable[..., WatchRecord]:
    """Factory for WatchRecords dated at civil noon of a YYYY-MM-DD day."""

    def _make(
        title: str = "Arrival",
        day: str = "2024-03-02",
        year: str = "2016",
        identity_key: str | None = None,
        **overrides: Any,
    ) -> WatchRecord:
        watched_at = overrides.pop("watched_at", None) or normalizer.parse_instant(day)
        assert isinstance(watched_at, datetime)
        return WatchRecord(
            identity_key=identity_key or f"{title}-{day}",
            title=title,
            year=year,
            watched_at=watched_at,
            images=overrides.pop("images", ImagePaths()),
            **overrides,
        )

    return _make
