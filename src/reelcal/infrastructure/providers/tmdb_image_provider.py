"""TMDb Image Provider - IImageProvider implementation for TMDb.

Hey future me - this is the WRAPPER around TMDbClient for IImageProvider!

FLOW:
    EnrichmentService
        │
        └─► TMDbImageProvider.search_backdrop(title, year)
                │
                ├─► TMDbClient.search_movies(title, year)   (strict year filter)
                └─► TMDbClient.search_movies(title)         (only if no usable match)

Matching: TMDb's own ranking is popularity-based, so "Dune" with no year
happily returns the 2021 film for a 1984 diary entry. We score every result
that actually HAS a backdrop with rapidfuzz (title and original_title, the
better of the two) and keep the best one above MIN_MATCH_SCORE. Ties go to
the earlier result, which keeps TMDb's ordering as the tie-breaker.

"No usable match" is None. A failed request is NOT "no match": ExternalServiceError
propagates so the EnrichmentService counts it and keeps it out of the cache.
"""

import logging
from typing import Any

from rapidfuzz import fuzz

from reelcal.domain.ports.image_provider import IImageProvider, ImageResult, ProviderName
from reelcal.infrastructure.integrations.tmdb_client import TMDbClient

logger = logging.getLogger(__name__)


def _normalize_title(title: str) -> str:
    return " ".join(title.lower().split())


def match_score(title: str, result: dict[str, Any]) -> float:
    """Similarity (0-100) between a diary title and a TMDb result."""
    wanted = _normalize_title(title)
    candidates = [result.get("title") or "", result.get("original_title") or ""]
    return max(fuzz.ratio(wanted, _normalize_title(c)) for c in candidates)


class TMDbImageProvider(IImageProvider):
    """TMDb implementation of IImageProvider."""

    MIN_MATCH_SCORE = 50.0

    def __init__(self, client: TMDbClient) -> None:
        """Initialize with TMDbClient.

        Args:
            client: TMDb HTTP client (owns the API key and rate limiter)
        """
        self._client = client

    @property
    def provider_name(self) -> ProviderName:
        """Return provider name."""
        return "tmdb"

    async def is_available(self) -> bool:
        """Available when an API key is configured (no network call)."""
        return self._client.settings.is_configured

    def _best_match(self, title: str, results: list[dict[str, Any]]) -> dict[str, Any] | None:
        best: dict[str, Any] | None = None
        best_score = self.MIN_MATCH_SCORE
        for result in results:
            if not result.get("backdrop_path"):
                continue
            score = match_score(title, result)
            # Strictly greater: first result wins ties
            if (best is None and score >= best_score) or score > best_score:
                best, best_score = result, score
        return best

    async def search_backdrop(self, title: str, year: str | None = None) -> ImageResult | None:
        """Search a backdrop image for a film.

        Args:
            title: Film title
            year: Release year, tried first when given

        Returns:
            ImageResult with the w1280 backdrop URL, or None

        Raises:
            ExternalServiceError: If a TMDb request fails
        """
        attempts = [year, None] if year else [None]
        for attempt_year in attempts:
            results = await self._client.search_movies(title, attempt_year)
            match = self._best_match(title, results)
            if match is not None:
                return ImageResult(
                    url=self._client.image_url(match["backdrop_path"]),
                    provider="tmdb",
                    source_id=str(match.get("id")) if match.get("id") is not None else None,
                    matched_title=match.get("title"),
                )

        logger.debug("No TMDb backdrop for %r (%s)", title, year or "no year")
        return None


__all__ = ["TMDbImageProvider", "match_score"]
