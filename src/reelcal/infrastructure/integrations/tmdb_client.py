"""TMDb HTTP client implementation with rate limiting."""

import logging
from typing import Any, cast

import httpx

from reelcal.config.settings import TMDbSettings
from reelcal.domain.exceptions import (
    ConfigurationError,
    ExternalServiceError,
    RateLimitExceededError,
)
from reelcal.infrastructure.rate_limiter import RateLimiter

logger = logging.getLogger(__name__)


class TMDbClient:
    """HTTP client for the TMDb v3 API (movie search only)."""

    MAX_RETRIES = 2  # Retries after a 429, then give up

    def __init__(self, settings: TMDbSettings, rate_limiter: RateLimiter | None = None) -> None:
        """
        Initialize TMDb client.

        Args:
            settings: TMDb configuration settings
            rate_limiter: Token bucket (defaults to RateLimiter.for_tmdb())
        """
        self.settings = settings
        self._client: httpx.AsyncClient | None = None
        self._rate_limiter = rate_limiter or RateLimiter.for_tmdb()

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.settings.base_url,
                headers={"Accept": "application/json"},
                timeout=self.settings.timeout,
            )
        return self._client

    # Hey, close the client or leak connections. The calendar use case does it in a finally.
    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    # Yo future me, 429 handling lives HERE and nowhere else. We honor Retry-After when TMDb
    # sends it, otherwise the limiter's exponential backoff. After MAX_RETRIES we raise
    # RateLimitExceededError - the enrichment service counts that film as failed.
    async def _get(self, path: str, params: dict[str, Any]) -> dict[str, Any]:
        """
        Make a rate-limited GET request.

        Args:
            path: API path (e.g. "/search/movie")
            params: Query parameters (api_key is added here)

        Returns:
            Decoded JSON body

        Raises:
            ConfigurationError: If no API key is configured
            RateLimitExceededError: If still rate limited after retries
            ExternalServiceError: On any other HTTP or transport failure
        """
        if not self.settings.is_configured:
            raise ConfigurationError("TMDb API key is not configured")

        client = await self._get_client()
        query = {**params, "api_key": self.settings.api_key}

        for attempt in range(self.MAX_RETRIES + 1):
            try:
                async with self._rate_limiter:
                    response = await client.get(path, params=query)
            except httpx.HTTPError as e:
                raise ExternalServiceError(f"TMDb request failed: {e}") from e

            if response.status_code == 429:
                if attempt == self.MAX_RETRIES:
                    break
                retry_after = response.headers.get("Retry-After")
                await self._rate_limiter.handle_rate_limit_response(
                    float(retry_after) if retry_after and retry_after.isdigit() else None
                )
                continue

            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as e:
                raise ExternalServiceError(
                    f"TMDb returned {e.response.status_code} for {path}"
                ) from e
            return cast(dict[str, Any], response.json())

        raise RateLimitExceededError(f"TMDb rate limit exceeded after {self.MAX_RETRIES} retries")

    # Listen up, TMDb's year filter is strict (primary release year). Films logged with a
    # festival year or a re-release year come back empty - that's why the provider retries
    # without a year. include_adult stays False.
    async def search_movies(self, query: str, year: str | None = None) -> list[dict[str, Any]]:
        """
        Search movies by title.

        Args:
            query: Film title
            year: Optional release year

        Returns:
            List of result dicts (title, original_title, release_date, backdrop_path, ...)

        Raises:
            ExternalServiceError: If the request fails
        """
        params: dict[str, Any] = {"query": query, "include_adult": "false"}
        if year:
            params["year"] = year

        data = await self._get("/search/movie", params)
        results = cast(list[dict[str, Any]], data.get("results") or [])
        logger.debug("TMDb search %r (year=%s): %d results", query, year, len(results))
        return results

    def image_url(self, path: str) -> str:
        """Build the full CDN URL for a backdrop_path."""
        return f"{self.settings.image_base_url}{path}"
