"""Image Provider Interface - Abstraction for backdrop sources.

Hey future me - this is the PORT for image lookups!

The EnrichmentService only talks to IImageProvider. It does NOT know whether
the backdrop comes from TMDb or something else, and it never builds URLs.

FLOW:
    EnrichmentService
        │
        ├─► customBackdrops.json (slug → URL)   ← always wins
        │
        └─► IImageProvider.search_backdrop(title, year)
                │
                └─► TMDbImageProvider
                        └─► TMDbClient.search_movies()

Implementations:
- infrastructure/providers/tmdb_image_provider.py
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Literal

ProviderName = Literal["tmdb"]


@dataclass(frozen=True)
class ImageResult:
    """Result of a backdrop lookup.

    Immutable snapshot of what the provider returned. url is the CDN URL,
    not a local path!
    """

    url: str
    provider: ProviderName
    source_id: str | None = None  # Provider-specific film ID
    matched_title: str | None = None  # Title the provider matched on


class IImageProvider(ABC):
    """Interface for backdrop image providers.

    WICHTIG: Methods are async because they make HTTP calls!
    """

    @property
    @abstractmethod
    def provider_name(self) -> ProviderName:
        """Name of this provider (used for logging)."""
        ...

    @abstractmethod
    async def is_available(self) -> bool:
        """Check if provider can be used right now.

        The EnrichmentService calls this ONCE per run and skips automatic
        lookups entirely when it returns False.
        """
        ...

    @abstractmethod
    async def search_backdrop(self, title: str, year: str | None = None) -> ImageResult | None:
        """Search a backdrop image for a film.

        "Nothing found" and "lookup failed" are different answers: return None
        for the first, raise ExternalServiceError for the second. The service
        counts failures per record and only caches real misses.

        Args:
            title: Film title
            year: Release year (improves matching), may be empty

        Returns:
            ImageResult with backdrop URL, or None if nothing usable was found
        """
        ...


__all__ = [
    "ProviderName",
    "ImageResult",
    "IImageProvider",
]
