"""Image provider implementations."""

from reelcal.infrastructure.providers.tmdb_image_provider import TMDbImageProvider

__all__ = ["TMDbImageProvider"]
