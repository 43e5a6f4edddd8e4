"""HTTP integrations with external services."""

from reelcal.infrastructure.integrations.letterboxd_feed_client import LetterboxdFeedClient
from reelcal.infrastructure.integrations.tmdb_client import TMDbClient

__all__ = ["LetterboxdFeedClient", "TMDbClient"]
