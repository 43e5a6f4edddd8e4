"""Backdrop lookup cache.

Hey future me - a MISS is cached too (as MISS, an empty string)! Otherwise
every rewatch of an obscure short film would hit TMDb again just to learn
there's still no backdrop. get_backdrop() returns:

    None  -> never looked up (or expired), go ask the provider
    MISS  -> looked up, nothing found, don't ask again
    "url" -> cached backdrop URL

Failed lookups (TMDb down, 429 after retries) are NOT misses and never get
stored here; the next rewatch of that film asks again.

Lives for one build. Enrichment runs on one event loop and never awaits
between a read and a write of the same entry, so a plain dict is enough.
"""

import time
from collections.abc import Callable

MISS = ""


class BackdropCache:
    """TTL map of (title, year) -> backdrop URL or MISS."""

    # Posters and backdrops on TMDb almost never change
    BACKDROP_TTL = 86400  # 24 hours

    def __init__(
        self,
        ttl_seconds: int = BACKDROP_TTL,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize backdrop cache.

        Args:
            ttl_seconds: Lifetime of every entry
            clock: Seconds source (injectable for expiry tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[float, str]] = {}

    def _make_key(self, title: str, year: str | None) -> str:
        """Make cache key for a work (case-insensitive title)."""
        return f"{title.strip().lower()}|{(year or '').strip()}"

    def get_backdrop(self, title: str, year: str | None = None) -> str | None:
        """Get a cached backdrop URL (MISS for a cached miss, None if unknown)."""
        key = self._make_key(title, year)
        entry = self._entries.get(key)
        if entry is None:
            return None
        expires_at, url = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return None
        return url

    def set_backdrop(self, title: str, year: str | None, url: str | None) -> None:
        """Cache a lookup result. None is stored as MISS."""
        self._entries[self._make_key(title, year)] = (self._clock() + self.ttl_seconds, url or MISS)


__all__ = ["MISS", "BackdropCache"]
