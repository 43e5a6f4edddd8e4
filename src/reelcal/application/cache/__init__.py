"""Caching layer - keeps repeated provider lookups out of a build run."""

from reelcal.application.cache.backdrop_cache import MISS, BackdropCache

__all__ = ["MISS", "BackdropCache"]
