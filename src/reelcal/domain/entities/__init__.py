"""Domain entities."""

from reelcal.domain.entities.watch_record import WatchRecord, normalize_tags

__all__ = ["WatchRecord", "normalize_tags"]
