"""Source Merger - historical timeline + live feed.

Hey future me - the live feed ALWAYS wins on a key collision!
The RSS feed is the freshest view of the last ~50 watches: an edited rating
or a review added after the export shows up there first. So:

1. Insert every historical record
2. Insert every live record, overwriting whatever sits under the same key
3. Sort descending by watched_at

NO fuzzy matching here. The key (film link, else title + instant) must match
exactly, otherwise both records survive.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from reelcal.domain.entities import WatchRecord

logger = logging.getLogger(__name__)


def merge_key(record: WatchRecord) -> str:
    """Key for the historical/live merge: link, else "title-instant"."""
    if record.primary_link:
        return record.primary_link
    return f"{record.title}-{record.watched_at.isoformat()}"


@dataclass(frozen=True)
class MergeSummary:
    """Diagnostics for one merge."""

    historical_count: int
    live_count: int
    live_overrides: int
    total: int


@dataclass(frozen=True)
class MergeResult:
    """The visible dataset handed to the Calendar Projector."""

    records: list[WatchRecord]
    summary: MergeSummary


class SourceMerger:
    """Combines historical and live records with live precedence."""

    def merge(
        self,
        historical: Iterable[WatchRecord],
        live: Iterable[WatchRecord],
    ) -> MergeResult:
        """Merge historical and live records.

        Args:
            historical: Deduplicated historical timeline
            live: Live feed records

        Returns:
            MergeResult sorted by watched_at descending
        """
        merged: dict[str, WatchRecord] = {}
        historical_count = 0
        for record in historical:
            merged[merge_key(record)] = record
            historical_count += 1

        live_count = 0
        overrides = 0
        for record in live:
            key = merge_key(record)
            if key in merged:
                overrides += 1
            merged[key] = record
            live_count += 1

        records = sorted(merged.values(), key=lambda r: r.watched_at, reverse=True)
        logger.debug(
            "Merged %d historical + %d live records (%d overridden)",
            historical_count,
            live_count,
            overrides,
        )
        return MergeResult(
            records=records,
            summary=MergeSummary(
                historical_count=historical_count,
                live_count=live_count,
                live_overrides=overrides,
                total=len(records),
            ),
        )


__all__ = ["MergeResult", "MergeSummary", "SourceMerger", "merge_key"]
