"""Fuzzy Deduplicator - collapses near-duplicates within a ±1 day window.

Hey future me - this is PHASE 2 of deduplication!

Problem: the same watch can show up with its date shifted by one calendar
day. Letterboxd stores the diary day in the member's local time, the RSS
feed and older exports went through UTC, so "Friday evening" becomes
"Saturday" on one side. Exact keys (phase 1) can't catch that.

Algorithm (left-to-right, NOT a transitive closure):
1. Group records by "title|year"
2. Sort each group ascending by watched_at (stable)
3. Take the first unconsumed record as the anchor
4. Fold every following record whose civil-date distance FROM THE ANCHOR is
   <= window_days; the first record beyond that closes the window
5. The next unconsumed record becomes the new anchor

    day:   1    2    3
           A    B    C      A anchors, B folds (1 day), C is 2 days from A
           └─┬──┘    │      → two windows: [A, B] and [C]
             A|B     C

Survivor of a window: the LAST record with review text, else the earliest.
A reviewed watch is never thrown away for an unreviewed one.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from reelcal.domain.entities import WatchRecord
from reelcal.domain.value_objects import CivilDateNormalizer

logger = logging.getLogger(__name__)

DEFAULT_WINDOW_DAYS = 1


def pick_survivor(window: list[WatchRecord]) -> WatchRecord:
    """Choose the record that represents a folded window.

    Args:
        window: Records of one window, ascending by watched_at (non-empty)

    Returns:
        Last annotated record if any, else the chronologically earliest
    """
    annotated = [record for record in window if record.has_annotation]
    if annotated:
        return annotated[-1]
    return window[0]


@dataclass(frozen=True)
class DedupSummary:
    """Diagnostics for one fuzzy pass."""

    input_count: int
    output_count: int
    groups: int
    fuzzy_merges: int


@dataclass(frozen=True)
class DedupResult:
    """Deduplicated timeline (most recent first) plus summary."""

    records: list[WatchRecord]
    summary: DedupSummary


class FuzzyDeduplicator:
    """Collapses same-work records logged within a day of each other."""

    def __init__(
        self,
        normalizer: CivilDateNormalizer,
        window_days: int = DEFAULT_WINDOW_DAYS,
    ) -> None:
        """Initialize deduplicator.

        Args:
            normalizer: Civil date normalizer for day distances
            window_days: Max civil-date distance from the anchor to fold
        """
        self._normalizer = normalizer
        self.window_days = window_days

    def _windows(self, ordered: list[WatchRecord]) -> Iterator[list[WatchRecord]]:
        """Split an ascending group into anchor windows."""
        index = 0
        while index < len(ordered):
            anchor = ordered[index]
            window = [anchor]
            index += 1
            while index < len(ordered):
                distance = self._normalizer.days_between(anchor.watched_at, ordered[index].watched_at)
                if distance > self.window_days:
                    break
                window.append(ordered[index])
                index += 1
            yield window

    def deduplicate(self, records: Iterable[WatchRecord]) -> DedupResult:
        """Collapse near-duplicates.

        Args:
            records: Consolidated records (any order)

        Returns:
            DedupResult with records sorted by watched_at descending
        """
        groups: dict[str, list[WatchRecord]] = {}
        input_count = 0
        for record in records:
            groups.setdefault(record.work_key, []).append(record)
            input_count += 1

        survivors: list[WatchRecord] = []
        fuzzy_merges = 0
        for work_key, group in groups.items():
            ordered = sorted(group, key=lambda r: r.watched_at)
            for window in self._windows(ordered):
                survivor = pick_survivor(window)
                if len(window) > 1:
                    fuzzy_merges += len(window) - 1
                    logger.debug(
                        "Folded %d near-duplicates of %s into %s",
                        len(window) - 1,
                        work_key,
                        self._normalizer.civil_date(survivor.watched_at).iso,
                    )
                survivors.append(survivor)

        survivors.sort(key=lambda r: r.watched_at, reverse=True)
        summary = DedupSummary(
            input_count=input_count,
            output_count=len(survivors),
            groups=len(groups),
            fuzzy_merges=fuzzy_merges,
        )
        return DedupResult(records=survivors, summary=summary)


__all__ = [
    "DEFAULT_WINDOW_DAYS",
    "DedupResult",
    "DedupSummary",
    "FuzzyDeduplicator",
    "pick_survivor",
]
