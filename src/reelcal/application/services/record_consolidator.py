"""Record Consolidator - exact-key merge of candidate batches.

Hey future me - this is PHASE 1 of deduplication!

Problem: Letterboxd exports the SAME watch several times. You log a film
(diary.csv), then write a review (reviews.csv), then the rating shows up
again in ratings.csv. Each row has its own URI, so the identity key alone
can't tell they're one watch.

Solution: key every candidate by "title|year|civil date" and decide per
collision with a small tagged decision:

    Replace(incoming)  - slot was empty, incoming takes it
    Keep(existing)     - incoming adds nothing, drop it (counted)
    Merge(record)      - incoming carries a review, it supersedes the stored
                         record field-for-field (blank incoming fields
                         overwrite too)

resolve_conflict() is a pure function so the policy can be tested without
running a whole batch.

Batches are processed in SOURCE_PRIORITY order (diary, reviews, ratings)
no matter how the caller ordered them. The ratings catalog only ever fills
empty slots.
"""

from __future__ import annotations

import logging
from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from reelcal.domain.dtos import SOURCE_PRIORITY, CandidateRecord, SourceKind
from reelcal.domain.entities import WatchRecord
from reelcal.domain.exceptions import SkippableRecordError
from reelcal.domain.value_objects import CivilDateNormalizer

logger = logging.getLogger(__name__)


# =========================================================================
# CONFLICT DECISIONS
# =========================================================================


@dataclass(frozen=True)
class Keep:
    """Keep the stored record, drop the incoming one."""

    record: WatchRecord


@dataclass(frozen=True)
class Replace:
    """Store the incoming record as-is (the slot was empty)."""

    record: WatchRecord


@dataclass(frozen=True)
class Merge:
    """Store a new record combining incoming fields over the stored ones."""

    record: WatchRecord


ConflictDecision = Keep | Replace | Merge


def consolidation_key(record: WatchRecord, normalizer: CivilDateNormalizer) -> str:
    """Build the exact-duplicate key: "title|year|YYYY-MM-DD"."""
    return f"{record.work_key}|{normalizer.civil_date(record.watched_at).iso}"


def merge_fields(existing: WatchRecord, incoming: WatchRecord) -> WatchRecord:
    """Overwrite the stored record with the incoming one.

    Hey future me - incoming wins EVERY field, blank ones included. A review
    row without a rating replaces the diary's rating with 0; that's the
    long-standing export behavior, don't "fix" it here. The review text and the
    primary link are set from the winner explicitly so the rule is visible.

    Returns:
        A new WatchRecord (neither input is modified)
    """
    logger.debug("Review row supersedes %s", existing.identity_key)
    return replace(
        incoming,
        annotation_text=incoming.annotation_text,
        primary_link=incoming.primary_link,
    )


def resolve_conflict(
    existing: WatchRecord | None,
    incoming: WatchRecord,
    source: SourceKind,
) -> ConflictDecision:
    """Decide what happens when a candidate hits a consolidation key.

    Args:
        existing: Record currently stored under the key (None if empty)
        incoming: Validated candidate
        source: Batch the candidate came from

    Returns:
        Keep, Replace or Merge
    """
    if existing is None:
        return Replace(incoming)
    if source is SourceKind.FALLBACK_CATALOG:
        # The catalog never overrides diary/review data
        return Keep(existing)
    if incoming.has_annotation:
        return Merge(merge_fields(existing, incoming))
    return Keep(existing)


# =========================================================================
# RESULTS
# =========================================================================


@dataclass(frozen=True)
class ConsolidationSummary:
    """Diagnostics for one consolidation pass (no printing in the stage!)."""

    input_count: int
    output_count: int
    invalid_records: int
    skipped_duplicates: int
    annotation_merges: int
    catalog_skipped: int
    per_source: dict[str, int] = field(default_factory=dict)
    invalid_by_field: dict[str, int] = field(default_factory=dict)

    @property
    def exact_duplicates_removed(self) -> int:
        """Valid candidates that collapsed into an existing key."""
        return self.skipped_duplicates + self.annotation_merges + self.catalog_skipped


@dataclass(frozen=True)
class ConsolidationResult:
    """Surviving records (first-insertion order) plus summary."""

    records: list[WatchRecord]
    summary: ConsolidationSummary


# =========================================================================
# CONSOLIDATOR
# =========================================================================


class RecordConsolidator:
    """Merges candidate batches by exact consolidation key.

    Holds no state between calls - every consolidate() builds its own map.
    """

    def __init__(self, normalizer: CivilDateNormalizer) -> None:
        """Initialize consolidator.

        Args:
            normalizer: Civil date normalizer for key building and parsing
        """
        self._normalizer = normalizer

    def consolidate(self, candidates: Iterable[CandidateRecord]) -> ConsolidationResult:
        """Consolidate candidates from the batch sources.

        Args:
            candidates: Candidates from diary, reviews and ratings batches

        Returns:
            ConsolidationResult with one record per consolidation key
        """
        priority = {kind: rank for rank, kind in enumerate(SOURCE_PRIORITY)}
        # sorted() is stable, so order WITHIN a batch is preserved
        ordered = sorted(candidates, key=lambda c: priority.get(c.source, len(priority)))

        slots: dict[str, WatchRecord] = {}
        per_source: Counter[str] = Counter()
        invalid_by_field: Counter[str] = Counter()
        skipped_duplicates = 0
        annotation_merges = 0
        catalog_skipped = 0

        for candidate in ordered:
            per_source[candidate.source.value] += 1
            try:
                incoming = candidate.to_watch_record(self._normalizer)
            except SkippableRecordError as e:
                invalid_by_field[e.field] += 1
                logger.debug("Skipping %s candidate: %s", candidate.source.value, e.message)
                continue

            key = consolidation_key(incoming, self._normalizer)
            decision = resolve_conflict(slots.get(key), incoming, candidate.source)

            match decision:
                case Replace(record=record):
                    slots[key] = record
                case Merge(record=record):
                    slots[key] = record
                    annotation_merges += 1
                case Keep():
                    if candidate.source is SourceKind.FALLBACK_CATALOG:
                        catalog_skipped += 1
                    else:
                        skipped_duplicates += 1

        summary = ConsolidationSummary(
            input_count=len(ordered),
            output_count=len(slots),
            invalid_records=sum(invalid_by_field.values()),
            skipped_duplicates=skipped_duplicates,
            annotation_merges=annotation_merges,
            catalog_skipped=catalog_skipped,
            per_source=dict(per_source),
            invalid_by_field=dict(invalid_by_field),
        )
        return ConsolidationResult(records=list(slots.values()), summary=summary)


__all__ = [
    "ConflictDecision",
    "ConsolidationResult",
    "ConsolidationSummary",
    "Keep",
    "Merge",
    "RecordConsolidator",
    "Replace",
    "consolidation_key",
    "merge_fields",
    "resolve_conflict",
]
