"""Use case for rebuilding the historical timeline from a Letterboxd export.

Hey future me - this is what `scripts/build_history.py` runs, by hand, after
downloading a fresh export. The flow:

1. Load diary, reviews and ratings batches (a missing file is a warning)
2. Consolidate exact duplicates (RecordConsolidator)
3. Collapse ±1 day near-duplicates (FuzzyDeduplicator)
4. Write the snapshot (unless dry_run)

Zero surviving records is the ONE hard failure (EmptyTimelineError) - we'd
rather fail the script than overwrite a good snapshot with [].
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from reelcal.application.services.fuzzy_deduplicator import DedupSummary, FuzzyDeduplicator
from reelcal.application.services.record_consolidator import (
    ConsolidationSummary,
    RecordConsolidator,
)
from reelcal.application.use_cases import UseCase
from reelcal.domain.dtos import SOURCE_PRIORITY, CandidateRecord
from reelcal.domain.entities import WatchRecord
from reelcal.domain.exceptions import EmptyTimelineError, SourceUnavailableError
from reelcal.infrastructure.observability.logger_template import log_operation

if TYPE_CHECKING:
    from pathlib import Path

    from reelcal.application.sources.import_source import CandidateSource
    from reelcal.domain.value_objects import CivilDateNormalizer
    from reelcal.infrastructure.persistence.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class BuildHistoryRequest:
    """Request to rebuild the historical timeline."""

    dry_run: bool = False  # Run the pipeline but don't write the snapshot


@dataclass
class BuildHistoryResponse:
    """Response from rebuilding the historical timeline."""

    records: list[WatchRecord]
    consolidation: ConsolidationSummary
    dedup: DedupSummary
    unavailable_sources: list[str] = field(default_factory=list)
    snapshot_path: Path | None = None  # None on dry runs

    @property
    def annotated_count(self) -> int:
        return sum(1 for record in self.records if record.has_annotation)

    @property
    def rewatch_count(self) -> int:
        return sum(1 for record in self.records if record.is_rewatch)


class BuildHistoryUseCase(UseCase[BuildHistoryRequest, BuildHistoryResponse]):
    """Export batches -> consolidated, deduplicated snapshot."""

    def __init__(
        self,
        source: CandidateSource,
        snapshot_store: SnapshotStore,
        normalizer: CivilDateNormalizer,
    ) -> None:
        """Initialize use case.

        Args:
            source: Export batch source
            snapshot_store: Where the timeline is written
            normalizer: Civil date normalizer shared by both stages
        """
        self._source = source
        self._store = snapshot_store
        self._consolidator = RecordConsolidator(normalizer)
        self._deduplicator = FuzzyDeduplicator(normalizer)
        self._normalizer = normalizer

    def _load_candidates(self) -> tuple[list[CandidateRecord], list[str]]:
        candidates: list[CandidateRecord] = []
        unavailable: list[str] = []
        for kind in SOURCE_PRIORITY:
            try:
                batch = self._source.load_batch(kind)
            except SourceUnavailableError as e:
                logger.warning("%s, continuing without %s", e.message, kind.value)
                unavailable.append(kind.value)
                continue
            candidates.extend(batch)
        return candidates, unavailable

    async def execute(self, request: BuildHistoryRequest) -> BuildHistoryResponse:
        """Execute the rebuild.

        Args:
            request: Build options

        Returns:
            Response with the timeline (newest first) and stage summaries

        Raises:
            EmptyTimelineError: If no usable record survived
        """
        async with log_operation(logger, "build_history", source=self._source.name):
            candidates, unavailable = self._load_candidates()

            consolidation = self._consolidator.consolidate(candidates)
            summary = consolidation.summary
            if summary.invalid_records:
                logger.info(
                    "Skipped %d rows with missing fields %s",
                    summary.invalid_records,
                    summary.invalid_by_field,
                )
            if not consolidation.records:
                raise EmptyTimelineError(
                    "No usable records found in export (need diary.csv, reviews.csv or ratings.csv)"
                )

            dedup = self._deduplicator.deduplicate(consolidation.records)
            logger.info(
                "Removed %d exact-date duplicates and %d fuzzy (±1 day) duplicates",
                summary.exact_duplicates_removed,
                dedup.summary.fuzzy_merges,
            )

            snapshot_path = None
            if request.dry_run:
                logger.info("Dry run, snapshot not written")
            else:
                self._store.save(dedup.records)
                snapshot_path = self._store.path

            newest = self._normalizer.civil_date(dedup.records[0].watched_at).iso
            oldest = self._normalizer.civil_date(dedup.records[-1].watched_at).iso
            logger.info("Timeline: %d films, %s to %s", len(dedup.records), oldest, newest)

        return BuildHistoryResponse(
            records=dedup.records,
            consolidation=summary,
            dedup=dedup.summary,
            unavailable_sources=unavailable,
            snapshot_path=snapshot_path,
        )
