"""Use case for building the calendar model the site templates render.

Hey future me - this runs on EVERY site build (scheduled, in CI). It must
degrade gracefully:

- no snapshot            -> warning, live feed only
- feed unreachable       -> warning, snapshot only
- no TMDb key            -> warning, no automatic backdrops
- BOTH sources empty     -> EmptyTimelineError (the only hard failure)

Flow:
    SnapshotStore.load ──► enrich (missing imagery) ──┐
                                                      ├─► SourceMerger ─► CalendarProjector
    Feed.fetch_candidates ─► enrich (no backdrop) ────┘
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from reelcal.application.services.calendar_projector import CalendarModel, CalendarProjector
from reelcal.application.services.enrichment_service import EnrichmentSummary
from reelcal.application.services.source_merger import MergeSummary, SourceMerger
from reelcal.application.use_cases import UseCase
from reelcal.domain.entities import WatchRecord
from reelcal.domain.exceptions import (
    EmptyTimelineError,
    SkippableRecordError,
    SourceUnavailableError,
)
from reelcal.infrastructure.observability.logger_template import log_operation

if TYPE_CHECKING:
    from collections.abc import Mapping

    from reelcal.application.services.enrichment_service import EnrichmentService
    from reelcal.application.sources.import_source import LiveCandidateSource
    from reelcal.domain.value_objects import CivilDateNormalizer
    from reelcal.infrastructure.persistence.snapshot_store import SnapshotStore

logger = logging.getLogger(__name__)


@dataclass
class BuildCalendarRequest:
    """Request to build the calendar model."""

    include_live: bool = True  # Fetch the RSS feed
    enrich: bool = True  # Apply custom and automatic backdrops


@dataclass
class BuildCalendarResponse:
    """Response with the calendar model and diagnostics."""

    calendar: CalendarModel
    records: list[WatchRecord]
    merge: MergeSummary
    historical_skipped: int = 0
    live_skipped: int = 0
    unavailable_sources: list[str] = field(default_factory=list)
    historical_enrichment: EnrichmentSummary = field(default_factory=EnrichmentSummary)
    live_enrichment: EnrichmentSummary = field(default_factory=EnrichmentSummary)


class BuildCalendarUseCase(UseCase[BuildCalendarRequest, BuildCalendarResponse]):
    """Snapshot + live feed -> enriched, merged calendar model."""

    def __init__(
        self,
        snapshot_store: SnapshotStore,
        live_source: LiveCandidateSource | None,
        normalizer: CivilDateNormalizer,
        enrichment: EnrichmentService | None = None,
        quotes: Mapping[str, str] | None = None,
    ) -> None:
        """Initialize use case.

        Args:
            snapshot_store: Historical timeline
            live_source: RSS feed client (None disables the live feed)
            normalizer: Civil date normalizer
            enrichment: Backdrop enrichment (None disables it)
            quotes: Custom quote per civil date
        """
        self._store = snapshot_store
        self._live_source = live_source
        self._normalizer = normalizer
        self._enrichment = enrichment
        self._merger = SourceMerger()
        self._projector = CalendarProjector(normalizer, quotes)

    def _load_historical(self, unavailable: list[str]) -> tuple[list[WatchRecord], int]:
        try:
            result = self._store.load(self._normalizer)
        except SourceUnavailableError as e:
            logger.warning("%s, using live feed only", e.message)
            unavailable.append(e.source)
            return [], 0
        logger.info("Loaded %d historical films", len(result.records))
        return result.records, result.skipped

    async def _load_live(self, unavailable: list[str]) -> tuple[list[WatchRecord], int]:
        if self._live_source is None:
            return [], 0
        try:
            candidates = await self._live_source.fetch_candidates()
        except SourceUnavailableError as e:
            logger.warning("%s, using historical data only", e.message)
            unavailable.append(e.source)
            return [], 0

        records: list[WatchRecord] = []
        skipped = 0
        for candidate in candidates:
            try:
                records.append(candidate.to_watch_record(self._normalizer))
            except SkippableRecordError as e:
                skipped += 1
                logger.debug("Skipping feed item: %s", e.message)
        return records, skipped

    async def execute(self, request: BuildCalendarRequest) -> BuildCalendarResponse:
        """Build the calendar.

        Args:
            request: Build options

        Returns:
            Response with the CalendarModel and per-stage diagnostics

        Raises:
            EmptyTimelineError: If neither source produced a record
        """
        unavailable: list[str] = []
        historical_enrichment = EnrichmentSummary()
        live_enrichment = EnrichmentSummary()

        async with log_operation(logger, "build_calendar", include_live=request.include_live):
            historical, historical_skipped = self._load_historical(unavailable)
            live: list[WatchRecord] = []
            live_skipped = 0
            if request.include_live:
                live, live_skipped = await self._load_live(unavailable)

            if request.enrich and self._enrichment is not None:
                result = await self._enrichment.enrich(historical)
                historical, historical_enrichment = result.records, result.summary
                # Feed records carry a poster, but a backdrop is what the calendar wants
                result = await self._enrichment.enrich(live, require_backdrop=True)
                live, live_enrichment = result.records, result.summary

            merged = self._merger.merge(historical, live)
            logger.info(
                "Total films after merge: %d (%d live overrides)",
                merged.summary.total,
                merged.summary.live_overrides,
            )
            if not merged.records:
                raise EmptyTimelineError("No films from snapshot or live feed")

            calendar = self._projector.project(merged.records)

        return BuildCalendarResponse(
            calendar=calendar,
            records=merged.records,
            merge=merged.summary,
            historical_skipped=historical_skipped,
            live_skipped=live_skipped,
            unavailable_sources=unavailable,
            historical_enrichment=historical_enrichment,
            live_enrichment=live_enrichment,
        )
