"""Application services - the pipeline stages.

Order of a full build:
    RecordConsolidator -> FuzzyDeduplicator -> (snapshot)
    -> EnrichmentService -> SourceMerger -> CalendarProjector
"""

from reelcal.application.services.calendar_projector import CalendarModel, CalendarProjector
from reelcal.application.services.enrichment_service import (
    EnrichmentResult,
    EnrichmentService,
    EnrichmentSummary,
)
from reelcal.application.services.fuzzy_deduplicator import DedupResult, FuzzyDeduplicator
from reelcal.application.services.record_consolidator import (
    ConsolidationResult,
    RecordConsolidator,
)
from reelcal.application.services.source_merger import MergeResult, SourceMerger

__all__ = [
    "CalendarModel",
    "CalendarProjector",
    "ConsolidationResult",
    "DedupResult",
    "EnrichmentResult",
    "EnrichmentService",
    "EnrichmentSummary",
    "FuzzyDeduplicator",
    "MergeResult",
    "RecordConsolidator",
    "SourceMerger",
]
