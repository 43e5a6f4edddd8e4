"""Source protocols.

Hey future me - THESE ARE THE SEAMS between the pipeline and the outside!

    ┌───────────────────────────┐     ┌──────────────────────────┐
    │ CandidateSource           │     │ LiveCandidateSource      │
    │  LetterboxdExportSource   │     │  LetterboxdFeedClient    │
    │  (diary/reviews/ratings)  │     │  (RSS, async)            │
    └─────────────┬─────────────┘     └────────────┬─────────────┘
                  ▼                                ▼
        BuildHistoryUseCase              BuildCalendarUseCase

Both hand over CandidateRecords; neither deduplicates. Both signal an absent
source with SourceUnavailableError, which the use cases turn into a warning.
Tests plug in tiny fakes instead of CSV folders and HTTP.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from reelcal.domain.dtos import CandidateRecord, SourceKind


@runtime_checkable
class CandidateSource(Protocol):
    """Batch source feeding the RecordConsolidator."""

    @property
    def name(self) -> str:
        """Unique name for this source (used in logs)."""
        ...

    def load_batch(self, kind: SourceKind) -> list[CandidateRecord]:
        """Load one candidate batch.

        Raises:
            SourceUnavailableError: If the batch is entirely absent
        """
        ...


@runtime_checkable
class LiveCandidateSource(Protocol):
    """Live source (the RSS feed) merged on top of the snapshot."""

    async def fetch_candidates(self) -> list[CandidateRecord]:
        """Fetch the latest candidates.

        Raises:
            SourceUnavailableError: If the source can't be reached or parsed
        """
        ...

    async def close(self) -> None:
        """Release network resources."""
        ...
