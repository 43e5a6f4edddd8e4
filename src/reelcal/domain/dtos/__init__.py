"""
Candidate record DTOs.

Hey future me - CandidateRecord is the LINGUA FRANCA between the extraction
adapters (export CSVs, RSS feed, snapshot JSON) and the core pipeline.
Every adapter MUST hand over this shape; the pipeline never sees raw CSV
rows or XML elements.

Why a DTO instead of building WatchRecord directly?
1. Candidates can be broken (missing title, missing date, garbage date)
2. WatchRecord is always valid - to_watch_record() is the ONE gate
3. The DTO remembers which batch it came from (source) for precedence

Flow: adapter row -> CandidateRecord -> to_watch_record() -> WatchRecord
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import TYPE_CHECKING

from reelcal.domain.entities import WatchRecord
from reelcal.domain.exceptions import SkippableRecordError
from reelcal.domain.value_objects import ImagePaths

if TYPE_CHECKING:
    from reelcal.domain.value_objects import CivilDateNormalizer


class SourceKind(str, Enum):
    """Where a candidate record came from.

    The three batch kinds are consolidated in SOURCE_PRIORITY order; the live
    feed and the snapshot never go through consolidation.
    """

    PRIMARY_LOG = "diary"
    ANNOTATION_LOG = "reviews"
    FALLBACK_CATALOG = "ratings"
    LIVE_FEED = "feed"
    SNAPSHOT = "snapshot"


# Primary log first, annotation log second, fallback catalog last
SOURCE_PRIORITY: tuple[SourceKind, ...] = (
    SourceKind.PRIMARY_LOG,
    SourceKind.ANNOTATION_LOG,
    SourceKind.FALLBACK_CATALOG,
)


@dataclass
class CandidateRecord:
    """
    A not-yet-validated watch record from any source.

    Field names follow the extraction contract (link, review_link, date,
    review_text) rather than the entity's names on purpose: this is what
    the outside world hands us.
    """

    source: SourceKind
    identity_key: str | None = None
    title: str | None = None
    year: str | None = ""
    rating: float | None = None
    link: str | None = ""
    review_link: str | None = ""
    date: str | datetime | date | None = None
    image: str | None = ""
    poster: str | None = ""
    backdrop: str | None = ""
    description: str | None = ""
    rewatch: bool = False
    tags: list[str] = field(default_factory=list)
    review_text: str | None = ""

    # Hey future me - the check ORDER matters for the skip counters: identity key, then date,
    # then title. That's the order the diary export was always validated in, and the per-field
    # skip counts in ConsolidationSummary depend on it.
    def to_watch_record(self, normalizer: CivilDateNormalizer) -> WatchRecord:
        """Validate and convert into a WatchRecord.

        Args:
            normalizer: Civil date normalizer used to parse the date

        Returns:
            A valid WatchRecord

        Raises:
            SkippableRecordError: If identity key, date or title is missing
            InvalidInstantError: If the date cannot be parsed
        """
        identity_key = (self.identity_key or "").strip()
        if not identity_key:
            raise SkippableRecordError("identity_key")

        if self.date is None or (isinstance(self.date, str) and not self.date.strip()):
            raise SkippableRecordError("date")

        title = (self.title or "").strip()
        if not title:
            raise SkippableRecordError("title")

        return WatchRecord(
            identity_key=identity_key,
            title=title,
            watched_at=normalizer.parse_instant(self.date),
            year=self.year or "",
            rating=self.rating or 0.0,
            primary_link=(self.link or "").strip(),
            annotation_link=(self.review_link or "").strip(),
            images=ImagePaths.resolve(
                poster=self.poster or "",
                backdrop=self.backdrop or "",
                image=self.image or "",
            ),
            description=self.description or "",
            is_rewatch=bool(self.rewatch),
            tags=tuple(self.tags or ()),
            annotation_text=self.review_text or "",
        )


__all__ = ["SOURCE_PRIORITY", "CandidateRecord", "SourceKind"]
