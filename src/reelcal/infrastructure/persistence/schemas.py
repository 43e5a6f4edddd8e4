"""Persisted record schema.

Hey future me - the snapshot JSON keeps the field names the site templates
were written against (camelCase: reviewLink, reviewText). Python code uses
snake_case attributes; aliases bridge the two. populate_by_name lets tests
build rows either way.

Dates are written as UTC ISO-8601 instants ("2024-03-02T18:00:00+00:00").
Loading goes back through the CivilDateNormalizer, so the civil day
survives the round trip.
"""

from datetime import UTC
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from reelcal.domain.dtos import CandidateRecord, SourceKind
from reelcal.domain.entities import WatchRecord


class WatchRecordRow(BaseModel):
    """One record as stored in moviesHistorical.json."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    uri: str | None = Field(default=None, description="Identity key (falls back to link)")
    title: str | None = None
    year: str = ""
    rating: float | None = 0.0
    link: str = ""
    review_link: str = Field(default="", alias="reviewLink")
    date: str | None = None
    image: str = ""
    poster: str = ""
    backdrop: str = ""
    description: str = ""
    rewatch: bool = False
    tags: list[str] = Field(default_factory=list)
    review_text: str = Field(default="", alias="reviewText")

    @field_validator("year", mode="before")
    @classmethod
    def coerce_year(cls, v: Any) -> str:
        """Older snapshots stored the year as a number."""
        return "" if v is None else str(v).strip()

    @field_validator(
        "link", "review_link", "image", "poster", "backdrop", "description", "review_text",
        mode="before",
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> Any:
        return "" if v is None else v

    @classmethod
    def from_record(cls, record: WatchRecord) -> "WatchRecordRow":
        """Build a row from a WatchRecord (date in UTC)."""
        return cls(
            uri=record.identity_key,
            title=record.title,
            year=record.year,
            rating=record.rating,
            link=record.primary_link,
            review_link=record.annotation_link,
            date=record.watched_at.astimezone(UTC).isoformat(),
            image=record.images.image,
            poster=record.images.poster,
            backdrop=record.images.backdrop,
            description=record.description,
            rewatch=record.is_rewatch,
            tags=list(record.tags),
            review_text=record.annotation_text,
        )

    def to_candidate(self, source: SourceKind = SourceKind.SNAPSHOT) -> CandidateRecord:
        """Convert back into a candidate (validated by to_watch_record())."""
        return CandidateRecord(
            source=source,
            identity_key=self.uri or self.link or None,
            title=self.title,
            year=self.year,
            rating=self.rating,
            link=self.link,
            review_link=self.review_link,
            date=self.date,
            image=self.image,
            poster=self.poster,
            backdrop=self.backdrop,
            description=self.description,
            rewatch=self.rewatch,
            tags=list(self.tags),
            review_text=self.review_text,
        )


def dump_record(record: WatchRecord) -> dict[str, Any]:
    """JSON-ready dict of a record in the persisted (camelCase) shape."""
    return WatchRecordRow.from_record(record).model_dump(by_alias=True, mode="json")


__all__ = ["WatchRecordRow", "dump_record"]
