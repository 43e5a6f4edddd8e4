"""WatchRecord entity - one canonical watch event.

Hey future me - WatchRecord is FROZEN on purpose. The consolidator and the
fuzzy deduplicator never mutate a record; a merged record is a NEW value
built with dataclasses.replace(). If you find yourself wanting
object.__setattr__ outside __post_init__, build a new record instead.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

from reelcal.domain.value_objects.image_paths import ImagePaths


def normalize_tags(tags: Iterable[str] | None) -> tuple[str, ...]:
    """Strip tags, drop blanks and duplicates, keep first-seen order."""
    seen: dict[str, None] = {}
    for tag in tags or ():
        cleaned = (tag or "").strip()
        if cleaned and cleaned not in seen:
            seen[cleaned] = None
    return tuple(seen)


@dataclass(frozen=True)
class WatchRecord:
    """A single watch of a film on a calendar day.

    Attributes:
        identity_key: Opaque source identifier, unique per logged entry
        title: Film title (work identity, not unique alone)
        watched_at: Aware instant representing the day the film was watched
        year: Release year as string, may be empty
        rating: Star rating, 0 if absent
        primary_link: Film page URI ("" if absent)
        annotation_link: Review page URI ("" if absent)
        images: Poster/backdrop/display image
        description: Short plain-text blurb
        is_rewatch: True if logged as a rewatch
        tags: Ordered, de-duplicated tags
        annotation_text: Review text, "" means no annotation (never None)
    """

    identity_key: str
    title: str
    watched_at: datetime
    year: str = ""
    rating: float = 0.0
    primary_link: str = ""
    annotation_link: str = ""
    images: ImagePaths = field(default_factory=ImagePaths)
    description: str = ""
    is_rewatch: bool = False
    tags: tuple[str, ...] = ()
    annotation_text: str = ""

    def __post_init__(self) -> None:
        # Frozen, so normalization has to go through object.__setattr__
        object.__setattr__(self, "tags", normalize_tags(self.tags))
        object.__setattr__(self, "annotation_text", self.annotation_text or "")
        object.__setattr__(self, "year", (self.year or "").strip())
        object.__setattr__(self, "rating", float(self.rating or 0))

    @property
    def has_annotation(self) -> bool:
        """True if the record carries non-blank review text."""
        return bool(self.annotation_text.strip())

    @property
    def work_key(self) -> str:
        """Work identity used to group candidates: "title|year"."""
        return f"{self.title}|{self.year}"

    def with_images(self, images: ImagePaths) -> WatchRecord:
        """Create a copy with different imagery (immutable pattern)."""
        return replace(self, images=images)
