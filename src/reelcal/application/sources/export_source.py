"""Letterboxd export folder source.

Hey future me - this turns the unzipped Letterboxd data export into
CandidateRecord batches. It does NOT deduplicate anything; that's the
RecordConsolidator's job. One batch per CSV:

    diary.csv   -> SourceKind.PRIMARY_LOG      (dated watches, rewatch, tags)
    reviews.csv -> SourceKind.ANNOTATION_LOG   (same columns + Review)
    ratings.csv -> SourceKind.FALLBACK_CATALOG (Date is the rating date!)

Get the export at https://letterboxd.com/settings/data/, unzip it, point
REELCAL_SOURCE__EXPORT_DIR at the folder.

Dates stay plain "YYYY-MM-DD" strings here. CandidateRecord.to_watch_record()
anchors them at civil noon through the CivilDateNormalizer.
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path

from reelcal.domain.dtos import CandidateRecord, SourceKind
from reelcal.domain.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)

EXPORT_FILES: dict[SourceKind, str] = {
    SourceKind.PRIMARY_LOG: "diary.csv",
    SourceKind.ANNOTATION_LOG: "reviews.csv",
    SourceKind.FALLBACK_CATALOG: "ratings.csv",
}

FILM_URL_PREFIX = "https://letterboxd.com/film/"


def construct_review_link(uri: str | None, username: str) -> str:
    """Rewrite a film URI into the member's review URI.

    https://letterboxd.com/film/arrival-2016/
        -> https://letterboxd.com/<username>/film/arrival-2016/
    """
    if not uri:
        return ""
    return uri.replace(FILM_URL_PREFIX, f"https://letterboxd.com/{username}/film/")


def parse_tags(value: str | None) -> list[str]:
    """Split the comma separated Tags column."""
    if not value or not value.strip():
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def parse_rating(value: str | None) -> float:
    """Parse the Rating column, 0 for blank or garbage."""
    try:
        return float(value) if value else 0.0
    except ValueError:
        return 0.0


class LetterboxdExportSource:
    """Reads candidate batches from an unzipped Letterboxd export folder."""

    def __init__(self, export_dir: Path | str, username: str) -> None:
        """Initialize export source.

        Args:
            export_dir: Folder containing diary.csv, reviews.csv, ratings.csv
            username: Letterboxd username (for review links)
        """
        self.export_dir = Path(export_dir)
        self.username = username

    @property
    def name(self) -> str:
        return "letterboxd_export"

    def load_batch(self, kind: SourceKind) -> list[CandidateRecord]:
        """Load one CSV as a candidate batch.

        Args:
            kind: PRIMARY_LOG, ANNOTATION_LOG or FALLBACK_CATALOG

        Returns:
            Candidates in file order (invalid rows included, the consolidator
            counts and skips them)

        Raises:
            SourceUnavailableError: If the CSV file does not exist
            ValueError: If kind is not an export batch
        """
        if kind not in EXPORT_FILES:
            raise ValueError(f"{kind.value} is not an export batch")

        path = self.export_dir / EXPORT_FILES[kind]
        if not path.is_file():
            raise SourceUnavailableError(kind.value, f"{path.name} not found in {self.export_dir}")

        # utf-8-sig: Letterboxd exports sometimes start with a BOM
        with path.open(encoding="utf-8-sig", newline="") as handle:
            candidates = [self._row_to_candidate(kind, row) for row in csv.DictReader(handle)]

        logger.info("Parsed %s: %d rows", path.name, len(candidates))
        return candidates

    def _row_to_candidate(self, kind: SourceKind, row: dict[str, str | None]) -> CandidateRecord:
        uri = (row.get("Letterboxd URI") or "").strip()
        is_catalog = kind is SourceKind.FALLBACK_CATALOG

        # Hey future me - ratings.csv only has "Date" (when the rating was set), the diary has
        # "Watched Date" AND "Date" (when the entry was logged). Watched Date wins.
        watched = row.get("Date") if is_catalog else (row.get("Watched Date") or row.get("Date"))

        return CandidateRecord(
            source=kind,
            identity_key=uri or None,
            title=row.get("Name"),
            year=(row.get("Year") or "").strip(),
            rating=parse_rating(row.get("Rating")),
            link=uri,
            review_link=construct_review_link(uri, self.username),
            date=(watched or "").strip() or None,
            rewatch=False if is_catalog else row.get("Rewatch") == "Yes",
            tags=[] if is_catalog else parse_tags(row.get("Tags")),
            review_text=row.get("Review") or "",
        )


__all__ = [
    "EXPORT_FILES",
    "LetterboxdExportSource",
    "construct_review_link",
    "parse_rating",
    "parse_tags",
]
