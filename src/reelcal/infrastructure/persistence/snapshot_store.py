"""Snapshot store - the persisted historical timeline.

Hey future me - the snapshot is written by build_history and read by every
calendar build. It's a plain JSON array, newest first, committed to the
repo. A row that doesn't validate is skipped and counted, never fatal: one
hand-edited typo must not take down the site build.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from reelcal.domain.dtos import SourceKind
from reelcal.domain.entities import WatchRecord
from reelcal.domain.exceptions import SkippableRecordError, SourceUnavailableError
from reelcal.domain.value_objects import CivilDateNormalizer
from reelcal.infrastructure.persistence.schemas import WatchRecordRow, dump_record

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SnapshotLoadResult:
    """Records loaded from a snapshot plus the count of skipped rows."""

    records: list[WatchRecord]
    skipped: int


def load_json_mapping(path: Path) -> dict[str, str]:
    """Load an optional string -> string JSON mapping.

    Used for customBackdrops.json and customQuotes.json. Both are optional
    extras, so neither a missing nor a broken file may stop a build: missing
    is logged at info level, unreadable or non-object content as a warning,
    and both mean an empty mapping.
    """
    if not path.is_file():
        logger.info("No %s found, continuing without it", path.name)
        return {}
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        logger.warning("Cannot read %s, continuing without it: %s", path, e)
        return {}
    if not isinstance(data, dict):
        logger.warning("%s must contain a JSON object, continuing without it", path)
        return {}
    return {str(key): str(value) for key, value in data.items() if value}


class SnapshotStore:
    """Reads and writes the historical timeline JSON file."""

    def __init__(self, path: Path | str) -> None:
        """
        Initialize snapshot store.

        Args:
            path: Snapshot file path (e.g. src/_data/moviesHistorical.json)
        """
        self.path = Path(path)

    def exists(self) -> bool:
        return self.path.is_file()

    def load(self, normalizer: CivilDateNormalizer) -> SnapshotLoadResult:
        """Load and validate the snapshot.

        Args:
            normalizer: Civil date normalizer used to parse stored dates

        Returns:
            SnapshotLoadResult in file order

        Raises:
            SourceUnavailableError: If the file is missing or not a JSON array
        """
        if not self.path.is_file():
            raise SourceUnavailableError(SourceKind.SNAPSHOT.value, f"No snapshot at {self.path}")

        try:
            rows = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise SourceUnavailableError(
                SourceKind.SNAPSHOT.value, f"Cannot read snapshot {self.path}: {e}"
            ) from e
        if not isinstance(rows, list):
            raise SourceUnavailableError(
                SourceKind.SNAPSHOT.value, f"Snapshot {self.path} is not a JSON array"
            )

        records: list[WatchRecord] = []
        skipped = 0
        for index, raw in enumerate(rows):
            try:
                row = WatchRecordRow.model_validate(raw)
                records.append(row.to_candidate().to_watch_record(normalizer))
            except (ValidationError, SkippableRecordError) as e:
                skipped += 1
                logger.debug("Skipping snapshot row %d: %s", index, e)

        if skipped:
            logger.warning("Skipped %d invalid snapshot rows in %s", skipped, self.path.name)
        return SnapshotLoadResult(records=records, skipped=skipped)

    def save(self, records: Iterable[WatchRecord]) -> int:
        """Write records sorted by watched_at descending.

        Returns:
            Number of records written
        """
        ordered = sorted(records, key=lambda r: r.watched_at, reverse=True)
        payload: list[dict[str, Any]] = [dump_record(record) for record in ordered]

        self.path.parent.mkdir(parents=True, exist_ok=True)
        # Write to a sibling file first so a crash never leaves half a snapshot
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        tmp_path.write_text(json.dumps(payload, indent=2, ensure_ascii=False) + "\n", encoding="utf-8")
        tmp_path.replace(self.path)

        logger.info("Wrote %d records to %s", len(payload), self.path)
        return len(payload)


__all__ = ["SnapshotLoadResult", "SnapshotStore", "load_json_mapping"]
