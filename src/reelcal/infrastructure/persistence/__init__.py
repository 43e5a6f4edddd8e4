"""Persistence - JSON snapshot and side files."""

from reelcal.infrastructure.persistence.schemas import WatchRecordRow, dump_record
from reelcal.infrastructure.persistence.snapshot_store import (
    SnapshotLoadResult,
    SnapshotStore,
    load_json_mapping,
)

__all__ = [
    "SnapshotLoadResult",
    "SnapshotStore",
    "WatchRecordRow",
    "dump_record",
    "load_json_mapping",
]
