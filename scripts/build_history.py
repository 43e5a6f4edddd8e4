#!/usr/bin/env python3
"""Rebuild the historical timeline from a Letterboxd export folder.

Hey future me - run this by hand after downloading a fresh export:

    1. https://letterboxd.com/settings/data/ -> request export -> unzip
    2. python scripts/build_history.py path/to/letterboxd-export
    3. Commit src/_data/moviesHistorical.json, delete the export folder

Usage:
    python scripts/build_history.py [EXPORT_DIR] [--output PATH] [--dry-run]

    # Or configure via environment:
    REELCAL_SOURCE__EXPORT_DIR=letterboxd-export python scripts/build_history.py
"""

import argparse
import asyncio
import logging
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from reelcal.application.sources import LetterboxdExportSource  # noqa: E402
from reelcal.application.use_cases import BuildHistoryRequest, BuildHistoryUseCase  # noqa: E402
from reelcal.config import get_settings  # noqa: E402
from reelcal.domain.exceptions import DomainException  # noqa: E402
from reelcal.domain.value_objects import CivilDateNormalizer  # noqa: E402
from reelcal.infrastructure.observability import configure_logging, set_run_id  # noqa: E402
from reelcal.infrastructure.persistence import SnapshotStore  # noqa: E402

logger = logging.getLogger("reelcal.scripts.build_history")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("export_dir", nargs="?", type=Path, help="Unzipped export folder")
    parser.add_argument("--output", type=Path, help="Snapshot path (default from settings)")
    parser.add_argument("--dry-run", action="store_true", help="Don't write the snapshot")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    export_dir = args.export_dir or settings.source.export_dir
    if not export_dir.is_dir():
        logger.error("Export folder not found: %s", export_dir)
        return 1

    use_case = BuildHistoryUseCase(
        source=LetterboxdExportSource(export_dir, settings.source.username),
        snapshot_store=SnapshotStore(args.output or settings.source.snapshot_path),
        normalizer=CivilDateNormalizer(settings.calendar.timezone),
    )
    try:
        response = await use_case.execute(BuildHistoryRequest(dry_run=args.dry_run))
    except DomainException as e:
        logger.error("History build failed: %s", e.message)
        return 1

    logger.info(
        "Done: %d films (%d reviewed, %d rewatches)",
        len(response.records),
        response.annotated_count,
        response.rewatch_count,
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings.observability.log_level, settings.observability.log_json_format)
    set_run_id()
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
