#!/usr/bin/env python3
"""Build the calendar data file the site templates render.

Hey future me - the site build runs this before the static generator:

    python scripts/build_calendar.py --output src/_data/moviesCalendar.json

It reads the snapshot, pulls the RSS feed, applies custom and TMDb
backdrops (REELCAL_TMDB__API_KEY), merges, and writes the calendar JSON.
A dead feed or a missing key only costs freshness or pictures; the script
fails only when there's nothing at all to show.

Usage:
    python scripts/build_calendar.py [--output PATH] [--no-live] [--no-enrich]
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from reelcal.application.cache import BackdropCache  # noqa: E402
from reelcal.application.services import EnrichmentService  # noqa: E402
from reelcal.application.use_cases import BuildCalendarRequest, BuildCalendarUseCase  # noqa: E402
from reelcal.config import get_settings  # noqa: E402
from reelcal.domain.exceptions import DomainException  # noqa: E402
from reelcal.domain.value_objects import CivilDateNormalizer  # noqa: E402
from reelcal.infrastructure.integrations import LetterboxdFeedClient, TMDbClient  # noqa: E402
from reelcal.infrastructure.observability import configure_logging, set_run_id  # noqa: E402
from reelcal.infrastructure.persistence import (  # noqa: E402
    SnapshotStore,
    dump_record,
    load_json_mapping,
)
from reelcal.infrastructure.providers import TMDbImageProvider  # noqa: E402

logger = logging.getLogger("reelcal.scripts.build_calendar")

DEFAULT_OUTPUT = Path("src/_data/moviesCalendar.json")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--output", type=Path, default=DEFAULT_OUTPUT, help="Calendar JSON path")
    parser.add_argument("--no-live", action="store_true", help="Skip the RSS feed")
    parser.add_argument("--no-enrich", action="store_true", help="Skip backdrop enrichment")
    return parser.parse_args(argv)


async def run(args: argparse.Namespace) -> int:
    settings = get_settings()
    normalizer = CivilDateNormalizer(settings.calendar.timezone)

    feed = LetterboxdFeedClient(settings.source.username, settings.source.feed_timeout)
    tmdb = TMDbClient(settings.tmdb)
    if not settings.tmdb.is_configured:
        logger.warning("TMDb API key not found, skipping automatic backdrops")

    try:
        use_case = BuildCalendarUseCase(
            snapshot_store=SnapshotStore(settings.source.snapshot_path),
            live_source=feed,
            normalizer=normalizer,
            enrichment=EnrichmentService(
                provider=TMDbImageProvider(tmdb),
                custom_backdrops=load_json_mapping(settings.source.custom_backdrops_path),
                max_concurrency=settings.tmdb.max_concurrency,
                cache=BackdropCache(settings.tmdb.cache_ttl_seconds),
            ),
            quotes=load_json_mapping(settings.calendar.quotes_path),
        )
        response = await use_case.execute(
            BuildCalendarRequest(include_live=not args.no_live, enrich=not args.no_enrich)
        )
    except DomainException as e:
        logger.error("Calendar build failed: %s", e.message)
        return 1
    finally:
        await feed.close()
        await tmdb.close()

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_text(
        json.dumps(response.calendar.to_dict(dump_record), indent=2, ensure_ascii=False) + "\n",
        encoding="utf-8",
    )
    logger.info(
        "Wrote %s: %d films across %d years",
        args.output,
        response.merge.total,
        len(response.calendar.years),
    )
    return 0


def main(argv: list[str] | None = None) -> int:
    settings = get_settings()
    configure_logging(settings.observability.log_level, settings.observability.log_json_format)
    set_run_id()
    return asyncio.run(run(parse_args(argv)))


if __name__ == "__main__":
    sys.exit(main())
