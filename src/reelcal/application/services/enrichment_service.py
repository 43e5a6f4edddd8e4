"""Enrichment Service - attaches backdrop imagery to watch records.

Hey future me - precedence is the WHOLE point of this module:

1. customBackdrops.json (film slug -> URL) ALWAYS wins, even over a backdrop
   the record already has. Hand-picked stills beat whatever TMDb returns.
2. Otherwise, records that already show something are left alone.
3. Otherwise ask the IImageProvider (TMDb) for a backdrop.

Live feed records carry a poster from the RSS description. The poster is a
fallback, not the goal, so the calendar use case calls enrich() with
require_backdrop=True and those records are looked up whenever they have no
backdrop yet.

Lookups run concurrently but bounded by a semaphore (TMDb rate limits!) and
go through the BackdropCache so rewatches of the same film cost one lookup.
A failing lookup is logged and the record stays as it was. Enrichment never
drops a record and never changes the order.
"""

from __future__ import annotations

import asyncio
import logging
import re
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from reelcal.application.cache import MISS, BackdropCache
from reelcal.domain.entities import WatchRecord
from reelcal.domain.exceptions import ExternalServiceError
from reelcal.domain.ports import IImageProvider

logger = logging.getLogger(__name__)

FILM_SLUG_RE = re.compile(r"/film/([^/]+)/?")
DEFAULT_MAX_CONCURRENCY = 4


def film_slug(link: str | None) -> str | None:
    """Extract the film slug from a Letterboxd link.

    Works for both film pages (letterboxd.com/film/<slug>/) and member pages
    (letterboxd.com/<user>/film/<slug>/).

    Returns:
        Slug or None if the link has no /film/ segment
    """
    if not link:
        return None
    match = FILM_SLUG_RE.search(link)
    return match.group(1) if match else None


@dataclass(frozen=True)
class EnrichmentSummary:
    """Counts for one enrichment pass."""

    custom_applied: int = 0
    looked_up: int = 0
    enriched: int = 0
    failed: int = 0


@dataclass(frozen=True)
class EnrichmentResult:
    """Enriched records (same order as the input) plus summary."""

    records: list[WatchRecord]
    summary: EnrichmentSummary


class EnrichmentService:
    """Applies custom backdrops and provider lookups to records."""

    def __init__(
        self,
        provider: IImageProvider | None,
        custom_backdrops: Mapping[str, str] | None = None,
        max_concurrency: int = DEFAULT_MAX_CONCURRENCY,
        cache: BackdropCache | None = None,
    ) -> None:
        """Initialize enrichment service.

        Args:
            provider: Image provider for automatic lookups (None disables them)
            custom_backdrops: Film slug -> backdrop URL overrides
            max_concurrency: Max lookups in flight at once
            cache: Lookup cache (a fresh one per service if omitted)
        """
        self._provider = provider
        self._custom = dict(custom_backdrops or {})
        self._max_concurrency = max(1, max_concurrency)
        self._cache = cache or BackdropCache()

    def _needs_lookup(self, record: WatchRecord, require_backdrop: bool) -> bool:
        if require_backdrop:
            return not record.images.backdrop
        return not record.images.has_image

    async def _lookup(self, record: WatchRecord) -> str | None:
        """Look up a backdrop URL through the cache.

        Raises:
            ExternalServiceError: If the provider fails (caller counts it)
        """
        cached = self._cache.get_backdrop(record.title, record.year)
        if cached is not None:
            return None if cached == MISS else cached

        if self._provider is None:
            return None
        result = await self._provider.search_backdrop(record.title, record.year or None)
        url = result.url if result else None
        self._cache.set_backdrop(record.title, record.year, url)
        return url

    async def enrich(
        self,
        records: Sequence[WatchRecord],
        require_backdrop: bool = False,
    ) -> EnrichmentResult:
        """Enrich records with backdrops.

        Args:
            records: Records to enrich
            require_backdrop: Look up every record without a backdrop, even if
                it already has a poster (used for live feed records)

        Returns:
            EnrichmentResult with new record values and counts
        """
        enriched: list[WatchRecord] = list(records)
        custom_applied = 0
        pending: list[int] = []

        for index, record in enumerate(enriched):
            slug = film_slug(record.primary_link)
            if slug and slug in self._custom:
                enriched[index] = record.with_images(record.images.with_backdrop(self._custom[slug]))
                custom_applied += 1
                logger.debug("Using custom backdrop for: %s", record.title)
            elif self._needs_lookup(record, require_backdrop):
                pending.append(index)

        if not pending or self._provider is None:
            return EnrichmentResult(
                records=enriched,
                summary=EnrichmentSummary(custom_applied=custom_applied),
            )

        if not await self._provider.is_available():
            logger.warning(
                "Image provider %s unavailable, skipping %d backdrop lookups",
                self._provider.provider_name,
                len(pending),
            )
            return EnrichmentResult(
                records=enriched,
                summary=EnrichmentSummary(custom_applied=custom_applied),
            )

        semaphore = asyncio.Semaphore(self._max_concurrency)
        failed = 0

        async def run(index: int) -> tuple[int, str | None]:
            nonlocal failed
            record = enriched[index]
            async with semaphore:
                try:
                    return index, await self._lookup(record)
                except ExternalServiceError as e:
                    failed += 1
                    logger.warning("Backdrop lookup failed for %r: %s", record.title, e.message)
                    return index, None

        results = await asyncio.gather(*(run(index) for index in pending))

        enriched_count = 0
        for index, url in results:
            if url:
                record = enriched[index]
                enriched[index] = record.with_images(record.images.with_backdrop(url))
                enriched_count += 1

        summary = EnrichmentSummary(
            custom_applied=custom_applied,
            looked_up=len(pending),
            enriched=enriched_count,
            failed=failed,
        )
        logger.info(
            "Enriched %d of %d records with backdrops (%d custom, %d failed)",
            enriched_count,
            len(pending),
            custom_applied,
            failed,
        )
        return EnrichmentResult(records=enriched, summary=summary)


__all__ = [
    "DEFAULT_MAX_CONCURRENCY",
    "FILM_SLUG_RE",
    "EnrichmentResult",
    "EnrichmentService",
    "EnrichmentSummary",
    "film_slug",
]
