"""Letterboxd RSS feed client.

Hey future me - the RSS feed is the LIVE source: the member's last ~50
diary entries, fresher than any export. It's fetched on every calendar
build, so it has to fail soft. Anything that goes wrong (network, non-200,
broken XML) becomes SourceUnavailableError and the calendar is built from
the snapshot alone.

Feed items look like:

    <item>
      <title>Arrival, 2016 - ★★★★½</title>
      <link>https://letterboxd.com/bayf/film/arrival-2016/</link>
      <guid isPermaLink="false">letterboxd-review-123456</guid>
      <pubDate>Sun, 3 Mar 2024 04:12:00 +1300</pubDate>
      <letterboxd:watchedDate>2024-03-02</letterboxd:watchedDate>
      <letterboxd:rewatch>No</letterboxd:rewatch>
      <letterboxd:filmTitle>Arrival</letterboxd:filmTitle>
      <letterboxd:filmYear>2016</letterboxd:filmYear>
      <letterboxd:memberRating>4.5</letterboxd:memberRating>
      <description><![CDATA[ <p><img src="https://a.ltrbxd.com/...jpg"/></p> <p>Watched on ...</p> ]]></description>
    </item>

Lists and other non-film items are filtered out (link without /film/).
"""

import logging
import re
import xml.etree.ElementTree as ET
from datetime import datetime
from email.utils import parsedate_to_datetime

import httpx

from reelcal.domain.dtos import CandidateRecord, SourceKind
from reelcal.domain.exceptions import SourceUnavailableError

logger = logging.getLogger(__name__)

DESCRIPTION_MAX_LENGTH = 200

# "Microhabitat, 2017 - ★★★★" / "Dahomey, 2024" / "Rudolph, 1964 (contains spoilers)"
TITLE_YEAR_RE = re.compile(r"^(.*?),\s*(\d{4})(?:\s*\([^)]*\))?(?:\s*-\s*.*)?$")
IMG_SRC_RE = re.compile(r'<img[^>]+src="([^">]+)"')
TAG_RE = re.compile(r"<[^>]*>")


def _local_name(tag: str) -> str:
    """Strip the XML namespace: "{ns}watchedDate" -> "watchedDate"."""
    return tag.rsplit("}", 1)[-1]


def _find_text(item: ET.Element, name: str) -> str:
    """Text of the first child with the given local name ("" if absent)."""
    for child in item:
        if _local_name(child.tag) == name:
            return (child.text or "").strip()
    return ""


def _parse_rating(member_rating: str, text: str) -> float:
    """memberRating if present, else the number of ★ in the item text."""
    if member_rating:
        try:
            return float(member_rating)
        except ValueError:
            pass
    return float(text.count("★"))


def _parse_item(item: ET.Element) -> CandidateRecord | None:
    link = _find_text(item, "link")
    if "/film/" not in link:
        return None

    raw_title = _find_text(item, "title")
    title = _find_text(item, "filmTitle")
    year = _find_text(item, "filmYear")
    if not title:
        match = TITLE_YEAR_RE.match(raw_title)
        title, year = (match.group(1).strip(), match.group(2)) if match else (raw_title, year)

    description = _find_text(item, "description")
    img = IMG_SRC_RE.search(description)

    # watchedDate is the day you watched; pubDate is when you logged it (other timezone)
    watched: str | datetime | None = _find_text(item, "watchedDate") or None
    if watched is None:
        pub_date = _find_text(item, "pubDate")
        try:
            watched = parsedate_to_datetime(pub_date) if pub_date else None
        except (TypeError, ValueError):
            logger.debug("Unparsable pubDate %r for %s", pub_date, link)
            watched = None

    return CandidateRecord(
        source=SourceKind.LIVE_FEED,
        identity_key=_find_text(item, "guid") or link,
        title=title,
        year=year,
        rating=_parse_rating(_find_text(item, "memberRating"), raw_title + description),
        link=link,
        review_link=link,
        date=watched,
        poster=img.group(1) if img else "",
        description=TAG_RE.sub("", description).strip()[:DESCRIPTION_MAX_LENGTH],
        rewatch=_find_text(item, "rewatch") == "Yes",
    )


def parse_feed(xml_text: str) -> list[CandidateRecord]:
    """Parse RSS XML into live candidates (film items only, feed order).

    Raises:
        SourceUnavailableError: If the XML cannot be parsed
    """
    try:
        root = ET.fromstring(xml_text)
    except ET.ParseError as e:
        raise SourceUnavailableError(SourceKind.LIVE_FEED.value, f"Malformed RSS feed: {e}") from e

    candidates: list[CandidateRecord] = []
    for element in root.iter():
        if _local_name(element.tag) != "item":
            continue
        candidate = _parse_item(element)
        if candidate is not None:
            candidates.append(candidate)
    return candidates


class LetterboxdFeedClient:
    """HTTP client for a member's Letterboxd RSS feed."""

    def __init__(self, username: str, timeout: float = 30.0) -> None:
        """
        Initialize feed client.

        Args:
            username: Letterboxd username
            timeout: Request timeout in seconds
        """
        self.username = username
        self.timeout = timeout
        self._client: httpx.AsyncClient | None = None

    @property
    def feed_url(self) -> str:
        return f"https://letterboxd.com/{self.username}/rss/"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                headers={"User-Agent": "reelcal (+https://letterboxd.com)"},
                timeout=self.timeout,
                follow_redirects=True,
            )
        return self._client

    async def close(self) -> None:
        """Close HTTP client."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def fetch_feed(self) -> str:
        """Download the raw RSS XML.

        Raises:
            SourceUnavailableError: On transport errors or a non-2xx status
        """
        client = await self._get_client()
        try:
            response = await client.get(self.feed_url)
            response.raise_for_status()
        except httpx.HTTPError as e:
            raise SourceUnavailableError(
                SourceKind.LIVE_FEED.value, f"Letterboxd feed unavailable: {e}"
            ) from e
        return response.text

    async def fetch_candidates(self) -> list[CandidateRecord]:
        """Fetch and parse the feed.

        Raises:
            SourceUnavailableError: If the feed can't be fetched or parsed
        """
        candidates = parse_feed(await self.fetch_feed())
        logger.info("Fetched %d films from RSS feed", len(candidates))
        return candidates
