"""Tests for the Letterboxd RSS feed client."""

from datetime import UTC, datetime

import httpx
import pytest
from pytest_httpx import HTTPXMock

from reelcal.application.sources import LiveCandidateSource
from reelcal.domain.dtos import SourceKind
from reelcal.domain.exceptions import SourceUnavailableError
from reelcal.infrastructure.integrations.letterboxd_feed_client import (
    LetterboxdFeedClient,
    parse_feed,
)

FEED_XML = """<?xml version="1.0" encoding="utf-8"?>
<rss version="2.0" xmlns:letterboxd="https://letterboxd.com" xmlns:dc="http://purl.org/dc/elements/1.1/">
  <channel>
    <title>Letterboxd - bayf</title>
    <item>
      <title>Arrival, 2016 - ★★★★½</title>
      <link>https://letterboxd.com/bayf/film/arrival-2016/</link>
      <guid isPermaLink="false">letterboxd-review-123456</guid>
      <pubDate>Sun, 3 Mar 2024 04:12:00 +1300</pubDate>
      <letterboxd:watchedDate>2024-03-02</letterboxd:watchedDate>
      <letterboxd:rewatch>Yes</letterboxd:rewatch>
      <letterboxd:filmTitle>Arrival</letterboxd:filmTitle>
      <letterboxd:filmYear>2016</letterboxd:filmYear>
      <letterboxd:memberRating>4.5</letterboxd:memberRating>
      <description><![CDATA[ <p><img src="https://a.ltrbxd.com/arrival.jpg"/></p> <p>Heptapods.</p> ]]></description>
    </item>
    <item>
      <title>Rudolph, 1964 (contains spoilers) - ★★★</title>
      <link>https://letterboxd.com/bayf/film/rudolph/</link>
      <pubDate>Tue, 24 Dec 2024 20:00:00 -0600</pubDate>
      <description><![CDATA[ <p>Watched on Tuesday.</p> ]]></description>
    </item>
    <item>
      <title>Favourites</title>
      <link>https://letterboxd.com/bayf/list/favourites/</link>
      <guid isPermaLink="false">letterboxd-list-1</guid>
    </item>
  </channel>
</rss>
"""


class TestParseFeed:
    """Test RSS parsing."""

    def test_namespaced_item(self):
        """Test an item with every letterboxd: field."""
        arrival = parse_feed(FEED_XML)[0]

        assert arrival.source is SourceKind.LIVE_FEED
        assert arrival.identity_key == "letterboxd-review-123456"
        assert arrival.title == "Arrival"
        assert arrival.year == "2016"
        assert arrival.rating == 4.5
        assert arrival.date == "2024-03-02"
        assert arrival.rewatch is True
        assert arrival.poster == "https://a.ltrbxd.com/arrival.jpg"
        assert arrival.description == "Heptapods."
        assert arrival.link == "https://letterboxd.com/bayf/film/arrival-2016/"

    def test_title_fallback_and_pub_date(self):
        """Test title/year from the item title and the pubDate fallback."""
        rudolph = parse_feed(FEED_XML)[1]

        assert rudolph.title == "Rudolph"
        assert rudolph.year == "1964"
        assert rudolph.rating == 3.0
        assert rudolph.identity_key == "https://letterboxd.com/bayf/film/rudolph/"
        assert rudolph.date == datetime(2024, 12, 25, 2, 0, tzinfo=UTC)
        assert rudolph.rewatch is False
        assert rudolph.poster == ""

    def test_non_film_items_filtered(self):
        assert len(parse_feed(FEED_XML)) == 2

    def test_malformed_xml(self):
        """Test that broken XML is a source failure."""
        with pytest.raises(SourceUnavailableError):
            parse_feed("<rss><channel><item>")

    def test_converts_to_watch_record(self, normalizer):
        """Test that a parsed item survives validation on its civil day."""
        record = parse_feed(FEED_XML)[0].to_watch_record(normalizer)
        assert normalizer.civil_date(record.watched_at).iso == "2024-03-02"
        assert record.images.image == "https://a.ltrbxd.com/arrival.jpg"


class TestLetterboxdFeedClient:
    """Test feed fetching."""

    async def test_fetch_candidates(self, httpx_mock: HTTPXMock):
        """Test a successful fetch."""
        httpx_mock.add_response(url="https://letterboxd.com/bayf/rss/", text=FEED_XML)
        client = LetterboxdFeedClient("bayf")
        try:
            candidates = await client.fetch_candidates()
        finally:
            await client.close()

        assert [c.title for c in candidates] == ["Arrival", "Rudolph"]

    async def test_http_error_is_unavailable(self, httpx_mock: HTTPXMock):
        """Test that a 404 becomes SourceUnavailableError."""
        httpx_mock.add_response(url="https://letterboxd.com/bayf/rss/", status_code=404)
        client = LetterboxdFeedClient("bayf")
        try:
            with pytest.raises(SourceUnavailableError):
                await client.fetch_feed()
        finally:
            await client.close()

    async def test_network_error_is_unavailable(self, httpx_mock: HTTPXMock):
        httpx_mock.add_exception(httpx.ConnectTimeout("timed out"))
        client = LetterboxdFeedClient("bayf")
        try:
            with pytest.raises(SourceUnavailableError):
                await client.fetch_candidates()
        finally:
            await client.close()

    def test_satisfies_live_source(self):
        """Test that the client plugs into the calendar use case."""
        client = LetterboxdFeedClient("bayf")
        assert isinstance(client, LiveCandidateSource)
        assert client.feed_url == "https://letterboxd.com/bayf/rss/"
