"""Tests for the BuildCalendar use case."""

import pytest

from reelcal.application.services import EnrichmentService
from reelcal.application.use_cases import BuildCalendarRequest, BuildCalendarUseCase
from reelcal.domain.dtos import CandidateRecord, SourceKind
from reelcal.domain.exceptions import EmptyTimelineError, SourceUnavailableError
from reelcal.domain.ports import IImageProvider, ImageResult
from reelcal.infrastructure.persistence import SnapshotStore

ARRIVAL_LINK = "https://letterboxd.com/film/arrival-2016/"


class FakeFeed:
    """Live source returning fixed candidates, or failing."""

    def __init__(self, candidates=None, fail=False):
        self.candidates = candidates or []
        self.fail = fail

    async def fetch_candidates(self):
        if self.fail:
            raise SourceUnavailableError("feed", "Letterboxd RSS unreachable")
        return list(self.candidates)

    async def close(self):
        pass


class StaticImageProvider(IImageProvider):
    """Returns the same backdrop for every title."""

    def __init__(self, url: str):
        self.url = url
        self.titles: list[str] = []

    @property
    def provider_name(self):
        return "tmdb"

    async def is_available(self):
        return True

    async def search_backdrop(self, title, year=None):
        self.titles.append(title)
        return ImageResult(url=self.url, provider="tmdb")


def feed_item(title: str, date: str, link: str, **extra) -> CandidateRecord:
    return CandidateRecord(
        source=SourceKind.LIVE_FEED,
        identity_key=extra.pop("guid", f"letterboxd-watch-{title.lower()}"),
        title=title,
        year=extra.pop("year", "2016"),
        date=date,
        link=link,
        **extra,
    )


@pytest.fixture
def store(tmp_path, make_record) -> SnapshotStore:
    store = SnapshotStore(tmp_path / "moviesHistorical.json")
    store.save(
        [
            make_record(primary_link=ARRIVAL_LINK, rating=3.0, identity_key=ARRIVAL_LINK),
            make_record(
                title="Heat",
                day="2023-01-10",
                year="1995",
                primary_link="https://letterboxd.com/film/heat/",
                identity_key="https://letterboxd.com/film/heat/",
            ),
        ]
    )
    return store


class TestBuildCalendarUseCase:
    """Test snapshot + feed -> calendar."""

    async def test_live_overrides_historical(self, store, normalizer):
        """Test that a feed item with the same link replaces the snapshot record."""
        feed = FakeFeed([feed_item("Arrival", "2024-03-02", ARRIVAL_LINK, rating=5.0)])
        use_case = BuildCalendarUseCase(store, feed, normalizer)

        response = await use_case.execute(BuildCalendarRequest(enrich=False))

        assert [record.title for record in response.records] == ["Arrival", "Heat"]
        assert response.records[0].rating == 5.0
        assert response.merge.live_overrides == 1
        assert response.calendar.years == [2024, 2023]
        assert [r.title for r in response.calendar.records_by_date["2024-03-02"]] == ["Arrival"]

    async def test_feed_unavailable_uses_snapshot(self, store, normalizer):
        """Test graceful degradation when the feed is down."""
        use_case = BuildCalendarUseCase(store, FakeFeed(fail=True), normalizer)

        response = await use_case.execute(BuildCalendarRequest(enrich=False))

        assert response.unavailable_sources == ["feed"]
        assert len(response.records) == 2

    async def test_missing_snapshot_uses_feed(self, tmp_path, normalizer):
        """Test graceful degradation without a snapshot."""
        feed = FakeFeed([feed_item("Dune", "2024-05-01", "https://letterboxd.com/film/dune/")])
        use_case = BuildCalendarUseCase(SnapshotStore(tmp_path / "none.json"), feed, normalizer)

        response = await use_case.execute(BuildCalendarRequest(enrich=False))

        assert response.unavailable_sources == ["snapshot"]
        assert [record.title for record in response.records] == ["Dune"]

    async def test_invalid_feed_items_are_counted(self, store, normalizer):
        """Test that feed items without a date are skipped."""
        feed = FakeFeed([feed_item("Dune", None, "https://letterboxd.com/film/dune/")])
        response = await BuildCalendarUseCase(store, feed, normalizer).execute(
            BuildCalendarRequest(enrich=False)
        )
        assert response.live_skipped == 1
        assert len(response.records) == 2

    async def test_include_live_false_skips_feed(self, store, normalizer):
        feed = FakeFeed(fail=True)
        response = await BuildCalendarUseCase(store, feed, normalizer).execute(
            BuildCalendarRequest(include_live=False, enrich=False)
        )
        assert response.unavailable_sources == []

    async def test_enrichment_gives_live_records_a_backdrop(self, store, normalizer):
        """Test that feed records with a poster still get a backdrop."""
        provider = StaticImageProvider("https://tmdb/backdrop.jpg")
        feed = FakeFeed(
            [
                feed_item(
                    "Dune",
                    "2024-05-01",
                    "https://letterboxd.com/bayf/film/dune/",
                    poster="https://poster/dune.jpg",
                )
            ]
        )
        use_case = BuildCalendarUseCase(store, feed, normalizer, enrichment=EnrichmentService(provider))

        response = await use_case.execute(BuildCalendarRequest())

        dune = response.records[0]
        assert dune.images.poster == "https://poster/dune.jpg"
        assert dune.images.image == "https://tmdb/backdrop.jpg"
        assert response.live_enrichment.enriched == 1
        assert response.historical_enrichment.looked_up == 2

    async def test_both_sources_empty_raises(self, tmp_path, normalizer):
        """Test the only hard failure."""
        use_case = BuildCalendarUseCase(SnapshotStore(tmp_path / "none.json"), FakeFeed(), normalizer)
        with pytest.raises(EmptyTimelineError):
            await use_case.execute(BuildCalendarRequest())

    async def test_quotes_reach_the_calendar(self, store, normalizer):
        """Test that custom quotes are attached to their day cell."""
        use_case = BuildCalendarUseCase(
            store, None, normalizer, quotes={"2024-03-02": "Language is a weapon."}
        )

        response = await use_case.execute(BuildCalendarRequest())

        assert response.calendar.quotes_by_date == {"2024-03-02": "Language is a weapon."}
        march = response.calendar.calendars_by_year[2024].months[2]
        cell = next(c for c in march.cells if c.date == "2024-03-02")
        assert cell.quote == "Language is a weapon."
