"""Tests for the JSON snapshot store."""

import json
import logging

import pytest

from reelcal.domain.exceptions import SourceUnavailableError
from reelcal.domain.value_objects import ImagePaths
from reelcal.infrastructure.persistence import SnapshotStore, WatchRecordRow, load_json_mapping


@pytest.fixture
def snapshot_path(tmp_path):
    return tmp_path / "data" / "moviesHistorical.json"


class TestSnapshotStore:
    """Test snapshot save/load."""

    def test_save_then_load_keeps_civil_day(self, snapshot_path, make_record, normalizer):
        """Test that records come back on the same civil date, newest first."""
        store = SnapshotStore(snapshot_path)
        older = make_record(title="Heat", day="2023-01-10", year="1995")
        newer = make_record(
            annotation_text="Heptapods.",
            annotation_link="https://letterboxd.com/bayf/film/arrival-2016/",
            tags=("sci-fi",),
            images=ImagePaths.resolve(backdrop="https://tmdb/arrival.jpg"),
        )

        assert store.save([older, newer]) == 2
        result = store.load(normalizer)

        assert result.skipped == 0
        assert [r.title for r in result.records] == ["Arrival", "Heat"]
        arrival = result.records[0]
        assert normalizer.civil_date(arrival.watched_at).iso == "2024-03-02"
        assert arrival.annotation_text == "Heptapods."
        assert arrival.tags == ("sci-fi",)
        assert arrival.images.image == "https://tmdb/arrival.jpg"

    def test_saved_json_uses_camel_case(self, snapshot_path, make_record):
        """Test the persisted field names."""
        SnapshotStore(snapshot_path).save([make_record(annotation_text="Great")])

        row = json.loads(snapshot_path.read_text(encoding="utf-8"))[0]

        assert row["reviewText"] == "Great"
        assert "reviewLink" in row
        assert row["date"].endswith("+00:00")
        assert not snapshot_path.with_suffix(".json.tmp").exists()

    def test_invalid_rows_are_skipped(self, snapshot_path, normalizer):
        """Test that bad rows are counted, not fatal."""
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text(
            json.dumps(
                [
                    {"uri": "a", "title": "Arrival", "year": 2016, "date": "2024-03-02T18:00:00+00:00"},
                    {"uri": "b", "title": "", "date": "2024-03-02"},
                    {"uri": "c", "title": "Dune", "date": "not a date"},
                    {"uri": "d", "title": "Heat", "date": "2023-01-10", "tags": "not-a-list"},
                    "garbage",
                ]
            ),
            encoding="utf-8",
        )

        result = SnapshotStore(snapshot_path).load(normalizer)

        assert [r.title for r in result.records] == ["Arrival"]
        assert result.records[0].year == "2016"
        assert result.skipped == 4

    def test_identity_falls_back_to_link(self, snapshot_path, normalizer):
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text(
            json.dumps([{"title": "Heat", "link": "https://letterboxd.com/film/heat/", "date": "2023-01-10"}]),
            encoding="utf-8",
        )
        record = SnapshotStore(snapshot_path).load(normalizer).records[0]
        assert record.identity_key == "https://letterboxd.com/film/heat/"

    def test_missing_snapshot(self, snapshot_path, normalizer):
        """Test that a missing file is a source failure."""
        store = SnapshotStore(snapshot_path)
        assert store.exists() is False
        with pytest.raises(SourceUnavailableError):
            store.load(normalizer)

    def test_not_an_array(self, snapshot_path, normalizer):
        snapshot_path.parent.mkdir(parents=True)
        snapshot_path.write_text('{"title": "Arrival"}', encoding="utf-8")
        with pytest.raises(SourceUnavailableError):
            SnapshotStore(snapshot_path).load(normalizer)


class TestWatchRecordRow:
    """Test the persisted schema."""

    def test_populate_by_alias_or_name(self):
        by_alias = WatchRecordRow.model_validate({"reviewText": "x", "reviewLink": "y"})
        by_name = WatchRecordRow(review_text="x", review_link="y")
        assert by_alias == by_name

    def test_nulls_become_empty_strings(self):
        row = WatchRecordRow.model_validate({"year": None, "image": None, "reviewText": None})
        assert row.year == ""
        assert row.image == ""
        assert row.review_text == ""


class TestLoadJsonMapping:
    """Test the optional side files."""

    def test_missing_file_is_empty(self, tmp_path):
        assert load_json_mapping(tmp_path / "customBackdrops.json") == {}

    def test_mapping_loaded(self, tmp_path):
        path = tmp_path / "customBackdrops.json"
        path.write_text('{"arrival-2016": "https://custom.jpg", "blank": ""}', encoding="utf-8")
        assert load_json_mapping(path) == {"arrival-2016": "https://custom.jpg"}

    @pytest.mark.parametrize("content", ["{not json", "[1, 2]"])
    def test_broken_file_is_empty_with_warning(self, tmp_path, caplog, content):
        """Test that a malformed side file never stops the build."""
        path = tmp_path / "customQuotes.json"
        path.write_text(content, encoding="utf-8")

        with caplog.at_level(logging.WARNING):
            assert load_json_mapping(path) == {}

        assert "customQuotes.json" in caplog.text
