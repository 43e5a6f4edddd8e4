"""Tests for the TMDb image provider."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from reelcal.config.settings import TMDbSettings
from reelcal.domain.exceptions import ExternalServiceError
from reelcal.infrastructure.providers.tmdb_image_provider import TMDbImageProvider, match_score


def result(title: str, backdrop: str | None = "/b.jpg", **extra) -> dict:
    return {"id": extra.pop("id", 1), "title": title, "backdrop_path": backdrop, **extra}


@pytest.fixture
def mock_client() -> MagicMock:
    client = MagicMock()
    client.settings = TMDbSettings(api_key="test-key")
    client.search_movies = AsyncMock(return_value=[])
    client.image_url = MagicMock(side_effect=lambda path: f"https://image.tmdb.org/t/p/w1280{path}")
    return client


class TestMatchScore:
    """Test title similarity."""

    def test_exact_match(self):
        assert match_score("Arrival", result("Arrival")) == 100

    def test_original_title_counts(self):
        """Test that the better of title and original_title wins."""
        score = match_score("Les Misérables", result("The Wretched", original_title="Les Misérables"))
        assert score == 100

    def test_case_and_spacing_ignored(self):
        assert match_score("  the   THING ", result("The Thing")) == 100


class TestTMDbImageProvider:
    """Test backdrop search."""

    async def test_best_match_with_backdrop(self, mock_client):
        """Test that results without backdrop are ignored."""
        mock_client.search_movies.return_value = [
            result("Arrival", backdrop=None, id=1),
            result("Arrival", backdrop="/arrival.jpg", id=2),
        ]
        provider = TMDbImageProvider(mock_client)

        image = await provider.search_backdrop("Arrival", "2016")

        assert image is not None
        assert image.url == "https://image.tmdb.org/t/p/w1280/arrival.jpg"
        assert image.source_id == "2"
        mock_client.search_movies.assert_awaited_once_with("Arrival", "2016")

    async def test_falls_back_to_search_without_year(self, mock_client):
        """Test the second search when the year filter finds nothing."""
        mock_client.search_movies.side_effect = [[], [result("Arrival", backdrop="/a.jpg")]]
        provider = TMDbImageProvider(mock_client)

        image = await provider.search_backdrop("Arrival", "2017")

        assert image is not None
        assert [call.args for call in mock_client.search_movies.await_args_list] == [
            ("Arrival", "2017"),
            ("Arrival", None),
        ]

    async def test_poor_match_rejected(self, mock_client):
        """Test that popular but unrelated results don't become backdrops."""
        mock_client.search_movies.return_value = [result("Zzyzx Road Chainsaw Massacre")]
        provider = TMDbImageProvider(mock_client)

        assert await provider.search_backdrop("Arrival") is None

    async def test_tie_goes_to_first_result(self, mock_client):
        mock_client.search_movies.return_value = [
            result("Dune", backdrop="/first.jpg", id=1),
            result("Dune", backdrop="/second.jpg", id=2),
        ]
        image = await TMDbImageProvider(mock_client).search_backdrop("Dune")
        assert image is not None
        assert image.source_id == "1"

    async def test_request_errors_propagate(self, mock_client):
        """Test that a failed request is not reported as "no backdrop"."""
        mock_client.search_movies.side_effect = ExternalServiceError("TMDb returned 500")

        with pytest.raises(ExternalServiceError):
            await TMDbImageProvider(mock_client).search_backdrop("Arrival", "2016")

        mock_client.search_movies.assert_awaited_once_with("Arrival", "2016")

    async def test_availability_follows_api_key(self, mock_client):
        provider = TMDbImageProvider(mock_client)
        assert await provider.is_available() is True
        mock_client.settings = TMDbSettings(api_key="  ")
        assert await provider.is_available() is False
        assert provider.provider_name == "tmdb"
