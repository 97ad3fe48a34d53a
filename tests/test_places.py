"""Tests for the places search client."""

import httpx
import pytest

from forkfriends.core.config import settings
from forkfriends.core.errors import UpstreamError, ValidationError
from forkfriends.infra.places import PlacesClient, normalize_place


SAMPLE = {
    "results": [
        {
            "name": "Joe's Pizza",
            "location": {"formatted_address": "7 Carmine St, New York"},
            "categories": [{"name": "Pizzeria"}],
        },
        {"name": "Nameless Diner"},
    ]
}


@pytest.fixture
def live_provider(monkeypatch):
    monkeypatch.setattr(settings, "places_provider", "FOURSQUARE")
    monkeypatch.setattr(settings, "places_api_key", "fsq-test-key")


class TestPlacesClient:
    async def test_mock_mode_returns_empty(self):
        client = PlacesClient()
        assert client.enabled is False
        assert await client.search("pizza") == []

    async def test_blank_query_is_rejected(self):
        with pytest.raises(ValidationError, match="Query parameter is required"):
            await PlacesClient().search("  ")

    async def test_search_sends_expected_request(self, live_provider):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["params"] = dict(request.url.params)
            seen["auth"] = request.headers.get("Authorization")
            seen["version"] = request.headers.get("X-Places-Api-Version")
            return httpx.Response(200, json=SAMPLE)

        client = PlacesClient(transport=httpx.MockTransport(handler))
        results = await client.search("pizza", "")

        assert seen["params"] == {"query": "pizza", "near": "United States", "categories": "13000"}
        assert seen["auth"] == "Bearer fsq-test-key"
        assert seen["version"] == settings.places_api_version
        assert [r.name for r in results] == ["Joe's Pizza", "Nameless Diner"]
        assert results[0].formatted_address == "7 Carmine St, New York"
        assert results[0].categories[0].name == "Pizzeria"
        assert results[1].categories == []

    async def test_location_is_forwarded(self, live_provider):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["near"] = request.url.params.get("near")
            return httpx.Response(200, json={"results": []})

        await PlacesClient(transport=httpx.MockTransport(handler)).search("tacos", " Austin ")
        assert seen["near"] == "Austin"

    async def test_upstream_failure(self, live_provider):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(500, text="boom")

        client = PlacesClient(transport=httpx.MockTransport(handler))
        with pytest.raises(UpstreamError, match="Failed to search restaurants"):
            await client.search("pizza")


    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(200, text="<html>maintenance</html>"),
            httpx.Response(200, json=[{"name": "Joe's Pizza"}]),
            httpx.Response(200, json={"results": "none"}),
        ],
    )
    async def test_malformed_payload_is_upstream_error(self, live_provider, response):
        client = PlacesClient(transport=httpx.MockTransport(lambda request: response))
        with pytest.raises(UpstreamError):
            await client.search("pizza")


def test_normalize_prefers_top_level_address():
    place = normalize_place({"name": "A", "formatted_address": "Top", "location": {"formatted_address": "Nested"}})
    assert place.formatted_address == "Top"
