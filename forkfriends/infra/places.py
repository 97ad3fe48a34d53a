"""
Foursquare Places search client.

Used only to pre-fill the restaurant form; results are normalized to
{name, formatted_address, categories: [{name}]}.
"""

from typing import Any, List, Optional

import httpx

from forkfriends.core.config import settings
from forkfriends.core.errors import UpstreamError, ValidationError
from forkfriends.core.logging import get_logger, timed
from forkfriends.schemas.places import PlaceCategory, PlaceResult

logger = get_logger(__name__)


class PlacesClient:
    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport
        self.enabled = not settings.use_mock_places

        if self.enabled:
            logger.info("places.client_initialized", provider=settings.places_provider)
        else:
            logger.info("places.mock_mode", reason="provider MOCK or missing API key")

    async def search(self, query: str, location: str = "") -> List[PlaceResult]:
        if not query or not query.strip():
            raise ValidationError("Query parameter is required")

        near = location.strip() if location and location.strip() else settings.places_default_location

        if not self.enabled:
            return []

        params = {
            "query": query.strip(),
            "near": near,
            "categories": settings.places_category,
        }
        headers = {
            "Authorization": f"Bearer {settings.places_api_key}",
            "Accept": "application/json",
            "X-Places-Api-Version": settings.places_api_version,
        }

        with timed("places.search", logger, near=near):
            try:
                async with httpx.AsyncClient(
                    transport=self.transport,
                    timeout=settings.places_timeout_seconds,
                ) as client:
                    response = await client.get(settings.places_api_url, params=params, headers=headers)
                    response.raise_for_status()
                    data = response.json()
                    if not isinstance(data, dict):
                        raise ValueError(f"unexpected payload type {type(data).__name__}")
            except httpx.HTTPStatusError as e:
                logger.error("places.upstream_error", status_code=e.response.status_code, body=e.response.text[:200])
                raise UpstreamError("Failed to search restaurants") from e
            except httpx.HTTPError as e:
                logger.error("places.request_failed", error=str(e))
                raise UpstreamError("Failed to search restaurants") from e
            except ValueError as e:
                logger.error("places.bad_payload", error=str(e))
                raise UpstreamError("Failed to search restaurants") from e

        results = data.get("results") or []
        if not isinstance(results, list):
            logger.error("places.bad_payload", error="results is not a list")
            raise UpstreamError("Failed to search restaurants")
        return [normalize_place(item) for item in results if isinstance(item, dict)]


def normalize_place(item: dict[str, Any]) -> PlaceResult:
    location = item.get("location") or {}
    address = item.get("formatted_address") or location.get("formatted_address") or ""
    return PlaceResult(
        name=item.get("name") or "",
        formatted_address=address,
        categories=[
            PlaceCategory(name=c.get("name") or "")
            for c in item.get("categories") or []
        ],
    )


def get_places_client() -> PlacesClient:
    return PlacesClient()
