"""
Places-search proxy used to pre-fill the restaurant form.
"""

from fastapi import APIRouter, Query

from forkfriends.core.deps import CurrentUserIdDep, PlacesClientDep
from forkfriends.schemas.places import PlaceSearchResponse

router = APIRouter(prefix="/foursquare", tags=["places"])


@router.get("/search", response_model=PlaceSearchResponse)
async def search_places(
    user_id: CurrentUserIdDep,
    client: PlacesClientDep,
    query: str = Query("", description="Free-text search, e.g. 'pizza'"),
    location: str = Query("", description="City or area to search near"),
):
    return PlaceSearchResponse(results=await client.search(query, location))
