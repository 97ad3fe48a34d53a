"""
Pydantic schemas for restaurant records.

Field values (non-empty text, rating bounds) are checked by the restaurant
service so that callers get the domain ValidationError instead of a 422.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict


class RestaurantCreate(BaseModel):
    name: Optional[str] = None
    cuisine: Optional[str] = None
    location: Optional[str] = None
    rating: float = 0
    is_wishlist: bool = False
    is_hidden: bool = False


class RestaurantUpdate(BaseModel):
    """Partial update; only provided fields are written"""
    name: Optional[str] = None
    cuisine: Optional[str] = None
    location: Optional[str] = None
    rating: Optional[float] = None
    is_wishlist: Optional[bool] = None
    is_hidden: Optional[bool] = None


class RestaurantResponse(BaseModel):
    id: str
    owner_id: str
    group_id: Optional[str] = None
    name: str
    cuisine: str
    location: str
    rating: float
    is_wishlist: bool
    is_hidden: bool
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RestaurantWithOwner(RestaurantResponse):
    owner_username: str


class RestaurantListResponse(BaseModel):
    restaurants: list[RestaurantResponse]


class FriendsRestaurantListResponse(BaseModel):
    restaurants: list[RestaurantWithOwner]


class RestaurantEnvelope(BaseModel):
    message: Optional[str] = None
    restaurant: RestaurantResponse
