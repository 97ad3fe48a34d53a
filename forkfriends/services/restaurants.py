"""
Ownership-scoped restaurant access.

Personal restaurants (group_id NULL) belong to their owner; friends see
them unless hidden. Group restaurants follow group membership rules only.
"""

import math
from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forkfriends.core.errors import ValidationError
from forkfriends.core.logging import get_logger
from forkfriends.infra.db import atomic
from forkfriends.models.restaurant import MAX_RATING, MIN_RATING, Restaurant
from forkfriends.models.user import User
from forkfriends.schemas.restaurant import (
    RestaurantCreate,
    RestaurantUpdate,
    RestaurantWithOwner,
)
from forkfriends.services import policy
from forkfriends.services.friends import FriendService

logger = get_logger(__name__)

_TEXT_FIELDS = ("name", "cuisine", "location")


def validate_rating(rating: Optional[float]) -> float:
    if rating is None or not math.isfinite(rating) or not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")
    return rating


def _require_text(field: str, value: Optional[str]) -> str:
    if value is None or not value.strip():
        raise ValidationError(f"{field} cannot be empty")
    return value.strip()


def build_restaurant(owner_id: str, data: RestaurantCreate, group_id: Optional[str] = None) -> Restaurant:
    """Validate creation input and build an unsaved Restaurant"""
    if not data.name or not data.cuisine or not data.location:
        raise ValidationError("Please provide name, cuisine, and location")
    validate_rating(data.rating)

    return Restaurant(
        id=uuid4().hex,
        owner_id=owner_id,
        group_id=group_id,
        name=_require_text("name", data.name),
        cuisine=_require_text("cuisine", data.cuisine),
        location=_require_text("location", data.location),
        rating=data.rating,
        is_wishlist=data.is_wishlist,
        # group lists are shared by definition
        is_hidden=False if group_id else data.is_hidden,
        created_at=datetime.utcnow(),
    )


def with_owner(restaurant: Restaurant, owner_username: str) -> RestaurantWithOwner:
    return RestaurantWithOwner(
        id=restaurant.id,
        owner_id=restaurant.owner_id,
        group_id=restaurant.group_id,
        name=restaurant.name,
        cuisine=restaurant.cuisine,
        location=restaurant.location,
        rating=restaurant.rating,
        is_wishlist=restaurant.is_wishlist,
        is_hidden=restaurant.is_hidden,
        created_at=restaurant.created_at,
        owner_username=owner_username,
    )


class RestaurantService:
    """Personal restaurant list, friends' feed and per-record access checks"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_my_restaurants(self, current_user_id: str) -> List[Restaurant]:
        stmt = (
            select(Restaurant)
            .where(Restaurant.owner_id == current_user_id, Restaurant.group_id.is_(None))
            .order_by(Restaurant.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def get_restaurant(self, current_user_id: str, restaurant_id: str) -> Restaurant:
        restaurant = await policy.get_restaurant_or_404(self.db, restaurant_id)
        await policy.require_restaurant_access(self.db, restaurant, current_user_id)
        return restaurant

    async def create_restaurant(
        self, owner_id: str, data: RestaurantCreate, group_id: Optional[str] = None
    ) -> Restaurant:
        if group_id is not None:
            await policy.get_group_or_404(self.db, group_id)
            await policy.require_editor(self.db, group_id, owner_id, "add restaurants")

        restaurant = build_restaurant(owner_id, data, group_id=group_id)
        async with atomic(self.db):
            self.db.add(restaurant)

        logger.info("restaurant.created", restaurant_id=restaurant.id, user_id=owner_id, group_id=group_id)
        return restaurant

    async def update_restaurant(
        self, current_user_id: str, restaurant_id: str, data: RestaurantUpdate
    ) -> Restaurant:
        restaurant = await policy.get_restaurant_or_404(self.db, restaurant_id)
        await policy.require_restaurant_mutation(self.db, restaurant, current_user_id, "update")

        # Update only provided fields
        update_data = data.model_dump(exclude_unset=True)
        if not update_data:
            raise ValidationError("No fields to update")

        # Validate everything before touching the row
        for field in _TEXT_FIELDS:
            if field in update_data:
                update_data[field] = _require_text(field, update_data[field])
        if "rating" in update_data:
            validate_rating(update_data["rating"])
        for flag in ("is_wishlist", "is_hidden"):
            if flag in update_data and update_data[flag] is None:
                raise ValidationError(f"{flag} cannot be null")
        if restaurant.group_id is not None:
            update_data.pop("is_hidden", None)

        async with atomic(self.db):
            for field, value in update_data.items():
                setattr(restaurant, field, value)

        logger.info("restaurant.updated", restaurant_id=restaurant_id, fields=sorted(update_data))
        return restaurant

    async def delete_restaurant(self, current_user_id: str, restaurant_id: str) -> None:
        restaurant = await policy.get_restaurant_or_404(self.db, restaurant_id)
        await policy.require_restaurant_mutation(self.db, restaurant, current_user_id, "delete")

        async with atomic(self.db):
            await self.db.delete(restaurant)
        logger.info("restaurant.deleted", restaurant_id=restaurant_id, user_id=current_user_id)

    async def get_friends_restaurants(self, current_user_id: str) -> List[RestaurantWithOwner]:
        """Visible personal restaurants of every accepted friend, newest first"""
        friend_ids = await FriendService(self.db).friend_ids(current_user_id)
        if not friend_ids:
            return []

        stmt = (
            select(Restaurant, User.username)
            .join(User, Restaurant.owner_id == User.id)
            .where(
                Restaurant.owner_id.in_(friend_ids),
                Restaurant.is_hidden.is_(False),
                Restaurant.group_id.is_(None),
            )
            .order_by(Restaurant.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [with_owner(restaurant, username) for restaurant, username in result.all()]
