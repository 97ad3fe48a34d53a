"""
Dependency Injection

FastAPI dependencies for routes.
"""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from forkfriends.core.token import CurrentUserDep, CurrentUserIdDep, get_current_user_id  # noqa: F401
from forkfriends.infra.db import get_db
from forkfriends.infra.places import PlacesClient, get_places_client
from forkfriends.services.auth import AuthService
from forkfriends.services.friends import FriendService
from forkfriends.services.groups import GroupService
from forkfriends.services.restaurants import RestaurantService

# Type aliases for common dependencies
SessionDep = Annotated[AsyncSession, Depends(get_db)]


def get_auth_service(db: SessionDep) -> AuthService:
    return AuthService(db)


def get_friend_service(db: SessionDep) -> FriendService:
    return FriendService(db)


def get_group_service(db: SessionDep) -> GroupService:
    return GroupService(db)


def get_restaurant_service(db: SessionDep) -> RestaurantService:
    return RestaurantService(db)


AuthServiceDep = Annotated[AuthService, Depends(get_auth_service)]
FriendServiceDep = Annotated[FriendService, Depends(get_friend_service)]
GroupServiceDep = Annotated[GroupService, Depends(get_group_service)]
RestaurantServiceDep = Annotated[RestaurantService, Depends(get_restaurant_service)]
PlacesClientDep = Annotated[PlacesClient, Depends(get_places_client)]
