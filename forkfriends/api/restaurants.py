"""
Personal restaurant endpoints and the friends' feed.
"""

from fastapi import APIRouter, status

from forkfriends.core.deps import CurrentUserIdDep, RestaurantServiceDep
from forkfriends.schemas.common import MessageResponse
from forkfriends.schemas.restaurant import (
    FriendsRestaurantListResponse,
    RestaurantCreate,
    RestaurantEnvelope,
    RestaurantListResponse,
    RestaurantResponse,
    RestaurantUpdate,
)

router = APIRouter(prefix="/restaurants", tags=["restaurants"])


@router.get("", response_model=RestaurantListResponse)
async def get_restaurants(user_id: CurrentUserIdDep, service: RestaurantServiceDep):
    restaurants = await service.list_my_restaurants(user_id)
    return RestaurantListResponse(
        restaurants=[RestaurantResponse.model_validate(r) for r in restaurants]
    )


# Declared before /{restaurant_id} so "friends" is not read as an id
@router.get("/friends", response_model=FriendsRestaurantListResponse)
async def get_friends_restaurants(user_id: CurrentUserIdDep, service: RestaurantServiceDep):
    return FriendsRestaurantListResponse(restaurants=await service.get_friends_restaurants(user_id))


@router.get("/{restaurant_id}", response_model=RestaurantEnvelope)
async def get_restaurant(restaurant_id: str, user_id: CurrentUserIdDep, service: RestaurantServiceDep):
    restaurant = await service.get_restaurant(user_id, restaurant_id)
    return RestaurantEnvelope(restaurant=RestaurantResponse.model_validate(restaurant))


@router.post("", response_model=RestaurantEnvelope, status_code=status.HTTP_201_CREATED)
async def create_restaurant(
    data: RestaurantCreate,
    user_id: CurrentUserIdDep,
    service: RestaurantServiceDep,
):
    restaurant = await service.create_restaurant(user_id, data)
    return RestaurantEnvelope(
        message="Restaurant created successfully",
        restaurant=RestaurantResponse.model_validate(restaurant),
    )


@router.put("/{restaurant_id}", response_model=RestaurantEnvelope)
async def update_restaurant(
    restaurant_id: str,
    data: RestaurantUpdate,
    user_id: CurrentUserIdDep,
    service: RestaurantServiceDep,
):
    """
    Update a restaurant. Only provided fields will be updated.
    """
    restaurant = await service.update_restaurant(user_id, restaurant_id, data)
    return RestaurantEnvelope(
        message="Restaurant updated successfully",
        restaurant=RestaurantResponse.model_validate(restaurant),
    )


@router.delete("/{restaurant_id}", response_model=MessageResponse)
async def delete_restaurant(restaurant_id: str, user_id: CurrentUserIdDep, service: RestaurantServiceDep):
    await service.delete_restaurant(user_id, restaurant_id)
    return MessageResponse(message="Restaurant deleted successfully")
