"""
Friendship endpoints: search, requests, accept/decline, unfriend.
"""

from fastapi import APIRouter, Path, Query, status

from forkfriends.core.deps import CurrentUserIdDep, FriendServiceDep
from forkfriends.schemas.common import MessageResponse
from forkfriends.schemas.friend import (
    FriendListResponse,
    FriendRequestCreate,
    FriendRequestListResponse,
    FriendshipResponse,
    SendFriendRequestResponse,
    UserSearchResponse,
    UserSearchResult,
)

router = APIRouter(prefix="/friends", tags=["friends"])


@router.get("/search", response_model=UserSearchResponse)
async def search_users(
    user_id: CurrentUserIdDep,
    service: FriendServiceDep,
    query: str = Query("", description="Part of a username"),
):
    users = await service.search_users(user_id, query)
    return UserSearchResponse(users=[UserSearchResult.model_validate(u) for u in users])


@router.get("", response_model=FriendListResponse)
async def get_friends(user_id: CurrentUserIdDep, service: FriendServiceDep):
    return FriendListResponse(friends=await service.list_friends(user_id))


@router.get("/requests", response_model=FriendRequestListResponse)
async def get_pending_requests(user_id: CurrentUserIdDep, service: FriendServiceDep):
    return FriendRequestListResponse(requests=await service.list_pending_incoming(user_id))


@router.post("/request", response_model=SendFriendRequestResponse, status_code=status.HTTP_201_CREATED)
async def send_friend_request(
    payload: FriendRequestCreate,
    user_id: CurrentUserIdDep,
    service: FriendServiceDep,
):
    friendship = await service.send_request(user_id, payload.friend_id)
    return SendFriendRequestResponse(
        message="Friend request sent",
        friendship=FriendshipResponse.model_validate(friendship),
    )


@router.put("/accept/{request_id}", response_model=MessageResponse)
async def accept_friend_request(
    user_id: CurrentUserIdDep,
    service: FriendServiceDep,
    request_id: str = Path(..., description="The ID of the friend request"),
):
    await service.accept_request(user_id, request_id)
    return MessageResponse(message="Friend request accepted")


@router.delete("/decline/{request_id}", response_model=MessageResponse)
async def decline_friend_request(
    user_id: CurrentUserIdDep,
    service: FriendServiceDep,
    request_id: str = Path(..., description="The ID of the friend request"),
):
    await service.decline_request(user_id, request_id)
    return MessageResponse(message="Friend request declined")


@router.delete("/{friendship_id}", response_model=MessageResponse)
async def unfriend(
    user_id: CurrentUserIdDep,
    service: FriendServiceDep,
    friendship_id: str = Path(..., description="The caller's friendship row ID"),
):
    await service.unfriend(user_id, friendship_id)
    return MessageResponse(message="Friend removed successfully")
