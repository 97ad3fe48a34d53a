"""
Group endpoints: lifecycle, invites, roster administration and the shared
restaurant list.
"""

from fastapi import APIRouter, status

from forkfriends.core.deps import CurrentUserIdDep, GroupServiceDep
from forkfriends.schemas.common import MessageResponse
from forkfriends.schemas.group import (
    GroupCreate,
    GroupDetailResponse,
    GroupEnvelope,
    GroupListResponse,
    GroupRatingUpdate,
    GroupResponse,
    GroupUpdate,
    GroupMemberResponse,
    InviteListResponse,
    MemberEnvelope,
    MemberInvite,
    MemberPermissionUpdate,
)
from forkfriends.schemas.restaurant import RestaurantCreate, RestaurantEnvelope, RestaurantResponse

router = APIRouter(prefix="/groups", tags=["groups"])


# ============ Groups ============

@router.post("", response_model=GroupEnvelope, status_code=status.HTTP_201_CREATED)
async def create_group(data: GroupCreate, user_id: CurrentUserIdDep, service: GroupServiceDep):
    """
    Create a group. The creator joins as an accepted member with edit rights.
    """
    group = await service.create_group(user_id, data.name)
    return GroupEnvelope(message="Group created successfully", group=GroupResponse.model_validate(group))


@router.get("", response_model=GroupListResponse)
async def get_groups(user_id: CurrentUserIdDep, service: GroupServiceDep):
    return GroupListResponse(groups=await service.list_groups(user_id))


# Declared before /{group_id}
@router.get("/invites", response_model=InviteListResponse)
async def get_invites(user_id: CurrentUserIdDep, service: GroupServiceDep):
    return InviteListResponse(invites=await service.list_invites(user_id))


@router.get("/{group_id}", response_model=GroupDetailResponse)
async def get_group(group_id: str, user_id: CurrentUserIdDep, service: GroupServiceDep):
    return await service.get_group_detail(user_id, group_id)


@router.put("/{group_id}", response_model=GroupEnvelope)
async def update_group(group_id: str, data: GroupUpdate, user_id: CurrentUserIdDep, service: GroupServiceDep):
    group = await service.rename_group(user_id, group_id, data.name)
    return GroupEnvelope(message="Group updated successfully", group=GroupResponse.model_validate(group))


@router.delete("/{group_id}", response_model=MessageResponse)
async def delete_group(group_id: str, user_id: CurrentUserIdDep, service: GroupServiceDep):
    await service.delete_group(user_id, group_id)
    return MessageResponse(message="Group deleted successfully")


# ============ Members ============

@router.post("/{group_id}/members", response_model=MemberEnvelope, status_code=status.HTTP_201_CREATED)
async def invite_member(
    group_id: str,
    data: MemberInvite,
    user_id: CurrentUserIdDep,
    service: GroupServiceDep,
):
    member = await service.invite(user_id, group_id, data.user_id)
    return MemberEnvelope(message="Invite sent successfully", member=GroupMemberResponse.model_validate(member))


# accept/decline are declared before /{member_id}
@router.put("/{group_id}/members/accept", response_model=MessageResponse)
async def accept_invite(group_id: str, user_id: CurrentUserIdDep, service: GroupServiceDep):
    await service.accept_invite(user_id, group_id)
    return MessageResponse(message="Group invite accepted!")


@router.put("/{group_id}/members/decline", response_model=MessageResponse)
async def decline_invite(group_id: str, user_id: CurrentUserIdDep, service: GroupServiceDep):
    await service.decline_invite(user_id, group_id)
    return MessageResponse(message="Group invite declined")


@router.put("/{group_id}/members/{member_id}", response_model=MemberEnvelope)
async def update_member_permissions(
    group_id: str,
    member_id: str,
    data: MemberPermissionUpdate,
    user_id: CurrentUserIdDep,
    service: GroupServiceDep,
):
    member = await service.set_edit_permission(user_id, group_id, member_id, data.can_edit)
    return MemberEnvelope(
        message="Permissions updated successfully",
        member=GroupMemberResponse.model_validate(member),
    )


@router.delete("/{group_id}/members/{member_id}", response_model=MessageResponse)
async def remove_member(group_id: str, member_id: str, user_id: CurrentUserIdDep, service: GroupServiceDep):
    await service.remove_member(user_id, group_id, member_id)
    return MessageResponse(message="Member removed successfully")


# ============ Group restaurants ============

@router.post("/{group_id}/restaurants", response_model=RestaurantEnvelope, status_code=status.HTTP_201_CREATED)
async def add_restaurant_to_group(
    group_id: str,
    data: RestaurantCreate,
    user_id: CurrentUserIdDep,
    service: GroupServiceDep,
):
    restaurant = await service.add_restaurant(user_id, group_id, data)
    return RestaurantEnvelope(
        message="Restaurant added to group",
        restaurant=RestaurantResponse.model_validate(restaurant),
    )


@router.put("/{group_id}/restaurants/{restaurant_id}", response_model=RestaurantEnvelope)
async def update_group_restaurant_rating(
    group_id: str,
    restaurant_id: str,
    data: GroupRatingUpdate,
    user_id: CurrentUserIdDep,
    service: GroupServiceDep,
):
    restaurant = await service.rate_restaurant(user_id, group_id, restaurant_id, data.rating)
    return RestaurantEnvelope(
        message="Rating updated successfully",
        restaurant=RestaurantResponse.model_validate(restaurant),
    )


@router.delete("/{group_id}/restaurants/{restaurant_id}", response_model=MessageResponse)
async def remove_restaurant_from_group(
    group_id: str,
    restaurant_id: str,
    user_id: CurrentUserIdDep,
    service: GroupServiceDep,
):
    await service.remove_restaurant(user_id, group_id, restaurant_id)
    return MessageResponse(message="Restaurant removed from group")
