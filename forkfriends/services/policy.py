"""
Access-control policy.

Named predicates (is_owner, is_accepted_friend, is_accepted_member,
is_creator, can_edit) plus guards that load an entity and raise the matching
AppError. Every mutating operation goes through these instead of querying
ad hoc.
"""

from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from forkfriends.core.errors import ForbiddenError, NotFoundError
from forkfriends.models.friend import FRIEND_ACCEPTED, Friendship
from forkfriends.models.group import MEMBER_ACCEPTED, Group, GroupMember
from forkfriends.models.restaurant import Restaurant
from forkfriends.models.user import User


# ============ Predicates ============

def is_owner(restaurant: Restaurant, user_id: str) -> bool:
    return restaurant.owner_id == user_id


def is_creator(group: Group, user_id: str) -> bool:
    return group.created_by == user_id


def can_edit(membership: Optional[GroupMember]) -> bool:
    """Edit right = accepted membership with the can_edit flag set"""
    return (
        membership is not None
        and membership.status == MEMBER_ACCEPTED
        and bool(membership.can_edit)
    )


async def is_accepted_friend(db: AsyncSession, user_id: str, peer_id: str) -> bool:
    stmt = select(Friendship.id).where(
        Friendship.user_id == user_id,
        Friendship.friend_id == peer_id,
        Friendship.status == FRIEND_ACCEPTED,
    )
    result = await db.execute(stmt)
    return result.first() is not None


async def get_accepted_membership(
    db: AsyncSession, group_id: str, user_id: str
) -> Optional[GroupMember]:
    stmt = select(GroupMember).where(
        GroupMember.group_id == group_id,
        GroupMember.user_id == user_id,
        GroupMember.status == MEMBER_ACCEPTED,
    )
    result = await db.execute(stmt)
    return result.scalar_one_or_none()


async def is_accepted_member(db: AsyncSession, group_id: str, user_id: str) -> bool:
    return await get_accepted_membership(db, group_id, user_id) is not None


# ============ Loaders ============

async def get_user_or_404(db: AsyncSession, user_id: str) -> User:
    user = await db.get(User, user_id)
    if user is None:
        raise NotFoundError("User not found")
    return user


async def get_group_or_404(db: AsyncSession, group_id: str) -> Group:
    group = await db.get(Group, group_id)
    if group is None:
        raise NotFoundError("Group not found")
    return group


async def get_restaurant_or_404(db: AsyncSession, restaurant_id: str) -> Restaurant:
    restaurant = await db.get(Restaurant, restaurant_id)
    if restaurant is None:
        raise NotFoundError("Restaurant not found")
    return restaurant


# ============ Guards ============

async def require_creator(db: AsyncSession, group_id: str, user_id: str, action: str) -> Group:
    group = await get_group_or_404(db, group_id)
    if not is_creator(group, user_id):
        raise ForbiddenError(f"Only the group creator can {action}")
    return group


async def require_accepted_member(db: AsyncSession, group_id: str, user_id: str) -> GroupMember:
    membership = await get_accepted_membership(db, group_id, user_id)
    if membership is None:
        raise ForbiddenError("You are not a member of this group")
    return membership


async def require_editor(db: AsyncSession, group_id: str, user_id: str, action: str) -> GroupMember:
    membership = await require_accepted_member(db, group_id, user_id)
    if not can_edit(membership):
        raise ForbiddenError(f"You do not have permission to {action} in this group")
    return membership


async def require_restaurant_access(
    db: AsyncSession, restaurant: Restaurant, user_id: str
) -> None:
    """
    Read visibility for one restaurant.

    Group restaurants are visible to accepted members of their group only.
    Personal restaurants are visible to the owner, and to accepted friends
    unless hidden.
    """
    if restaurant.group_id is not None:
        if not await is_accepted_member(db, restaurant.group_id, user_id):
            raise ForbiddenError("Access denied")
        return

    if is_owner(restaurant, user_id):
        return
    if restaurant.is_hidden or not await is_accepted_friend(db, user_id, restaurant.owner_id):
        raise ForbiddenError("Access denied")


async def require_restaurant_mutation(
    db: AsyncSession, restaurant: Restaurant, user_id: str, action: str
) -> None:
    """Personal restaurants: owner only. Group restaurants: accepted member with can_edit."""
    if restaurant.group_id is not None:
        await require_editor(db, restaurant.group_id, user_id, f"{action} restaurants")
        return
    if not is_owner(restaurant, user_id):
        raise ForbiddenError(f"You can only {action} your own restaurants")
