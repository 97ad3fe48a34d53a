"""
Group membership state machine.

Per (group, user) there is at most one GroupMember row. Its status moves
pending -> accepted or pending -> declined; a declined row may be reset to
pending by a new invite from the creator. The creator's own row is inserted
as accepted with can_edit at creation and can never be removed or demoted.
"""

from datetime import datetime
from typing import List, Optional
from uuid import uuid4

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import aliased

from forkfriends.core.errors import (
    DuplicateInviteError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from forkfriends.core.logging import get_logger
from forkfriends.infra.db import atomic
from forkfriends.models.group import (
    MEMBER_ACCEPTED,
    MEMBER_DECLINED,
    MEMBER_PENDING,
    Group,
    GroupMember,
)
from forkfriends.models.restaurant import Restaurant
from forkfriends.models.user import User
from forkfriends.schemas.group import (
    GroupDetailResponse,
    GroupInfo,
    GroupSummary,
    InviteResponse,
    RosterEntry,
)
from forkfriends.schemas.restaurant import RestaurantCreate, RestaurantWithOwner
from forkfriends.services import policy
from forkfriends.services.restaurants import (
    build_restaurant,
    validate_rating,
    with_owner,
)

logger = get_logger(__name__)


def _clean_name(name: Optional[str]) -> str:
    if not name or not name.strip():
        raise ValidationError("Group name is required")
    return name.strip()


class GroupService:
    """Groups, invites, roster administration and group restaurant lists"""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ============ Groups ============

    async def create_group(self, creator_id: str, name: Optional[str]) -> Group:
        """Create a group and its creator membership in one transaction"""
        clean = _clean_name(name)
        now = datetime.utcnow()

        group = Group(id=uuid4().hex, name=clean, created_by=creator_id, created_at=now)
        creator_row = GroupMember(
            id=uuid4().hex,
            group_id=group.id,
            user_id=creator_id,
            can_edit=True,
            status=MEMBER_ACCEPTED,
            joined_at=now,
        )
        async with atomic(self.db):
            self.db.add(group)
            self.db.add(creator_row)

        logger.info("group.created", group_id=group.id, user_id=creator_id)
        return group

    async def list_groups(self, current_user_id: str) -> List[GroupSummary]:
        """Groups the caller has accepted, newest first"""
        member_count = (
            select(func.count(GroupMember.id))
            .where(GroupMember.group_id == Group.id, GroupMember.status == MEMBER_ACCEPTED)
            .correlate(Group)
            .scalar_subquery()
        )
        stmt = (
            select(Group, GroupMember.can_edit, User.username, member_count)
            .join(GroupMember, GroupMember.group_id == Group.id)
            .join(User, Group.created_by == User.id)
            .where(GroupMember.user_id == current_user_id, GroupMember.status == MEMBER_ACCEPTED)
            .order_by(Group.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [
            GroupSummary(
                id=group.id,
                name=group.name,
                created_by=group.created_by,
                created_at=group.created_at,
                creator_username=creator_username,
                can_edit=bool(can_edit),
                member_count=count or 0,
            )
            for group, can_edit, creator_username, count in result.all()
        ]

    async def get_group_detail(self, current_user_id: str, group_id: str) -> GroupDetailResponse:
        group = await policy.get_group_or_404(self.db, group_id)
        await policy.require_accepted_member(self.db, group_id, current_user_id)

        creator = await self.db.get(User, group.created_by)

        roster_stmt = (
            select(GroupMember, User)
            .join(User, GroupMember.user_id == User.id)
            .where(GroupMember.group_id == group_id, GroupMember.status == MEMBER_ACCEPTED)
            .order_by(GroupMember.joined_at.asc())
        )
        roster = await self.db.execute(roster_stmt)

        return GroupDetailResponse(
            group=GroupInfo(
                id=group.id,
                name=group.name,
                created_by=group.created_by,
                created_at=group.created_at,
                creator_username=creator.username if creator else "",
            ),
            members=[
                RosterEntry(
                    id=member.id,
                    group_id=member.group_id,
                    user_id=member.user_id,
                    can_edit=member.can_edit,
                    status=member.status,
                    joined_at=member.joined_at,
                    username=user.username,
                    email=user.email,
                )
                for member, user in roster.all()
            ],
            restaurants=await self._group_restaurants(group_id),
        )

    async def _group_restaurants(self, group_id: str) -> List[RestaurantWithOwner]:
        stmt = (
            select(Restaurant, User.username)
            .join(User, Restaurant.owner_id == User.id)
            .where(Restaurant.group_id == group_id)
            .order_by(Restaurant.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [with_owner(restaurant, username) for restaurant, username in result.all()]

    async def rename_group(self, acting_user_id: str, group_id: str, name: Optional[str]) -> Group:
        group = await policy.require_creator(self.db, group_id, acting_user_id, "update the group")
        clean = _clean_name(name)
        async with atomic(self.db):
            group.name = clean
        logger.info("group.renamed", group_id=group_id, user_id=acting_user_id)
        return group

    async def delete_group(self, acting_user_id: str, group_id: str) -> None:
        """Delete memberships, group restaurants and the group together"""
        group = await policy.require_creator(self.db, group_id, acting_user_id, "delete the group")

        async with atomic(self.db):
            members = await self.db.execute(
                delete(GroupMember).where(GroupMember.group_id == group_id)
            )
            restaurants = await self.db.execute(
                delete(Restaurant).where(Restaurant.group_id == group_id)
            )
            await self.db.delete(group)

        logger.info(
            "group.deleted",
            group_id=group_id,
            user_id=acting_user_id,
            members_removed=members.rowcount,
            restaurants_removed=restaurants.rowcount,
        )

    # ============ Invites ============

    async def _get_row(self, group_id: str, user_id: str) -> Optional[GroupMember]:
        stmt = select(GroupMember).where(
            GroupMember.group_id == group_id,
            GroupMember.user_id == user_id,
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def invite(self, acting_user_id: str, group_id: str, target_user_id: str) -> GroupMember:
        await policy.require_creator(self.db, group_id, acting_user_id, "invite members")
        await policy.get_user_or_404(self.db, target_user_id)

        row = await self._get_row(group_id, target_user_id)
        if row is not None and row.status == MEMBER_PENDING:
            raise DuplicateInviteError("Invite already sent to this user")
        if row is not None and row.status == MEMBER_ACCEPTED:
            raise DuplicateInviteError("User is already a member of this group")

        async with atomic(self.db):
            if row is not None:
                # declined earlier: reopen the same row
                row.status = MEMBER_PENDING
                row.can_edit = False
                row.joined_at = datetime.utcnow()
            else:
                row = GroupMember(
                    id=uuid4().hex,
                    group_id=group_id,
                    user_id=target_user_id,
                    can_edit=False,
                    status=MEMBER_PENDING,
                    joined_at=datetime.utcnow(),
                )
                self.db.add(row)

        logger.info("group.invited", group_id=group_id, user_id=acting_user_id, target_id=target_user_id)
        return row

    async def _get_pending_invite(self, current_user_id: str, group_id: str) -> GroupMember:
        row = await self._get_row(group_id, current_user_id)
        if row is None or row.status != MEMBER_PENDING:
            raise NotFoundError("Invite not found")
        return row

    async def accept_invite(self, current_user_id: str, group_id: str) -> GroupMember:
        row = await self._get_pending_invite(current_user_id, group_id)
        async with atomic(self.db):
            row.status = MEMBER_ACCEPTED
        logger.info("group.invite_accepted", group_id=group_id, user_id=current_user_id)
        return row

    async def decline_invite(self, current_user_id: str, group_id: str) -> GroupMember:
        row = await self._get_pending_invite(current_user_id, group_id)
        async with atomic(self.db):
            row.status = MEMBER_DECLINED
        logger.info("group.invite_declined", group_id=group_id, user_id=current_user_id)
        return row

    async def list_invites(self, current_user_id: str) -> List[InviteResponse]:
        creator = aliased(User)
        stmt = (
            select(GroupMember, Group.name, creator.username)
            .join(Group, GroupMember.group_id == Group.id)
            .join(creator, Group.created_by == creator.id)
            .where(GroupMember.user_id == current_user_id, GroupMember.status == MEMBER_PENDING)
            .order_by(GroupMember.joined_at.desc())
        )
        result = await self.db.execute(stmt)
        return [
            InviteResponse(
                id=row.id,
                group_id=row.group_id,
                user_id=row.user_id,
                can_edit=row.can_edit,
                status=row.status,
                joined_at=row.joined_at,
                group_name=group_name,
                creator_username=creator_username,
            )
            for row, group_name, creator_username in result.all()
        ]

    # ============ Roster administration ============

    async def _get_member_in_group(self, group_id: str, member_id: str) -> GroupMember:
        stmt = select(GroupMember).where(
            GroupMember.id == member_id,
            GroupMember.group_id == group_id,
        )
        result = await self.db.execute(stmt)
        member = result.scalar_one_or_none()
        if member is None:
            raise NotFoundError("Member not found")
        return member

    async def remove_member(self, acting_user_id: str, group_id: str, member_id: str) -> None:
        group = await policy.require_creator(self.db, group_id, acting_user_id, "remove members")
        member = await self._get_member_in_group(group_id, member_id)
        if policy.is_creator(group, member.user_id):
            raise InvalidOperationError("Can't remove the group creator")

        async with atomic(self.db):
            await self.db.delete(member)
        logger.info("group.member_removed", group_id=group_id, user_id=acting_user_id, member_id=member_id)

    async def set_edit_permission(
        self, acting_user_id: str, group_id: str, member_id: str, can_edit: bool
    ) -> GroupMember:
        group = await policy.require_creator(self.db, group_id, acting_user_id, "update permissions")
        member = await self._get_member_in_group(group_id, member_id)
        if policy.is_creator(group, member.user_id):
            raise InvalidOperationError("The group creator always keeps edit permission")

        async with atomic(self.db):
            member.can_edit = bool(can_edit)
        logger.info(
            "group.permission_changed",
            group_id=group_id,
            member_id=member_id,
            can_edit=member.can_edit,
        )
        return member

    # ============ Group restaurants ============

    async def add_restaurant(
        self, current_user_id: str, group_id: str, data: RestaurantCreate
    ) -> Restaurant:
        await policy.get_group_or_404(self.db, group_id)
        await policy.require_editor(self.db, group_id, current_user_id, "add restaurants")

        restaurant = build_restaurant(current_user_id, data, group_id=group_id)
        async with atomic(self.db):
            self.db.add(restaurant)
        logger.info("group.restaurant_added", group_id=group_id, restaurant_id=restaurant.id)
        return restaurant

    async def _get_group_restaurant(self, group_id: str, restaurant_id: str) -> Restaurant:
        stmt = select(Restaurant).where(
            Restaurant.id == restaurant_id,
            Restaurant.group_id == group_id,
        )
        result = await self.db.execute(stmt)
        restaurant = result.scalar_one_or_none()
        if restaurant is None:
            raise NotFoundError("Restaurant not found in this group")
        return restaurant

    async def remove_restaurant(self, current_user_id: str, group_id: str, restaurant_id: str) -> None:
        await policy.get_group_or_404(self.db, group_id)
        await policy.require_editor(self.db, group_id, current_user_id, "remove restaurants")
        restaurant = await self._get_group_restaurant(group_id, restaurant_id)

        async with atomic(self.db):
            await self.db.delete(restaurant)
        logger.info("group.restaurant_removed", group_id=group_id, restaurant_id=restaurant_id)

    async def rate_restaurant(
        self, current_user_id: str, group_id: str, restaurant_id: str, rating: Optional[float]
    ) -> Restaurant:
        """Any accepted member may rate; can_edit is only needed to add or remove"""
        await policy.get_group_or_404(self.db, group_id)
        await policy.require_accepted_member(self.db, group_id, current_user_id)
        validate_rating(rating)
        restaurant = await self._get_group_restaurant(group_id, restaurant_id)

        async with atomic(self.db):
            restaurant.rating = rating
        logger.info("group.restaurant_rated", group_id=group_id, restaurant_id=restaurant_id, rating=rating)
        return restaurant
