"""Tests for the group membership state machine and group restaurant lists."""

import uuid

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from forkfriends.core.errors import (
    DuplicateInviteError,
    ForbiddenError,
    InvalidOperationError,
    NotFoundError,
    ValidationError,
)
from forkfriends.models import Group, GroupMember, Restaurant
from forkfriends.models.group import MEMBER_ACCEPTED, MEMBER_DECLINED, MEMBER_PENDING
from forkfriends.schemas.restaurant import RestaurantCreate
from forkfriends.services.groups import GroupService


def pizza() -> RestaurantCreate:
    return RestaurantCreate(name="Luigi's", cuisine="Italian", location="Main St", rating=4)


@pytest.fixture
async def trio(make_user):
    """A creator and two other users."""
    return await make_user("creator"), await make_user("bob"), await make_user("carol")


async def group_with_member(db, creator, member, name="Dinner Club"):
    service = GroupService(db)
    group = await service.create_group(creator.id, name)
    await service.invite(creator.id, group.id, member.id)
    row = await service.accept_invite(member.id, group.id)
    return group, row


class TestCreateGroup:
    """Group creation and listing."""

    async def test_creator_is_accepted_editor(self, db, trio):
        creator, _, _ = trio
        group = await GroupService(db).create_group(creator.id, "  Dinner Club ")

        assert group.name == "Dinner Club"
        rows = (await db.execute(select(GroupMember).where(GroupMember.group_id == group.id))).scalars().all()
        assert len(rows) == 1
        assert rows[0].user_id == creator.id
        assert rows[0].status == MEMBER_ACCEPTED
        assert rows[0].can_edit is True

    async def test_blank_name_is_rejected(self, db, trio):
        creator, _, _ = trio
        with pytest.raises(ValidationError):
            await GroupService(db).create_group(creator.id, "   ")

    async def test_list_groups_only_accepted(self, db, trio):
        creator, bob, carol = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        await service.invite(creator.id, group.id, carol.id)

        bob_groups = await service.list_groups(bob.id)
        assert [g.id for g in bob_groups] == [group.id]
        assert bob_groups[0].member_count == 2
        assert bob_groups[0].can_edit is False
        assert bob_groups[0].creator_username == "creator"

        # pending invite is not membership
        assert await service.list_groups(carol.id) == []


class TestInvites:
    """Invite, accept and decline transitions."""

    async def test_only_creator_can_invite(self, db, trio):
        creator, bob, carol = trio
        group, _ = await group_with_member(db, creator, bob)

        with pytest.raises(ForbiddenError, match="Only the group creator"):
            await GroupService(db).invite(bob.id, group.id, carol.id)

    async def test_invite_unknown_group_or_user(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        with pytest.raises(NotFoundError):
            await service.invite(creator.id, "no-such-group", bob.id)

        group = await service.create_group(creator.id, "Brunch")
        with pytest.raises(NotFoundError):
            await service.invite(creator.id, group.id, "no-such-user")

    async def test_duplicate_pending_invite(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group = await service.create_group(creator.id, "Brunch")
        await service.invite(creator.id, group.id, bob.id)

        with pytest.raises(DuplicateInviteError, match="already sent"):
            await service.invite(creator.id, group.id, bob.id)

    async def test_invite_existing_member(self, db, trio):
        creator, bob, _ = trio
        group, _ = await group_with_member(db, creator, bob)

        with pytest.raises(DuplicateInviteError, match="already a member"):
            await GroupService(db).invite(creator.id, group.id, bob.id)
        with pytest.raises(DuplicateInviteError):
            await GroupService(db).invite(creator.id, group.id, creator.id)

    async def test_decline_then_reinvite_reuses_row(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group = await service.create_group(creator.id, "Brunch")
        first = await service.invite(creator.id, group.id, bob.id)
        declined = await service.decline_invite(bob.id, group.id)
        assert declined.status == MEMBER_DECLINED

        again = await service.invite(creator.id, group.id, bob.id)

        assert again.id == first.id
        assert again.status == MEMBER_PENDING
        assert again.can_edit is False
        total = (await db.execute(
            select(func.count(GroupMember.id)).where(GroupMember.user_id == bob.id)
        )).scalar_one()
        assert total == 1

    async def test_accept_without_invite_is_not_found(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group = await service.create_group(creator.id, "Brunch")

        with pytest.raises(NotFoundError):
            await service.accept_invite(bob.id, group.id)

    async def test_declined_invite_cannot_be_accepted(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group = await service.create_group(creator.id, "Brunch")
        await service.invite(creator.id, group.id, bob.id)
        await service.decline_invite(bob.id, group.id)

        with pytest.raises(NotFoundError):
            await service.accept_invite(bob.id, group.id)

    async def test_list_invites(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group = await service.create_group(creator.id, "Brunch")
        await service.invite(creator.id, group.id, bob.id)

        invites = await service.list_invites(bob.id)

        assert len(invites) == 1
        assert invites[0].group_name == "Brunch"
        assert invites[0].creator_username == "creator"
        await service.accept_invite(bob.id, group.id)
        assert await service.list_invites(bob.id) == []


class TestGroupDetail:
    """Reading a group requires accepted membership."""

    async def test_member_sees_roster_and_restaurants(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        await service.add_restaurant(creator.id, group.id, pizza())

        detail = await service.get_group_detail(bob.id, group.id)

        assert detail.group.creator_username == "creator"
        assert [m.username for m in detail.members] == ["creator", "bob"]
        assert [r.name for r in detail.restaurants] == ["Luigi's"]
        assert detail.restaurants[0].owner_username == "creator"

    async def test_pending_and_declined_are_forbidden(self, db, trio):
        creator, bob, carol = trio
        service = GroupService(db)
        group = await service.create_group(creator.id, "Brunch")
        await service.invite(creator.id, group.id, bob.id)
        await service.invite(creator.id, group.id, carol.id)
        await service.decline_invite(carol.id, group.id)

        with pytest.raises(ForbiddenError):
            await service.get_group_detail(bob.id, group.id)
        with pytest.raises(ForbiddenError):
            await service.get_group_detail(carol.id, group.id)

    async def test_unknown_group_is_not_found(self, db, trio):
        creator, _, _ = trio
        with pytest.raises(NotFoundError):
            await GroupService(db).get_group_detail(creator.id, "no-such-group")


class TestRosterAdministration:
    """Removing members, toggling edit rights, renaming and deleting."""

    async def test_creator_cannot_be_removed_or_demoted(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        creator_row = (await db.execute(
            select(GroupMember).where(GroupMember.group_id == group.id, GroupMember.user_id == creator.id)
        )).scalar_one()

        with pytest.raises(InvalidOperationError):
            await service.remove_member(creator.id, group.id, creator_row.id)
        with pytest.raises(InvalidOperationError):
            await service.set_edit_permission(creator.id, group.id, creator_row.id, False)

    async def test_remove_member(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, bob_row = await group_with_member(db, creator, bob)

        with pytest.raises(ForbiddenError):
            await service.remove_member(bob.id, group.id, bob_row.id)

        await service.remove_member(creator.id, group.id, bob_row.id)

        with pytest.raises(ForbiddenError):
            await service.get_group_detail(bob.id, group.id)
        # removed users can be invited again
        again = await service.invite(creator.id, group.id, bob.id)
        assert again.status == MEMBER_PENDING

    async def test_member_of_other_group_is_not_found(self, db, trio):
        creator, bob, carol = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        _, carol_row = await group_with_member(db, bob, carol, name="Other")

        with pytest.raises(NotFoundError):
            await service.remove_member(creator.id, group.id, carol_row.id)

    async def test_edit_permission_controls_restaurant_additions(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, bob_row = await group_with_member(db, creator, bob)

        with pytest.raises(ForbiddenError):
            await service.add_restaurant(bob.id, group.id, pizza())

        granted = await service.set_edit_permission(creator.id, group.id, bob_row.id, True)
        assert granted.can_edit is True
        restaurant = await service.add_restaurant(bob.id, group.id, pizza())
        assert restaurant.group_id == group.id
        assert restaurant.owner_id == bob.id
        assert restaurant.is_hidden is False

        await service.set_edit_permission(creator.id, group.id, bob_row.id, False)
        with pytest.raises(ForbiddenError):
            await service.remove_restaurant(bob.id, group.id, restaurant.id)

    async def test_rename_group(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)

        with pytest.raises(ForbiddenError):
            await service.rename_group(bob.id, group.id, "Mine now")
        renamed = await service.rename_group(creator.id, group.id, "Supper Club")
        assert renamed.name == "Supper Club"

    async def test_delete_group_cascades(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        await service.add_restaurant(creator.id, group.id, pizza())

        with pytest.raises(ForbiddenError):
            await service.delete_group(bob.id, group.id)

        await service.delete_group(creator.id, group.id)

        members = (await db.execute(
            select(func.count(GroupMember.id)).where(GroupMember.group_id == group.id)
        )).scalar_one()
        restaurants = (await db.execute(
            select(func.count(Restaurant.id)).where(Restaurant.group_id == group.id)
        )).scalar_one()
        assert members == 0
        assert restaurants == 0
        with pytest.raises(NotFoundError):
            await service.get_group_detail(creator.id, group.id)


class TestGroupRestaurants:
    """Shared restaurant list inside a group."""

    async def test_any_member_can_rate(self, db, trio):
        creator, bob, carol = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        restaurant = await service.add_restaurant(creator.id, group.id, pizza())

        rated = await service.rate_restaurant(bob.id, group.id, restaurant.id, 2.5)
        assert rated.rating == 2.5

        with pytest.raises(ForbiddenError):
            await service.rate_restaurant(carol.id, group.id, restaurant.id, 5)

    async def test_rating_out_of_range_is_rejected(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        restaurant = await service.add_restaurant(creator.id, group.id, pizza())

        for bad in (-1, 6, None):
            with pytest.raises(ValidationError):
                await service.rate_restaurant(bob.id, group.id, restaurant.id, bad)
        assert restaurant.rating == 4

    async def test_restaurant_from_other_group_is_not_found(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        other = await service.create_group(creator.id, "Other")
        restaurant = await service.add_restaurant(creator.id, other.id, pizza())

        with pytest.raises(NotFoundError):
            await service.remove_restaurant(creator.id, group.id, restaurant.id)

    async def test_remove_restaurant(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        restaurant = await service.add_restaurant(creator.id, group.id, pizza())

        await service.remove_restaurant(creator.id, group.id, restaurant.id)

        detail = await service.get_group_detail(creator.id, group.id)
        assert detail.restaurants == []

    async def test_nan_rating_is_rejected(self, db, trio):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        restaurant = await service.add_restaurant(creator.id, group.id, pizza())

        for bad in (float("nan"), float("inf")):
            with pytest.raises(ValidationError):
                await service.rate_restaurant(bob.id, group.id, restaurant.id, bad)
        assert restaurant.rating == 4


class TestTransactionRollback:
    """Multi-row group writes commit together or not at all."""

    async def test_create_group_rolls_back_when_creator_row_fails(self, db, trio, monkeypatch):
        creator, _, _ = trio
        service = GroupService(db)
        first = await service.create_group(creator.id, "First")
        taken_id = (await db.execute(
            select(GroupMember.id).where(GroupMember.group_id == first.id)
        )).scalar_one()
        db.expunge_all()

        # group gets a fresh id, the creator row reuses an existing member id
        ids = iter([uuid.uuid4(), uuid.UUID(hex=taken_id)])
        monkeypatch.setattr("forkfriends.services.groups.uuid4", lambda: next(ids))

        with pytest.raises(IntegrityError):
            await service.create_group(creator.id, "Second")

        names = (await db.execute(select(Group.name))).scalars().all()
        assert names == ["First"]
        members = (await db.execute(select(func.count(GroupMember.id)))).scalar_one()
        assert members == 1

    async def test_delete_group_rolls_back_on_failure(self, db, trio, monkeypatch):
        creator, bob, _ = trio
        service = GroupService(db)
        group, _ = await group_with_member(db, creator, bob)
        await service.add_restaurant(creator.id, group.id, pizza())

        async def broken_delete(session, instance):
            raise RuntimeError("disk full")

        # member and restaurant bulk deletes run, then the group delete fails
        monkeypatch.setattr(AsyncSession, "delete", broken_delete)
        with pytest.raises(RuntimeError):
            await service.delete_group(creator.id, group.id)
        monkeypatch.undo()

        members = (await db.execute(
            select(func.count(GroupMember.id)).where(GroupMember.group_id == group.id)
        )).scalar_one()
        restaurants = (await db.execute(
            select(func.count(Restaurant.id)).where(Restaurant.group_id == group.id)
        )).scalar_one()
        assert members == 2
        assert restaurants == 1
        assert (await service.get_group_detail(bob.id, group.id)).group.id == group.id
