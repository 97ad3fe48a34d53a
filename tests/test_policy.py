"""Tests for the access-control predicates and guards."""

import pytest

from forkfriends.core.errors import ForbiddenError, NotFoundError
from forkfriends.models import GroupMember, Restaurant
from forkfriends.models.group import MEMBER_ACCEPTED, MEMBER_DECLINED, MEMBER_PENDING
from forkfriends.services import policy
from forkfriends.services.friends import FriendService
from forkfriends.services.groups import GroupService


class TestPredicates:
    """Pure predicates that need no database."""

    def test_is_owner(self):
        restaurant = Restaurant(owner_id="u1")
        assert policy.is_owner(restaurant, "u1")
        assert not policy.is_owner(restaurant, "u2")

    @pytest.mark.parametrize(
        "status,flag,expected",
        [
            (MEMBER_ACCEPTED, True, True),
            (MEMBER_ACCEPTED, False, False),
            (MEMBER_PENDING, True, False),
            (MEMBER_DECLINED, True, False),
        ],
    )
    def test_can_edit_requires_accepted_and_flag(self, status, flag, expected):
        assert policy.can_edit(GroupMember(status=status, can_edit=flag)) is expected

    def test_can_edit_without_membership(self):
        assert policy.can_edit(None) is False


class TestFriendPredicate:
    async def test_pending_request_is_not_friendship(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        service = FriendService(db)
        request = await service.send_request(alice.id, bob.id)

        assert not await policy.is_accepted_friend(db, alice.id, bob.id)
        assert not await policy.is_accepted_friend(db, bob.id, alice.id)

        await service.accept_request(bob.id, request.id)
        assert await policy.is_accepted_friend(db, alice.id, bob.id)


class TestGroupGuards:
    async def test_require_creator(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        group = await GroupService(db).create_group(alice.id, "Lunch")

        assert (await policy.require_creator(db, group.id, alice.id, "delete the group")).id == group.id
        with pytest.raises(ForbiddenError, match="Only the group creator can delete the group"):
            await policy.require_creator(db, group.id, bob.id, "delete the group")
        with pytest.raises(NotFoundError):
            await policy.require_creator(db, "missing", alice.id, "delete the group")

    async def test_membership_guards(self, db, make_user):
        alice = await make_user("alice")
        bob = await make_user("bob")
        groups = GroupService(db)
        group = await groups.create_group(alice.id, "Lunch")
        await groups.invite(alice.id, group.id, bob.id)

        assert not await policy.is_accepted_member(db, group.id, bob.id)
        with pytest.raises(ForbiddenError, match="not a member"):
            await policy.require_accepted_member(db, group.id, bob.id)

        await groups.accept_invite(bob.id, group.id)
        assert await policy.is_accepted_member(db, group.id, bob.id)
        with pytest.raises(ForbiddenError, match="permission"):
            await policy.require_editor(db, group.id, bob.id, "add restaurants")
        assert (await policy.require_editor(db, group.id, alice.id, "add restaurants")).can_edit
