from forkfriends.models.base import Base
from forkfriends.models.friend import Friendship
from forkfriends.models.group import Group, GroupMember
from forkfriends.models.restaurant import Restaurant
from forkfriends.models.user import User

__all__ = [
    "Base",
    "User",
    "Friendship",
    "Group",
    "GroupMember",
    "Restaurant",
]
