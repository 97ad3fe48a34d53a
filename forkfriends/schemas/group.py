"""
Pydantic schemas for groups, memberships and invites.
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr

from forkfriends.schemas.restaurant import RestaurantWithOwner


class GroupCreate(BaseModel):
    name: Optional[str] = None


class GroupUpdate(BaseModel):
    name: Optional[str] = None


class MemberInvite(BaseModel):
    user_id: str


class MemberPermissionUpdate(BaseModel):
    can_edit: bool


class GroupRatingUpdate(BaseModel):
    rating: Optional[float] = None


class GroupResponse(BaseModel):
    id: str
    name: str
    created_by: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class GroupInfo(GroupResponse):
    creator_username: str


class GroupSummary(GroupInfo):
    """A group as listed for one of its accepted members"""
    can_edit: bool
    member_count: int


class GroupMemberResponse(BaseModel):
    id: str
    group_id: str
    user_id: str
    can_edit: bool
    status: str
    joined_at: datetime

    model_config = ConfigDict(from_attributes=True)


class RosterEntry(GroupMemberResponse):
    username: str
    email: EmailStr


class InviteResponse(GroupMemberResponse):
    group_name: str
    creator_username: str


class GroupDetailResponse(BaseModel):
    group: GroupInfo
    members: list[RosterEntry]
    restaurants: list[RestaurantWithOwner]


class GroupEnvelope(BaseModel):
    message: str
    group: GroupResponse


class GroupListResponse(BaseModel):
    groups: list[GroupSummary]


class InviteListResponse(BaseModel):
    invites: list[InviteResponse]


class MemberEnvelope(BaseModel):
    message: str
    member: GroupMemberResponse
