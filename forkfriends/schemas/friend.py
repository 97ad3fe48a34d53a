"""
Pydantic schemas for the friendship graph.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr


class FriendRequestCreate(BaseModel):
    friend_id: str


class UserSearchResult(BaseModel):
    id: str
    username: str
    email: EmailStr

    model_config = ConfigDict(from_attributes=True)


class FriendshipResponse(BaseModel):
    """A raw directed friendship row"""
    id: str
    user_id: str
    friend_id: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class FriendResponse(BaseModel):
    """Accepted friendship row seen from its owner, with the peer's identity"""
    id: str
    friend_id: str
    username: str
    email: EmailStr
    created_at: datetime


class FriendRequestResponse(BaseModel):
    """Incoming pending request, with the requester's identity"""
    id: str
    user_id: str
    username: str
    email: EmailStr
    created_at: datetime


class UserSearchResponse(BaseModel):
    users: list[UserSearchResult]


class FriendListResponse(BaseModel):
    friends: list[FriendResponse]


class FriendRequestListResponse(BaseModel):
    requests: list[FriendRequestResponse]


class SendFriendRequestResponse(BaseModel):
    message: str
    friendship: FriendshipResponse
