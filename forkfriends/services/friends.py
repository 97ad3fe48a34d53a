"""
Friendship graph.

Accepted friendships are two directed rows, one per direction. accept and
unfriend keep the pair consistent inside a single transaction.
"""

from datetime import datetime
from typing import List
from uuid import uuid4

from sqlalchemy import and_, delete, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from forkfriends.core.config import settings
from forkfriends.core.errors import (
    DuplicateRequestError,
    InvalidTargetError,
    NotFoundError,
    ValidationError,
)
from forkfriends.core.logging import get_logger
from forkfriends.infra.db import atomic
from forkfriends.models.friend import FRIEND_ACCEPTED, FRIEND_PENDING, Friendship
from forkfriends.models.user import User
from forkfriends.schemas.friend import FriendRequestResponse, FriendResponse
from forkfriends.services.policy import get_user_or_404

logger = get_logger(__name__)


class FriendService:
    """Friend requests, acceptance and removal for one database session"""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def search_users(self, current_user_id: str, query: str) -> List[User]:
        """Users whose username contains query (case-insensitive), caller excluded"""
        if not query or not query.strip():
            raise ValidationError("Search query is required")

        # % and _ in the query are literal characters, not wildcards
        needle = func.lower(User.username).contains(query.strip().lower(), autoescape=True)
        stmt = (
            select(User)
            .where(needle, User.id != current_user_id)
            .order_by(User.username)
            .limit(settings.user_search_limit)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def send_request(self, requester_id: str, target_id: str) -> Friendship:
        if requester_id == target_id:
            raise InvalidTargetError("Cannot send friend request to yourself")

        await get_user_or_404(self.db, target_id)

        # Any row between the pair blocks a new request, whatever its direction
        stmt = select(Friendship).where(
            or_(
                and_(Friendship.user_id == requester_id, Friendship.friend_id == target_id),
                and_(Friendship.user_id == target_id, Friendship.friend_id == requester_id),
            )
        )
        result = await self.db.execute(stmt)
        existing = result.scalars().first()
        if existing:
            if existing.status == FRIEND_ACCEPTED:
                raise DuplicateRequestError("You are already friends")
            if existing.user_id == requester_id:
                raise DuplicateRequestError("Friend request already sent")
            raise DuplicateRequestError(
                "This user has already sent you a friend request"
            )

        request = Friendship(
            id=uuid4().hex,
            user_id=requester_id,
            friend_id=target_id,
            status=FRIEND_PENDING,
            created_at=datetime.utcnow(),
        )
        async with atomic(self.db):
            self.db.add(request)

        logger.info("friend.requested", request_id=request.id, user_id=requester_id, target_id=target_id)
        return request

    async def _get_incoming_pending(self, current_user_id: str, request_id: str) -> Friendship:
        stmt = select(Friendship).where(
            Friendship.id == request_id,
            Friendship.friend_id == current_user_id,
            Friendship.status == FRIEND_PENDING,
        )
        result = await self.db.execute(stmt)
        request = result.scalar_one_or_none()
        if request is None:
            raise NotFoundError("Friend request not found")
        return request

    async def accept_request(self, current_user_id: str, request_id: str) -> Friendship:
        """Promote the pending row and add the reciprocal accepted row"""
        request = await self._get_incoming_pending(current_user_id, request_id)

        reciprocal = Friendship(
            id=uuid4().hex,
            user_id=current_user_id,
            friend_id=request.user_id,
            status=FRIEND_ACCEPTED,
            created_at=datetime.utcnow(),
        )
        async with atomic(self.db):
            request.status = FRIEND_ACCEPTED
            self.db.add(reciprocal)

        logger.info(
            "friend.accepted",
            request_id=request.id,
            user_id=current_user_id,
            friend_id=request.user_id,
        )
        return reciprocal

    async def decline_request(self, current_user_id: str, request_id: str) -> None:
        request = await self._get_incoming_pending(current_user_id, request_id)
        async with atomic(self.db):
            await self.db.delete(request)
        logger.info("friend.declined", request_id=request_id, user_id=current_user_id)

    async def unfriend(self, current_user_id: str, friendship_id: str) -> None:
        """Delete the caller's row and its reciprocal"""
        stmt = select(Friendship).where(
            Friendship.id == friendship_id,
            Friendship.user_id == current_user_id,
        )
        result = await self.db.execute(stmt)
        friendship = result.scalar_one_or_none()
        if friendship is None:
            raise NotFoundError("Friendship not found")

        peer_id = friendship.friend_id
        async with atomic(self.db):
            await self.db.delete(friendship)
            removed = await self.db.execute(
                delete(Friendship).where(
                    Friendship.user_id == peer_id,
                    Friendship.friend_id == current_user_id,
                )
            )

        if removed.rowcount == 0:
            logger.warning(
                "friend.reciprocal_missing",
                friendship_id=friendship_id,
                user_id=current_user_id,
                friend_id=peer_id,
            )
        logger.info("friend.removed", user_id=current_user_id, friend_id=peer_id)

    async def list_friends(self, user_id: str) -> List[FriendResponse]:
        stmt = (
            select(Friendship, User)
            .join(User, Friendship.friend_id == User.id)
            .where(Friendship.user_id == user_id, Friendship.status == FRIEND_ACCEPTED)
            .order_by(Friendship.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [
            FriendResponse(
                id=f_row.id,
                friend_id=f_row.friend_id,
                username=peer.username,
                email=peer.email,
                created_at=f_row.created_at,
            )
            for f_row, peer in result.all()
        ]

    async def list_pending_incoming(self, user_id: str) -> List[FriendRequestResponse]:
        stmt = (
            select(Friendship, User)
            .join(User, Friendship.user_id == User.id)
            .where(Friendship.friend_id == user_id, Friendship.status == FRIEND_PENDING)
            .order_by(Friendship.created_at.desc())
        )
        result = await self.db.execute(stmt)
        return [
            FriendRequestResponse(
                id=f_row.id,
                user_id=f_row.user_id,
                username=sender.username,
                email=sender.email,
                created_at=f_row.created_at,
            )
            for f_row, sender in result.all()
        ]

    async def friend_ids(self, user_id: str) -> List[str]:
        """Ids of every accepted friend of user_id"""
        stmt = select(Friendship.friend_id).where(
            Friendship.user_id == user_id,
            Friendship.status == FRIEND_ACCEPTED,
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())
