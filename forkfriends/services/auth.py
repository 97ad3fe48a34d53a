"""
Credential service: signup, login and identity lookup.
"""

from datetime import datetime
from typing import Optional, Tuple
from uuid import uuid4

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from forkfriends.core.errors import AuthenticationError, NotFoundError, ValidationError
from forkfriends.core.logging import get_logger
from forkfriends.core.security import get_password_hash, verify_password
from forkfriends.core.token import create_access_token
from forkfriends.infra.db import atomic
from forkfriends.models.user import User
from forkfriends.schemas.auth import LoginRequest, SignupRequest

logger = get_logger(__name__)


def issue_token(user: User) -> str:
    return create_access_token(data={"sub": user.id, "email": user.email})


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email))
        return result.scalar_one_or_none()

    async def signup(self, data: SignupRequest) -> Tuple[User, str]:
        """Create a user and return it with a fresh bearer token"""
        username = data.username.strip()
        if not username:
            raise ValidationError("Please provide username, email, and password")

        stmt = select(User.id).where(or_(User.email == data.email, User.username == username))
        if (await self.db.execute(stmt)).first() is not None:
            raise ValidationError("User already exists with this email or username")

        now = datetime.utcnow()
        user = User(
            id=str(uuid4()),
            username=username,
            email=data.email,
            password_hash=get_password_hash(data.password),
            created_at=now,
            updated_at=now,
        )
        async with atomic(self.db):
            self.db.add(user)

        logger.info("auth.signup", user_id=user.id)
        return user, issue_token(user)

    async def login(self, data: LoginRequest) -> Tuple[User, str]:
        user = await self.get_user_by_email(data.email)
        if not user or not verify_password(data.password, user.password_hash):
            raise AuthenticationError("Invalid credentials")

        logger.info("auth.login", user_id=user.id)
        return user, issue_token(user)

    async def get_me(self, user_id: str) -> User:
        user = await self.db.get(User, user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user
