"""
Token management and validation logic.
All JWT and authentication dependency operations are centralized here.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Annotated, Optional

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt

from forkfriends.core.config import settings
from forkfriends.core.errors import AuthenticationError

# HTTP Bearer scheme (Only shows a token input box in Swagger)
security_scheme = HTTPBearer(auto_error=False)


@dataclass(frozen=True)
class CurrentUser:
    """Identity resolved from a bearer token"""

    user_id: str
    email: Optional[str] = None


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None) -> str:
    """Create JWT access token"""
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.utcnow() + expires_delta
    else:
        expire = datetime.utcnow() + timedelta(minutes=settings.access_token_expire_minutes)

    to_encode.update({"exp": expire, "iat": datetime.utcnow()})

    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> Optional[dict]:
    """Decode and validate JWT token string"""
    try:
        return jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        return None


def resolve_token(token: str) -> CurrentUser:
    """Resolve a bearer token into the caller identity"""
    payload = decode_token(token)
    if payload is None:
        raise AuthenticationError("Token is not valid")

    user_id = payload.get("sub")
    if not user_id:
        raise AuthenticationError("Token is not valid")
    return CurrentUser(user_id=user_id, email=payload.get("email"))


async def get_current_user(
    auth: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security_scheme)],
) -> CurrentUser:
    """
    FastAPI dependency to validate token and return the caller identity.
    Used in protected routes.
    """
    if auth is None or not auth.credentials:
        raise AuthenticationError("No authentication token, access denied")
    return resolve_token(auth.credentials)


async def get_current_user_id(
    current_user: Annotated[CurrentUser, Depends(get_current_user)],
) -> str:
    return current_user.user_id


# Frequently used Dependency Annotations
CurrentUserDep = Annotated[CurrentUser, Depends(get_current_user)]
CurrentUserIdDep = Annotated[str, Depends(get_current_user_id)]
