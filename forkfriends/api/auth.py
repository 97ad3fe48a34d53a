"""
Signup, login and current-user endpoints.
"""

from fastapi import APIRouter, status

from forkfriends.core.deps import AuthServiceDep, CurrentUserIdDep
from forkfriends.schemas.auth import AuthResponse, LoginRequest, SignupRequest, UserResponse

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def signup(data: SignupRequest, service: AuthServiceDep):
    """
    Register a new user and return a bearer token.
    """
    user, token = await service.signup(data)
    return AuthResponse(
        message="User created successfully",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginRequest, service: AuthServiceDep):
    user, token = await service.login(data)
    return AuthResponse(
        message="Login successful",
        token=token,
        user=UserResponse.model_validate(user),
    )


@router.get("/me", response_model=UserResponse)
async def get_me(user_id: CurrentUserIdDep, service: AuthServiceDep):
    return await service.get_me(user_id)
