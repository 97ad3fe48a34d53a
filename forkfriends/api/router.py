"""
API Router
"""

from fastapi import APIRouter, Depends

from forkfriends.api.auth import router as auth_router
from forkfriends.api.friends import router as friends_router
from forkfriends.api.groups import router as groups_router
from forkfriends.api.health import router as health_router
from forkfriends.api.places import router as places_router
from forkfriends.api.restaurants import router as restaurants_router
from forkfriends.core.token import security_scheme

api_router = APIRouter()

# 1. Routes that DON'T need authentication
api_router.include_router(health_router)
api_router.include_router(auth_router)  # signup/login; /me resolves its own token

# 2. Routes that DO need authentication
api_router.include_router(restaurants_router, dependencies=[Depends(security_scheme)])
api_router.include_router(friends_router, dependencies=[Depends(security_scheme)])
api_router.include_router(groups_router, dependencies=[Depends(security_scheme)])
api_router.include_router(places_router, dependencies=[Depends(security_scheme)])
