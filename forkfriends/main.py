"""
FastAPI Application Entry Point
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException

from forkfriends.api.router import api_router
from forkfriends.core.config import settings
from forkfriends.core.errors import (
    AppError,
    app_exception_handler,
    general_exception_handler,
    http_exception_handler,
    validation_exception_handler,
)
from forkfriends.core.logging import RequestIDMiddleware, RequestLoggingMiddleware, get_logger, setup_logging
from forkfriends.infra.db import close_db_connection, init_models

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup
    setup_logging()
    if settings.env == "development":
        # Alembic owns the schema elsewhere
        await init_models()
    logger.info("app.startup", env=settings.env, places_mock=settings.use_mock_places)

    yield

    # Shutdown
    await close_db_connection()
    logger.info("app.shutdown")


tags_metadata = [
    {
        "name": "auth",
        "description": "Signup, login and the current user.",
    },
    {
        "name": "restaurants",
        "description": "Personal restaurant lists and the friends' feed.",
    },
    {
        "name": "friends",
        "description": "User search, friend requests and friendships.",
    },
    {
        "name": "groups",
        "description": "Groups, invites, member permissions and shared restaurant lists.",
    },
    {
        "name": "places",
        "description": "Places search used to pre-fill the restaurant form.",
    },
    {
        "name": "health",
        "description": "System health check.",
    },
]


def create_app() -> FastAPI:
    app = FastAPI(
        title="Fork n Friends API",
        description="""
Fork n Friends lets people keep restaurant lists and share them with friends.

## Features
* **Restaurant Lists**: Visited places and a wishlist, with ratings and private entries.
* **Friends**: Mutual friendships and a feed of friends' visible restaurants.
* **Groups**: Invite-only groups with a shared restaurant list and per-member edit rights.
""",
        version="0.1.0",
        openapi_tags=tags_metadata,
        openapi_url=f"{settings.api_prefix}/openapi.json",
        docs_url="/docs",
        redoc_url="/redoc",
        swagger_ui_parameters={
            "persistAuthorization": True,
            "displayRequestDuration": True
        },
        lifespan=lifespan,
    )

    # Middleware
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(RequestIDMiddleware)

    # CORS Configuration
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=settings.cors_credentials,
        allow_methods=settings.cors_methods,
        allow_headers=settings.cors_headers,
    )

    @app.get("/", tags=["health"], include_in_schema=False)
    async def root():
        return {
            "message": "Fork n Friends API is running",
            "docs": "/docs",
            "status": "operational"
        }

    # Routes
    app.include_router(api_router, prefix=settings.api_prefix)

    # Exception Handlers
    app.add_exception_handler(AppError, app_exception_handler)
    app.add_exception_handler(HTTPException, http_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    return app


app = create_app()
