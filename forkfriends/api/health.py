"""
Health check endpoints
"""

from fastapi import APIRouter
from sqlalchemy import text

from forkfriends.core.deps import SessionDep

router = APIRouter(tags=["health"])


@router.get("/health")
async def health_check(db: SessionDep):
    """
    Check health of the database connection
    """
    status = {"api": "ok", "db": "unknown"}

    try:
        await db.execute(text("SELECT 1"))
        status["db"] = "ok"
    except Exception as e:
        status["db"] = f"error: {str(e)}"

    return status
