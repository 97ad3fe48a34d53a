"""
Generic response schemas shared by every router.
"""

from typing import Optional

from pydantic import BaseModel


class MessageResponse(BaseModel):
    """Generic message response"""
    message: str
    detail: Optional[str] = None
