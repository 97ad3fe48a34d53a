from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forkfriends.models.base import Base

if TYPE_CHECKING:
    from forkfriends.models.user import User


FRIEND_PENDING = "pending"
FRIEND_ACCEPTED = "accepted"


class Friendship(Base):
    """
    Directed friendship edge.

    A pending request is a single row requester -> target. An accepted
    friendship is stored as two rows, one per direction, both 'accepted'.
    """

    __tablename__ = "friendships"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)

    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    friend_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)

    # status: 'pending' | 'accepted'
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=FRIEND_PENDING)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("user_id <> friend_id", name="chk_friendships_not_self"),
        UniqueConstraint("user_id", "friend_id", name="uq_friendships_pair_direction"),
        Index("idx_friendships_user_status", "user_id", "status"),
        Index("idx_friendships_friend_status", "friend_id", "status"),
    )

    # Relationships
    user: Mapped["User"] = relationship("User", foreign_keys=[user_id])
    friend: Mapped["User"] = relationship("User", foreign_keys=[friend_id])

    def __repr__(self):
        return f"<Friendship(user_id={self.user_id}, friend_id={self.friend_id}, status={self.status})>"
