from datetime import datetime
from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forkfriends.models.base import Base

if TYPE_CHECKING:
    from forkfriends.models.group import Group
    from forkfriends.models.user import User


MIN_RATING = 0
MAX_RATING = 5


class Restaurant(Base):
    __tablename__ = "restaurants"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    owner_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    # NULL = personal list entry; set = belongs to a shared group list
    group_id: Mapped[Optional[str]] = mapped_column(
        ForeignKey("groups.id", ondelete="CASCADE"), nullable=True
    )

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    cuisine: Mapped[str] = mapped_column(String(128), nullable=False)
    location: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    is_wishlist: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    is_hidden: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        CheckConstraint("rating >= 0 AND rating <= 5", name="chk_restaurants_rating_range"),
        Index("idx_restaurants_owner_created", "owner_id", "created_at"),
        Index("idx_restaurants_group", "group_id"),
    )

    # Relationships
    owner: Mapped["User"] = relationship("User", back_populates="restaurants")
    group: Mapped[Optional["Group"]] = relationship("Group", back_populates="restaurants")

    @property
    def is_group_scoped(self) -> bool:
        return self.group_id is not None
