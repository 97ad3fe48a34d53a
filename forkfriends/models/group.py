from datetime import datetime
from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forkfriends.models.base import Base

if TYPE_CHECKING:
    from forkfriends.models.restaurant import Restaurant
    from forkfriends.models.user import User


MEMBER_PENDING = "pending"
MEMBER_ACCEPTED = "accepted"
MEMBER_DECLINED = "declined"


class Group(Base):
    __tablename__ = "groups"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    created_by: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        Index("idx_groups_created_by", "created_by"),
    )

    # Relationships
    creator: Mapped["User"] = relationship("User", back_populates="created_groups")
    members: Mapped[List["GroupMember"]] = relationship(
        "GroupMember", back_populates="group", passive_deletes=True
    )
    restaurants: Mapped[List["Restaurant"]] = relationship(
        "Restaurant", back_populates="group", passive_deletes=True
    )


class GroupMember(Base):
    __tablename__ = "group_members"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    group_id: Mapped[str] = mapped_column(ForeignKey("groups.id", ondelete="CASCADE"), nullable=False)
    user_id: Mapped[str] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    can_edit: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    # status: 'pending' | 'accepted' | 'declined'
    status: Mapped[str] = mapped_column(String(16), nullable=False, default=MEMBER_PENDING)
    joined_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False, default=datetime.utcnow)

    __table_args__ = (
        # One row per (group, user); re-invites reuse the declined row
        UniqueConstraint("group_id", "user_id", name="uq_group_members_group_user"),
        Index("idx_group_members_user_status", "user_id", "status"),
        Index("idx_group_members_group_status", "group_id", "status"),
    )

    # Relationships
    group: Mapped["Group"] = relationship("Group", back_populates="members")
    user: Mapped["User"] = relationship("User", back_populates="memberships")
