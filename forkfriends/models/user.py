from typing import TYPE_CHECKING, List

from sqlalchemy import String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from forkfriends.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from forkfriends.models.group import Group, GroupMember
    from forkfriends.models.restaurant import Restaurant


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id: Mapped[str] = mapped_column(String(64), primary_key=True)
    username: Mapped[str] = mapped_column(String(64), unique=True, nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    # Relationships
    restaurants: Mapped[List["Restaurant"]] = relationship("Restaurant", back_populates="owner")
    created_groups: Mapped[List["Group"]] = relationship("Group", back_populates="creator")
    memberships: Mapped[List["GroupMember"]] = relationship("GroupMember", back_populates="user")
