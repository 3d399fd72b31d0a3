"""
User list models - named lists of users that can be granted access as a unit.
"""

import uuid

from sqlalchemy import ForeignKey, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.kernel.models.base import Base, TimestampMixin, generate_uuid


class UserList(Base, TimestampMixin):
    """A named list owned by one user."""

    __tablename__ = "user_lists"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    owner_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    def __repr__(self) -> str:
        return f"<UserList {self.name!r}>"


class UserListMember(Base):
    """Membership of a user in a list."""

    __tablename__ = "user_list_members"

    list_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("user_lists.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
