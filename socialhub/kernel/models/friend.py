"""
Friend models - friendships and friend requests.
"""

import uuid
from enum import Enum

from sqlalchemy import ForeignKey, String, Uuid, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.kernel.models.base import Base, TimestampMixin, generate_uuid


class FriendRequestStatus(str, Enum):
    """Status of a friend request."""
    PENDING = "pending"
    ACCEPTED = "accepted"
    REJECTED = "rejected"


class Friendship(Base, TimestampMixin):
    """
    Friendship between two users.

    Stored once per pair with user1_id < user2_id.
    """

    __tablename__ = "friendships"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user1_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    user2_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        UniqueConstraint("user1_id", "user2_id", name="uq_friendships_pair"),
    )


class FriendRequest(Base, TimestampMixin):
    """Friend request from one user to another."""

    __tablename__ = "friend_requests"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    from_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    to_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    status: Mapped[FriendRequestStatus] = mapped_column(
        String(20),
        default=FriendRequestStatus.PENDING,
        nullable=False,
    )

    def __repr__(self) -> str:
        return f"<FriendRequest {self.from_id} -> {self.to_id} {self.status}>"
