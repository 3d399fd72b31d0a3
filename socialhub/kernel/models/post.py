"""
Post models - pending (awaiting co-author approval) and published posts.

A pending post and the published post it turns into are separate rows with
separate ids. Authors and outstanding approvals are association tables so
that adding or removing one user is a single-row statement.
"""

import uuid
from typing import Optional

from sqlalchemy import ForeignKey, Integer, Text, Uuid, JSON
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.kernel.models.base import Base, TimestampMixin, generate_uuid


class PendingPost(Base, TimestampMixin):
    """A submitted post still waiting on one or more author approvals."""

    __tablename__ = "pending_posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    options: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<PendingPost {self.id}>"


class PendingPostAuthor(Base):
    """Ordered author list of a pending post."""

    __tablename__ = "pending_post_authors"

    pending_post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("pending_posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )


class PendingApproval(Base):
    """One outstanding approval; the row is removed when the user approves."""

    __tablename__ = "pending_approvals"

    pending_post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("pending_posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )


class Post(Base, TimestampMixin):
    """A published post."""

    __tablename__ = "posts"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    options: Mapped[Optional[dict]] = mapped_column(
        JSON,
        nullable=True,
    )

    def __repr__(self) -> str:
        return f"<Post {self.id}>"


class PostAuthor(Base):
    """Ordered author list of a published post."""

    __tablename__ = "post_authors"

    post_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("posts.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        nullable=False,
    )
