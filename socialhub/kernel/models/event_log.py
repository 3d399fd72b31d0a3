"""
Append-only audit log.

Mutations are recorded here in the same session that performs them, so an
entry commits or rolls back together with the change it describes.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, String, func, Index, JSON, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.kernel.models.base import Base, generate_uuid


class EventType(str, Enum):
    """All event types for the audit log."""

    # User events
    USER_REGISTERED = "user.registered"
    USER_LOGGED_IN = "user.logged_in"
    USER_LOGGED_OUT = "user.logged_out"
    USER_UPDATED = "user.updated"
    USER_DELETED = "user.deleted"

    # Post events
    POST_SUBMITTED = "post.submitted"
    POST_APPROVED = "post.approved"
    POST_PUBLISHED = "post.published"
    POST_REJECTED = "post.rejected"
    POST_DELETED = "post.deleted"

    # Sharing events
    SHARING_CREATED = "sharing.created"
    SHARING_REKEYED = "sharing.rekeyed"
    SHARING_DELETED = "sharing.deleted"
    ACCESS_REQUESTED = "sharing.access_requested"
    ACCESS_GRANTED = "sharing.access_granted"
    ACCESS_REVOKED = "sharing.access_revoked"

    # Comment events
    COMMENT_ADDED = "comment.added"
    COMMENT_DELETED = "comment.deleted"

    # Friend events
    FRIEND_REQUEST_SENT = "friend.request_sent"
    FRIEND_REQUEST_REMOVED = "friend.request_removed"
    FRIEND_REQUEST_ACCEPTED = "friend.request_accepted"
    FRIEND_REQUEST_REJECTED = "friend.request_rejected"
    FRIEND_REMOVED = "friend.removed"

    # User list events
    LIST_CREATED = "list.created"
    LIST_UPDATED = "list.updated"
    LIST_MEMBER_ADDED = "list.member_added"
    LIST_MEMBER_REMOVED = "list.member_removed"
    LIST_DELETED = "list.deleted"


class EventLog(Base):
    """
    Immutable audit event log.

    This table is append-only - no updates or deletes.
    """

    __tablename__ = "event_logs"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    # Actor; no foreign key so entries outlive deleted accounts
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )
    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        index=True,
    )

    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
        Index("ix_event_logs_user_time", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
