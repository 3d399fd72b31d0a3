"""
Sharing models - access-control records for posts and comments.
"""

import uuid
from enum import Enum

from sqlalchemy import Boolean, ForeignKey, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from socialhub.kernel.models.base import Base, TimestampMixin, generate_uuid


class SharingScope(str, Enum):
    """Kinds of resources governed by sharing records."""
    POSTS = "post_sharing"
    COMMENTS = "comment_sharing"


class MemberRole(str, Enum):
    """Which set of a sharing record a member row belongs to."""
    OWNER = "owner"
    WITH_ACCESS = "with_access"
    REQUESTED = "requested"


class SharingRecord(Base, TimestampMixin):
    """
    Access list for one resource.

    resource_id is a weak reference: it is not a foreign key and is rewritten
    when the resource changes identity (pending post -> published post).
    """

    __tablename__ = "sharing_records"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    scope: Mapped[SharingScope] = mapped_column(
        String(50),
        nullable=False,
    )
    resource_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
    )
    allow_requests: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )

    __table_args__ = (
        Index("ix_sharing_records_scope_resource", "scope", "resource_id"),
    )

    def __repr__(self) -> str:
        return f"<SharingRecord {self.id} {self.scope}:{self.resource_id}>"


class SharingMember(Base):
    """Membership of a user or user list in one of a record's sets."""

    __tablename__ = "sharing_members"

    record_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("sharing_records.id", ondelete="CASCADE"),
        primary_key=True,
    )
    # A user id or a user-list id; both are opaque to the sharing layer
    member_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
    )
    role: Mapped[MemberRole] = mapped_column(
        String(20),
        primary_key=True,
    )

    __table_args__ = (
        Index("ix_sharing_members_member_role", "member_id", "role"),
    )
