"""
Kernel Data Models

SQLAlchemy models for users, posts, sharing records and the social graph.
"""

from socialhub.kernel.models.base import Base, TimestampMixin, generate_uuid
from socialhub.kernel.models.user import User
from socialhub.kernel.models.post import (
    PendingPost,
    PendingPostAuthor,
    PendingApproval,
    Post,
    PostAuthor,
)
from socialhub.kernel.models.sharing import (
    SharingRecord,
    SharingMember,
    SharingScope,
    MemberRole,
)
from socialhub.kernel.models.comment import Comment
from socialhub.kernel.models.friend import Friendship, FriendRequest, FriendRequestStatus
from socialhub.kernel.models.user_list import UserList, UserListMember
from socialhub.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    "generate_uuid",
    # User
    "User",
    # Posts
    "PendingPost",
    "PendingPostAuthor",
    "PendingApproval",
    "Post",
    "PostAuthor",
    # Sharing
    "SharingRecord",
    "SharingMember",
    "SharingScope",
    "MemberRole",
    # Social
    "Comment",
    "Friendship",
    "FriendRequest",
    "FriendRequestStatus",
    "UserList",
    "UserListMember",
    # Event Log
    "EventLog",
    "EventType",
]
