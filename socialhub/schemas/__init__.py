"""
Pydantic schemas for API request/response validation.
"""

from socialhub.schemas.auth import (
    UserCreate,
    UserLogin,
    UserUpdate,
    UserResponse,
    UserMessageResponse,
)
from socialhub.schemas.post import (
    PostCreate,
    PostResponse,
    PostOutcomeResponse,
    PostCreatedResponse,
)
from socialhub.schemas.sharing import (
    SharedResourceResponse,
    AccessMemberRequest,
    AccessListRequest,
)
from socialhub.schemas.comment import (
    CommentCreate,
    CommentResponse,
    CommentCreatedResponse,
)
from socialhub.schemas.friend import FriendRequestResponse
from socialhub.schemas.user_list import (
    UserListCreate,
    UserListUpdate,
    UserListMemberRequest,
    UserListResponse,
)
from socialhub.schemas.common import (
    ErrorResponse,
    MessageResponse,
    HealthResponse,
)

__all__ = [
    # Auth
    "UserCreate",
    "UserLogin",
    "UserUpdate",
    "UserResponse",
    "UserMessageResponse",
    # Posts
    "PostCreate",
    "PostResponse",
    "PostOutcomeResponse",
    "PostCreatedResponse",
    # Sharing
    "SharedResourceResponse",
    "AccessMemberRequest",
    "AccessListRequest",
    # Comments
    "CommentCreate",
    "CommentResponse",
    "CommentCreatedResponse",
    # Friends
    "FriendRequestResponse",
    # User lists
    "UserListCreate",
    "UserListUpdate",
    "UserListMemberRequest",
    "UserListResponse",
    # Common
    "ErrorResponse",
    "MessageResponse",
    "HealthResponse",
]
