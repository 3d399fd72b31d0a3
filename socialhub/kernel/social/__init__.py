"""
Social collaborators: comments, friends and user lists.
"""

from socialhub.kernel.social.comment_service import CommentService
from socialhub.kernel.social.friend_service import FriendService
from socialhub.kernel.social.user_list_service import UserListService

__all__ = [
    "CommentService",
    "FriendService",
    "UserListService",
]
