"""
Post Lifecycle Engine.
"""

from socialhub.kernel.posts.post_service import (
    AuthorRemoval,
    PostService,
    PostSnapshot,
    PublishOutcome,
)

__all__ = [
    "AuthorRemoval",
    "PostService",
    "PostSnapshot",
    "PublishOutcome",
]
