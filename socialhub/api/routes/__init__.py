"""
API routes.
"""

from fastapi import APIRouter

from socialhub.api.routes import users, posts, sharing, comments, friends, user_lists

router = APIRouter()

router.include_router(users.router, tags=["Users"])
router.include_router(posts.router, tags=["Posts"])
router.include_router(sharing.router, tags=["Sharing"])
router.include_router(comments.router, tags=["Comments"])
router.include_router(friends.router, tags=["Friends"])
router.include_router(user_lists.router, tags=["User Lists"])
