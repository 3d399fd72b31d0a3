"""
Comment schemas.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from socialhub.schemas.sharing import SharedResourceResponse


class CommentCreate(BaseModel):
    """
    Comment creation request.

    Leave ``with_access`` unset to show the comment to everyone who can see
    the post.
    """

    content: str = Field(..., min_length=1, max_length=5000)
    allow_requests: bool = False
    with_access: Optional[List[str]] = None


class CommentResponse(BaseModel):
    id: uuid.UUID
    author: str
    target_id: uuid.UUID
    content: str
    created_at: datetime
    updated_at: datetime


class CommentCreatedResponse(BaseModel):
    msg: str
    comment: CommentResponse
    sharing: SharedResourceResponse
