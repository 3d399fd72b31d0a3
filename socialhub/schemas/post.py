"""
Post schemas. Author and approver ids are rendered as usernames.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from socialhub.schemas.sharing import SharedResourceResponse


class PostCreate(BaseModel):
    """
    Post submission. Co-authors must approve before the post is published.

    ``list_id`` authors the post as that user list: every member of the list
    becomes a co-author.
    """

    content: str = Field(..., min_length=1, max_length=10000)
    co_authors: List[str] = []
    list_id: Optional[uuid.UUID] = None
    allow_requests: bool = False
    with_access: List[str] = []
    with_access_lists: List[uuid.UUID] = []
    options: Optional[Dict[str, Any]] = None


class PostResponse(BaseModel):
    """A published or pending post."""

    id: uuid.UUID
    authors: List[str]
    content: str
    options: Optional[Dict[str, Any]] = None
    pending: bool = False
    requires_approval: List[str] = []
    created_at: datetime
    updated_at: datetime


class PostOutcomeResponse(BaseModel):
    """Result of an approval: the post in its current state."""

    msg: str
    published: bool
    post: PostResponse


class PostCreatedResponse(PostOutcomeResponse):
    sharing: SharedResourceResponse
