"""
Sharing schemas.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel


class SharedResourceResponse(BaseModel):
    """
    A sharing record.

    Members that are users are listed by username; members that are user
    lists are listed by id in the ``*_lists`` fields.
    """

    id: uuid.UUID
    scope: str
    resource_id: uuid.UUID
    allow_requests: bool
    owners: List[str]
    with_access: List[str]
    with_access_lists: List[uuid.UUID] = []
    requested_access: List[str]
    created_at: datetime
    updated_at: datetime


class AccessMemberRequest(BaseModel):
    """Grant or revoke a single user."""

    username: str


class AccessListRequest(BaseModel):
    """Grant or revoke a user list."""

    list_id: uuid.UUID
