"""
User list schemas.
"""

import uuid
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field


class UserListCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    members: List[str] = []


class UserListUpdate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)


class UserListMemberRequest(BaseModel):
    username: str


class UserListResponse(BaseModel):
    """A user list; the owner is not implicitly a member."""

    id: uuid.UUID
    name: str
    owner: str
    members: List[str]
    created_at: datetime
    updated_at: datetime
