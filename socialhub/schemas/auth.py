"""
Authentication and user schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator


def _check_username(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("Username must not be blank")
    if "/" in v:
        raise ValueError("Username must not contain '/'")
    return v


class UserCreate(BaseModel):
    """User registration request."""

    username: str = Field(..., min_length=1, max_length=64)
    password: str = Field(..., min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: str) -> str:
        return _check_username(v)


class UserLogin(BaseModel):
    """User login request."""

    username: str
    password: str


class UserUpdate(BaseModel):
    """Username and/or password change."""

    username: Optional[str] = Field(None, min_length=1, max_length=64)
    password: Optional[str] = Field(None, min_length=1, max_length=128)

    @field_validator("username")
    @classmethod
    def validate_username(cls, v: Optional[str]) -> Optional[str]:
        return _check_username(v) if v is not None else v


class UserResponse(BaseModel):
    """Public user profile."""

    id: uuid.UUID
    username: str
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True


class UserMessageResponse(BaseModel):
    msg: str
    user: UserResponse
