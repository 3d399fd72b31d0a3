"""
Common schema types used across the API.
"""

from typing import Any, List, Optional

from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    error: Optional[str] = None
    errors: Optional[List[Any]] = None
    request_id: Optional[str] = None


class MessageResponse(BaseModel):
    """Plain acknowledgement of a mutation."""

    msg: str


class HealthResponse(BaseModel):
    """Health check response."""

    status: str = "ok"
    version: str
    database: str = "connected"
