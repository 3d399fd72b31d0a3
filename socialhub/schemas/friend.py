"""
Friend schemas.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class FriendRequestResponse(BaseModel):
    """A friend request with both ends rendered as usernames."""

    model_config = ConfigDict(populate_by_name=True)

    id: uuid.UUID
    from_user: str = Field(..., alias="from")
    to_user: str = Field(..., alias="to")
    status: str
    created_at: datetime
