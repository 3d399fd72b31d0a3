"""
Event Store service for append-only audit logging.
"""

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.kernel.models.event_log import EventLog, EventType


class EventStore:
    """
    Service for managing the immutable event log.

    Usage:
        event_store = EventStore(session)
        await event_store.log(
            event_type=EventType.POST_PUBLISHED,
            entity_type="post",
            entity_id=post.id,
            user_id=current_user.id,
            payload={"pending_id": pending_id},
        )
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        event_type: EventType,
        entity_type: str,
        entity_id: uuid.UUID,
        user_id: Optional[uuid.UUID] = None,
        payload: Optional[Dict[str, Any]] = None,
        ip_address: Optional[str] = None,
    ) -> EventLog:
        """
        Append an event to the audit log.

        Args:
            event_type: The type of event
            entity_type: The type of entity (user, post, sharing, ...)
            entity_id: The ID of the entity
            user_id: The acting user (None for system events)
            payload: Additional event data
            ip_address: Client IP address

        Returns:
            The created EventLog record (added, not flushed)
        """
        event = EventLog(
            event_type=event_type,
            entity_type=entity_type,
            entity_id=entity_id,
            user_id=user_id,
            payload=self._serialize_payload(payload) if payload else {},
            ip_address=ip_address,
        )
        self.session.add(event)
        return event

    def _serialize_payload(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """Convert payload values to JSON-serializable types."""
        result = {}
        for key, value in payload.items():
            if isinstance(value, dict):
                result[key] = self._serialize_payload(value)
            elif isinstance(value, (list, tuple, set, frozenset)):
                result[key] = [self._serialize_value(v) for v in value]
            else:
                result[key] = self._serialize_value(value)
        return result

    @staticmethod
    def _serialize_value(value: Any) -> Any:
        if isinstance(value, uuid.UUID):
            return str(value)
        if isinstance(value, datetime):
            return value.isoformat()
        return value
