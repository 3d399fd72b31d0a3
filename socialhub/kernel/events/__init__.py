"""
Append-only audit logging.
"""

from socialhub.kernel.events.event_store import EventStore

__all__ = [
    "EventStore",
]
