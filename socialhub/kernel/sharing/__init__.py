"""
Sharing Engine.
"""

from socialhub.kernel.sharing.sharing_service import SharedResource, SharingService

__all__ = [
    "SharedResource",
    "SharingService",
]
