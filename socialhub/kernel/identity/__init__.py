"""
Identity Core - users, passwords and session tokens.
"""

from socialhub.kernel.identity.password import PasswordHasher
from socialhub.kernel.identity.session import SessionManager, SessionPayload
from socialhub.kernel.identity.identity_service import IdentityService

__all__ = [
    "PasswordHasher",
    "SessionManager",
    "SessionPayload",
    "IdentityService",
]
