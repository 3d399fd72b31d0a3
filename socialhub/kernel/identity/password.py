"""
Password hashing utilities using bcrypt.
"""

from typing import Optional

import bcrypt

from socialhub.config import get_settings

# bcrypt only uses the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72


class PasswordHasher:
    """Password hashing service with a configurable work factor."""

    def __init__(self, rounds: Optional[int] = None):
        self.rounds = rounds or get_settings().bcrypt_rounds

    @staticmethod
    def _encode(password: str) -> bytes:
        return password.encode("utf-8")[:BCRYPT_MAX_BYTES]

    def hash(self, password: str) -> str:
        """Hash a password with a fresh salt."""
        salt = bcrypt.gensalt(rounds=self.rounds)
        return bcrypt.hashpw(self._encode(password), salt).decode("utf-8")

    def verify(self, plain_password: str, hashed_password: str) -> bool:
        """
        Verify a password against its hash.

        Malformed hashes verify as False rather than raising.
        """
        try:
            return bcrypt.checkpw(self._encode(plain_password), hashed_password.encode("utf-8"))
        except ValueError:
            return False

    def needs_rehash(self, hashed_password: str) -> bool:
        """Check whether a hash was produced with a different work factor."""
        # Format: $2b$XX$... where XX is the rounds
        parts = hashed_password.split("$")
        if len(parts) < 3 or not parts[2].isdigit():
            return True
        return int(parts[2]) != self.rounds
