"""
Signed session tokens carried in the session cookie.
"""

import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from pydantic import BaseModel

from socialhub.config import get_settings

SESSION_TOKEN_TYPE = "session"


class SessionPayload(BaseModel):
    """Decoded session token."""

    sub: str  # User ID
    username: str
    exp: datetime
    iat: datetime
    jti: str

    @property
    def user_id(self) -> uuid.UUID:
        return uuid.UUID(self.sub)


class SessionManager:
    """
    Session token creation and verification.

    Tokens are stateless HS256 JWTs; logging out clears the cookie.
    """

    def __init__(
        self,
        secret_key: Optional[str] = None,
        algorithm: Optional[str] = None,
        expire_minutes: Optional[int] = None,
    ):
        settings = get_settings()
        self.secret_key = secret_key or settings.secret_key
        self.algorithm = algorithm or settings.algorithm
        self.expire_minutes = expire_minutes or settings.session_expire_minutes

    def create_session_token(
        self,
        user_id: uuid.UUID,
        username: str,
        expires_delta: Optional[timedelta] = None,
    ) -> tuple[str, datetime]:
        """
        Create a session token.

        Returns:
            Tuple of (token, expiration_datetime)
        """
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.expire_minutes))
        payload = {
            "sub": str(user_id),
            "username": username,
            "exp": expire,
            "iat": now,
            "jti": str(uuid.uuid4()),
            "type": SESSION_TOKEN_TYPE,
        }
        token = jwt.encode(payload, self.secret_key, algorithm=self.algorithm)
        return token, expire

    def verify_session_token(self, token: str) -> Optional[SessionPayload]:
        """
        Verify and decode a session token.

        Returns:
            SessionPayload if valid and unexpired, None otherwise
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError:
            return None

        if payload.get("type") != SESSION_TOKEN_TYPE:
            return None

        return SessionPayload(
            sub=payload["sub"],
            username=payload["username"],
            exp=datetime.fromtimestamp(payload["exp"], tz=timezone.utc),
            iat=datetime.fromtimestamp(payload["iat"], tz=timezone.utc),
            jti=payload["jti"],
        )
