"""Unit tests for session tokens."""

import uuid
from datetime import timedelta

from jose import jwt

from socialhub.kernel.identity.session import SESSION_TOKEN_TYPE, SessionManager


class TestSessionManager:

    def test_round_trip(self, session_manager: SessionManager):
        user_id = uuid.uuid4()
        token, expire = session_manager.create_session_token(user_id, "alice")

        payload = session_manager.verify_session_token(token)

        assert payload is not None
        assert payload.user_id == user_id
        assert payload.username == "alice"
        assert payload.exp == expire.replace(microsecond=0)

    def test_expired_token_is_rejected(self, session_manager: SessionManager):
        token, _ = session_manager.create_session_token(
            uuid.uuid4(), "alice", expires_delta=timedelta(seconds=-5)
        )

        assert session_manager.verify_session_token(token) is None

    def test_wrong_secret_is_rejected(self, session_manager: SessionManager):
        token, _ = session_manager.create_session_token(uuid.uuid4(), "alice")
        other = SessionManager(secret_key="a-completely-different-secret", algorithm="HS256")

        assert other.verify_session_token(token) is None

    def test_garbage_is_rejected(self, session_manager: SessionManager):
        assert session_manager.verify_session_token("not.a.token") is None

    def test_token_of_other_type_is_rejected(self, session_manager: SessionManager):
        token, _ = session_manager.create_session_token(uuid.uuid4(), "alice")
        claims = jwt.get_unverified_claims(token)
        claims["type"] = "refresh"
        forged = jwt.encode(claims, session_manager.secret_key, algorithm="HS256")

        assert claims["type"] != SESSION_TOKEN_TYPE
        assert session_manager.verify_session_token(forged) is None
