"""
FastAPI dependencies for database sessions, the session cookie and engine wiring.
"""

import uuid
from typing import Annotated, AsyncGenerator, Optional

from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import APIKeyCookie
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import get_settings
from socialhub.database import async_session_maker
from socialhub.kernel.identity.identity_service import IdentityService
from socialhub.kernel.identity.session import SessionManager, SessionPayload
from socialhub.kernel.models.sharing import SharingScope
from socialhub.kernel.models.user import User
from socialhub.kernel.posts.post_service import PostService
from socialhub.kernel.sharing.sharing_service import SharingService
from socialhub.kernel.social.comment_service import CommentService
from socialhub.kernel.social.friend_service import FriendService
from socialhub.kernel.social.user_list_service import UserListService
from socialhub.logging_config import user_id_var
from socialhub.orchestration.content_orchestrator import ContentOrchestrator

settings = get_settings()

# Session cookie; missing cookies are handled below rather than by the scheme
session_cookie = APIKeyCookie(name=settings.session_cookie_name, auto_error=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency that yields one session per request and commits it at the end."""
    async with async_session_maker() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_session_manager() -> SessionManager:
    return SessionManager()


Sessions = Annotated[SessionManager, Depends(get_session_manager)]


async def get_session_payload(
    token: Annotated[Optional[str], Depends(session_cookie)],
    sessions: Sessions,
) -> Optional[SessionPayload]:
    """Decoded session cookie, or None when absent or invalid."""
    if not token:
        return None
    return sessions.verify_session_token(token)


SessionInfo = Annotated[Optional[SessionPayload], Depends(get_session_payload)]


async def get_current_user_optional(payload: SessionInfo, db: DbSession) -> Optional[User]:
    """Get the logged-in user, or None."""
    if not payload:
        return None
    user = await IdentityService(db).get_user_by_id(payload.user_id)
    if not user or not user.is_active:
        return None
    user_id_var.set(str(user.id))
    return user


async def get_current_user(payload: SessionInfo, db: DbSession) -> User:
    """Get the logged-in user or raise 401."""
    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="You must be logged in!",
        )

    user = await IdentityService(db).get_user_by_id(payload.user_id)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Session user no longer exists",
        )
    if not user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="User account is disabled",
        )

    user_id_var.set(str(user.id))
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_current_user_optional)]


def get_identity(db: DbSession) -> IdentityService:
    return IdentityService(db)


Identity = Annotated[IdentityService, Depends(get_identity)]


def get_orchestrator(db: DbSession) -> ContentOrchestrator:
    """Build the engines for this request's session and wire them together."""
    return ContentOrchestrator(
        posts=PostService(db, author_mode=settings.post_author_mode),
        post_sharing=SharingService(db, SharingScope.POSTS),
        comment_sharing=SharingService(db, SharingScope.COMMENTS),
        comments=CommentService(db),
        user_lists=UserListService(db),
        friends=FriendService(db),
        identity=IdentityService(db),
    )


Orchestrator = Annotated[ContentOrchestrator, Depends(get_orchestrator)]


def set_session_cookie(response: Response, sessions: SessionManager, user_id: uuid.UUID, username: str) -> None:
    token, _ = sessions.create_session_token(user_id, username)
    response.set_cookie(
        key=settings.session_cookie_name,
        value=token,
        max_age=settings.session_expire_minutes * 60,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def clear_session_cookie(response: Response) -> None:
    response.delete_cookie(
        key=settings.session_cookie_name,
        httponly=True,
        samesite="lax",
        secure=settings.session_cookie_secure,
    )


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None
