"""
Identity service for user management and id <-> username resolution.
"""

import uuid
from typing import Dict, Iterable, List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.kernel.errors import (
    UserIdNotFoundError,
    UserNotFoundError,
    UsernameAlreadyExistsError,
)
from socialhub.kernel.events.event_store import EventStore
from socialhub.kernel.identity.password import PasswordHasher
from socialhub.kernel.models.event_log import EventType
from socialhub.kernel.models.user import User
from socialhub.logging_config import get_logger

logger = get_logger(__name__)


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, authentication, profile changes and the
    id <-> username lookups every other layer relies on.
    """

    def __init__(self, session: AsyncSession, hasher: Optional[PasswordHasher] = None):
        self.session = session
        self.hasher = hasher or PasswordHasher()
        self.event_store = EventStore(session)

    async def register_user(
        self,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Register a new user.

        Raises:
            UsernameAlreadyExistsError: If the username is taken
        """
        username = username.strip()
        if await self.find_user_by_username(username):
            raise UsernameAlreadyExistsError(username)

        user = User(
            username=username,
            password_hash=self.hasher.hash(password),
        )
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user)

        await self.event_store.log(
            event_type=EventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"username": user.username},
            ip_address=ip_address,
        )
        logger.info("User registered", extra={"username": user.username})
        return user

    async def authenticate(
        self,
        username: str,
        password: str,
        ip_address: Optional[str] = None,
    ) -> Optional[User]:
        """
        Check credentials.

        Returns:
            The user if the credentials match an active account, None otherwise
        """
        user = await self.find_user_by_username(username)
        if not user or not user.is_active:
            return None
        if not self.hasher.verify(password, user.password_hash):
            return None

        if self.hasher.needs_rehash(user.password_hash):
            user.password_hash = self.hasher.hash(password)

        await self.event_store.log(
            event_type=EventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"method": "password"},
            ip_address=ip_address,
        )
        return user

    async def log_logout(self, user_id: uuid.UUID, ip_address: Optional[str] = None) -> None:
        await self.event_store.log(
            event_type=EventType.USER_LOGGED_OUT,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            ip_address=ip_address,
        )

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def find_user_by_username(self, username: str) -> Optional[User]:
        """Get a user by username, or None."""
        result = await self.session.execute(select(User).where(User.username == username.strip()))
        return result.scalar_one_or_none()

    async def get_user_by_username(self, username: str) -> User:
        """Get a user by username or raise UserNotFoundError."""
        user = await self.find_user_by_username(username)
        if not user:
            raise UserNotFoundError(username)
        return user

    async def list_users(self) -> List[User]:
        result = await self.session.execute(select(User).order_by(User.username))
        return list(result.scalars().all())

    async def get_username(self, user_id: uuid.UUID) -> str:
        user = await self.get_user_by_id(user_id)
        if not user:
            raise UserIdNotFoundError(user_id)
        return user.username

    async def ids_to_usernames(self, user_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, str]:
        """
        Batch id -> username lookup.

        Ids that do not belong to a user (deleted accounts, user-list ids)
        are left out of the result.
        """
        ids = set(user_ids)
        if not ids:
            return {}
        result = await self.session.execute(select(User.id, User.username).where(User.id.in_(ids)))
        return {row.id: row.username for row in result.all()}

    async def usernames_to_ids(self, usernames: Iterable[str]) -> List[uuid.UUID]:
        """
        Batch username -> id lookup preserving input order.

        Raises:
            UserNotFoundError: For the first username that does not exist
        """
        names = [name.strip() for name in usernames]
        if not names:
            return []
        result = await self.session.execute(select(User.username, User.id).where(User.username.in_(names)))
        by_name = {row.username: row.id for row in result.all()}
        for name in names:
            if name not in by_name:
                raise UserNotFoundError(name)
        return [by_name[name] for name in names]

    async def update_user(
        self,
        user_id: uuid.UUID,
        username: Optional[str] = None,
        password: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Update username and/or password.

        Raises:
            UserIdNotFoundError: If the user does not exist
            UsernameAlreadyExistsError: If the new username is taken
        """
        user = await self.get_user_by_id(user_id)
        if not user:
            raise UserIdNotFoundError(user_id)

        changes = {}
        if username is not None and username.strip() != user.username:
            username = username.strip()
            if await self.find_user_by_username(username):
                raise UsernameAlreadyExistsError(username)
            user.username = username
            changes["username"] = username

        if password is not None:
            user.password_hash = self.hasher.hash(password)
            changes["password"] = "changed"

        if changes:
            await self.session.flush()
            await self.session.refresh(user)
            await self.event_store.log(
                event_type=EventType.USER_UPDATED,
                entity_type="user",
                entity_id=user_id,
                user_id=user_id,
                payload=changes,
                ip_address=ip_address,
            )
        return user

    async def delete_user(self, user_id: uuid.UUID, ip_address: Optional[str] = None) -> None:
        """Delete the account row. Callers cascade the user's content first."""
        await self.session.execute(delete(User).where(User.id == user_id))
        await self.event_store.log(
            event_type=EventType.USER_DELETED,
            entity_type="user",
            entity_id=user_id,
            user_id=user_id,
            ip_address=ip_address,
        )
        logger.info("User deleted", extra={"deleted_user_id": str(user_id)})
