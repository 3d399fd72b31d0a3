"""
Pytest fixtures for SocialHub tests.

The environment is configured before any socialhub module is imported so
that the application's engine points at a throwaway SQLite file.
"""

import os
import tempfile
from pathlib import Path
from typing import AsyncGenerator, Callable

_TEST_DB = Path(tempfile.gettempdir()) / f"socialhub_test_{os.getpid()}.db"

os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB}"
os.environ["SECRET_KEY"] = "test-secret-key-for-testing-only-0123456789"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["POST_AUTHOR_MODE"] = "group"
os.environ["ENVIRONMENT"] = "test"

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import get_settings

get_settings.cache_clear()

from socialhub.database import async_session_maker, drop_db, engine, init_db
from socialhub.kernel.identity.identity_service import IdentityService
from socialhub.kernel.identity.password import PasswordHasher
from socialhub.kernel.identity.session import SessionManager
from socialhub.kernel.models import User
from socialhub.kernel.models.sharing import SharingScope
from socialhub.kernel.posts.post_service import PostService
from socialhub.kernel.sharing.sharing_service import SharingService
from socialhub.kernel.social.comment_service import CommentService
from socialhub.kernel.social.friend_service import FriendService
from socialhub.kernel.social.user_list_service import UserListService
from socialhub.orchestration.content_orchestrator import ContentOrchestrator

TEST_PASSWORD = "correct horse battery staple"


@pytest_asyncio.fixture(scope="function")
async def db_engine():
    """Recreate every table for each test."""
    await drop_db()
    await init_db()

    yield engine

    await drop_db()


@pytest_asyncio.fixture(scope="function")
async def db_session(db_engine) -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session."""
    async with async_session_maker() as session:
        yield session
        await session.rollback()


@pytest.fixture
def hasher() -> PasswordHasher:
    return PasswordHasher(rounds=4)


@pytest.fixture
def session_manager() -> SessionManager:
    """Create a session manager for tests."""
    return SessionManager(
        secret_key="test-secret-key-for-testing-only",
        algorithm="HS256",
        expire_minutes=30,
    )


@pytest.fixture
def identity(db_session: AsyncSession, hasher: PasswordHasher) -> IdentityService:
    return IdentityService(db_session, hasher=hasher)


@pytest_asyncio.fixture
async def make_user(identity: IdentityService) -> Callable:
    """Factory registering users with the shared test password."""

    async def _make(username: str) -> User:
        return await identity.register_user(username, TEST_PASSWORD)

    return _make


@pytest_asyncio.fixture
async def alice(make_user) -> User:
    return await make_user("alice")


@pytest_asyncio.fixture
async def bob(make_user) -> User:
    return await make_user("bob")


@pytest_asyncio.fixture
async def carol(make_user) -> User:
    return await make_user("carol")


@pytest.fixture
def post_service(db_session: AsyncSession) -> PostService:
    return PostService(db_session, author_mode="group")


@pytest.fixture
def post_sharing(db_session: AsyncSession) -> SharingService:
    return SharingService(db_session, SharingScope.POSTS)


@pytest.fixture
def comment_sharing(db_session: AsyncSession) -> SharingService:
    return SharingService(db_session, SharingScope.COMMENTS)


@pytest.fixture
def orchestrator(
    db_session: AsyncSession,
    post_service: PostService,
    post_sharing: SharingService,
    comment_sharing: SharingService,
    identity: IdentityService,
) -> ContentOrchestrator:
    return ContentOrchestrator(
        posts=post_service,
        post_sharing=post_sharing,
        comment_sharing=comment_sharing,
        comments=CommentService(db_session),
        user_lists=UserListService(db_session),
        friends=FriendService(db_session),
        identity=identity,
    )


@pytest_asyncio.fixture
async def client_factory(db_engine) -> AsyncGenerator[Callable, None]:
    """
    Factory for HTTP clients against the app; each client keeps its own
    cookie jar, so each one can be logged in as a different user.
    """
    from socialhub.main import app

    clients = []

    def _make() -> AsyncClient:
        client = AsyncClient(transport=ASGITransport(app=app), base_url="http://test")
        clients.append(client)
        return client

    yield _make

    for client in clients:
        await client.aclose()


@pytest_asyncio.fixture
async def client(client_factory) -> AsyncClient:
    return client_factory()


@pytest.fixture
def signup_and_login() -> Callable:
    """Register a user through the API and log the given client in as them."""

    async def _signup(client: AsyncClient, username: str, password: str = TEST_PASSWORD) -> dict:
        response = await client.post("/api/users", json={"username": username, "password": password})
        assert response.status_code == 201, response.text
        response = await client.post("/api/login", json={"username": username, "password": password})
        assert response.status_code == 200, response.text
        return response.json()["user"]

    return _signup
