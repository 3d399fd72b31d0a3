"""
User-facing rendering of kernel errors.

Kernel errors carry raw user ids. Before an error reaches the client, the
ids it names are looked up and substituted by usernames through the static
ERROR_FORMATTERS table; errors missing from the table keep their raw text.
"""

import uuid
from typing import Callable, Dict, Mapping, Type

from socialhub.database import async_session_maker
from socialhub.kernel.errors import (
    AccessAlreadyGrantedError,
    AccessDoesNotExistError,
    AlreadyFriendsError,
    ApprovalNotRequiredError,
    CommentAuthorNotMatchError,
    DomainError,
    FriendNotFoundError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    PostAccessDeniedError,
    PostAuthorNotMatchError,
    RequestAlreadyExistsError,
    ResourceOwnerNotMatchError,
    UserListMemberNotMatchError,
    UserListOwnerNotMatchError,
)
from socialhub.kernel.identity.identity_service import IdentityService
from socialhub.logging_config import get_logger

logger = get_logger(__name__)

NameOf = Callable[[uuid.UUID], str]
Formatter = Callable[[DomainError, NameOf], str]

ERROR_FORMATTERS: Dict[Type[DomainError], Formatter] = {
    PostAuthorNotMatchError: lambda e, name: e.format_with(name(e.user_id), e.post_id),
    ApprovalNotRequiredError: lambda e, name: e.format_with(name(e.user_id), e.post_id),
    PostAccessDeniedError: lambda e, name: e.format_with(name(e.user_id), e.post_id),
    AccessAlreadyGrantedError: lambda e, name: e.format_with(name(e.user_id), e.record_id),
    RequestAlreadyExistsError: lambda e, name: e.format_with(name(e.user_id), e.record_id),
    AccessDoesNotExistError: lambda e, name: e.format_with(name(e.user_id), e.record_id),
    ResourceOwnerNotMatchError: lambda e, name: e.format_with(name(e.user_id), e.record_id),
    CommentAuthorNotMatchError: lambda e, name: e.format_with(name(e.user_id), e.comment_id),
    UserListOwnerNotMatchError: lambda e, name: e.format_with(name(e.user_id), e.list_id),
    UserListMemberNotMatchError: lambda e, name: e.format_with(name(e.user_id), e.list_id),
    FriendRequestAlreadyExistsError: lambda e, name: e.format_with(name(e.from_id), name(e.to_id)),
    FriendRequestNotFoundError: lambda e, name: e.format_with(name(e.from_id), name(e.to_id)),
    AlreadyFriendsError: lambda e, name: e.format_with(name(e.user1_id), name(e.user2_id)),
    FriendNotFoundError: lambda e, name: e.format_with(name(e.user1_id), name(e.user2_id)),
}


def format_error(error: DomainError, usernames: Mapping[uuid.UUID, str]) -> str:
    """Render ``error`` with the given id -> username table; unknown ids stay raw."""
    formatter = ERROR_FORMATTERS.get(type(error))
    if formatter is None:
        return str(error)

    def name(user_id: uuid.UUID) -> str:
        return usernames.get(user_id, str(user_id))

    return formatter(error, name)


async def render_error(error: DomainError) -> str:
    """
    Resolve the usernames an error refers to and store the rendered message on it.

    Uses its own session: the request's session has been rolled back by the
    time the error is rendered.
    """
    if error.rendered is not None:
        return error.rendered

    usernames: Dict[uuid.UUID, str] = {}
    user_ids = error.user_ids()
    if user_ids and type(error) in ERROR_FORMATTERS:
        async with async_session_maker() as session:
            usernames = await IdentityService(session).ids_to_usernames(user_ids)

    error.rendered = format_error(error, usernames)
    return error.rendered
