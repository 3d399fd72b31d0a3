"""
Friend service - friend requests and the friendships they turn into.
"""

import uuid
from typing import List, Tuple

from sqlalchemy import and_, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.kernel.errors import (
    AlreadyFriendsError,
    FriendNotFoundError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    SelfFriendRequestError,
)
from socialhub.kernel.events.event_store import EventStore
from socialhub.kernel.models.event_log import EventType
from socialhub.kernel.models.friend import FriendRequest, FriendRequestStatus, Friendship
from socialhub.kernel.store import add_to_set, pull_from_set


def _ordered_pair(user1: uuid.UUID, user2: uuid.UUID) -> Tuple[uuid.UUID, uuid.UUID]:
    return (user1, user2) if str(user1) < str(user2) else (user2, user1)


class FriendService:
    """
    Service for the friend graph.

    A friendship is stored once per pair; requests keep their history with
    an accepted/rejected status once answered.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def send_request(self, from_id: uuid.UUID, to_id: uuid.UUID) -> str:
        """
        Raises:
            SelfFriendRequestError: Sender and recipient are the same user
            AlreadyFriendsError: The users are already friends
            FriendRequestAlreadyExistsError: A pending request exists in either direction
        """
        if from_id == to_id:
            raise SelfFriendRequestError()
        if await self._are_friends(from_id, to_id):
            raise AlreadyFriendsError(from_id, to_id)
        if await self._pending_between(from_id, to_id):
            raise FriendRequestAlreadyExistsError(from_id, to_id)

        request = FriendRequest(from_id=from_id, to_id=to_id, status=FriendRequestStatus.PENDING.value)
        self.session.add(request)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.FRIEND_REQUEST_SENT,
            entity_type="friend_request",
            entity_id=request.id,
            user_id=from_id,
            payload={"to_id": to_id},
        )
        return "Sent request!"

    async def remove_request(self, from_id: uuid.UUID, to_id: uuid.UUID) -> str:
        """Withdraw a pending request the caller sent."""
        request = await self._get_pending(from_id, to_id)
        await pull_from_set(self.session, FriendRequest, FriendRequest.id == request.id)
        await self.event_store.log(
            event_type=EventType.FRIEND_REQUEST_REMOVED,
            entity_type="friend_request",
            entity_id=request.id,
            user_id=from_id,
        )
        return "Removed request!"

    async def accept_request(self, from_id: uuid.UUID, to_id: uuid.UUID) -> str:
        request = await self._get_pending(from_id, to_id)
        request.status = FriendRequestStatus.ACCEPTED.value

        user1, user2 = _ordered_pair(from_id, to_id)
        await add_to_set(self.session, Friendship, user1_id=user1, user2_id=user2)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.FRIEND_REQUEST_ACCEPTED,
            entity_type="friend_request",
            entity_id=request.id,
            user_id=to_id,
        )
        return "Accepted request!"

    async def reject_request(self, from_id: uuid.UUID, to_id: uuid.UUID) -> str:
        request = await self._get_pending(from_id, to_id)
        request.status = FriendRequestStatus.REJECTED.value
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.FRIEND_REQUEST_REJECTED,
            entity_type="friend_request",
            entity_id=request.id,
            user_id=to_id,
        )
        return "Rejected request!"

    async def get_requests(self, user: uuid.UUID) -> List[FriendRequest]:
        """Requests sent or received by ``user``, newest first."""
        result = await self.session.execute(
            select(FriendRequest)
            .where(or_(FriendRequest.from_id == user, FriendRequest.to_id == user))
            .order_by(FriendRequest.created_at.desc())
        )
        return list(result.scalars().all())

    async def get_friends(self, user: uuid.UUID) -> List[uuid.UUID]:
        result = await self.session.execute(
            select(Friendship.user1_id, Friendship.user2_id).where(
                or_(Friendship.user1_id == user, Friendship.user2_id == user)
            )
        )
        return [user2 if user1 == user else user1 for user1, user2 in result.all()]

    async def remove_friend(self, user: uuid.UUID, friend: uuid.UUID) -> str:
        user1, user2 = _ordered_pair(user, friend)
        removed = await pull_from_set(
            self.session,
            Friendship,
            Friendship.user1_id == user1,
            Friendship.user2_id == user2,
        )
        if removed == 0:
            raise FriendNotFoundError(user, friend)

        await self.event_store.log(
            event_type=EventType.FRIEND_REMOVED,
            entity_type="user",
            entity_id=friend,
            user_id=user,
        )
        return "Unfriended!"

    async def remove_user(self, user: uuid.UUID) -> None:
        """Drop every friendship and request involving ``user``."""
        await pull_from_set(
            self.session,
            Friendship,
            or_(Friendship.user1_id == user, Friendship.user2_id == user),
        )
        await pull_from_set(
            self.session,
            FriendRequest,
            or_(FriendRequest.from_id == user, FriendRequest.to_id == user),
        )

    async def _are_friends(self, user1: uuid.UUID, user2: uuid.UUID) -> bool:
        first, second = _ordered_pair(user1, user2)
        result = await self.session.execute(
            select(Friendship.id).where(Friendship.user1_id == first, Friendship.user2_id == second)
        )
        return result.first() is not None

    async def _pending_between(self, user1: uuid.UUID, user2: uuid.UUID) -> bool:
        result = await self.session.execute(
            select(FriendRequest.id).where(
                FriendRequest.status == FriendRequestStatus.PENDING.value,
                or_(
                    and_(FriendRequest.from_id == user1, FriendRequest.to_id == user2),
                    and_(FriendRequest.from_id == user2, FriendRequest.to_id == user1),
                ),
            )
        )
        return result.first() is not None

    async def _get_pending(self, from_id: uuid.UUID, to_id: uuid.UUID) -> FriendRequest:
        result = await self.session.execute(
            select(FriendRequest).where(
                FriendRequest.from_id == from_id,
                FriendRequest.to_id == to_id,
                FriendRequest.status == FriendRequestStatus.PENDING.value,
            )
        )
        request = result.scalars().first()
        if not request:
            raise FriendRequestNotFoundError(from_id, to_id)
        return request
