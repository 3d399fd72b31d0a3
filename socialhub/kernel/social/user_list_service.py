"""
User list service - named lists of users that can be granted access as a unit.
"""

import uuid
from typing import Dict, Iterable, List, Optional, Set

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.kernel.errors import (
    UserListMemberNotMatchError,
    UserListNotFoundError,
    UserListOwnerNotMatchError,
)
from socialhub.kernel.events.event_store import EventStore
from socialhub.kernel.models.event_log import EventType
from socialhub.kernel.models.user_list import UserList, UserListMember
from socialhub.kernel.store import add_many_to_set, add_to_set, pull_from_set, read_set


class UserListService:
    """
    Service for user lists.

    The owner is not implicitly a member of their own list.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def create(self, owner: uuid.UUID, name: str, members: Iterable[uuid.UUID] = ()) -> UserList:
        user_list = UserList(owner_id=owner, name=name)
        self.session.add(user_list)
        await self.session.flush()
        await self.session.refresh(user_list)

        member_ids = list(dict.fromkeys(members))
        await add_many_to_set(
            self.session,
            UserListMember,
            [{"list_id": user_list.id, "user_id": member} for member in member_ids],
        )
        await self.event_store.log(
            event_type=EventType.LIST_CREATED,
            entity_type="user_list",
            entity_id=user_list.id,
            user_id=owner,
            payload={"name": name, "members": member_ids},
        )
        return user_list

    async def get(self, list_id: uuid.UUID) -> UserList:
        """Get a list or raise UserListNotFoundError."""
        user_list = await self.session.get(UserList, list_id)
        if not user_list:
            raise UserListNotFoundError(list_id)
        return user_list

    async def rename(self, list_id: uuid.UUID, name: str) -> UserList:
        user_list = await self.get(list_id)
        user_list.name = name
        await self.session.flush()
        await self.session.refresh(user_list)

        await self.event_store.log(
            event_type=EventType.LIST_UPDATED,
            entity_type="user_list",
            entity_id=list_id,
            user_id=user_list.owner_id,
            payload={"name": name},
        )
        return user_list

    async def add_member(self, list_id: uuid.UUID, user: uuid.UUID) -> str:
        user_list = await self.get(list_id)
        added = await add_to_set(self.session, UserListMember, list_id=list_id, user_id=user)
        if added:
            await self.event_store.log(
                event_type=EventType.LIST_MEMBER_ADDED,
                entity_type="user_list",
                entity_id=list_id,
                user_id=user_list.owner_id,
                payload={"member_id": user},
            )
        return "List member added!"

    async def remove_member(self, list_id: uuid.UUID, user: uuid.UUID) -> str:
        user_list = await self.get(list_id)
        removed = await pull_from_set(
            self.session,
            UserListMember,
            UserListMember.list_id == list_id,
            UserListMember.user_id == user,
        )
        if removed:
            await self.event_store.log(
                event_type=EventType.LIST_MEMBER_REMOVED,
                entity_type="user_list",
                entity_id=list_id,
                user_id=user_list.owner_id,
                payload={"member_id": user},
            )
        return "List member removed!"

    async def get_lists(self, owner: uuid.UUID) -> List[UserList]:
        result = await self.session.execute(
            select(UserList).where(UserList.owner_id == owner).order_by(UserList.name)
        )
        return list(result.scalars().all())

    async def get_members(self, list_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, Set[uuid.UUID]]:
        """Member ids for each of the given lists."""
        list_ids = list(list_ids)
        members: Dict[uuid.UUID, Set[uuid.UUID]] = {list_id: set() for list_id in list_ids}
        if not list_ids:
            return members
        result = await self.session.execute(
            select(UserListMember.list_id, UserListMember.user_id).where(UserListMember.list_id.in_(list_ids))
        )
        for list_id, user_id in result.all():
            members[list_id].add(user_id)
        return members

    async def get_list_ids_containing(self, user: uuid.UUID) -> Set[uuid.UUID]:
        return await read_set(self.session, UserListMember.list_id, UserListMember.user_id == user)

    async def is_owner(self, user: uuid.UUID, list_id: uuid.UUID) -> None:
        """
        Raises:
            UserListNotFoundError: No such list
            UserListOwnerNotMatchError: The user does not own the list
        """
        user_list = await self.get(list_id)
        if user_list.owner_id != user:
            raise UserListOwnerNotMatchError(user, list_id)

    async def is_member(self, user: uuid.UUID, list_id: uuid.UUID) -> None:
        """
        Raises:
            UserListNotFoundError: No such list
            UserListMemberNotMatchError: The user is not on the list
        """
        await self.get(list_id)
        members = await read_set(
            self.session,
            UserListMember.user_id,
            UserListMember.list_id == list_id,
            UserListMember.user_id == user,
        )
        if not members:
            raise UserListMemberNotMatchError(user, list_id)

    async def delete(self, list_id: uuid.UUID, user: Optional[uuid.UUID] = None) -> str:
        await pull_from_set(self.session, UserListMember, UserListMember.list_id == list_id)
        deleted = await pull_from_set(self.session, UserList, UserList.id == list_id)
        if deleted:
            await self.event_store.log(
                event_type=EventType.LIST_DELETED,
                entity_type="user_list",
                entity_id=list_id,
                user_id=user,
            )
        return "List deleted!"

    async def remove_user(self, user: uuid.UUID) -> List[uuid.UUID]:
        """
        Remove ``user`` from every list and delete the lists they own.

        Returns:
            Ids of the deleted lists
        """
        await pull_from_set(self.session, UserListMember, UserListMember.user_id == user)
        owned = await read_set(self.session, UserList.id, UserList.owner_id == user)
        for list_id in owned:
            await self.delete(list_id, user)
        return sorted(owned, key=str)
