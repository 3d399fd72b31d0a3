"""
Sharing Engine - per-resource access lists.

One SharingService instance governs one scope (posts or comments). A record
names its owners, the members with access (user ids or user-list ids, both
opaque here) and the members who asked for access. A member is never in both
the requested and the granted set.
"""

import uuid
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Set

from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.kernel.errors import (
    AccessAlreadyGrantedError,
    AccessDoesNotExistError,
    RequestAccessNotAllowedError,
    RequestAlreadyExistsError,
    ResourceOwnerNotMatchError,
    SharedResourceNotFoundError,
)
from socialhub.kernel.events.event_store import EventStore
from socialhub.kernel.models.event_log import EventType
from socialhub.kernel.models.sharing import MemberRole, SharingMember, SharingRecord, SharingScope
from socialhub.kernel.store import add_many_to_set, add_to_set, pull_from_set, read_set
from socialhub.logging_config import get_logger

logger = get_logger(__name__)


class SharedResource(BaseModel):
    """Read-only view of a sharing record and its member sets."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    scope: SharingScope
    resource_id: uuid.UUID
    allow_requests: bool
    owners: FrozenSet[uuid.UUID] = frozenset()
    with_access: FrozenSet[uuid.UUID] = frozenset()
    requested_access: FrozenSet[uuid.UUID] = frozenset()
    created_at: datetime
    updated_at: datetime


class SharingService:
    """
    Service for access-control records of one resource scope.

    Usage:
        post_sharing = SharingService(session, SharingScope.POSTS)
        await post_sharing.limit_sharing([author_id], post_id, True, [])
    """

    def __init__(self, session: AsyncSession, scope: SharingScope):
        self.session = session
        self.scope = SharingScope(scope)
        self.event_store = EventStore(session)

    async def limit_sharing(
        self,
        owners: Iterable[uuid.UUID],
        resource_id: uuid.UUID,
        allow_requests: bool,
        with_access: Iterable[uuid.UUID],
    ) -> SharedResource:
        """
        Create the access record for a resource.

        Owners always get access themselves.
        """
        owners = list(dict.fromkeys(owners))
        granted = list(dict.fromkeys([*with_access, *owners]))

        record = SharingRecord(scope=self.scope.value, resource_id=resource_id, allow_requests=allow_requests)
        self.session.add(record)
        await self.session.flush()
        await self.session.refresh(record)

        rows = [{"record_id": record.id, "member_id": owner, "role": MemberRole.OWNER.value} for owner in owners]
        rows += [{"record_id": record.id, "member_id": member, "role": MemberRole.WITH_ACCESS.value} for member in granted]
        await add_many_to_set(self.session, SharingMember, rows)

        await self.event_store.log(
            event_type=EventType.SHARING_CREATED,
            entity_type=self.scope.value,
            entity_id=record.id,
            user_id=owners[0] if owners else None,
            payload={"resource_id": resource_id, "allow_requests": allow_requests, "with_access": granted},
        )
        return self._to_snapshot(
            record,
            {
                MemberRole.OWNER: set(owners),
                MemberRole.WITH_ACCESS: set(granted),
            },
        )

    async def update_resource(self, old_resource_id: uuid.UUID, new_resource_id: uuid.UUID) -> int:
        """
        Point records of ``old_resource_id`` at ``new_resource_id``.

        Returns:
            Number of records re-keyed
        """
        result = await self.session.execute(
            update(SharingRecord)
            .where(
                SharingRecord.scope == self.scope.value,
                SharingRecord.resource_id == old_resource_id,
            )
            .values(resource_id=new_resource_id, updated_at=func.now())
        )
        modified = result.rowcount or 0
        if modified == 0:
            logger.warning(
                "Re-key matched no sharing record",
                extra={"scope": self.scope.value, "old_resource_id": str(old_resource_id)},
            )
        else:
            await self.event_store.log(
                event_type=EventType.SHARING_REKEYED,
                entity_type=self.scope.value,
                entity_id=new_resource_id,
                payload={"old_resource_id": old_resource_id},
            )
            logger.info(
                "Sharing record re-keyed",
                extra={
                    "scope": self.scope.value,
                    "old_resource_id": str(old_resource_id),
                    "new_resource_id": str(new_resource_id),
                },
            )
        return modified

    async def delete_by_resource_id(self, resource_id: uuid.UUID) -> str:
        """Delete the record of a resource. Deleting twice is not an error."""
        await self._delete_records(
            await read_set(
                self.session,
                SharingRecord.id,
                SharingRecord.scope == self.scope.value,
                SharingRecord.resource_id == resource_id,
            )
        )
        return "Shared resource deleted successfully!"

    async def delete_by_resource_ids(self, resource_ids: Iterable[uuid.UUID]) -> None:
        ids = list(resource_ids)
        if not ids:
            return
        await self._delete_records(
            await read_set(
                self.session,
                SharingRecord.id,
                SharingRecord.scope == self.scope.value,
                SharingRecord.resource_id.in_(ids),
            )
        )

    async def request_access(self, record_id: uuid.UUID, user: uuid.UUID) -> str:
        """
        Ask for access to a resource.

        Raises:
            SharedResourceNotFoundError: No such record in this scope
            RequestAccessNotAllowedError: The record does not take requests
            AccessAlreadyGrantedError: The user already has access
            RequestAlreadyExistsError: The user already asked
        """
        record = await self.get_record(record_id)
        if not record.allow_requests:
            raise RequestAccessNotAllowedError(record_id)
        if user in record.with_access:
            raise AccessAlreadyGrantedError(record_id, user)
        if user in record.requested_access:
            raise RequestAlreadyExistsError(record_id, user)

        added = await add_to_set(
            self.session,
            SharingMember,
            record_id=record_id,
            member_id=user,
            role=MemberRole.REQUESTED.value,
        )
        if not added:
            raise RequestAlreadyExistsError(record_id, user)
        await self.event_store.log(
            event_type=EventType.ACCESS_REQUESTED,
            entity_type=self.scope.value,
            entity_id=record_id,
            user_id=user,
        )
        return "Successfully requested access!"

    async def add_access(
        self,
        record_id: uuid.UUID,
        member: uuid.UUID,
        actor: Optional[uuid.UUID] = None,
    ) -> str:
        """
        Grant access to a user or user list, settling any pending request.

        Raises:
            SharedResourceNotFoundError: No such record in this scope
            AccessAlreadyGrantedError: The member already has access
        """
        record = await self.get_record(record_id)
        if member in record.with_access:
            raise AccessAlreadyGrantedError(record_id, member)

        if member in record.requested_access:
            await pull_from_set(
                self.session,
                SharingMember,
                SharingMember.record_id == record_id,
                SharingMember.member_id == member,
                SharingMember.role == MemberRole.REQUESTED.value,
            )
        added = await add_to_set(
            self.session,
            SharingMember,
            record_id=record_id,
            member_id=member,
            role=MemberRole.WITH_ACCESS.value,
        )
        if not added:
            raise AccessAlreadyGrantedError(record_id, member)
        await self.event_store.log(
            event_type=EventType.ACCESS_GRANTED,
            entity_type=self.scope.value,
            entity_id=record_id,
            user_id=actor,
            payload={"member_id": member},
        )
        logger.info(
            "Access granted",
            extra={"scope": self.scope.value, "record_id": str(record_id), "member_id": str(member)},
        )
        return "Successfully added access!"

    async def remove_access(
        self,
        record_id: uuid.UUID,
        member: uuid.UUID,
        actor: Optional[uuid.UUID] = None,
    ) -> str:
        """
        Revoke access. Owners are not protected: an owner can revoke their own access.

        Raises:
            SharedResourceNotFoundError: No such record in this scope
            AccessDoesNotExistError: The member has no access
        """
        record = await self.get_record(record_id)
        if member not in record.with_access:
            raise AccessDoesNotExistError(record_id, member)

        await pull_from_set(
            self.session,
            SharingMember,
            SharingMember.record_id == record_id,
            SharingMember.member_id == member,
            SharingMember.role == MemberRole.WITH_ACCESS.value,
        )
        await self.event_store.log(
            event_type=EventType.ACCESS_REVOKED,
            entity_type=self.scope.value,
            entity_id=record_id,
            user_id=actor,
            payload={"member_id": member},
        )
        logger.info(
            "Access revoked",
            extra={"scope": self.scope.value, "record_id": str(record_id), "member_id": str(member)},
        )
        return "Successfully removed access!"

    async def get_record(self, record_id: uuid.UUID) -> SharedResource:
        """Get a record by its own id or raise SharedResourceNotFoundError."""
        records = await self._load(SharingRecord.id == record_id)
        if not records:
            raise SharedResourceNotFoundError(record_id)
        return records[0]

    async def get_by_resource_id(self, resource_id: uuid.UUID) -> Optional[SharedResource]:
        records = await self._load(SharingRecord.resource_id == resource_id)
        return records[0] if records else None

    async def get_resources(self, resource_ids: Optional[Iterable[uuid.UUID]] = None) -> List[SharedResource]:
        """All records of this scope, optionally restricted to some resources."""
        if resource_ids is None:
            return await self._load()
        ids = list(resource_ids)
        if not ids:
            return []
        return await self._load(SharingRecord.resource_id.in_(ids))

    async def get_resources_by_accessible(self, targets: Iterable[uuid.UUID]) -> List[SharedResource]:
        """
        Records granting access to any of ``targets``.

        Pass the user's id together with the ids of every list containing them.
        """
        targets = list(targets)
        if not targets:
            return []
        return await self._load(
            SharingRecord.id.in_(
                select(SharingMember.record_id).where(
                    SharingMember.role == MemberRole.WITH_ACCESS.value,
                    SharingMember.member_id.in_(targets),
                )
            )
        )

    async def get_resources_by_owner(self, user: uuid.UUID) -> List[SharedResource]:
        return await self._load(
            SharingRecord.id.in_(
                select(SharingMember.record_id).where(
                    SharingMember.role == MemberRole.OWNER.value,
                    SharingMember.member_id == user,
                )
            )
        )

    async def is_owner(self, user: uuid.UUID, record_id: uuid.UUID) -> None:
        """
        Raises:
            SharedResourceNotFoundError: No such record in this scope
            ResourceOwnerNotMatchError: The user does not own the record
        """
        record = await self.get_record(record_id)
        if user not in record.owners:
            raise ResourceOwnerNotMatchError(user, record_id)

    async def remove_owner_everywhere(self, user: uuid.UUID) -> List[uuid.UUID]:
        """
        Remove ``user`` as an owner of every record in this scope.

        Records left without owners are deleted.

        Returns:
            Resource ids whose records were deleted
        """
        owned = [record.id for record in await self.get_resources_by_owner(user)]
        if not owned:
            return []
        await pull_from_set(
            self.session,
            SharingMember,
            SharingMember.record_id.in_(owned),
            SharingMember.member_id == user,
            SharingMember.role == MemberRole.OWNER.value,
        )
        still_owned = await read_set(
            self.session,
            SharingMember.record_id,
            SharingMember.record_id.in_(owned),
            SharingMember.role == MemberRole.OWNER.value,
        )
        orphaned = set(owned) - still_owned
        resources = await read_set(self.session, SharingRecord.resource_id, SharingRecord.id.in_(orphaned))
        await self._delete_records(orphaned)
        return sorted(resources, key=str)

    async def forget_member(self, member_id: uuid.UUID) -> int:
        """
        Pull a user or user-list id from every granted and requested set.

        Returns:
            Number of memberships removed
        """
        return await pull_from_set(
            self.session,
            SharingMember,
            SharingMember.member_id == member_id,
            SharingMember.role.in_([MemberRole.WITH_ACCESS.value, MemberRole.REQUESTED.value]),
            SharingMember.record_id.in_(
                select(SharingRecord.id).where(SharingRecord.scope == self.scope.value)
            ),
        )

    async def _delete_records(self, record_ids: Set[uuid.UUID]) -> None:
        if not record_ids:
            return
        await pull_from_set(self.session, SharingMember, SharingMember.record_id.in_(record_ids))
        await pull_from_set(self.session, SharingRecord, SharingRecord.id.in_(record_ids))
        for record_id in record_ids:
            await self.event_store.log(
                event_type=EventType.SHARING_DELETED,
                entity_type=self.scope.value,
                entity_id=record_id,
            )

    async def _load(self, *criteria) -> List[SharedResource]:
        result = await self.session.execute(
            select(SharingRecord)
            .where(SharingRecord.scope == self.scope.value, *criteria)
            .order_by(SharingRecord.created_at.desc())
            .execution_options(populate_existing=True)
        )
        records = list(result.scalars().all())
        if not records:
            return []

        members: Dict[uuid.UUID, Dict[MemberRole, Set[uuid.UUID]]] = {}
        rows = await self.session.execute(
            select(SharingMember.record_id, SharingMember.member_id, SharingMember.role)
            .where(SharingMember.record_id.in_([record.id for record in records]))
        )
        for record_id, member_id, role in rows.all():
            members.setdefault(record_id, {}).setdefault(MemberRole(role), set()).add(member_id)

        return [self._to_snapshot(record, members.get(record.id, {})) for record in records]

    @staticmethod
    def _to_snapshot(record: SharingRecord, members: Dict[MemberRole, Set[uuid.UUID]]) -> SharedResource:
        return SharedResource(
            id=record.id,
            scope=SharingScope(record.scope),
            resource_id=record.resource_id,
            allow_requests=record.allow_requests,
            owners=frozenset(members.get(MemberRole.OWNER, ())),
            with_access=frozenset(members.get(MemberRole.WITH_ACCESS, ())),
            requested_access=frozenset(members.get(MemberRole.REQUESTED, ())),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )
