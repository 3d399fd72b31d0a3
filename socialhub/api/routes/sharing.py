"""
Sharing endpoints for post and comment access records.
"""

import uuid
from enum import Enum
from typing import List

from fastapi import APIRouter

from socialhub.api.deps import CurrentUser, Identity, Orchestrator
from socialhub.api.responses import Responses
from socialhub.kernel.models.sharing import SharingScope
from socialhub.schemas.common import MessageResponse
from socialhub.schemas.sharing import AccessListRequest, AccessMemberRequest, SharedResourceResponse

router = APIRouter(prefix="/sharing")


class ScopeName(str, Enum):
    """URL names of the sharing scopes."""
    POSTS = "posts"
    COMMENTS = "comments"

    @property
    def scope(self) -> SharingScope:
        return SharingScope.POSTS if self is ScopeName.POSTS else SharingScope.COMMENTS


@router.get("/{scope}", response_model=List[SharedResourceResponse])
async def get_owned_records(
    scope: ScopeName,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Sharing records I own in this scope."""
    records = await orchestrator.sharing_for(scope.scope).get_resources_by_owner(current_user.id)
    return await Responses(identity).shared_resources(records)


@router.post("/{scope}/{record_id}/requests", response_model=MessageResponse)
async def request_access(
    scope: ScopeName,
    record_id: uuid.UUID,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    msg = await orchestrator.request_access(scope.scope, record_id, current_user.id)
    return MessageResponse(msg=msg)


@router.post("/{scope}/{record_id}/members", response_model=MessageResponse)
async def add_member_access(
    scope: ScopeName,
    record_id: uuid.UUID,
    data: AccessMemberRequest,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Grant a user access; settles their pending request if they had one."""
    member = await identity.get_user_by_username(data.username)
    msg = await orchestrator.grant_access(scope.scope, record_id, current_user.id, member.id)
    return MessageResponse(msg=msg)


@router.delete("/{scope}/{record_id}/members", response_model=MessageResponse)
async def remove_member_access(
    scope: ScopeName,
    record_id: uuid.UUID,
    data: AccessMemberRequest,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    member = await identity.get_user_by_username(data.username)
    msg = await orchestrator.revoke_access(scope.scope, record_id, current_user.id, member.id)
    return MessageResponse(msg=msg)


@router.post("/{scope}/{record_id}/lists", response_model=MessageResponse)
async def add_list_access(
    scope: ScopeName,
    record_id: uuid.UUID,
    data: AccessListRequest,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    msg = await orchestrator.grant_access(scope.scope, record_id, current_user.id, data.list_id, is_list=True)
    return MessageResponse(msg=msg)


@router.delete("/{scope}/{record_id}/lists", response_model=MessageResponse)
async def remove_list_access(
    scope: ScopeName,
    record_id: uuid.UUID,
    data: AccessListRequest,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    msg = await orchestrator.revoke_access(scope.scope, record_id, current_user.id, data.list_id)
    return MessageResponse(msg=msg)
