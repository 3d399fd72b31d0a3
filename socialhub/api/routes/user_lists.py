"""
User list endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from socialhub.api.deps import CurrentUser, Identity, Orchestrator
from socialhub.api.responses import Responses
from socialhub.schemas.common import MessageResponse
from socialhub.schemas.user_list import (
    UserListCreate,
    UserListMemberRequest,
    UserListResponse,
    UserListUpdate,
)

router = APIRouter(prefix="/userLists")


@router.get("", response_model=List[UserListResponse])
async def get_user_lists(
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Lists I own."""
    lists = await orchestrator.user_lists.get_lists(current_user.id)
    members = await orchestrator.user_lists.get_members(user_list.id for user_list in lists)
    return await Responses(identity).user_lists(lists, members)


@router.post("", response_model=UserListResponse, status_code=status.HTTP_201_CREATED)
async def create_user_list(
    data: UserListCreate,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    member_ids = await identity.usernames_to_ids(data.members)
    user_list = await orchestrator.user_lists.create(current_user.id, data.name, member_ids)
    members = await orchestrator.user_lists.get_members([user_list.id])
    return (await Responses(identity).user_lists([user_list], members))[0]


@router.patch("/{list_id}", response_model=UserListResponse)
async def rename_user_list(
    list_id: uuid.UUID,
    data: UserListUpdate,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    await orchestrator.user_lists.is_owner(current_user.id, list_id)
    user_list = await orchestrator.user_lists.rename(list_id, data.name)
    members = await orchestrator.user_lists.get_members([list_id])
    return (await Responses(identity).user_lists([user_list], members))[0]


@router.delete("/{list_id}", response_model=MessageResponse)
async def delete_user_list(
    list_id: uuid.UUID,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    """Delete a list; it also loses every access it was granted."""
    return MessageResponse(msg=await orchestrator.delete_list(list_id, current_user.id))


@router.post("/{list_id}/members", response_model=MessageResponse)
async def add_list_member(
    list_id: uuid.UUID,
    data: UserListMemberRequest,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    await orchestrator.user_lists.is_owner(current_user.id, list_id)
    member = await identity.get_user_by_username(data.username)
    return MessageResponse(msg=await orchestrator.user_lists.add_member(list_id, member.id))


@router.delete("/{list_id}/members", response_model=MessageResponse)
async def remove_list_member(
    list_id: uuid.UUID,
    data: UserListMemberRequest,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    await orchestrator.user_lists.is_owner(current_user.id, list_id)
    member = await identity.get_user_by_username(data.username)
    return MessageResponse(msg=await orchestrator.user_lists.remove_member(list_id, member.id))
