"""
Friend and friend request endpoints. Users are addressed by username.
"""

from typing import List

from fastapi import APIRouter

from socialhub.api.deps import CurrentUser, Identity, Orchestrator
from socialhub.api.responses import Responses
from socialhub.schemas.common import MessageResponse
from socialhub.schemas.friend import FriendRequestResponse

router = APIRouter()


@router.get("/friends", response_model=List[str])
async def get_friends(
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    friend_ids = await orchestrator.friends.get_friends(current_user.id)
    return sorted(await Responses(identity).usernames(friend_ids))


@router.delete("/friends/{friend}", response_model=MessageResponse)
async def remove_friend(
    friend: str,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    friend_id = (await identity.get_user_by_username(friend)).id
    return MessageResponse(msg=await orchestrator.friends.remove_friend(current_user.id, friend_id))


@router.get("/friend/requests", response_model=List[FriendRequestResponse])
async def get_requests(
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Friend requests I sent or received."""
    requests = await orchestrator.friends.get_requests(current_user.id)
    return await Responses(identity).friend_requests(requests)


@router.post("/friend/requests/{to}", response_model=MessageResponse)
async def send_friend_request(
    to: str,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    to_id = (await identity.get_user_by_username(to)).id
    return MessageResponse(msg=await orchestrator.friends.send_request(current_user.id, to_id))


@router.delete("/friend/requests/{to}", response_model=MessageResponse)
async def remove_friend_request(
    to: str,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    to_id = (await identity.get_user_by_username(to)).id
    return MessageResponse(msg=await orchestrator.friends.remove_request(current_user.id, to_id))


@router.put("/friend/accept/{from_username}", response_model=MessageResponse)
async def accept_friend_request(
    from_username: str,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    from_id = (await identity.get_user_by_username(from_username)).id
    return MessageResponse(msg=await orchestrator.friends.accept_request(from_id, current_user.id))


@router.put("/friend/reject/{from_username}", response_model=MessageResponse)
async def reject_friend_request(
    from_username: str,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    from_id = (await identity.get_user_by_username(from_username)).id
    return MessageResponse(msg=await orchestrator.friends.reject_request(from_id, current_user.id))
