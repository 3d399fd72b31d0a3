"""
Post endpoints: submission, the approval workflow and listings.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Query, status

from socialhub.api.deps import CurrentUser, Identity, Orchestrator
from socialhub.api.responses import Responses
from socialhub.schemas.common import MessageResponse
from socialhub.schemas.post import (
    PostCreate,
    PostCreatedResponse,
    PostOutcomeResponse,
    PostResponse,
)

router = APIRouter()


@router.get("/posts", response_model=List[PostResponse])
async def get_posts(
    orchestrator: Orchestrator,
    identity: Identity,
    author: Optional[str] = Query(None, description="Only posts by this username"),
):
    """Published posts, most recently updated first."""
    author_id = (await identity.get_user_by_username(author)).id if author else None
    posts = await orchestrator.posts.get_posts(author=author_id)
    return await Responses(identity).posts(posts)


@router.get("/pendingPosts", response_model=List[PostResponse])
async def get_pending_posts(
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Pending posts awaiting my approval or authored by me."""
    posts = await orchestrator.get_pending_posts(current_user.id)
    return await Responses(identity).posts(posts)


@router.get("/accessiblePosts", response_model=List[PostResponse])
async def get_accessible_posts(
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Published posts shared with me directly or through one of my lists."""
    posts = await orchestrator.get_accessible_posts(current_user.id)
    return await Responses(identity).posts(posts)


@router.post("/posts", response_model=PostCreatedResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    data: PostCreate,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """
    Submit a post.

    Without co-authors the post is published immediately; otherwise every
    co-author has to approve it first. A post for a user list I am on counts
    every member of the list as a co-author.
    """
    co_authors = await identity.usernames_to_ids(data.co_authors)
    with_access = await identity.usernames_to_ids(data.with_access)
    for list_id in data.with_access_lists:
        await orchestrator.user_lists.get(list_id)

    outcome, record = await orchestrator.create_post(
        current_user.id,
        data.content,
        co_authors=co_authors,
        allow_requests=data.allow_requests,
        with_access=[*with_access, *data.with_access_lists],
        options=data.options,
        list_id=data.list_id,
    )
    responses = Responses(identity)
    return PostCreatedResponse(
        msg=outcome.message,
        published=outcome.published,
        post=await responses.post(outcome.post),
        sharing=await responses.shared_resource(record),
    )


@router.put("/posts/{post_id}/approve", response_model=PostOutcomeResponse)
async def approve_post(
    post_id: uuid.UUID,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    outcome = await orchestrator.approve_post(post_id, current_user.id)
    return PostOutcomeResponse(
        msg=outcome.message,
        published=outcome.published,
        post=await Responses(identity).post(outcome.post),
    )


@router.put("/posts/{post_id}/reject", response_model=MessageResponse)
async def reject_post(
    post_id: uuid.UUID,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    msg = await orchestrator.reject_post(post_id, current_user.id)
    return MessageResponse(msg=msg)


@router.delete("/posts/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: uuid.UUID,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    """Delete a post I authored together with its comments and sharing record."""
    msg = await orchestrator.delete_post(post_id, current_user.id)
    return MessageResponse(msg=msg)
