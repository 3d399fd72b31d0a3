"""
Comment endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, status

from socialhub.api.deps import CurrentUser, Identity, Orchestrator
from socialhub.api.responses import Responses
from socialhub.schemas.comment import CommentCreate, CommentCreatedResponse, CommentResponse
from socialhub.schemas.common import MessageResponse

router = APIRouter()


@router.post(
    "/posts/{post_id}/comments",
    response_model=CommentCreatedResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_comment(
    post_id: uuid.UUID,
    data: CommentCreate,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Comment on a post I can see."""
    with_access = None
    if data.with_access is not None:
        with_access = await identity.usernames_to_ids(data.with_access)
    comment, record = await orchestrator.create_comment(
        current_user.id,
        post_id,
        data.content,
        allow_requests=data.allow_requests,
        with_access=with_access,
    )
    responses = Responses(identity)
    return CommentCreatedResponse(
        msg="Comment successfully created!",
        comment=await responses.comment(comment),
        sharing=await responses.shared_resource(record),
    )


@router.get("/posts/{post_id}/comments", response_model=List[CommentResponse])
async def get_comments(
    post_id: uuid.UUID,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
    identity: Identity,
):
    """Comments on a post that I may see."""
    comments = await orchestrator.get_comments(current_user.id, post_id)
    return await Responses(identity).comments(comments)


@router.delete("/comments/{comment_id}", response_model=MessageResponse)
async def delete_comment(
    comment_id: uuid.UUID,
    current_user: CurrentUser,
    orchestrator: Orchestrator,
):
    msg = await orchestrator.delete_comment(comment_id, current_user.id)
    return MessageResponse(msg=msg)
