"""
Response shaping: converts kernel records into API schemas, replacing user
ids with usernames. Every builder resolves all ids it needs in one batch.
"""

import uuid
from typing import Dict, Iterable, List, Mapping, Set

from socialhub.kernel.identity.identity_service import IdentityService
from socialhub.kernel.models.comment import Comment
from socialhub.kernel.models.friend import FriendRequest
from socialhub.kernel.models.user_list import UserList
from socialhub.kernel.posts.post_service import PostSnapshot
from socialhub.kernel.sharing.sharing_service import SharedResource
from socialhub.schemas.comment import CommentResponse
from socialhub.schemas.friend import FriendRequestResponse
from socialhub.schemas.post import PostResponse
from socialhub.schemas.sharing import SharedResourceResponse
from socialhub.schemas.user_list import UserListResponse


def _names(ids: Iterable[uuid.UUID], usernames: Mapping[uuid.UUID, str]) -> List[str]:
    # Ids of deleted users fall back to the raw id
    return [usernames.get(user_id, str(user_id)) for user_id in ids]


def _sorted_names(ids: Iterable[uuid.UUID], usernames: Mapping[uuid.UUID, str]) -> List[str]:
    return sorted(_names(ids, usernames))


class Responses:
    """Batch converters bound to one request's identity service."""

    def __init__(self, identity: IdentityService):
        self.identity = identity

    async def usernames(self, ids: Iterable[uuid.UUID]) -> List[str]:
        ids = list(ids)
        usernames = await self.identity.ids_to_usernames(ids)
        return _names(ids, usernames)

    async def post(self, post: PostSnapshot) -> PostResponse:
        return (await self.posts([post]))[0]

    async def posts(self, posts: List[PostSnapshot]) -> List[PostResponse]:
        ids: Set[uuid.UUID] = set()
        for post in posts:
            ids.update(post.authors)
            ids.update(post.requires_approval)
        usernames = await self.identity.ids_to_usernames(ids)
        return [
            PostResponse(
                id=post.id,
                authors=_names(post.authors, usernames),
                content=post.content,
                options=post.options,
                pending=post.pending,
                requires_approval=_sorted_names(post.requires_approval, usernames),
                created_at=post.created_at,
                updated_at=post.updated_at,
            )
            for post in posts
        ]

    async def shared_resource(self, record: SharedResource) -> SharedResourceResponse:
        return (await self.shared_resources([record]))[0]

    async def shared_resources(self, records: List[SharedResource]) -> List[SharedResourceResponse]:
        """
        Members that resolve to a user are shown by username; the rest of
        ``with_access`` are user lists and are shown by id.
        """
        ids: Set[uuid.UUID] = set()
        for record in records:
            ids |= record.owners | record.with_access | record.requested_access
        usernames = await self.identity.ids_to_usernames(ids)

        responses = []
        for record in records:
            users = [member for member in record.with_access if member in usernames]
            lists = [member for member in record.with_access if member not in usernames]
            responses.append(
                SharedResourceResponse(
                    id=record.id,
                    scope=record.scope.value,
                    resource_id=record.resource_id,
                    allow_requests=record.allow_requests,
                    owners=_sorted_names(record.owners, usernames),
                    with_access=_sorted_names(users, usernames),
                    with_access_lists=sorted(lists, key=str),
                    requested_access=_sorted_names(record.requested_access, usernames),
                    created_at=record.created_at,
                    updated_at=record.updated_at,
                )
            )
        return responses

    async def comment(self, comment: Comment) -> CommentResponse:
        return (await self.comments([comment]))[0]

    async def comments(self, comments: List[Comment]) -> List[CommentResponse]:
        usernames = await self.identity.ids_to_usernames(comment.author_id for comment in comments)
        return [
            CommentResponse(
                id=comment.id,
                author=usernames.get(comment.author_id, str(comment.author_id)),
                target_id=comment.target_id,
                content=comment.content,
                created_at=comment.created_at,
                updated_at=comment.updated_at,
            )
            for comment in comments
        ]

    async def friend_requests(self, requests: List[FriendRequest]) -> List[FriendRequestResponse]:
        ids = {request.from_id for request in requests} | {request.to_id for request in requests}
        usernames = await self.identity.ids_to_usernames(ids)
        return [
            FriendRequestResponse(
                id=request.id,
                from_user=usernames.get(request.from_id, str(request.from_id)),
                to_user=usernames.get(request.to_id, str(request.to_id)),
                status=request.status,
                created_at=request.created_at,
            )
            for request in requests
        ]

    async def user_lists(
        self,
        user_lists: List[UserList],
        members: Mapping[uuid.UUID, Set[uuid.UUID]],
    ) -> List[UserListResponse]:
        ids: Set[uuid.UUID] = {user_list.owner_id for user_list in user_lists}
        for member_ids in members.values():
            ids |= member_ids
        usernames: Dict[uuid.UUID, str] = await self.identity.ids_to_usernames(ids)
        return [
            UserListResponse(
                id=user_list.id,
                name=user_list.name,
                owner=usernames.get(user_list.owner_id, str(user_list.owner_id)),
                members=_sorted_names(members.get(user_list.id, set()), usernames),
                created_at=user_list.created_at,
                updated_at=user_list.updated_at,
            )
            for user_list in user_lists
        ]
