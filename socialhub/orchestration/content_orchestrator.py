"""
Content orchestrator - sequences the engines for every user-facing operation.

The engines never call each other. This layer wires them together: it keys
sharing records on post and comment ids, re-keys a post's record when the
post is published, and cascades deletes across posts, comments, sharing
records, lists and friendships. All engines share the request's session, so
a multi-step operation commits or rolls back as one unit.
"""

import uuid
from typing import Iterable, List, Optional, Sequence, Set, Tuple

from socialhub.kernel.errors import PostAccessDeniedError
from socialhub.kernel.identity.identity_service import IdentityService
from socialhub.kernel.models.comment import Comment
from socialhub.kernel.models.sharing import SharingScope
from socialhub.kernel.posts.post_service import PostService, PostSnapshot, PublishOutcome
from socialhub.kernel.sharing.sharing_service import SharedResource, SharingService
from socialhub.kernel.social.comment_service import CommentService
from socialhub.kernel.social.friend_service import FriendService
from socialhub.kernel.social.user_list_service import UserListService
from socialhub.logging_config import get_logger

logger = get_logger(__name__)


class ContentOrchestrator:
    """
    Composes the engines for one request.

    Usage:
        orchestrator = ContentOrchestrator(
            posts=PostService(session),
            post_sharing=SharingService(session, SharingScope.POSTS),
            comment_sharing=SharingService(session, SharingScope.COMMENTS),
            comments=CommentService(session),
            user_lists=UserListService(session),
            friends=FriendService(session),
            identity=IdentityService(session),
        )
    """

    def __init__(
        self,
        *,
        posts: PostService,
        post_sharing: SharingService,
        comment_sharing: SharingService,
        comments: CommentService,
        user_lists: UserListService,
        friends: FriendService,
        identity: IdentityService,
    ):
        self.posts = posts
        self.post_sharing = post_sharing
        self.comment_sharing = comment_sharing
        self.comments = comments
        self.user_lists = user_lists
        self.friends = friends
        self.identity = identity

    def sharing_for(self, scope: SharingScope) -> SharingService:
        return self.post_sharing if SharingScope(scope) == SharingScope.POSTS else self.comment_sharing

    # Posts

    async def create_post(
        self,
        author: uuid.UUID,
        content: str,
        co_authors: Sequence[uuid.UUID] = (),
        allow_requests: bool = False,
        with_access: Iterable[uuid.UUID] = (),
        options: Optional[dict] = None,
        list_id: Optional[uuid.UUID] = None,
    ) -> Tuple[PublishOutcome, SharedResource]:
        """
        Submit a post and create its sharing record.

        With ``list_id`` the post is authored by that user list: the author
        must be on the list and every other member becomes a co-author who
        has to approve it.

        Every author owns the record. The record is keyed on whatever id the
        post has after creation: the published id when it published right
        away, the pending id otherwise.
        """
        authors = [author, *co_authors]
        if list_id is not None:
            await self.user_lists.is_member(author, list_id)
            members = (await self.user_lists.get_members([list_id]))[list_id]
            authors.extend(sorted(members, key=str))

        outcome = await self.posts.create(
            authors,
            content,
            options=options,
            submitted_by=author,
        )
        record = await self.post_sharing.limit_sharing(
            outcome.post.authors,
            outcome.post.id,
            allow_requests,
            list(with_access),
        )
        return outcome, record

    async def approve_post(self, post_id: uuid.UUID, user: uuid.UUID) -> PublishOutcome:
        """Approve a pending post and move its sharing record along if it published."""
        outcome = await self.posts.approve(post_id, user)
        if outcome.published:
            await self.post_sharing.update_resource(outcome.pending_id, outcome.post.id)
        return outcome

    async def reject_post(self, post_id: uuid.UUID, user: uuid.UUID) -> str:
        msg = await self.posts.reject(post_id, user)
        await self.post_sharing.delete_by_resource_id(post_id)
        return msg

    async def delete_post(self, post_id: uuid.UUID, user: uuid.UUID) -> str:
        """
        Delete a post the user authored, with its sharing record and comments.

        A pending post is withdrawn instead.
        """
        await self.posts.is_author(user, post_id)
        await self.post_sharing.delete_by_resource_id(post_id)
        if not await self.posts.is_published(post_id):
            return await self.posts.withdraw(post_id, user)

        comment_ids = await self.comments.delete_by_targets([post_id])
        await self.comment_sharing.delete_by_resource_ids(comment_ids)
        return await self.posts.delete(post_id, user)

    async def accessible_targets(self, user: uuid.UUID) -> List[uuid.UUID]:
        """The user's id plus the ids of every list containing them."""
        return [user, *sorted(await self.user_lists.get_list_ids_containing(user), key=str)]

    async def get_accessible_posts(self, user: uuid.UUID) -> List[PostSnapshot]:
        records = await self.post_sharing.get_resources_by_accessible(await self.accessible_targets(user))
        return await self.posts.get_posts(ids=[record.resource_id for record in records])

    async def get_pending_posts(self, user: uuid.UUID) -> List[PostSnapshot]:
        return await self.posts.get_pending_posts(awaiting=user, author=user)

    async def can_see_post(self, user: uuid.UUID, post: PostSnapshot) -> bool:
        if user in post.authors:
            return True
        record = await self.post_sharing.get_by_resource_id(post.id)
        if record is None:
            return False
        return bool(record.with_access.intersection(await self.accessible_targets(user)))

    # Sharing

    async def request_access(self, scope: SharingScope, record_id: uuid.UUID, user: uuid.UUID) -> str:
        return await self.sharing_for(scope).request_access(record_id, user)

    async def grant_access(
        self,
        scope: SharingScope,
        record_id: uuid.UUID,
        owner: uuid.UUID,
        member: uuid.UUID,
        is_list: bool = False,
    ) -> str:
        sharing = self.sharing_for(scope)
        await sharing.is_owner(owner, record_id)
        if is_list:
            await self.user_lists.get(member)
        return await sharing.add_access(record_id, member, actor=owner)

    async def revoke_access(
        self,
        scope: SharingScope,
        record_id: uuid.UUID,
        owner: uuid.UUID,
        member: uuid.UUID,
    ) -> str:
        sharing = self.sharing_for(scope)
        await sharing.is_owner(owner, record_id)
        return await sharing.remove_access(record_id, member, actor=owner)

    # Comments

    async def create_comment(
        self,
        user: uuid.UUID,
        post_id: uuid.UUID,
        content: str,
        allow_requests: bool = False,
        with_access: Optional[Iterable[uuid.UUID]] = None,
    ) -> Tuple[Comment, SharedResource]:
        """
        Comment on a post the user can see.

        Without an explicit audience the comment is visible to whoever can
        see the post.

        Raises:
            PostNotFoundError: No published post with this id
            PostAccessDeniedError: The user cannot see the post
        """
        post = await self.posts.get_post(post_id)
        if not await self.can_see_post(user, post):
            raise PostAccessDeniedError(user, post_id)

        if with_access is None:
            record = await self.post_sharing.get_by_resource_id(post_id)
            audience: Set[uuid.UUID] = set(post.authors)
            if record is not None:
                audience |= record.with_access
            with_access = sorted(audience, key=str)

        comment = await self.comments.create(user, content, post_id)
        record = await self.comment_sharing.limit_sharing([user], comment.id, allow_requests, list(with_access))
        return comment, record

    async def get_comments(self, user: uuid.UUID, post_id: uuid.UUID) -> List[Comment]:
        """Comments on a post that the user may see, most recent first."""
        post = await self.posts.get_post(post_id)
        if not await self.can_see_post(user, post):
            raise PostAccessDeniedError(user, post_id)

        comments = await self.comments.get_by_target(post_id)
        if not comments:
            return []
        targets = set(await self.accessible_targets(user))
        records = await self.comment_sharing.get_resources([comment.id for comment in comments])
        visible = {record.resource_id for record in records if record.with_access & targets}
        return [comment for comment in comments if comment.id in visible or comment.author_id == user]

    async def delete_comment(self, comment_id: uuid.UUID, user: uuid.UUID) -> str:
        await self.comments.is_author(user, comment_id)
        await self.comment_sharing.delete_by_resource_id(comment_id)
        return await self.comments.delete(comment_id, user)

    # Lists

    async def delete_list(self, list_id: uuid.UUID, owner: uuid.UUID) -> str:
        """Delete a list and drop it from every access set it was granted."""
        await self.user_lists.is_owner(owner, list_id)
        await self._forget_member(list_id)
        return await self.user_lists.delete(list_id, owner)

    # Users

    async def delete_user(self, user: uuid.UUID, ip_address: Optional[str] = None) -> None:
        """
        Delete an account and everything hanging off it.

        Posts the user co-authored lose the user as an author; posts and
        records left without any author or owner are deleted along with
        their comments.
        """
        removal = await self.posts.remove_author_everywhere(user)
        await self.post_sharing.delete_by_resource_ids(removal.deleted_pending_ids + removal.deleted_post_ids)
        await self.post_sharing.remove_owner_everywhere(user)

        orphaned_comments = await self.comments.delete_by_targets(removal.deleted_post_ids)
        own_comments = await self.comments.delete_by_author(user)
        await self.comment_sharing.delete_by_resource_ids(orphaned_comments + own_comments)
        await self.comment_sharing.remove_owner_everywhere(user)

        for list_id in await self.user_lists.remove_user(user):
            await self._forget_member(list_id)
        await self._forget_member(user)

        await self.friends.remove_user(user)
        await self.identity.delete_user(user, ip_address=ip_address)

        logger.info(
            "User content removed",
            extra={
                "deleted_user_id": str(user),
                "deleted_posts": len(removal.deleted_post_ids),
                "deleted_comments": len(set(orphaned_comments) | set(own_comments)),
            },
        )

    async def _forget_member(self, member_id: uuid.UUID) -> None:
        await self.post_sharing.forget_member(member_id)
        await self.comment_sharing.forget_member(member_id)
