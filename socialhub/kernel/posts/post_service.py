"""
Post Lifecycle Engine - pending -> published state machine.

A post with several authors starts as a pending post and is published only
once every co-author has approved it; a single rejection discards it. The
published post gets a new id, so callers that key anything on the pending id
must re-key it using ``PublishOutcome.pending_id``.
"""

import uuid
from datetime import datetime
from typing import Dict, FrozenSet, Iterable, List, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict
from sqlalchemy import func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.config import get_settings
from socialhub.kernel.errors import (
    ApprovalNotRequiredError,
    GroupPostsDisabledError,
    PostAuthorNotMatchError,
    PostNotFoundError,
)
from socialhub.kernel.events.event_store import EventStore
from socialhub.kernel.models.event_log import EventType
from socialhub.kernel.models.post import (
    PendingApproval,
    PendingPost,
    PendingPostAuthor,
    Post,
    PostAuthor,
)
from socialhub.kernel.store import add_many_to_set, pull_from_set, read_set
from socialhub.logging_config import get_logger

logger = get_logger(__name__)

PUBLISHED_MSG = "Post successfully published!"
PENDING_MSG = "Post is pending approval!"
STILL_PENDING_MSG = "Post approved, still pending other authors' approval."
REJECTED_MSG = "Pending post rejected, will be deleted."
DELETED_MSG = "Post deleted successfully!"
DELETED_MANY_MSG = "Posts deleted successfully!"


class PostSnapshot(BaseModel):
    """Read-only view of a pending or published post."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    authors: Tuple[uuid.UUID, ...]
    content: str
    options: Optional[dict] = None
    requires_approval: FrozenSet[uuid.UUID] = frozenset()
    pending: bool = False
    created_at: datetime
    updated_at: datetime


class PublishOutcome(BaseModel):
    """Result of create/approve: the post in its current state plus a message."""

    model_config = ConfigDict(frozen=True)

    post: PostSnapshot
    published: bool
    message: str
    # Id the post had while pending; differs from post.id once published
    pending_id: uuid.UUID


class AuthorRemoval(BaseModel):
    """Posts affected by removing a user from every author list."""

    deleted_pending_ids: List[uuid.UUID] = []
    deleted_post_ids: List[uuid.UUID] = []


def pending_row_query(pending_id: uuid.UUID, for_update: bool = False):
    """Select a pending post, optionally locking its row until the transaction ends."""
    query = select(PendingPost).where(PendingPost.id == pending_id)
    if for_update:
        query = query.with_for_update().execution_options(populate_existing=True)
    return query


class PostService:
    """
    Service for the approval-gated post lifecycle.

    Publishing happens exactly once per pending post. Approve, reject and
    withdraw lock the pending row first, so calls on one post run one after
    another, and the pending row's delete is guarded by its own row count:
    only the call that actually removed it creates the published row.
    """

    def __init__(self, session: AsyncSession, author_mode: Optional[str] = None):
        self.session = session
        self.author_mode = author_mode or get_settings().post_author_mode
        self.event_store = EventStore(session)

    async def create(
        self,
        authors: Sequence[uuid.UUID],
        content: str,
        options: Optional[dict] = None,
        submitted_by: Optional[uuid.UUID] = None,
    ) -> PublishOutcome:
        """
        Submit a post and publish it right away if nobody has to approve it.

        Args:
            authors: Ordered author ids; duplicates collapse to the first occurrence
            content: Post body
            options: Opaque presentation options stored with the post
            submitted_by: Author whose submission counts as their approval

        Raises:
            GroupPostsDisabledError: More than one author while group posts are off
        """
        ordered = list(dict.fromkeys(authors))
        if not ordered:
            raise ValueError("A post needs at least one author")
        if len(ordered) > 1 and self.author_mode == "single":
            raise GroupPostsDisabledError()

        if len(ordered) == 1:
            requires_approval = set()
        else:
            requires_approval = set(ordered) - {submitted_by}

        pending = PendingPost(content=content, options=options)
        self.session.add(pending)
        await self.session.flush()
        pending_id = pending.id

        await add_many_to_set(
            self.session,
            PendingPostAuthor,
            [
                {"pending_post_id": pending_id, "user_id": author, "position": position}
                for position, author in enumerate(ordered)
            ],
        )
        await add_many_to_set(
            self.session,
            PendingApproval,
            [{"pending_post_id": pending_id, "user_id": user} for user in requires_approval],
        )

        await self.event_store.log(
            event_type=EventType.POST_SUBMITTED,
            entity_type="post",
            entity_id=pending_id,
            user_id=submitted_by or ordered[0],
            payload={"authors": ordered, "requires_approval": requires_approval},
        )

        published = await self._publish(pending_id)
        if published:
            return PublishOutcome(post=published, published=True, message=PUBLISHED_MSG, pending_id=pending_id)

        snapshot = await self._pending_snapshot(pending_id)
        logger.info(
            "Post pending approval",
            extra={"pending_post_id": str(pending_id), "awaiting": len(requires_approval)},
        )
        return PublishOutcome(post=snapshot, published=False, message=PENDING_MSG, pending_id=pending_id)

    async def approve(self, post_id: uuid.UUID, user: uuid.UUID) -> PublishOutcome:
        """
        Record ``user``'s approval of a pending post.

        Raises:
            ApprovalNotRequiredError: The user was not awaited on this post
                (already approved, not an author, or no such pending post)
        """
        # Serialises approvals of one post so exactly one of them sees the set empty
        if not await self._get_pending_row(post_id, for_update=True):
            raise ApprovalNotRequiredError(post_id, user)
        removed = await pull_from_set(
            self.session,
            PendingApproval,
            PendingApproval.pending_post_id == post_id,
            PendingApproval.user_id == user,
        )
        if removed == 0:
            raise ApprovalNotRequiredError(post_id, user)

        await self.event_store.log(
            event_type=EventType.POST_APPROVED,
            entity_type="post",
            entity_id=post_id,
            user_id=user,
        )

        published = await self._publish(post_id)
        if published:
            return PublishOutcome(post=published, published=True, message=PUBLISHED_MSG, pending_id=post_id)
        await self.session.execute(
            update(PendingPost)
            .where(PendingPost.id == post_id)
            .values(updated_at=func.now())
            .execution_options(synchronize_session=False)
        )
        snapshot = await self._pending_snapshot(post_id)
        return PublishOutcome(post=snapshot, published=False, message=STILL_PENDING_MSG, pending_id=post_id)

    async def reject(self, post_id: uuid.UUID, user: uuid.UUID) -> str:
        """
        Discard a pending post on behalf of one of its awaited approvers.

        Raises:
            PostNotFoundError: No pending post with this id
            ApprovalNotRequiredError: The user is not awaited on this post
        """
        pending = await self._get_pending_row(post_id, for_update=True)
        if not pending:
            raise PostNotFoundError(post_id)
        awaiting = await read_set(
            self.session, PendingApproval.user_id, PendingApproval.pending_post_id == post_id
        )
        if user not in awaiting:
            raise ApprovalNotRequiredError(post_id, user)

        await self._delete_pending(post_id)
        await self.event_store.log(
            event_type=EventType.POST_REJECTED,
            entity_type="post",
            entity_id=post_id,
            user_id=user,
        )
        logger.info("Pending post rejected", extra={"pending_post_id": str(post_id)})
        return REJECTED_MSG

    async def delete(self, post_id: uuid.UUID, user: Optional[uuid.UUID] = None) -> str:
        """Delete a published post. Deleting a missing post is not an error."""
        await pull_from_set(self.session, PostAuthor, PostAuthor.post_id == post_id)
        deleted = await pull_from_set(self.session, Post, Post.id == post_id)
        if deleted:
            await self.event_store.log(
                event_type=EventType.POST_DELETED,
                entity_type="post",
                entity_id=post_id,
                user_id=user,
            )
            logger.info("Post deleted", extra={"post_id": str(post_id)})
        return DELETED_MSG

    async def withdraw(self, post_id: uuid.UUID, user: uuid.UUID) -> str:
        """
        Discard a pending post on behalf of one of its authors.

        Raises:
            PostNotFoundError: No pending post with this id
            PostAuthorNotMatchError: The user is not an author
        """
        if not await self._get_pending_row(post_id, for_update=True):
            raise PostNotFoundError(post_id)
        authors = await self._pending_authors([post_id])
        if user not in authors.get(post_id, []):
            raise PostAuthorNotMatchError(user, post_id)

        await self._delete_pending(post_id)
        await self.event_store.log(
            event_type=EventType.POST_DELETED,
            entity_type="post",
            entity_id=post_id,
            user_id=user,
            payload={"pending": True},
        )
        return DELETED_MSG

    async def is_published(self, post_id: uuid.UUID) -> bool:
        result = await self.session.execute(select(Post.id).where(Post.id == post_id))
        return result.first() is not None

    async def delete_many(self, post_ids: Iterable[uuid.UUID]) -> str:
        ids = list(post_ids)
        if ids:
            await pull_from_set(self.session, PostAuthor, PostAuthor.post_id.in_(ids))
            await pull_from_set(self.session, Post, Post.id.in_(ids))
        return DELETED_MANY_MSG

    async def is_author(self, user: uuid.UUID, post_id: uuid.UUID) -> None:
        """
        Assert that ``user`` authored the post, published or pending.

        Raises:
            PostNotFoundError: Neither a published nor a pending post has this id
            PostAuthorNotMatchError: The post exists but the user is not an author
        """
        authors = await self._published_authors([post_id])
        if post_id not in authors:
            authors = await self._pending_authors([post_id])
        if post_id not in authors:
            raise PostNotFoundError(post_id)
        if user not in authors[post_id]:
            raise PostAuthorNotMatchError(user, post_id)

    async def get_post(self, post_id: uuid.UUID) -> PostSnapshot:
        """Get a published post or raise PostNotFoundError."""
        posts = await self.get_posts(ids=[post_id])
        if not posts:
            raise PostNotFoundError(post_id)
        return posts[0]

    async def get_posts(
        self,
        author: Optional[uuid.UUID] = None,
        ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> List[PostSnapshot]:
        """Published posts, most recently updated first."""
        query = select(Post)
        if author is not None:
            query = query.where(
                Post.id.in_(select(PostAuthor.post_id).where(PostAuthor.user_id == author))
            )
        if ids is not None:
            ids = list(ids)
            if not ids:
                return []
            query = query.where(Post.id.in_(ids))
        query = query.order_by(Post.updated_at.desc(), Post.created_at.desc())

        result = await self.session.execute(query)
        rows = list(result.scalars().all())
        authors = await self._published_authors([row.id for row in rows])
        return [
            PostSnapshot(
                id=row.id,
                authors=tuple(authors.get(row.id, ())),
                content=row.content,
                options=row.options,
                created_at=row.created_at,
                updated_at=row.updated_at,
            )
            for row in rows
        ]

    async def get_pending_posts(
        self,
        awaiting: Optional[uuid.UUID] = None,
        author: Optional[uuid.UUID] = None,
    ) -> List[PostSnapshot]:
        """
        Pending posts, most recently updated first.

        With both filters given, a post matches if it awaits ``awaiting``
        or was authored by ``author``.
        """
        query = select(PendingPost)
        conditions = []
        if awaiting is not None:
            conditions.append(
                PendingPost.id.in_(
                    select(PendingApproval.pending_post_id).where(PendingApproval.user_id == awaiting)
                )
            )
        if author is not None:
            conditions.append(
                PendingPost.id.in_(
                    select(PendingPostAuthor.pending_post_id).where(PendingPostAuthor.user_id == author)
                )
            )
        if len(conditions) == 1:
            query = query.where(conditions[0])
        elif conditions:
            query = query.where(or_(*conditions))
        query = query.order_by(PendingPost.updated_at.desc(), PendingPost.created_at.desc())

        result = await self.session.execute(query)
        rows = list(result.scalars().all())
        ids = [row.id for row in rows]
        authors = await self._pending_authors(ids)
        approvals = await self._pending_approvals(ids)
        return [self._to_pending_snapshot(row, authors.get(row.id, []), approvals.get(row.id, set())) for row in rows]

    async def remove_author_everywhere(self, user: uuid.UUID) -> AuthorRemoval:
        """
        Drop ``user`` from every post.

        Pending posts the user co-authors are deleted outright. Published
        posts keep their remaining authors; those left with none are deleted.
        """
        removal = AuthorRemoval()

        pending_ids = await read_set(self.session, PendingPostAuthor.pending_post_id, PendingPostAuthor.user_id == user)
        for pending_id in pending_ids:
            await self._delete_pending(pending_id)
        removal.deleted_pending_ids = sorted(pending_ids, key=str)

        post_ids = await read_set(self.session, PostAuthor.post_id, PostAuthor.user_id == user)
        await pull_from_set(self.session, PostAuthor, PostAuthor.user_id == user)
        if post_ids:
            still_authored = await read_set(self.session, PostAuthor.post_id, PostAuthor.post_id.in_(post_ids))
            orphaned = sorted(post_ids - still_authored, key=str)
            await self.delete_many(orphaned)
            removal.deleted_post_ids = orphaned

        logger.info(
            "Author removed from posts",
            extra={
                "removed_user_id": str(user),
                "deleted_pending": len(removal.deleted_pending_ids),
                "deleted_published": len(removal.deleted_post_ids),
            },
        )
        return removal

    async def _publish(self, pending_id: uuid.UUID) -> Optional[PostSnapshot]:
        """Turn a pending post into a published one once no approvals remain."""
        awaiting = await read_set(
            self.session, PendingApproval.user_id, PendingApproval.pending_post_id == pending_id
        )
        if awaiting:
            return None

        pending = await self._get_pending_row(pending_id)
        if not pending:
            return None
        authors = (await self._pending_authors([pending_id])).get(pending_id, [])
        content, options = pending.content, pending.options

        if not await self._delete_pending(pending_id):
            # Another call already published or rejected it
            return None

        post = Post(content=content, options=options)
        self.session.add(post)
        await self.session.flush()
        await self.session.refresh(post)
        await add_many_to_set(
            self.session,
            PostAuthor,
            [
                {"post_id": post.id, "user_id": author, "position": position}
                for position, author in enumerate(authors)
            ],
        )

        await self.event_store.log(
            event_type=EventType.POST_PUBLISHED,
            entity_type="post",
            entity_id=post.id,
            payload={"pending_id": pending_id, "authors": authors},
        )
        logger.info(
            "Post published",
            extra={"post_id": str(post.id), "pending_post_id": str(pending_id)},
        )
        return PostSnapshot(
            id=post.id,
            authors=tuple(authors),
            content=post.content,
            options=post.options,
            created_at=post.created_at,
            updated_at=post.updated_at,
        )

    async def _delete_pending(self, pending_id: uuid.UUID) -> int:
        await pull_from_set(self.session, PendingApproval, PendingApproval.pending_post_id == pending_id)
        await pull_from_set(self.session, PendingPostAuthor, PendingPostAuthor.pending_post_id == pending_id)
        return await pull_from_set(self.session, PendingPost, PendingPost.id == pending_id)

    async def _get_pending_row(self, pending_id: uuid.UUID, for_update: bool = False) -> Optional[PendingPost]:
        result = await self.session.execute(pending_row_query(pending_id, for_update))
        return result.scalar_one_or_none()

    async def _pending_snapshot(self, pending_id: uuid.UUID) -> PostSnapshot:
        pending = await self._get_pending_row(pending_id)
        if not pending:
            raise PostNotFoundError(pending_id)
        await self.session.refresh(pending)
        authors = await self._pending_authors([pending_id])
        approvals = await self._pending_approvals([pending_id])
        return self._to_pending_snapshot(pending, authors.get(pending_id, []), approvals.get(pending_id, set()))

    @staticmethod
    def _to_pending_snapshot(row: PendingPost, authors: List[uuid.UUID], approvals: set) -> PostSnapshot:
        return PostSnapshot(
            id=row.id,
            authors=tuple(authors),
            content=row.content,
            options=row.options,
            requires_approval=frozenset(approvals),
            pending=True,
            created_at=row.created_at,
            updated_at=row.updated_at,
        )

    async def _published_authors(self, post_ids: List[uuid.UUID]) -> Dict[uuid.UUID, List[uuid.UUID]]:
        if not post_ids:
            return {}
        result = await self.session.execute(
            select(PostAuthor.post_id, PostAuthor.user_id)
            .where(PostAuthor.post_id.in_(post_ids))
            .order_by(PostAuthor.position)
        )
        authors: Dict[uuid.UUID, List[uuid.UUID]] = {}
        for post_id, user_id in result.all():
            authors.setdefault(post_id, []).append(user_id)
        return authors

    async def _pending_authors(self, pending_ids: List[uuid.UUID]) -> Dict[uuid.UUID, List[uuid.UUID]]:
        if not pending_ids:
            return {}
        result = await self.session.execute(
            select(PendingPostAuthor.pending_post_id, PendingPostAuthor.user_id)
            .where(PendingPostAuthor.pending_post_id.in_(pending_ids))
            .order_by(PendingPostAuthor.position)
        )
        authors: Dict[uuid.UUID, List[uuid.UUID]] = {}
        for pending_id, user_id in result.all():
            authors.setdefault(pending_id, []).append(user_id)
        return authors

    async def _pending_approvals(self, pending_ids: List[uuid.UUID]) -> Dict[uuid.UUID, set]:
        if not pending_ids:
            return {}
        result = await self.session.execute(
            select(PendingApproval.pending_post_id, PendingApproval.user_id)
            .where(PendingApproval.pending_post_id.in_(pending_ids))
        )
        approvals: Dict[uuid.UUID, set] = {}
        for pending_id, user_id in result.all():
            approvals.setdefault(pending_id, set()).add(user_id)
        return approvals
