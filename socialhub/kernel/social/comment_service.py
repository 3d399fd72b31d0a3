"""
Comment service - comments attached to published posts.
"""

import uuid
from typing import Iterable, List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from socialhub.kernel.errors import CommentAuthorNotMatchError, CommentNotFoundError
from socialhub.kernel.events.event_store import EventStore
from socialhub.kernel.models.comment import Comment
from socialhub.kernel.models.event_log import EventType
from socialhub.kernel.store import pull_from_set, read_set


class CommentService:
    """Service for creating, listing and deleting comments."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)

    async def create(self, author: uuid.UUID, content: str, target: uuid.UUID) -> Comment:
        comment = Comment(author_id=author, content=content, target_id=target)
        self.session.add(comment)
        await self.session.flush()
        await self.session.refresh(comment)

        await self.event_store.log(
            event_type=EventType.COMMENT_ADDED,
            entity_type="comment",
            entity_id=comment.id,
            user_id=author,
            payload={"target_id": target},
        )
        return comment

    async def get(self, comment_id: uuid.UUID) -> Comment:
        """Get a comment or raise CommentNotFoundError."""
        comment = await self.session.get(Comment, comment_id)
        if not comment:
            raise CommentNotFoundError(comment_id)
        return comment

    async def get_by_target(
        self,
        target: uuid.UUID,
        ids: Optional[Iterable[uuid.UUID]] = None,
    ) -> List[Comment]:
        """Comments on a post, most recently updated first, optionally restricted to ``ids``."""
        query = select(Comment).where(Comment.target_id == target)
        if ids is not None:
            ids = list(ids)
            if not ids:
                return []
            query = query.where(Comment.id.in_(ids))
        result = await self.session.execute(query.order_by(Comment.updated_at.desc(), Comment.created_at.desc()))
        return list(result.scalars().all())

    async def is_author(self, user: uuid.UUID, comment_id: uuid.UUID) -> None:
        comment = await self.get(comment_id)
        if comment.author_id != user:
            raise CommentAuthorNotMatchError(user, comment_id)

    async def delete(self, comment_id: uuid.UUID, user: Optional[uuid.UUID] = None) -> str:
        deleted = await pull_from_set(self.session, Comment, Comment.id == comment_id)
        if deleted:
            await self.event_store.log(
                event_type=EventType.COMMENT_DELETED,
                entity_type="comment",
                entity_id=comment_id,
                user_id=user,
            )
        return "Comment deleted successfully!"

    async def delete_by_targets(self, targets: Iterable[uuid.UUID]) -> List[uuid.UUID]:
        """Delete every comment on the given posts and return their ids."""
        targets = list(targets)
        if not targets:
            return []
        ids = await read_set(self.session, Comment.id, Comment.target_id.in_(targets))
        await pull_from_set(self.session, Comment, Comment.target_id.in_(targets))
        return sorted(ids, key=str)

    async def delete_by_author(self, author: uuid.UUID) -> List[uuid.UUID]:
        ids = await read_set(self.session, Comment.id, Comment.author_id == author)
        await pull_from_set(self.session, Comment, Comment.author_id == author)
        return sorted(ids, key=str)
