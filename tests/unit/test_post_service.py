"""Unit tests for the post lifecycle engine."""

import uuid

import pytest
from sqlalchemy.dialects import postgresql

from socialhub.database import async_session_maker
from socialhub.kernel.errors import (
    ApprovalNotRequiredError,
    GroupPostsDisabledError,
    PostAuthorNotMatchError,
    PostNotFoundError,
)
from socialhub.kernel.posts.post_service import (
    PENDING_MSG,
    PUBLISHED_MSG,
    STILL_PENDING_MSG,
    PostService,
    pending_row_query,
)


class TestCreate:

    async def test_single_author_publishes_immediately(self, post_service: PostService, alice):
        outcome = await post_service.create([alice.id], "hello")

        assert outcome.published is True
        assert outcome.message == PUBLISHED_MSG
        assert outcome.post.pending is False
        assert outcome.post.authors == (alice.id,)
        # Published posts get a fresh id
        assert outcome.post.id != outcome.pending_id
        assert await post_service.get_pending_posts() == []
        assert [post.id for post in await post_service.get_posts()] == [outcome.post.id]

    async def test_group_post_waits_for_co_authors(self, post_service: PostService, alice, bob, carol):
        outcome = await post_service.create([alice.id, bob.id, carol.id], "group", submitted_by=alice.id)

        assert outcome.published is False
        assert outcome.message == PENDING_MSG
        assert outcome.post.pending is True
        assert outcome.post.id == outcome.pending_id
        assert outcome.post.requires_approval == frozenset({bob.id, carol.id})
        assert await post_service.get_posts() == []

    async def test_without_submitter_every_author_must_approve(self, post_service: PostService, alice, bob):
        outcome = await post_service.create([alice.id, bob.id], "group")

        assert outcome.post.requires_approval == frozenset({alice.id, bob.id})

    async def test_duplicate_authors_collapse(self, post_service: PostService, alice, bob):
        outcome = await post_service.create([alice.id, bob.id, alice.id], "dupes", submitted_by=alice.id)

        assert outcome.post.authors == (alice.id, bob.id)

    async def test_options_are_kept(self, post_service: PostService, alice):
        outcome = await post_service.create([alice.id], "styled", options={"backgroundColor": "#fff"})

        assert outcome.post.options == {"backgroundColor": "#fff"}

    async def test_no_authors_is_rejected(self, post_service: PostService):
        with pytest.raises(ValueError):
            await post_service.create([], "orphan")

    async def test_single_mode_rejects_co_authors(self, db_session, alice, bob):
        service = PostService(db_session, author_mode="single")

        with pytest.raises(GroupPostsDisabledError):
            await service.create([alice.id, bob.id], "group", submitted_by=alice.id)

        outcome = await service.create([alice.id], "solo")
        assert outcome.published is True


class TestApproval:

    async def test_all_approvals_publish(self, post_service: PostService, alice, bob, carol):
        created = await post_service.create([alice.id, bob.id, carol.id], "group", submitted_by=alice.id)

        first = await post_service.approve(created.pending_id, bob.id)
        assert first.published is False
        assert first.message == STILL_PENDING_MSG
        assert first.post.requires_approval == frozenset({carol.id})

        second = await post_service.approve(created.pending_id, carol.id)
        assert second.published is True
        assert second.message == PUBLISHED_MSG
        assert second.pending_id == created.pending_id
        assert second.post.id != created.pending_id
        assert second.post.authors == (alice.id, bob.id, carol.id)

        assert await post_service.get_pending_posts() == []
        published = await post_service.get_post(second.post.id)
        assert published.content == "group"

    async def test_double_approval_is_rejected(self, post_service: PostService, alice, bob, carol):
        created = await post_service.create([alice.id, bob.id, carol.id], "group", submitted_by=alice.id)
        await post_service.approve(created.pending_id, bob.id)

        with pytest.raises(ApprovalNotRequiredError):
            await post_service.approve(created.pending_id, bob.id)

    async def test_submitter_cannot_approve(self, post_service: PostService, alice, bob):
        created = await post_service.create([alice.id, bob.id], "group", submitted_by=alice.id)

        with pytest.raises(ApprovalNotRequiredError):
            await post_service.approve(created.pending_id, alice.id)

    async def test_non_author_cannot_approve(self, post_service: PostService, alice, bob, carol):
        created = await post_service.create([alice.id, bob.id], "group", submitted_by=alice.id)

        with pytest.raises(ApprovalNotRequiredError):
            await post_service.approve(created.pending_id, carol.id)

    async def test_approving_unknown_post(self, post_service: PostService, alice):
        with pytest.raises(ApprovalNotRequiredError):
            await post_service.approve(uuid.uuid4(), alice.id)

    async def test_approving_after_publish_fails(self, post_service: PostService, alice, bob):
        created = await post_service.create([alice.id, bob.id], "group", submitted_by=alice.id)
        await post_service.approve(created.pending_id, bob.id)

        with pytest.raises(ApprovalNotRequiredError):
            await post_service.approve(created.pending_id, bob.id)
        assert len(await post_service.get_posts()) == 1


class TestApprovalAcrossSessions:
    """Each approval in its own transaction, as concurrent requests run."""

    async def test_last_approval_publishes(self, db_session, post_service: PostService, alice, bob, carol):
        created = await post_service.create([alice.id, bob.id, carol.id], "group", submitted_by=alice.id)
        await db_session.commit()

        for approver in (bob, carol):
            async with async_session_maker() as session:
                await PostService(session, author_mode="group").approve(created.pending_id, approver.id)
                await session.commit()

        async with async_session_maker() as session:
            service = PostService(session, author_mode="group")
            assert await service.get_pending_posts() == []
            [published] = await service.get_posts()
            assert published.authors == (alice.id, bob.id, carol.id)

    def test_pending_row_is_locked(self):
        query = pending_row_query(uuid.uuid4(), for_update=True)

        assert "FOR UPDATE" in str(query.compile(dialect=postgresql.dialect()))

    def test_reads_do_not_lock(self):
        query = pending_row_query(uuid.uuid4())

        assert "FOR UPDATE" not in str(query.compile(dialect=postgresql.dialect()))


class TestReject:

    async def test_any_rejection_kills_the_post(self, post_service: PostService, alice, bob, carol):
        created = await post_service.create([alice.id, bob.id, carol.id], "group", submitted_by=alice.id)
        await post_service.approve(created.pending_id, bob.id)

        msg = await post_service.reject(created.pending_id, carol.id)

        assert "rejected" in msg
        assert await post_service.get_pending_posts() == []
        assert await post_service.get_posts() == []
        with pytest.raises(ApprovalNotRequiredError):
            await post_service.approve(created.pending_id, carol.id)

    async def test_reject_unknown_post(self, post_service: PostService, alice):
        with pytest.raises(PostNotFoundError):
            await post_service.reject(uuid.uuid4(), alice.id)

    async def test_reject_requires_pending_approval(self, post_service: PostService, alice, bob):
        created = await post_service.create([alice.id, bob.id], "group", submitted_by=alice.id)

        with pytest.raises(ApprovalNotRequiredError):
            await post_service.reject(created.pending_id, alice.id)


class TestDeleteAndAuthorship:

    async def test_delete_is_idempotent(self, post_service: PostService, alice):
        outcome = await post_service.create([alice.id], "bye")

        first = await post_service.delete(outcome.post.id)
        second = await post_service.delete(outcome.post.id)

        assert first == second
        assert await post_service.get_posts() == []

    async def test_delete_many(self, post_service: PostService, alice):
        one = await post_service.create([alice.id], "one")
        two = await post_service.create([alice.id], "two")
        keep = await post_service.create([alice.id], "three")

        await post_service.delete_many([one.post.id, two.post.id])

        assert [post.id for post in await post_service.get_posts()] == [keep.post.id]

    async def test_is_author_on_published_post(self, post_service: PostService, alice, bob):
        outcome = await post_service.create([alice.id], "mine")

        await post_service.is_author(alice.id, outcome.post.id)
        with pytest.raises(PostAuthorNotMatchError):
            await post_service.is_author(bob.id, outcome.post.id)

    async def test_is_author_on_pending_post(self, post_service: PostService, alice, bob, carol):
        created = await post_service.create([alice.id, bob.id], "ours", submitted_by=alice.id)

        await post_service.is_author(bob.id, created.pending_id)
        with pytest.raises(PostAuthorNotMatchError):
            await post_service.is_author(carol.id, created.pending_id)

    async def test_is_author_on_unknown_post(self, post_service: PostService, alice):
        with pytest.raises(PostNotFoundError):
            await post_service.is_author(alice.id, uuid.uuid4())

    async def test_withdraw_pending_post(self, post_service: PostService, alice, bob, carol):
        created = await post_service.create([alice.id, bob.id], "ours", submitted_by=alice.id)

        with pytest.raises(PostAuthorNotMatchError):
            await post_service.withdraw(created.pending_id, carol.id)
        await post_service.withdraw(created.pending_id, alice.id)

        assert await post_service.get_pending_posts() == []


class TestReads:

    async def test_get_posts_by_author(self, post_service: PostService, alice, bob):
        mine = await post_service.create([alice.id], "alice's")
        await post_service.create([bob.id], "bob's")

        posts = await post_service.get_posts(author=alice.id)

        assert [post.id for post in posts] == [mine.post.id]

    async def test_get_post_unknown(self, post_service: PostService):
        with pytest.raises(PostNotFoundError):
            await post_service.get_post(uuid.uuid4())

    async def test_get_pending_posts_filters(self, post_service: PostService, alice, bob, carol):
        awaiting_bob = await post_service.create([alice.id, bob.id], "for bob", submitted_by=alice.id)
        by_carol = await post_service.create([carol.id, alice.id], "by carol", submitted_by=carol.id)

        assert [p.id for p in await post_service.get_pending_posts(awaiting=bob.id)] == [awaiting_bob.pending_id]
        assert [p.id for p in await post_service.get_pending_posts(author=carol.id)] == [by_carol.pending_id]
        both = await post_service.get_pending_posts(awaiting=bob.id, author=carol.id)
        assert {p.id for p in both} == {awaiting_bob.pending_id, by_carol.pending_id}


class TestRemoveAuthorEverywhere:

    async def test_cascade(self, post_service: PostService, alice, bob):
        solo = await post_service.create([alice.id], "solo")
        shared = await post_service.create([alice.id, bob.id], "shared", submitted_by=alice.id)
        shared = await post_service.approve(shared.pending_id, bob.id)
        pending = await post_service.create([bob.id, alice.id], "pending", submitted_by=bob.id)

        removal = await post_service.remove_author_everywhere(alice.id)

        assert removal.deleted_post_ids == [solo.post.id]
        assert removal.deleted_pending_ids == [pending.pending_id]
        remaining = await post_service.get_posts()
        assert [post.id for post in remaining] == [shared.post.id]
        assert remaining[0].authors == (bob.id,)
        assert await post_service.get_pending_posts() == []
