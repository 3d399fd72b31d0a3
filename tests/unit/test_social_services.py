"""Unit tests for comments, friends and user lists."""

import uuid

import pytest

from socialhub.kernel.errors import (
    AlreadyFriendsError,
    CommentAuthorNotMatchError,
    CommentNotFoundError,
    FriendNotFoundError,
    FriendRequestAlreadyExistsError,
    FriendRequestNotFoundError,
    SelfFriendRequestError,
    UserListMemberNotMatchError,
    UserListNotFoundError,
    UserListOwnerNotMatchError,
)
from socialhub.kernel.models.friend import FriendRequestStatus
from socialhub.kernel.social import CommentService, FriendService, UserListService


@pytest.fixture
def comments(db_session) -> CommentService:
    return CommentService(db_session)


@pytest.fixture
def friends(db_session) -> FriendService:
    return FriendService(db_session)


@pytest.fixture
def user_lists(db_session) -> UserListService:
    return UserListService(db_session)


class TestComments:

    async def test_create_and_read(self, comments: CommentService, alice):
        post_id = uuid.uuid4()
        comment = await comments.create(alice.id, "nice post", post_id)

        assert comment.author_id == alice.id
        assert comment.target_id == post_id
        assert comment.created_at is not None
        assert [c.id for c in await comments.get_by_target(post_id)] == [comment.id]

    async def test_get_by_target_restricted_to_ids(self, comments: CommentService, alice, bob):
        post_id = uuid.uuid4()
        visible = await comments.create(alice.id, "one", post_id)
        await comments.create(bob.id, "two", post_id)

        restricted = await comments.get_by_target(post_id, ids=[visible.id])

        assert [c.id for c in restricted] == [visible.id]
        assert await comments.get_by_target(post_id, ids=[]) == []

    async def test_is_author(self, comments: CommentService, alice, bob):
        comment = await comments.create(alice.id, "mine", uuid.uuid4())

        await comments.is_author(alice.id, comment.id)
        with pytest.raises(CommentAuthorNotMatchError):
            await comments.is_author(bob.id, comment.id)
        with pytest.raises(CommentNotFoundError):
            await comments.is_author(alice.id, uuid.uuid4())

    async def test_delete_is_idempotent(self, comments: CommentService, alice):
        comment = await comments.create(alice.id, "gone soon", uuid.uuid4())

        assert await comments.delete(comment.id) == await comments.delete(comment.id)
        with pytest.raises(CommentNotFoundError):
            await comments.get(comment.id)

    async def test_bulk_deletes(self, comments: CommentService, alice, bob):
        first_post, second_post = uuid.uuid4(), uuid.uuid4()
        on_first = await comments.create(bob.id, "a", first_post)
        by_alice = await comments.create(alice.id, "b", second_post)
        by_bob = await comments.create(bob.id, "c", second_post)

        assert await comments.delete_by_targets([first_post]) == [on_first.id]
        assert await comments.delete_by_author(alice.id) == [by_alice.id]
        assert [c.id for c in await comments.get_by_target(second_post)] == [by_bob.id]


class TestFriends:

    async def test_request_and_accept(self, friends: FriendService, alice, bob):
        assert await friends.send_request(alice.id, bob.id) == "Sent request!"
        assert await friends.accept_request(alice.id, bob.id) == "Accepted request!"

        assert await friends.get_friends(alice.id) == [bob.id]
        assert await friends.get_friends(bob.id) == [alice.id]
        requests = await friends.get_requests(bob.id)
        assert [r.status for r in requests] == [FriendRequestStatus.ACCEPTED.value]

    async def test_cannot_befriend_self(self, friends: FriendService, alice):
        with pytest.raises(SelfFriendRequestError):
            await friends.send_request(alice.id, alice.id)

    async def test_pending_request_blocks_both_directions(self, friends: FriendService, alice, bob):
        await friends.send_request(alice.id, bob.id)

        with pytest.raises(FriendRequestAlreadyExistsError):
            await friends.send_request(alice.id, bob.id)
        with pytest.raises(FriendRequestAlreadyExistsError):
            await friends.send_request(bob.id, alice.id)

    async def test_already_friends(self, friends: FriendService, alice, bob):
        await friends.send_request(alice.id, bob.id)
        await friends.accept_request(alice.id, bob.id)

        with pytest.raises(AlreadyFriendsError):
            await friends.send_request(bob.id, alice.id)

    async def test_reject_allows_a_new_request(self, friends: FriendService, alice, bob):
        await friends.send_request(alice.id, bob.id)
        assert await friends.reject_request(alice.id, bob.id) == "Rejected request!"

        assert await friends.get_friends(bob.id) == []
        await friends.send_request(alice.id, bob.id)

    async def test_remove_request(self, friends: FriendService, alice, bob):
        await friends.send_request(alice.id, bob.id)
        await friends.remove_request(alice.id, bob.id)

        assert await friends.get_requests(alice.id) == []
        with pytest.raises(FriendRequestNotFoundError):
            await friends.accept_request(alice.id, bob.id)

    async def test_only_recipient_direction_is_accepted(self, friends: FriendService, alice, bob):
        await friends.send_request(alice.id, bob.id)

        with pytest.raises(FriendRequestNotFoundError):
            await friends.accept_request(bob.id, alice.id)

    async def test_unfriend(self, friends: FriendService, alice, bob):
        await friends.send_request(bob.id, alice.id)
        await friends.accept_request(bob.id, alice.id)

        assert await friends.remove_friend(alice.id, bob.id) == "Unfriended!"
        assert await friends.get_friends(bob.id) == []
        with pytest.raises(FriendNotFoundError):
            await friends.remove_friend(bob.id, alice.id)

    async def test_remove_user(self, friends: FriendService, alice, bob, carol):
        await friends.send_request(alice.id, bob.id)
        await friends.accept_request(alice.id, bob.id)
        await friends.send_request(carol.id, alice.id)

        await friends.remove_user(alice.id)

        assert await friends.get_friends(bob.id) == []
        assert await friends.get_requests(carol.id) == []


class TestUserLists:

    async def test_create_with_members(self, user_lists: UserListService, alice, bob, carol):
        created = await user_lists.create(alice.id, "close friends", [bob.id, carol.id, bob.id])

        members = await user_lists.get_members([created.id])
        assert members == {created.id: {bob.id, carol.id}}
        # The owner is not implicitly a member
        assert created.id not in await user_lists.get_list_ids_containing(alice.id)
        assert await user_lists.get_list_ids_containing(bob.id) == {created.id}

    async def test_rename(self, user_lists: UserListService, alice):
        created = await user_lists.create(alice.id, "old")

        renamed = await user_lists.rename(created.id, "new")

        assert renamed.name == "new"
        with pytest.raises(UserListNotFoundError):
            await user_lists.rename(uuid.uuid4(), "nope")

    async def test_add_and_remove_member(self, user_lists: UserListService, alice, bob):
        created = await user_lists.create(alice.id, "team")

        await user_lists.add_member(created.id, bob.id)
        await user_lists.add_member(created.id, bob.id)
        assert (await user_lists.get_members([created.id]))[created.id] == {bob.id}

        await user_lists.remove_member(created.id, bob.id)
        assert (await user_lists.get_members([created.id]))[created.id] == set()

    async def test_lists_are_ordered_by_name(self, user_lists: UserListService, alice):
        await user_lists.create(alice.id, "zeta")
        await user_lists.create(alice.id, "alpha")

        assert [l.name for l in await user_lists.get_lists(alice.id)] == ["alpha", "zeta"]

    async def test_is_owner(self, user_lists: UserListService, alice, bob):
        created = await user_lists.create(alice.id, "mine")

        await user_lists.is_owner(alice.id, created.id)
        with pytest.raises(UserListOwnerNotMatchError):
            await user_lists.is_owner(bob.id, created.id)

    async def test_is_member(self, user_lists: UserListService, alice, bob):
        created = await user_lists.create(alice.id, "team", [bob.id])

        await user_lists.is_member(bob.id, created.id)
        with pytest.raises(UserListMemberNotMatchError):
            await user_lists.is_member(alice.id, created.id)
        with pytest.raises(UserListNotFoundError):
            await user_lists.is_member(bob.id, uuid.uuid4())

    async def test_delete(self, user_lists: UserListService, alice, bob):
        created = await user_lists.create(alice.id, "temp", [bob.id])

        assert await user_lists.delete(created.id, alice.id) == "List deleted!"
        with pytest.raises(UserListNotFoundError):
            await user_lists.get(created.id)
        assert await user_lists.get_list_ids_containing(bob.id) == set()

    async def test_remove_user(self, user_lists: UserListService, alice, bob):
        owned = await user_lists.create(alice.id, "alice's", [bob.id])
        member_of = await user_lists.create(bob.id, "bob's", [alice.id])

        deleted = await user_lists.remove_user(alice.id)

        assert deleted == [owned.id]
        assert (await user_lists.get_members([member_of.id]))[member_of.id] == set()
