"""
System tests: the HTTP API end to end.

Each user gets their own client so each keeps its own session cookie.
"""

import pytest_asyncio
from httpx import AsyncClient

from socialhub.config import get_settings

API = get_settings().api_prefix


@pytest_asyncio.fixture
async def users(client_factory, signup_and_login):
    """Three logged-in clients keyed by username."""
    clients = {}
    for name in ("alice", "bob", "carol"):
        client = client_factory()
        await signup_and_login(client, name)
        clients[name] = client
    return clients


class TestHealth:

    async def test_health(self, client: AsyncClient):
        response = await client.get("/health")

        assert response.status_code == 200
        assert response.json()["status"] == "ok"

    async def test_request_id_header(self, client: AsyncClient):
        response = await client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    async def test_openapi_documents_errors(self, client: AsyncClient):
        schema = (await client.get("/openapi.json")).json()

        assert "ErrorResponse" in schema["components"]["schemas"]
        assert "403" in schema["paths"][f"{API}/posts"]["post"]["responses"]


class TestSessions:

    async def test_signup_login_session_logout(self, client: AsyncClient, signup_and_login):
        user = await signup_and_login(client, "alice")
        assert user["username"] == "alice"

        session = await client.get(f"{API}/session")
        assert session.status_code == 200
        assert session.json()["username"] == "alice"

        logout = await client.post(f"{API}/logout")
        assert logout.json()["msg"] == "Logged out!"
        assert (await client.get(f"{API}/session")).status_code == 401

    async def test_must_be_logged_in(self, client: AsyncClient):
        response = await client.get(f"{API}/accessiblePosts")

        assert response.status_code == 401
        assert response.json()["detail"] == "You must be logged in!"

    async def test_cannot_login_twice(self, client: AsyncClient, signup_and_login):
        await signup_and_login(client, "alice")

        response = await client.post(
            f"{API}/login", json={"username": "alice", "password": "correct horse battery staple"}
        )

        assert response.status_code == 403
        assert response.json()["detail"] == "You must be logged out!"

    async def test_wrong_password(self, client: AsyncClient):
        await client.post(f"{API}/users", json={"username": "alice", "password": "correct horse battery staple"})

        response = await client.post(f"{API}/login", json={"username": "alice", "password": "wrong password"})

        assert response.status_code == 401

    async def test_duplicate_username(self, client_factory, signup_and_login):
        await signup_and_login(client_factory(), "alice")

        response = await client_factory().post(
            f"{API}/users", json={"username": "alice", "password": "another password"}
        )

        assert response.status_code == 409
        assert response.json()["error"] == "UsernameAlreadyExistsError"

    async def test_rename_keeps_session(self, client: AsyncClient, signup_and_login):
        await signup_and_login(client, "alice")

        response = await client.patch(f"{API}/users", json={"username": "alicia"})

        assert response.status_code == 200
        assert (await client.get(f"{API}/session")).json()["username"] == "alicia"

    async def test_delete_account(self, users):
        alice = users["alice"]
        await alice.post(f"{API}/posts", json={"content": "soon gone"})

        response = await alice.delete(f"{API}/users")

        assert response.status_code == 200
        assert (await users["bob"].get(f"{API}/users/alice")).status_code == 404
        assert (await users["bob"].get(f"{API}/posts")).json() == []


class TestPosts:

    async def test_single_author_post(self, users):
        response = await users["alice"].post(
            f"{API}/posts", json={"content": "hello", "with_access": ["bob"]}
        )

        assert response.status_code == 201
        body = response.json()
        assert body["published"] is True
        assert body["msg"] == "Post successfully published!"
        assert body["post"]["authors"] == ["alice"]
        assert sorted(body["sharing"]["with_access"]) == ["alice", "bob"]

        bob_feed = (await users["bob"].get(f"{API}/accessiblePosts")).json()
        assert [post["id"] for post in bob_feed] == [body["post"]["id"]]
        assert (await users["carol"].get(f"{API}/accessiblePosts")).json() == []

    async def test_group_post_approval(self, users):
        created = await users["alice"].post(
            f"{API}/posts", json={"content": "ours", "co_authors": ["bob"]}
        )
        body = created.json()
        assert body["published"] is False
        assert body["post"]["requires_approval"] == ["bob"]
        pending_id = body["post"]["id"]

        pending = (await users["bob"].get(f"{API}/pendingPosts")).json()
        assert [post["id"] for post in pending] == [pending_id]

        # Only awaited approvers may approve; the error names users, not ids
        denied = await users["carol"].put(f"{API}/posts/{pending_id}/approve")
        assert denied.status_code == 403
        assert denied.json()["detail"].startswith("carol is not an approver of post")

        approved = await users["bob"].put(f"{API}/posts/{pending_id}/approve")
        assert approved.status_code == 200
        result = approved.json()
        assert result["published"] is True
        assert result["post"]["id"] != pending_id
        assert result["post"]["authors"] == ["alice", "bob"]

        sharing = (await users["alice"].get(f"{API}/sharing/posts")).json()
        assert [record["resource_id"] for record in sharing] == [result["post"]["id"]]

    async def test_reject(self, users):
        created = await users["alice"].post(
            f"{API}/posts", json={"content": "nah", "co_authors": ["bob"]}
        )
        pending_id = created.json()["post"]["id"]

        rejected = await users["bob"].put(f"{API}/posts/{pending_id}/reject")

        assert rejected.status_code == 200
        assert (await users["alice"].get(f"{API}/pendingPosts")).json() == []
        assert (await users["alice"].get(f"{API}/sharing/posts")).json() == []

    async def test_unknown_co_author(self, users):
        response = await users["alice"].post(
            f"{API}/posts", json={"content": "ghost", "co_authors": ["nobody"]}
        )

        assert response.status_code == 404
        assert response.json()["detail"] == "User nobody does not exist!"

    async def test_delete_post(self, users):
        created = await users["alice"].post(f"{API}/posts", json={"content": "temp"})
        post_id = created.json()["post"]["id"]

        forbidden = await users["bob"].delete(f"{API}/posts/{post_id}")
        assert forbidden.status_code == 403

        deleted = await users["alice"].delete(f"{API}/posts/{post_id}")
        assert deleted.json()["msg"] == "Post deleted successfully!"
        assert (await users["alice"].get(f"{API}/posts")).json() == []


    async def test_post_for_a_user_list(self, users):
        crew = (
            await users["alice"].post(f"{API}/userLists", json={"name": "crew", "members": ["bob", "carol"]})
        ).json()

        outsider = await users["alice"].post(f"{API}/posts", json={"content": "crew news", "list_id": crew["id"]})
        assert outsider.status_code == 403
        assert outsider.json()["detail"] == f"alice is not a member of user list {crew['id']}!"

        created = await users["bob"].post(f"{API}/posts", json={"content": "crew news", "list_id": crew["id"]})
        assert created.status_code == 201
        body = created.json()
        assert body["published"] is False
        assert body["post"]["requires_approval"] == ["carol"]

        approved = await users["carol"].put(f"{API}/posts/{body['post']['id']}/approve")
        assert approved.json()["published"] is True
        assert approved.json()["post"]["authors"] == ["bob", "carol"]


class TestSharingAndComments:

    async def test_request_and_grant(self, users):
        created = await users["alice"].post(
            f"{API}/posts", json={"content": "ask first", "allow_requests": True}
        )
        record_id = created.json()["sharing"]["id"]

        requested = await users["bob"].post(f"{API}/sharing/posts/{record_id}/requests")
        assert requested.json()["msg"] == "Successfully requested access!"

        records = (await users["alice"].get(f"{API}/sharing/posts")).json()
        assert records[0]["requested_access"] == ["bob"]

        granted = await users["alice"].post(
            f"{API}/sharing/posts/{record_id}/members", json={"username": "bob"}
        )
        assert granted.json()["msg"] == "Successfully added access!"
        record = (await users["alice"].get(f"{API}/sharing/posts")).json()[0]
        assert record["requested_access"] == []
        assert sorted(record["with_access"]) == ["alice", "bob"]

        revoked = await users["alice"].request(
            "DELETE", f"{API}/sharing/posts/{record_id}/members", json={"username": "bob"}
        )
        assert revoked.json()["msg"] == "Successfully removed access!"

    async def test_closed_record_refuses_requests(self, users):
        created = await users["alice"].post(f"{API}/posts", json={"content": "closed"})
        record_id = created.json()["sharing"]["id"]

        response = await users["bob"].post(f"{API}/sharing/posts/{record_id}/requests")

        assert response.status_code == 403
        assert response.json()["error"] == "RequestAccessNotAllowedError"

    async def test_comments(self, users):
        created = await users["alice"].post(
            f"{API}/posts", json={"content": "thoughts?", "with_access": ["bob"]}
        )
        post_id = created.json()["post"]["id"]

        comment = await users["bob"].post(f"{API}/posts/{post_id}/comments", json={"content": "yes"})
        assert comment.status_code == 201
        assert comment.json()["comment"]["author"] == "bob"

        listed = (await users["alice"].get(f"{API}/posts/{post_id}/comments")).json()
        assert [c["content"] for c in listed] == ["yes"]

        hidden = await users["carol"].get(f"{API}/posts/{post_id}/comments")
        assert hidden.status_code == 403
        assert hidden.json()["detail"].startswith("carol cannot see post")

        comment_id = comment.json()["comment"]["id"]
        assert (await users["alice"].delete(f"{API}/comments/{comment_id}")).status_code == 403
        assert (await users["bob"].delete(f"{API}/comments/{comment_id}")).status_code == 200


class TestFriendsAndLists:

    async def test_friend_flow(self, users):
        sent = await users["alice"].post(f"{API}/friend/requests/bob")
        assert sent.json()["msg"] == "Sent request!"

        requests = (await users["bob"].get(f"{API}/friend/requests")).json()
        assert requests[0]["from"] == "alice"
        assert requests[0]["to"] == "bob"

        duplicate = await users["bob"].post(f"{API}/friend/requests/alice")
        assert duplicate.status_code == 409
        assert duplicate.json()["detail"] == "Friend request between bob and alice already exists!"

        accepted = await users["bob"].put(f"{API}/friend/accept/alice")
        assert accepted.json()["msg"] == "Accepted request!"
        assert (await users["alice"].get(f"{API}/friends")).json() == ["bob"]

        unfriended = await users["alice"].delete(f"{API}/friends/bob")
        assert unfriended.json()["msg"] == "Unfriended!"
        assert (await users["bob"].get(f"{API}/friends")).json() == []

    async def test_user_list_grants_access(self, users):
        created = await users["alice"].post(f"{API}/userLists", json={"name": "team", "members": ["carol"]})
        assert created.status_code == 201
        user_list = created.json()
        assert user_list["owner"] == "alice"
        assert user_list["members"] == ["carol"]

        post = await users["alice"].post(
            f"{API}/posts", json={"content": "team news", "with_access_lists": [user_list["id"]]}
        )
        assert post.json()["sharing"]["with_access_lists"] == [user_list["id"]]
        assert len((await users["carol"].get(f"{API}/accessiblePosts")).json()) == 1

        foreign = await users["bob"].delete(f"{API}/userLists/{user_list['id']}")
        assert foreign.status_code == 403

        deleted = await users["alice"].delete(f"{API}/userLists/{user_list['id']}")
        assert deleted.json()["msg"] == "List deleted!"
        assert (await users["carol"].get(f"{API}/accessiblePosts")).json() == []
        assert (await users["alice"].get(f"{API}/userLists")).json() == []
