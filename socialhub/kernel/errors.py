"""
Domain errors raised by the kernel services.

Two kinds cover every failure: NotFoundError (the referenced record does not
exist) and NotAllowedError (a precondition failed). Each error keeps the raw
ids it is about, both as named attributes and in ``values``, so the HTTP
layer can substitute usernames before showing the message.
"""

import uuid
from typing import Any, ClassVar, List, Optional


class DomainError(Exception):
    """Base class for kernel errors carrying a message template and raw ids."""

    status_code: ClassVar[int] = 400
    # Attribute names holding user ids that should be rendered as usernames
    user_fields: ClassVar[tuple[str, ...]] = ()

    def __init__(self, template: str, *values: Any):
        self.template = template
        self.values = values
        self.rendered: Optional[str] = None
        super().__init__(self.format_with(*values))

    def format_with(self, *values: Any) -> str:
        """Fill the template's positional slots with the given values."""
        return self.template.format(*values)

    def user_ids(self) -> List[uuid.UUID]:
        """Raw user ids referenced by this error."""
        return [getattr(self, name) for name in self.user_fields if getattr(self, name, None) is not None]

    @property
    def message(self) -> str:
        return self.rendered or str(self)


class NotFoundError(DomainError):
    """The referenced record does not exist."""

    status_code = 404


class NotAllowedError(DomainError):
    """A precondition failed: wrong author/owner, duplicate request, etc."""

    status_code = 403


# Identity

class UserNotFoundError(NotFoundError):
    def __init__(self, username: str):
        self.username = username
        super().__init__("User {0} does not exist!", username)


class UserIdNotFoundError(NotFoundError):
    def __init__(self, user_id: uuid.UUID):
        self.user_id = user_id
        super().__init__("User {0} does not exist!", user_id)


class UsernameAlreadyExistsError(NotAllowedError):
    status_code = 409

    def __init__(self, username: str):
        self.username = username
        super().__init__("Username {0} is already taken!", username)


class AlreadyLoggedInError(NotAllowedError):
    def __init__(self):
        super().__init__("You must be logged out!")


# Posts

class PostNotFoundError(NotFoundError):
    def __init__(self, post_id: uuid.UUID):
        self.post_id = post_id
        super().__init__("Post {0} does not exist!", post_id)


class PostAuthorNotMatchError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, user_id: uuid.UUID, post_id: uuid.UUID):
        self.user_id = user_id
        self.post_id = post_id
        super().__init__("{0} is not an author of post {1}!", user_id, post_id)


class ApprovalNotRequiredError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, post_id: uuid.UUID, user_id: uuid.UUID):
        self.post_id = post_id
        self.user_id = user_id
        super().__init__("{0} is not an approver of post {1}!", user_id, post_id)


class GroupPostsDisabledError(NotAllowedError):
    def __init__(self):
        super().__init__("Posts with more than one author are disabled!")


class PostAccessDeniedError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, user_id: uuid.UUID, post_id: uuid.UUID):
        self.user_id = user_id
        self.post_id = post_id
        super().__init__("{0} cannot see post {1}!", user_id, post_id)


# Sharing

class SharedResourceNotFoundError(NotFoundError):
    def __init__(self, record_id: uuid.UUID):
        self.record_id = record_id
        super().__init__("Shared resource {0} does not exist!", record_id)


class RequestAccessNotAllowedError(NotAllowedError):
    def __init__(self, record_id: uuid.UUID):
        self.record_id = record_id
        super().__init__("Can not request access to resource {0}!", record_id)


class AccessAlreadyGrantedError(NotAllowedError):
    status_code = 409
    user_fields = ("user_id",)

    def __init__(self, record_id: uuid.UUID, user_id: uuid.UUID):
        self.record_id = record_id
        self.user_id = user_id
        super().__init__("User {0} already has access to resource {1}!", user_id, record_id)


class RequestAlreadyExistsError(NotAllowedError):
    status_code = 409
    user_fields = ("user_id",)

    def __init__(self, record_id: uuid.UUID, user_id: uuid.UUID):
        self.record_id = record_id
        self.user_id = user_id
        super().__init__("User {0} already requested access to resource {1}!", user_id, record_id)


class AccessDoesNotExistError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, record_id: uuid.UUID, user_id: uuid.UUID):
        self.record_id = record_id
        self.user_id = user_id
        super().__init__("User {0} does not have access to resource {1}!", user_id, record_id)


class ResourceOwnerNotMatchError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, user_id: uuid.UUID, record_id: uuid.UUID):
        self.user_id = user_id
        self.record_id = record_id
        super().__init__("{0} is not an owner of shared resource {1}!", user_id, record_id)


# Comments

class CommentNotFoundError(NotFoundError):
    def __init__(self, comment_id: uuid.UUID):
        self.comment_id = comment_id
        super().__init__("Comment {0} does not exist!", comment_id)


class CommentAuthorNotMatchError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, user_id: uuid.UUID, comment_id: uuid.UUID):
        self.user_id = user_id
        self.comment_id = comment_id
        super().__init__("{0} is not the author of comment {1}!", user_id, comment_id)


# Friends

class FriendRequestAlreadyExistsError(NotAllowedError):
    status_code = 409
    user_fields = ("from_id", "to_id")

    def __init__(self, from_id: uuid.UUID, to_id: uuid.UUID):
        self.from_id = from_id
        self.to_id = to_id
        super().__init__("Friend request between {0} and {1} already exists!", from_id, to_id)


class FriendRequestNotFoundError(NotFoundError):
    user_fields = ("from_id", "to_id")

    def __init__(self, from_id: uuid.UUID, to_id: uuid.UUID):
        self.from_id = from_id
        self.to_id = to_id
        super().__init__("Friend request from {0} to {1} does not exist!", from_id, to_id)


class AlreadyFriendsError(NotAllowedError):
    status_code = 409
    user_fields = ("user1_id", "user2_id")

    def __init__(self, user1_id: uuid.UUID, user2_id: uuid.UUID):
        self.user1_id = user1_id
        self.user2_id = user2_id
        super().__init__("{0} and {1} are already friends!", user1_id, user2_id)


class FriendNotFoundError(NotFoundError):
    user_fields = ("user1_id", "user2_id")

    def __init__(self, user1_id: uuid.UUID, user2_id: uuid.UUID):
        self.user1_id = user1_id
        self.user2_id = user2_id
        super().__init__("Friendship between {0} and {1} does not exist!", user1_id, user2_id)


class SelfFriendRequestError(NotAllowedError):
    def __init__(self):
        super().__init__("Cannot send a friend request to yourself!")


# User lists

class UserListNotFoundError(NotFoundError):
    def __init__(self, list_id: uuid.UUID):
        self.list_id = list_id
        super().__init__("User list {0} does not exist!", list_id)


class UserListOwnerNotMatchError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, user_id: uuid.UUID, list_id: uuid.UUID):
        self.user_id = user_id
        self.list_id = list_id
        super().__init__("{0} is not the owner of user list {1}!", user_id, list_id)


class UserListMemberNotMatchError(NotAllowedError):
    user_fields = ("user_id",)

    def __init__(self, user_id: uuid.UUID, list_id: uuid.UUID):
        self.user_id = user_id
        self.list_id = list_id
        super().__init__("{0} is not a member of user list {1}!", user_id, list_id)
