"""Domain errors raised by the services.

Errors carry the raw ids involved. The message template uses ``{0}``-style
placeholders so that the HTTP layer can re-render it with usernames and
competition names (see ``trackshare.responses``) without the services ever
resolving identities themselves.
"""

from datetime import datetime
from typing import Any


class AppError(Exception):
    """Base exception for all domain errors."""

    status_code = 500
    error_type = "app_error"

    def __init__(self, template: str, *values: Any):
        self.template = template
        self.values = values
        super().__init__(self.format_with(*values))

    def format_with(self, *values: Any) -> str:
        """Render the message template with the given values."""
        return self.template.format(*values)


class NotFoundError(AppError):
    """Raised when a referenced entity does not exist."""

    status_code = 404
    error_type = "not_found_error"


class ConflictError(AppError):
    """Raised when a uniqueness rule is violated."""

    status_code = 409
    error_type = "conflict_error"


class NotAllowedError(AppError):
    """Raised when a business rule forbids the operation."""

    status_code = 403
    error_type = "not_allowed_error"


class AuthError(AppError):
    """Raised when the caller is not (or cannot be) authenticated."""

    status_code = 401
    error_type = "auth_error"


# Identity

class DuplicateUsernameError(ConflictError):
    def __init__(self, username: str):
        self.username = username
        super().__init__("User with username {0} already exists!", username)


class InvalidUsernameError(NotAllowedError):
    def __init__(self):
        super().__init__("Username must be non-empty!")


class InvalidCredentialsError(AuthError):
    def __init__(self):
        super().__init__("Username or password is incorrect.")


class NotLoggedInError(AuthError):
    def __init__(self):
        super().__init__("You must be logged in!")


class AlreadyLoggedInError(NotAllowedError):
    def __init__(self):
        super().__init__("You must be logged out!")


# Friending

class SelfFriendError(NotAllowedError):
    def __init__(self, user: int):
        self.user = user
        super().__init__("User {0} cannot befriend themselves!", user)


class FriendRequestAlreadyExistsError(ConflictError):
    def __init__(self, from_id: int, to_id: int):
        self.from_id = from_id
        self.to_id = to_id
        super().__init__("Friend request between {0} and {1} already exists!", from_id, to_id)


class FriendRequestNotFoundError(NotFoundError):
    def __init__(self, from_id: int, to_id: int):
        self.from_id = from_id
        self.to_id = to_id
        super().__init__("Friend request from {0} to {1} does not exist!", from_id, to_id)


class AlreadyFriendsError(ConflictError):
    def __init__(self, user1: int, user2: int):
        self.user1 = user1
        self.user2 = user2
        super().__init__("{0} and {1} are already friends!", user1, user2)


class FriendNotFoundError(NotFoundError):
    def __init__(self, user1: int, user2: int):
        self.user1 = user1
        self.user2 = user2
        super().__init__("Friendship between {0} and {1} does not exist!", user1, user2)


# Content

class PostAuthorMismatchError(NotAllowedError):
    def __init__(self, author: int, post_id: int):
        self.author = author
        self.post_id = post_id
        super().__init__("{0} is not the author of post {1}!", author, post_id)


class CommentAuthorMismatchError(NotAllowedError):
    def __init__(self, author: int, comment_id: int):
        self.author = author
        self.comment_id = comment_id
        super().__init__("{0} is not the author of comment {1}!", author, comment_id)


# Tracking

class DataOwnerMismatchError(NotAllowedError):
    def __init__(self, data_id: int, user: int):
        self.data_id = data_id
        self.user = user
        super().__init__("Data {0} is not owned by user {1}!", data_id, user)


# Competing

class DuplicateCompetitionNameError(ConflictError):
    def __init__(self, name: str):
        self.name = name
        super().__init__("Competition with name {0} already exists!", name)


class DateNotInFutureError(NotAllowedError):
    def __init__(self, date: datetime):
        self.date = date
        super().__init__("Date {0} is not in the future!", date.strftime("%m/%d/%Y"))


class CompetitionEndedError(NotAllowedError):
    def __init__(self, competition: int):
        self.competition = competition
        super().__init__("Competition {0} has already ended!", competition)


class CompetitionOwnerMismatchError(NotAllowedError):
    def __init__(self, user: int, competition: int):
        self.user = user
        self.competition = competition
        super().__init__("User {0} is not the owner of competition {1}!", user, competition)


class AlreadyOwnerError(NotAllowedError):
    def __init__(self, user: int, competition: int):
        self.user = user
        self.competition = competition
        super().__init__("User {0} is already the owner of competition {1}!", user, competition)


# Joining

class AlreadyMemberError(ConflictError):
    def __init__(self, user: int, competition: int):
        self.user = user
        self.competition = competition
        super().__init__("User {0} is already a member of competition {1}!", user, competition)


class NotMemberError(NotAllowedError):
    def __init__(self, user: int, competition: int):
        self.user = user
        self.competition = competition
        super().__init__("User {0} is not a member of competition {1}!", user, competition)


# Linking

class AlreadyLinkedError(ConflictError):
    def __init__(self, user: int, kind: str, item: int):
        self.user = user
        self.kind = kind
        self.item = item
        super().__init__("User {0} is already linked with {1} {2}!", user, kind, item)


class NotLinkedError(NotAllowedError):
    def __init__(self, user: int, kind: str, item: int):
        self.user = user
        self.kind = kind
        self.item = item
        super().__init__("User {0} is not linked with {1} {2}!", user, kind, item)
