"""Domain errors raised by Linkboard services.

Services raise these and never retry; the HTTP layer maps them onto status
codes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from linkboard.services.votes import VoteOutcome


class LinkboardError(Exception):
    """Base class for every domain error."""


class ValidationFailed(LinkboardError):
    """Input rejected before touching storage."""


class InvalidVoteValue(ValidationFailed):
    """A vote value other than +1 or -1 was supplied."""

    def __init__(self, value: Any) -> None:
        super().__init__(f"Vote value must be 1 or -1, got {value!r}")
        self.value = value


class PostNotFound(LinkboardError):
    """The referenced post does not exist."""

    def __init__(self, post_id: str) -> None:
        super().__init__(f"Post {post_id} not found")
        self.post_id = post_id


class UserNotFound(LinkboardError):
    """The referenced user does not exist."""

    def __init__(self, user_ref: str) -> None:
        super().__init__(f"User {user_ref} not found")
        self.user_ref = user_ref


class PersistenceError(LinkboardError):
    """The storage layer failed; the whole operation may be retried."""


class ConstraintViolation(PersistenceError):
    """A write broke a uniqueness or check constraint."""


class AggregationFailed(LinkboardError):
    """A ledger change was committed but the denormalized counter was not refreshed.

    The post's stored counter may be stale until the next successful recompute.
    """

    def __init__(self, post_id: str, outcome: VoteOutcome | None = None) -> None:
        super().__init__(f"Counters for post {post_id} could not be recomputed")
        self.post_id = post_id
        self.outcome = outcome


class AuthError(LinkboardError):
    """Base class for authentication failures."""


class InvalidCredentials(AuthError):
    """Email/password pair or session token was rejected."""


class RegistrationError(AuthError):
    """Sign-up input was invalid or collides with an existing account."""


class NotAuthenticated(AuthError):
    """An operation required a signed-in user and there was none."""
