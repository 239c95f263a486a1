"""Vote ledger: one vote per user and post, with toggle and flip semantics."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any

from linkboard.models.vote import DOWNVOTE, UPVOTE
from linkboard.repositories.record_store import RecordStore
from linkboard.services.errors import (
    AggregationFailed,
    InvalidVoteValue,
    LinkboardError,
    PostNotFound,
    UserNotFound,
)
from linkboard.services.scores import ScoreAggregator

logger = logging.getLogger(__name__)

VALID_VOTE_VALUES = (UPVOTE, DOWNVOTE)


class VoteOutcome(str, Enum):
    """What a cast did to the caller's vote row."""

    CREATED = "created"
    REMOVED = "removed"
    CHANGED = "changed"


def validate_vote_value(value: Any) -> int:
    """Return ``value`` if it is exactly +1 or -1, else raise InvalidVoteValue."""
    # bool is an int subclass; True must not count as an upvote.
    if isinstance(value, bool) or not isinstance(value, int) or value not in VALID_VOTE_VALUES:
        raise InvalidVoteValue(value)
    return value


class VoteLedger:
    """Authoritative store of current votes.

    Each successful cast commits the ledger change first and then asks the
    aggregator to refresh the post's score. The two steps are not atomic: if
    the refresh fails the vote stays recorded and ``AggregationFailed`` is
    raised so the caller knows the displayed score may be stale.
    """

    def __init__(self, store: RecordStore, aggregator: ScoreAggregator | None = None) -> None:
        self.store = store
        self.aggregator = aggregator or ScoreAggregator(store)

    def cast_vote(self, post_id: str, user_id: str, value: int) -> VoteOutcome:
        """Cast, flip or withdraw ``user_id``'s vote on ``post_id``.

        Args:
            post_id: Identifier of the post being voted on.
            user_id: Identifier of the authenticated voter.
            value: ``1`` for an upvote, ``-1`` for a downvote.

        Returns:
            ``CREATED`` for a first vote, ``REMOVED`` when the same value is cast
            again, ``CHANGED`` when the opposite value replaces the old one.

        Raises:
            InvalidVoteValue: If ``value`` is not +1 or -1; nothing is touched.
            PostNotFound: If the post does not exist.
            UserNotFound: If the voter does not exist.
            PersistenceError: If the ledger write fails; it is rolled back.
            AggregationFailed: If the vote was recorded but the score was not.
        """
        value = validate_vote_value(value)

        with self.store.transaction():
            if self.store.find_one("posts", {"id": post_id}) is None:
                raise PostNotFound(post_id)
            if self.store.find_one("users", {"id": user_id}) is None:
                raise UserNotFound(user_id)
            outcome = self._apply(post_id, user_id, value)

        logger.debug("Vote %s on post %s by %s (%+d)", outcome.value, post_id, user_id, value)

        try:
            self.aggregator.recompute_score(post_id)
        except LinkboardError as exc:
            logger.warning("Vote on post %s recorded but score refresh failed: %s", post_id, exc)
            raise AggregationFailed(post_id, outcome) from exc
        return outcome

    def _apply(self, post_id: str, user_id: str, value: int) -> VoteOutcome:
        key = {"post_id": post_id, "user_id": user_id}
        existing = self.store.find_one("votes", key)
        if existing is None:
            self.store.insert("votes", {**key, "value": value})
            return VoteOutcome.CREATED
        if existing.value == value:
            self.store.delete("votes", {"id": existing.id})
            return VoteOutcome.REMOVED
        self.store.update("votes", {"id": existing.id}, {"value": value})
        return VoteOutcome.CHANGED

    def get_vote(self, post_id: str, user_id: str) -> int:
        """Return the user's current vote value on the post, or 0 if none."""
        vote = self.store.find_one("votes", {"post_id": post_id, "user_id": user_id})
        return 0 if vote is None else vote.value
