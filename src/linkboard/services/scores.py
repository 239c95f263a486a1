"""Denormalized counter maintenance for posts."""

from __future__ import annotations

import logging

from linkboard.repositories.record_store import RecordStore
from linkboard.services.errors import PersistenceError, PostNotFound

logger = logging.getLogger(__name__)


class ScoreAggregator:
    """Keeps ``Post.votes`` and ``Post.comment_count`` equal to their source rows.

    Every recompute reads the full current ledger, so a stale counter heals on
    the next call. A recompute that finds the stored value already correct
    writes nothing and publishes no change event.
    """

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def recompute_score(self, post_id: str) -> int:
        """Write the sum of the post's vote values to ``Post.votes`` and return it.

        Raises:
            PostNotFound: If the post does not exist.
            PersistenceError: If reading the ledger or writing the counter fails.
        """
        post = self.store.find_one("posts", {"id": post_id})
        if post is None:
            raise PostNotFound(post_id)
        total = sum(vote.value for vote in self.store.find("votes", {"post_id": post_id}))
        self._write_back(post_id, "votes", post.votes, total)
        return total

    def recompute_comment_count(self, post_id: str) -> int:
        """Write the number of the post's comments to ``Post.comment_count``."""
        post = self.store.find_one("posts", {"id": post_id})
        if post is None:
            raise PostNotFound(post_id)
        count = len(self.store.find("comments", {"post_id": post_id}))
        self._write_back(post_id, "comment_count", post.comment_count, count)
        return count

    def _write_back(self, post_id: str, field: str, current: int, value: int) -> None:
        if current == value:
            return
        try:
            with self.store.transaction():
                self.store.update("posts", {"id": post_id}, {field: value})
        except PersistenceError:
            logger.warning("Failed to write %s=%d for post %s", field, value, post_id)
            raise
        logger.debug("Post %s %s %d -> %d", post_id, field, current, value)
