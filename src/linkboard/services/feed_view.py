"""Cached, ranked view of the post feed kept fresh by change events."""

from __future__ import annotations

import logging
from typing import Any

from linkboard.models import Post
from linkboard.repositories.record_store import RecordStore
from linkboard.services.ranking import RankingStrategy, rank

logger = logging.getLogger(__name__)


class FeedView:
    """Holds the last fetched posts and refetches when the posts collection changes.

    Pass a ``filter`` such as ``{"user_id": ...}`` to back a profile page
    instead of the home feed.
    """

    def __init__(
        self,
        store: RecordStore,
        strategy: RankingStrategy | str = RankingStrategy.HOT,
        filter: dict[str, Any] | None = None,
    ) -> None:
        self.store = store
        self.strategy = RankingStrategy(strategy)
        self.filter = dict(filter or {})
        self._subscription = store.subscribe("posts", self.filter)
        self._posts: list[Post] | None = None
        self.fetch_count = 0

    @property
    def stale(self) -> bool:
        return self._posts is None or self._subscription.pending

    def refresh(self) -> None:
        """Drop queued change events and refetch from the store."""
        drained = sum(1 for _ in self._subscription)
        self._posts = self.store.find(
            "posts", self.filter, order_by="created_at", descending=True
        )
        self.fetch_count += 1
        logger.debug("Feed refetched after %d change event(s)", drained)

    def posts(self) -> list[Post]:
        """Return the feed ranked by the current strategy, refetching if stale."""
        if self.stale:
            self.refresh()
        return rank(self._posts or [], self.strategy)

    def set_strategy(self, strategy: RankingStrategy | str) -> None:
        """Switch ordering; the cached posts are reused."""
        self.strategy = RankingStrategy(strategy)

    def close(self) -> None:
        self._subscription.close()
