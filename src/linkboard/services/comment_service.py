"""Append-only comments and the post comment counter."""
from __future__ import annotations

import logging

from linkboard.models.post import Comment
from linkboard.repositories.record_store import RecordStore
from linkboard.services.errors import (
    AggregationFailed,
    LinkboardError,
    PostNotFound,
    UserNotFound,
    ValidationFailed,
)
from linkboard.services.scores import ScoreAggregator

logger = logging.getLogger(__name__)


def add_comment(
    store: RecordStore,
    *,
    post_id: str,
    user_id: str,
    content: str,
    aggregator: ScoreAggregator | None = None,
) -> Comment:
    """Append a comment and refresh the post's ``comment_count``.

    Raises:
        ValidationFailed: If the content is blank.
        PostNotFound: If the post does not exist.
        UserNotFound: If the author does not exist.
        AggregationFailed: If the comment was stored but the counter was not updated.
    """
    content = content.strip()
    if not content:
        raise ValidationFailed("Comment content is required")

    with store.transaction():
        if store.find_one("posts", {"id": post_id}) is None:
            raise PostNotFound(post_id)
        if store.find_one("users", {"id": user_id}) is None:
            raise UserNotFound(user_id)
        comment = store.insert(
            "comments",
            {"post_id": post_id, "user_id": user_id, "content": content},
        )

    aggregator = aggregator or ScoreAggregator(store)
    try:
        aggregator.recompute_comment_count(post_id)
    except LinkboardError as exc:
        logger.warning("Comment on post %s stored but count refresh failed: %s", post_id, exc)
        raise AggregationFailed(post_id) from exc
    return comment


def list_comments(store: RecordStore, post_id: str) -> list[Comment]:
    """Return a post's comments, oldest first."""
    if store.find_one("posts", {"id": post_id}) is None:
        raise PostNotFound(post_id)
    return store.find("comments", {"post_id": post_id}, order_by="created_at")
