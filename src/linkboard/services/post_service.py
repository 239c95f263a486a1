"""Service-level helpers for creating and reading posts."""
from __future__ import annotations

import logging

from linkboard.core.settings import settings
from linkboard.models.post import Post
from linkboard.repositories.record_store import RecordStore
from linkboard.services.errors import PostNotFound, UserNotFound, ValidationFailed
from linkboard.services.ranking import RankingStrategy, rank

logger = logging.getLogger(__name__)


def create_post(store: RecordStore, *, title: str, content: str | None, user_id: str) -> Post:
    """Create a post owned by ``user_id``.

    Args:
        store: Record store used to persist the post.
        title: Required headline; surrounding whitespace is stripped.
        content: Optional body text.
        user_id: Identifier of the authenticated author.

    Returns:
        The persisted post with zeroed counters.

    Raises:
        ValidationFailed: If the title is blank or too long.
        UserNotFound: If the author does not exist.
    """
    title = title.strip()
    if not title:
        raise ValidationFailed("Post title is required")
    if len(title) > settings.post_title_max_length:
        raise ValidationFailed(
            f"Post title must be at most {settings.post_title_max_length} characters"
        )

    with store.transaction():
        if store.find_one("users", {"id": user_id}) is None:
            raise UserNotFound(user_id)
        post = store.insert(
            "posts",
            {
                "title": title,
                "content": content or "",
                "user_id": user_id,
                "votes": 0,
                "comment_count": 0,
            },
        )
    logger.info("User %s created post %s", user_id, post.id)
    return post


def get_post(store: RecordStore, post_id: str) -> Post:
    """Return a post or raise PostNotFound."""
    post = store.find_one("posts", {"id": post_id})
    if post is None:
        raise PostNotFound(post_id)
    return post


def list_posts(
    store: RecordStore,
    strategy: RankingStrategy | str = RankingStrategy.HOT,
    limit: int | None = None,
) -> list[Post]:
    """Return the first ``limit`` posts of the whole collection ordered by ``strategy``.

    Ranking happens before the cut so an old, highly voted post still leads
    Top. Ties keep newest-first order.
    """
    posts = store.find("posts", order_by="created_at", descending=True)
    return rank(posts, strategy)[: limit or settings.feed_page_size]


def list_user_posts(store: RecordStore, user_id: str) -> list[Post]:
    """Return a user's posts, newest first."""
    return store.find("posts", {"user_id": user_id}, order_by="created_at", descending=True)
