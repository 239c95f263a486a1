# tests/services/test_posts_and_comments.py
"""Tests for post and comment services."""

from datetime import UTC, datetime, timedelta
from unittest.mock import MagicMock

import pytest

from linkboard.core.settings import settings
from linkboard.services import comment_service, post_service, user_service
from linkboard.services.errors import (
    AggregationFailed,
    PersistenceError,
    PostNotFound,
    UserNotFound,
    ValidationFailed,
)
from linkboard.services.scores import ScoreAggregator


def test_create_post_strips_title_and_zeroes_counters(store, test_user) -> None:
    post = post_service.create_post(store, title="  Hello  ", content=None, user_id=test_user.id)

    assert post.title == "Hello"
    assert post.content == ""
    assert (post.votes, post.comment_count) == (0, 0)
    assert post_service.get_post(store, post.id) is post


@pytest.mark.parametrize("title", ["", "   ", "x" * 301])
def test_create_post_validates_title(store, test_user, title) -> None:
    with pytest.raises(ValidationFailed):
        post_service.create_post(store, title=title, content="", user_id=test_user.id)
    assert store.find("posts") == []


def test_create_post_requires_existing_author(store) -> None:
    with pytest.raises(UserNotFound):
        post_service.create_post(store, title="Orphan", content="", user_id="ghost")


def test_get_missing_post(store) -> None:
    with pytest.raises(PostNotFound):
        post_service.get_post(store, "missing")


def test_list_posts_applies_strategy(store, make_post, test_user) -> None:
    now = datetime.now(UTC)
    make_post(test_user, "old_top", created_at=now - timedelta(days=2), votes=50)
    make_post(test_user, "new_low", created_at=now, votes=-3)

    assert [p.title for p in post_service.list_posts(store, "top")] == ["old_top", "new_low"]
    assert [p.title for p in post_service.list_posts(store, "new")] == ["new_low", "old_top"]
    assert [p.title for p in post_service.list_posts(store, "hot")] == ["new_low", "old_top"]


def test_list_posts_ranks_whole_collection_before_page_cut(
    store, make_post, test_user, monkeypatch
) -> None:
    monkeypatch.setattr(settings, "feed_page_size", 2)
    now = datetime.now(UTC)
    make_post(test_user, "classic", created_at=now - timedelta(days=30), votes=1000)
    for i in range(3):
        make_post(test_user, f"new {i}", created_at=now - timedelta(minutes=i))

    assert [p.title for p in post_service.list_posts(store, "top")] == ["classic", "new 0"]
    assert [p.title for p in post_service.list_posts(store, "top", 1)] == ["classic"]


def test_list_user_posts(store, make_post, test_user, other_user) -> None:
    make_post(test_user, "mine")
    make_post(other_user, "theirs")

    assert [p.title for p in post_service.list_user_posts(store, test_user.id)] == ["mine"]


def test_add_comment_updates_count(store, test_post, other_user) -> None:
    comment_service.add_comment(store, post_id=test_post.id, user_id=other_user.id, content=" first ")
    comment_service.add_comment(store, post_id=test_post.id, user_id=other_user.id, content="second")

    comments = comment_service.list_comments(store, test_post.id)
    assert [c.content for c in comments] == ["first", "second"]
    assert test_post.comment_count == 2


def test_add_comment_validation(store, test_post, other_user) -> None:
    with pytest.raises(ValidationFailed):
        comment_service.add_comment(store, post_id=test_post.id, user_id=other_user.id, content=" ")
    with pytest.raises(PostNotFound):
        comment_service.add_comment(store, post_id="missing", user_id=other_user.id, content="hi")
    with pytest.raises(UserNotFound):
        comment_service.add_comment(store, post_id=test_post.id, user_id="ghost", content="hi")
    assert store.find("comments") == []


def test_add_comment_count_failure_is_aggregation_failed(store, test_post, other_user) -> None:
    aggregator = MagicMock(spec=ScoreAggregator)
    aggregator.recompute_comment_count.side_effect = PersistenceError("down")

    with pytest.raises(AggregationFailed):
        comment_service.add_comment(
            store,
            post_id=test_post.id,
            user_id=other_user.id,
            content="kept",
            aggregator=aggregator,
        )

    assert [c.content for c in store.find("comments")] == ["kept"]


def test_list_comments_for_missing_post(store) -> None:
    with pytest.raises(PostNotFound):
        comment_service.list_comments(store, "missing")


def test_update_avatar(store, test_user) -> None:
    updated = user_service.update_avatar(store, test_user.id, "https://img.example.com/a.png")
    assert updated.avatar_url == "https://img.example.com/a.png"
    assert user_service.get_user_by_username(store, "test_user").avatar_url == updated.avatar_url

    with pytest.raises(UserNotFound):
        user_service.update_avatar(store, "ghost", None)
    with pytest.raises(UserNotFound):
        user_service.get_user_by_username(store, "nobody")
