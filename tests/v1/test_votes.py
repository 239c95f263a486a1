# tests/v1/test_votes.py
"""Tests for the vote endpoints."""

import threading
import time
from unittest.mock import patch

import pytest
from fastapi import status
from sqlalchemy.orm import Session, sessionmaker

from linkboard.api.v1.dependencies import get_session_factory
from linkboard.api.v1.endpoints import votes as votes_endpoint
from linkboard.core.settings import settings
from linkboard.services.errors import PersistenceError
from linkboard.services.scores import ScoreAggregator


def _vote(client, headers, post_id, value):
    return client.post("/api/v1/votes/", json={"post_id": post_id, "value": value}, headers=headers)


def test_vote_toggle_via_api(client, auth_token, test_post):
    first = _vote(client, auth_token, test_post.id, 1)
    assert first.status_code == status.HTTP_200_OK
    assert first.json() == {"post_id": test_post.id, "outcome": "created", "value": 1, "votes": 1}

    second = _vote(client, auth_token, test_post.id, 1)
    assert second.json() == {"post_id": test_post.id, "outcome": "removed", "value": 0, "votes": 0}


def test_vote_flip_via_api(client, auth_token, other_auth_token, test_post):
    _vote(client, auth_token, test_post.id, 1)
    _vote(client, other_auth_token, test_post.id, 1)

    flipped = _vote(client, auth_token, test_post.id, -1)

    assert flipped.json()["outcome"] == "changed"
    assert flipped.json()["votes"] == 0
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["votes"] == 0


def test_my_vote(client, auth_token, test_post):
    url = f"/api/v1/votes/{test_post.id}/my-vote"
    assert client.get(url, headers=auth_token).json() == {"value": 0}

    _vote(client, auth_token, test_post.id, -1)

    assert client.get(url, headers=auth_token).json() == {"value": -1}


def test_my_vote_requires_auth(client, test_post):
    response = client.get(f"/api/v1/votes/{test_post.id}/my-vote")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


@pytest.mark.parametrize("value", [0, 2, -2, "up"])
def test_invalid_vote_value(client, auth_token, test_post, value):
    response = _vote(client, auth_token, test_post.id, value)

    assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["votes"] == 0


def test_vote_on_missing_post(client, auth_token):
    response = _vote(client, auth_token, "missing", 1)

    assert response.status_code == status.HTTP_404_NOT_FOUND


def test_vote_requires_auth(client, test_post):
    response = client.post("/api/v1/votes/", json={"post_id": test_post.id, "value": 1})

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


def test_score_refresh_failure_reports_server_error(client, auth_token, test_post):
    with patch.object(ScoreAggregator, "recompute_score", side_effect=PersistenceError("down")):
        response = _vote(client, auth_token, test_post.id, 1)

    assert response.status_code == status.HTTP_500_INTERNAL_SERVER_ERROR
    # The vote itself was recorded; the counter catches up on the next cast.
    my_vote = client.get(f"/api/v1/votes/{test_post.id}/my-vote", headers=auth_token)
    assert my_vote.json() == {"value": 1}
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["votes"] == 0


def test_slow_vote_times_out(client, auth_token, test_post, monkeypatch):
    def slow_cast(*args, **kwargs):
        time.sleep(0.5)

    monkeypatch.setattr(settings, "operation_timeout_seconds", 0.05)
    monkeypatch.setattr("linkboard.api.v1.endpoints.votes._cast_vote", slow_cast)

    response = _vote(client, auth_token, test_post.id, 1)

    assert response.status_code == status.HTTP_504_GATEWAY_TIMEOUT
    assert response.json()["detail"] == "Operation timed out"


def test_timed_out_vote_commits_late_on_its_own_session(
    app, engine, client, auth_token, test_post, monkeypatch
):
    closed = threading.Event()

    class ClosingSession(Session):
        def close(self) -> None:
            super().close()
            closed.set()

    operation_sessions = sessionmaker(bind=engine, autoflush=False, class_=ClosingSession)
    app.dependency_overrides[get_session_factory] = lambda: operation_sessions
    used = []

    def late_cast(store, vote_data, user_id):
        used.append(store.session)
        time.sleep(0.3)
        return real_cast(store, vote_data, user_id)

    real_cast = votes_endpoint._cast_vote
    monkeypatch.setattr(settings, "operation_timeout_seconds", 0.05)
    monkeypatch.setattr(votes_endpoint, "_cast_vote", late_cast)

    response = _vote(client, auth_token, test_post.id, 1)

    assert response.status_code == status.HTTP_504_GATEWAY_TIMEOUT
    assert closed.wait(timeout=5)
    monkeypatch.undo()

    assert isinstance(used[0], ClosingSession)
    my_vote = client.get(f"/api/v1/votes/{test_post.id}/my-vote", headers=auth_token)
    assert my_vote.json() == {"value": 1}
    assert client.get(f"/api/v1/posts/{test_post.id}").json()["votes"] == 1
