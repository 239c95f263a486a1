# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import UTC, datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from linkboard.api.v1.dependencies import get_session_factory
from linkboard.core.security import create_access_token
from linkboard.db.session import Base
from linkboard.db.session import get_db as app_get_session
from linkboard.main import app as fastapi_app
from linkboard.models import AuthSession, Post, User
from linkboard.models.user import new_id
from linkboard.repositories.record_store import RecordStore
from linkboard.services.change_feed import ChangeFeed

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="session")
def session_factory(engine: Engine) -> sessionmaker[Session]:
    """Factory for every test session, the fixtures' and the API operations'."""
    return sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        # Services commit, so every test must wipe the tables it touched.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def change_feed() -> ChangeFeed:
    """Private change feed so subscriptions never leak between tests."""
    return ChangeFeed()


@pytest.fixture()
def store(db_session: Session, change_feed: ChangeFeed) -> RecordStore:
    return RecordStore(db_session, change_feed)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(
    app: FastAPI,
    db_session: Session,
    session_factory: sessionmaker[Session],
) -> Iterator[None]:
    # Requesting db_session ties table cleanup to every test that talks to the app.
    def _get_session_override() -> Generator[Session, None, None]:
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_session_factory] = lambda: session_factory
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_session_factory, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory persisting users without paying for bcrypt."""

    def _make_user(username: str | None = None) -> User:
        n = next(_USER_COUNTER)
        username = username or f"user_{n}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
        )
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return a persisted test user."""
    return make_user("test_user")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second persisted user."""
    return make_user("other_user")


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Factory persisting posts with explicit timestamps and counters."""

    def _make_post(
        user: User,
        title: str = "Test post",
        *,
        created_at: datetime | None = None,
        votes: int = 0,
    ) -> Post:
        post = Post(
            title=title,
            content=f"{title} body",
            user_id=user.id,
            created_at=created_at or datetime.now(UTC),
            votes=votes,
            comment_count=0,
        )
        db_session.add(post)
        db_session.commit()
        return post

    return _make_post


@pytest.fixture()
def test_post(make_post: Callable[..., Post], test_user: User) -> Post:
    """Create a baseline post owned by the primary test user."""
    return make_post(test_user)


def headers_for(db_session: Session, user: User) -> dict[str, str]:
    session_id = new_id()
    expires_at = datetime.now(UTC) + timedelta(hours=1)
    db_session.add(AuthSession(id=session_id, user_id=user.id, expires_at=expires_at))
    db_session.commit()
    token = create_access_token(user.id, session_id, expires_at)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def auth_token(db_session: Session, test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return headers_for(db_session, test_user)


@pytest.fixture()
def other_auth_token(db_session: Session, other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return headers_for(db_session, other_user)
