"""Lookup and profile helpers for users."""
from __future__ import annotations

from linkboard.models.user import User
from linkboard.repositories.record_store import RecordStore
from linkboard.services.errors import UserNotFound

__all__ = [
    "get_user",
    "get_user_by_username",
    "update_avatar",
]


def get_user(store: RecordStore, user_id: str) -> User:
    """Return a single user by identifier."""
    user = store.find_one("users", {"id": user_id})
    if user is None:
        raise UserNotFound(user_id)
    return user


def get_user_by_username(store: RecordStore, username: str) -> User:
    """Return the user behind a profile URL."""
    user = store.find_one("users", {"username": username})
    if user is None:
        raise UserNotFound(username)
    return user


def update_avatar(store: RecordStore, user_id: str, avatar_url: str | None) -> User:
    """Replace the user's avatar reference, the only mutable profile field."""
    with store.transaction():
        if not store.update("users", {"id": user_id}, {"avatar_url": avatar_url}):
            raise UserNotFound(user_id)
    return get_user(store, user_id)
