"""SQLAlchemy models for the Linkboard application."""

from .post import Comment, Post
from .user import AuthSession, User
from .vote import Vote

__all__ = [
    "AuthSession",
    "Comment",
    "Post",
    "User",
    "Vote",
]
