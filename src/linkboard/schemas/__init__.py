"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .comment import CommentCreate, CommentResponse
from .post import PostCreate, PostResponse
from .user import (
    AvatarUpdate,
    SessionResponse,
    SignInRequest,
    SignUpRequest,
    UserResponse,
    UserSummary,
)
from .vote import MyVoteResponse, VoteCreate, VoteResponse

__all__ = [
    "CommentCreate", "CommentResponse",
    "PostCreate", "PostResponse",
    "AvatarUpdate", "SessionResponse", "SignInRequest", "SignUpRequest",
    "UserResponse", "UserSummary",
    "MyVoteResponse", "VoteCreate", "VoteResponse",
]
