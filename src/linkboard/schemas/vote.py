"""Vote-related Pydantic schemas."""

from typing import Literal

from pydantic import BaseModel, Field

from linkboard.services.votes import VoteOutcome


class VoteCreate(BaseModel):
    """Schema for casting a vote."""

    post_id: str
    value: Literal[-1, 1] = Field(..., description="1 for upvote, -1 for downvote")


class VoteResponse(BaseModel):
    """Result of a cast: what happened to the vote and the refreshed score."""

    post_id: str
    outcome: VoteOutcome
    value: int = Field(..., description="Caller's vote after the cast; 0 when removed")
    votes: int = Field(..., description="Post score after the cast")


class MyVoteResponse(BaseModel):
    """The caller's current vote on a post."""

    value: int = Field(..., description="1, -1, or 0 when the caller has not voted")
