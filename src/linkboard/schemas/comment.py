"""Comment-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from linkboard.schemas.user import UserSummary


class CommentCreate(BaseModel):
    """Schema for adding a comment to a post."""

    content: str = Field(..., min_length=1, description="Comment text")


class CommentResponse(BaseModel):
    """Schema for a comment returned by the API."""

    id: str
    content: str
    post_id: str
    user_id: str
    created_at: datetime
    user: UserSummary | None = Field(None, validation_alias="author")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
