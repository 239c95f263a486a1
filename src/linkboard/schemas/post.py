"""Post-related Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from linkboard.models.post import TITLE_MAX_LENGTH
from linkboard.schemas.user import UserSummary


class PostCreate(BaseModel):
    """Schema for submitting a new post."""

    title: str = Field(..., min_length=1, max_length=TITLE_MAX_LENGTH, description="Headline")
    content: str = Field("", description="Optional body text")


class PostResponse(BaseModel):
    """Schema for post information returned by the API."""

    id: str
    title: str
    content: str
    user_id: str
    created_at: datetime
    votes: int
    comment_count: int
    user: UserSummary | None = Field(None, validation_alias="author")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)
