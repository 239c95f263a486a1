"""User and authentication Pydantic schemas."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SignUpRequest(BaseModel):
    """Schema for account registration."""

    email: str = Field(..., min_length=3, max_length=320, description="Login email address")
    password: str = Field(..., description="At least 8 characters, one uppercase, one digit")
    username: str = Field(..., description="3-20 letters, digits, underscores or hyphens")


class SignInRequest(BaseModel):
    """Schema for email/password sign-in."""

    email: str
    password: str


class UserSummary(BaseModel):
    """Author details embedded in posts and comments."""

    id: str
    username: str
    avatar_url: str | None = None

    model_config = ConfigDict(from_attributes=True)


class UserResponse(UserSummary):
    """Public profile of a user."""

    created_at: datetime


class SessionResponse(BaseModel):
    """Response returned after a successful sign-in or sign-up."""

    access_token: str = Field(..., description="JWT access token")
    token_type: str = Field("bearer", description="Token type")
    expires_at: datetime
    user: UserResponse


class AvatarUpdate(BaseModel):
    """Schema for replacing the caller's avatar."""

    avatar_url: str | None = Field(None, max_length=2048, description="Image URL or null to clear")

    @field_validator("avatar_url")
    @classmethod
    def validate_avatar_url(cls, v: str | None) -> str | None:
        """Accept only http(s) URLs."""
        if v is None:
            return v
        if not v.startswith(("http://", "https://")):
            raise ValueError("Avatar must be an http(s) URL")
        return v
