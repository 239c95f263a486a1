# src/linkboard/api/v1/endpoints/users.py
"""User profile endpoints for the Linkboard API."""

from fastapi import APIRouter

from linkboard.api.v1.dependencies import CurrentUserDep, SessionFactoryDep, run_operation
from linkboard.repositories.record_store import RecordStore
from linkboard.schemas.post import PostResponse
from linkboard.schemas.user import AvatarUpdate, UserResponse
from linkboard.services import post_service, user_service

router = APIRouter(prefix="/users", tags=["users"])


def _get_profile(store: RecordStore, username: str) -> UserResponse:
    return UserResponse.model_validate(user_service.get_user_by_username(store, username))


def _get_user_posts(store: RecordStore, username: str) -> list[PostResponse]:
    user = user_service.get_user_by_username(store, username)
    return [
        PostResponse.model_validate(post)
        for post in post_service.list_user_posts(store, user.id)
    ]


def _update_avatar(store: RecordStore, user_id: str, payload: AvatarUpdate) -> UserResponse:
    user = user_service.update_avatar(store, user_id, payload.avatar_url)
    return UserResponse.model_validate(user)


@router.patch("/me/avatar", response_model=UserResponse)
async def update_my_avatar(
    payload: AvatarUpdate,
    current_user: CurrentUserDep,
    sessions: SessionFactoryDep,
) -> UserResponse:
    """Replace or clear the caller's avatar."""
    return await run_operation(sessions, _update_avatar, current_user.id, payload)


@router.get("/{username}", response_model=UserResponse)
async def get_profile(username: str, sessions: SessionFactoryDep) -> UserResponse:
    """Return a user's public profile."""
    return await run_operation(sessions, _get_profile, username)


@router.get("/{username}/posts", response_model=list[PostResponse])
async def get_user_posts(username: str, sessions: SessionFactoryDep) -> list[PostResponse]:
    """Return a user's posts, newest first."""
    return await run_operation(sessions, _get_user_posts, username)
