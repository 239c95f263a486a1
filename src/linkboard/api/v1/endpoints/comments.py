# src/linkboard/api/v1/endpoints/comments.py
"""Comment endpoints nested under posts."""

from fastapi import APIRouter, status

from linkboard.api.v1.dependencies import CurrentUserDep, SessionFactoryDep, run_operation
from linkboard.repositories.record_store import RecordStore
from linkboard.schemas.comment import CommentCreate, CommentResponse
from linkboard.services import comment_service

router = APIRouter(prefix="/posts/{post_id}/comments", tags=["comments"])


def _list_comments(store: RecordStore, post_id: str) -> list[CommentResponse]:
    comments = comment_service.list_comments(store, post_id)
    return [CommentResponse.model_validate(comment) for comment in comments]


def _add_comment(
    store: RecordStore,
    post_id: str,
    comment_data: CommentCreate,
    user_id: str,
) -> CommentResponse:
    comment = comment_service.add_comment(
        store,
        post_id=post_id,
        user_id=user_id,
        content=comment_data.content,
    )
    return CommentResponse.model_validate(comment)


@router.get("/", response_model=list[CommentResponse])
async def list_comments(post_id: str, sessions: SessionFactoryDep) -> list[CommentResponse]:
    """Return a post's comments, oldest first."""
    return await run_operation(sessions, _list_comments, post_id)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=CommentResponse)
async def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    sessions: SessionFactoryDep,
) -> CommentResponse:
    """Add a comment to a post."""
    return await run_operation(sessions, _add_comment, post_id, comment_data, current_user.id)
