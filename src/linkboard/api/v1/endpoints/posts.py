# src/linkboard/api/v1/endpoints/posts.py
"""Post-related endpoints for the Linkboard API."""

from fastapi import APIRouter, Query, status

from linkboard.api.v1.dependencies import CurrentUserDep, SessionFactoryDep, run_operation
from linkboard.repositories.record_store import RecordStore
from linkboard.schemas.post import PostCreate, PostResponse
from linkboard.services import post_service
from linkboard.services.ranking import RankingStrategy

router = APIRouter(prefix="/posts", tags=["posts"])


def _list_posts(store: RecordStore, sort: RankingStrategy, limit: int) -> list[PostResponse]:
    posts = post_service.list_posts(store, sort, limit)
    return [PostResponse.model_validate(post) for post in posts]


def _create_post(store: RecordStore, post_data: PostCreate, user_id: str) -> PostResponse:
    post = post_service.create_post(
        store,
        title=post_data.title,
        content=post_data.content,
        user_id=user_id,
    )
    return PostResponse.model_validate(post)


def _get_post(store: RecordStore, post_id: str) -> PostResponse:
    return PostResponse.model_validate(post_service.get_post(store, post_id))


@router.get("/", response_model=list[PostResponse])
async def list_posts(
    sessions: SessionFactoryDep,
    sort: RankingStrategy = Query(RankingStrategy.HOT, description="hot, new or top"),
    limit: int = Query(50, ge=1, le=100),
) -> list[PostResponse]:
    """Return the feed ordered by the requested strategy."""
    return await run_operation(sessions, _list_posts, sort, limit)


@router.post("/", status_code=status.HTTP_201_CREATED, response_model=PostResponse)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    sessions: SessionFactoryDep,
) -> PostResponse:
    """Submit a new text post."""
    return await run_operation(sessions, _create_post, post_data, current_user.id)


@router.get("/{post_id}", response_model=PostResponse)
async def get_post(post_id: str, sessions: SessionFactoryDep) -> PostResponse:
    """Return a single post."""
    return await run_operation(sessions, _get_post, post_id)
