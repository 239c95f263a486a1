# src/linkboard/api/v1/endpoints/votes.py
"""Vote-related endpoints for the Linkboard API."""

from fastapi import APIRouter

from linkboard.api.v1.dependencies import CurrentUserDep, SessionFactoryDep, run_operation
from linkboard.repositories.record_store import RecordStore
from linkboard.schemas.vote import MyVoteResponse, VoteCreate, VoteResponse
from linkboard.services.post_service import get_post
from linkboard.services.votes import VoteLedger

router = APIRouter(prefix="/votes", tags=["votes"])


def _cast_vote(store: RecordStore, vote_data: VoteCreate, user_id: str) -> VoteResponse:
    ledger = VoteLedger(store)
    outcome = ledger.cast_vote(vote_data.post_id, user_id, vote_data.value)
    return VoteResponse(
        post_id=vote_data.post_id,
        outcome=outcome,
        value=ledger.get_vote(vote_data.post_id, user_id),
        votes=get_post(store, vote_data.post_id).votes,
    )


def _get_my_vote(store: RecordStore, post_id: str, user_id: str) -> int:
    return VoteLedger(store).get_vote(post_id, user_id)


@router.post("/", response_model=VoteResponse)
async def cast_vote(
    vote_data: VoteCreate,
    current_user: CurrentUserDep,
    sessions: SessionFactoryDep,
) -> VoteResponse:
    """Cast a vote; casting the same value again withdraws it."""
    return await run_operation(sessions, _cast_vote, vote_data, current_user.id)


@router.get("/{post_id}/my-vote", response_model=MyVoteResponse)
async def get_my_vote(
    post_id: str,
    current_user: CurrentUserDep,
    sessions: SessionFactoryDep,
) -> MyVoteResponse:
    """Get current user's vote on a specific post."""
    value = await run_operation(sessions, _get_my_vote, post_id, current_user.id)
    return MyVoteResponse(value=value)
