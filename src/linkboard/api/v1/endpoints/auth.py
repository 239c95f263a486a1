# src/linkboard/api/v1/endpoints/auth.py
"""Authentication endpoints for the Linkboard API."""

from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from linkboard.api.v1.dependencies import (
    SessionContextDep,
    SessionFactoryDep,
    bearer_scheme,
    run_operation,
)
from linkboard.repositories.record_store import RecordStore
from linkboard.schemas.user import SessionResponse, SignInRequest, SignUpRequest, UserResponse
from linkboard.services.auth import AuthService, SessionContext, UserSession

router = APIRouter(prefix="/auth", tags=["authentication"])


def _to_session_response(session: UserSession) -> SessionResponse:
    return SessionResponse(
        access_token=session.token,
        token_type="bearer",
        expires_at=session.expires_at,
        user=UserResponse.model_validate(session.user),
    )


def _sign_up(store: RecordStore, payload: SignUpRequest) -> SessionResponse:
    context = SessionContext(AuthService(store))
    context.initialize()
    return _to_session_response(
        context.sign_up(payload.email, payload.password, payload.username)
    )


def _sign_in(store: RecordStore, payload: SignInRequest) -> SessionResponse:
    context = SessionContext(AuthService(store))
    context.initialize()
    return _to_session_response(context.sign_in(payload.email, payload.password))


def _sign_out(store: RecordStore, token: str) -> None:
    AuthService(store).sign_out(token)


@router.post("/signup", status_code=status.HTTP_201_CREATED, response_model=SessionResponse)
async def sign_up(payload: SignUpRequest, sessions: SessionFactoryDep) -> SessionResponse:
    """Register a new account and return a session for it."""
    return await run_operation(sessions, _sign_up, payload)


@router.post("/signin", response_model=SessionResponse)
async def sign_in(payload: SignInRequest, sessions: SessionFactoryDep) -> SessionResponse:
    """Exchange an email and password for a session token."""
    return await run_operation(sessions, _sign_in, payload)


@router.post("/signout", status_code=status.HTTP_204_NO_CONTENT)
async def sign_out(
    sessions: SessionFactoryDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> None:
    """Revoke the caller's session. Signing out without a session is a no-op."""
    if credentials is not None:
        await run_operation(sessions, _sign_out, credentials.credentials)


@router.get("/session", response_model=SessionResponse)
async def current_session(context: SessionContextDep) -> SessionResponse:
    """Return the caller's live session."""
    if context.session is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="No active session",
        )
    return _to_session_response(context.session)
