"""Shared API dependencies for authentication, storage and error translation."""

import asyncio
import functools
import logging
from collections.abc import Callable
from typing import Annotated, Any, NoReturn, TypeVar

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from linkboard.core.settings import settings
from linkboard.db.session import SessionLocal, get_db
from linkboard.models import User
from linkboard.repositories.record_store import RecordStore
from linkboard.services.auth import AuthService, SessionContext
from linkboard.services.change_feed import get_change_feed
from linkboard.services.errors import (
    AggregationFailed,
    AuthError,
    LinkboardError,
    PersistenceError,
    PostNotFound,
    RegistrationError,
    UserNotFound,
    ValidationFailed,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

# HTTP Bearer scheme; anonymous readers are allowed, so missing headers are not an error here.
bearer_scheme = HTTPBearer(auto_error=False)

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_store(db: SessionDep) -> RecordStore:
    """Return a record store bound to the request's database session."""
    return RecordStore(db, get_change_feed())


StoreDep = Annotated[RecordStore, Depends(get_store)]


SessionFactory = Callable[[], Session]


def get_session_factory() -> SessionFactory:
    """Return the factory operations use to open their own session."""
    return SessionLocal


# Type alias for the operation session factory dependency
SessionFactoryDep = Annotated[SessionFactory, Depends(get_session_factory)]


def get_session_context(
    store: StoreDep,
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> SessionContext:
    """Build the request's session context from the bearer token, if any."""
    context = SessionContext(AuthService(store))
    context.initialize(credentials.credentials if credentials else None)
    return context


SessionContextDep = Annotated[SessionContext, Depends(get_session_context)]


def get_current_user(context: SessionContextDep) -> User:
    """Return the signed-in user.

    Raises:
        HTTPException: 401 if the token is missing, invalid, expired or revoked.
    """
    if context.user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return context.user


# Type alias for current user dependency
CurrentUserDep = Annotated[User, Depends(get_current_user)]


def raise_http_error(exc: LinkboardError) -> NoReturn:
    """Translate a domain error into the matching HTTPException."""
    if isinstance(exc, ValidationFailed):
        code = status.HTTP_422_UNPROCESSABLE_ENTITY
    elif isinstance(exc, PostNotFound | UserNotFound):
        code = status.HTTP_404_NOT_FOUND
    elif isinstance(exc, RegistrationError):
        code = status.HTTP_400_BAD_REQUEST
    elif isinstance(exc, AuthError):
        code = status.HTTP_401_UNAUTHORIZED
    elif isinstance(exc, AggregationFailed):
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    elif isinstance(exc, PersistenceError):
        code = status.HTTP_503_SERVICE_UNAVAILABLE
    else:  # pragma: no cover - every subclass is mapped above
        code = status.HTTP_500_INTERNAL_SERVER_ERROR
    raise HTTPException(status_code=code, detail=str(exc)) from exc


def _run_with_own_store(
    sessions: SessionFactory,
    func: Callable[..., T],
    args: tuple[Any, ...],
    kwargs: dict[str, Any],
) -> T:
    # Opened and closed on the worker thread; the request session never crosses over.
    db = sessions()
    try:
        return func(RecordStore(db, get_change_feed()), *args, **kwargs)
    finally:
        db.close()


async def run_operation(
    sessions: SessionFactory,
    func: Callable[..., T],
    *args: Any,
    **kwargs: Any,
) -> T:
    """Run ``func(store, *args, **kwargs)`` off the event loop with a deadline.

    The store wraps a session opened inside the worker, so an operation that
    outlives its request still commits or rolls back on a session nobody
    else touches. ``func`` must return plain data (schemas, ints), not ORM
    instances bound to that session.

    Raises:
        HTTPException: 504 when the call exceeds ``operation_timeout_seconds``,
            otherwise the translation of any domain error.
    """
    loop = asyncio.get_running_loop()
    call = functools.partial(_run_with_own_store, sessions, func, args, kwargs)
    try:
        # The worker thread is abandoned on timeout, not interrupted.
        return await asyncio.wait_for(
            loop.run_in_executor(None, call),
            timeout=settings.operation_timeout_seconds,
        )
    except TimeoutError as err:
        logger.warning("%s timed out", getattr(func, "__name__", func))
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Operation timed out",
        ) from err
    except LinkboardError as exc:
        raise_http_error(exc)
