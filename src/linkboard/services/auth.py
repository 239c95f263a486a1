"""Account registration, sign-in and the explicit session context."""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

from linkboard.core import security
from linkboard.core.settings import settings
from linkboard.models import User
from linkboard.models.user import new_id
from linkboard.repositories.record_store import RecordStore
from linkboard.services.errors import (
    ConstraintViolation,
    InvalidCredentials,
    NotAuthenticated,
    RegistrationError,
)

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"^[a-zA-Z0-9_-]{3,20}$")
USERNAME_RULE = (
    "Username must be 3-20 characters and can only contain letters, numbers, "
    "underscores, and hyphens"
)
PASSWORD_MIN_LENGTH = 8


def password_problems(password: str) -> list[str]:
    """Return the password requirements ``password`` does not meet."""
    problems = []
    if len(password) < PASSWORD_MIN_LENGTH:
        problems.append(f"At least {PASSWORD_MIN_LENGTH} characters")
    if not re.search(r"[A-Z]", password):
        problems.append("At least one uppercase letter")
    if not re.search(r"[0-9]", password):
        problems.append("At least one number")
    return problems


def is_valid_username(username: str) -> bool:
    return bool(USERNAME_PATTERN.fullmatch(username))


@dataclass(frozen=True)
class UserSession:
    """A signed-in user together with the token that proves it."""

    token: str
    session_id: str
    user: User
    expires_at: datetime


class AuthService:
    """Authentication collaborator backed by the users and auth_sessions collections."""

    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def sign_up(self, email: str, password: str, username: str) -> User:
        """Register a new account.

        Raises:
            RegistrationError: If any field is invalid or already taken.
        """
        email = email.strip().lower()
        if "@" not in email or email.startswith("@") or email.endswith("@"):
            raise RegistrationError("A valid email address is required")
        if not is_valid_username(username):
            raise RegistrationError(USERNAME_RULE)
        problems = password_problems(password)
        if problems:
            raise RegistrationError("Password requirements not met: " + ", ".join(problems))

        with self.store.transaction():
            if self.store.find_one("users", {"email": email}) is not None:
                raise RegistrationError("Email is already registered")
            if self.store.find_one("users", {"username": username}) is not None:
                raise RegistrationError("Username is already taken")
            try:
                user = self.store.insert(
                    "users",
                    {
                        "username": username,
                        "email": email,
                        "password_hash": security.hash_password(password),
                    },
                )
            except ConstraintViolation as exc:
                # A concurrent sign-up claimed the email or username after the checks.
                raise RegistrationError("Email or username is already registered") from exc
        logger.info("Registered user %s", username)
        return user

    def sign_in(self, email: str, password: str) -> UserSession:
        """Verify credentials and open a new session.

        Raises:
            InvalidCredentials: If the email is unknown or the password is wrong.
        """
        user = self.store.find_one("users", {"email": email.strip().lower()})
        if user is None or not security.verify_password(password, user.password_hash):
            raise InvalidCredentials("Invalid email or password")

        session_id = new_id()
        expires_at = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
        with self.store.transaction():
            self.store.insert(
                "auth_sessions",
                {"id": session_id, "user_id": user.id, "expires_at": expires_at},
            )
        token = security.create_access_token(user.id, session_id, expires_at)
        logger.debug("Opened session %s for user %s", session_id, user.id)
        return UserSession(token=token, session_id=session_id, user=user, expires_at=expires_at)

    def sign_out(self, token: str) -> None:
        """Revoke the session behind ``token``; unknown tokens are ignored."""
        claims = security.decode_access_token(token)
        if claims is None:
            return
        with self.store.transaction():
            self.store.update(
                "auth_sessions",
                {"id": claims["jti"], "revoked_at": None},
                {"revoked_at": datetime.now(UTC)},
            )
        logger.debug("Closed session %s", claims["jti"])

    def get_current_session(self, token: str | None) -> UserSession | None:
        """Return the live session for ``token`` or None if it is invalid, expired or revoked."""
        if not token:
            return None
        claims = security.decode_access_token(token)
        if claims is None:
            return None
        row = self.store.find_one("auth_sessions", {"id": claims["jti"], "user_id": claims["sub"]})
        if row is None or not row.is_active(datetime.now(UTC)):
            return None
        user = self.store.find_one("users", {"id": claims["sub"]})
        if user is None:
            return None
        return UserSession(token=token, session_id=row.id, user=user, expires_at=row.expires_at)


class SessionContext:
    """Holds the current session for whoever needs the acting user's identity.

    Lifecycle: ``initialize`` once at startup (restoring a saved token if any),
    ``sign_in`` replaces the session, ``sign_out`` revokes and clears it.
    """

    def __init__(self, auth: AuthService) -> None:
        self.auth = auth
        self._session: UserSession | None = None
        self.initialized = False

    def initialize(self, token: str | None = None) -> UserSession | None:
        self._session = self.auth.get_current_session(token)
        self.initialized = True
        return self._session

    @property
    def session(self) -> UserSession | None:
        return self._session

    @property
    def user(self) -> User | None:
        return self._session.user if self._session else None

    def require_user(self) -> User:
        """Return the signed-in user or raise NotAuthenticated."""
        if self._session is None:
            raise NotAuthenticated("Sign in required")
        return self._session.user

    def sign_up(self, email: str, password: str, username: str) -> UserSession:
        """Register and immediately sign in."""
        self.auth.sign_up(email, password, username)
        return self.sign_in(email, password)

    def sign_in(self, email: str, password: str) -> UserSession:
        self._session = self.auth.sign_in(email, password)
        return self._session

    def sign_out(self) -> None:
        if self._session is not None:
            self.auth.sign_out(self._session.token)
        self._session = None
