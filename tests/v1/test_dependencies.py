# tests/v1/test_dependencies.py
"""Tests for API dependencies module."""

import pytest
from fastapi import HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials

from linkboard.api.v1.dependencies import get_current_user, get_session_context, raise_http_error
from linkboard.services.errors import (
    AggregationFailed,
    InvalidCredentials,
    InvalidVoteValue,
    NotAuthenticated,
    PersistenceError,
    PostNotFound,
    RegistrationError,
    UserNotFound,
)


class TestRaiseHttpError:
    """Each domain error maps onto one status code."""

    @pytest.mark.parametrize(
        ("error", "expected"),
        [
            (InvalidVoteValue(0), status.HTTP_422_UNPROCESSABLE_ENTITY),
            (PostNotFound("p"), status.HTTP_404_NOT_FOUND),
            (UserNotFound("u"), status.HTTP_404_NOT_FOUND),
            (RegistrationError("taken"), status.HTTP_400_BAD_REQUEST),
            (InvalidCredentials("nope"), status.HTTP_401_UNAUTHORIZED),
            (NotAuthenticated("sign in"), status.HTTP_401_UNAUTHORIZED),
            (AggregationFailed("p"), status.HTTP_500_INTERNAL_SERVER_ERROR),
            (PersistenceError("down"), status.HTTP_503_SERVICE_UNAVAILABLE),
        ],
    )
    def test_status_mapping(self, error, expected):
        with pytest.raises(HTTPException) as exc_info:
            raise_http_error(error)

        assert exc_info.value.status_code == expected
        assert exc_info.value.detail == str(error)


class TestGetCurrentUser:
    """Test the session context and current-user dependencies."""

    def test_valid_token(self, store, test_user, auth_token):
        token = auth_token["Authorization"].removeprefix("Bearer ")
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        context = get_session_context(store, credentials)

        assert get_current_user(context) == test_user

    def test_missing_credentials(self, store):
        context = get_session_context(store, None)

        with pytest.raises(HTTPException) as exc_info:
            get_current_user(context)

        assert exc_info.value.status_code == status.HTTP_401_UNAUTHORIZED
        assert exc_info.value.detail == "Could not validate credentials"
