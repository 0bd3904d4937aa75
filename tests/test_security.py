"""Tests for the bearer token boundary."""

from datetime import timedelta

import pytest

from app.domain.errors import AuthenticationError
from app.infrastructure.security import (
    create_access_token,
    strip_bearer_prefix,
    verify_access_token,
)

SECRET = "test-secret"


def test_verify_access_token_returns_subject() -> None:
    token = create_access_token({"sub": "user-1"}, secret_key=SECRET)

    assert verify_access_token(token, secret_key=SECRET) == "user-1"
    assert verify_access_token(f"Bearer {token}", secret_key=SECRET) == "user-1"


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        (None, None),
        ("", None),
        ("Bearer ", None),
        ("bearer abc", "abc"),
        ("  Bearer   abc  ", "abc"),
        ("abc", "abc"),
    ],
)
def test_strip_bearer_prefix(raw, expected) -> None:
    assert strip_bearer_prefix(raw) == expected


def test_missing_token_is_rejected() -> None:
    with pytest.raises(AuthenticationError):
        verify_access_token(None, secret_key=SECRET)


def test_token_signed_with_other_secret_is_rejected() -> None:
    token = create_access_token({"sub": "user-1"}, secret_key="other-secret")

    with pytest.raises(AuthenticationError):
        verify_access_token(token, secret_key=SECRET)


def test_expired_token_is_rejected() -> None:
    token = create_access_token(
        {"sub": "user-1"}, secret_key=SECRET, expires_delta=timedelta(minutes=-1)
    )

    with pytest.raises(AuthenticationError):
        verify_access_token(token, secret_key=SECRET)


def test_token_without_subject_is_rejected() -> None:
    token = create_access_token({"user_id": "user-1"}, secret_key=SECRET)

    with pytest.raises(AuthenticationError):
        verify_access_token(token, secret_key=SECRET)
