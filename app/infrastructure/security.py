"""Bearer token helpers for the authentication boundary."""

from __future__ import annotations

from datetime import timedelta

from jose import JWTError, jwt

from app.domain.errors import AuthenticationError
from app.utils import utc_now

ALGORITHM = "HS256"
_BEARER_PREFIX = "bearer "


def create_access_token(
    data: dict,
    *,
    secret_key: str,
    expires_delta: timedelta | None = None,
    expire_minutes: int = 60,
) -> str:
    expire = utc_now() + (expires_delta or timedelta(minutes=expire_minutes))
    return jwt.encode({**data, "exp": expire}, secret_key, algorithm=ALGORITHM)


def decode_access_token(token: str, *, secret_key: str) -> dict:
    try:
        return jwt.decode(token, secret_key, algorithms=[ALGORITHM])
    except JWTError as exc:
        raise ValueError("Could not validate credentials") from exc


def strip_bearer_prefix(token: str | None) -> str | None:
    """Return ``token`` without a leading ``Bearer`` scheme, or ``None`` if blank."""

    if token is None:
        return None
    token = token.strip()
    if token.lower().startswith(_BEARER_PREFIX):
        token = token[len(_BEARER_PREFIX) :].strip()
    return token or None


def verify_access_token(token: str | None, *, secret_key: str) -> str:
    """Return the authenticated subject id carried by ``token``.

    This is the only place where the subject is read from token claims; every
    REST and websocket entry point goes through it.
    """

    raw_token = strip_bearer_prefix(token)
    if raw_token is None:
        raise AuthenticationError("No token provided")
    try:
        payload = decode_access_token(raw_token, secret_key=secret_key)
    except ValueError as exc:
        raise AuthenticationError("Invalid or expired token") from exc

    subject = payload.get("sub")
    if not isinstance(subject, str) or not subject:
        raise AuthenticationError("Token has no subject")
    return subject


__all__ = [
    "ALGORITHM",
    "create_access_token",
    "decode_access_token",
    "strip_bearer_prefix",
    "verify_access_token",
]
