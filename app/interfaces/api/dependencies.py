"""FastAPI dependency utilities."""

from __future__ import annotations

from collections.abc import Callable

from anyio import to_thread
from fastapi import Depends, HTTPException, Request, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.application.use_cases.notifications import (
    NotificationServices,
    NotificationStore,
)
from app.domain.errors import AuthenticationError, StoreError
from app.infrastructure.repositories import UserRepository
from app.infrastructure.security import verify_access_token

# Tokens are issued by the account service; this API only verifies them.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/token")


def get_notification_services(request: Request) -> NotificationServices:
    """Return the notification components attached to the running app."""

    return request.app.state.notifications


def get_notification_store(
    services: NotificationServices = Depends(get_notification_services),
) -> NotificationStore:
    return services.store


async def authenticate_subject(token: str | None, services: NotificationServices) -> str:
    """Resolve the authenticated user id for ``token``.

    Raises :class:`AuthenticationError` when the token is invalid or names a
    user the account service does not know.
    """

    user_id = verify_access_token(token, secret_key=services.secret_key)
    exists = await to_thread.run_sync(_user_exists, services.session_factory, user_id)
    if not exists:
        raise AuthenticationError("Unknown user")
    return user_id


def _user_exists(session_factory: Callable[[], Session], user_id: str) -> bool:
    try:
        with session_factory() as session:
            return UserRepository(session).exists(user_id)
    except SQLAlchemyError as exc:
        raise StoreError("User lookup failed") from exc


async def get_current_user_id(
    token: str = Depends(oauth2_scheme),
    services: NotificationServices = Depends(get_notification_services),
) -> str:
    """Return the authenticated subject id from the bearer token."""

    try:
        return await authenticate_subject(token, services)
    except AuthenticationError as exc:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid credentials",
            headers={"WWW-Authenticate": "Bearer"},
        ) from exc
    except StoreError as exc:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Service temporarily unavailable",
        ) from exc
