"""Read/unread state machine and soft-delete rules for notifications."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from typing import Any, TypeVar
from uuid import uuid4

from anyio import to_thread
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.domain.entities import Notification, NotificationType
from app.domain.errors import NotFoundError, StoreError
from app.infrastructure.repositories import (
    NotificationFilter,
    NotificationRepository,
    UserRepository,
    unique_ids,
)
from app.utils import utc_now

logger = logging.getLogger(__name__)

T = TypeVar("T")

_NOT_FOUND_MESSAGE = "Notification not found"


class NotificationStore:
    """Async facade over :class:`NotificationRepository`.

    Every operation opens its own database session on a worker thread so the
    event loop never waits on the database. Lookups by id are always scoped
    to the caller, so a notification owned by someone else behaves exactly
    like a missing one.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    async def create(
        self,
        user_id: str,
        type: NotificationType | str,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> Notification:
        notification_type = NotificationType(type)

        def _create(session: Session) -> Notification:
            if not UserRepository(session).exists(user_id):
                raise NotFoundError("Recipient not found")
            now = utc_now()
            notification = Notification(
                notification_id=str(uuid4()),
                user_id=user_id,
                type=notification_type,
                content=content,
                metadata=dict(metadata or {}),
                is_read=False,
                created_at=now,
                updated_at=now,
                deleted_at=None,
            )
            return NotificationRepository(session).insert(notification)

        created = await self._run(_create)
        logger.debug(
            "Created %s notification %s for user %s",
            created.type.value,
            created.notification_id,
            user_id,
        )
        return created

    async def list_all(self, user_id: str) -> Sequence[Notification]:
        return await self._run(
            lambda session: NotificationRepository(session).find(
                NotificationFilter(user_id=user_id)
            )
        )

    async def list_unread(self, user_id: str) -> Sequence[Notification]:
        return await self._run(
            lambda session: NotificationRepository(session).find(
                NotificationFilter(user_id=user_id, is_read=False)
            )
        )

    async def mark_read(self, notification_id: str, user_id: str) -> Notification:
        def _mark_read(session: Session) -> Notification:
            repository = NotificationRepository(session)
            notification = self._get_owned(repository, notification_id, user_id)
            if notification.is_read:
                return notification
            return repository.update(
                notification_id, {"is_read": True, "updated_at": utc_now()}
            )

        return await self._run(_mark_read)

    async def mark_all_read(self, user_id: str) -> None:
        updated = await self._run(
            lambda session: NotificationRepository(session).update_where(
                NotificationFilter(user_id=user_id, is_read=False),
                {"is_read": True, "updated_at": utc_now()},
            )
        )
        logger.debug("Marked %d notifications as read for user %s", updated, user_id)

    async def mark_many_read(
        self, notification_ids: Iterable[str | None], user_id: str
    ) -> int:
        """Mark the given ids as read, ignoring ids that are absent or not owned."""

        ids = unique_ids(notification_ids)
        if not ids:
            return 0
        return await self._run(
            lambda session: NotificationRepository(session).update_where(
                NotificationFilter(user_id=user_id, notification_ids=ids, is_read=False),
                {"is_read": True, "updated_at": utc_now()},
            )
        )

    async def soft_delete(self, notification_id: str, user_id: str) -> None:
        def _soft_delete(session: Session) -> None:
            repository = NotificationRepository(session)
            self._get_owned(repository, notification_id, user_id)
            now = utc_now()
            repository.update(notification_id, {"deleted_at": now, "updated_at": now})

        await self._run(_soft_delete)
        logger.debug("Soft-deleted notification %s for user %s", notification_id, user_id)

    @staticmethod
    def _get_owned(
        repository: NotificationRepository, notification_id: str, user_id: str
    ) -> Notification:
        notification = repository.find_one(
            NotificationFilter(user_id=user_id, notification_ids=(notification_id,))
        )
        if notification is None:
            raise NotFoundError(_NOT_FOUND_MESSAGE)
        return notification

    async def _run(self, operation: Callable[[Session], T]) -> T:
        return await to_thread.run_sync(self._run_in_session, operation)

    def _run_in_session(self, operation: Callable[[Session], T]) -> T:
        try:
            with self._session_factory() as session:
                return operation(session)
        except SQLAlchemyError as exc:
            logger.error("Notification storage failed: %s", exc)
            raise StoreError("Notification storage failed") from exc


__all__ = ["NotificationStore"]
