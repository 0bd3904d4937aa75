"""Persistence helpers for notification entities."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any, Iterable

from sqlalchemy.orm import Query, Session

from app.domain.entities import Notification, NotificationType
from app.infrastructure.models import NotificationModel
from app.utils import ensure_naive_utc, ensure_utc

_PATCHABLE_FIELDS = {
    "content": NotificationModel.content,
    "metadata": NotificationModel.metadata_,
    "is_read": NotificationModel.is_read,
    "updated_at": NotificationModel.updated_at,
    "deleted_at": NotificationModel.deleted_at,
}


@dataclass(frozen=True)
class NotificationFilter:
    """Criteria accepted by :meth:`NotificationRepository.find`.

    Soft-deleted rows never match.
    """

    user_id: str | None = None
    notification_ids: tuple[str, ...] | None = None
    is_read: bool | None = None


class NotificationRepository:
    """Provide insert/find/update operations for :class:`Notification` objects."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def insert(self, notification: Notification) -> Notification:
        if notification.notification_id is None:
            raise ValueError("Notification id is required for inserts")
        model = NotificationModel()
        self._apply_entity_to_model(model, notification)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def find(self, criteria: NotificationFilter) -> Sequence[Notification]:
        """Return matching notifications, newest first."""

        query = self._filtered_query(criteria).order_by(
            NotificationModel.created_at.desc(),
            NotificationModel.notification_id.desc(),
        )
        return [self._to_entity(model) for model in query.all()]

    def find_one(self, criteria: NotificationFilter) -> Notification | None:
        model = self._filtered_query(criteria).first()
        return self._to_entity(model) if model else None

    def update(self, notification_id: str, patch: dict[str, Any]) -> Notification:
        model = self.session.get(NotificationModel, notification_id)
        if model is None:
            msg = f"Notification with id {notification_id} not found"
            raise ValueError(msg)
        for key, value in self._normalize_patch(patch).items():
            setattr(model, _PATCHABLE_FIELDS[key].key, value)
        self.session.add(model)
        self.session.commit()
        self.session.refresh(model)
        return self._to_entity(model)

    def update_where(self, criteria: NotificationFilter, patch: dict[str, Any]) -> int:
        """Apply ``patch`` to every row matching ``criteria``; return the row count."""

        values = {
            _PATCHABLE_FIELDS[key]: value
            for key, value in self._normalize_patch(patch).items()
        }
        updated = self._filtered_query(criteria).update(
            values, synchronize_session=False
        )
        self.session.commit()
        return updated

    def _filtered_query(self, criteria: NotificationFilter) -> Query:
        query = self.session.query(NotificationModel)
        if criteria.user_id is not None:
            query = query.filter(NotificationModel.user_id == criteria.user_id)
        if criteria.notification_ids is not None:
            query = query.filter(
                NotificationModel.notification_id.in_(criteria.notification_ids)
            )
        if criteria.is_read is not None:
            query = query.filter(NotificationModel.is_read.is_(criteria.is_read))
        return query.filter(NotificationModel.deleted_at.is_(None))

    @staticmethod
    def _normalize_patch(patch: dict[str, Any]) -> dict[str, Any]:
        unknown = set(patch) - set(_PATCHABLE_FIELDS)
        if unknown:
            raise ValueError(f"Unsupported notification fields: {sorted(unknown)}")
        normalized = dict(patch)
        for key in ("updated_at", "deleted_at"):
            if key in normalized:
                normalized[key] = ensure_naive_utc(normalized[key])
        return normalized

    @staticmethod
    def _apply_entity_to_model(
        model: NotificationModel, notification: Notification
    ) -> None:
        model.notification_id = notification.notification_id
        model.user_id = notification.user_id
        model.type = NotificationType(notification.type).value
        model.content = notification.content
        model.metadata_ = notification.metadata or {}
        model.is_read = notification.is_read
        model.created_at = ensure_naive_utc(notification.created_at)
        model.updated_at = ensure_naive_utc(
            notification.updated_at or notification.created_at
        )
        model.deleted_at = ensure_naive_utc(notification.deleted_at)

    @staticmethod
    def _to_entity(model: NotificationModel) -> Notification:
        return Notification(
            notification_id=model.notification_id,
            user_id=model.user_id,
            type=NotificationType(model.type),
            content=model.content,
            metadata=dict(model.metadata_ or {}),
            is_read=bool(model.is_read),
            created_at=ensure_utc(model.created_at),
            updated_at=ensure_utc(model.updated_at),
            deleted_at=ensure_utc(model.deleted_at),
        )


def unique_ids(notification_ids: Iterable[str | None]) -> tuple[str, ...]:
    """Return ``notification_ids`` without blanks or duplicates, order preserved."""

    seen: dict[str, None] = {}
    for notification_id in notification_ids:
        if notification_id and notification_id not in seen:
            seen[notification_id] = None
    return tuple(seen)


__all__ = ["NotificationFilter", "NotificationRepository", "unique_ids"]
