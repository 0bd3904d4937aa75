"""Wire event names and payload builders shared by websocket clients."""

from __future__ import annotations

from typing import Any, Iterable

from app.domain.entities import Notification, NotificationType, PresenceStatus
from app.utils import isoformat_or_none

NOTIFICATION_EVENT = "notification"
USER_STATUS_EVENT = "user_status"
CONNECTED_EVENT = "notifications:connected"
UNREAD_EVENT = "notifications:unread"
ERROR_EVENT = "error"
PONG_EVENT = "pong"

AUTHENTICATION_FAILED_MESSAGE = "Authentication failed"


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return a JSON-serializable representation of ``notification``."""

    return {
        "notification_id": notification.notification_id,
        "user_id": notification.user_id,
        "type": NotificationType(notification.type).value,
        "content": notification.content,
        "metadata": dict(notification.metadata or {}),
        "is_read": notification.is_read,
        "created_at": isoformat_or_none(notification.created_at),
        "updated_at": isoformat_or_none(notification.updated_at),
    }


def build_notification_payload(notification: Notification) -> dict[str, Any]:
    """Build the ``notification`` event pushed to the recipient's sessions.

    ``metadata`` carries the notification id so clients can correlate the push
    with the row they later fetch or mark as read.
    """

    notification_type = NotificationType(notification.type)
    metadata = dict(notification.metadata or {})
    metadata["notification_id"] = notification.notification_id
    return {
        "notification_id": notification.notification_id,
        "title": notification_type.title,
        "body": notification.content,
        "content": notification.content,
        "type": notification_type.value,
        "metadata": metadata,
        "timestamp": isoformat_or_none(notification.created_at),
    }


def build_status_payload(user_id: str, status: PresenceStatus) -> dict[str, Any]:
    return {"user_id": user_id, "status": PresenceStatus(status).value}


def build_connected_payload(session_id: str) -> dict[str, Any]:
    return {"status": "connected", "session_id": session_id}


def build_unread_payload(notifications: Iterable[Notification]) -> dict[str, Any]:
    items = [serialize_notification(notification) for notification in notifications]
    return {"count": len(items), "notifications": items}


def build_error_payload(message: str) -> dict[str, Any]:
    return {"message": message}


__all__ = [
    "NOTIFICATION_EVENT",
    "USER_STATUS_EVENT",
    "CONNECTED_EVENT",
    "UNREAD_EVENT",
    "ERROR_EVENT",
    "PONG_EVENT",
    "AUTHENTICATION_FAILED_MESSAGE",
    "serialize_notification",
    "build_notification_payload",
    "build_status_payload",
    "build_connected_payload",
    "build_unread_payload",
    "build_error_payload",
]
