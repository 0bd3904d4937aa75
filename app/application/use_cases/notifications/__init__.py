"""Public helpers for storing and emitting domain notifications."""

from .producers import (
    MESSAGE_PREVIEW_LIMIT,
    NotificationProducer,
    ProducedNotification,
    build_message_preview,
)
from .services import NotificationServices, build_notification_services
from .store import NotificationStore

__all__ = [
    "MESSAGE_PREVIEW_LIMIT",
    "NotificationProducer",
    "NotificationServices",
    "NotificationStore",
    "ProducedNotification",
    "build_message_preview",
    "build_notification_services",
]
