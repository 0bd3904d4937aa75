"""Domain entities exposed by the application."""

from .delivery import DeliveryAttempt, DeliveryOutcome, PushResult
from .notification import Notification, NotificationType
from .session import PresenceStatus, Session

__all__ = [
    "DeliveryAttempt",
    "DeliveryOutcome",
    "PushResult",
    "Notification",
    "NotificationType",
    "PresenceStatus",
    "Session",
]
