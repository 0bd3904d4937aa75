"""Repository implementations for infrastructure layer."""

from .user_repository import UserRepository
from .notification_repository import (
    NotificationFilter,
    NotificationRepository,
    unique_ids,
)

__all__ = [
    "UserRepository",
    "NotificationFilter",
    "NotificationRepository",
    "unique_ids",
]
