"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any


class NotificationType(str, Enum):
    """Kinds of events that produce a notification."""

    MESSAGE = "message"
    FRIEND_REQUEST = "friend_request"
    GROUP_INVITE = "group_invite"
    SYSTEM = "system"

    @property
    def title(self) -> str:
        """Human readable title shown by clients for this type."""

        return _TITLES[self]


_TITLES = {
    NotificationType.MESSAGE: "New Message",
    NotificationType.FRIEND_REQUEST: "New Friend Request",
    NotificationType.GROUP_INVITE: "Group Invitation",
    NotificationType.SYSTEM: "System Notification",
}


@dataclass
class Notification:
    """Persisted record of an event relevant to a single recipient."""

    notification_id: str | None
    user_id: str
    type: NotificationType
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)
    is_read: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    deleted_at: datetime | None = None


__all__ = ["Notification", "NotificationType"]
