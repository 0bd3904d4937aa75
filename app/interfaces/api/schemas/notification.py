"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from app.domain.entities import NotificationType


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    notification_id: str
    user_id: str
    type: NotificationType
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)
    is_read: bool
    created_at: datetime
    updated_at: datetime | None = None


class NotificationActionResult(BaseModel):
    """Acknowledgment returned by bulk notification actions."""

    status: str = "ok"


__all__ = ["NotificationActionResult", "NotificationRead"]
