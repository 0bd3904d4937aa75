"""Pydantic models describing user presence."""

from datetime import datetime

from pydantic import BaseModel

from app.domain.entities import PresenceStatus


class PresenceRead(BaseModel):
    """Current presence of a user as seen by this server instance."""

    user_id: str
    status: PresenceStatus
    active_sessions: int
    online_since: datetime | None = None


class OnlineUsersRead(BaseModel):
    user_ids: list[str]


__all__ = ["OnlineUsersRead", "PresenceRead"]
