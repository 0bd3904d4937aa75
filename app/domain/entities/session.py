"""Domain entities describing live transport sessions and presence."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class PresenceStatus(str, Enum):
    """Derived online/offline state of a user."""

    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class Session:
    """One authenticated connection held by a user.

    Sessions only live in memory; a user may hold several at once (one per
    device or browser tab).
    """

    session_id: str
    user_id: str
    connected_at: datetime


__all__ = ["PresenceStatus", "Session"]
