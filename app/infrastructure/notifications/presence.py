"""Derive online/offline transitions from registry occupancy."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from datetime import datetime

from app.domain.entities import PresenceStatus

from .delivery import DeliveryEngine
from .events import USER_STATUS_EVENT, build_status_payload
from .registry import ConnectionRegistry
from .transport import SessionTransport

logger = logging.getLogger(__name__)


class PresenceTracker:
    """Register sessions and broadcast ``user_status`` on occupancy edges.

    Only the 0→1 and 1→0 edges of a user's session count emit a status. The
    registry mutation and the broadcast for one user run under a per-user lock
    so that user's online/offline events go out in registration order.
    """

    def __init__(self, registry: ConnectionRegistry, delivery: DeliveryEngine) -> None:
        self._registry = registry
        self._delivery = delivery
        self._user_locks: dict[str, asyncio.Lock] = {}
        self._lock_holders: dict[str, int] = {}

    async def connect(
        self, user_id: str, session_id: str, transport: SessionTransport | None = None
    ) -> bool:
        """Register the session; return ``True`` when the user came online."""

        async with self._user_lock(user_id):
            came_online = await self._registry.register(user_id, session_id, transport)
            if came_online:
                logger.info("User %s is online", user_id)
                await self._broadcast(user_id, PresenceStatus.ONLINE)
        return came_online

    async def disconnect(self, user_id: str, session_id: str) -> bool:
        """Unregister the session; return ``True`` when the user went offline."""

        async with self._user_lock(user_id):
            went_offline = await self._registry.unregister(user_id, session_id)
            if went_offline:
                logger.info("User %s is offline", user_id)
                await self._broadcast(user_id, PresenceStatus.OFFLINE)
        return went_offline

    def status_of(self, user_id: str) -> PresenceStatus:
        if self._registry.is_online(user_id):
            return PresenceStatus.ONLINE
        return PresenceStatus.OFFLINE

    def online_since(self, user_id: str) -> datetime | None:
        """Return when the oldest live session of ``user_id`` connected."""

        connected = []
        for session_id in self._registry.sessions_of(user_id):
            session = self._registry.session(session_id)
            if session is not None:
                connected.append(session.connected_at)
        return min(connected, default=None)

    def online_users(self) -> list[str]:
        return sorted(self._registry.online_users())

    async def _broadcast(self, user_id: str, status: PresenceStatus) -> None:
        await self._delivery.broadcast(
            USER_STATUS_EVENT, build_status_payload(user_id, status)
        )

    @asynccontextmanager
    async def _user_lock(self, user_id: str) -> AsyncIterator[None]:
        lock = self._user_locks.get(user_id)
        if lock is None:
            lock = self._user_locks[user_id] = asyncio.Lock()
        self._lock_holders[user_id] = self._lock_holders.get(user_id, 0) + 1
        try:
            async with lock:
                yield
        finally:
            remaining = self._lock_holders[user_id] - 1
            if remaining:
                self._lock_holders[user_id] = remaining
            else:
                self._lock_holders.pop(user_id, None)
                self._user_locks.pop(user_id, None)


__all__ = ["PresenceTracker"]
