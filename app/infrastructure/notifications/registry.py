"""In-memory registry of live sessions grouped by user."""

from __future__ import annotations

import asyncio
import logging

from app.domain.entities import Session
from app.utils import utc_now

from .transport import SessionTransport

logger = logging.getLogger(__name__)


class ConnectionRegistry:
    """Track which sessions each user currently holds.

    A user key exists only while the user has at least one session, so an
    absent key means "no sessions" and reads never create entries. Mutations
    are serialized through a single lock; reads return snapshots.
    """

    def __init__(self) -> None:
        self._sessions_by_user: dict[str, set[str]] = {}
        self._sessions: dict[str, Session] = {}
        self._transports: dict[str, SessionTransport] = {}
        self._lock = asyncio.Lock()

    async def register(
        self,
        user_id: str,
        session_id: str,
        transport: SessionTransport | None = None,
    ) -> bool:
        """Add ``session_id`` for ``user_id``.

        Returns ``True`` when the user went from zero to one session.
        Registering the same pair again is a no-op.
        """

        async with self._lock:
            existing = self._sessions.get(session_id)
            if existing is not None and existing.user_id != user_id:
                msg = f"Session {session_id} is already registered for another user"
                raise ValueError(msg)

            sessions = self._sessions_by_user.setdefault(user_id, set())
            if session_id in sessions:
                if transport is not None:
                    self._transports[session_id] = transport
                return False

            first_session = not sessions
            sessions.add(session_id)
            self._sessions[session_id] = Session(
                session_id=session_id, user_id=user_id, connected_at=utc_now()
            )
            if transport is not None:
                self._transports[session_id] = transport
            logger.debug(
                "Registered session %s for user %s (%d active)",
                session_id,
                user_id,
                len(sessions),
            )
            return first_session

    async def unregister(self, user_id: str, session_id: str) -> bool:
        """Remove ``session_id``; return ``True`` when it was the user's last one."""

        async with self._lock:
            sessions = self._sessions_by_user.get(user_id)
            if not sessions or session_id not in sessions:
                return False

            sessions.discard(session_id)
            self._sessions.pop(session_id, None)
            self._transports.pop(session_id, None)
            if sessions:
                return False
            del self._sessions_by_user[user_id]
            return True

    def sessions_of(self, user_id: str) -> frozenset[str]:
        return frozenset(self._sessions_by_user.get(user_id, ()))

    def is_online(self, user_id: str) -> bool:
        return bool(self._sessions_by_user.get(user_id))

    def session(self, session_id: str) -> Session | None:
        return self._sessions.get(session_id)

    def transport_of(self, session_id: str) -> SessionTransport | None:
        return self._transports.get(session_id)

    def online_users(self) -> frozenset[str]:
        return frozenset(self._sessions_by_user)

    def all_session_ids(self) -> tuple[str, ...]:
        return tuple(self._sessions)


__all__ = ["ConnectionRegistry"]
