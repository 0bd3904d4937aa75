"""Best-effort fan-out of realtime events to a user's live sessions."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from app.domain.entities import DeliveryAttempt, PushResult

from .events import NOTIFICATION_EVENT
from .registry import ConnectionRegistry

logger = logging.getLogger(__name__)

DEFAULT_ACK_TIMEOUT_SECONDS = 5.0


class DeliveryEngine:
    """Push payloads to every session the registry knows for a user.

    Delivery is never retried and never raises for missing or broken
    sessions: the unread list is the recovery path for clients that missed a
    push. Every push is abandoned once ``ack_timeout`` elapses, whether or not
    client acknowledgments are required.
    """

    def __init__(
        self,
        registry: ConnectionRegistry,
        *,
        ack_timeout: float = DEFAULT_ACK_TIMEOUT_SECONDS,
        require_ack: bool = False,
    ) -> None:
        if ack_timeout <= 0:
            raise ValueError("ack_timeout must be positive")
        self._registry = registry
        self._ack_timeout = ack_timeout
        self._require_ack = require_ack

    async def deliver(
        self,
        user_id: str,
        payload: dict[str, Any],
        *,
        event: str = NOTIFICATION_EVENT,
    ) -> bool:
        """Return ``True`` when at least one session accepted ``payload``."""

        attempt = await self.attempt(user_id, payload, event=event)
        return attempt.delivered

    async def attempt(
        self,
        user_id: str,
        payload: dict[str, Any],
        *,
        event: str = NOTIFICATION_EVENT,
    ) -> DeliveryAttempt:
        session_ids = tuple(sorted(self._registry.sessions_of(user_id)))
        attempt = DeliveryAttempt(
            user_id=user_id, event=event, payload=payload, session_ids=session_ids
        )
        if not session_ids:
            logger.debug("No active sessions for user %s; %s not pushed", user_id, event)
            return attempt

        results = await asyncio.gather(
            *(
                self._push(session_id, event, payload, wait_for_ack=self._require_ack)
                for session_id in session_ids
            )
        )
        attempt.results = dict(zip(session_ids, results))
        logger.debug(
            "Delivered %s to %d/%d sessions of user %s (%s)",
            event,
            attempt.delivered_count,
            len(session_ids),
            user_id,
            attempt.outcome.value,
        )
        return attempt

    async def broadcast(self, event: str, payload: dict[str, Any]) -> int:
        """Push ``payload`` to every live session; return the successful pushes."""

        session_ids = self._registry.all_session_ids()
        if not session_ids:
            return 0
        results = await asyncio.gather(
            *(
                self._push(session_id, event, payload, wait_for_ack=False)
                for session_id in session_ids
            )
        )
        return sum(1 for result in results if result is PushResult.ACKNOWLEDGED)

    def active_session_count(self, user_id: str) -> int:
        return len(self._registry.sessions_of(user_id))

    async def _push(
        self,
        session_id: str,
        event: str,
        payload: dict[str, Any],
        *,
        wait_for_ack: bool,
    ) -> PushResult:
        transport = self._registry.transport_of(session_id)
        if transport is None:
            return PushResult.ERRORED

        ack_timeout = self._ack_timeout if wait_for_ack else None
        try:
            return await asyncio.wait_for(
                transport.push(event, payload, ack_timeout=ack_timeout),
                timeout=self._ack_timeout,
            )
        except asyncio.TimeoutError:
            logger.warning("Push of %s to session %s timed out", event, session_id)
            return PushResult.TIMED_OUT
        except Exception as exc:
            logger.warning("Push of %s to session %s failed: %s", event, session_id, exc)
            return PushResult.ERRORED


__all__ = ["DEFAULT_ACK_TIMEOUT_SECONDS", "DeliveryEngine"]
