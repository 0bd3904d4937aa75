"""Transports used to push realtime events to a single session."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol
from uuid import uuid4

from fastapi import WebSocket

from app.domain.entities import PushResult

logger = logging.getLogger(__name__)


class SessionTransport(Protocol):
    """Anything able to push an event to one connected client."""

    async def push(
        self,
        event: str,
        data: dict[str, Any],
        *,
        ack_timeout: float | None = None,
    ) -> PushResult: ...


class WebSocketTransport:
    """Push JSON envelopes over a FastAPI websocket.

    Envelopes look like ``{"type": event, "data": {...}}``. When an
    ``ack_timeout`` is given an ``ack_id`` is added and the push waits until the
    client echoes it back with ``{"type": "ack", "ack_id": ...}``.
    """

    def __init__(self, websocket: WebSocket) -> None:
        self._websocket = websocket
        self._send_lock = asyncio.Lock()
        self._pending: dict[str, asyncio.Future[None]] = {}
        self._closed = False

    async def send(self, message: dict[str, Any]) -> None:
        """Send ``message`` as-is; concurrent pushes are written one at a time."""

        async with self._send_lock:
            await self._websocket.send_json(message)

    async def push(
        self,
        event: str,
        data: dict[str, Any],
        *,
        ack_timeout: float | None = None,
    ) -> PushResult:
        if self._closed:
            return PushResult.ERRORED

        message: dict[str, Any] = {"type": event, "data": data}
        if ack_timeout is None:
            try:
                await self.send(message)
            except Exception as exc:  # pragma: no cover - network dependent
                logger.warning("Websocket push of %s failed: %s", event, exc)
                return PushResult.ERRORED
            return PushResult.ACKNOWLEDGED

        ack_id = uuid4().hex
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        self._pending[ack_id] = future
        message["ack_id"] = ack_id
        try:
            await self.send(message)
            await asyncio.wait_for(future, timeout=ack_timeout)
        except asyncio.TimeoutError:
            logger.debug("Ack %s for %s not received within %ss", ack_id, event, ack_timeout)
            return PushResult.TIMED_OUT
        except Exception as exc:
            logger.warning("Websocket push of %s failed: %s", event, exc)
            return PushResult.ERRORED
        finally:
            self._pending.pop(ack_id, None)
        return PushResult.ACKNOWLEDGED

    def resolve_ack(self, ack_id: object) -> bool:
        """Mark the push identified by ``ack_id`` as acknowledged."""

        if not isinstance(ack_id, str):
            return False
        future = self._pending.get(ack_id)
        if future is None or future.done():
            return False
        future.set_result(None)
        return True

    def close(self) -> None:
        """Fail every push still waiting for an acknowledgment."""

        self._closed = True
        for future in self._pending.values():
            if not future.done():
                future.set_exception(ConnectionError("Session closed"))
        self._pending.clear()


__all__ = ["SessionTransport", "WebSocketTransport"]
