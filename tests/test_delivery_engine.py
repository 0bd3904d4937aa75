"""Tests for realtime fan-out and acknowledgment handling."""

from __future__ import annotations

import asyncio
import time

import pytest

from app.domain.entities import DeliveryOutcome, PushResult
from app.infrastructure.notifications import (
    NOTIFICATION_EVENT,
    ConnectionRegistry,
    DeliveryEngine,
    WebSocketTransport,
)
from conftest import FakeTransport

pytestmark = pytest.mark.anyio

PAYLOAD = {"title": "New Message", "body": "hi", "type": "message", "metadata": {}}


async def test_deliver_without_sessions_returns_false() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry)

    assert await engine.deliver("alice", PAYLOAD) is False

    attempt = await engine.attempt("alice", PAYLOAD)
    assert attempt.outcome is DeliveryOutcome.NO_ACTIVE_SESSIONS
    assert attempt.session_ids == ()
    assert engine.active_session_count("alice") == 0


async def test_deliver_pushes_to_every_session() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry)
    phone, laptop = FakeTransport(), FakeTransport()
    await registry.register("alice", "phone", phone)
    await registry.register("alice", "laptop", laptop)

    assert await engine.deliver("alice", PAYLOAD) is True

    assert phone.events(NOTIFICATION_EVENT) == [PAYLOAD]
    assert laptop.events(NOTIFICATION_EVENT) == [PAYLOAD]
    assert engine.active_session_count("alice") == 2


async def test_one_failing_session_does_not_fail_delivery() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry)
    healthy = FakeTransport()
    await registry.register("alice", "closed", FakeTransport(error=RuntimeError("closed")))
    await registry.register("alice", "healthy", healthy)

    attempt = await engine.attempt("alice", PAYLOAD)

    assert attempt.delivered is True
    assert attempt.outcome is DeliveryOutcome.DELIVERED
    assert attempt.results == {
        "closed": PushResult.ERRORED,
        "healthy": PushResult.ACKNOWLEDGED,
    }


async def test_all_sessions_failing_reports_error() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry)
    await registry.register("alice", "s1", FakeTransport(result=PushResult.ERRORED))
    await registry.register("alice", "s2", FakeTransport(error=ConnectionError("gone")))

    attempt = await engine.attempt("alice", PAYLOAD)

    assert attempt.delivered is False
    assert attempt.outcome is DeliveryOutcome.ERROR


async def test_session_without_transport_counts_as_failed_push() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry)
    await registry.register("alice", "s1")

    attempt = await engine.attempt("alice", PAYLOAD)

    assert attempt.results == {"s1": PushResult.ERRORED}
    assert attempt.delivered is False


async def test_slow_push_is_abandoned_after_timeout() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry, ack_timeout=0.05, require_ack=True)
    await registry.register("alice", "slow", FakeTransport(delay=5))

    started = time.monotonic()
    attempt = await engine.attempt("alice", PAYLOAD)

    assert time.monotonic() - started < 1
    assert attempt.outcome is DeliveryOutcome.TIMEOUT
    assert attempt.delivered is False


async def test_timeout_on_one_session_only_fails_that_session() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry, ack_timeout=0.05, require_ack=True)
    fast = FakeTransport()
    await registry.register("alice", "slow", FakeTransport(delay=5))
    await registry.register("alice", "fast", fast)

    attempt = await engine.attempt("alice", PAYLOAD)

    assert attempt.delivered is True
    assert attempt.results["slow"] is PushResult.TIMED_OUT
    assert fast.pushes == [(NOTIFICATION_EVENT, PAYLOAD, 0.05)]


async def test_ack_timeout_is_only_requested_when_acks_are_required() -> None:
    registry = ConnectionRegistry()
    transport = FakeTransport()
    await registry.register("alice", "s1", transport)

    await DeliveryEngine(registry, ack_timeout=2.0).deliver("alice", PAYLOAD)
    await DeliveryEngine(registry, ack_timeout=2.0, require_ack=True).deliver(
        "alice", PAYLOAD
    )

    assert [ack_timeout for _, _, ack_timeout in transport.pushes] == [None, 2.0]


async def test_broadcast_reaches_all_users() -> None:
    registry = ConnectionRegistry()
    engine = DeliveryEngine(registry)
    alice, bob = FakeTransport(), FakeTransport()
    await registry.register("alice", "a1", alice)
    await registry.register("bob", "b1", bob)
    await registry.register("bob", "b2", FakeTransport(error=RuntimeError("closed")))

    delivered = await engine.broadcast("user_status", {"user_id": "carol", "status": "online"})

    assert delivered == 2
    assert alice.events("user_status") == [{"user_id": "carol", "status": "online"}]
    assert bob.events("user_status") == [{"user_id": "carol", "status": "online"}]


def test_engine_rejects_non_positive_timeout() -> None:
    with pytest.raises(ValueError):
        DeliveryEngine(ConnectionRegistry(), ack_timeout=0)


class _RecordingWebSocket:
    def __init__(self, *, fail: bool = False) -> None:
        self.sent: list[dict] = []
        self.fail = fail

    async def send_json(self, message: dict) -> None:
        if self.fail:
            raise RuntimeError("websocket closed")
        self.sent.append(message)


async def test_websocket_transport_without_ack_sends_envelope() -> None:
    websocket = _RecordingWebSocket()
    transport = WebSocketTransport(websocket)

    result = await transport.push("notification", {"body": "hi"})

    assert result is PushResult.ACKNOWLEDGED
    assert websocket.sent == [{"type": "notification", "data": {"body": "hi"}}]


async def test_websocket_transport_waits_for_client_ack() -> None:
    websocket = _RecordingWebSocket()
    transport = WebSocketTransport(websocket)

    push = asyncio.create_task(
        transport.push("notification", {"body": "hi"}, ack_timeout=1.0)
    )
    while not websocket.sent:
        await asyncio.sleep(0)
    ack_id = websocket.sent[0]["ack_id"]

    assert transport.resolve_ack("unknown") is False
    assert transport.resolve_ack(ack_id) is True
    assert await push is PushResult.ACKNOWLEDGED
    assert transport.resolve_ack(ack_id) is False


async def test_websocket_transport_times_out_without_ack() -> None:
    transport = WebSocketTransport(_RecordingWebSocket())

    result = await transport.push("notification", {}, ack_timeout=0.01)

    assert result is PushResult.TIMED_OUT


async def test_websocket_transport_close_fails_pending_pushes() -> None:
    websocket = _RecordingWebSocket()
    transport = WebSocketTransport(websocket)

    push = asyncio.create_task(transport.push("notification", {}, ack_timeout=5.0))
    while not websocket.sent:
        await asyncio.sleep(0)
    transport.close()

    assert await push is PushResult.ERRORED
    assert await transport.push("notification", {}) is PushResult.ERRORED


async def test_websocket_transport_reports_send_errors() -> None:
    transport = WebSocketTransport(_RecordingWebSocket(fail=True))

    assert await transport.push("notification", {}) is PushResult.ERRORED
    assert await transport.push("notification", {}, ack_timeout=1.0) is PushResult.ERRORED
