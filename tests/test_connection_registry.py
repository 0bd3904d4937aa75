"""Tests for the in-memory connection registry."""

from __future__ import annotations

import asyncio
import random

import pytest

from app.infrastructure.notifications import ConnectionRegistry
from conftest import FakeTransport

pytestmark = pytest.mark.anyio


async def test_register_and_unregister_track_sessions() -> None:
    registry = ConnectionRegistry()

    assert registry.sessions_of("alice") == frozenset()
    assert registry.is_online("alice") is False

    assert await registry.register("alice", "s1") is True
    assert await registry.register("alice", "s2") is False
    assert registry.sessions_of("alice") == {"s1", "s2"}
    assert registry.is_online("alice") is True

    assert await registry.unregister("alice", "s1") is False
    assert registry.sessions_of("alice") == {"s2"}
    assert await registry.unregister("alice", "s2") is True
    assert registry.is_online("alice") is False
    assert "alice" not in registry.online_users()


async def test_register_same_pair_twice_is_idempotent() -> None:
    registry = ConnectionRegistry()

    await registry.register("alice", "s1")
    assert await registry.register("alice", "s1") is False

    assert len(registry.sessions_of("alice")) == 1


async def test_reregistering_updates_transport() -> None:
    registry = ConnectionRegistry()
    first, second = FakeTransport(), FakeTransport()

    await registry.register("alice", "s1", first)
    await registry.register("alice", "s1", second)

    assert registry.transport_of("s1") is second


async def test_unregister_unknown_session_is_a_noop() -> None:
    registry = ConnectionRegistry()
    await registry.register("alice", "s1")

    assert await registry.unregister("alice", "missing") is False
    assert await registry.unregister("bob", "s1") is False
    assert registry.sessions_of("alice") == {"s1"}
    assert registry.online_users() == {"alice"}


async def test_session_id_cannot_move_between_users() -> None:
    registry = ConnectionRegistry()
    await registry.register("alice", "s1")

    with pytest.raises(ValueError):
        await registry.register("bob", "s1")

    assert registry.is_online("bob") is False
    assert "bob" not in registry.online_users()


async def test_unregister_drops_session_metadata_and_transport() -> None:
    registry = ConnectionRegistry()
    await registry.register("alice", "s1", FakeTransport())

    session = registry.session("s1")
    assert session is not None
    assert session.user_id == "alice"
    assert session.connected_at.tzinfo is not None

    await registry.unregister("alice", "s1")

    assert registry.session("s1") is None
    assert registry.transport_of("s1") is None
    assert registry.all_session_ids() == ()


async def test_online_state_matches_sessions_under_interleaved_mutations() -> None:
    registry = ConnectionRegistry()
    rng = random.Random(7)
    users = ["alice", "bob", "carol"]
    operations = []
    for index in range(200):
        user_id = rng.choice(users)
        session_id = f"{user_id}-{rng.randint(0, 4)}"
        if rng.random() < 0.6:
            operations.append(registry.register(user_id, session_id))
        else:
            operations.append(registry.unregister(user_id, session_id))
        if index % 25 == 0:
            await asyncio.gather(*operations)
            operations = []
            for user in users:
                assert registry.is_online(user) == bool(registry.sessions_of(user))

    await asyncio.gather(*operations)
    for user in users:
        assert registry.is_online(user) == bool(registry.sessions_of(user))
        assert (user in registry.online_users()) == registry.is_online(user)
