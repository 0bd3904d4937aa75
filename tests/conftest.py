"""Shared fixtures for the notification core tests."""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path
from typing import Any
from uuid import uuid4

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

from app.config import Settings  # noqa: E402
from app.domain.entities import PushResult  # noqa: E402
from app.infrastructure.database import (  # noqa: E402
    create_db_engine,
    create_session_factory,
    initialize_database,
)
from app.infrastructure.models import UserModel  # noqa: E402


class FakeTransport:
    """Session transport that records pushes instead of writing to a socket."""

    def __init__(
        self,
        result: PushResult = PushResult.ACKNOWLEDGED,
        *,
        delay: float = 0.0,
        error: Exception | None = None,
    ) -> None:
        self.result = result
        self.delay = delay
        self.error = error
        self.pushes: list[tuple[str, dict[str, Any], float | None]] = []

    async def push(
        self,
        event: str,
        data: dict[str, Any],
        *,
        ack_timeout: float | None = None,
    ) -> PushResult:
        if self.delay:
            await asyncio.sleep(self.delay)
        if self.error is not None:
            raise self.error
        self.pushes.append((event, data, ack_timeout))
        return self.result

    def events(self, name: str) -> list[dict[str, Any]]:
        return [data for event, data, _ in self.pushes if event == name]


def build_settings(database_path: Path, **overrides: Any) -> Settings:
    values: dict[str, Any] = {
        "database_url": f"sqlite:///{database_path}",
        "secret_key": "test-secret",
        "access_token_expire_minutes": 30,
    }
    values.update(overrides)
    return Settings(_env_file=None, **values)


def insert_user(session_factory, username: str, user_id: str | None = None) -> str:
    """Insert a user row the way the account service would."""

    user_id = user_id or str(uuid4())
    with session_factory() as session:
        session.add(
            UserModel(
                user_id=user_id,
                username=username,
                email=f"{username}@example.com",
            )
        )
        session.commit()
    return user_id


@pytest.fixture()
def settings(tmp_path: Path) -> Settings:
    return build_settings(tmp_path / "notifications.db")


@pytest.fixture()
def session_factory(settings: Settings):
    engine = create_db_engine(settings.database_url)
    initialize_database(engine)
    yield create_session_factory(engine)
    engine.dispose()


@pytest.fixture()
def create_user(session_factory):
    def _create(username: str, user_id: str | None = None) -> str:
        return insert_user(session_factory, username, user_id)

    return _create


@pytest.fixture(scope="session")
def anyio_backend() -> str:
    # The service is asyncio-only; don't parametrize over other installed backends.
    return "asyncio"
