"""Transient value objects describing realtime delivery results."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class PushResult(str, Enum):
    """Outcome of pushing one event to one session."""

    ACKNOWLEDGED = "acknowledged"
    TIMED_OUT = "timed_out"
    ERRORED = "errored"


class DeliveryOutcome(str, Enum):
    """Aggregated outcome of delivering one payload to a user."""

    DELIVERED = "delivered"
    NO_ACTIVE_SESSIONS = "no_active_sessions"
    TIMEOUT = "timeout"
    ERROR = "error"


@dataclass
class DeliveryAttempt:
    """Record of a single delivery call; never persisted."""

    user_id: str
    event: str
    payload: dict[str, Any]
    session_ids: tuple[str, ...] = ()
    results: dict[str, PushResult] = field(default_factory=dict)

    @property
    def delivered_count(self) -> int:
        return sum(
            1 for result in self.results.values() if result is PushResult.ACKNOWLEDGED
        )

    @property
    def outcome(self) -> DeliveryOutcome:
        if not self.session_ids:
            return DeliveryOutcome.NO_ACTIVE_SESSIONS
        if self.delivered_count:
            return DeliveryOutcome.DELIVERED
        if self.results and all(
            result is PushResult.TIMED_OUT for result in self.results.values()
        ):
            return DeliveryOutcome.TIMEOUT
        return DeliveryOutcome.ERROR

    @property
    def delivered(self) -> bool:
        return self.outcome is DeliveryOutcome.DELIVERED


__all__ = ["DeliveryAttempt", "DeliveryOutcome", "PushResult"]
