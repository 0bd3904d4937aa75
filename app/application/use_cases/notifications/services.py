"""Wiring of the notification core components."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.config import Settings
from app.infrastructure.notifications import (
    ConnectionRegistry,
    DeliveryEngine,
    PresenceTracker,
)

from .producers import NotificationProducer
from .store import NotificationStore


@dataclass
class NotificationServices:
    """The registry, presence, delivery, store and producer of one process."""

    registry: ConnectionRegistry
    presence: PresenceTracker
    delivery: DeliveryEngine
    store: NotificationStore
    producer: NotificationProducer
    session_factory: Callable[[], Session]
    secret_key: str


def build_notification_services(
    settings: Settings, session_factory: Callable[[], Session]
) -> NotificationServices:
    registry = ConnectionRegistry()
    delivery = DeliveryEngine(
        registry,
        ack_timeout=settings.delivery_ack_timeout_seconds,
        require_ack=settings.delivery_require_ack,
    )
    store = NotificationStore(session_factory)
    return NotificationServices(
        registry=registry,
        presence=PresenceTracker(registry, delivery),
        delivery=delivery,
        store=store,
        producer=NotificationProducer(store, delivery),
        session_factory=session_factory,
        secret_key=settings.secret_key,
    )


__all__ = ["NotificationServices", "build_notification_services"]
