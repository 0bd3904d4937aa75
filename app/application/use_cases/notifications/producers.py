"""Turn domain actions into a persisted notification plus a realtime push."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterable
from dataclasses import dataclass
from typing import Any

from app.domain.entities import Notification, NotificationType
from app.infrastructure.notifications import DeliveryEngine, build_notification_payload

from .store import NotificationStore

logger = logging.getLogger(__name__)

MESSAGE_PREVIEW_LIMIT = 50
_ELLIPSIS = "..."


@dataclass(frozen=True)
class ProducedNotification:
    """Result of producing one notification."""

    notification: Notification
    delivered: bool
    active_connections: int


def build_message_preview(content: str, limit: int = MESSAGE_PREVIEW_LIMIT) -> str:
    """Return ``content`` cut to ``limit`` characters, ellipsis included."""

    if len(content) <= limit:
        return content
    return content[: limit - len(_ELLIPSIS)] + _ELLIPSIS


class NotificationProducer:
    """Build notifications for each supported event and deliver them.

    The store write always happens first. Delivery problems are logged and
    reported through ``delivered=False`` but never raised, so the domain
    action that triggered the notification is not affected. Store failures do
    propagate and no delivery is attempted. Callers are responsible for
    checking that the actor may trigger the event.
    """

    def __init__(self, store: NotificationStore, delivery: DeliveryEngine) -> None:
        self._store = store
        self._delivery = delivery

    async def notify_message(
        self,
        recipient_id: str,
        *,
        sender_name: str,
        conversation_id: str,
        content: str,
    ) -> ProducedNotification:
        preview = build_message_preview(content)
        return await self._produce(
            recipient_id,
            NotificationType.MESSAGE,
            f"New message from {sender_name}: {preview}",
            {
                "conversation_id": conversation_id,
                "sender_name": sender_name,
                "message_preview": preview,
            },
        )

    async def notify_conversation_message(
        self,
        participant_ids: Iterable[str],
        *,
        sender_id: str,
        sender_name: str,
        conversation_id: str,
        content: str,
    ) -> list[ProducedNotification]:
        """Notify every conversation participant except the sender."""

        recipients = list(
            dict.fromkeys(
                participant_id
                for participant_id in participant_ids
                if participant_id and participant_id != sender_id
            )
        )
        return list(
            await asyncio.gather(
                *(
                    self.notify_message(
                        recipient_id,
                        sender_name=sender_name,
                        conversation_id=conversation_id,
                        content=content,
                    )
                    for recipient_id in recipients
                )
            )
        )

    async def notify_friend_request(
        self, recipient_id: str, *, sender_id: str, sender_name: str
    ) -> ProducedNotification:
        return await self._produce(
            recipient_id,
            NotificationType.FRIEND_REQUEST,
            f"{sender_name} sent you a friend request",
            {"sender_id": sender_id, "sender_name": sender_name},
        )

    async def notify_group_invite(
        self,
        recipient_id: str,
        *,
        sender_name: str,
        conversation_id: str,
        group_name: str,
    ) -> ProducedNotification:
        return await self._produce(
            recipient_id,
            NotificationType.GROUP_INVITE,
            f"{sender_name} added you to the group '{group_name}'",
            {
                "conversation_id": conversation_id,
                "sender_name": sender_name,
                "group_name": group_name,
            },
        )

    async def notify_system(
        self,
        recipient_id: str,
        *,
        content: str,
        metadata: dict[str, Any] | None = None,
    ) -> ProducedNotification:
        return await self._produce(
            recipient_id, NotificationType.SYSTEM, content, dict(metadata or {})
        )

    async def _produce(
        self,
        recipient_id: str,
        notification_type: NotificationType,
        content: str,
        metadata: dict[str, Any],
    ) -> ProducedNotification:
        notification = await self._store.create(
            recipient_id, notification_type, content, metadata
        )
        payload = build_notification_payload(notification)
        try:
            delivered = await self._delivery.deliver(recipient_id, payload)
        except Exception:
            logger.exception(
                "Realtime delivery of notification %s failed",
                notification.notification_id,
            )
            delivered = False

        active_connections = self._delivery.active_session_count(recipient_id)
        if not delivered:
            logger.debug(
                "Notification %s stored for user %s without a live delivery",
                notification.notification_id,
                recipient_id,
            )
        return ProducedNotification(
            notification=notification,
            delivered=delivered,
            active_connections=active_connections,
        )


__all__ = [
    "MESSAGE_PREVIEW_LIMIT",
    "NotificationProducer",
    "ProducedNotification",
    "build_message_preview",
]
