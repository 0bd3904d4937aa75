"""Realtime notification helpers for the infrastructure layer."""

from .delivery import DEFAULT_ACK_TIMEOUT_SECONDS, DeliveryEngine
from .events import (
    AUTHENTICATION_FAILED_MESSAGE,
    CONNECTED_EVENT,
    ERROR_EVENT,
    NOTIFICATION_EVENT,
    PONG_EVENT,
    UNREAD_EVENT,
    USER_STATUS_EVENT,
    build_connected_payload,
    build_error_payload,
    build_notification_payload,
    build_status_payload,
    build_unread_payload,
    serialize_notification,
)
from .presence import PresenceTracker
from .registry import ConnectionRegistry
from .transport import SessionTransport, WebSocketTransport

__all__ = [
    "ConnectionRegistry",
    "PresenceTracker",
    "DeliveryEngine",
    "DEFAULT_ACK_TIMEOUT_SECONDS",
    "SessionTransport",
    "WebSocketTransport",
    "NOTIFICATION_EVENT",
    "USER_STATUS_EVENT",
    "CONNECTED_EVENT",
    "UNREAD_EVENT",
    "ERROR_EVENT",
    "PONG_EVENT",
    "AUTHENTICATION_FAILED_MESSAGE",
    "serialize_notification",
    "build_notification_payload",
    "build_status_payload",
    "build_connected_payload",
    "build_unread_payload",
    "build_error_payload",
]
