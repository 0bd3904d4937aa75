"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import json
import logging
from typing import Any
from uuid import uuid4

import anyio
from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from app.application.use_cases.notifications import (
    NotificationServices,
    NotificationStore,
)
from app.domain.entities import Notification
from app.domain.errors import AuthenticationError, NotFoundError, StoreError
from app.infrastructure.notifications import (
    AUTHENTICATION_FAILED_MESSAGE,
    CONNECTED_EVENT,
    ERROR_EVENT,
    PONG_EVENT,
    UNREAD_EVENT,
    WebSocketTransport,
    build_connected_payload,
    build_error_payload,
    build_unread_payload,
)
from app.interfaces.api.dependencies import (
    authenticate_subject,
    get_current_user_id,
    get_notification_store,
)
from app.interfaces.api.schemas import NotificationActionResult, NotificationRead

router = APIRouter(prefix="/notifications", tags=["notifications"])

logger = logging.getLogger(__name__)


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead(
        notification_id=notification.notification_id or "",
        user_id=notification.user_id,
        type=notification.type,
        content=notification.content,
        metadata=notification.metadata or {},
        is_read=notification.is_read,
        created_at=notification.created_at,
        updated_at=notification.updated_at,
    )


def _http_error(exc: Exception) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(
            status_code=status.HTTP_404_NOT_FOUND, detail="Notification not found"
        )
    return HTTPException(
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        detail="Service temporarily unavailable",
    )


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> list[NotificationRead]:
    """Return every non-deleted notification of the caller, newest first."""

    try:
        notifications = await store.list_all(user_id)
    except StoreError as exc:
        raise _http_error(exc) from exc
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread", response_model=list[NotificationRead])
async def list_unread_notifications(
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> list[NotificationRead]:
    """Return the caller's unread notifications, newest first."""

    try:
        notifications = await store.list_unread(user_id)
    except StoreError as exc:
        raise _http_error(exc) from exc
    return [_notification_to_schema(notification) for notification in notifications]


@router.post("/read-all", response_model=NotificationActionResult)
async def mark_all_notifications_read(
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> NotificationActionResult:
    try:
        await store.mark_all_read(user_id)
    except StoreError as exc:
        raise _http_error(exc) from exc
    return NotificationActionResult()


@router.post("/{notification_id}/read", response_model=NotificationRead)
async def mark_notification_read(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> NotificationRead:
    try:
        notification = await store.mark_read(notification_id, user_id)
    except (NotFoundError, StoreError) as exc:
        raise _http_error(exc) from exc
    return _notification_to_schema(notification)


@router.delete("/{notification_id}", response_model=NotificationActionResult)
async def delete_notification(
    notification_id: str,
    user_id: str = Depends(get_current_user_id),
    store: NotificationStore = Depends(get_notification_store),
) -> NotificationActionResult:
    try:
        await store.soft_delete(notification_id, user_id)
    except (NotFoundError, StoreError) as exc:
        raise _http_error(exc) from exc
    return NotificationActionResult()


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user.

    The token is read from the ``token`` query parameter or the
    ``Authorization`` header. Rejected clients receive an ``error`` event
    before the socket is closed and are never registered.
    """

    services: NotificationServices = websocket.app.state.notifications
    token = websocket.query_params.get("token") or websocket.headers.get(
        "authorization"
    )
    try:
        user_id = await authenticate_subject(token, services)
    except (AuthenticationError, StoreError) as exc:
        logger.info("Rejected notification websocket: %s", exc)
        await websocket.accept()
        await websocket.send_json(
            {
                "type": ERROR_EVENT,
                "data": build_error_payload(AUTHENTICATION_FAILED_MESSAGE),
            }
        )
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    session_id = uuid4().hex
    transport = WebSocketTransport(websocket)
    await transport.send(
        {"type": CONNECTED_EVENT, "data": build_connected_payload(session_id)}
    )
    await services.presence.connect(user_id, session_id, transport)
    logger.info("User %s connected notification session %s", user_id, session_id)

    try:
        try:
            pending = await services.store.list_unread(user_id)
        except StoreError:
            logger.warning("Could not load unread notifications for user %s", user_id)
            pending = []
        if pending:
            await transport.send(
                {"type": UNREAD_EVENT, "data": build_unread_payload(pending)}
            )

        while True:
            frame = await websocket.receive()
            if frame["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(frame.get("code", 1000))
            raw_message = frame.get("text")
            if raw_message is None:
                continue
            try:
                message = json.loads(raw_message)
            except ValueError:
                continue
            if not isinstance(message, dict):
                continue
            await _handle_client_message(message, transport, services, user_id)
    except WebSocketDisconnect:
        pass
    finally:
        transport.close()
        # Cleanup must finish even when the handler is being cancelled.
        with anyio.CancelScope(shield=True):
            await services.presence.disconnect(user_id, session_id)
        logger.info(
            "User %s disconnected notification session %s", user_id, session_id
        )


async def _handle_client_message(
    message: dict[str, Any],
    transport: WebSocketTransport,
    services: NotificationServices,
    user_id: str,
) -> None:
    message_type = message.get("type")
    if message_type == "ping":
        await transport.send({"type": PONG_EVENT})
        return

    if message_type == "ack":
        transport.resolve_ack(message.get("ack_id"))
        return

    if message_type == "read":
        ids = message.get("ids")
        if not isinstance(ids, list):
            return
        try:
            await services.store.mark_many_read(
                [notification_id for notification_id in ids if isinstance(notification_id, str)],
                user_id,
            )
        except StoreError:
            logger.warning("Could not mark notifications as read for user %s", user_id)
