"""Endpoints exposing user presence on this instance."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from app.application.use_cases.notifications import NotificationServices
from app.interfaces.api.dependencies import (
    get_current_user_id,
    get_notification_services,
)
from app.interfaces.api.schemas import OnlineUsersRead, PresenceRead

router = APIRouter(prefix="/presence", tags=["presence"])


@router.get("", response_model=OnlineUsersRead)
async def list_online_users(
    _: str = Depends(get_current_user_id),
    services: NotificationServices = Depends(get_notification_services),
) -> OnlineUsersRead:
    """Return the ids of every user holding at least one live connection."""

    return OnlineUsersRead(user_ids=services.presence.online_users())


@router.get("/{user_id}", response_model=PresenceRead)
async def get_presence(
    user_id: str,
    _: str = Depends(get_current_user_id),
    services: NotificationServices = Depends(get_notification_services),
) -> PresenceRead:
    """Return whether ``user_id`` currently holds a live connection."""

    return PresenceRead(
        user_id=user_id,
        status=services.presence.status_of(user_id),
        active_sessions=services.delivery.active_session_count(user_id),
        online_since=services.presence.online_since(user_id),
    )
