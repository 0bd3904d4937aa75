from .notification import NotificationActionResult, NotificationRead
from .presence import OnlineUsersRead, PresenceRead

__all__ = [
    "NotificationActionResult",
    "NotificationRead",
    "OnlineUsersRead",
    "PresenceRead",
]
