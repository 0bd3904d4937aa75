"""Exceptions raised by the notification core."""


class NotificationError(Exception):
    """Base class for notification core errors."""


class NotFoundError(NotificationError):
    """The notification does not exist, is deleted, or belongs to someone else."""


class AuthenticationError(NotificationError):
    """A bearer token is missing, malformed, expired or names an unknown user."""


class StoreError(NotificationError):
    """The underlying persistence layer failed."""


__all__ = ["AuthenticationError", "NotFoundError", "NotificationError", "StoreError"]
