"""Read-only persistence layer for user data."""

from __future__ import annotations

from sqlalchemy.orm import Session

from app.infrastructure.models import UserModel


class UserRepository:
    """Look up users referenced by notifications and bearer tokens."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def exists(self, user_id: str) -> bool:
        return (
            self.session.query(UserModel.user_id)
            .filter(UserModel.user_id == user_id)
            .first()
            is not None
        )


__all__ = ["UserRepository"]
