"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, JSON, String, Text
from sqlalchemy.sql import expression

from app.infrastructure.database import Base
from app.utils import utc_now_naive


class NotificationModel(Base):
    """Database representation for user notifications."""

    __tablename__ = "notification"

    notification_id = Column(String(36), primary_key=True)
    user_id = Column(
        String(36), ForeignKey("user.user_id"), nullable=False, index=True
    )
    type = Column(String(50), nullable=False)
    content = Column(Text, nullable=False)
    metadata_ = Column("metadata", JSON, nullable=False, default=dict)
    is_read = Column(
        Boolean,
        nullable=False,
        default=False,
        server_default=expression.false(),
    )
    created_at = Column(DateTime(), nullable=False, default=utc_now_naive, index=True)
    updated_at = Column(DateTime(), nullable=False, default=utc_now_naive)
    deleted_at = Column(DateTime(), nullable=True)


__all__ = ["NotificationModel"]
