"""SQLAlchemy model for the user table."""

from sqlalchemy import Column, DateTime, String

from app.infrastructure.database import Base
from app.utils import utc_now_naive


class UserModel(Base):
    """Database representation of a chat user.

    The table is owned by the account service; the notification core only
    reads it to validate recipients and authenticated subjects.
    """

    __tablename__ = "user"

    user_id = Column(String(36), primary_key=True)
    username = Column(String(50), nullable=False, index=True)
    email = Column(String(120), nullable=True, index=True)
    created_at = Column(DateTime, nullable=False, default=utc_now_naive)
