"""SQLAlchemy model for persisted notifications."""

from sqlalchemy import Boolean, Column, DateTime, Index, Integer, String, Text

from unihub.infrastructure.database import Base
from unihub.utils import storage_now


class NotificationModel(Base):
    """Database representation for portal notifications."""

    __tablename__ = "notification"
    __table_args__ = (Index("ix_notification_created", "created_at", "id"),)

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(120), nullable=False)
    message = Column(Text, nullable=False)
    project_id = Column(String(64), nullable=True, index=True)
    recipient_email = Column(String(254), nullable=True, index=True)
    read = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(), nullable=False, default=storage_now)
    actor_email = Column(String(254), nullable=True)
    activity_title = Column(String(255), nullable=True)
    decision = Column(String(20), nullable=True)


__all__ = ["NotificationModel"]
