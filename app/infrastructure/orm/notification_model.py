"""Notification outbox ORM Model"""

from sqlalchemy import Column, Integer, String, Text, DateTime, Index
from sqlalchemy.sql import func

from ...db.models import Base
from ...domain.enums import NotificationKind, NotificationStatus
from .columns import enum_column


class NotificationModel(Base):
    __tablename__ = 'notifications'

    id = Column(Integer, primary_key=True, index=True)
    kind = Column(enum_column(NotificationKind), nullable=False)
    recipient = Column(String(255), nullable=False)
    payload = Column(Text, nullable=False)  # JSON string
    status = Column(enum_column(NotificationStatus), default=NotificationStatus.PENDING, nullable=False)
    attempts = Column(Integer, default=0, nullable=False)
    last_error = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    locked_at = Column(DateTime, nullable=True)
    claimed_by = Column(String(32), nullable=True, index=True)
    sent_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index('idx_notifications_status_created', 'status', 'created_at'),
    )
