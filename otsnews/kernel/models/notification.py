"""
Notification and digest preference models.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from otsnews.kernel.models.base import Base, generate_uuid, utc_now


class NotificationType(str, Enum):
    NEW_ARTICLE = "new_article"
    COMMENT_ON_ARTICLE = "comment_on_article"
    COMMENT_REPLY = "comment_reply"


class DigestFrequency(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"


class Notification(Base):
    """
    A notification for one recipient.
    
    Only created as a side effect of publication or commenting; the only
    mutation afterwards is read: False -> True.
    """
    
    __tablename__ = "notifications"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
    )
    type: Mapped[NotificationType] = mapped_column(
        String(50),
        nullable=False,
    )
    message: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    article_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    read: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    
    __table_args__ = (
        Index("ix_notifications_user_timestamp", "user_id", "timestamp"),
    )
    
    def __repr__(self) -> str:
        return f"<Notification {self.type} to={self.user_id} read={self.read}>"


class DigestPreference(Base):
    """Stored digest intent. Delivery is the mail service's concern."""
    
    __tablename__ = "digest_preferences"
    
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
    frequency: Mapped[DigestFrequency] = mapped_column(
        String(20),
        default=DigestFrequency.WEEKLY,
        nullable=False,
    )
