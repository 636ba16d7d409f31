"""
Immutable event log for audit trail.

Every mutation is appended here inside the same transaction as the change
it describes, so the log and the data commit or roll back together.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import DateTime, Index, JSON, String, Text, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from otsnews.kernel.models.base import Base, generate_uuid, utc_now


class EventType(str, Enum):
    """All event types for the audit log."""
    
    # User events
    USER_REGISTERED = "user.registered"
    USER_LOGGED_IN = "user.logged_in"
    USER_ROLE_CHANGED = "user.role_changed"
    USER_PASSWORD_RESET = "user.password_reset"
    USER_DELETED = "user.deleted"
    
    # Section events
    SECTION_CREATED = "section.created"
    SECTION_DELETED = "section.deleted"
    SUBSECTION_CREATED = "subsection.created"
    SUBSECTION_DELETED = "subsection.deleted"
    EDITOR_GRANTED = "section.editor_granted"
    EDITOR_REVOKED = "section.editor_revoked"
    
    # Article events
    ARTICLE_CREATED = "article.created"
    ARTICLE_UPDATED = "article.updated"
    ARTICLE_PUBLISHED = "article.published"
    ARTICLE_UNPUBLISHED = "article.unpublished"
    ARTICLE_DELETED = "article.deleted"
    ATTACHMENT_ADDED = "article.attachment_added"
    ATTACHMENT_REMOVED = "article.attachment_removed"
    
    # Comment events
    COMMENT_ADDED = "comment.added"
    COMMENT_DELETED = "comment.deleted"
    
    # Notification events
    NOTIFICATIONS_FANNED_OUT = "notification.fanned_out"
    
    # Settings events
    DIGEST_PREFERENCE_UPDATED = "digest.preference_updated"
    EMAIL_CONFIG_UPDATED = "email.config_updated"


class EventLog(Base):
    """
    Immutable audit event log.
    
    This table is append-only - no updates or deletes allowed.
    """
    
    __tablename__ = "event_logs"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    
    event_type: Mapped[EventType] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    
    # Entity reference; sections use slug ids so this is a string
    entity_type: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
    )
    entity_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    
    # Actor (deliberately not a foreign key: the log outlives users)
    user_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )
    
    payload: Mapped[dict] = mapped_column(
        JSON,
        nullable=False,
        default=dict,
    )
    
    ip_address: Mapped[Optional[str]] = mapped_column(
        String(45),  # IPv6 max length
        nullable=True,
    )
    user_agent: Mapped[Optional[str]] = mapped_column(
        Text,
        nullable=True,
    )
    
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        server_default=func.now(),
        nullable=False,
    )
    
    __table_args__ = (
        Index("ix_event_logs_entity", "entity_type", "entity_id"),
    )
    
    def __repr__(self) -> str:
        return f"<EventLog {self.event_type} {self.entity_type}:{self.entity_id}>"
