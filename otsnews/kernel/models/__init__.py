"""
SQLAlchemy models for the OTS News domain.
"""

from otsnews.kernel.models.base import Base, CreatedAtMixin, generate_uuid, utc_now
from otsnews.kernel.models.user import User, UserRole
from otsnews.kernel.models.section import Section, Subsection, SectionEditorGrant
from otsnews.kernel.models.article import Article, ArticleStatus, ArticleTag, Attachment
from otsnews.kernel.models.comment import Comment
from otsnews.kernel.models.notification import (
    Notification,
    NotificationType,
    DigestPreference,
    DigestFrequency,
)
from otsnews.kernel.models.email_config import EmailConfig, MailEncryption
from otsnews.kernel.models.event_log import EventLog, EventType

__all__ = [
    # Base
    "Base",
    "CreatedAtMixin",
    "generate_uuid",
    "utc_now",
    # Identity
    "User",
    "UserRole",
    # Sections
    "Section",
    "Subsection",
    "SectionEditorGrant",
    # Articles
    "Article",
    "ArticleStatus",
    "ArticleTag",
    "Attachment",
    # Comments
    "Comment",
    # Notifications
    "Notification",
    "NotificationType",
    "DigestPreference",
    "DigestFrequency",
    # Mail
    "EmailConfig",
    "MailEncryption",
    # Audit
    "EventLog",
    "EventType",
]
