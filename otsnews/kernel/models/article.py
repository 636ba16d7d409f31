"""
Article models - articles, their tags and attachments.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import List, Optional

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from otsnews.kernel.models.base import Base, generate_uuid, utc_now


class ArticleStatus(str, Enum):
    """Article visibility state."""
    DRAFT = "draft"
    PUBLISHED = "published"


class Article(Base):
    """
    A short article in one section (and optionally one subsection).
    
    author_id / section_id are plain columns rather than foreign keys:
    attribution must survive user deletion and articles survive the
    removal of their section.
    """
    
    __tablename__ = "articles"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    title: Mapped[str] = mapped_column(
        String(500),
        nullable=False,
    )
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    excerpt: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        default="",
    )
    section_id: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        index=True,
    )
    subsection_id: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        index=True,
    )
    
    # Authorship snapshot
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    author_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    image_url: Mapped[Optional[str]] = mapped_column(
        String(2048),
        nullable=True,
    )
    allow_comments: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )
    status: Mapped[ArticleStatus] = mapped_column(
        String(20),
        default=ArticleStatus.PUBLISHED,
        nullable=False,
        index=True,
    )
    
    # Relationships
    tags: Mapped[List["ArticleTag"]] = relationship(
        "ArticleTag",
        cascade="all, delete-orphan",
        order_by="ArticleTag.tag",
        lazy="selectin",
    )
    attachments: Mapped[List["Attachment"]] = relationship(
        "Attachment",
        cascade="all, delete-orphan",
        lazy="selectin",
    )
    
    __table_args__ = (
        Index("ix_articles_status_timestamp", "status", "timestamp"),
    )
    
    @property
    def is_published(self) -> bool:
        return self.status == ArticleStatus.PUBLISHED
    
    @property
    def tag_names(self) -> List[str]:
        return [t.tag for t in self.tags]
    
    def __repr__(self) -> str:
        return f"<Article {self.id} status={self.status}>"


class ArticleTag(Base):
    """A normalised tag on an article."""
    
    __tablename__ = "article_tags"
    
    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("articles.id", ondelete="CASCADE"),
        primary_key=True,
    )
    tag: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
        index=True,
    )


class Attachment(Base):
    """A file attached to an article, stored inline as base64."""
    
    __tablename__ = "attachments"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    article_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("articles.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    filename: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    mime_type: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    data: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    
    def __repr__(self) -> str:
        return f"<Attachment {self.filename} article={self.article_id}>"
