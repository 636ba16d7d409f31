"""
Comment model. Threads are formed through parent_id adjacency.
"""

import uuid
from datetime import datetime
from typing import Optional

from sqlalchemy import DateTime, ForeignKey, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from otsnews.kernel.models.base import Base, generate_uuid, utc_now


class Comment(Base):
    """A single comment on an article, optionally replying to another."""
    
    __tablename__ = "comments"
    
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
    parent_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid(),
        nullable=True,
        index=True,
    )
    
    # Authorship snapshot, kept after the author is deleted
    author_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        nullable=False,
        index=True,
    )
    author_name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    author_avatar: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
    )
    
    content: Mapped[str] = mapped_column(
        Text,
        nullable=False,
    )
    timestamp: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=utc_now,
        nullable=False,
    )
    
    def __repr__(self) -> str:
        return f"<Comment {self.id} by {self.author_id}>"
