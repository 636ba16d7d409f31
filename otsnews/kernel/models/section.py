"""
Section tree and per-section editor grants.
"""

import uuid
from typing import List

from sqlalchemy import ForeignKey, Integer, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from otsnews.kernel.models.base import Base, CreatedAtMixin


class Section(Base):
    """Top-level content section. Ids are human readable slugs."""
    
    __tablename__ = "sections"
    
    id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    
    subsections: Mapped[List["Subsection"]] = relationship(
        "Subsection",
        back_populates="section",
        cascade="all, delete-orphan",
        order_by="Subsection.position",
        lazy="selectin",
    )
    
    def __repr__(self) -> str:
        return f"<Section {self.id}>"


class Subsection(Base):
    """Second (and last) level of the section tree."""
    
    __tablename__ = "subsections"
    
    id: Mapped[str] = mapped_column(
        String(100),
        primary_key=True,
    )
    title: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    section_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("sections.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(
        Integer,
        default=0,
        nullable=False,
    )
    
    section: Mapped["Section"] = relationship(
        "Section",
        back_populates="subsections",
    )
    
    def __repr__(self) -> str:
        return f"<Subsection {self.section_id}/{self.id}>"


class SectionEditorGrant(Base, CreatedAtMixin):
    """Edit/moderate capability of one user over one section."""
    
    __tablename__ = "section_editors"
    
    user_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        ForeignKey("users.id", ondelete="CASCADE"),
        primary_key=True,
    )
    section_id: Mapped[str] = mapped_column(
        String(100),
        ForeignKey("sections.id", ondelete="CASCADE"),
        primary_key=True,
        index=True,
    )
    
    def __repr__(self) -> str:
        return f"<SectionEditorGrant user={self.user_id} section={self.section_id}>"
