"""
User model for identity management.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from sqlalchemy import String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from otsnews.kernel.models.base import Base, CreatedAtMixin, generate_uuid


class UserRole(str, Enum):
    """Global roles. A role is a capability ceiling, not a grant."""
    GUEST = "guest"
    USER = "user"
    EDITOR = "editor"
    ADMIN = "admin"


class User(Base, CreatedAtMixin):
    """User account model."""
    
    __tablename__ = "users"
    
    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(),
        primary_key=True,
        default=generate_uuid,
    )
    name: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    email: Mapped[str] = mapped_column(
        String(255),
        unique=True,
        index=True,
        nullable=False,
    )
    password_hash: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
    )
    role: Mapped[UserRole] = mapped_column(
        String(50),
        default=UserRole.USER,
        nullable=False,
    )
    avatar: Mapped[Optional[str]] = mapped_column(
        String(1024),
        nullable=True,
    )
    
    @property
    def role_value(self) -> str:
        # role may be enum or str when loaded back from the database
        return self.role.value if isinstance(self.role, UserRole) else str(self.role)
    
    def __repr__(self) -> str:
        return f"<User {self.email} role={self.role_value}>"
