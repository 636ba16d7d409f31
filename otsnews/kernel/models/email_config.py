"""
Stored mail transport configuration (single row).
"""

from enum import Enum

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from otsnews.kernel.models.base import Base


class MailEncryption(str, Enum):
    NONE = "none"
    SSL = "ssl"
    TLS = "tls"


class EmailConfig(Base):
    """SMTP settings edited by admins. Always stored with id=1."""
    
    __tablename__ = "email_config"
    
    id: Mapped[int] = mapped_column(
        Integer,
        primary_key=True,
        default=1,
    )
    provider: Mapped[str] = mapped_column(
        String(50),
        default="smtp",
        nullable=False,
    )
    smtp_host: Mapped[str] = mapped_column(
        String(255),
        default="",
        nullable=False,
    )
    smtp_port: Mapped[int] = mapped_column(
        Integer,
        default=587,
        nullable=False,
    )
    username: Mapped[str] = mapped_column(
        String(255),
        default="",
        nullable=False,
    )
    password: Mapped[str] = mapped_column(
        String(255),
        default="",
        nullable=False,
    )
    encryption: Mapped[MailEncryption] = mapped_column(
        String(10),
        default=MailEncryption.TLS,
        nullable=False,
    )
    from_address: Mapped[str] = mapped_column(
        String(255),
        default="",
        nullable=False,
    )
    from_name: Mapped[str] = mapped_column(
        String(255),
        default="OTS NEWS",
        nullable=False,
    )
    enabled: Mapped[bool] = mapped_column(
        Boolean,
        default=False,
        nullable=False,
    )
