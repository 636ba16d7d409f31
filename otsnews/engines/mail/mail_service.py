"""
Mail configuration and delivery.

The transport settings live in a single ``email_config`` row that admins
edit at runtime; until it exists the SMTP defaults from ``Settings`` apply.
Delivery is a thin SMTP adapter run in a worker thread.
"""

import asyncio
import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr
from typing import Optional

from pydantic import BaseModel
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.config import Settings, get_settings
from otsnews.kernel.errors import MailDeliveryError, ValidationError
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models.email_config import EmailConfig, MailEncryption
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.user import User
from otsnews.kernel.permissions.permission_service import PermissionService
from otsnews.logging_config import get_logger

logger = get_logger(__name__)

CONFIG_ROW_ID = 1


class MailConfigInput(BaseModel):
    provider: str = "smtp"
    smtp_host: str
    smtp_port: int = 587
    username: str = ""
    password: Optional[str] = None  # None keeps the stored password
    encryption: MailEncryption = MailEncryption.TLS
    from_address: str
    from_name: str = "OTS NEWS"
    enabled: bool = False


class MailConfigService:
    """Admin-only access to the stored transport configuration."""

    def __init__(self, session: AsyncSession, settings: Optional[Settings] = None):
        self.session = session
        self.settings = settings or get_settings()
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)

    async def get(self, requester: User) -> EmailConfig:
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()
        return await self.current()

    async def current(self) -> EmailConfig:
        """Stored config, or an unsaved one built from settings."""
        config = await self.session.get(EmailConfig, CONFIG_ROW_ID)
        if config is not None:
            return config
        return EmailConfig(
            id=CONFIG_ROW_ID,
            provider="smtp",
            smtp_host=self.settings.smtp_host,
            smtp_port=self.settings.smtp_port,
            username=self.settings.smtp_user,
            password=self.settings.smtp_password,
            encryption=MailEncryption.TLS,
            from_address=self.settings.smtp_from_email,
            from_name=self.settings.smtp_from_name,
            enabled=False,
        )

    async def update(self, data: MailConfigInput, requester: User) -> EmailConfig:
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        if data.smtp_port <= 0 or data.smtp_port > 65535:
            raise ValidationError("SMTP port must be between 1 and 65535")
        if data.enabled and (not data.smtp_host.strip() or not data.from_address.strip()):
            raise ValidationError("SMTP host and sender address are required to enable mail")

        config = await self.session.get(EmailConfig, CONFIG_ROW_ID)
        if config is None:
            config = EmailConfig(id=CONFIG_ROW_ID, password="")
            self.session.add(config)

        config.provider = data.provider
        config.smtp_host = data.smtp_host.strip()
        config.smtp_port = data.smtp_port
        config.username = data.username
        if data.password is not None:
            config.password = data.password
        config.encryption = data.encryption
        config.from_address = data.from_address.strip()
        config.from_name = data.from_name
        config.enabled = data.enabled
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.EMAIL_CONFIG_UPDATED,
            entity_type="email_config",
            entity_id=str(CONFIG_ROW_ID),
            user_id=requester.id,
            payload={"smtp_host": config.smtp_host, "enabled": config.enabled},
        )
        return config


class MailDeliveryService:
    """
    Sends HTML mail over SMTP using a stored ``EmailConfig``.

    Usage:
        config = await MailConfigService(session).current()
        await MailDeliveryService(config).send(to, subject, html)
    """

    def __init__(self, config: EmailConfig, settings: Optional[Settings] = None):
        self.config = config
        self.settings = settings or get_settings()

    async def send(self, to: str, subject: str, html: str) -> None:
        """
        Send a message through the configured transport.

        Raises:
            MailDeliveryError: Mail is disabled or the server refused it
        """
        if not self.config.enabled:
            raise MailDeliveryError("Email delivery is not enabled")
        await self._deliver(to, subject, html)

    async def send_test(self, to: str) -> None:
        """Send a fixed test message, even while delivery is disabled."""
        html = (
            "<h1>Test email</h1>"
            f"<p>This message confirms that {self.config.from_name} can send mail "
            f"through {self.config.smtp_host}:{self.config.smtp_port}.</p>"
        )
        await self._deliver(to, f"{self.config.from_name}: test email", html)

    async def _deliver(self, to: str, subject: str, html: str) -> None:
        if not to or "@" not in to:
            raise ValidationError("A valid recipient address is required")
        if not self.config.smtp_host:
            raise MailDeliveryError("No SMTP host configured")

        message = self.build_message(to, subject, html)
        try:
            await asyncio.to_thread(self._send_sync, message)
        except (smtplib.SMTPException, OSError) as e:
            logger.warning(
                "Mail delivery failed",
                extra={"smtp_host": self.config.smtp_host, "error": str(e)},
            )
            raise MailDeliveryError(f"Mail delivery failed: {e}") from e

        logger.info("Mail sent", extra={"smtp_host": self.config.smtp_host, "subject": subject})

    def build_message(self, to: str, subject: str, html: str) -> EmailMessage:
        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self.config.from_name, self.config.from_address))
        message["To"] = to
        message.set_content("This message requires an HTML capable mail client.")
        message.add_alternative(html, subtype="html")
        return message

    def _send_sync(self, message: EmailMessage) -> None:
        config = self.config
        timeout = self.settings.smtp_timeout_seconds
        encryption = MailEncryption(config.encryption)

        if encryption == MailEncryption.SSL:
            smtp = smtplib.SMTP_SSL(
                config.smtp_host,
                config.smtp_port,
                timeout=timeout,
                context=ssl.create_default_context(),
            )
        else:
            smtp = smtplib.SMTP(config.smtp_host, config.smtp_port, timeout=timeout)

        with smtp:
            if encryption == MailEncryption.TLS:
                smtp.starttls(context=ssl.create_default_context())
            if config.username:
                smtp.login(config.username, config.password)
            smtp.send_message(message)
