"""
Mail Engine - stored SMTP configuration and HTML delivery.
"""

from otsnews.engines.mail.mail_service import (
    MailConfigInput,
    MailConfigService,
    MailDeliveryService,
)

__all__ = ["MailConfigInput", "MailConfigService", "MailDeliveryService"]
