"""
Mail transport configuration endpoints (admin only).
"""

from fastapi import APIRouter

from otsnews.api.deps import AdminUser, AppSettings, CurrentUser, DbSession
from otsnews.engines.mail.mail_service import (
    MailConfigInput,
    MailConfigService,
    MailDeliveryService,
)
from otsnews.kernel.models.email_config import EmailConfig
from otsnews.schemas.common import MessageResponse
from otsnews.schemas.email_config import (
    EmailConfigResponse,
    EmailConfigUpdate,
    EmailTestRequest,
)

router = APIRouter()


def _to_response(config: EmailConfig) -> EmailConfigResponse:
    return EmailConfigResponse(
        provider=config.provider,
        smtp_host=config.smtp_host,
        smtp_port=config.smtp_port,
        username=config.username,
        encryption=config.encryption,
        from_address=config.from_address,
        from_name=config.from_name,
        enabled=config.enabled,
        has_password=bool(config.password),
    )


@router.get("/email-config", response_model=EmailConfigResponse)
async def get_email_config(user: CurrentUser, db: DbSession, settings: AppSettings):
    config = await MailConfigService(db, settings=settings).get(requester=user)
    return _to_response(config)


@router.put("/email-config", response_model=EmailConfigResponse)
async def update_email_config(
    data: EmailConfigUpdate,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    """Save transport settings. An omitted password keeps the stored one."""
    config = await MailConfigService(db, settings=settings).update(
        MailConfigInput(**data.model_dump()),
        requester=user,
    )
    return _to_response(config)


@router.post("/email-config/test", response_model=MessageResponse)
async def send_test_email(
    data: EmailTestRequest,
    user: AdminUser,
    db: DbSession,
    settings: AppSettings,
):
    """Send a test message with the stored settings."""
    config = await MailConfigService(db, settings=settings).current()
    await MailDeliveryService(config, settings=settings).send_test(data.to)
    return MessageResponse(message=f"Test email sent to {data.to}")
