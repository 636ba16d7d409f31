"""Integration tests for the stored mail configuration."""

import pytest

from otsnews.engines.mail.mail_service import MailConfigInput, MailConfigService, MailDeliveryService
from otsnews.kernel.errors import MailDeliveryError, PermissionDeniedError, ValidationError
from otsnews.kernel.models import MailEncryption


def config_input(**overrides):
    data = {
        "smtp_host": "smtp.example.com",
        "smtp_port": 587,
        "username": "mailer",
        "password": "s3cret",
        "from_address": "news@example.com",
        "enabled": True,
    }
    data.update(overrides)
    return MailConfigInput(**data)


@pytest.mark.asyncio
class TestMailConfig:

    async def test_defaults_come_from_settings(self, db_session, world, settings):
        config = await MailConfigService(db_session, settings=settings).get(world.admin)

        assert config.enabled is False
        assert config.smtp_host == settings.smtp_host
        assert config.from_name == settings.smtp_from_name

    async def test_update_and_keep_password(self, db_session, world, settings):
        service = MailConfigService(db_session, settings=settings)
        await service.update(config_input(), requester=world.admin)

        config = await service.update(
            config_input(password=None, encryption=MailEncryption.SSL, smtp_port=465),
            requester=world.admin,
        )

        assert config.password == "s3cret"
        assert config.smtp_port == 465
        assert (await service.current()) is config

    async def test_admin_only(self, db_session, world, settings):
        service = MailConfigService(db_session, settings=settings)

        with pytest.raises(PermissionDeniedError):
            await service.get(world.editor)
        with pytest.raises(PermissionDeniedError):
            await service.update(config_input(), requester=world.editor)

    async def test_invalid_port(self, db_session, world, settings):
        with pytest.raises(ValidationError):
            await MailConfigService(db_session, settings=settings).update(
                config_input(smtp_port=70000), requester=world.admin
            )

    async def test_enabling_requires_host(self, db_session, world, settings):
        with pytest.raises(ValidationError):
            await MailConfigService(db_session, settings=settings).update(
                config_input(smtp_host=" "), requester=world.admin
            )


@pytest.mark.asyncio
class TestDelivery:

    async def test_disabled_transport_refuses(self, db_session, world, settings):
        config = await MailConfigService(db_session, settings=settings).current()

        with pytest.raises(MailDeliveryError):
            await MailDeliveryService(config, settings=settings).send("a@example.com", "Hi", "<p>Hi</p>")

    async def test_message_headers(self, db_session, world, settings):
        config = await MailConfigService(db_session, settings=settings).update(
            config_input(from_name="OTS NEWS"), requester=world.admin
        )

        message = MailDeliveryService(config, settings=settings).build_message(
            "john.user@example.com", "Weekly digest", "<p>News</p>"
        )

        assert message["To"] == "john.user@example.com"
        assert message["From"] == "OTS NEWS <news@example.com>"
        assert message["Subject"] == "Weekly digest"

    async def test_sent_through_smtp(self, db_session, world, settings, monkeypatch):
        config = await MailConfigService(db_session, settings=settings).update(
            config_input(), requester=world.admin
        )
        service = MailDeliveryService(config, settings=settings)
        sent = []
        monkeypatch.setattr(service, "_send_sync", sent.append)

        await service.send("john.user@example.com", "Hello", "<p>Hello</p>")

        assert len(sent) == 1
        assert sent[0]["Subject"] == "Hello"
