"""Integration tests for the section tree and editor grants."""

import pytest
from sqlalchemy import select

from otsnews.kernel.errors import ConflictError, NotFoundError, PermissionDeniedError, ValidationError
from otsnews.kernel.models import Subsection, SectionEditorGrant
from otsnews.kernel.permissions.permission_service import PermissionService
from otsnews.kernel.sections.grant_service import GrantService
from otsnews.kernel.sections.section_service import SectionService


@pytest.mark.asyncio
class TestSections:

    async def test_list_in_registry_order(self, db_session, world):
        sections = await SectionService(db_session).list_sections()

        assert [s.id for s in sections] == ["euc", "hr", "general"]
        assert [s.id for s in sections[0].subsections] == ["incident-management", "field-operations"]

    async def test_create_slugs_title_and_appends(self, db_session, world):
        section = await SectionService(db_session).create_section("Facilities Team", requester=world.admin)

        assert section.id == "facilities-team"
        assert section.position == 3

    async def test_duplicate_id(self, db_session, world):
        with pytest.raises(ConflictError):
            await SectionService(db_session).create_section("EUC", requester=world.admin)

    async def test_blank_title(self, db_session, world):
        with pytest.raises(ValidationError):
            await SectionService(db_session).create_section("  ", requester=world.admin)

    async def test_writes_are_admin_only(self, db_session, world):
        service = SectionService(db_session)

        with pytest.raises(PermissionDeniedError):
            await service.create_section("Mine", requester=world.editor)
        with pytest.raises(PermissionDeniedError):
            await service.delete_section("euc", requester=world.editor)

    async def test_delete_cascades_subsections_and_grants(self, db_session, world):
        await SectionService(db_session).delete_section("euc", requester=world.admin)

        subsections = await db_session.execute(select(Subsection).where(Subsection.section_id == "euc"))
        grants = await db_session.execute(select(SectionEditorGrant).where(SectionEditorGrant.section_id == "euc"))
        assert subsections.scalars().all() == []
        assert grants.scalars().all() == []

    async def test_subsection_lifecycle(self, db_session, world):
        service = SectionService(db_session)

        subsection = await service.create_subsection("hr", "Careers", requester=world.admin)
        assert subsection.id == "careers"
        assert subsection.position == 1

        await service.delete_subsection("careers", requester=world.admin)
        assert await service.get_subsection("careers") is None

    async def test_editable_sections(self, db_session, world):
        service = SectionService(db_session)

        assert [s.id for s in await service.editable_sections(world.editor)] == ["euc"]
        assert [s.id for s in await service.editable_sections(world.admin)] == ["euc", "hr", "general"]
        assert await service.editable_sections(world.guest) == []


@pytest.mark.asyncio
class TestGrants:

    async def test_grant_enables_editing(self, db_session, world):
        await GrantService(db_session).add_grant(world.reader.id, "hr", requester=world.admin)

        policy = await PermissionService(db_session).policy_for(world.reader)
        assert policy.can_edit_section("hr")

    async def test_revoke_takes_effect_immediately(self, db_session, world):
        await GrantService(db_session).remove_grant(world.editor.id, "euc", requester=world.admin)

        policy = await PermissionService(db_session).policy_for(world.editor)
        assert not policy.can_edit_section("euc")

    async def test_guest_grant_rejected(self, db_session, world):
        with pytest.raises(ValidationError):
            await GrantService(db_session).add_grant(world.guest.id, "hr", requester=world.admin)

    async def test_admin_grant_is_redundant(self, db_session, world):
        with pytest.raises(ConflictError):
            await GrantService(db_session).add_grant(world.admin.id, "hr", requester=world.admin)

    async def test_duplicate_grant(self, db_session, world):
        with pytest.raises(ConflictError):
            await GrantService(db_session).add_grant(world.editor.id, "euc", requester=world.admin)

    async def test_unknown_user_or_section(self, db_session, world):
        import uuid

        service = GrantService(db_session)
        with pytest.raises(NotFoundError):
            await service.add_grant(uuid.uuid4(), "hr", requester=world.admin)
        with pytest.raises(NotFoundError):
            await service.add_grant(world.reader.id, "nope", requester=world.admin)

    async def test_remove_missing(self, db_session, world):
        with pytest.raises(NotFoundError):
            await GrantService(db_session).remove_grant(world.reader.id, "hr", requester=world.admin)

    async def test_list_admin_only(self, db_session, world):
        grants = await GrantService(db_session).list_grants(requester=world.admin)
        assert [(g.user_id, g.section_id) for g in grants] == [(world.editor.id, "euc")]

        with pytest.raises(PermissionDeniedError):
            await GrantService(db_session).list_grants(requester=world.editor)
