"""
Section tree management.
"""

from typing import List, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.kernel.errors import ConflictError, NotFoundError, ValidationError
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.section import Section, SectionEditorGrant, Subsection
from otsnews.kernel.models.user import User
from otsnews.kernel.permissions.permission_service import PermissionService
from otsnews.kernel.text import slugify
from otsnews.logging_config import get_logger

logger = get_logger(__name__)


class SectionService:
    """
    Service for the section -> subsection tree.

    Reads are open to everyone; every write requires an admin.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)

    async def list_sections(self) -> List[Section]:
        """All sections in registry order, subsections included."""
        query = select(Section).order_by(Section.position, Section.id)
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def get_section(self, section_id: str) -> Optional[Section]:
        return await self.session.get(Section, section_id)

    async def require_section(self, section_id: str) -> Section:
        section = await self.get_section(section_id)
        if not section:
            raise NotFoundError("Section", section_id)
        return section

    async def get_subsection(self, subsection_id: str) -> Optional[Subsection]:
        return await self.session.get(Subsection, subsection_id)

    async def validate_placement(self, section_id: str, subsection_id: Optional[str]) -> Section:
        """
        Check that an article may be filed under (section, subsection).

        Raises:
            NotFoundError: The section does not exist
            ValidationError: The subsection is unknown or belongs elsewhere
        """
        section = await self.require_section(section_id)
        if subsection_id:
            subsection = await self.get_subsection(subsection_id)
            if not subsection or subsection.section_id != section_id:
                raise ValidationError(
                    f"Subsection '{subsection_id}' does not belong to section '{section_id}'"
                )
        return section

    async def create_section(
        self,
        title: str,
        requester: User,
        section_id: Optional[str] = None,
    ) -> Section:
        """
        Create a section (admin only).

        The id defaults to the slug of the title ("Human Resources" ->
        "human-resources").
        """
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        title = (title or "").strip()
        if not title:
            raise ValidationError("Section title is required")
        section_id = slugify(section_id or title)

        if await self.get_section(section_id):
            raise ConflictError(f"Section '{section_id}' already exists")

        max_position = await self.session.scalar(select(func.max(Section.position)))
        section = Section(
            id=section_id,
            title=title,
            position=(max_position if max_position is not None else -1) + 1,
            subsections=[],
        )
        self.session.add(section)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.SECTION_CREATED,
            entity_type="section",
            entity_id=section.id,
            user_id=requester.id,
            payload={"title": title},
        )
        return section

    async def delete_section(self, section_id: str, requester: User) -> None:
        """
        Delete a section with its subsections and editor grants (admin only).

        Articles filed under the section are left in place.
        """
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        section = await self.require_section(section_id)
        grants = await self.session.execute(
            delete(SectionEditorGrant).where(SectionEditorGrant.section_id == section_id)
        )
        subsection_ids = [s.id for s in section.subsections]
        await self.session.delete(section)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.SECTION_DELETED,
            entity_type="section",
            entity_id=section_id,
            user_id=requester.id,
            payload={
                "subsections_removed": subsection_ids,
                "grants_removed": grants.rowcount or 0,
            },
        )
        logger.info("Section deleted", extra={"section_id": section_id})

    async def create_subsection(
        self,
        section_id: str,
        title: str,
        requester: User,
        subsection_id: Optional[str] = None,
    ) -> Subsection:
        """Add a subsection to the end of a section (admin only)."""
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        section = await self.require_section(section_id)
        title = (title or "").strip()
        if not title:
            raise ValidationError("Subsection title is required")
        subsection_id = slugify(subsection_id or title)

        if await self.get_subsection(subsection_id):
            raise ConflictError(f"Subsection '{subsection_id}' already exists")

        subsection = Subsection(
            id=subsection_id,
            title=title,
            section_id=section.id,
            position=len(section.subsections),
        )
        section.subsections.append(subsection)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.SUBSECTION_CREATED,
            entity_type="subsection",
            entity_id=subsection.id,
            user_id=requester.id,
            payload={"section_id": section.id, "title": title},
        )
        return subsection

    async def delete_subsection(self, subsection_id: str, requester: User) -> None:
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        subsection = await self.get_subsection(subsection_id)
        if not subsection:
            raise NotFoundError("Subsection", subsection_id)
        section_id = subsection.section_id
        await self.session.delete(subsection)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.SUBSECTION_DELETED,
            entity_type="subsection",
            entity_id=subsection_id,
            user_id=requester.id,
            payload={"section_id": section_id},
        )

    async def editable_sections(self, user: Optional[User]) -> List[Section]:
        """Sections the user may author in, in registry order."""
        policy = await self.permissions.policy_for(user)
        return policy.editable_sections(await self.list_sections())
