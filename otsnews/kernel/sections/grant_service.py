"""
Section editor grant management.
"""

import uuid
from typing import List

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.kernel.errors import ConflictError, NotFoundError, ValidationError
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.section import Section, SectionEditorGrant
from otsnews.kernel.models.user import User, UserRole
from otsnews.kernel.permissions.permission_service import PermissionService


class GrantService:
    """
    Admin-only management of (user, section) editor grants.

    A grant gives edit and moderation rights over one section regardless of
    the user's global role. Guests cannot hold grants and admins never need
    one.
    """

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)

    async def list_grants(self, requester: User) -> List[SectionEditorGrant]:
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        query = select(SectionEditorGrant).order_by(
            SectionEditorGrant.section_id, SectionEditorGrant.created_at
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def add_grant(
        self,
        user_id: uuid.UUID,
        section_id: str,
        requester: User,
    ) -> SectionEditorGrant:
        """
        Grant a user editor rights over a section.

        Raises:
            NotFoundError: Unknown user or section
            ValidationError: The user is a guest
            ConflictError: The user is an admin or already holds the grant
        """
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        user = await self.session.get(User, user_id)
        if not user:
            raise NotFoundError("User", user_id)
        if not await self.session.get(Section, section_id):
            raise NotFoundError("Section", section_id)

        if user.role == UserRole.GUEST:
            raise ValidationError("Guests cannot be section editors")
        if user.role == UserRole.ADMIN:
            raise ConflictError("Admins already edit every section")
        if await self.session.get(SectionEditorGrant, (user_id, section_id)):
            raise ConflictError(f"User is already an editor of '{section_id}'")

        grant = SectionEditorGrant(user_id=user_id, section_id=section_id)
        self.session.add(grant)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.EDITOR_GRANTED,
            entity_type="section",
            entity_id=section_id,
            user_id=requester.id,
            payload={"editor_id": user_id},
        )
        return grant

    async def remove_grant(
        self,
        user_id: uuid.UUID,
        section_id: str,
        requester: User,
    ) -> None:
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        grant = await self.session.get(SectionEditorGrant, (user_id, section_id))
        if not grant:
            raise NotFoundError("Section editor grant", f"{user_id}/{section_id}")

        await self.session.delete(grant)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.EDITOR_REVOKED,
            entity_type="section",
            entity_id=section_id,
            user_id=requester.id,
            payload={"editor_id": user_id},
        )
