"""
Digest preference store.

Only the user's intent is kept here (on/off and how often). Composing and
sending digests belongs to the mail side and is not triggered from here.
"""

import uuid
from typing import Optional, Union

from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.kernel.errors import ValidationError
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.notification import DigestFrequency, DigestPreference
from otsnews.kernel.models.user import User
from otsnews.kernel.permissions.permission_service import PermissionService


class DigestService:
    """Per-user digest preferences, self-service only."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)

    async def get(self, user_id: uuid.UUID, requester: User) -> DigestPreference:
        """Stored preference, or the default (disabled, weekly) when none exists."""
        policy = await self.permissions.policy_for(requester)
        policy.require_self(user_id)

        preference = await self.session.get(DigestPreference, user_id)
        if preference is None:
            # Transient; nothing is written for a read
            preference = DigestPreference(
                user_id=user_id,
                enabled=False,
                frequency=DigestFrequency.WEEKLY,
            )
        return preference

    async def set(
        self,
        user_id: uuid.UUID,
        enabled: bool,
        frequency: Union[DigestFrequency, str],
        requester: User,
    ) -> DigestPreference:
        policy = await self.permissions.policy_for(requester)
        policy.require_self(user_id)

        try:
            frequency = DigestFrequency(frequency)
        except ValueError:
            raise ValidationError("Frequency must be 'daily' or 'weekly'")

        preference: Optional[DigestPreference] = await self.session.get(DigestPreference, user_id)
        if preference is None:
            preference = DigestPreference(user_id=user_id)
            self.session.add(preference)
        preference.enabled = bool(enabled)
        preference.frequency = frequency
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.DIGEST_PREFERENCE_UPDATED,
            entity_type="user",
            entity_id=user_id,
            user_id=requester.id,
            payload={"enabled": preference.enabled, "frequency": frequency},
        )
        return preference
