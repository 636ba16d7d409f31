"""
Permission service: builds access policies from the grant registry.
"""

import uuid
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.kernel.models.section import SectionEditorGrant
from otsnews.kernel.models.user import User
from otsnews.kernel.permissions.policy import ANONYMOUS, AccessPolicy


class PermissionService:
    """
    Loads the grants a policy decision depends on.
    
    Nothing is cached between calls: each call reads the current grant
    table, so grant and role changes take effect immediately.
    """
    
    def __init__(self, session: AsyncSession):
        self.session = session
    
    async def policy_for(self, user: Optional[User]) -> AccessPolicy:
        """Build the access policy for a user (None = anonymous)."""
        if user is None:
            return ANONYMOUS
        section_ids = await self.granted_section_ids(user.id)
        return AccessPolicy(user=user, granted_section_ids=frozenset(section_ids))
    
    async def granted_section_ids(self, user_id: uuid.UUID) -> List[str]:
        query = select(SectionEditorGrant.section_id).where(
            SectionEditorGrant.user_id == user_id
        )
        result = await self.session.execute(query)
        return [row[0] for row in result.all()]
