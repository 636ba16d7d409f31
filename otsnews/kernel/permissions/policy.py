"""
Access control policy.

Every capability decision in the system is answered here, from a snapshot
of (user, granted section ids). The snapshot is built fresh for each unit of
work by ``PermissionService.policy_for`` so role and grant changes apply to
the very next request.
"""

import uuid
from dataclasses import dataclass, field
from typing import FrozenSet, List, Optional, Sequence, TypeVar

from otsnews.kernel.errors import PermissionDeniedError
from otsnews.kernel.models.article import Article
from otsnews.kernel.models.user import User, UserRole

S = TypeVar("S")


@dataclass(frozen=True)
class AccessPolicy:
    """Capability decisions for one (possibly anonymous) user."""

    user: Optional[User]
    granted_section_ids: FrozenSet[str] = field(default_factory=frozenset)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def is_admin(self) -> bool:
        return self.user is not None and self.user.role == UserRole.ADMIN

    @property
    def is_guest(self) -> bool:
        return self.user is not None and self.user.role == UserRole.GUEST

    def is_self(self, user_id: uuid.UUID) -> bool:
        return self.user is not None and self.user.id == user_id

    def can_edit_section(self, section_id: str) -> bool:
        """Admins edit everywhere; others need a grant. Guests never edit."""
        if self.user is None or self.is_guest:
            return False
        if self.is_admin:
            return True
        return section_id in self.granted_section_ids

    def can_edit_any(self) -> bool:
        if self.user is None or self.is_guest:
            return False
        return self.is_admin or bool(self.granted_section_ids)

    def editable_sections(self, sections: Sequence[S]) -> List[S]:
        """Filter sections (anything with an ``id``) keeping registry order."""
        if self.is_admin:
            return list(sections)
        return [s for s in sections if self.can_edit_section(s.id)]

    def can_moderate_comment(self, article: Article) -> bool:
        return self.can_edit_section(article.section_id)

    def can_comment(self) -> bool:
        return self.user is not None and not self.is_guest

    def can_view_article(self, article: Article) -> bool:
        if article.is_published:
            return True
        return self.is_admin or self.is_self(article.author_id)

    def can_update_article(self, article: Article, target_section_id: str) -> bool:
        if self.user is None:
            return False
        return (
            self.can_edit_section(target_section_id)
            or self.is_self(article.author_id)
            or self.is_admin
        )

    def can_delete_article(self, article: Article) -> bool:
        return self.is_admin or self.can_edit_section(article.section_id)

    # Raising variants

    def require_authenticated(self) -> User:
        if self.user is None:
            raise PermissionDeniedError("Authentication required")
        return self.user

    def require_admin(self) -> User:
        if not self.is_admin:
            raise PermissionDeniedError("Admin access required")
        return self.user  # type: ignore[return-value]

    def require_self(self, user_id: uuid.UUID) -> User:
        if not self.is_self(user_id):
            raise PermissionDeniedError("You can only access your own records")
        return self.user  # type: ignore[return-value]

    def require_edit_section(self, section_id: str) -> User:
        if not self.can_edit_section(section_id):
            raise PermissionDeniedError(f"Editor rights required for section '{section_id}'")
        return self.user  # type: ignore[return-value]

    def require_comment(self) -> User:
        if not self.can_comment():
            raise PermissionDeniedError("Guests and anonymous visitors cannot comment")
        return self.user  # type: ignore[return-value]


ANONYMOUS = AccessPolicy(user=None)
