"""
Identity service for user management operations.
"""

import uuid
from typing import List, Optional

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.config import Settings, get_settings
from otsnews.kernel.errors import (
    AuthError,
    EmailAlreadyRegisteredError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from otsnews.kernel.events.event_store import EventStore
from otsnews.kernel.identity.jwt import AccessToken, JWTManager
from otsnews.kernel.identity.password import PasswordHasher
from otsnews.kernel.models.event_log import EventType
from otsnews.kernel.models.notification import DigestPreference, Notification
from otsnews.kernel.models.section import SectionEditorGrant
from otsnews.kernel.models.user import User, UserRole
from otsnews.kernel.permissions.permission_service import PermissionService
from otsnews.logging_config import get_logger

logger = get_logger(__name__)


class IdentityService:
    """
    Service for user identity operations.

    Handles registration, authentication, role and credential changes and
    user deletion.
    """

    def __init__(
        self,
        session: AsyncSession,
        settings: Optional[Settings] = None,
        jwt_manager: Optional[JWTManager] = None,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.hasher = PasswordHasher(rounds=self.settings.bcrypt_rounds)
        self.jwt_manager = jwt_manager or JWTManager.from_settings(self.settings)
        self.event_store = EventStore(session)
        self.permissions = PermissionService(session)

    async def register_user(
        self,
        name: str,
        email: str,
        password: str,
        role: UserRole = UserRole.USER,
        avatar: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Register a new user.

        Args:
            name: Display name
            email: Email address, unique case-insensitively
            password: Plain text password
            role: Global role (default: user)
            avatar: Avatar reference; generated from the name when omitted
            ip_address: Client IP for audit

        Returns:
            The created User object

        Raises:
            ValidationError: If name, email or password are unusable
            EmailAlreadyRegisteredError: If email already exists
        """
        name = (name or "").strip()
        email = (email or "").lower().strip()
        if not name:
            raise ValidationError("Name is required")
        if not email:
            raise ValidationError("Email is required")
        self._check_password(password)

        if await self.get_user_by_email(email):
            raise EmailAlreadyRegisteredError(email)

        user = User(
            name=name,
            email=email,
            password_hash=self.hasher.hash(password),
            role=role,
            avatar=avatar or self._default_avatar(name),
        )
        self.session.add(user)
        await self.session.flush()  # Get the ID

        await self.event_store.log(
            event_type=EventType.USER_REGISTERED,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"email": user.email, "role": user.role_value},
            ip_address=ip_address,
        )
        logger.info("User registered", extra={"user_id": str(user.id), "role": user.role_value})

        return user

    async def authenticate(
        self,
        email: str,
        password: str,
        ip_address: Optional[str] = None,
        user_agent: Optional[str] = None,
    ) -> tuple[User, AccessToken]:
        """
        Check credentials and issue an access token.

        Raises:
            AuthError: Unknown email or wrong password (same message for both)
        """
        user = await self.get_user_by_email(email or "")
        if not user or not self.hasher.verify(password or "", user.password_hash):
            raise AuthError("Invalid email or password")

        token = self.jwt_manager.create_access_token(user_id=user.id, role=user.role_value)

        await self.event_store.log(
            event_type=EventType.USER_LOGGED_IN,
            entity_type="user",
            entity_id=user.id,
            user_id=user.id,
            payload={"method": "password"},
            ip_address=ip_address,
            user_agent=user_agent,
        )

        return user, token

    async def list_users(self) -> List[User]:
        result = await self.session.execute(select(User).order_by(User.created_at, User.name))
        return list(result.scalars().all())

    async def get_user_by_id(self, user_id: uuid.UUID) -> Optional[User]:
        """Get a user by ID."""
        return await self.session.get(User, user_id)

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email."""
        query = select(User).where(User.email == email.lower().strip())
        result = await self.session.execute(query)
        return result.scalar_one_or_none()

    async def require_user(self, user_id: uuid.UUID) -> User:
        user = await self.get_user_by_id(user_id)
        if not user:
            raise NotFoundError("User", user_id)
        return user

    async def change_role(
        self,
        user_id: uuid.UUID,
        new_role: UserRole,
        requester: User,
        ip_address: Optional[str] = None,
    ) -> User:
        """
        Change a user's global role (admin only).

        Demoting someone to guest also removes their section grants, since
        guests hold no capabilities.
        """
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()

        try:
            new_role = UserRole(new_role)
        except ValueError:
            raise ValidationError(f"Unknown role: {new_role}")

        user = await self.require_user(user_id)
        old_role = user.role_value
        user.role = new_role

        removed_grants = 0
        if new_role == UserRole.GUEST:
            result = await self.session.execute(
                delete(SectionEditorGrant).where(SectionEditorGrant.user_id == user_id)
            )
            removed_grants = result.rowcount or 0

        await self.session.flush()
        await self.event_store.log(
            event_type=EventType.USER_ROLE_CHANGED,
            entity_type="user",
            entity_id=user_id,
            user_id=requester.id,
            payload={
                "previous_role": old_role,
                "new_role": new_role.value,
                "grants_removed": removed_grants,
            },
            ip_address=ip_address,
        )
        logger.info(
            "User role changed",
            extra={"user_id": str(user_id), "previous_role": old_role, "new_role": new_role.value},
        )

        return user

    async def reset_password(
        self,
        user_id: uuid.UUID,
        new_password: str,
        requester: User,
        ip_address: Optional[str] = None,
    ) -> User:
        """Set a new password for a user (admin only)."""
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()
        self._check_password(new_password)

        user = await self.require_user(user_id)
        user.password_hash = self.hasher.hash(new_password)

        await self.event_store.log(
            event_type=EventType.USER_PASSWORD_RESET,
            entity_type="user",
            entity_id=user_id,
            user_id=requester.id,
            ip_address=ip_address,
        )

        return user

    async def delete_user(
        self,
        user_id: uuid.UUID,
        requester: User,
        ip_address: Optional[str] = None,
    ) -> None:
        """
        Delete a user (admin only, never yourself).

        Removes the user's grants, received notifications and digest
        preference. Articles and comments they wrote keep their author id
        and name snapshot.
        """
        policy = await self.permissions.policy_for(requester)
        policy.require_admin()
        if policy.is_self(user_id):
            raise PermissionDeniedError("You cannot delete your own account")

        user = await self.require_user(user_id)

        grants = await self.session.execute(
            delete(SectionEditorGrant).where(SectionEditorGrant.user_id == user_id)
        )
        notifications = await self.session.execute(
            delete(Notification).where(Notification.user_id == user_id)
        )
        await self.session.execute(
            delete(DigestPreference).where(DigestPreference.user_id == user_id)
        )
        await self.session.delete(user)
        await self.session.flush()

        await self.event_store.log(
            event_type=EventType.USER_DELETED,
            entity_type="user",
            entity_id=user_id,
            user_id=requester.id,
            payload={
                "email": user.email,
                "grants_removed": grants.rowcount or 0,
                "notifications_removed": notifications.rowcount or 0,
            },
            ip_address=ip_address,
        )
        logger.info("User deleted", extra={"user_id": str(user_id)})

    def _check_password(self, password: Optional[str]) -> None:
        minimum = self.settings.min_password_length
        if not password or len(password) < minimum:
            raise ValidationError(f"Password must be at least {minimum} characters")

    def _default_avatar(self, name: str) -> str:
        seed = "".join(name.split())
        return self.settings.avatar_url_template.format(seed=seed)
