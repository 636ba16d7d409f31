"""
FastAPI dependencies for authentication, authorization, and database sessions.
"""

import uuid
from typing import AsyncIterator, Annotated, Optional

from fastapi import Depends, HTTPException, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from otsnews.config import Settings, get_settings
from otsnews.kernel.errors import PermissionDeniedError
from otsnews.kernel.identity.identity_service import IdentityService
from otsnews.kernel.identity.jwt import JWTManager
from otsnews.kernel.models.user import User, UserRole


# Security scheme
security = HTTPBearer(auto_error=False)


async def get_db(request: Request) -> AsyncIterator[AsyncSession]:
    """One session per request; committed on success, rolled back on error."""
    async with request.app.state.db.session() as session:
        yield session


DbSession = Annotated[AsyncSession, Depends(get_db)]


def get_app_settings(request: Request) -> Settings:
    return getattr(request.app.state, "settings", None) or get_settings()


AppSettings = Annotated[Settings, Depends(get_app_settings)]


async def _user_from_token(token: str, db: AsyncSession, settings: Settings) -> Optional[User]:
    payload = JWTManager.from_settings(settings).verify_access_token(token)
    if not payload:
        return None
    try:
        user_id = uuid.UUID(payload.sub)
    except ValueError:
        return None
    return await IdentityService(db, settings=settings).get_user_by_id(user_id)


async def get_current_user_optional(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
    settings: AppSettings,
) -> Optional[User]:
    """Get current user if authenticated, None otherwise."""
    if not credentials:
        return None
    return await _user_from_token(credentials.credentials, db, settings)


async def get_current_user(
    credentials: Annotated[Optional[HTTPAuthorizationCredentials], Depends(security)],
    db: DbSession,
    settings: AppSettings,
) -> User:
    """Get current authenticated user or raise 401."""
    if not credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Not authenticated",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    user = await _user_from_token(credentials.credentials, db, settings)
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid or expired token",
            headers={"WWW-Authenticate": "Bearer"},
        )
    
    return user


CurrentUser = Annotated[User, Depends(get_current_user)]
OptionalUser = Annotated[Optional[User], Depends(get_current_user_optional)]


def get_client_ip(request: Request) -> Optional[str]:
    """Extract client IP from request."""
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else None


def get_user_agent(request: Request) -> Optional[str]:
    """Extract user agent from request."""
    return request.headers.get("User-Agent")


async def require_admin(user: CurrentUser) -> User:
    """Require the current user to be an admin."""
    if user.role != UserRole.ADMIN:
        raise PermissionDeniedError("Admin access required")
    return user


AdminUser = Annotated[User, Depends(require_admin)]
