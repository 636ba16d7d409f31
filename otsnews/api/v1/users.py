"""
User and authentication endpoints.
"""

import uuid
from typing import List

from fastapi import APIRouter, Request, status

from otsnews.api.deps import (
    AppSettings,
    CurrentUser,
    DbSession,
    get_client_ip,
    get_user_agent,
)
from otsnews.kernel.identity.identity_service import IdentityService
from otsnews.schemas.common import MessageResponse
from otsnews.schemas.users import (
    LoginResponse,
    PasswordReset,
    RoleUpdate,
    UserCreate,
    UserLogin,
    UserResponse,
)

router = APIRouter()


@router.get("/users", response_model=List[UserResponse])
async def list_users(db: DbSession, settings: AppSettings):
    """List all users."""
    users = await IdentityService(db, settings=settings).list_users()
    return [UserResponse.model_validate(u) for u in users]


@router.post("/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def register(
    request: Request,
    data: UserCreate,
    db: DbSession,
    settings: AppSettings,
):
    """
    Register a new user account.
    
    New accounts get the ``user`` role; admins promote them afterwards.
    """
    user = await IdentityService(db, settings=settings).register_user(
        name=data.name,
        email=data.email,
        password=data.password,
        avatar=data.avatar,
        ip_address=get_client_ip(request),
    )
    return UserResponse.model_validate(user)


@router.post("/login", response_model=LoginResponse)
async def login(
    request: Request,
    data: UserLogin,
    db: DbSession,
    settings: AppSettings,
):
    """
    Check credentials.
    
    Returns the user record together with a bearer token for later calls.
    """
    user, token = await IdentityService(db, settings=settings).authenticate(
        email=data.email,
        password=data.password,
        ip_address=get_client_ip(request),
        user_agent=get_user_agent(request),
    )
    return LoginResponse(
        user=UserResponse.model_validate(user),
        access_token=token.access_token,
        token_type=token.token_type,
        expires_in=token.expires_in,
    )


@router.get("/users/me", response_model=UserResponse)
async def get_me(user: CurrentUser):
    return UserResponse.model_validate(user)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def change_role(
    request: Request,
    user_id: uuid.UUID,
    data: RoleUpdate,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    """Set a user's global role (admin only)."""
    updated = await IdentityService(db, settings=settings).change_role(
        user_id=user_id,
        new_role=data.role,
        requester=user,
        ip_address=get_client_ip(request),
    )
    return UserResponse.model_validate(updated)


@router.put("/users/{user_id}/password", response_model=MessageResponse)
async def reset_password(
    request: Request,
    user_id: uuid.UUID,
    data: PasswordReset,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    """Set a new password for a user (admin only)."""
    await IdentityService(db, settings=settings).reset_password(
        user_id=user_id,
        new_password=data.password,
        requester=user,
        ip_address=get_client_ip(request),
    )
    return MessageResponse(message="Password updated")


@router.delete("/users/{user_id}", response_model=MessageResponse)
async def delete_user(
    request: Request,
    user_id: uuid.UUID,
    user: CurrentUser,
    db: DbSession,
    settings: AppSettings,
):
    """Delete a user (admin only, never yourself)."""
    await IdentityService(db, settings=settings).delete_user(
        user_id=user_id,
        requester=user,
        ip_address=get_client_ip(request),
    )
    return MessageResponse(message="User deleted")
