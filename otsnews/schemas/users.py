"""
User and authentication schemas.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from otsnews.kernel.models.user import UserRole


class UserCreate(BaseModel):
    """User registration request. Password length is checked by the service."""
    
    name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., max_length=128)
    avatar: Optional[str] = Field(None, max_length=1024)


class UserLogin(BaseModel):
    """User login request."""
    
    email: str
    password: str


class UserResponse(BaseModel):
    """Public user record. Never carries the password hash."""
    
    id: uuid.UUID
    name: str
    email: str
    role: UserRole
    avatar: Optional[str] = None
    created_at: datetime
    
    class Config:
        from_attributes = True


class LoginResponse(BaseModel):
    """Successful login: the user record plus a bearer token."""
    
    user: UserResponse
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class RoleUpdate(BaseModel):
    role: UserRole


class PasswordReset(BaseModel):
    password: str = Field(..., max_length=128)
