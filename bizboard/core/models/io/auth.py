"""
Authentication I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bizboard.core.models.domain import UserRole


class LoginRequest(BaseModel):
    """Credentials submitted by the login form."""

    email: str = Field(description="Login email; surrounding whitespace and case are ignored")
    password: str


class ProfileRead(BaseModel):
    """Schema for reading a user profile from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    full_name: Optional[str] = None
    phone: Optional[str] = None
    avatar_url: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: datetime


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_at: datetime
    user: ProfileRead
    redirect_to: str = Field(default="/", description="Where the client navigates after login")


class UserCreate(BaseModel):
    """Schema for creating a user (admin only)."""

    email: str
    password: str = Field(min_length=6)
    full_name: Optional[str] = None
    phone: Optional[str] = None
    role: UserRole = UserRole.employee


class PasswordReset(BaseModel):
    password: str = Field(min_length=6)
