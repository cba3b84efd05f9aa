"""
Profile and login session entities.

Profiles are the application's users. A login creates an ``AuthSession``
holding an opaque bearer token.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import TableBase


class Profile(TableBase, table=True):
    """A user of the application.

    Table: profiles
    """

    __tablename__ = "profiles"
    __table_args__ = ({"extend_existing": True},)

    email: str = Field(index=True, unique=True, description="Login email, stored lower-case")
    full_name: Optional[str] = Field(default=None)
    phone: Optional[str] = Field(default=None)
    avatar_url: Optional[str] = Field(default=None)
    role: str = Field(default="employee", description="admin | owner | employee")
    is_active: bool = Field(default=True)
    password_hash: str = Field(description="bcrypt hash of the password")

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    def __repr__(self) -> str:
        return f"Profile(id={self.id}, email={self.email}, role={self.role})"


class AuthSession(TableBase, table=True):
    """An issued login token.

    Table: auth_sessions
    """

    __tablename__ = "auth_sessions"
    __table_args__ = ({"extend_existing": True},)

    token: str = Field(index=True, unique=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)
    expires_at: datetime
    revoked_at: Optional[datetime] = Field(default=None)
