"""
Authentication Service.

Passwords are stored as bcrypt hashes. A successful login creates an
``AuthSession`` row holding an opaque random token; the token is accepted as
a bearer token or as the session cookie until it expires or is revoked.
"""

from __future__ import annotations

import secrets
from datetime import timedelta
from typing import Optional, Tuple

import bcrypt
from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.base import utc_now
from bizboard.core.database.entities import AuthSession, Profile
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import (
    AuthenticationError,
    ConflictError,
    DomainValidationError,
    NotFoundError,
    PermissionDeniedError,
)
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.auth import UserCreate
from bizboard.server.core.config import settings

logger = get_logger(__name__)

INVALID_CREDENTIALS = "אימייל או סיסמה שגויים"
INACTIVE_USER = "המשתמש אינו פעיל"


def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is malformed")
        return False


def normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class AuthService:
    """Login, logout, token resolution and user administration."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.db = QueryClient(session)

    async def login(self, email: str, password: str) -> Tuple[AuthSession, Profile]:
        """Check credentials and open a session.

        Raises:
            AuthenticationError: Unknown email or wrong password.
            PermissionDeniedError: The user is deactivated.
        """
        profile = await self.db.table(Profile).eq("email", normalize_email(email)).maybe_single()
        if profile is None or not verify_password(password, profile.password_hash):
            logger.info(f"Failed login attempt for {normalize_email(email)!r}")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if not profile.is_active:
            raise PermissionDeniedError(INACTIVE_USER)

        auth_session = await self.db.table(AuthSession).insert(
            {
                "token": secrets.token_urlsafe(32),
                "user_id": profile.id,
                "expires_at": utc_now() + timedelta(hours=settings.auth.session_ttl_hours),
            }
        )
        await self.session.commit()
        logger.info(f"User {profile.id} logged in")
        return auth_session, profile

    async def resolve(self, token: Optional[str]) -> Tuple[AuthSession, Profile]:
        """Return the live session and profile behind ``token``.

        Raises:
            AuthenticationError: Missing, unknown, expired or revoked token.
        """
        if not token:
            raise AuthenticationError()
        auth_session = await self.db.table(AuthSession).eq("token", token).is_null("revoked_at").maybe_single()
        if auth_session is None or auth_session.expires_at <= utc_now():
            raise AuthenticationError()
        profile = await self.db.get(Profile, auth_session.user_id, live=False)
        if profile is None or not profile.is_active:
            raise AuthenticationError()
        return auth_session, profile

    async def logout(self, token: str) -> None:
        await self.db.table(AuthSession).eq("token", token).is_null("revoked_at").update({"revoked_at": utc_now()})
        await self.session.commit()

    async def create_user(self, data: UserCreate) -> Profile:
        email = normalize_email(data.email)
        if not email or "@" not in email:
            raise DomainValidationError("כתובת אימייל לא תקינה")
        if await self.db.table(Profile).eq("email", email).maybe_single() is not None:
            raise ConflictError("משתמש עם אימייל זה כבר קיים")
        profile = await self.db.table(Profile).insert(
            {
                "email": email,
                "password_hash": hash_password(data.password),
                "full_name": (data.full_name or "").strip() or None,
                "phone": (data.phone or "").strip() or None,
                "role": data.role.value,
            }
        )
        await self.session.commit()
        logger.info(f"Created user {profile.id} with role {profile.role}")
        return profile

    async def set_password(self, user_id: str, password: str) -> None:
        rows = await self.db.table(Profile).eq("id", user_id).update({"password_hash": hash_password(password)})
        if not rows:
            raise NotFoundError("המשתמש לא נמצא")
        # Existing sessions of the user stop working.
        await self.db.table(AuthSession).eq("user_id", user_id).is_null("revoked_at").update({"revoked_at": utc_now()})
        await self.session.commit()
        logger.info(f"Password reset for user {user_id}")
