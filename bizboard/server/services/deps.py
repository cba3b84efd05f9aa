"""
Request dependencies shared by the API routers.

Provides the database session, the authenticated user and upload storage as annotated
dependencies.
"""

from typing import Annotated, Optional

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import Profile
from bizboard.core.storage import LocalFileStorage
from bizboard.server.core.config import settings
from bizboard.server.core.database import get_session
from bizboard.server.services.access import require_admin
from bizboard.server.services.auth import AuthService

SessionDep = Annotated[AsyncSession, Depends(get_session)]


def extract_token(request: Request) -> Optional[str]:
    """Bearer token from the Authorization header, else the session cookie."""
    header = request.headers.get("Authorization", "")
    scheme, _, credentials = header.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()
    return request.cookies.get(settings.auth.cookie_name)


async def get_current_user(request: Request, session: SessionDep) -> Profile:
    _, profile = await AuthService(session).resolve(extract_token(request))
    return profile


async def get_admin_user(user: Annotated[Profile, Depends(get_current_user)]) -> Profile:
    require_admin(user)
    return user


CurrentUserDep = Annotated[Profile, Depends(get_current_user)]
AdminUserDep = Annotated[Profile, Depends(get_admin_user)]


def get_storage() -> LocalFileStorage:
    """Upload storage rooted at ``STORAGE_ROOT``."""
    return LocalFileStorage(settings.storage.root, settings.storage.public_base_url)


StorageDep = Annotated[LocalFileStorage, Depends(get_storage)]
