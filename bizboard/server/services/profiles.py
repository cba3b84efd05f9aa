"""
Profile settings: personal details, memberships and avatar.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import Business, BusinessMember, Profile
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import DomainValidationError, PayloadTooLargeError
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.auth import ProfileRead
from bizboard.core.models.io.profiles import MembershipRead, ProfileUpdate, ProfileWithMemberships
from bizboard.core.storage import DEFAULT_BUCKET, LocalFileStorage, build_object_path
from bizboard.server.core.config import settings

logger = get_logger(__name__)

IMAGES_ONLY = "יש להעלות קובץ תמונה בלבד"
AVATAR_TOO_LARGE = "גודל התמונה המקסימלי הוא 2MB"


def clean_text(value: Optional[str]) -> Optional[str]:
    """Trim; blank becomes ``None``."""
    if value is None:
        return None
    value = value.strip()
    return value or None


def check_avatar(content_type: Optional[str], size: int, max_bytes: int) -> None:
    if not (content_type or "").startswith("image/"):
        raise DomainValidationError(IMAGES_ONLY)
    if size > max_bytes:
        raise PayloadTooLargeError(AVATAR_TOO_LARGE)


class ProfileService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.db = QueryClient(session)

    async def memberships(self, user: Profile) -> List[MembershipRead]:
        members = await self.db.table(BusinessMember).eq("user_id", user.id).live().all()
        if not members:
            return []
        businesses = {b.id: b for b in await self.db.table(Business).in_("id", [m.business_id for m in members]).live().all()}
        return [
            MembershipRead(business_id=m.business_id, business_name=businesses[m.business_id].name, role=m.role)
            for m in members
            if m.business_id in businesses
        ]

    async def read(self, user: Profile) -> ProfileWithMemberships:
        base = ProfileRead.model_validate(user)
        return ProfileWithMemberships(**base.model_dump(), memberships=await self.memberships(user))

    async def update(self, user: Profile, data: ProfileUpdate) -> Profile:
        changes = {key: clean_text(value) for key, value in data.model_dump(exclude_unset=True).items()}
        if changes:
            await self.db.table(Profile).eq("id", user.id).update(changes)
            await self.session.commit()
        return user

    async def set_avatar(
        self,
        user: Profile,
        storage: LocalFileStorage,
        filename: str,
        content_type: Optional[str],
        data: bytes,
    ) -> Profile:
        check_avatar(content_type, len(data), settings.storage.avatar_max_bytes)
        path = build_object_path("avatars", filename, user.id)
        storage.save(DEFAULT_BUCKET, path, data)
        url = storage.public_url(DEFAULT_BUCKET, path)
        await self.db.table(Profile).eq("id", user.id).update({"avatar_url": url})
        await self.session.commit()
        logger.info(f"Updated avatar of user {user.id}")
        return user
