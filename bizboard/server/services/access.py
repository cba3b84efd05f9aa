"""
Business access rules.

Admins may act on every business. Everyone else may act only on businesses
where they hold a live membership.
"""

from __future__ import annotations

from typing import Iterable, List

from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import Business, BusinessMember, Profile
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import DomainValidationError, InactiveBusinessError, NotFoundError, PermissionDeniedError


async def accessible_business_ids(session: AsyncSession, user: Profile) -> List[str]:
    db = QueryClient(session)
    if user.is_admin:
        return [b.id for b in await db.table(Business).live().all()]
    members = await db.table(BusinessMember).eq("user_id", user.id).live().all()
    return [m.business_id for m in members]


async def require_businesses(session: AsyncSession, user: Profile, business_ids: Iterable[str]) -> List[Business]:
    """Load the requested businesses, checking the user may use each of them.

    Raises:
        DomainValidationError: No business was selected.
        NotFoundError: A business does not exist.
        PermissionDeniedError: The user is not a member of a business.
    """
    wanted = list(dict.fromkeys(bid for bid in business_ids if bid))
    if not wanted:
        raise DomainValidationError("לא נבחר עסק")

    db = QueryClient(session)
    businesses = await db.table(Business).in_("id", wanted).live().all()
    found = {b.id: b for b in businesses}
    missing = [bid for bid in wanted if bid not in found]
    if missing:
        raise NotFoundError("העסק לא נמצא")

    if not user.is_admin:
        members = await db.table(BusinessMember).eq("user_id", user.id).in_("business_id", wanted).live().all()
        allowed = {m.business_id for m in members}
        if any(bid not in allowed for bid in wanted):
            raise PermissionDeniedError()
    return [found[bid] for bid in wanted]


async def require_business(session: AsyncSession, user: Profile, business_id: str) -> Business:
    return (await require_businesses(session, user, [business_id]))[0]


def require_admin(user: Profile) -> None:
    if not user.is_admin:
        raise PermissionDeniedError("פעולה זו זמינה למנהלי מערכת בלבד")


def require_active(business: Business) -> None:
    if not business.is_active:
        raise InactiveBusinessError()
