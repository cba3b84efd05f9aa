"""
Business management: businesses, weekly schedule and memberships.
"""

from __future__ import annotations

from typing import List

from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import Business, BusinessMember, BusinessSchedule, Profile
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import ConflictError, DomainValidationError, NotFoundError
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.businesses import BusinessCreate, BusinessUpdate, MemberCreate, ScheduleDay

logger = get_logger(__name__)

DAYS_IN_WEEK = 7


def full_week(rows: List[BusinessSchedule]) -> List[ScheduleDay]:
    """Seven days, Sunday first; days without a row are closed."""
    factors = {row.day_of_week: float(row.day_factor or 0) for row in rows}
    return [ScheduleDay(day_of_week=dow, day_factor=factors.get(dow, 0.0)) for dow in range(DAYS_IN_WEEK)]


class BusinessService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.db = QueryClient(session)

    async def list(self, business_ids: List[str]) -> List[Business]:
        if not business_ids:
            return []
        return await self.db.table(Business).in_("id", business_ids).live().order("name").all()

    async def create(self, data: BusinessCreate) -> Business:
        values = data.model_dump()
        values["status"] = data.status.value
        business = await self.db.table(Business).insert(values)
        await self.session.commit()
        logger.info(f"Created business {business.id} ({business.name})")
        return business

    async def update(self, business: Business, data: BusinessUpdate) -> Business:
        changes = {k: v for k, v in data.model_dump(exclude_unset=True).items() if v is not None}
        if data.status is not None:
            changes["status"] = data.status.value
        rows = await self.db.table(Business).eq("id", business.id).update(changes)
        await self.session.commit()
        return rows[0]

    async def schedule(self, business_id: str) -> List[ScheduleDay]:
        rows = await self.db.table(BusinessSchedule).eq("business_id", business_id).all()
        return full_week(rows)

    async def save_schedule(self, business_id: str, days: List[ScheduleDay]) -> List[ScheduleDay]:
        seen = set()
        for day in days:
            if day.day_of_week in seen:
                raise DomainValidationError(f"יום {day.day_of_week} מופיע יותר מפעם אחת")
            seen.add(day.day_of_week)

        existing = {row.day_of_week: row for row in await self.db.table(BusinessSchedule).eq("business_id", business_id).all()}
        for day in days:
            row = existing.get(day.day_of_week)
            if row is not None:
                await self.db.table(BusinessSchedule).eq("id", row.id).update({"day_factor": day.day_factor})
            else:
                await self.db.table(BusinessSchedule).insert(
                    {"business_id": business_id, "day_of_week": day.day_of_week, "day_factor": day.day_factor}
                )
        await self.session.commit()
        return await self.schedule(business_id)

    async def add_member(self, business: Business, data: MemberCreate) -> BusinessMember:
        profile = await self.db.get(Profile, data.user_id, live=False)
        if profile is None:
            raise NotFoundError("המשתמש לא נמצא")
        existing = await self.db.table(BusinessMember).eq("business_id", business.id).eq("user_id", profile.id).live().maybe_single()
        if existing is not None:
            raise ConflictError("המשתמש כבר משויך לעסק")
        member = await self.db.table(BusinessMember).insert(
            {"business_id": business.id, "user_id": profile.id, "role": data.role.value}
        )
        await self.session.commit()
        logger.info(f"Linked user {profile.id} to business {business.id} as {member.role}")
        return member
