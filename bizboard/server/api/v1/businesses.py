"""
Business API Endpoints.

Businesses visible to the user, business details, the weekly work schedule
and memberships.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, status

from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.businesses import (
    BusinessCreate,
    BusinessRead,
    BusinessUpdate,
    MemberCreate,
    MemberRead,
    ScheduleDay,
    ScheduleUpdate,
)
from bizboard.server.services.access import accessible_business_ids, require_admin, require_business
from bizboard.server.services.businesses import BusinessService
from bizboard.server.services.deps import AdminUserDep, CurrentUserDep, SessionDep

logger = get_logger(__name__)

router = APIRouter(tags=["businesses"])


@router.get("", response_model=List[BusinessRead], summary="List Businesses")
async def list_businesses(user: CurrentUserDep, session: SessionDep) -> List[BusinessRead]:
    """Businesses the user may select: all of them for admins, memberships otherwise."""
    ids = await accessible_business_ids(session, user)
    businesses = await BusinessService(session).list(ids)
    return [BusinessRead.model_validate(b) for b in businesses]


@router.post("", response_model=BusinessRead, status_code=status.HTTP_201_CREATED, summary="Create Business")
async def create_business(data: BusinessCreate, admin: AdminUserDep, session: SessionDep) -> BusinessRead:
    business = await BusinessService(session).create(data)
    return BusinessRead.model_validate(business)


@router.get("/{business_id}", response_model=BusinessRead, summary="Get Business")
async def get_business(business_id: str, user: CurrentUserDep, session: SessionDep) -> BusinessRead:
    business = await require_business(session, user, business_id)
    return BusinessRead.model_validate(business)


@router.patch("/{business_id}", response_model=BusinessRead, summary="Update Business")
async def update_business(
    business_id: str, data: BusinessUpdate, user: CurrentUserDep, session: SessionDep
) -> BusinessRead:
    business = await require_business(session, user, business_id)
    business = await BusinessService(session).update(business, data)
    return BusinessRead.model_validate(business)


@router.get("/{business_id}/schedule", response_model=List[ScheduleDay], summary="Get Weekly Schedule")
async def get_schedule(business_id: str, user: CurrentUserDep, session: SessionDep) -> List[ScheduleDay]:
    """Seven days, Sunday first. Days without a schedule row are reported closed."""
    await require_business(session, user, business_id)
    return await BusinessService(session).schedule(business_id)


@router.put("/{business_id}/schedule", response_model=List[ScheduleDay], summary="Save Weekly Schedule")
async def save_schedule(
    business_id: str, data: ScheduleUpdate, user: CurrentUserDep, session: SessionDep
) -> List[ScheduleDay]:
    await require_business(session, user, business_id)
    return await BusinessService(session).save_schedule(business_id, data.days)


@router.post(
    "/{business_id}/members",
    response_model=MemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Member",
)
async def add_member(business_id: str, data: MemberCreate, user: CurrentUserDep, session: SessionDep) -> MemberRead:
    require_admin(user)
    business = await require_business(session, user, business_id)
    member = await BusinessService(session).add_member(business, data)
    return MemberRead.model_validate(member)
