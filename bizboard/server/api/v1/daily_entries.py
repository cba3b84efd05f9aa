"""
Daily Entries API Endpoints.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from bizboard.core.models.io.daily_entries import DailyEntryCreate, DailyEntryRead, DailyEntryUpdate, OpeningStock
from bizboard.server.services.access import require_business, require_businesses
from bizboard.server.services.daily_entries import DailyEntryService
from bizboard.server.services.deps import CurrentUserDep, SessionDep

router = APIRouter(tags=["daily-entries"])


@router.post(
    "",
    response_model=DailyEntryRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Daily Entry",
    responses={409: {"description": "An entry already exists for the date, or the business is inactive"}},
)
async def create_entry(data: DailyEntryCreate, user: CurrentUserDep, session: SessionDep) -> DailyEntryRead:
    business = await require_business(session, user, data.business_id)
    service = DailyEntryService(session)
    entry = await service.create(data, business, user)
    return (await service.read([entry]))[0]


@router.get("", response_model=List[DailyEntryRead], summary="List Daily Entries")
async def list_entries(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: List[str] = Query(...),
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> List[DailyEntryRead]:
    await require_businesses(session, user, business_id)
    return await DailyEntryService(session).list(business_id, start=start, end=end)


@router.get("/opening-stock", response_model=List[OpeningStock], summary="Suggested Opening Stock")
async def opening_stock(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: str = Query(...),
    entry_date: date = Query(...),
) -> List[OpeningStock]:
    """Closing stock of the previous entry per product, else the product's current stock."""
    await require_business(session, user, business_id)
    return await DailyEntryService(session).opening_stock(business_id, entry_date)


@router.get("/{entry_id}", response_model=DailyEntryRead, summary="Get Daily Entry")
async def get_entry(entry_id: str, user: CurrentUserDep, session: SessionDep) -> DailyEntryRead:
    service = DailyEntryService(session)
    entry = await service.get(entry_id)
    await require_business(session, user, entry.business_id)
    return (await service.read([entry]))[0]


@router.put("/{entry_id}", response_model=DailyEntryRead, summary="Update Daily Entry")
async def update_entry(entry_id: str, data: DailyEntryUpdate, user: CurrentUserDep, session: SessionDep) -> DailyEntryRead:
    """Update the entry; income and product rows are replaced by the submitted ones."""
    service = DailyEntryService(session)
    entry = await service.get(entry_id)
    await require_business(session, user, entry.business_id)
    entry = await service.update(entry, data)
    return (await service.read([entry]))[0]


@router.delete("/{entry_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Daily Entry")
async def delete_entry(entry_id: str, user: CurrentUserDep, session: SessionDep) -> Response:
    service = DailyEntryService(session)
    entry = await service.get(entry_id)
    await require_business(session, user, entry.business_id)
    await service.delete(entry)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
