"""
Goals API Endpoints.

The dashboard compares the month's targets with actual figures; targets are
edited one item at a time.
"""

from __future__ import annotations

from typing import List

from fastapi import APIRouter, Query

from bizboard.core.models.io.goals import GoalsDashboard, TargetUpdate, TargetUpdateResult
from bizboard.server.services.access import require_businesses
from bizboard.server.services.deps import CurrentUserDep, SessionDep
from bizboard.server.services.goals import GoalsService

router = APIRouter(tags=["goals"])


@router.get("/dashboard", response_model=GoalsDashboard, summary="Goals Dashboard")
async def goals_dashboard(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: List[str] = Query(..., description="One or more selected businesses"),
    year: int = Query(..., ge=2000, le=2100),
    month: int = Query(..., ge=1, le=12),
) -> GoalsDashboard:
    """
    Budget versus actual for a month.

    Returns the ``vs-current``, ``vs-goods`` and ``kpi`` tabs. Figures of
    several selected businesses are summed.
    """
    businesses = await require_businesses(session, user, business_id)
    return await GoalsService(session).dashboard([b.id for b in businesses], year, month)


@router.put("/targets", response_model=TargetUpdateResult, summary="Save Target")
async def save_target(update: TargetUpdate, user: CurrentUserDep, session: SessionDep) -> TargetUpdateResult:
    """
    Save one edited target.

    ``item_id`` is the id of a dashboard row: a KPI id, ``avg-ticket-<source>``,
    ``product-<id>``, an expense category id or ``goods-supplier-<id>``.
    Saving the same value twice leaves the data unchanged.
    """
    await require_businesses(session, user, update.business_ids)
    return await GoalsService(session).save_target(update)
