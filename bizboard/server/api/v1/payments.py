"""
Payments API Endpoints.

Includes:
- Payment CRUD (create, edit, soft delete) with installment splits
- The paginated ledger with display fields
- Totals per payment method
- The payment calendar: forecast of upcoming installments, past
  installments and long-running commitments
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.payments import (
    PaymentCreate,
    PaymentPage,
    PaymentRead,
    PaymentSchedule,
    PaymentSplitRead,
    PaymentSummary,
    PaymentUpdate,
)
from bizboard.server.services.access import require_business, require_businesses
from bizboard.server.services.deps import CurrentUserDep, SessionDep
from bizboard.server.services.forecast import ForecastService
from bizboard.server.services.payments import PaymentService

logger = get_logger(__name__)

router = APIRouter(tags=["payments"])


async def _read(service: PaymentService, payment) -> PaymentRead:
    splits = await service.splits_of([payment.id])
    read = PaymentRead.model_validate(payment)
    read.splits = [PaymentSplitRead.model_validate(s) for s in splits.get(payment.id, [])]
    return read


@router.post(
    "",
    response_model=PaymentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Record Payment",
    responses={422: {"description": "Missing supplier, date or amounts, or installments not matching the amount"}},
)
async def create_payment(data: PaymentCreate, user: CurrentUserDep, session: SessionDep) -> PaymentRead:
    """
    Record a payment to a supplier.

    Each payment method line becomes one split per installment. Selected
    invoices are marked paid, smallest first, while they fit in the total.
    """
    business = await require_business(session, user, data.business_id)
    service = PaymentService(session)
    payment = await service.create(data, business, user)
    return await _read(service, payment)


@router.get("", response_model=PaymentPage, summary="Payments Ledger")
async def list_payments(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: List[str] = Query(...),
    offset: int = Query(default=0, ge=0),
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> PaymentPage:
    """Newest payments first, one page at a time; ``has_more`` tells if another page exists."""
    await require_businesses(session, user, business_id)
    return await PaymentService(session).list_page(business_id, offset=offset, start=start, end=end)


@router.get("/summary", response_model=PaymentSummary, summary="Totals per Payment Method")
async def payments_summary(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: List[str] = Query(...),
    start: Optional[date] = None,
    end: Optional[date] = None,
) -> PaymentSummary:
    await require_businesses(session, user, business_id)
    return await PaymentService(session).summary(business_id, start=start, end=end)


@router.get("/forecast", response_model=PaymentSchedule, summary="Upcoming Installments")
async def payments_forecast(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: List[str] = Query(...),
    as_of: Optional[date] = None,
) -> PaymentSchedule:
    """Installments due on or after ``as_of`` (today by default), grouped by month."""
    await require_businesses(session, user, business_id)
    return await ForecastService(session).forecast(business_id, as_of)


@router.get("/past", response_model=PaymentSchedule, summary="Past Installments")
async def payments_past(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: List[str] = Query(...),
    as_of: Optional[date] = None,
) -> PaymentSchedule:
    """Installments due before ``as_of``, newest month first."""
    await require_businesses(session, user, business_id)
    return await ForecastService(session).past(business_id, as_of)


@router.get("/{payment_id}", response_model=PaymentRead, summary="Get Payment")
async def get_payment(payment_id: str, user: CurrentUserDep, session: SessionDep) -> PaymentRead:
    service = PaymentService(session)
    payment = await service.get(payment_id)
    await require_business(session, user, payment.business_id)
    return await _read(service, payment)


@router.put("/{payment_id}", response_model=PaymentRead, summary="Edit Payment")
async def update_payment(payment_id: str, data: PaymentUpdate, user: CurrentUserDep, session: SessionDep) -> PaymentRead:
    """Replace the payment's fields and splits."""
    service = PaymentService(session)
    payment = await service.get(payment_id)
    await require_business(session, user, payment.business_id)
    payment = await service.update(payment, data)
    return await _read(service, payment)


@router.delete("/{payment_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Payment")
async def delete_payment(payment_id: str, user: CurrentUserDep, session: SessionDep) -> Response:
    """Soft delete; a linked invoice goes back to pending."""
    service = PaymentService(session)
    payment = await service.get(payment_id)
    await require_business(session, user, payment.business_id)
    await service.delete(payment)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
