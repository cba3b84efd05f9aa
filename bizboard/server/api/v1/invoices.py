"""
Invoice API Endpoints.

Invoices are created against a supplier of an active business. VAT is
derived from the subtotal unless an explicit (partial) amount is given.
"""

from __future__ import annotations

from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Query, Response, status

from bizboard.core.database.entities import Invoice
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import NotFoundError
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.invoices import InvoiceCreate, InvoiceRead, InvoiceUpdate
from bizboard.server.services.access import require_business, require_businesses
from bizboard.server.services.deps import CurrentUserDep, SessionDep
from bizboard.server.services.invoices import InvoiceService

logger = get_logger(__name__)

router = APIRouter(tags=["invoices"])


async def _load(session, user, invoice_id: str):
    invoice = await QueryClient(session).get(Invoice, invoice_id)
    if invoice is None:
        raise NotFoundError("החשבונית לא נמצאה")
    business = await require_business(session, user, invoice.business_id)
    return invoice, business


@router.post(
    "",
    response_model=InvoiceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Invoice",
    responses={409: {"description": "The business is inactive"}},
)
async def create_invoice(data: InvoiceCreate, user: CurrentUserDep, session: SessionDep) -> InvoiceRead:
    business = await require_business(session, user, data.business_id)
    invoice = await InvoiceService(session).create(data, business, user)
    return InvoiceRead.model_validate(invoice)


@router.get("", response_model=List[InvoiceRead], summary="List Invoices")
async def list_invoices(
    user: CurrentUserDep,
    session: SessionDep,
    business_id: List[str] = Query(...),
    start: Optional[date] = None,
    end: Optional[date] = None,
    supplier_id: Optional[str] = None,
) -> List[InvoiceRead]:
    await require_businesses(session, user, business_id)
    query = QueryClient(session).table(Invoice).in_("business_id", business_id).live()
    if start is not None:
        query.gte("invoice_date", start)
    if end is not None:
        query.lte("invoice_date", end)
    if supplier_id:
        query.eq("supplier_id", supplier_id)
    rows = await query.order("invoice_date", ascending=False).all()
    return [InvoiceRead.model_validate(row) for row in rows]


@router.get("/{invoice_id}", response_model=InvoiceRead, summary="Get Invoice")
async def get_invoice(invoice_id: str, user: CurrentUserDep, session: SessionDep) -> InvoiceRead:
    invoice, _ = await _load(session, user, invoice_id)
    return InvoiceRead.model_validate(invoice)


@router.patch("/{invoice_id}", response_model=InvoiceRead, summary="Update Invoice")
async def update_invoice(invoice_id: str, data: InvoiceUpdate, user: CurrentUserDep, session: SessionDep) -> InvoiceRead:
    invoice, business = await _load(session, user, invoice_id)
    invoice = await InvoiceService(session).update(invoice, data, business)
    return InvoiceRead.model_validate(invoice)


@router.delete("/{invoice_id}", status_code=status.HTTP_204_NO_CONTENT, summary="Delete Invoice")
async def delete_invoice(invoice_id: str, user: CurrentUserDep, session: SessionDep) -> Response:
    invoice, _ = await _load(session, user, invoice_id)
    await QueryClient(session).table(Invoice).eq("id", invoice.id).soft_delete()
    await session.commit()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
