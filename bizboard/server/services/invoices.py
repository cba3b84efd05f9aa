"""
Invoice VAT arithmetic and persistence.
"""

from __future__ import annotations

from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import Business, Invoice, Profile, Supplier
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import DomainValidationError, NotFoundError
from bizboard.core.formatting import round_cents
from bizboard.core.logging_config import get_logger
from bizboard.core.models.domain import InvoiceStatus, VatType
from bizboard.core.models.io.invoices import InvoiceCreate, InvoiceUpdate
from bizboard.server.core.config import settings
from bizboard.server.services.access import require_active

logger = get_logger(__name__)


def business_vat_rate(business: Optional[Business]) -> float:
    if business is not None and business.vat_percentage:
        return float(business.vat_percentage)
    return settings.finance.default_vat_rate


def invoice_amounts(
    subtotal: float, vat_rate: float, vat_type: str = VatType.full.value, vat_amount: Optional[float] = None
) -> Tuple[float, float]:
    """Return ``(vat_amount, total_amount)`` rounded to cents.

    An explicit ``vat_amount`` (partial VAT) wins; suppliers without VAT pay
    none; otherwise VAT is ``subtotal × vat_rate``.
    """
    if vat_amount is not None:
        vat = vat_amount
    elif vat_type == VatType.none.value:
        vat = 0.0
    else:
        vat = subtotal * vat_rate
    vat = round_cents(vat)
    return vat, round_cents(subtotal + vat)


class InvoiceService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.db = QueryClient(session)

    async def _supplier(self, supplier_id: str, business_id: str) -> Supplier:
        supplier = await self.db.table(Supplier).eq("id", supplier_id).eq("business_id", business_id).live().maybe_single()
        if supplier is None:
            raise DomainValidationError("הספק לא נמצא")
        return supplier

    async def create(self, data: InvoiceCreate, business: Business, user: Profile) -> Invoice:
        require_active(business)
        supplier = await self._supplier(data.supplier_id, business.id)
        vat, total = invoice_amounts(data.subtotal, business_vat_rate(business), supplier.vat_type, data.vat_amount)
        values = data.model_dump(exclude={"vat_amount"}, mode="python")
        values.update(
            {
                "status": data.status.value,
                "invoice_type": data.invoice_type.value,
                "vat_amount": vat,
                "total_amount": total,
                "created_by": user.id,
            }
        )
        invoice = await self.db.table(Invoice).insert(values)
        await self.session.commit()
        logger.info(f"Created invoice {invoice.id} for supplier {supplier.id}: total={total}")
        return invoice

    async def update(self, invoice: Invoice, data: InvoiceUpdate, business: Business) -> Invoice:
        changes = data.model_dump(exclude_unset=True, mode="python")
        for key in ("supplier_id", "invoice_date", "subtotal", "status", "invoice_type"):
            if key in changes and changes[key] is None:
                del changes[key]
        for key in ("status", "invoice_type"):
            if changes.get(key) is not None:
                changes[key] = getattr(data, key).value
        supplier = await self._supplier(changes.get("supplier_id") or invoice.supplier_id, business.id)
        if "subtotal" in changes or "vat_amount" in changes or "supplier_id" in changes:
            subtotal = changes.get("subtotal", invoice.subtotal)
            explicit = changes.get("vat_amount") if "vat_amount" in changes else None
            if "vat_amount" not in changes and supplier.vat_type == VatType.partial.value:
                # Partial VAT is entered by hand and survives a new subtotal.
                explicit = invoice.vat_amount
            vat, total = invoice_amounts(subtotal, business_vat_rate(business), supplier.vat_type, explicit)
            changes.update({"subtotal": subtotal, "vat_amount": vat, "total_amount": total})
        rows = await self.db.table(Invoice).eq("id", invoice.id).update(changes)
        await self.session.commit()
        return rows[0]

    async def open_invoices(self, supplier_id: str, business_ids: list[str]) -> list[Invoice]:
        supplier = await self.db.table(Supplier).eq("id", supplier_id).in_("business_id", business_ids).live().maybe_single()
        if supplier is None:
            raise NotFoundError("הספק לא נמצא")
        return await (
            self.db.table(Invoice)
            .eq("supplier_id", supplier_id)
            .neq("status", InvoiceStatus.paid.value)
            .live()
            .order("invoice_date", ascending=False)
            .all()
        )
