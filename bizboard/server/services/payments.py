"""
Payments ledger.

A payment to a supplier is entered as one or more payment method lines.
Each line is stored as one ``PaymentSplit`` per installment. Invoices
selected on the payment are marked paid, smallest first, as long as they fit
in the amount paid.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import Business, Invoice, Payment, PaymentSplit, Profile, Supplier
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import DomainValidationError, NotFoundError
from bizboard.core.formatting import round_cents, short_date_label
from bizboard.core.logging_config import get_logger
from bizboard.core.models.domain import (
    PAYMENT_METHOD_COLORS,
    PAYMENT_METHOD_NAMES,
    InvoiceStatus,
    PaymentMethod,
)
from bizboard.core.models.io.payments import (
    MethodSummary,
    PaymentCreate,
    PaymentListItem,
    PaymentMethodInput,
    PaymentPage,
    PaymentSplitRead,
    PaymentSummary,
    PaymentUpdate,
    SupplierAmount,
)
from bizboard.server.core.config import settings
from bizboard.server.services.installments import (
    Installment,
    generate_installments,
    validate_installments_total,
)

logger = get_logger(__name__)

REQUIRED_FIELDS = "נא למלא את כל השדות הנדרשים"
UNKNOWN_SUPPLIER = "לא ידוע"
DEFAULT_VAT_DIVISOR = 1.18


def method_name(method: Optional[str]) -> str:
    return PAYMENT_METHOD_NAMES.get(method or PaymentMethod.other.value, PAYMENT_METHOD_NAMES[PaymentMethod.other.value])


def installments_label(split: Optional[PaymentSplit]) -> str:
    if split is not None and split.installments_count and split.installment_number:
        return f"{split.installment_number}/{split.installments_count}"
    return "1/1"


def normalize_method(method: Optional[str]) -> str:
    value = (method or "").strip()
    if not value:
        return PaymentMethod.other.value
    try:
        return PaymentMethod(value).value
    except ValueError:
        raise DomainValidationError(f"אמצעי תשלום לא מוכר: {value}") from None


def build_split_rows(line: PaymentMethodInput, payment_date: date, reference: Optional[str]) -> List[dict]:
    """Split rows for one payment method line (without ``payment_id``)."""
    method = normalize_method(line.method)
    if line.installments:
        installments = [Installment(i.number, i.due_date, i.amount) for i in line.installments]
        validate_installments_total(installments, line.amount)
        count = max(line.installments_count, len(line.installments))
        return [
            {
                "payment_method": method,
                "amount": round_cents(inst.amount),
                "installments_count": count,
                "installment_number": inst.number,
                "due_date": inst.due_date,
                "check_number": (
                    src.check_number if method == PaymentMethod.check.value and src.check_number else line.check_number
                ),
                "reference_number": reference or None,
            }
            for inst, src in zip(installments, line.installments)
        ]

    generated = generate_installments(line.installments_count, line.amount, payment_date)
    return [
        {
            "payment_method": method,
            "amount": inst.amount,
            "installments_count": line.installments_count,
            "installment_number": inst.number,
            "due_date": inst.due_date,
            "check_number": line.check_number,
            "reference_number": reference or None,
        }
        for inst in generated
    ]


def invoices_to_mark_paid(invoices: Sequence[Invoice], paid_amount: float) -> List[str]:
    """Smallest invoices first, each taken only while it fits in what is left."""
    remaining = paid_amount
    paid = []
    for invoice in sorted(invoices, key=lambda inv: float(inv.total_amount or 0)):
        amount = float(invoice.total_amount or 0)
        if amount <= remaining:
            paid.append(invoice.id)
            remaining -= amount
    return paid


def display_subtotal_vat(total: float, invoice: Optional[Invoice]) -> tuple[float, float]:
    if invoice is not None:
        return float(invoice.subtotal or 0), float(invoice.vat_amount or 0)
    subtotal = round_cents(total / DEFAULT_VAT_DIVISOR)
    return subtotal, round_cents(total - subtotal)


def summarize_methods(
    payments: Sequence[Payment],
    splits_by_payment: Dict[str, List[PaymentSplit]],
    supplier_names: Dict[str, str],
) -> List[MethodSummary]:
    """Totals per payment method with a per-supplier breakdown.

    A payment without splits counts in full under ``other``.
    """
    totals: Dict[str, float] = defaultdict(float)
    per_supplier: Dict[str, Dict[str, float]] = defaultdict(lambda: defaultdict(float))
    for payment in payments:
        splits = splits_by_payment.get(payment.id, [])
        if not splits:
            entries = [(PaymentMethod.other.value, float(payment.total_amount or 0))]
        else:
            entries = [(s.payment_method or PaymentMethod.other.value, float(s.amount or 0)) for s in splits]
        for method, amount in entries:
            totals[method] += amount
            per_supplier[method][payment.supplier_id] += amount

    grand_total = sum(totals.values())
    result = []
    for method, amount in totals.items():
        suppliers = [
            SupplierAmount(supplier_id=sid, supplier_name=supplier_names.get(sid, UNKNOWN_SUPPLIER), amount=value)
            for sid, value in per_supplier[method].items()
        ]
        suppliers.sort(key=lambda s: s.amount, reverse=True)
        result.append(
            MethodSummary(
                method=method,
                name=method_name(method),
                color=PAYMENT_METHOD_COLORS.get(method, PAYMENT_METHOD_COLORS[PaymentMethod.other.value]),
                amount=amount,
                percentage=amount / grand_total * 100 if grand_total > 0 else 0.0,
                suppliers=suppliers,
            )
        )
    result.sort(key=lambda m: m.amount, reverse=True)
    return result


class PaymentService:
    """Create, edit, delete and list payments."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.db = QueryClient(session)

    async def _validated_supplier(self, supplier_id: Optional[str], business_id: str) -> Supplier:
        if not supplier_id:
            raise DomainValidationError(REQUIRED_FIELDS)
        supplier = await self.db.table(Supplier).eq("id", supplier_id).eq("business_id", business_id).live().maybe_single()
        if supplier is None:
            raise DomainValidationError("הספק לא נמצא")
        return supplier

    @staticmethod
    def _check_required(payment_date: Optional[date], methods: List[PaymentMethodInput]) -> float:
        total = round_cents(sum(line.amount for line in methods if line.amount > 0))
        if payment_date is None or total <= 0:
            raise DomainValidationError(REQUIRED_FIELDS)
        return total

    async def _write_splits(
        self, payment: Payment, methods: List[PaymentMethodInput], reference: Optional[str]
    ) -> List[PaymentSplit]:
        rows = []
        for line in methods:
            if line.amount <= 0:
                continue
            rows.extend(build_split_rows(line, payment.payment_date, reference))
        for row in rows:
            row["payment_id"] = payment.id
        return await self.db.table(PaymentSplit).insert_many(rows)

    async def _mark_invoices(self, invoice_ids: List[str], supplier_id: str, business_id: str, paid: float) -> None:
        if not invoice_ids:
            return
        invoices = await (
            self.db.table(Invoice)
            .in_("id", invoice_ids)
            .eq("supplier_id", supplier_id)
            .eq("business_id", business_id)
            .live()
            .all()
        )
        ids = invoices_to_mark_paid(invoices, paid)
        if ids:
            await self.db.table(Invoice).in_("id", ids).update({"status": InvoiceStatus.paid.value})
            logger.debug(f"Marked {len(ids)} invoice(s) paid")

    async def create(self, data: PaymentCreate, business: Business, user: Profile) -> Payment:
        supplier = await self._validated_supplier(data.supplier_id, business.id)
        total = self._check_required(data.payment_date, data.methods)
        payment = await self.db.table(Payment).insert(
            {
                "business_id": business.id,
                "supplier_id": supplier.id,
                "payment_date": data.payment_date,
                "total_amount": total,
                "invoice_id": data.invoice_ids[0] if data.invoice_ids else None,
                "notes": data.notes or None,
                "receipt_url": data.receipt_url or None,
                "created_by": user.id,
            }
        )
        await self._write_splits(payment, data.methods, data.reference)
        await self._mark_invoices(data.invoice_ids, supplier.id, business.id, total)
        await self.session.commit()
        logger.info(f"Created payment {payment.id} of {total} to supplier {supplier.id}")
        return payment

    async def update(self, payment: Payment, data: PaymentUpdate) -> Payment:
        supplier = await self._validated_supplier(data.supplier_id or payment.supplier_id, payment.business_id)
        payment_date = data.payment_date or payment.payment_date
        total = self._check_required(payment_date, data.methods)
        old_invoice_id = payment.invoice_id

        rows = await self.db.table(Payment).eq("id", payment.id).update(
            {
                "supplier_id": supplier.id,
                "payment_date": payment_date,
                "total_amount": total,
                "invoice_id": data.invoice_ids[0] if data.invoice_ids else None,
                "notes": data.notes or None,
                "receipt_url": data.receipt_url or payment.receipt_url,
            }
        )
        payment = rows[0]
        await self.db.table(PaymentSplit).eq("payment_id", payment.id).delete()
        await self._write_splits(payment, data.methods, data.reference)

        if old_invoice_id and old_invoice_id not in data.invoice_ids:
            await self.db.table(Invoice).eq("id", old_invoice_id).update({"status": InvoiceStatus.pending.value})
        await self._mark_invoices(data.invoice_ids, supplier.id, payment.business_id, total)
        await self.session.commit()
        logger.info(f"Updated payment {payment.id}")
        return payment

    async def delete(self, payment: Payment) -> None:
        await self.db.table(Payment).eq("id", payment.id).soft_delete()
        if payment.invoice_id:
            await self.db.table(Invoice).eq("id", payment.invoice_id).update({"status": InvoiceStatus.pending.value})
        await self.session.commit()
        logger.info(f"Deleted payment {payment.id}")

    async def get(self, payment_id: str) -> Payment:
        payment = await self.db.get(Payment, payment_id)
        if payment is None:
            raise NotFoundError("התשלום לא נמצא")
        return payment

    async def splits_of(self, payment_ids: List[str]) -> Dict[str, List[PaymentSplit]]:
        result: Dict[str, List[PaymentSplit]] = defaultdict(list)
        if not payment_ids:
            return result
        rows = await (
            self.db.table(PaymentSplit).in_("payment_id", payment_ids).order("installment_number").order("due_date").all()
        )
        for row in rows:
            result[row.payment_id].append(row)
        return result

    async def _supplier_names(self, supplier_ids: List[str]) -> Dict[str, str]:
        if not supplier_ids:
            return {}
        suppliers = await self.db.table(Supplier).in_("id", list(set(supplier_ids))).all()
        return {s.id: s.name for s in suppliers}

    async def list_page(
        self,
        business_ids: List[str],
        offset: int = 0,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> PaymentPage:
        page_size = settings.finance.payments_page_size
        query = self.db.table(Payment).in_("business_id", business_ids).live()
        if start is not None:
            query.gte("payment_date", start)
        if end is not None:
            query.lte("payment_date", end)
        # One extra row tells whether another page exists.
        rows = await (
            query.order("payment_date", ascending=False).order("created_at", ascending=False).range(offset, offset + page_size).all()
        )
        has_more = len(rows) > page_size
        rows = rows[:page_size]

        splits = await self.splits_of([p.id for p in rows])
        names = await self._supplier_names([p.supplier_id for p in rows])
        invoice_ids = [p.invoice_id for p in rows if p.invoice_id]
        invoices = {}
        if invoice_ids:
            invoices = {inv.id: inv for inv in await self.db.table(Invoice).in_("id", invoice_ids).all()}

        items = []
        for payment in rows:
            payment_splits = splits.get(payment.id, [])
            first = payment_splits[0] if payment_splits else None
            total = float(payment.total_amount or 0)
            subtotal, vat = display_subtotal_vat(total, invoices.get(payment.invoice_id))
            items.append(
                PaymentListItem(
                    id=payment.id,
                    payment_date=payment.payment_date,
                    date_label=short_date_label(payment.payment_date),
                    supplier_id=payment.supplier_id,
                    supplier_name=names.get(payment.supplier_id, UNKNOWN_SUPPLIER),
                    payment_method=first.payment_method if first else PaymentMethod.other.value,
                    method_name=method_name(first.payment_method if first else None),
                    installments_label=installments_label(first),
                    subtotal=subtotal,
                    vat_amount=vat,
                    total_amount=total,
                    notes=payment.notes,
                    receipt_url=payment.receipt_url,
                    splits=[PaymentSplitRead.model_validate(s) for s in payment_splits],
                )
            )
        return PaymentPage(items=items, offset=offset, has_more=has_more)

    async def summary(
        self, business_ids: List[str], start: Optional[date] = None, end: Optional[date] = None
    ) -> PaymentSummary:
        query = self.db.table(Payment).in_("business_id", business_ids).live()
        if start is not None:
            query.gte("payment_date", start)
        if end is not None:
            query.lte("payment_date", end)
        payments = await query.all()
        splits = await self.splits_of([p.id for p in payments])
        names = await self._supplier_names([p.supplier_id for p in payments])
        methods = summarize_methods(payments, splits, names)
        return PaymentSummary(start=start, end=end, total=sum(m.amount for m in methods), methods=methods)
