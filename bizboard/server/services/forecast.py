"""
Payment calendar: upcoming (forecast) and past installments.

Installments of live payments are grouped by due month. Installment plans
longer than ``COMMITMENT_MIN_INSTALLMENTS`` are also reported as
commitments: one row per payment and monthly amount, with the last due date
and the number of installments in the window.
"""

from __future__ import annotations

from collections import OrderedDict
from dataclasses import dataclass
from datetime import date
from typing import Dict, List, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from bizboard.core.database.entities import Payment, PaymentSplit, Supplier
from bizboard.core.formatting import long_date_label, month_key, month_label
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.payments import Commitment, PaymentSchedule, ScheduledSplit, ScheduleMonth
from bizboard.server.core.config import settings
from bizboard.server.services.payments import UNKNOWN_SUPPLIER, installments_label, method_name

logger = get_logger(__name__)


@dataclass(frozen=True)
class SplitRow:
    """An installment joined with its payment and supplier."""

    split: PaymentSplit
    payment: Payment
    supplier_name: Optional[str]


def to_scheduled(row: SplitRow) -> ScheduledSplit:
    split = row.split
    return ScheduledSplit(
        split_id=split.id,
        payment_id=row.payment.id,
        supplier_name=row.supplier_name or UNKNOWN_SUPPLIER,
        payment_method=split.payment_method,
        method_name=method_name(split.payment_method),
        amount=float(split.amount or 0),
        due_date=split.due_date,
        date_label=long_date_label(split.due_date),
        installments_label=installments_label(split),
        check_number=split.check_number,
        notes=row.payment.notes,
    )


def group_by_month(rows: Sequence[SplitRow], newest_first: bool = False) -> List[ScheduleMonth]:
    """Group rows by ``YYYY-MM`` of their due date, keeping row order inside a month."""
    groups: Dict[str, List[ScheduledSplit]] = OrderedDict()
    for row in rows:
        if row.split.due_date is None:
            continue
        groups.setdefault(month_key(row.split.due_date), []).append(to_scheduled(row))
    keys = sorted(groups, reverse=newest_first)
    return [
        ScheduleMonth(key=key, label=month_label(key), total=sum(item.amount for item in groups[key]), items=groups[key])
        for key in keys
    ]


def build_commitments(rows: Sequence[SplitRow], min_installments: int) -> List[Commitment]:
    collected: Dict[Tuple[str, float], List[SplitRow]] = OrderedDict()
    for row in rows:
        if row.split.due_date is None or (row.split.installments_count or 0) <= min_installments:
            continue
        collected.setdefault((row.payment.id, float(row.split.amount or 0)), []).append(row)

    commitments = [
        Commitment(
            payment_id=payment_id,
            supplier_name=group[0].supplier_name or UNKNOWN_SUPPLIER,
            notes=group[0].payment.notes,
            monthly_amount=amount,
            last_due_date=max(r.split.due_date for r in group),
            remaining_count=len(group),
        )
        for (payment_id, amount), group in collected.items()
    ]
    commitments.sort(key=lambda c: c.monthly_amount, reverse=True)
    return commitments


def build_schedule(rows: Sequence[SplitRow], as_of: date, newest_first: bool = False) -> PaymentSchedule:
    months = group_by_month(rows, newest_first=newest_first)
    return PaymentSchedule(
        as_of=as_of,
        total=sum(m.total for m in months),
        months=months,
        commitments=build_commitments(rows, settings.finance.commitment_min_installments),
    )


class ForecastService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def _rows(self, business_ids: List[str], as_of: date, upcoming: bool) -> List[SplitRow]:
        stmt = (
            select(PaymentSplit, Payment, Supplier.name)
            .join(Payment, PaymentSplit.payment_id == Payment.id)
            .outerjoin(Supplier, Payment.supplier_id == Supplier.id)
            .where(Payment.business_id.in_(business_ids))
            .where(Payment.deleted_at.is_(None))
            .where(PaymentSplit.due_date.is_not(None))
        )
        if upcoming:
            stmt = stmt.where(PaymentSplit.due_date >= as_of).order_by(PaymentSplit.due_date.asc())
        else:
            stmt = stmt.where(PaymentSplit.due_date < as_of).order_by(PaymentSplit.due_date.desc())
        stmt = stmt.limit(settings.finance.forecast_row_limit)
        result = await self.session.execute(stmt)
        return [SplitRow(split=split, payment=payment, supplier_name=name) for split, payment, name in result.all()]

    async def forecast(self, business_ids: List[str], as_of: Optional[date] = None) -> PaymentSchedule:
        as_of = as_of or date.today()
        rows = await self._rows(business_ids, as_of, upcoming=True)
        logger.debug(f"Forecast from {as_of}: {len(rows)} installment(s)")
        return build_schedule(rows, as_of)

    async def past(self, business_ids: List[str], as_of: Optional[date] = None) -> PaymentSchedule:
        as_of = as_of or date.today()
        rows = await self._rows(business_ids, as_of, upcoming=False)
        logger.debug(f"Past payments before {as_of}: {len(rows)} installment(s)")
        return build_schedule(rows, as_of, newest_first=True)
