"""
Daily entries.

One entry per business per day holds the register total and labor figures.
Income per source and product stock movements are stored as child rows and
are replaced wholesale when the entry is edited.
"""

from __future__ import annotations

from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import (
    Business,
    DailyEntry,
    DailyIncomeBreakdown,
    DailyProductUsage,
    IncomeSource,
    ManagedProduct,
    Profile,
)
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import ConflictError, DomainValidationError, NotFoundError
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.daily_entries import (
    DailyEntryCreate,
    DailyEntryRead,
    DailyEntryUpdate,
    IncomeLine,
    IncomeLineRead,
    OpeningStock,
    ProductLine,
    ProductUsageRead,
)
from bizboard.server.services.access import require_active

logger = get_logger(__name__)

DUPLICATE_DATE = "כבר קיים רישום לתאריך זה"


def usage_quantity(line: ProductLine) -> float:
    return line.opening_stock + line.received_quantity - line.closing_stock


def income_rows(lines: Sequence[IncomeLine]) -> List[IncomeLine]:
    """Only sources that actually had income or orders."""
    return [line for line in lines if line.amount > 0 or line.orders_count > 0]


def product_rows(lines: Sequence[ProductLine]) -> List[ProductLine]:
    return [line for line in lines if line.opening_stock > 0 or line.received_quantity > 0 or line.closing_stock > 0]


class DailyEntryService:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.db = QueryClient(session)

    async def _ensure_free_date(self, business_id: str, entry_date: date, exclude_id: Optional[str] = None) -> None:
        query = self.db.table(DailyEntry).eq("business_id", business_id).eq("entry_date", entry_date).live()
        if exclude_id is not None:
            query.neq("id", exclude_id)
        if await query.count() > 0:
            raise ConflictError(DUPLICATE_DATE)

    async def _write_children(self, entry: DailyEntry, income: List[IncomeLine], products: List[ProductLine]) -> None:
        lines = income_rows(income)
        if lines:
            known = {
                s.id
                for s in await self.db.table(IncomeSource)
                .in_("id", [line.income_source_id for line in lines])
                .eq("business_id", entry.business_id)
                .all()
            }
            for line in lines:
                if line.income_source_id not in known:
                    raise DomainValidationError("מקור הכנסה לא נמצא")
                await self.db.table(DailyIncomeBreakdown).insert(
                    {
                        "daily_entry_id": entry.id,
                        "income_source_id": line.income_source_id,
                        "amount": line.amount,
                        "orders_count": line.orders_count,
                    }
                )

        stock_lines = product_rows(products)
        if stock_lines:
            catalog = {
                p.id: p
                for p in await self.db.table(ManagedProduct)
                .in_("id", [line.product_id for line in stock_lines])
                .eq("business_id", entry.business_id)
                .all()
            }
            for line in stock_lines:
                product = catalog.get(line.product_id)
                if product is None:
                    raise DomainValidationError("המוצר לא נמצא")
                await self.db.table(DailyProductUsage).insert(
                    {
                        "daily_entry_id": entry.id,
                        "product_id": product.id,
                        "opening_stock": line.opening_stock,
                        "received_quantity": line.received_quantity,
                        "closing_stock": line.closing_stock,
                        "quantity": usage_quantity(line),
                        "unit_cost_at_time": float(product.unit_cost or 0),
                    }
                )
                await self.db.table(ManagedProduct).eq("id", product.id).update({"current_stock": line.closing_stock})

    async def _delete_children(self, entry_id: str) -> None:
        await self.db.table(DailyIncomeBreakdown).eq("daily_entry_id", entry_id).delete()
        await self.db.table(DailyProductUsage).eq("daily_entry_id", entry_id).delete()

    async def create(self, data: DailyEntryCreate, business: Business, user: Profile) -> DailyEntry:
        require_active(business)
        await self._ensure_free_date(business.id, data.entry_date)
        values = data.model_dump(exclude={"income", "products"})
        values["created_by"] = user.id
        entry = await self.db.table(DailyEntry).insert(values)
        await self._write_children(entry, data.income, data.products)
        await self.session.commit()
        logger.info(f"Created daily entry {entry.id} for business {business.id} on {entry.entry_date}")
        return entry

    async def update(self, entry: DailyEntry, data: DailyEntryUpdate) -> DailyEntry:
        changes = {k: v for k, v in data.model_dump(exclude={"income", "products"}, exclude_unset=True).items() if v is not None}
        if "entry_date" in changes and changes["entry_date"] != entry.entry_date:
            await self._ensure_free_date(entry.business_id, changes["entry_date"], exclude_id=entry.id)
        rows = await self.db.table(DailyEntry).eq("id", entry.id).update(changes)
        entry = rows[0]
        await self._delete_children(entry.id)
        await self._write_children(entry, data.income, data.products)
        await self.session.commit()
        logger.info(f"Updated daily entry {entry.id}")
        return entry

    async def delete(self, entry: DailyEntry) -> None:
        await self.db.table(DailyEntry).eq("id", entry.id).soft_delete()
        await self.session.commit()
        logger.info(f"Deleted daily entry {entry.id}")

    async def get(self, entry_id: str) -> DailyEntry:
        entry = await self.db.get(DailyEntry, entry_id)
        if entry is None:
            raise NotFoundError("הרישום לא נמצא")
        return entry

    async def read(self, entries: Sequence[DailyEntry]) -> List[DailyEntryRead]:
        ids = [e.id for e in entries]
        income: Dict[str, List[DailyIncomeBreakdown]] = defaultdict(list)
        usage: Dict[str, List[DailyProductUsage]] = defaultdict(list)
        if ids:
            for row in await self.db.table(DailyIncomeBreakdown).in_("daily_entry_id", ids).all():
                income[row.daily_entry_id].append(row)
            for row in await self.db.table(DailyProductUsage).in_("daily_entry_id", ids).all():
                usage[row.daily_entry_id].append(row)

        result = []
        for entry in entries:
            read = DailyEntryRead.model_validate(entry)
            read.income = [IncomeLineRead.model_validate(r) for r in income[entry.id]]
            read.products = [ProductUsageRead.model_validate(r) for r in usage[entry.id]]
            result.append(read)
        return result

    async def list(
        self, business_ids: List[str], start: Optional[date] = None, end: Optional[date] = None
    ) -> List[DailyEntryRead]:
        query = self.db.table(DailyEntry).in_("business_id", business_ids).live()
        if start is not None:
            query.gte("entry_date", start)
        if end is not None:
            query.lte("entry_date", end)
        entries = await query.order("entry_date", ascending=False).all()
        return await self.read(entries)

    async def opening_stock(self, business_id: str, entry_date: date) -> List[OpeningStock]:
        """Suggest each product's opening stock for ``entry_date``.

        The closing stock recorded on the latest earlier entry wins; products
        without such a record fall back to their current stock.
        """
        products = await (
            self.db.table(ManagedProduct).eq("business_id", business_id).eq("is_active", True).live().order("name").all()
        )
        previous = await (
            self.db.table(DailyEntry)
            .eq("business_id", business_id)
            .lt("entry_date", entry_date)
            .live()
            .order("entry_date", ascending=False)
            .first()
        )
        closing: Dict[str, float] = {}
        if previous is not None:
            for row in await self.db.table(DailyProductUsage).eq("daily_entry_id", previous.id).all():
                closing[row.product_id] = float(row.closing_stock or 0)
        return [
            OpeningStock(
                product_id=p.id,
                product_name=p.name,
                opening_stock=closing.get(p.id, float(p.current_stock or 0)),
            )
            for p in products
        ]
