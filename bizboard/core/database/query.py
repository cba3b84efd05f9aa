"""
Generic table query client.

Every feature of the application reads and writes tables through the same
small vocabulary: filter by column, order, page, then fetch or mutate the
matching rows. ``TableQuery`` composes a SQLModel ``select`` from that
vocabulary; ``QueryClient`` hands out queries by table name or entity class.

Mutations go through the ORM unit of work (objects are loaded, changed and
flushed) so that session-level hooks such as the realtime change capture see
every modified row.

Example:
    client = QueryClient(session)
    rows = await client.from_("payments").eq("business_id", bid).live().order("payment_date", ascending=False).all()
"""

from __future__ import annotations

from typing import Any, Dict, Generic, Iterable, List, Optional, Type, TypeVar, Union

from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import SQLModel, func, select

from bizboard.core.errors import DomainValidationError, NotFoundError

from .base import utc_now
from .entities import (
    AuthSession,
    Business,
    BusinessMember,
    BusinessSchedule,
    DailyEntry,
    DailyIncomeBreakdown,
    DailyProductUsage,
    ExpenseCategory,
    Goal,
    IncomeSource,
    IncomeSourceGoal,
    Invoice,
    ManagedProduct,
    Payment,
    PaymentSplit,
    Profile,
    Supplier,
    SupplierBudget,
)

EntityType = TypeVar("EntityType", bound=SQLModel)

TABLES: Dict[str, Type[SQLModel]] = {
    entity.__tablename__: entity
    for entity in (
        AuthSession,
        Business,
        BusinessMember,
        BusinessSchedule,
        DailyEntry,
        DailyIncomeBreakdown,
        DailyProductUsage,
        ExpenseCategory,
        Goal,
        IncomeSource,
        IncomeSourceGoal,
        Invoice,
        ManagedProduct,
        Payment,
        PaymentSplit,
        Profile,
        Supplier,
        SupplierBudget,
    )
}


def resolve_table(name: str) -> Type[SQLModel]:
    """Look up an entity class by table name."""
    try:
        return TABLES[name]
    except KeyError:
        raise DomainValidationError(f"Unknown table '{name}'") from None


class TableQuery(Generic[EntityType]):
    """Chainable filter builder bound to one entity class and session."""

    def __init__(self, session: AsyncSession, model: Type[EntityType]) -> None:
        self.session = session
        self.model = model
        self._conditions: List[Any] = []
        self._order: List[Any] = []
        self._limit: Optional[int] = None
        self._offset: Optional[int] = None

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    def _column(self, name: str):
        if name not in self.model.model_fields:
            raise DomainValidationError(f"Unknown column '{name}' on table '{self.model.__tablename__}'")
        return getattr(self.model, name)

    def eq(self, column: str, value: Any) -> "TableQuery[EntityType]":
        self._conditions.append(self._column(column) == value)
        return self

    def neq(self, column: str, value: Any) -> "TableQuery[EntityType]":
        self._conditions.append(self._column(column) != value)
        return self

    def in_(self, column: str, values: Iterable[Any]) -> "TableQuery[EntityType]":
        self._conditions.append(self._column(column).in_(list(values)))
        return self

    def gt(self, column: str, value: Any) -> "TableQuery[EntityType]":
        self._conditions.append(self._column(column) > value)
        return self

    def gte(self, column: str, value: Any) -> "TableQuery[EntityType]":
        self._conditions.append(self._column(column) >= value)
        return self

    def lt(self, column: str, value: Any) -> "TableQuery[EntityType]":
        self._conditions.append(self._column(column) < value)
        return self

    def lte(self, column: str, value: Any) -> "TableQuery[EntityType]":
        self._conditions.append(self._column(column) <= value)
        return self

    def is_null(self, column: str, null: bool = True) -> "TableQuery[EntityType]":
        col = self._column(column)
        self._conditions.append(col.is_(None) if null else col.is_not(None))
        return self

    def live(self) -> "TableQuery[EntityType]":
        """Exclude soft-deleted rows; a no-op on tables without ``deleted_at``."""
        if "deleted_at" in self.model.model_fields:
            self.is_null("deleted_at")
        return self

    def order(self, column: str, ascending: bool = True) -> "TableQuery[EntityType]":
        col = self._column(column)
        self._order.append(col.asc() if ascending else col.desc())
        return self

    def range(self, start: int, end: int) -> "TableQuery[EntityType]":
        """Restrict to rows ``start`` through ``end`` inclusive (zero based)."""
        if start < 0 or end < start:
            raise DomainValidationError(f"Invalid range {start}..{end}")
        self._offset = start
        self._limit = end - start + 1
        return self

    def limit(self, count: int) -> "TableQuery[EntityType]":
        self._limit = count
        return self

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def statement(self):
        stmt = select(self.model)
        for condition in self._conditions:
            stmt = stmt.where(condition)
        if self._order:
            stmt = stmt.order_by(*self._order)
        if self._offset is not None:
            stmt = stmt.offset(self._offset)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        return stmt

    async def all(self) -> List[EntityType]:
        result = await self.session.execute(self.statement())
        return list(result.scalars().all())

    async def first(self) -> Optional[EntityType]:
        self._limit = 1
        result = await self.session.execute(self.statement())
        return result.scalars().first()

    async def maybe_single(self) -> Optional[EntityType]:
        """Return the only matching row, ``None`` when there is none.

        Raises:
            DomainValidationError: If more than one row matches.
        """
        self._limit = 2
        rows = await self.all()
        if len(rows) > 1:
            raise DomainValidationError(f"Expected a single row from '{self.model.__tablename__}'")
        return rows[0] if rows else None

    async def single(self) -> EntityType:
        row = await self.maybe_single()
        if row is None:
            raise NotFoundError()
        return row

    async def count(self) -> int:
        stmt = select(func.count()).select_from(self.model)
        for condition in self._conditions:
            stmt = stmt.where(condition)
        result = await self.session.execute(stmt)
        return int(result.scalar_one())

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def _check_values(self, values: Dict[str, Any]) -> None:
        for key in values:
            self._column(key)

    async def insert(self, values: Union[EntityType, Dict[str, Any]]) -> EntityType:
        if isinstance(values, dict):
            self._check_values(values)
            entity = self.model(**values)
        else:
            entity = values
        self.session.add(entity)
        await self.session.flush()
        return entity

    async def insert_many(self, rows: Iterable[Union[EntityType, Dict[str, Any]]]) -> List[EntityType]:
        return [await self.insert(row) for row in rows]

    async def update(self, values: Dict[str, Any]) -> List[EntityType]:
        """Apply ``values`` to every matching row and return the updated rows."""
        self._check_values(values)
        rows = await self.all()
        stamp = "updated_at" in self.model.model_fields and "updated_at" not in values
        for row in rows:
            for key, value in values.items():
                setattr(row, key, value)
            if stamp:
                row.updated_at = utc_now()
            self.session.add(row)
        await self.session.flush()
        return rows

    async def delete(self) -> int:
        rows = await self.all()
        for row in rows:
            await self.session.delete(row)
        await self.session.flush()
        return len(rows)

    async def soft_delete(self) -> List[EntityType]:
        if "deleted_at" not in self.model.model_fields:
            raise DomainValidationError(f"Table '{self.model.__tablename__}' does not support soft delete")
        return await self.update({"deleted_at": utc_now()})


class QueryClient:
    """Entry point handing out ``TableQuery`` objects for one session."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    def from_(self, table_name: str) -> TableQuery[Any]:
        return TableQuery(self.session, resolve_table(table_name))

    def table(self, model: Type[EntityType]) -> TableQuery[EntityType]:
        return TableQuery(self.session, model)

    async def get(self, model: Type[EntityType], entity_id: str, live: bool = True) -> Optional[EntityType]:
        query = self.table(model).eq("id", entity_id)
        if live:
            query.live()
        return await query.maybe_single()

    async def commit(self) -> None:
        await self.session.commit()
