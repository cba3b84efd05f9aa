"""
Catalog API Endpoints.

Suppliers, expense categories, supplier budgets, income sources and managed
products share one shape: create, list per business, get, patch and soft
delete. ``build_crud_router`` produces that router for an entity; every
operation checks the user may use the row's business.
"""

from typing import List, Type

from fastapi import APIRouter, Query, Response, status
from pydantic import BaseModel
from sqlmodel import SQLModel

from bizboard.core.database.entities import (
    ExpenseCategory,
    IncomeSource,
    ManagedProduct,
    Supplier,
    SupplierBudget,
)
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import NotFoundError
from bizboard.core.logging_config import get_logger
from bizboard.core.models.io.catalog import (
    ExpenseCategoryCreate,
    ExpenseCategoryRead,
    ExpenseCategoryUpdate,
    IncomeSourceCreate,
    IncomeSourceRead,
    IncomeSourceUpdate,
    ManagedProductCreate,
    ManagedProductRead,
    ManagedProductUpdate,
    SupplierBudgetCreate,
    SupplierBudgetRead,
    SupplierBudgetUpdate,
    SupplierCreate,
    SupplierRead,
    SupplierUpdate,
)
from bizboard.core.models.io.invoices import InvoiceRead
from bizboard.server.services.access import require_business, require_businesses
from bizboard.server.services.deps import CurrentUserDep, SessionDep
from bizboard.server.services.invoices import InvoiceService

logger = get_logger(__name__)


def _plain(values: dict) -> dict:
    """Enum members to their stored values."""
    return {key: getattr(value, "value", value) for key, value in values.items()}


def build_crud_router(
    entity: Type[SQLModel],
    create_schema: Type[BaseModel],
    update_schema: Type[BaseModel],
    read_schema: Type[BaseModel],
    tag: str,
    order_by: str = "name",
    not_found: str = "הרשומה לא נמצאה",
) -> APIRouter:
    router = APIRouter(tags=[tag])

    async def load(session, user, item_id: str):
        row = await QueryClient(session).get(entity, item_id)
        if row is None:
            raise NotFoundError(not_found)
        await require_business(session, user, row.business_id)
        return row

    @router.post("", response_model=read_schema, status_code=status.HTTP_201_CREATED, summary=f"Create {tag}")
    async def create_item(data: create_schema, user: CurrentUserDep, session: SessionDep):  # type: ignore[valid-type]
        await require_business(session, user, data.business_id)
        row = await QueryClient(session).table(entity).insert(_plain(data.model_dump()))
        await session.commit()
        logger.info(f"Created {entity.__tablename__} row {row.id}")
        return read_schema.model_validate(row)

    @router.get("", response_model=List[read_schema], summary=f"List {tag}")
    async def list_items(
        user: CurrentUserDep,
        session: SessionDep,
        business_id: List[str] = Query(..., description="One or more selected businesses"),
    ):
        await require_businesses(session, user, business_id)
        rows = await QueryClient(session).table(entity).in_("business_id", business_id).live().order(order_by).all()
        return [read_schema.model_validate(row) for row in rows]

    @router.get("/{item_id}", response_model=read_schema, summary=f"Get {tag}")
    async def get_item(item_id: str, user: CurrentUserDep, session: SessionDep):
        return read_schema.model_validate(await load(session, user, item_id))

    @router.patch("/{item_id}", response_model=read_schema, summary=f"Update {tag}")
    async def update_item(item_id: str, data: update_schema, user: CurrentUserDep, session: SessionDep):  # type: ignore[valid-type]
        row = await load(session, user, item_id)
        changes = _plain(data.model_dump(exclude_unset=True))
        if changes:
            rows = await QueryClient(session).table(entity).eq("id", row.id).update(changes)
            row = rows[0]
            await session.commit()
        return read_schema.model_validate(row)

    @router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT, summary=f"Delete {tag}")
    async def delete_item(item_id: str, user: CurrentUserDep, session: SessionDep) -> Response:
        row = await load(session, user, item_id)
        await QueryClient(session).table(entity).eq("id", row.id).soft_delete()
        await session.commit()
        logger.info(f"Soft-deleted {entity.__tablename__} row {row.id}")
        return Response(status_code=status.HTTP_204_NO_CONTENT)

    return router


suppliers_router = build_crud_router(
    Supplier, SupplierCreate, SupplierUpdate, SupplierRead, tag="suppliers", not_found="הספק לא נמצא"
)
expense_categories_router = build_crud_router(
    ExpenseCategory,
    ExpenseCategoryCreate,
    ExpenseCategoryUpdate,
    ExpenseCategoryRead,
    tag="expense-categories",
    order_by="display_order",
)
supplier_budgets_router = build_crud_router(
    SupplierBudget,
    SupplierBudgetCreate,
    SupplierBudgetUpdate,
    SupplierBudgetRead,
    tag="supplier-budgets",
    order_by="supplier_id",
)
income_sources_router = build_crud_router(
    IncomeSource,
    IncomeSourceCreate,
    IncomeSourceUpdate,
    IncomeSourceRead,
    tag="income-sources",
    order_by="display_order",
)
managed_products_router = build_crud_router(
    ManagedProduct, ManagedProductCreate, ManagedProductUpdate, ManagedProductRead, tag="managed-products"
)


@suppliers_router.get("/{item_id}/open-invoices", response_model=List[InvoiceRead], summary="Open Invoices of Supplier")
async def open_invoices(item_id: str, user: CurrentUserDep, session: SessionDep) -> List[InvoiceRead]:
    """Invoices of the supplier that are not paid yet, newest first."""
    supplier = await QueryClient(session).get(Supplier, item_id)
    if supplier is None:
        raise NotFoundError("הספק לא נמצא")
    await require_business(session, user, supplier.business_id)
    invoices = await InvoiceService(session).open_invoices(supplier.id, [supplier.business_id])
    return [InvoiceRead.model_validate(inv) for inv in invoices]
