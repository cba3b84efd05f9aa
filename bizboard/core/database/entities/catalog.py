"""
Catalog entities: expense categories, suppliers and their monthly budgets,
income sources and managed products.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from ..base import SoftDeleteBase


class ExpenseCategory(SoftDeleteBase, table=True):
    """Table: expense_categories"""

    __tablename__ = "expense_categories"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    name: str
    parent_id: Optional[str] = Field(default=None)
    display_order: int = Field(default=0)
    is_active: bool = Field(default=True)


class Supplier(SoftDeleteBase, table=True):
    """Table: suppliers"""

    __tablename__ = "suppliers"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    name: str
    expense_category_id: Optional[str] = Field(default=None, foreign_key="expense_categories.id")
    expense_type: str = Field(default="current_expenses")
    is_fixed_expense: bool = Field(default=False)
    vat_type: str = Field(default="full", description="full | none | partial")
    is_active: bool = Field(default=True)


class SupplierBudget(SoftDeleteBase, table=True):
    """Monthly spending target for one supplier.

    Table: supplier_budgets
    """

    __tablename__ = "supplier_budgets"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    supplier_id: str = Field(foreign_key="suppliers.id", index=True)
    year: int
    month: int
    budget_amount: float = Field(default=0.0)


class IncomeSource(SoftDeleteBase, table=True):
    """Table: income_sources"""

    __tablename__ = "income_sources"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    name: str
    income_type: str = Field(default="private")
    input_type: str = Field(default="single")
    display_order: int = Field(default=0)
    is_active: bool = Field(default=True)


class ManagedProduct(SoftDeleteBase, table=True):
    """A stock-tracked product whose daily usage is recorded.

    Table: managed_products
    """

    __tablename__ = "managed_products"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    name: str
    unit: str = Field(default="unit")
    unit_cost: float = Field(default=0.0)
    category: Optional[str] = None
    current_stock: float = Field(default=0.0)
    target_pct: Optional[float] = Field(default=None, description="Target cost as % of income before VAT")
    is_active: bool = Field(default=True)
