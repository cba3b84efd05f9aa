"""
Catalog I/O models for expense categories, suppliers, supplier budgets,
income sources and managed products.

Each resource has a ``Create`` schema (requires ``business_id``), an
``Update`` schema where every field is optional, and a ``Read`` schema.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bizboard.core.models.domain import ExpenseType, IncomeType, InputType, VatType


class ExpenseCategoryCreate(BaseModel):
    business_id: str
    name: str = Field(min_length=1)
    parent_id: Optional[str] = None
    display_order: int = 0
    is_active: bool = True


class ExpenseCategoryUpdate(BaseModel):
    name: Optional[str] = None
    parent_id: Optional[str] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class ExpenseCategoryRead(ExpenseCategoryCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class SupplierCreate(BaseModel):
    business_id: str
    name: str = Field(min_length=1)
    expense_category_id: Optional[str] = None
    expense_type: ExpenseType = ExpenseType.current_expenses
    is_fixed_expense: bool = False
    vat_type: VatType = VatType.full
    is_active: bool = True


class SupplierUpdate(BaseModel):
    name: Optional[str] = None
    expense_category_id: Optional[str] = None
    expense_type: Optional[ExpenseType] = None
    is_fixed_expense: Optional[bool] = None
    vat_type: Optional[VatType] = None
    is_active: Optional[bool] = None


class SupplierRead(SupplierCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class SupplierBudgetCreate(BaseModel):
    business_id: str
    supplier_id: str
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    budget_amount: float = Field(default=0.0, ge=0.0)


class SupplierBudgetUpdate(BaseModel):
    budget_amount: Optional[float] = Field(default=None, ge=0.0)


class SupplierBudgetRead(SupplierBudgetCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class IncomeSourceCreate(BaseModel):
    business_id: str
    name: str = Field(min_length=1)
    income_type: IncomeType = IncomeType.private
    input_type: InputType = InputType.single
    display_order: int = 0
    is_active: bool = True


class IncomeSourceUpdate(BaseModel):
    name: Optional[str] = None
    income_type: Optional[IncomeType] = None
    input_type: Optional[InputType] = None
    display_order: Optional[int] = None
    is_active: Optional[bool] = None


class IncomeSourceRead(IncomeSourceCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime


class ManagedProductCreate(BaseModel):
    business_id: str
    name: str = Field(min_length=1)
    unit: str = "unit"
    unit_cost: float = Field(default=0.0, ge=0.0)
    category: Optional[str] = None
    current_stock: float = 0.0
    target_pct: Optional[float] = Field(default=None, ge=0.0)
    is_active: bool = True


class ManagedProductUpdate(BaseModel):
    name: Optional[str] = None
    unit: Optional[str] = None
    unit_cost: Optional[float] = Field(default=None, ge=0.0)
    category: Optional[str] = None
    current_stock: Optional[float] = None
    target_pct: Optional[float] = Field(default=None, ge=0.0)
    is_active: Optional[bool] = None


class ManagedProductRead(ManagedProductCreate):
    model_config = ConfigDict(from_attributes=True)

    id: str
    created_at: datetime
