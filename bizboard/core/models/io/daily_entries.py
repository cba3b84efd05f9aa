"""
Daily entry I/O models.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class IncomeLine(BaseModel):
    income_source_id: str
    amount: float = 0.0
    orders_count: int = Field(default=0, ge=0)


class ProductLine(BaseModel):
    product_id: str
    opening_stock: float = 0.0
    received_quantity: float = 0.0
    closing_stock: float = 0.0


class DailyEntryCreate(BaseModel):
    business_id: str
    entry_date: date
    total_register: float = 0.0
    labor_cost: float = 0.0
    labor_hours: float = 0.0
    discounts: float = 0.0
    day_factor: float = Field(default=1.0, ge=0.0, le=1.0)
    income: List[IncomeLine] = Field(default_factory=list)
    products: List[ProductLine] = Field(default_factory=list)


class DailyEntryUpdate(BaseModel):
    entry_date: Optional[date] = None
    total_register: Optional[float] = None
    labor_cost: Optional[float] = None
    labor_hours: Optional[float] = None
    discounts: Optional[float] = None
    day_factor: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    income: List[IncomeLine] = Field(default_factory=list)
    products: List[ProductLine] = Field(default_factory=list)


class IncomeLineRead(IncomeLine):
    model_config = ConfigDict(from_attributes=True)

    id: str


class ProductUsageRead(ProductLine):
    model_config = ConfigDict(from_attributes=True)

    id: str
    quantity: float
    unit_cost_at_time: float


class DailyEntryRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    entry_date: date
    total_register: float
    labor_cost: float
    labor_hours: float
    discounts: float
    day_factor: float
    created_by: Optional[str] = None
    created_at: datetime
    income: List[IncomeLineRead] = Field(default_factory=list)
    products: List[ProductUsageRead] = Field(default_factory=list)


class OpeningStock(BaseModel):
    product_id: str
    product_name: str
    opening_stock: float
