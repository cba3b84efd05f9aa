"""
Daily entry entities.

A daily entry records one business day; income per source and product
stock movements hang off it as child rows.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import Field

from ..base import SoftDeleteBase, TableBase


class DailyEntry(SoftDeleteBase, table=True):
    """Table: daily_entries"""

    __tablename__ = "daily_entries"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    entry_date: date = Field(index=True)
    total_register: float = Field(default=0.0)
    labor_cost: float = Field(default=0.0)
    labor_hours: float = Field(default=0.0)
    discounts: float = Field(default=0.0)
    day_factor: float = Field(default=1.0)
    created_by: Optional[str] = Field(default=None, foreign_key="profiles.id")


class DailyIncomeBreakdown(TableBase, table=True):
    """Table: daily_income_breakdown"""

    __tablename__ = "daily_income_breakdown"
    __table_args__ = ({"extend_existing": True},)

    daily_entry_id: str = Field(foreign_key="daily_entries.id", index=True)
    income_source_id: str = Field(foreign_key="income_sources.id", index=True)
    amount: float = Field(default=0.0)
    orders_count: int = Field(default=0)


class DailyProductUsage(TableBase, table=True):
    """Table: daily_product_usage"""

    __tablename__ = "daily_product_usage"
    __table_args__ = ({"extend_existing": True},)

    daily_entry_id: str = Field(foreign_key="daily_entries.id", index=True)
    product_id: str = Field(foreign_key="managed_products.id", index=True)
    opening_stock: float = Field(default=0.0)
    received_quantity: float = Field(default=0.0)
    closing_stock: float = Field(default=0.0)
    quantity: float = Field(default=0.0, description="opening + received - closing")
    unit_cost_at_time: float = Field(default=0.0)
