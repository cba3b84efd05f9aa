"""Supplier invoice entity."""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import Field

from ..base import SoftDeleteBase


class Invoice(SoftDeleteBase, table=True):
    """Table: invoices"""

    __tablename__ = "invoices"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    supplier_id: str = Field(foreign_key="suppliers.id", index=True)
    invoice_number: Optional[str] = None
    invoice_date: date = Field(index=True)
    subtotal: float = Field(default=0.0)
    vat_amount: float = Field(default=0.0)
    total_amount: float = Field(default=0.0)
    status: str = Field(default="pending", description="pending | paid | clarification")
    invoice_type: str = Field(default="current", description="current | goods | employees")
    clarification_reason: Optional[str] = None
    attachment_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = Field(default=None, foreign_key="profiles.id")
