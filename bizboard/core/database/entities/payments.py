"""
Payment entities.

A payment to a supplier is split into one row per installment per payment
method; each split has its own due date and amount.
"""

from __future__ import annotations

from datetime import date
from typing import Optional

from sqlmodel import Field

from ..base import SoftDeleteBase, TableBase


class Payment(SoftDeleteBase, table=True):
    """Table: payments"""

    __tablename__ = "payments"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    supplier_id: str = Field(foreign_key="suppliers.id", index=True)
    invoice_id: Optional[str] = Field(default=None, foreign_key="invoices.id")
    payment_date: date = Field(index=True)
    total_amount: float = Field(default=0.0)
    receipt_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = Field(default=None, foreign_key="profiles.id")


class PaymentSplit(TableBase, table=True):
    """One installment of a payment.

    Table: payment_splits
    """

    __tablename__ = "payment_splits"
    __table_args__ = ({"extend_existing": True},)

    payment_id: str = Field(foreign_key="payments.id", index=True)
    payment_method: str = Field(default="other")
    amount: float = Field(default=0.0)
    installments_count: Optional[int] = Field(default=1)
    installment_number: Optional[int] = Field(default=1)
    due_date: Optional[date] = Field(default=None, index=True)
    check_number: Optional[str] = None
    reference_number: Optional[str] = None
