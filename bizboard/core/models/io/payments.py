"""
Payment I/O models: payment entry, ledger listing, method summary and the
forecast / past / commitments views.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class InstallmentInput(BaseModel):
    """A custom installment row edited by the user."""

    number: int = Field(ge=1)
    due_date: date
    amount: float
    check_number: Optional[str] = None


class PaymentMethodInput(BaseModel):
    """One payment method line of a payment; its amount may be split into installments."""

    method: Optional[str] = Field(default=None, description="Blank means 'other'")
    amount: float = 0.0
    installments_count: int = Field(default=1, ge=1)
    check_number: Optional[str] = None
    installments: List[InstallmentInput] = Field(default_factory=list)


class PaymentCreate(BaseModel):
    """Schema for recording a payment.

    Required fields are validated by the service so that missing values are
    reported with the same message the payment form shows.
    """

    business_id: str
    supplier_id: Optional[str] = None
    payment_date: Optional[date] = None
    methods: List[PaymentMethodInput] = Field(default_factory=list)
    invoice_ids: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    reference: Optional[str] = None
    receipt_url: Optional[str] = None


class PaymentUpdate(BaseModel):
    supplier_id: Optional[str] = None
    payment_date: Optional[date] = None
    methods: List[PaymentMethodInput] = Field(default_factory=list)
    invoice_ids: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    reference: Optional[str] = None
    receipt_url: Optional[str] = None


class PaymentSplitRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    payment_method: str
    amount: float
    installments_count: Optional[int] = None
    installment_number: Optional[int] = None
    due_date: Optional[date] = None
    check_number: Optional[str] = None
    reference_number: Optional[str] = None


class PaymentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    supplier_id: str
    invoice_id: Optional[str] = None
    payment_date: date
    total_amount: float
    receipt_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
    splits: List[PaymentSplitRead] = Field(default_factory=list)


class PaymentListItem(BaseModel):
    """A ledger row with the fields the payments table displays."""

    id: str
    payment_date: date
    date_label: str
    supplier_id: str
    supplier_name: str
    payment_method: str
    method_name: str
    installments_label: str
    subtotal: float
    vat_amount: float
    total_amount: float
    notes: Optional[str] = None
    receipt_url: Optional[str] = None
    splits: List[PaymentSplitRead] = Field(default_factory=list)


class PaymentPage(BaseModel):
    items: List[PaymentListItem]
    offset: int
    has_more: bool


class SupplierAmount(BaseModel):
    supplier_id: Optional[str] = None
    supplier_name: str
    amount: float


class MethodSummary(BaseModel):
    method: str
    name: str
    color: str
    amount: float
    percentage: float
    suppliers: List[SupplierAmount] = Field(default_factory=list)


class PaymentSummary(BaseModel):
    start: Optional[date] = None
    end: Optional[date] = None
    total: float
    methods: List[MethodSummary]


class ScheduledSplit(BaseModel):
    """An installment placed on the payment calendar."""

    split_id: str
    payment_id: str
    supplier_name: str
    payment_method: str
    method_name: str
    amount: float
    due_date: date
    date_label: str
    installments_label: str
    check_number: Optional[str] = None
    notes: Optional[str] = None


class ScheduleMonth(BaseModel):
    key: str = Field(description="YYYY-MM")
    label: str
    total: float
    items: List[ScheduledSplit]


class Commitment(BaseModel):
    """A long-running installment plan."""

    payment_id: str
    supplier_name: str
    notes: Optional[str] = None
    monthly_amount: float
    last_due_date: date
    remaining_count: int


class PaymentSchedule(BaseModel):
    as_of: date
    total: float
    months: List[ScheduleMonth]
    commitments: List[Commitment] = Field(default_factory=list)
