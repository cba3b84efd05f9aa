"""
Invoice I/O models.

``vat_amount`` is optional on input: when omitted it is derived from the
subtotal and the business VAT rate (or zero for suppliers without VAT).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from bizboard.core.models.domain import InvoiceStatus, InvoiceType


class InvoiceCreate(BaseModel):
    business_id: str
    supplier_id: str
    invoice_number: Optional[str] = None
    invoice_date: date
    subtotal: float = Field(ge=0.0)
    vat_amount: Optional[float] = Field(default=None, ge=0.0, description="Explicit (partial) VAT amount")
    status: InvoiceStatus = InvoiceStatus.pending
    invoice_type: InvoiceType = InvoiceType.current
    clarification_reason: Optional[str] = None
    attachment_url: Optional[str] = None
    notes: Optional[str] = None


class InvoiceUpdate(BaseModel):
    supplier_id: Optional[str] = None
    invoice_number: Optional[str] = None
    invoice_date: Optional[date] = None
    subtotal: Optional[float] = Field(default=None, ge=0.0)
    vat_amount: Optional[float] = Field(default=None, ge=0.0)
    status: Optional[InvoiceStatus] = None
    invoice_type: Optional[InvoiceType] = None
    clarification_reason: Optional[str] = None
    attachment_url: Optional[str] = None
    notes: Optional[str] = None


class InvoiceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    supplier_id: str
    invoice_number: Optional[str] = None
    invoice_date: date
    subtotal: float
    vat_amount: float
    total_amount: float
    status: InvoiceStatus
    invoice_type: InvoiceType
    clarification_reason: Optional[str] = None
    attachment_url: Optional[str] = None
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: datetime
