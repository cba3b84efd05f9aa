"""
Business I/O models: businesses, weekly schedule and memberships.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from bizboard.core.models.domain import BusinessStatus, MemberRole


class BusinessRead(BaseModel):
    """Schema for reading a business from API."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    business_type: str
    status: BusinessStatus
    tax_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    currency: str
    fiscal_year_start: int
    markup_percentage: float
    vat_percentage: float
    manager_monthly_salary: float
    created_at: datetime
    updated_at: datetime


class BusinessCreate(BaseModel):
    name: str = Field(min_length=1)
    business_type: str = "restaurant"
    status: BusinessStatus = BusinessStatus.active
    tax_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    currency: str = "ILS"
    fiscal_year_start: int = Field(default=1, ge=1, le=12)
    markup_percentage: float = Field(default=1.0, ge=0.0)
    vat_percentage: float = Field(default=0.18, ge=0.0, le=1.0)
    manager_monthly_salary: float = Field(default=0.0, ge=0.0)


class BusinessUpdate(BaseModel):
    name: Optional[str] = None
    business_type: Optional[str] = None
    status: Optional[BusinessStatus] = None
    tax_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    currency: Optional[str] = None
    fiscal_year_start: Optional[int] = Field(default=None, ge=1, le=12)
    markup_percentage: Optional[float] = Field(default=None, ge=0.0)
    vat_percentage: Optional[float] = Field(default=None, ge=0.0, le=1.0)
    manager_monthly_salary: Optional[float] = Field(default=None, ge=0.0)


class ScheduleDay(BaseModel):
    """One weekday of the schedule; 0 is Sunday."""

    model_config = ConfigDict(from_attributes=True)

    day_of_week: int = Field(ge=0, le=6)
    day_factor: float = Field(ge=0.0, le=1.0)


class ScheduleUpdate(BaseModel):
    days: List[ScheduleDay]


class MemberCreate(BaseModel):
    user_id: str
    role: MemberRole = MemberRole.employee


class MemberRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    business_id: str
    user_id: str
    role: MemberRole
    created_at: datetime
