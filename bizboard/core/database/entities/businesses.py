"""
Business entities.

A business is the unit every financial record belongs to. Users reach a
business through a membership row; the weekly schedule holds how much of a
working day each weekday counts for.
"""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field, UniqueConstraint

from ..base import SoftDeleteBase, TableBase


class Business(SoftDeleteBase, table=True):
    """Table: businesses"""

    __tablename__ = "businesses"
    __table_args__ = ({"extend_existing": True},)

    name: str
    business_type: str = Field(default="restaurant")
    status: str = Field(default="active", description="active | inactive")
    tax_id: Optional[str] = None
    address: Optional[str] = None
    city: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    logo_url: Optional[str] = None
    currency: str = Field(default="ILS")
    fiscal_year_start: int = Field(default=1)
    markup_percentage: float = Field(default=1.0, description="Employer cost multiplier applied to labor")
    vat_percentage: float = Field(default=0.18, description="VAT rate as a fraction")
    manager_monthly_salary: float = Field(default=0.0)

    @property
    def is_active(self) -> bool:
        return self.status == "active"


class BusinessMember(SoftDeleteBase, table=True):
    """Table: business_members"""

    __tablename__ = "business_members"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    user_id: str = Field(foreign_key="profiles.id", index=True)
    role: str = Field(default="employee", description="owner | employee")


class BusinessSchedule(TableBase, table=True):
    """Weekly work schedule; ``day_of_week`` is 0=Sunday .. 6=Saturday.

    Table: business_schedule
    """

    __tablename__ = "business_schedule"
    __table_args__ = (
        UniqueConstraint("business_id", "day_of_week", name="uq_business_schedule_day"),
        {"extend_existing": True},
    )

    business_id: str = Field(foreign_key="businesses.id", index=True)
    day_of_week: int = Field(ge=0, le=6)
    day_factor: float = Field(default=1.0, ge=0.0, le=1.0, description="0 closed, 0.5 half day, 1 full day")
