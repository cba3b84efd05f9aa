"""Monthly goal entities."""

from __future__ import annotations

from typing import Optional

from sqlmodel import Field

from ..base import SoftDeleteBase, TableBase


class Goal(SoftDeleteBase, table=True):
    """Monthly budget targets of one business.

    ``markup_percentage`` and ``vat_percentage`` override the business
    defaults for the month when set.

    Table: goals
    """

    __tablename__ = "goals"
    __table_args__ = ({"extend_existing": True},)

    business_id: str = Field(foreign_key="businesses.id", index=True)
    year: int = Field(index=True)
    month: int = Field(index=True)
    revenue_target: Optional[float] = None
    labor_cost_target_pct: Optional[float] = None
    food_cost_target_pct: Optional[float] = None
    current_expenses_target: Optional[float] = None
    goods_expenses_target: Optional[float] = None
    markup_percentage: Optional[float] = None
    vat_percentage: Optional[float] = None


class IncomeSourceGoal(TableBase, table=True):
    """Average ticket target of an income source for one goal month.

    Table: income_source_goals
    """

    __tablename__ = "income_source_goals"
    __table_args__ = ({"extend_existing": True},)

    goal_id: str = Field(foreign_key="goals.id", index=True)
    income_source_id: str = Field(foreign_key="income_sources.id", index=True)
    avg_ticket_target: float = Field(default=0.0)
