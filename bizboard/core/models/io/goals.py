"""
Goals dashboard I/O models.
"""

from __future__ import annotations

from typing import Dict, List, Literal

from pydantic import BaseModel, Field

GoalStatus = Literal["good", "warning", "bad", "neutral"]


class GoalItem(BaseModel):
    """One budget-versus-actual row of a dashboard tab."""

    id: str
    name: str
    target: float
    actual: float
    unit: Literal["₪", "%"] = "₪"
    editable: bool = True
    is_expense: bool = True
    supplier_ids: List[str] = Field(default_factory=list)
    diff: float = 0.0
    percentage: float = 0.0
    status: GoalStatus = "neutral"
    target_label: str = ""
    actual_label: str = ""
    diff_label: str = ""


class GoalsDashboard(BaseModel):
    business_ids: List[str]
    year: int
    month: int
    month_label: str
    revenue: float
    income_before_vat: float
    labor_cost: float
    expected_work_days: float
    tabs: Dict[str, List[GoalItem]] = Field(description="Keyed by 'vs-current', 'vs-goods' and 'kpi'")


class TargetUpdate(BaseModel):
    business_ids: List[str] = Field(min_length=1)
    year: int = Field(ge=2000, le=2100)
    month: int = Field(ge=1, le=12)
    item_id: str = Field(min_length=1)
    value: float = Field(ge=0.0)


class TargetUpdateResult(BaseModel):
    item_id: str
    value: float
    updated: int = Field(description="Number of rows written")
