"""
Goals dashboard: budget versus actual for one month.

The dashboard has three tabs:

- ``vs-current``: current expenses per expense category
- ``vs-goods``: goods purchases per supplier
- ``kpi``: revenue, average ticket per income source, labor and food cost
  percentages, managed product cost percentages and expense totals

Amounts come from invoices (subtotals), daily entries and their income and
product breakdowns; targets come from the month's goal row, income source
goals, managed products and supplier budgets. Several businesses can be
selected at once; their figures are summed and their rates averaged.
"""

from __future__ import annotations

import calendar
from collections import defaultdict
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence

from sqlalchemy.ext.asyncio import AsyncSession

from bizboard.core.database.entities import (
    Business,
    BusinessSchedule,
    DailyEntry,
    DailyIncomeBreakdown,
    DailyProductUsage,
    ExpenseCategory,
    Goal,
    IncomeSource,
    IncomeSourceGoal,
    Invoice,
    ManagedProduct,
    Supplier,
    SupplierBudget,
)
from bizboard.core.database.query import QueryClient
from bizboard.core.errors import DomainValidationError
from bizboard.core.formatting import (
    format_currency,
    format_diff,
    format_percent,
    month_label,
    round_half_up,
)
from bizboard.core.logging_config import get_logger
from bizboard.core.models.domain import ExpenseType, InvoiceType, VatType
from bizboard.core.models.io.goals import GoalItem, GoalsDashboard, TargetUpdate, TargetUpdateResult
from bizboard.server.core.config import settings

logger = get_logger(__name__)

TAB_CURRENT = "vs-current"
TAB_GOODS = "vs-goods"
TAB_KPI = "kpi"

GOODS_SUPPLIER_PREFIX = "goods-supplier-"
AVG_TICKET_PREFIX = "avg-ticket-"
PRODUCT_PREFIX = "product-"

GOAL_FIELDS = {
    "revenue": "revenue_target",
    "labor-pct": "labor_cost_target_pct",
    "food-pct": "food_cost_target_pct",
    "current-expenses": "current_expenses_target",
    "goods-expenses": "goods_expenses_target",
}


# ----------------------------------------------------------------------
# Pure calculations
# ----------------------------------------------------------------------


def month_bounds(year: int, month: int) -> tuple[date, date]:
    return date(year, month, 1), date(year, month, calendar.monthrange(year, month)[1])


def sunday_based_weekday(value: date) -> int:
    """0=Sunday .. 6=Saturday, matching ``business_schedule.day_of_week``."""
    return (value.weekday() + 1) % 7


def goal_status(percentage: float, is_expense: bool, actual: float, target: float) -> str:
    if actual == target:
        return "neutral"
    if is_expense:
        if target == 0 and actual > 0:
            return "bad"
        return "good" if percentage <= 100 else "bad"
    if percentage >= 100:
        return "good"
    if percentage >= 80:
        return "warning"
    return "bad"


def build_goal_item(
    id: str,
    name: str,
    target: float,
    actual: float,
    unit: str = "₪",
    is_expense: bool = True,
    supplier_ids: Optional[List[str]] = None,
    editable: bool = True,
) -> GoalItem:
    percentage = actual / target * 100 if target > 0 else 0.0
    diff = actual - target
    fmt = format_percent if unit == "%" else format_currency
    return GoalItem(
        id=id,
        name=name,
        target=target,
        actual=actual,
        unit=unit,
        editable=editable,
        is_expense=is_expense,
        supplier_ids=supplier_ids or [],
        diff=diff,
        percentage=percentage,
        status=goal_status(percentage, is_expense, actual, target),
        target_label=fmt(target),
        actual_label=fmt(actual),
        diff_label=format_diff(diff, unit),
    )


def expected_work_days(year: int, month: int, schedule: Iterable[BusinessSchedule]) -> float:
    """Sum, over the month's dates, of the mean schedule factor of that weekday.

    Weekdays missing from every schedule count as closed.
    """
    factors: Dict[int, List[float]] = defaultdict(list)
    for row in schedule:
        factors[row.day_of_week].append(float(row.day_factor or 0))
    averages = {dow: sum(values) / len(values) for dow, values in factors.items()}

    start, end = month_bounds(year, month)
    total = 0.0
    current = start
    while current <= end:
        total += averages.get(sunday_based_weekday(current), 0.0)
        current += timedelta(days=1)
    return total


def average_markup(goal: Optional[Goal], businesses: Sequence[Business]) -> float:
    if goal is not None and goal.markup_percentage is not None:
        return float(goal.markup_percentage)
    values = [float(b.markup_percentage or 1) for b in businesses]
    return sum(values) / max(len(values), 1)


def average_vat(goal: Optional[Goal], businesses: Sequence[Business]) -> float:
    if goal is not None and goal.vat_percentage is not None:
        return float(goal.vat_percentage)
    values = [float(b.vat_percentage or 0) for b in businesses]
    return sum(values) / max(len(values), 1)


def labor_cost_total(
    entries: Sequence[DailyEntry],
    businesses: Sequence[Business],
    work_days: float,
    markup: float,
) -> float:
    """``(Σ labor_cost + manager_daily_cost × Σ day_factor) × markup``."""
    raw = sum(float(e.labor_cost or 0) for e in entries)
    manager_salary = sum(float(b.manager_monthly_salary or 0) for b in businesses)
    manager_daily = manager_salary / work_days if work_days > 0 else 0.0
    actual_days = sum(float(e.day_factor or 0) for e in entries)
    return (raw + manager_daily * actual_days) * markup


def income_before_vat(revenue: float, vat: float) -> float:
    divisor = 1 + vat if vat > 0 else 1
    return revenue / divisor


def pct_of_income(amount: float, income: float) -> float:
    return amount / income * 100 if income > 0 else 0.0


def proportional_split(value: float, supplier_ids: Sequence[str], old_budgets: Dict[str, float]) -> Dict[str, float]:
    """Distribute a category target over its suppliers by their previous budgets.

    Each share is rounded to whole shekels. Equal shares when nothing was
    budgeted before.
    """
    old_total = sum(old_budgets.get(sid, 0.0) for sid in supplier_ids)
    result = {}
    for sid in supplier_ids:
        ratio = old_budgets.get(sid, 0.0) / old_total if old_total > 0 else 1 / len(supplier_ids)
        result[sid] = round_half_up(value * ratio)
    return result


def fixed_invoice_amounts(subtotal: float, vat_type: str, vat_rate: float) -> tuple[float, float]:
    """VAT and total of a fixed-expense invoice re-synced to its budget."""
    vat = subtotal * vat_rate if vat_type == VatType.full.value else 0.0
    return vat, subtotal + vat


# ----------------------------------------------------------------------
# Data access
# ----------------------------------------------------------------------


@dataclass
class MonthData:
    """Everything the dashboard reads for one month."""

    goal: Optional[Goal]
    businesses: List[Business]
    categories: List[ExpenseCategory]
    suppliers: List[Supplier]
    budgets: Dict[str, float]
    invoices: List[Invoice]
    entries: List[DailyEntry]
    schedule: List[BusinessSchedule]
    income_sources: List[IncomeSource]
    income_goals: Dict[str, float] = field(default_factory=dict)
    breakdown: List[DailyIncomeBreakdown] = field(default_factory=list)
    products: List[ManagedProduct] = field(default_factory=list)
    usage: List[DailyProductUsage] = field(default_factory=list)


class GoalsService:
    """Builds the goals dashboard and saves targets edited on it."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.db = QueryClient(session)

    async def _load(self, business_ids: List[str], year: int, month: int) -> MonthData:
        start, end = month_bounds(year, month)
        db = self.db

        goal = await (
            db.table(Goal)
            .in_("business_id", business_ids)
            .eq("year", year)
            .eq("month", month)
            .live()
            .order("created_at")
            .first()
        )
        businesses = await db.table(Business).in_("id", business_ids).all()
        categories = await (
            db.table(ExpenseCategory)
            .in_("business_id", business_ids)
            .live()
            .eq("is_active", True)
            .order("display_order")
            .all()
        )
        suppliers = await db.table(Supplier).in_("business_id", business_ids).live().eq("is_active", True).all()
        budget_rows = await (
            db.table(SupplierBudget).in_("business_id", business_ids).eq("year", year).eq("month", month).live().all()
        )
        budgets: Dict[str, float] = {}
        for row in budget_rows:
            budgets[row.supplier_id] = float(row.budget_amount or 0)
        invoices = await (
            db.table(Invoice)
            .in_("business_id", business_ids)
            .live()
            .gte("invoice_date", start)
            .lte("invoice_date", end)
            .all()
        )
        entries = await (
            db.table(DailyEntry)
            .in_("business_id", business_ids)
            .live()
            .gte("entry_date", start)
            .lte("entry_date", end)
            .all()
        )
        schedule = await db.table(BusinessSchedule).in_("business_id", business_ids).all()
        income_sources = await (
            db.table(IncomeSource).in_("business_id", business_ids).live().eq("is_active", True).order("name").all()
        )
        income_goals: Dict[str, float] = {}
        if goal is not None:
            for row in await db.table(IncomeSourceGoal).eq("goal_id", goal.id).all():
                income_goals[row.income_source_id] = float(row.avg_ticket_target or 0)
        entry_ids = [e.id for e in entries]
        breakdown: List[DailyIncomeBreakdown] = []
        usage: List[DailyProductUsage] = []
        if entry_ids:
            breakdown = await db.table(DailyIncomeBreakdown).in_("daily_entry_id", entry_ids).all()
            usage = await db.table(DailyProductUsage).in_("daily_entry_id", entry_ids).all()
        products = await (
            db.table(ManagedProduct).in_("business_id", business_ids).eq("is_active", True).live().order("name").all()
        )

        return MonthData(
            goal=goal,
            businesses=businesses,
            categories=categories,
            suppliers=suppliers,
            budgets=budgets,
            invoices=invoices,
            entries=entries,
            schedule=schedule,
            income_sources=income_sources,
            income_goals=income_goals,
            breakdown=breakdown,
            products=products,
            usage=usage,
        )

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    async def dashboard(self, business_ids: List[str], year: int, month: int) -> GoalsDashboard:
        data = await self._load(business_ids, year, month)

        current_actuals: Dict[str, float] = defaultdict(float)
        goods_actuals: Dict[str, float] = defaultdict(float)
        for inv in data.invoices:
            if inv.invoice_type == InvoiceType.current.value:
                current_actuals[inv.supplier_id] += float(inv.subtotal or 0)
            elif inv.invoice_type == InvoiceType.goods.value:
                goods_actuals[inv.supplier_id] += float(inv.subtotal or 0)

        current_items = self._current_tab(data, current_actuals)
        goods_items = self._goods_tab(data, goods_actuals)

        revenue = sum(float(e.total_register or 0) for e in data.entries)
        work_days = expected_work_days(year, month, data.schedule)
        labor = labor_cost_total(data.entries, data.businesses, work_days, average_markup(data.goal, data.businesses))
        income = income_before_vat(revenue, average_vat(data.goal, data.businesses))
        kpi_items = self._kpi_tab(data, revenue, labor, income, sum(current_actuals.values()), sum(goods_actuals.values()))

        logger.debug(
            f"Goals dashboard {year}-{month:02d} for {len(business_ids)} business(es): "
            f"revenue={revenue:.2f}, labor={labor:.2f}, work_days={work_days:.2f}"
        )
        return GoalsDashboard(
            business_ids=business_ids,
            year=year,
            month=month,
            month_label=month_label(f"{year}-{month:02d}"),
            revenue=revenue,
            income_before_vat=income,
            labor_cost=labor,
            expected_work_days=work_days,
            tabs={TAB_CURRENT: current_items, TAB_GOODS: goods_items, TAB_KPI: kpi_items},
        )

    def _current_tab(self, data: MonthData, actuals: Dict[str, float]) -> List[GoalItem]:
        category_of = {s.id: s.expense_category_id for s in data.suppliers if s.expense_category_id}
        category_actuals: Dict[str, float] = defaultdict(float)
        for supplier_id, amount in actuals.items():
            category_id = category_of.get(supplier_id)
            if category_id:
                category_actuals[category_id] += amount

        items = []
        for category in data.categories:
            supplier_ids = [
                s.id
                for s in data.suppliers
                if s.expense_category_id == category.id and s.expense_type == ExpenseType.current_expenses.value
            ]
            target = sum(data.budgets.get(sid, 0.0) for sid in supplier_ids if data.budgets.get(sid, 0.0) > 0)
            actual = category_actuals.get(category.id, 0.0)
            if not supplier_ids and actual == 0 and target == 0:
                continue
            items.append(build_goal_item(category.id, category.name, target, actual, supplier_ids=supplier_ids))
        items.sort(key=lambda item: item.name)
        return items

    def _goods_tab(self, data: MonthData, actuals: Dict[str, float]) -> List[GoalItem]:
        items = []
        for supplier in data.suppliers:
            if supplier.expense_type != ExpenseType.goods_purchases.value:
                continue
            actual = actuals.get(supplier.id, 0.0)
            target = data.budgets.get(supplier.id, 0.0)
            if actual == 0 and target == 0:
                continue
            items.append(
                build_goal_item(
                    f"{GOODS_SUPPLIER_PREFIX}{supplier.id}", supplier.name, target, actual, supplier_ids=[supplier.id]
                )
            )
        items.sort(key=lambda item: item.name)
        return items

    def _kpi_tab(
        self,
        data: MonthData,
        revenue: float,
        labor: float,
        income: float,
        current_total: float,
        goods_total: float,
    ) -> List[GoalItem]:
        goal = data.goal

        def goal_value(column: str) -> float:
            return float(getattr(goal, column) or 0) if goal is not None else 0.0

        def budget_total(expense_type: ExpenseType) -> float:
            return sum(data.budgets.get(s.id, 0.0) for s in data.suppliers if s.expense_type == expense_type.value)

        amounts: Dict[str, float] = defaultdict(float)
        orders: Dict[str, int] = defaultdict(int)
        for row in data.breakdown:
            amounts[row.income_source_id] += float(row.amount or 0)
            orders[row.income_source_id] += int(row.orders_count or 0)
        avg_ticket_items = [
            build_goal_item(
                f"{AVG_TICKET_PREFIX}{source.id}",
                f"ממוצע {source.name} (₪)",
                data.income_goals.get(source.id, 0.0),
                round_half_up(amounts[source.id] / orders[source.id]) if orders[source.id] > 0 else 0.0,
                is_expense=False,
            )
            for source in data.income_sources
        ]

        product_costs: Dict[str, float] = defaultdict(float)
        for row in data.usage:
            product_costs[row.product_id] += float(row.quantity or 0) * float(row.unit_cost_at_time or 0)
        product_items = [
            build_goal_item(
                f"{PRODUCT_PREFIX}{product.id}",
                f"יעד {product.name} (%)",
                float(product.target_pct or 0),
                pct_of_income(product_costs[product.id], income),
                unit="%",
            )
            for product in data.products
            if product.target_pct is not None
        ]

        return [
            build_goal_item("revenue", "הכנסות ברוטו (₪)", goal_value("revenue_target"), revenue, is_expense=False),
            *avg_ticket_items,
            build_goal_item(
                "labor-pct", "עלות עובדים (%)", goal_value("labor_cost_target_pct"), pct_of_income(labor, income), unit="%"
            ),
            build_goal_item(
                "food-pct",
                "עלות מכר (%)",
                goal_value("food_cost_target_pct"),
                pct_of_income(goods_total, income),
                unit="%",
            ),
            *product_items,
            build_goal_item(
                "current-expenses",
                "הוצאות שוטפות (₪)",
                goal_value("current_expenses_target") or budget_total(ExpenseType.current_expenses),
                current_total,
            ),
            build_goal_item(
                "goods-expenses",
                "הוצאות קניות סחורה (₪)",
                goal_value("goods_expenses_target") or budget_total(ExpenseType.goods_purchases),
                goods_total,
            ),
        ]

    # ------------------------------------------------------------------
    # Saving targets
    # ------------------------------------------------------------------

    async def ensure_goal(self, business_id: str, year: int, month: int) -> Optional[Goal]:
        """Return the month's goal row, creating it for active businesses only."""
        goal = await (
            self.db.table(Goal)
            .eq("business_id", business_id)
            .eq("year", year)
            .eq("month", month)
            .live()
            .order("created_at")
            .first()
        )
        if goal is not None:
            return goal
        business = await self.db.get(Business, business_id)
        if business is None or not business.is_active:
            logger.info(f"Not creating a goal for inactive or missing business {business_id}")
            return None
        return await self.db.table(Goal).insert({"business_id": business_id, "year": year, "month": month})

    async def save_target(self, update: TargetUpdate) -> TargetUpdateResult:
        item_id = update.item_id
        if item_id in GOAL_FIELDS:
            updated = await self._save_goal_field(update, GOAL_FIELDS[item_id])
        elif item_id.startswith(AVG_TICKET_PREFIX):
            updated = await self._save_avg_ticket(update, item_id[len(AVG_TICKET_PREFIX) :])
        elif item_id.startswith(PRODUCT_PREFIX):
            updated = await self._save_product_target(update, item_id[len(PRODUCT_PREFIX) :])
        elif item_id.startswith(GOODS_SUPPLIER_PREFIX):
            supplier_id = item_id[len(GOODS_SUPPLIER_PREFIX) :]
            supplier = await self.db.table(Supplier).eq("id", supplier_id).in_("business_id", update.business_ids).live().maybe_single()
            if supplier is None:
                raise DomainValidationError("יעד לא מוכר")
            updated = await self._save_supplier_budgets(update, [supplier_id])
        else:
            category = await (
                self.db.table(ExpenseCategory).eq("id", item_id).in_("business_id", update.business_ids).live().maybe_single()
            )
            if category is None:
                raise DomainValidationError("יעד לא מוכר")
            suppliers = await (
                self.db.table(Supplier)
                .eq("expense_category_id", category.id)
                .eq("expense_type", ExpenseType.current_expenses.value)
                .eq("is_active", True)
                .live()
                .all()
            )
            updated = await self._save_supplier_budgets(update, [s.id for s in suppliers])

        await self.session.commit()
        logger.info(f"Saved target {item_id}={update.value} for {update.year}-{update.month:02d} ({updated} row(s))")
        return TargetUpdateResult(item_id=item_id, value=update.value, updated=updated)

    async def _save_goal_field(self, update: TargetUpdate, column: str) -> int:
        updated = 0
        for business_id in update.business_ids:
            goal = await self.ensure_goal(business_id, update.year, update.month)
            if goal is None:
                continue
            await self.db.table(Goal).eq("id", goal.id).update({column: update.value})
            updated += 1
        return updated

    async def _save_avg_ticket(self, update: TargetUpdate, income_source_id: str) -> int:
        source = await self.db.table(IncomeSource).eq("id", income_source_id).in_("business_id", update.business_ids).live().maybe_single()
        if source is None:
            raise DomainValidationError("יעד לא מוכר")
        goal = await self.ensure_goal(update.business_ids[0], update.year, update.month)
        if goal is None:
            return 0
        query = self.db.table(IncomeSourceGoal).eq("goal_id", goal.id).eq("income_source_id", income_source_id)
        if await query.first() is not None:
            await (
                self.db.table(IncomeSourceGoal)
                .eq("goal_id", goal.id)
                .eq("income_source_id", income_source_id)
                .update({"avg_ticket_target": update.value})
            )
        else:
            await self.db.table(IncomeSourceGoal).insert(
                {"goal_id": goal.id, "income_source_id": income_source_id, "avg_ticket_target": update.value}
            )
        return 1

    async def _save_product_target(self, update: TargetUpdate, product_id: str) -> int:
        rows = await (
            self.db.table(ManagedProduct)
            .eq("id", product_id)
            .in_("business_id", update.business_ids)
            .live()
            .update({"target_pct": update.value})
        )
        if not rows:
            raise DomainValidationError("יעד לא מוכר")
        return len(rows)

    async def _save_supplier_budgets(self, update: TargetUpdate, supplier_ids: List[str]) -> int:
        if not supplier_ids:
            return 0
        existing = await (
            self.db.table(SupplierBudget)
            .in_("supplier_id", supplier_ids)
            .in_("business_id", update.business_ids)
            .eq("year", update.year)
            .eq("month", update.month)
            .live()
            .all()
        )
        by_supplier = {row.supplier_id: row for row in existing}
        if len(supplier_ids) == 1:
            new_amounts = {supplier_ids[0]: update.value}
        else:
            old = {sid: float(row.budget_amount or 0) for sid, row in by_supplier.items()}
            new_amounts = proportional_split(update.value, supplier_ids, old)

        suppliers = {s.id: s for s in await self.db.table(Supplier).in_("id", supplier_ids).all()}
        start, end = month_bounds(update.year, update.month)
        for supplier_id, amount in new_amounts.items():
            row = by_supplier.get(supplier_id)
            if row is not None:
                await self.db.table(SupplierBudget).eq("id", row.id).update({"budget_amount": amount})
            else:
                await self.db.table(SupplierBudget).insert(
                    {
                        "supplier_id": supplier_id,
                        "business_id": suppliers[supplier_id].business_id,
                        "year": update.year,
                        "month": update.month,
                        "budget_amount": amount,
                    }
                )
            supplier = suppliers.get(supplier_id)
            if supplier is not None and supplier.is_fixed_expense:
                await self._sync_fixed_invoices(supplier, amount, update.business_ids, start, end)
        return len(new_amounts)

    async def _sync_fixed_invoices(
        self, supplier: Supplier, subtotal: float, business_ids: List[str], start: date, end: date
    ) -> None:
        vat, total = fixed_invoice_amounts(subtotal, supplier.vat_type, settings.default_vat_rate)
        rows = await (
            self.db.table(Invoice)
            .eq("supplier_id", supplier.id)
            .in_("business_id", business_ids)
            .live()
            .gte("invoice_date", start)
            .lte("invoice_date", end)
            .update({"subtotal": subtotal, "vat_amount": vat, "total_amount": total})
        )
        if rows:
            logger.debug(f"Re-synced {len(rows)} fixed-expense invoice(s) of supplier {supplier.id}")
