"""Unit tests for the goals dashboard calculations."""

from datetime import date

import pytest

from bizboard.core.database.entities import Business, BusinessSchedule, DailyEntry, Goal
from bizboard.server.services.goals import (
    average_markup,
    average_vat,
    build_goal_item,
    expected_work_days,
    fixed_invoice_amounts,
    goal_status,
    income_before_vat,
    labor_cost_total,
    month_bounds,
    pct_of_income,
    proportional_split,
    sunday_based_weekday,
)


def schedule(business_id: str, factors: dict) -> list:
    return [BusinessSchedule(business_id=business_id, day_of_week=dow, day_factor=f) for dow, f in factors.items()]


class TestCalendar:
    def test_month_bounds(self):
        assert month_bounds(2026, 2) == (date(2026, 2, 1), date(2026, 2, 28))
        assert month_bounds(2024, 2)[1] == date(2024, 2, 29)

    def test_sunday_is_zero(self):
        assert sunday_based_weekday(date(2026, 2, 15)) == 0
        assert sunday_based_weekday(date(2026, 2, 21)) == 6

    def test_expected_work_days(self):
        # February 2026 holds exactly four of each weekday.
        rows = schedule("b", {0: 1, 1: 1, 2: 1, 3: 1, 4: 1, 5: 0.5})

        assert expected_work_days(2026, 2, rows) == pytest.approx(22.0)

    def test_expected_work_days_averages_businesses(self):
        rows = schedule("a", {0: 1}) + schedule("b", {0: 0})

        assert expected_work_days(2026, 2, rows) == pytest.approx(2.0)

    def test_no_schedule(self):
        assert expected_work_days(2026, 2, []) == 0.0


class TestGoalStatus:
    def test_equal_is_neutral(self):
        assert goal_status(100, True, 500, 500) == "neutral"

    def test_expense_without_target(self):
        assert goal_status(0, True, 10, 0) == "bad"

    def test_expense_under_budget(self):
        assert goal_status(90, True, 900, 1000) == "good"
        assert goal_status(110, True, 1100, 1000) == "bad"

    @pytest.mark.parametrize("percentage,expected", [(120, "good"), (100, "good"), (85, "warning"), (79, "bad")])
    def test_income(self, percentage, expected):
        assert goal_status(percentage, False, percentage, 100.5) == expected


class TestBuildGoalItem:
    def test_over_budget_expense(self):
        item = build_goal_item("cat-1", "שכירות", 1000, 1200)

        assert item.percentage == pytest.approx(120)
        assert item.diff == pytest.approx(200)
        assert item.status == "bad"
        assert item.target_label == "₪1,000"
        assert item.actual_label == "₪1,200"
        assert item.diff_label == "+₪200"

    def test_percent_unit(self):
        item = build_goal_item("labor-pct", "עלות עובדים (%)", 30, 27.5, unit="%")

        assert item.target_label == "30%"
        assert item.actual_label == "27.5%"
        assert item.diff_label == "-2.5%"
        assert item.status == "good"

    def test_zero_target(self):
        assert build_goal_item("x", "x", 0, 50).percentage == 0.0


class TestRates:
    def test_goal_overrides_business_markup(self):
        businesses = [Business(name="a", markup_percentage=1.2), Business(name="b", markup_percentage=1.4)]

        assert average_markup(None, businesses) == pytest.approx(1.3)
        assert average_markup(Goal(business_id="a", year=2026, month=2, markup_percentage=1.5), businesses) == 1.5

    def test_average_vat(self):
        businesses = [Business(name="a", vat_percentage=0.18), Business(name="b", vat_percentage=0.0)]

        assert average_vat(None, businesses) == pytest.approx(0.09)

    def test_income_before_vat(self):
        assert income_before_vat(118.0, 0.18) == pytest.approx(100.0)
        assert income_before_vat(118.0, 0.0) == 118.0

    def test_pct_of_income(self):
        assert pct_of_income(25, 100) == 25
        assert pct_of_income(25, 0) == 0.0


class TestLaborCost:
    def test_includes_manager_share_and_markup(self):
        entries = [
            DailyEntry(business_id="b", entry_date=date(2026, 2, 1), labor_cost=1000, day_factor=1.0),
            DailyEntry(business_id="b", entry_date=date(2026, 2, 6), labor_cost=2000, day_factor=0.5),
        ]
        businesses = [Business(name="b", manager_monthly_salary=22000)]

        assert labor_cost_total(entries, businesses, 22.0, 1.2) == pytest.approx(5400.0)

    def test_no_work_days(self):
        entries = [DailyEntry(business_id="b", entry_date=date(2026, 2, 1), labor_cost=100, day_factor=1.0)]
        businesses = [Business(name="b", manager_monthly_salary=5000)]

        assert labor_cost_total(entries, businesses, 0.0, 1.0) == pytest.approx(100.0)


class TestProportionalSplit:
    def test_by_previous_budgets(self):
        assert proportional_split(1000, ["a", "b"], {"a": 300, "b": 100}) == {"a": 750, "b": 250}

    def test_equal_shares_without_history(self):
        assert proportional_split(1000, ["a", "b", "c"], {}) == {"a": 333, "b": 333, "c": 333}


class TestFixedInvoiceAmounts:
    def test_full_vat(self):
        vat, total = fixed_invoice_amounts(1000, "full", 0.18)
        assert vat == pytest.approx(180)
        assert total == pytest.approx(1180)

    def test_no_vat(self):
        assert fixed_invoice_amounts(1000, "none", 0.18) == (0.0, 1000)
