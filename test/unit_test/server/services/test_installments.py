"""Unit tests for installment splitting."""

from datetime import date

import pytest

from bizboard.core.errors import DomainValidationError
from bizboard.server.services.installments import (
    Installment,
    add_months,
    apply_manual_amount,
    generate_installments,
    installments_total,
    rescale_installments,
    validate_installments_total,
)


class TestAddMonths:
    def test_same_day(self):
        assert add_months(date(2026, 1, 15), 2) == date(2026, 3, 15)

    def test_year_rollover(self):
        assert add_months(date(2026, 11, 3), 3) == date(2027, 2, 3)

    def test_month_end_is_clamped(self):
        assert add_months(date(2026, 1, 31), 1) == date(2026, 2, 28)
        assert add_months(date(2028, 1, 31), 1) == date(2028, 2, 29)


class TestGenerateInstallments:
    def test_even_split(self):
        rows = generate_installments(3, 300.0, date(2026, 1, 10))

        assert [r.number for r in rows] == [1, 2, 3]
        assert [r.amount for r in rows] == [100.0, 100.0, 100.0]
        assert [r.due_date for r in rows] == [date(2026, 1, 10), date(2026, 2, 10), date(2026, 3, 10)]

    def test_last_row_absorbs_remainder(self):
        rows = generate_installments(3, 1000.0, date(2026, 1, 1))

        assert [r.amount for r in rows[:2]] == [333.33, 333.33]
        assert rows[2].amount == pytest.approx(333.34)
        assert installments_total(rows) == pytest.approx(1000.0)

    def test_zero_count(self):
        assert generate_installments(0, 100.0, date(2026, 1, 1)) == []


class TestRescale:
    def test_keeps_dates_and_resets_manual_flag(self):
        rows = apply_manual_amount(generate_installments(2, 100.0, date(2026, 1, 1)), 0, 70.0, 100.0)

        rescaled = rescale_installments(rows, 50.0)

        assert [r.amount for r in rescaled] == [25.0, 25.0]
        assert [r.due_date for r in rescaled] == [r.due_date for r in rows]
        assert not any(r.manually_edited for r in rescaled)


class TestApplyManualAmount:
    def test_remainder_spread_over_other_rows(self):
        rows = generate_installments(3, 1000.0, date(2026, 1, 1))

        edited = apply_manual_amount(rows, 0, 500.0, 1000.0)

        assert edited[0].amount == 500.0
        assert edited[0].manually_edited
        assert edited[1].amount == 250.0
        assert edited[2].amount == 250.0
        assert installments_total(edited) == pytest.approx(1000.0)

    def test_share_floored_last_takes_rest(self):
        rows = generate_installments(4, 1000.0, date(2026, 1, 1))

        edited = apply_manual_amount(rows, 0, 0.0, 1000.0)

        assert [r.amount for r in edited[1:3]] == [333.33, 333.33]
        assert edited[3].amount == pytest.approx(333.34)

    def test_previous_manual_rows_are_kept(self):
        rows = generate_installments(3, 900.0, date(2026, 1, 1))
        rows = apply_manual_amount(rows, 0, 100.0, 900.0)

        rows = apply_manual_amount(rows, 2, 200.0, 900.0)

        assert [r.amount for r in rows] == [100.0, 600.0, 200.0]

    def test_amount_capped_at_total(self):
        rows = generate_installments(2, 100.0, date(2026, 1, 1))

        edited = apply_manual_amount(rows, 1, 250.0, 100.0)

        assert edited[1].amount == 100.0
        assert edited[0].amount == 0.0

    def test_negative_amount_treated_as_zero(self):
        rows = generate_installments(2, 100.0, date(2026, 1, 1))

        edited = apply_manual_amount(rows, 0, -5.0, 100.0)

        assert edited[0].amount == 0.0
        assert edited[1].amount == 100.0

    def test_bad_index(self):
        with pytest.raises(DomainValidationError):
            apply_manual_amount(generate_installments(2, 100.0, date(2026, 1, 1)), 5, 1.0, 100.0)


class TestValidateTotal:
    def test_within_tolerance(self):
        rows = [Installment(1, date(2026, 1, 1), 50.0), Installment(2, date(2026, 2, 1), 50.004)]
        validate_installments_total(rows, 100.0)

    def test_mismatch_message(self):
        rows = [Installment(1, date(2026, 1, 1), 40.0), Installment(2, date(2026, 2, 1), 50.0)]

        with pytest.raises(DomainValidationError) as exc_info:
            validate_installments_total(rows, 100.0)

        assert exc_info.value.message == "סכום התשלומים (90.00) לא תואם לסכום לתשלום (100.00)"
