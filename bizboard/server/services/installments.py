"""
Installment splitting.

A payment amount paid in ``n`` installments is split into ``n`` rows due one
month apart. Every row gets ``round(total / n, 2)``; the last row absorbs the
rounding remainder so the rows always add up to the total.

When the user edits one row by hand, the edited amounts are kept and the
rest of the total is spread over the rows that were not edited.
"""

from __future__ import annotations

import calendar
import math
from dataclasses import dataclass, replace
from datetime import date
from typing import List

from bizboard.core.errors import DomainValidationError
from bizboard.core.formatting import round_cents

TOLERANCE = 0.01


@dataclass(frozen=True)
class Installment:
    number: int
    due_date: date
    amount: float
    manually_edited: bool = False


def add_months(start: date, months: int) -> date:
    """Shift ``start`` by whole months, clamping the day to the target month's length."""
    index = start.month - 1 + months
    year = start.year + index // 12
    month = index % 12 + 1
    day = min(start.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def generate_installments(count: int, total: float, start_date: date) -> List[Installment]:
    if count < 1:
        return []
    each = round_cents(total / count)
    last = round_cents(total - each * (count - 1))
    return [
        Installment(
            number=i + 1,
            due_date=add_months(start_date, i),
            amount=last if i == count - 1 else each,
        )
        for i in range(count)
    ]


def rescale_installments(installments: List[Installment], total: float) -> List[Installment]:
    """Recompute amounts for a new total, keeping numbers and due dates."""
    count = len(installments)
    if count == 0:
        return []
    each = round_cents(total / count)
    last = round_cents(total - each * (count - 1))
    return [
        replace(item, amount=last if i == count - 1 else each, manually_edited=False)
        for i, item in enumerate(installments)
    ]


def apply_manual_amount(installments: List[Installment], index: int, amount: float, total: float) -> List[Installment]:
    """Set row ``index`` by hand and spread what is left over the other rows.

    The edited amount is capped at ``total``. Rows that were edited earlier
    keep their amounts. Non-edited rows get the remainder floored to cents,
    except the last of them which takes whatever is left.
    """
    if not 0 <= index < len(installments):
        raise DomainValidationError(f"Installment {index} does not exist")

    capped = min(round_cents(max(amount, 0.0)), total)
    rows = list(installments)
    rows[index] = replace(rows[index], amount=capped, manually_edited=True)

    manual_total = sum(item.amount for item in rows if item.manually_edited)
    remaining = max(0.0, round_cents(total - manual_total))
    free = [i for i, item in enumerate(rows) if not item.manually_edited]
    if not free:
        return rows

    share = math.floor(remaining / len(free) * 100) / 100
    for position, i in enumerate(free):
        if position == len(free) - 1:
            value = round_cents(remaining - share * (len(free) - 1))
        else:
            value = share
        rows[i] = replace(rows[i], amount=value)
    return rows


def installments_total(installments: List[Installment]) -> float:
    return round_cents(sum(item.amount for item in installments))


def validate_installments_total(installments: List[Installment], expected: float) -> None:
    actual = installments_total(installments)
    if abs(actual - expected) > TOLERANCE:
        raise DomainValidationError(f"סכום התשלומים ({actual:.2f}) לא תואם לסכום לתשלום ({expected:.2f})")
