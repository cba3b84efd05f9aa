"""Display helpers for amounts, percentages and Hebrew calendar labels."""

from __future__ import annotations

import math
from datetime import date

HEBREW_MONTHS = [
    "ינואר",
    "פברואר",
    "מרץ",
    "אפריל",
    "מאי",
    "יוני",
    "יולי",
    "אוגוסט",
    "ספטמבר",
    "אוקטובר",
    "נובמבר",
    "דצמבר",
]

# Indexed by Python's weekday() (Monday=0).
HEBREW_DAYS = ["שני", "שלישי", "רביעי", "חמישי", "שישי", "שבת", "ראשון"]


def round_half_up(value: float, digits: int = 0) -> float:
    """Round like ``Math.round`` does: halves go towards positive infinity."""
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def round_cents(value: float) -> float:
    return round_half_up(value, 2)


def format_currency(amount: float) -> str:
    """Format as whole shekels with thousands separators, e.g. ``₪1,234``."""
    return f"₪{int(round_half_up(amount)):,}"


def _trim_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(round_half_up(value)))
    return f"{value:.2f}".rstrip("0").rstrip(".")


def format_percent(value: float) -> str:
    """Whole numbers without decimals, otherwise up to two decimals."""
    return f"{_trim_number(value)}%"


def format_diff(diff: float, unit: str = "₪") -> str:
    sign = "+" if diff > 0 else ""
    if unit == "%":
        return f"{sign}{_trim_number(diff)}%"
    return f"{sign}{format_currency(diff)}"


def month_key(value: date) -> str:
    return f"{value.year}-{value.month:02d}"


def month_label(key: str) -> str:
    """Turn ``YYYY-MM`` into a label such as ``פברואר, 2026``."""
    year, month = key.split("-")
    return f"{HEBREW_MONTHS[int(month) - 1]}, {year}"


def long_date_label(value: date) -> str:
    """``<weekday> <day> <month>, <year>`` in Hebrew."""
    return f"{HEBREW_DAYS[value.weekday()]} {value.day} {HEBREW_MONTHS[value.month - 1]}, {value.year}"


def short_date_label(value: date) -> str:
    """``DD/MM/YY``."""
    return value.strftime("%d/%m/%y")
