"""Domain enums shared by entities, I/O schemas and services."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Application-wide role of a profile."""

    admin = "admin"  # Sees and manages every business.
    owner = "owner"
    employee = "employee"


class MemberRole(str, Enum):
    """Role of a user inside one business."""

    owner = "owner"
    employee = "employee"


class BusinessStatus(str, Enum):
    active = "active"
    inactive = "inactive"


class ExpenseType(str, Enum):
    """Which goals tab a supplier's spending belongs to."""

    current_expenses = "current_expenses"
    goods_purchases = "goods_purchases"
    employee_costs = "employee_costs"


class VatType(str, Enum):
    full = "full"
    none = "none"
    partial = "partial"


class InvoiceStatus(str, Enum):
    pending = "pending"
    paid = "paid"
    clarification = "clarification"


class InvoiceType(str, Enum):
    current = "current"
    goods = "goods"
    employees = "employees"


class PaymentMethod(str, Enum):
    bank_transfer = "bank_transfer"
    cash = "cash"
    check = "check"
    bit = "bit"
    paybox = "paybox"
    credit_card = "credit_card"
    other = "other"
    credit_companies = "credit_companies"
    standing_order = "standing_order"


class IncomeType(str, Enum):
    private = "private"
    business = "business"


class InputType(str, Enum):
    single = "single"  # Amount only.
    with_count = "with_count"  # Amount plus number of orders.


class ChangeEventType(str, Enum):
    """Row-change kinds broadcast to realtime subscribers."""

    insert = "INSERT"
    update = "UPDATE"
    delete = "DELETE"


PAYMENT_METHOD_NAMES: dict[str, str] = {
    PaymentMethod.bank_transfer.value: "העברה בנקאית",
    PaymentMethod.cash.value: "מזומן",
    PaymentMethod.check.value: "צ'ק",
    PaymentMethod.bit.value: "ביט",
    PaymentMethod.paybox.value: "פייבוקס",
    PaymentMethod.credit_card.value: "כרטיס אשראי",
    PaymentMethod.other.value: "אחר",
    PaymentMethod.credit_companies.value: "חברות הקפה",
    PaymentMethod.standing_order.value: "הוראת קבע",
}

PAYMENT_METHOD_COLORS: dict[str, str] = {
    PaymentMethod.check.value: "#00DD23",
    PaymentMethod.cash.value: "#FF0000",
    PaymentMethod.standing_order.value: "#3964FF",
    PaymentMethod.credit_companies.value: "#FFCF00",
    PaymentMethod.credit_card.value: "#FF3665",
    PaymentMethod.bank_transfer.value: "#FF7F00",
    PaymentMethod.bit.value: "#9333ea",
    PaymentMethod.paybox.value: "#06b6d4",
    PaymentMethod.other.value: "#6b7280",
}
