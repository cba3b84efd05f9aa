"""Domain-level enums and constants."""

from .enums import (
    PAYMENT_METHOD_COLORS,
    PAYMENT_METHOD_NAMES,
    BusinessStatus,
    ChangeEventType,
    ExpenseType,
    IncomeType,
    InputType,
    InvoiceStatus,
    InvoiceType,
    MemberRole,
    PaymentMethod,
    UserRole,
    VatType,
)

__all__ = [
    "PAYMENT_METHOD_COLORS",
    "PAYMENT_METHOD_NAMES",
    "BusinessStatus",
    "ChangeEventType",
    "ExpenseType",
    "IncomeType",
    "InputType",
    "InvoiceStatus",
    "InvoiceType",
    "MemberRole",
    "PaymentMethod",
    "UserRole",
    "VatType",
]
