"""
Database entity models.

This package contains all database entity models organized by business domain.
Each module represents either a single table or a domain spanning a few
closely related tables.

Modules:
- profiles: Users and login sessions
- businesses: Businesses, memberships and weekly schedule
- catalog: Expense categories, suppliers, supplier budgets, income sources, managed products
- invoices: Supplier invoices
- payments: Payments and their installment splits
- goals: Monthly goals and income source average-ticket targets
- daily_entries: Daily entries, income breakdown and product usage
"""

from .businesses import Business, BusinessMember, BusinessSchedule
from .catalog import ExpenseCategory, IncomeSource, ManagedProduct, Supplier, SupplierBudget
from .daily_entries import DailyEntry, DailyIncomeBreakdown, DailyProductUsage
from .goals import Goal, IncomeSourceGoal
from .invoices import Invoice
from .payments import Payment, PaymentSplit
from .profiles import AuthSession, Profile

__all__ = [
    "AuthSession",
    "Business",
    "BusinessMember",
    "BusinessSchedule",
    "DailyEntry",
    "DailyIncomeBreakdown",
    "DailyProductUsage",
    "ExpenseCategory",
    "Goal",
    "IncomeSource",
    "IncomeSourceGoal",
    "Invoice",
    "ManagedProduct",
    "Payment",
    "PaymentSplit",
    "Profile",
    "Supplier",
    "SupplierBudget",
]
