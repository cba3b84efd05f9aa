"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- auth: Login, user management
- businesses: Businesses, schedule, memberships
- catalog: Expense categories, suppliers, budgets, income sources, products
- invoices: Supplier invoices
- payments: Payment entry, ledger, summary, forecast
- goals: Goals dashboard and target updates
- daily_entries: Daily entries and opening stock
- profiles: Settings page and uploads
"""
