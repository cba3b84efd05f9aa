"""BizBoard.

Backend for a Hebrew-language small-business financial management application.

High-level architecture
-----------------------

The codebase is organized around a managed relational store and the page-level
concerns that read and write it:

- **Goals**: monthly budget vs. actual per business, computed from invoices,
  supplier budgets and daily entries.
- **Payments**: a ledger of supplier payments split into installments, with
  forecast, past and commitment views over the installment due dates.
- **Daily entries**: each day's register, labor and product usage figures.

Core subpackages
----------------

- ``bizboard.core``:

  - Logging, monitoring and the domain error hierarchy.
  - SQLModel entities, the generic query client and session management.
  - Realtime row-change notifications and file storage.

- ``bizboard.server``:

  - FastAPI application, routers, services and configuration.

Typical workflow
----------------

1. A user logs in and receives a session token.
2. The client selects one or more businesses and calls the page endpoints
   (goals dashboard, payments ledger, daily entries) with those business ids.
3. Writes commit through a single session per request; committed row changes
   are broadcast to realtime subscribers, which re-fetch.
"""
