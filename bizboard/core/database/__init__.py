"""
Centralized database layer.

- base: SQLModel base classes, id and timestamp helpers
- entities: table models grouped by business domain
- query: generic table query client
- utils: engine, session factory and schema creation helpers
- session: the application's global engine and ``get_session`` dependency
"""
