"""
Database Connection and Session Management.

Re-exports the global engine, session factory and the FastAPI session
dependency so routers import them from one place.
"""

from bizboard.core.database.session import (  # noqa: F401
    async_session_maker,
    engine,
    get_session,
    init_db,
)
