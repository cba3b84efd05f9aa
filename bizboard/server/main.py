"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request logging), registers the exception handlers, mounts uploaded files and
includes all API routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles

from bizboard.core.logging_config import get_logger, setup_logging
from bizboard.core.monitoring import initialize_logfire
from bizboard.core.realtime import hub, install_change_capture

from .api.v1 import (
    auth,
    businesses,
    catalog,
    daily_entries,
    goals,
    health,
    invoices,
    payments,
    profile,
    realtime,
    upload,
)
from .core import constant
from .core.config import settings
from .core.database import init_db
from .exception_handlers import setup_exception_handlers
from .middleware import RequestLoggingMiddleware

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables, sizes the realtime subscriber queues and turns on
    Logfire instrumentation when configured.
    """
    # Startup
    try:
        logger.info("Starting up BizBoard Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    hub.queue_size = settings.realtime.queue_size
    initialize_logfire(app)

    yield

    # Shutdown
    logger.info("Shutting down BizBoard Server...")


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    BizBoard Server API

    Backend for small-business financial management: businesses and their catalogs,
    supplier invoices and payments with installments, daily register entries,
    monthly goals, file uploads and a realtime change stream.
    """,
    version=constant.API_VERSION,
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

# Set all CORS enabled origins
cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(RequestLoggingMiddleware)

setup_exception_handlers(app)

# Row changes are captured for every session, including those opened outside the lifespan.
install_change_capture()

storage_root = Path(settings.storage.root)
storage_root.mkdir(parents=True, exist_ok=True)
app.mount("/files", StaticFiles(directory=storage_root, check_dir=False), name="files")

app.include_router(health.router, tags=["health"])
app.include_router(auth.router, prefix=f"{constant.API_V1_STR}/auth")
app.include_router(businesses.router, prefix=f"{constant.API_V1_STR}/businesses")
app.include_router(catalog.suppliers_router, prefix=f"{constant.API_V1_STR}/suppliers")
app.include_router(catalog.expense_categories_router, prefix=f"{constant.API_V1_STR}/expense-categories")
app.include_router(catalog.supplier_budgets_router, prefix=f"{constant.API_V1_STR}/supplier-budgets")
app.include_router(catalog.income_sources_router, prefix=f"{constant.API_V1_STR}/income-sources")
app.include_router(catalog.managed_products_router, prefix=f"{constant.API_V1_STR}/managed-products")
app.include_router(invoices.router, prefix=f"{constant.API_V1_STR}/invoices")
app.include_router(goals.router, prefix=f"{constant.API_V1_STR}/goals")
app.include_router(payments.router, prefix=f"{constant.API_V1_STR}/payments")
app.include_router(daily_entries.router, prefix=f"{constant.API_V1_STR}/daily-entries")
app.include_router(profile.router, prefix=f"{constant.API_V1_STR}/profile")
app.include_router(upload.router, prefix=f"{constant.API_V1_STR}/upload")
app.include_router(realtime.router, prefix=f"{constant.API_V1_STR}/realtime")
