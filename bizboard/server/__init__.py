"""
BizBoard Server Package.

This package contains the web server implementation for BizBoard.

Subpackages:
    api: FastAPI route definitions and endpoint logic.
    core: Configuration, constants and database wiring.
    services: Business logic and service layer.
    exception_handlers: Mapping of errors to JSON responses.
    middleware: Request logging and timing.
"""
