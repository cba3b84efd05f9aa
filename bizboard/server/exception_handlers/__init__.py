"""
Exception handlers for the BizBoard server.

This package contains the handler turning domain errors into JSON responses,
the catch-all handler for unexpected failures and a setup function to
register them with the FastAPI application.
"""

from .global_handler import setup_exception_handlers

__all__ = ["setup_exception_handlers"]
