"""
Core utilities for BizBoard.

This package provides functionality shared by the server: logging
configuration, the domain error hierarchy, database entities and
sessions, realtime change notifications and file storage.
"""

from bizboard.core.logging_config import get_logger, setup_logging

__all__ = ["get_logger", "setup_logging"]
