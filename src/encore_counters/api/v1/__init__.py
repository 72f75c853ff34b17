# src/encore_counters/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import counters_router
from .exception_handlers import register_exception_handlers

__all__ = ["counters_router", "register_exception_handlers"]
