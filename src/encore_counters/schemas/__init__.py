# src/encore_counters/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .counter import (
    CategoryCounterResponse,
    CounterResetResponse,
    CounterResponse,
    CountersResponse,
    FullResetRequest,
    StaffCounterResponse,
    StaffResetRequest,
    TimeBasedResetRequest,
)

__all__ = [
    "CategoryCounterResponse",
    "CounterResetResponse",
    "CounterResponse",
    "CountersResponse",
    "FullResetRequest",
    "StaffCounterResponse",
    "StaffResetRequest",
    "TimeBasedResetRequest",
]
