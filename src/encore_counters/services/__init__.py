"""Business logic services for the Encore counter engine."""

from .booking_events import record_booking_event
from .counters import CounterService, get_counter_service

__all__ = [
    "CounterService",
    "get_counter_service",
    "record_booking_event",
]
