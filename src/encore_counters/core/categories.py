"""Booking-status categories tracked by the counter engine."""

from __future__ import annotations

from enum import Enum

from encore_counters.core.errors import InvalidRequest, UnknownCategory

STAFF_KEY_PREFIX = "staff:"


class CounterCategory(str, Enum):
    """Closed set of booking-status classes, one counter record each."""

    CONFIRMED = "confirmed"
    MANUAL = "manual"
    COMPLETED = "completed"
    CANCELLED = "cancelled"
    INCOMPLETE = "incomplete"


def parse_category(value: CounterCategory | str) -> CounterCategory:
    """Return the category for ``value`` or raise ``UnknownCategory``."""
    if isinstance(value, CounterCategory):
        return value
    try:
        return CounterCategory(value)
    except ValueError as err:
        raise UnknownCategory(value) from err


def category_for_status(status: str, *, manual: bool = False) -> CounterCategory:
    """Map a booking status transition onto the category it is counted under.

    Confirmed bookings entered by staff on behalf of a customer are counted
    as ``manual`` rather than ``confirmed``.
    """
    category = parse_category(status.strip().lower())
    if manual and category is CounterCategory.CONFIRMED:
        return CounterCategory.MANUAL
    return category


def staff_key(staff_id: str) -> str:
    """Return the store key used for a staff member's counter."""
    staff_id = (staff_id or "").strip()
    if not staff_id:
        raise InvalidRequest("Staff ID is required")
    return f"{STAFF_KEY_PREFIX}{staff_id}"
