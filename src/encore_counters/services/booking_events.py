"""Hook called by booking workflows when a booking changes status.

Counters are a reporting side channel: nothing here may fail the booking
operation that triggered it.
"""

from __future__ import annotations

import logging

from encore_counters.core.categories import CounterCategory, category_for_status
from encore_counters.core.errors import CounterError
from encore_counters.services.counters import CounterService

logger = logging.getLogger(__name__)


def record_booking_event(
    service: CounterService,
    status: CounterCategory | str,
    *,
    manual: bool = False,
    staff_id: str | None = None,
) -> bool:
    """Count a booking status transition, logging and dropping any failure.

    Args:
        service: Counter service to record into.
        status: Booking status or category the booking moved to.
        manual: True when staff entered the booking on a customer's behalf.
        staff_id: Staff member who entered a manual booking, if known.

    Returns:
        True if every counter update was persisted, False otherwise.
    """
    try:
        if isinstance(status, CounterCategory):
            category = status
            if manual and category is CounterCategory.CONFIRMED:
                category = CounterCategory.MANUAL
        else:
            category = category_for_status(status, manual=manual)
        service.increment(category)
    except CounterError as err:
        logger.warning("Dropped booking counter update for %r: %s", status, err.message)
        return False

    if staff_id and category is CounterCategory.MANUAL:
        try:
            service.increment_staff(staff_id)
        except CounterError as err:
            logger.warning("Dropped staff counter update for %s: %s", staff_id, err.message)
            return False
    return True
