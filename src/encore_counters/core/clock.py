"""Reference-timezone clock and calendar boundary keys.

Every boundary computation in the counter engine goes through a single
``Clock`` so that increment time and rollover detection never mix timezones.
Weeks start at 00:00 on the configured weekday (Sunday by default) in the
reference timezone, and a week is identified by the date it starts on.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, date, datetime, timedelta
from typing import Final

import pytz

from encore_counters.core.settings import settings

WEEK_START_DAYS: Final[dict[str, int]] = {
    "monday": 0,
    "sunday": 6,
}


def utcnow() -> datetime:
    """Return the current UTC time as a timezone-aware datetime."""
    return datetime.now(UTC)


@dataclass(frozen=True)
class BoundaryKeys:
    """Calendar identifiers of the windows an instant falls into."""

    day: date
    week: date
    month: date
    year: date


class Clock:
    """Supplies "now" and boundary keys in one fixed reference timezone."""

    def __init__(
        self,
        timezone: str | None = None,
        week_start: str | None = None,
        source: Callable[[], datetime] | None = None,
    ) -> None:
        """Create a clock.

        Args:
            timezone: IANA timezone name; defaults to ``COUNTER_TIMEZONE``.
            week_start: ``"sunday"`` or ``"monday"``; defaults to ``COUNTER_WEEK_START``.
            source: Callable returning the current aware instant. Tests pass a
                controllable source here.

        Raises:
            ValueError: If the timezone or week start is not recognised.
        """
        tz_name = timezone or settings.counter_timezone
        try:
            self.tz = pytz.timezone(tz_name)
        except pytz.UnknownTimeZoneError as err:
            raise ValueError(f"Unknown timezone: {tz_name!r}") from err

        week_name = (week_start or settings.counter_week_start).lower()
        if week_name not in WEEK_START_DAYS:
            raise ValueError(f"Unsupported week start: {week_name!r}")
        self.week_start = week_name
        self._week_start_day = WEEK_START_DAYS[week_name]
        self._source = source or utcnow

    def now(self) -> datetime:
        """Return the current instant in the reference timezone."""
        return self.localize(self._source())

    def localize(self, instant: datetime) -> datetime:
        """Express ``instant`` in the reference timezone.

        Naive datetimes are taken to be wall-clock time in the reference zone.
        """
        if instant.tzinfo is None:
            return self.tz.localize(instant)
        return instant.astimezone(self.tz)

    def boundary_keys(self, instant: datetime | None = None) -> BoundaryKeys:
        """Return the day, week, month and year keys for ``instant`` (default: now)."""
        local = self.now() if instant is None else self.localize(instant)
        day = local.date()
        days_into_week = (day.weekday() - self._week_start_day) % 7
        return BoundaryKeys(
            day=day,
            week=day - timedelta(days=days_into_week),
            month=day.replace(day=1),
            year=date(day.year, 1, 1),
        )


_default_clock: Clock | None = None


def get_clock() -> Clock:
    """Return the process-wide clock built from settings."""
    global _default_clock
    if _default_clock is None:
        _default_clock = Clock()
    return _default_clock
