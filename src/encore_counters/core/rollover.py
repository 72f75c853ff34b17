"""Window rollover rules for counter records.

Everything in this module is a pure function of its inputs: records are
immutable and each transform returns a new record. Stores re-run these
transforms against freshly loaded state when a compare-and-swap loses a
race, which is what keeps a boundary reset from being applied twice.
"""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import date

from encore_counters.core.clock import BoundaryKeys


@dataclass(frozen=True)
class CounterRecord:
    """Windowed and lifetime counts for one counter key."""

    key: str
    daily_count: int
    weekly_count: int
    monthly_count: int
    yearly_count: int
    total_count: int
    last_reset_day: date
    last_reset_week: date
    last_reset_month: date
    last_reset_year: date
    version: int = 0


@dataclass(frozen=True)
class RolloverDecision:
    """Which windows must be zeroed before the next count is applied."""

    reset_day: bool
    reset_week: bool
    reset_month: bool
    reset_year: bool

    @property
    def any(self) -> bool:
        return self.reset_day or self.reset_week or self.reset_month or self.reset_year


def decide(record: CounterRecord, keys: BoundaryKeys) -> RolloverDecision:
    """Compare a record's reset markers with the current boundary keys."""
    return RolloverDecision(
        reset_day=record.last_reset_day != keys.day,
        reset_week=record.last_reset_week != keys.week,
        reset_month=record.last_reset_month != keys.month,
        reset_year=record.last_reset_year != keys.year,
    )


def fresh(key: str, keys: BoundaryKeys) -> CounterRecord:
    """Return a zeroed record whose markers sit on ``keys``."""
    return CounterRecord(
        key=key,
        daily_count=0,
        weekly_count=0,
        monthly_count=0,
        yearly_count=0,
        total_count=0,
        last_reset_day=keys.day,
        last_reset_week=keys.week,
        last_reset_month=keys.month,
        last_reset_year=keys.year,
    )


def roll_over(record: CounterRecord, keys: BoundaryKeys) -> CounterRecord:
    """Zero every window whose boundary has been crossed; total is untouched."""
    decision = decide(record, keys)
    if not decision.any:
        return record

    changes: dict[str, object] = {}
    if decision.reset_day:
        changes.update(daily_count=0, last_reset_day=keys.day)
    if decision.reset_week:
        changes.update(weekly_count=0, last_reset_week=keys.week)
    if decision.reset_month:
        changes.update(monthly_count=0, last_reset_month=keys.month)
    if decision.reset_year:
        changes.update(yearly_count=0, last_reset_year=keys.year)
    return replace(record, **changes)


def apply_increment(record: CounterRecord, keys: BoundaryKeys) -> CounterRecord:
    """Roll crossed windows over, then count one event in every window."""
    current = roll_over(record, keys)
    return replace(
        current,
        daily_count=current.daily_count + 1,
        weekly_count=current.weekly_count + 1,
        monthly_count=current.monthly_count + 1,
        yearly_count=current.yearly_count + 1,
        total_count=current.total_count + 1,
    )


def reset_windows(record: CounterRecord, keys: BoundaryKeys) -> CounterRecord:
    """Zero the four windows and move their markers to ``keys``."""
    return replace(
        fresh(record.key, keys),
        total_count=record.total_count,
        version=record.version,
    )


def reset_counts(record: CounterRecord, keys: BoundaryKeys) -> CounterRecord:
    """Zero every count, lifetime total included."""
    return replace(fresh(record.key, keys), version=record.version)
