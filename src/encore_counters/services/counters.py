"""Booking counter service.

Rollover is evaluated lazily: every increment and every read compares the
record's reset markers with the clock's current boundary keys, so no
background job is needed to zero counters at midnight.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

from sqlalchemy.orm import Session

from encore_counters.core.categories import (
    STAFF_KEY_PREFIX,
    CounterCategory,
    parse_category,
    staff_key,
)
from encore_counters.core.clock import BoundaryKeys, Clock, get_clock
from encore_counters.core.errors import CounterResetError, StorageUnavailable
from encore_counters.core.rollover import (
    CounterRecord,
    RolloverDecision,
    apply_increment,
    decide,
    fresh,
    reset_counts,
    reset_windows,
    roll_over,
)
from encore_counters.core.settings import settings
from encore_counters.repositories.counter_store import CounterStore, SqlCounterStore

logger = logging.getLogger(__name__)

Transform = Callable[[CounterRecord, BoundaryKeys], CounterRecord]


class CounterService:
    """Per-category event counters over day, week, month, year and lifetime."""

    def __init__(self, store: CounterStore, clock: Clock | None = None) -> None:
        self.store = store
        self.clock = clock or get_clock()

    def initialize(self) -> dict[CounterCategory, CounterRecord]:
        """Create zeroed records for any missing category.

        Existing records are left exactly as they are.
        """
        keys = self.clock.boundary_keys()
        for category in CounterCategory:
            self.store.save(
                category.value,
                lambda current, key=category.value: current if current is not None else fresh(key, keys),
            )
        return self.get_all()

    def increment(self, category: CounterCategory | str) -> CounterRecord:
        """Count one event for ``category`` in every window and the total.

        Raises:
            UnknownCategory: If ``category`` is not a known category.
            StorageUnavailable: If the count could not be persisted.
        """
        category = parse_category(category)
        return self._increment(category.value)

    def get(self, category: CounterCategory | str) -> CounterRecord:
        """Return the current record for one category."""
        category = parse_category(category)
        return self._read(category.value, self.clock.boundary_keys())

    def get_all(self) -> dict[CounterCategory, CounterRecord]:
        """Return the current record of every category.

        Categories without a stored record are reported as all-zero.
        """
        keys = self.clock.boundary_keys()
        return {category: self._read(category.value, keys) for category in CounterCategory}

    def reset_time_based(self) -> dict[CounterCategory, CounterRecord]:
        """Zero the day, week, month and year counts; totals are preserved."""
        self._reset_each(_category_keys(), reset_windows, "time-based")
        return self.get_all()

    def reset_all(self) -> dict[CounterCategory, CounterRecord]:
        """Zero every count including the lifetime totals.

        Callers are responsible for confirming this irreversible operation.
        """
        self._reset_each(_category_keys(), reset_counts, "full")
        return self.get_all()

    # --- Staff counters -------------------------------------------------------------
    def increment_staff(self, staff_id: str) -> CounterRecord:
        """Count one manual booking entered by ``staff_id``."""
        return self._increment(staff_key(staff_id))

    def get_staff(self, staff_id: str) -> CounterRecord:
        return self._read(staff_key(staff_id), self.clock.boundary_keys())

    def list_staff(self) -> dict[str, CounterRecord]:
        keys = self.clock.boundary_keys()
        return {
            key.removeprefix(STAFF_KEY_PREFIX): self._read(key, keys)
            for key in self.store.keys(STAFF_KEY_PREFIX)
        }

    def reset_staff(self, staff_id: str | None = None) -> dict[str, CounterRecord]:
        """Zero one staff member's counters, or all of them when ``staff_id`` is None.

        Category counters are not touched. Returns the reset staff counters
        keyed by staff id.

        Raises:
            InvalidRequest: If ``staff_id`` is blank.
            CounterResetError: If some staff counters could not be reset.
        """
        if staff_id is not None:
            key = staff_key(staff_id)
            self._reset_each([key], reset_counts, "staff")
            record = self._read(key, self.clock.boundary_keys())
            return {key.removeprefix(STAFF_KEY_PREFIX): record}

        self._reset_each(self.store.keys(STAFF_KEY_PREFIX), reset_counts, "all-staff")
        return self.list_staff()

    # --- Internals ------------------------------------------------------------------
    def _increment(self, key: str) -> CounterRecord:
        keys = self.clock.boundary_keys()
        # Last decision taken by the mutation; the store may run it several times.
        decisions: list[RolloverDecision] = []

        def mutate(current: CounterRecord | None) -> CounterRecord:
            base = current if current is not None else fresh(key, keys)
            decisions[:] = [decide(base, keys)]
            return apply_increment(base, keys)

        record = self.store.save(key, mutate)
        if decisions and decisions[0].any:
            _log_rollover(key, decisions[0], keys)
        logger.debug(
            "Incremented %s counter - daily=%d weekly=%d monthly=%d yearly=%d total=%d",
            key,
            record.daily_count,
            record.weekly_count,
            record.monthly_count,
            record.yearly_count,
            record.total_count,
        )
        return record

    def _read(self, key: str, keys: BoundaryKeys) -> CounterRecord:
        record = self.store.load(key)
        if record is None:
            return fresh(key, keys)

        decision = decide(record, keys)
        if not decision.any:
            return record

        try:
            record = self.store.save(
                key,
                lambda current: roll_over(current, keys) if current is not None else fresh(key, keys),
            )
        except StorageUnavailable as err:
            logger.warning("Could not persist rollover of %s counter: %s", key, err)
            return roll_over(record, keys)
        _log_rollover(key, decision, keys)
        return record

    def _reset_each(self, store_keys: Iterable[str], transform: Transform, label: str) -> None:
        keys = self.clock.boundary_keys()
        reset: list[str] = []
        failed: dict[str, str] = {}
        for key in store_keys:
            try:
                self.store.save(
                    key,
                    lambda current, key=key: transform(
                        current if current is not None else fresh(key, keys), keys
                    ),
                )
            except StorageUnavailable as err:
                failed[key] = err.message
            else:
                reset.append(key)

        if failed:
            logger.error("%s counter reset failed for %s", label.capitalize(), sorted(failed))
            raise CounterResetError(reset, failed)
        logger.info("%s counter reset applied to %d counters", label.capitalize(), len(reset))


def _category_keys() -> list[str]:
    return [category.value for category in CounterCategory]


def _log_rollover(key: str, decision: RolloverDecision, keys: BoundaryKeys) -> None:
    windows = [
        name
        for name, crossed in (
            ("day", decision.reset_day),
            ("week", decision.reset_week),
            ("month", decision.reset_month),
            ("year", decision.reset_year),
        )
        if crossed
    ]
    logger.info("Rolled over %s counter windows %s at %s", key, ", ".join(windows), keys.day)


def build_counter_store(db: Session) -> CounterStore:
    """Return the store selected by ``COUNTER_BACKEND``."""
    if settings.counter_backend == "redis":
        from encore_counters.repositories.redis_counter_store import (
            RedisCounterStore,
            get_redis_client,
        )

        return RedisCounterStore(get_redis_client())
    return SqlCounterStore(db)


def get_counter_service(db: Session) -> CounterService:
    """Return a counter service bound to ``db`` and the process clock."""
    return CounterService(build_counter_store(db))
