"""Data access for counter records.

``CounterStore`` is the only synchronization point of the counter engine:
request handlers share no memory, so every ``save`` is a compare-and-swap on
the record's ``version`` that reloads and re-applies the mutation when it
loses a race.
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import replace

from sqlalchemy import func, insert, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from encore_counters.core.errors import StorageUnavailable
from encore_counters.core.rollover import CounterRecord
from encore_counters.core.settings import settings
from encore_counters.models import BookingCounter

__all__ = ["CounterStore", "Mutation", "SqlCounterStore"]

logger = logging.getLogger(__name__)

Mutation = Callable[[CounterRecord | None], CounterRecord]


class CounterStore(ABC):
    """Keyed storage for counter records with atomic conditional updates."""

    def __init__(self, max_retries: int | None = None) -> None:
        self.max_retries = max(1, max_retries or settings.counter_max_retries)

    @abstractmethod
    def load(self, key: str) -> CounterRecord | None:
        """Return the stored record for ``key`` or None if it does not exist."""

    @abstractmethod
    def save(self, key: str, mutate: Mutation) -> CounterRecord:
        """Atomically replace the record for ``key`` with ``mutate(current)``.

        ``mutate`` may be called more than once and must be a pure function
        of the record it receives. When it returns a record equal to the
        current one nothing is written.

        Raises:
            StorageUnavailable: If the backend fails or the update keeps
                losing races after ``max_retries`` attempts.
        """

    @abstractmethod
    def keys(self, prefix: str = "") -> list[str]:
        """Return the stored keys starting with ``prefix``, sorted."""

    def _exhausted(self, key: str) -> StorageUnavailable:
        logger.warning("Gave up updating counter %s after %d attempts", key, self.max_retries)
        return StorageUnavailable(
            f"Counter {key!r} is under contention; update abandoned after "
            f"{self.max_retries} attempts"
        )


def _to_record(row: BookingCounter) -> CounterRecord:
    return CounterRecord(
        key=row.key,
        daily_count=int(row.daily_count),
        weekly_count=int(row.weekly_count),
        monthly_count=int(row.monthly_count),
        yearly_count=int(row.yearly_count),
        total_count=int(row.total_count),
        last_reset_day=row.last_reset_day,
        last_reset_week=row.last_reset_week,
        last_reset_month=row.last_reset_month,
        last_reset_year=row.last_reset_year,
        version=int(row.version),
    )


def _column_values(record: CounterRecord) -> dict[str, object]:
    return {
        "daily_count": record.daily_count,
        "weekly_count": record.weekly_count,
        "monthly_count": record.monthly_count,
        "yearly_count": record.yearly_count,
        "total_count": record.total_count,
        "last_reset_day": record.last_reset_day,
        "last_reset_week": record.last_reset_week,
        "last_reset_month": record.last_reset_month,
        "last_reset_year": record.last_reset_year,
    }


class SqlCounterStore(CounterStore):
    """Durable counter store backed by the ``booking_counter`` table.

    Each successful ``save`` commits its own transaction.
    """

    def __init__(self, session: Session, max_retries: int | None = None) -> None:
        super().__init__(max_retries)
        self.session = session

    def load(self, key: str) -> CounterRecord | None:
        try:
            return self._load(key)
        except SQLAlchemyError as err:
            self.session.rollback()
            raise StorageUnavailable(f"Could not read counter {key!r}: {err}") from err

    def save(self, key: str, mutate: Mutation) -> CounterRecord:
        for attempt in range(1, self.max_retries + 1):
            try:
                current = self._load(key)
                updated = mutate(current)
                if current is not None and updated == current:
                    return current
                if current is None:
                    stored = self._insert(key, updated)
                else:
                    stored = self._compare_and_swap(key, current, updated)
            except SQLAlchemyError as err:
                self.session.rollback()
                raise StorageUnavailable(f"Could not write counter {key!r}: {err}") from err

            if stored is not None:
                return stored
            logger.debug("Counter %s changed concurrently (attempt %d), retrying", key, attempt)

        raise self._exhausted(key)

    def keys(self, prefix: str = "") -> list[str]:
        stmt = select(BookingCounter.key).order_by(BookingCounter.key)
        if prefix:
            stmt = stmt.where(BookingCounter.key.startswith(prefix, autoescape=True))
        try:
            return list(self.session.execute(stmt).scalars())
        except SQLAlchemyError as err:
            self.session.rollback()
            raise StorageUnavailable(f"Could not list counters: {err}") from err

    def _load(self, key: str) -> CounterRecord | None:
        row = self.session.execute(
            select(BookingCounter)
            .where(BookingCounter.key == key)
            .execution_options(populate_existing=True)
        ).scalar_one_or_none()
        return _to_record(row) if row is not None else None

    def _insert(self, key: str, record: CounterRecord) -> CounterRecord | None:
        """Create the row; None if another writer created it first."""
        try:
            self.session.execute(
                insert(BookingCounter).values(key=key, version=1, **_column_values(record))
            )
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            return None
        return replace(record, key=key, version=1)

    def _compare_and_swap(
        self, key: str, current: CounterRecord, record: CounterRecord
    ) -> CounterRecord | None:
        """Write ``record`` only if the row still carries ``current.version``."""
        next_version = current.version + 1
        result = self.session.execute(
            update(BookingCounter)
            .where(BookingCounter.key == key, BookingCounter.version == current.version)
            .values(version=next_version, updated_at=func.now(), **_column_values(record))
            .execution_options(synchronize_session=False)
        )
        if result.rowcount != 1:
            self.session.rollback()
            return None
        self.session.commit()
        return replace(record, key=key, version=next_version)
