# src/encore_counters/models/counter.py
"""Persistent booking counter rows."""

from datetime import date, datetime

from sqlalchemy import BigInteger, CheckConstraint, Date, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from encore_counters.db.session import Base


class BookingCounter(Base):
    """Windowed and lifetime counts for one counter key.

    Keys are category names (``confirmed``, ``manual`` ...) or
    ``staff:<id>`` for per-staff manual booking counters. ``version`` is
    bumped on every write and guards conditional updates.
    """

    __tablename__ = "booking_counter"
    __table_args__ = (
        CheckConstraint(
            "daily_count >= 0 AND weekly_count >= 0 AND monthly_count >= 0 "
            "AND yearly_count >= 0 AND total_count >= 0",
            name="ck_booking_counter_non_negative",
        ),
    )

    key: Mapped[str] = mapped_column(String(128), primary_key=True)

    daily_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    weekly_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    monthly_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    yearly_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    total_count: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Boundary markers: day, week-start date, first of month, 1 January.
    last_reset_day: Mapped[date] = mapped_column(Date, nullable=False)
    last_reset_week: Mapped[date] = mapped_column(Date, nullable=False)
    last_reset_month: Mapped[date] = mapped_column(Date, nullable=False)
    last_reset_year: Mapped[date] = mapped_column(Date, nullable=False)

    version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )

    def __repr__(self) -> str:
        return (
            f"<BookingCounter(key={self.key}, daily={self.daily_count}, "
            f"total={self.total_count}, version={self.version})>"
        )
