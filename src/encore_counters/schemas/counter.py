# src/encore_counters/schemas/counter.py
"""Counter-related Pydantic schemas."""

from __future__ import annotations

from datetime import date
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from encore_counters.core.rollover import CounterRecord

ResetType = Literal["time-based-only", "all-counters", "FULL_RESET", "staff", "all_staff"]


class CounterResponse(BaseModel):
    """Windowed and lifetime counts for one category or staff member."""

    model_config = ConfigDict(populate_by_name=True)

    daily_count: int = Field(..., ge=0, alias="dailyCount")
    weekly_count: int = Field(..., ge=0, alias="weeklyCount")
    monthly_count: int = Field(..., ge=0, alias="monthlyCount")
    yearly_count: int = Field(..., ge=0, alias="yearlyCount")
    total_count: int = Field(..., ge=0, alias="totalCount")
    last_reset_day: date = Field(..., alias="lastResetDayKey")
    last_reset_week: date = Field(..., alias="lastResetWeekKey")
    last_reset_month: date = Field(..., alias="lastResetMonthKey")
    last_reset_year: date = Field(..., alias="lastResetYearKey")

    @classmethod
    def from_record(cls, record: CounterRecord) -> CounterResponse:
        return cls(
            daily_count=record.daily_count,
            weekly_count=record.weekly_count,
            monthly_count=record.monthly_count,
            yearly_count=record.yearly_count,
            total_count=record.total_count,
            last_reset_day=record.last_reset_day,
            last_reset_week=record.last_reset_week,
            last_reset_month=record.last_reset_month,
            last_reset_year=record.last_reset_year,
        )


class CountersResponse(BaseModel):
    """All counters keyed by category (or staff id)."""

    success: bool = True
    counters: dict[str, CounterResponse]


class CategoryCounterResponse(BaseModel):
    success: bool = True
    category: str
    counter: CounterResponse


class StaffCounterResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    staff_id: str = Field(..., alias="staffId")
    counter: CounterResponse


class CounterResetResponse(CountersResponse):
    """Counters after an administrative reset."""

    model_config = ConfigDict(populate_by_name=True)

    reset_type: ResetType = Field(..., alias="resetType")


class TimeBasedResetRequest(BaseModel):
    """Body of a windowed reset; ``resetAll`` must not be false."""

    model_config = ConfigDict(populate_by_name=True)

    reset_all: bool = Field(default=True, alias="resetAll")


class FullResetRequest(BaseModel):
    """Body of a full reset; ``confirmReset`` must be true."""

    model_config = ConfigDict(populate_by_name=True)

    confirm_reset: bool = Field(default=False, alias="confirmReset")


class StaffResetRequest(BaseModel):
    """Body of a staff reset: a single ``staffId`` or ``resetType: "all_staff"``."""

    model_config = ConfigDict(populate_by_name=True)

    staff_id: str | None = Field(default=None, alias="staffId")
    reset_type: Literal["all_staff"] | None = Field(default=None, alias="resetType")
