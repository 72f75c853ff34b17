"""Admin endpoints for querying and resetting booking counters.

Authentication is handled in front of this router; these handlers only
translate HTTP calls into counter service operations.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping

from fastapi import APIRouter

from encore_counters.api.v1.dependencies import CounterServiceDep
from encore_counters.core.categories import CounterCategory
from encore_counters.core.errors import InvalidRequest
from encore_counters.core.rollover import CounterRecord
from encore_counters.schemas.counter import (
    CategoryCounterResponse,
    CounterResetResponse,
    CounterResponse,
    CountersResponse,
    FullResetRequest,
    StaffCounterResponse,
    StaffResetRequest,
    TimeBasedResetRequest,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/counters", tags=["admin", "counters"])


def _serialize(records: Mapping[CounterCategory | str, CounterRecord]) -> dict[str, CounterResponse]:
    return {
        (name.value if isinstance(name, CounterCategory) else name): CounterResponse.from_record(record)
        for name, record in records.items()
    }


@router.get("", response_model=CountersResponse)
def get_counters(service: CounterServiceDep) -> CountersResponse:
    """Return every category's counters, rolling over stale windows first."""
    return CountersResponse(counters=_serialize(service.get_all()))


@router.post("/init", response_model=CountersResponse)
def init_counters(service: CounterServiceDep) -> CountersResponse:
    """Create any missing category records without touching existing ones."""
    return CountersResponse(counters=_serialize(service.initialize()))


@router.post("/reset-time-based", response_model=CounterResetResponse)
def reset_time_based_counters(
    service: CounterServiceDep,
    body: TimeBasedResetRequest | None = None,
) -> CounterResetResponse:
    """Zero today/week/month/year counts; lifetime totals are preserved."""
    request = body or TimeBasedResetRequest()
    if not request.reset_all:
        raise InvalidRequest("Only resetAll=true is supported for a time-based reset")

    logger.info("Admin requested time-based counter reset")
    counters = service.reset_time_based()
    return CounterResetResponse(counters=_serialize(counters), reset_type="time-based-only")


@router.post("/reset-all", response_model=CounterResetResponse)
def reset_all_counters(
    service: CounterServiceDep,
    body: FullResetRequest | None = None,
) -> CounterResetResponse:
    """Zero every count including totals; requires ``confirmReset: true``."""
    if body is None or not body.confirm_reset:
        raise InvalidRequest(
            "Confirmation required: this resets ALL counters including totals. "
            "Set confirmReset=true to proceed."
        )

    logger.warning("Admin requested full counter reset")
    counters = service.reset_all()
    return CounterResetResponse(counters=_serialize(counters), reset_type="all-counters")


@router.post("/reset-to-zero", response_model=CounterResetResponse)
def reset_counters_to_zero(service: CounterServiceDep) -> CounterResetResponse:
    """Zero every count including totals."""
    logger.warning("Admin requested counter reset to zero")
    counters = service.reset_all()
    return CounterResetResponse(counters=_serialize(counters), reset_type="FULL_RESET")


@router.get("/staff", response_model=CountersResponse)
def get_staff_counters(service: CounterServiceDep) -> CountersResponse:
    """Return manual booking counters for every staff member seen so far."""
    return CountersResponse(counters=_serialize(service.list_staff()))


@router.post("/staff/reset", response_model=CounterResetResponse)
def reset_staff_counters(
    service: CounterServiceDep,
    body: StaffResetRequest | None = None,
) -> CounterResetResponse:
    """Zero one staff member's counters (``staffId``) or all of them (``resetType: all_staff``)."""
    if body is not None and body.reset_type == "all_staff":
        logger.warning("Admin requested reset of all staff counters")
        counters = service.reset_staff()
        return CounterResetResponse(counters=_serialize(counters), reset_type="all_staff")

    if body is None or not body.staff_id:
        raise InvalidRequest("Either staffId or resetType=all_staff is required")

    logger.info("Admin requested reset of staff %s counters", body.staff_id)
    counters = service.reset_staff(body.staff_id)
    return CounterResetResponse(counters=_serialize(counters), reset_type="staff")


@router.get("/staff/{staff_id}", response_model=StaffCounterResponse)
def get_staff_counter(staff_id: str, service: CounterServiceDep) -> StaffCounterResponse:
    """Return one staff member's manual booking counters (zero if none yet)."""
    record = service.get_staff(staff_id)
    return StaffCounterResponse(staff_id=staff_id, counter=CounterResponse.from_record(record))


@router.get("/{category}", response_model=CategoryCounterResponse)
def get_category_counter(category: str, service: CounterServiceDep) -> CategoryCounterResponse:
    """Return the counters of a single category."""
    record = service.get(category)
    return CategoryCounterResponse(
        category=record.key,
        counter=CounterResponse.from_record(record),
    )
