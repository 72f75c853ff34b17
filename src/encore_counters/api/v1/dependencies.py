"""Shared API dependencies."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.orm import Session

from encore_counters.db.session import get_db
from encore_counters.services.counters import CounterService, get_counter_service

# Type alias for database session dependency
SessionDep = Annotated[Session, Depends(get_db)]


def get_counter_service_dep(db: SessionDep) -> CounterService:
    """Get CounterService dependency for dependency injection."""
    return get_counter_service(db)


# Type alias for counter service dependency
CounterServiceDep = Annotated[CounterService, Depends(get_counter_service_dep)]
