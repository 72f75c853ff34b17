"""Engine and session factory for the counter store."""

from __future__ import annotations

from collections.abc import Generator, Iterator
from contextlib import contextmanager
from typing import Any

from sqlalchemy import create_engine
from sqlalchemy.engine import make_url
from sqlalchemy.orm import DeclarativeBase, Session, sessionmaker

from encore_counters.core.settings import settings


class Base(DeclarativeBase):
    """Declarative base for counter tables."""


# Register BookingCounter on Base.metadata before create_all or autogenerate runs.
import encore_counters.models  # noqa: E402,F401


def engine_options(url: str) -> dict[str, Any]:
    """Return ``create_engine`` keyword arguments suited to ``url``.

    SQLite connections are shared across the request threadpool and wait on
    a locked database instead of failing the compare-and-swap immediately.
    """
    options: dict[str, Any] = {"echo": settings.sql_debug}
    if make_url(url).get_backend_name() == "sqlite":
        options["connect_args"] = {
            "check_same_thread": False,
            "timeout": settings.sqlite_busy_timeout,
        }
    else:
        options["pool_pre_ping"] = True
    return options


engine = create_engine(
    settings.effective_database_url,
    **engine_options(settings.effective_database_url),
)

# Stores commit every save themselves; loaded rows must stay readable afterwards.
SessionLocal = sessionmaker(
    autocommit=False,
    autoflush=False,
    expire_on_commit=False,
    bind=engine,
)


def get_db() -> Generator[Session, None, None]:
    """Yield a database session for dependency injection."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def session_scope() -> Iterator[Session]:
    """Session for scripts running outside a request."""
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def create_tables() -> None:
    """Create the counter tables if they are missing."""
    Base.metadata.create_all(bind=engine)
