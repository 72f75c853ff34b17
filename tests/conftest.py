# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Iterator
from datetime import datetime, timedelta

import pytest
import pytz
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import NullPool

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("COUNTER_BACKEND", "sql")

from encore_counters.api.v1.dependencies import get_counter_service_dep
from encore_counters.core.clock import Clock
from encore_counters.db.session import Base
from encore_counters.main import app as fastapi_app
from encore_counters.repositories.counter_store import SqlCounterStore
from encore_counters.services.counters import CounterService

IST = pytz.timezone("Asia/Kolkata")


def ist(*args: int) -> datetime:
    """Return an aware datetime for wall-clock time in India Standard Time."""
    return IST.localize(datetime(*args))


class FakeTime:
    """Controllable clock source; tests move it across boundaries."""

    def __init__(self, start: datetime) -> None:
        self.current = start

    def __call__(self) -> datetime:
        return self.current

    def set(self, *args: int) -> None:
        self.current = ist(*args)

    def advance(self, **kwargs: float) -> None:
        self.current = self.current + timedelta(**kwargs)


@pytest.fixture()
def engine(tmp_path) -> Iterator[Engine]:
    # A file database with one connection per session lets tests interleave
    # writers the way independent request handlers would.
    engine = create_engine(
        f"sqlite:///{tmp_path / 'counters.db'}",
        connect_args={"check_same_thread": False},
        poolclass=NullPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def fake_time() -> FakeTime:
    """Start every test at noon IST on Monday 2026-10-19."""
    return FakeTime(ist(2026, 10, 19, 12, 0, 0))


@pytest.fixture()
def clock(fake_time: FakeTime) -> Clock:
    return Clock(timezone="Asia/Kolkata", week_start="sunday", source=fake_time)


@pytest.fixture()
def store(db_session: Session) -> SqlCounterStore:
    return SqlCounterStore(db_session)


@pytest.fixture()
def counter_service(store: SqlCounterStore, clock: Clock) -> CounterService:
    return CounterService(store, clock)


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def client(app: FastAPI, counter_service: CounterService) -> Iterator[TestClient]:
    app.dependency_overrides[get_counter_service_dep] = lambda: counter_service
    try:
        with TestClient(app, base_url="http://test") as test_client:
            yield test_client
    finally:
        app.dependency_overrides.pop(get_counter_service_dep, None)
