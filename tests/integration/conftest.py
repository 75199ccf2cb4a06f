"""Integration test configuration with a real SQLite database file."""

import itertools
from typing import AsyncGenerator

import pytest

from loss_reports.database import Database, StoreConfig
from loss_reports.repositories.report_repository import ReportRepository
from loss_reports.services.report_events import ReportEvents
from loss_reports.services.report_service import ReportService
from loss_reports.utils.idempotency import InFlightCreates


def pytest_collection_modifyitems(items):
    """Apply integration marker to all tests in this directory."""
    for item in items:
        if "/integration/" in str(item.fspath):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
async def database(tmp_path) -> AsyncGenerator[Database, None]:
    """Fresh file-backed database per test."""
    db = Database(StoreConfig(database_url=f"sqlite+aiosqlite:///{tmp_path / 'reports.sqlite'}"))
    await db.init()
    yield db
    await db.dispose()


@pytest.fixture
def clock():
    """Strictly increasing epoch-millisecond clock."""
    ticks = itertools.count(1767780000000, 1000)
    return lambda: next(ticks)


@pytest.fixture
def in_flight() -> InFlightCreates:
    return InFlightCreates()


@pytest.fixture
def events() -> ReportEvents:
    return ReportEvents()


@pytest.fixture
def service_factory(database, in_flight, events, clock):
    """Build a ReportService bound to an open session, as a request would."""

    def _build(session, coalescer: InFlightCreates | None = None) -> ReportService:
        return ReportService(
            report_repository=ReportRepository(session),
            in_flight=coalescer or in_flight,
            events=events,
            clock=clock,
        )

    return _build


@pytest.fixture
def count_reports(database):
    """Count stored rows through a fresh session."""

    async def _count() -> int:
        async with database.session_factory() as session:
            return len(await ReportRepository(session).list_all())

    return _count
