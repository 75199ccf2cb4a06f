"""FastAPI dependency injection providers."""

from typing import Annotated

from fastapi import Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from loss_reports.database import Database, get_database, get_db
from loss_reports.factories.service_factories import get_report_service
from loss_reports.services.report_events import ReportEvents
from loss_reports.services.report_service import ReportService
from loss_reports.utils.idempotency import InFlightCreates


# Type aliases for cleaner router signatures
DbSession = Annotated[AsyncSession, Depends(get_db)]
DatabaseDep = Annotated[Database, Depends(get_database)]


# ============================================================================
# Process-wide state (created in the application lifespan)
# ============================================================================


def get_in_flight_creates(request: Request) -> InFlightCreates:
    """Get the create coalescer from app state."""
    return request.app.state.in_flight_creates


def get_report_events(request: Request) -> ReportEvents:
    """Get the post-commit hook registry from app state."""
    return request.app.state.report_events


InFlightDep = Annotated[InFlightCreates, Depends(get_in_flight_creates)]
ReportEventsDep = Annotated[ReportEvents, Depends(get_report_events)]


# ============================================================================
# Services (request-scoped)
# ============================================================================


def get_report_service_dep(
    db: DbSession, in_flight: InFlightDep, events: ReportEventsDep
) -> ReportService:
    """Get ReportService with database session."""
    return get_report_service(db, in_flight, events)


ReportServiceDep = Annotated[ReportService, Depends(get_report_service_dep)]
