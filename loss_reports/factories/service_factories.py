"""Factory functions for business logic services."""

from sqlalchemy.ext.asyncio import AsyncSession

from loss_reports.repositories.report_repository import ReportRepository
from loss_reports.services.report_events import ReportEvents
from loss_reports.services.report_service import ReportService
from loss_reports.utils.idempotency import InFlightCreates


def get_report_service(
    db_session: AsyncSession, in_flight: InFlightCreates, events: ReportEvents
) -> ReportService:
    """
    Create ReportService with dependencies.

    Note: Not cached because depends on request-scoped db session.

    Args:
        db_session: Database session
        in_flight: Process-wide create coalescer
        events: Process-wide post-commit hooks

    Returns:
        ReportService instance
    """
    return ReportService(
        report_repository=ReportRepository(db_session),
        in_flight=in_flight,
        events=events,
    )
