"""Idempotent report store: validation, identity, insert-if-absent, CRUD."""

import time
from contextlib import contextmanager
from typing import Callable, Optional

from sqlalchemy.exc import InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from loss_reports.exceptions import (
    ResourceNotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from loss_reports.models.report import Report
from loss_reports.repositories.report_repository import ReportRepository
from loss_reports.schemas.reports import ReportCreate, ReportUpdate
from loss_reports.services.derivation import (
    derive_request_identity,
    normalize,
    validate_submission,
)
from loss_reports.services.export_service import ExportRow, project_reports
from loss_reports.services.report_events import ReportEvents
from loss_reports.utils.idempotency import InFlightCreates
from loss_reports.utils.logger import get_logger, truncate

log = get_logger(__name__)

_UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, PoolTimeoutError, ConnectionError)
MAX_IDENTITY_LENGTH = 128


def _now_ms() -> int:
    return int(time.time() * 1000)


@contextmanager
def storage_errors(operation: str):
    """Translate "cannot reach the store" failures into StorageUnavailableError."""
    try:
        yield
    except _UNAVAILABLE_ERRORS as e:
        log.error("storage unavailable", operation=operation, error=str(e))
        raise StorageUnavailableError(details={"operation": operation}) from e


def _optional_text(value: Optional[str], collapse: bool = True) -> Optional[str]:
    if value is None:
        return None
    text = normalize(value) if collapse else str(value).strip()
    return text or None


class ReportService:
    """
    Service for creating, listing, updating, deleting and exporting reports.

    ``create_report`` is idempotent: a submission is stored at most once
    per request identity, and every caller gets the stored row back.
    """

    def __init__(
        self,
        report_repository: ReportRepository,
        in_flight: InFlightCreates,
        events: ReportEvents,
        clock: Callable[[], int] = _now_ms,
    ):
        """
        Initialize report service.

        Args:
            report_repository: Request-scoped repository
            in_flight: Process-wide coalescer for concurrent creates
            events: Post-commit hook registry
            clock: Returns the current time in epoch milliseconds
        """
        self.report_repository = report_repository
        self.in_flight = in_flight
        self.events = events
        self.clock = clock

    def _field_values(self, payload: ReportCreate | ReportUpdate) -> dict:
        """Validate a payload and build the mutable column values."""
        validated = validate_submission(
            payload.manager, payload.restaurant, payload.reason, payload.amount
        )
        return {
            "manager": validated.manager,
            "restaurant": validated.restaurant,
            "reason": validated.reason,
            "amount": validated.amount,
            "start": _optional_text(payload.start),
            "end": _optional_text(payload.end),
            # Line breaks in comments are kept.
            "comment": _optional_text(payload.comment, collapse=False),
        }

    async def create_report(
        self, payload: ReportCreate, explicit_identity: Optional[str] = None
    ) -> Report:
        """
        Store a report at most once per request identity.

        Args:
            payload: Submitted fields
            explicit_identity: Client-supplied idempotency key; derived from
                the normalized fields when empty

        Returns:
            The report stored under the identity, new or pre-existing

        Raises:
            ValidationError: If the fields are invalid (nothing is written)
            StorageUnavailableError: If the store cannot be reached
        """
        values = self._field_values(payload)

        identity = (explicit_identity or "").strip()
        if len(identity) > MAX_IDENTITY_LENGTH:
            raise ValidationError(
                "request identity too long", details={"max_length": MAX_IDENTITY_LENGTH}
            )
        if not identity:
            identity = derive_request_identity(
                values["manager"],
                values["restaurant"],
                values["reason"],
                values["amount"],
                values["start"],
                values["end"],
                values["comment"],
            )
        values["request_identity"] = identity

        return await self.in_flight.run(identity, lambda: self._insert(values))

    async def _insert(self, values: dict) -> Report:
        row = {**values, "created_at": self.clock()}
        with storage_errors("create"):
            report, created = await self.report_repository.insert_if_absent(row)

        if not created:
            log.info(
                "duplicate report submission",
                report_id=report.id,
                identity=values["request_identity"],
            )
            return report

        log.info(
            "report created",
            report_id=report.id,
            restaurant=report.restaurant,
            amount=report.amount,
            comment=truncate(report.comment, 80),
        )
        await self.events.emit_created(report)
        return report

    async def list_reports(self) -> list[Report]:
        """All reports, newest first."""
        with storage_errors("list"):
            return await self.report_repository.list_all()

    async def update_report(self, report_id: int, payload: ReportUpdate) -> Report:
        """
        Overwrite the editable fields of an existing report.

        Raises:
            ResourceNotFoundError: If no report has this ID
            ValidationError: If the new fields are invalid
        """
        with storage_errors("update"):
            report = await self.report_repository.get_by_id(report_id)
            if report is None:
                raise ResourceNotFoundError("Report", str(report_id))

            values = self._field_values(payload)
            report = await self.report_repository.update(report, values)

        log.info("report updated", report_id=report.id)
        return report

    async def delete_report(self, report_id: int) -> None:
        """Delete a report. Unknown IDs are ignored."""
        with storage_errors("delete"):
            deleted = await self.report_repository.delete_by_id(report_id)
        log.info("report delete", report_id=report_id, deleted=deleted)

    async def export_rows(self) -> list[ExportRow]:
        """Project every stored report into an export row."""
        with storage_errors("export"):
            reports = await self.report_repository.list_all()
        rows = project_reports(reports)
        log.info("reports exported", count=len(rows))
        return rows
