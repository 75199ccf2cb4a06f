"""Loss reports router."""

from datetime import datetime, timezone
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Header, Response, status

from loss_reports.config import Settings, get_settings
from loss_reports.dependencies import ReportServiceDep
from loss_reports.schemas.reports import (
    ReportCreate,
    ReportListResponse,
    ReportResponse,
    ReportUpdate,
)
from loss_reports.services.export_service import write_workbook
from loss_reports.utils.logger import get_logger

log = get_logger(__name__)

router = APIRouter(prefix="/reports", tags=["Reports"])

XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@router.get("", response_model=ReportListResponse)
async def list_reports(report_service: ReportServiceDep) -> ReportListResponse:
    """List all reports, newest first."""
    reports = await report_service.list_reports()
    return ReportListResponse(
        reports=[ReportResponse.model_validate(r, from_attributes=True) for r in reports],
        total=len(reports),
    )


@router.post("", response_model=ReportResponse)
async def create_report(
    request: ReportCreate,
    report_service: ReportServiceDep,
    idempotency_key: Annotated[Optional[str], Header(alias="Idempotency-Key")] = None,
) -> ReportResponse:
    """
    Record a report.

    Retries of the same submission return the already stored report. The
    idempotency key comes from ``request_id`` in the body, then the
    ``Idempotency-Key`` header, then the submitted fields.
    """
    body_key = (request.request_id or "").strip()
    report = await report_service.create_report(
        request, explicit_identity=body_key or idempotency_key
    )
    return ReportResponse.model_validate(report, from_attributes=True)


@router.get("/export.xlsx")
async def export_reports(
    report_service: ReportServiceDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> Response:
    """Download every report as an xlsx workbook."""
    rows = await report_service.export_rows()
    content = write_workbook(rows, currency_symbol=settings.currency_symbol)

    today = datetime.now(timezone.utc).date().isoformat()
    filename = f"{settings.export_filename_prefix}_{today}.xlsx"
    return Response(
        content=content,
        media_type=XLSX_MEDIA_TYPE,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


@router.put("/{report_id}", response_model=ReportResponse)
async def update_report(
    report_id: int,
    request: ReportUpdate,
    report_service: ReportServiceDep,
) -> ReportResponse:
    """Overwrite the editable fields of a report."""
    report = await report_service.update_report(report_id, request)
    return ReportResponse.model_validate(report, from_attributes=True)


@router.delete("/{report_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_report(report_id: int, report_service: ReportServiceDep) -> Response:
    """Delete a report. Deleting an unknown ID also succeeds."""
    await report_service.delete_report(report_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
