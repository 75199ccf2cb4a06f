"""Export projection and xlsx serialization for reports."""

from dataclasses import astuple, dataclass
from io import BytesIO
from typing import Iterable, Optional

from openpyxl import Workbook

from loss_reports.models.report import Report
from loss_reports.services.derivation import duration_hours, split_restaurant

SHEET_TITLE = "Loss"

# Header labels in ExportRow field order.
EXPORT_COLUMNS = (
    "ID",
    "ТУ",
    "Код ресторана",
    "Ресторан",
    "Причина",
    "Сумма потерь (₸)",
    "Начало",
    "Конец",
    "Длительность (ч)",
    "Комментарий",
    "Создано (ts)",
)
AMOUNT_COLUMN_INDEX = 5


@dataclass(frozen=True)
class ExportRow:
    """One spreadsheet row derived from a stored report."""

    id: int
    manager: str
    restaurant_code: str
    restaurant_name: str
    reason: str
    amount: int
    start: str
    end: str
    duration_hours: Optional[float]
    comment: str
    created_at: int

    def as_tuple(self) -> tuple:
        return astuple(self)


def project_report(report: Report) -> ExportRow:
    """Map one stored report to its export row."""
    restaurant = split_restaurant(report.restaurant)
    return ExportRow(
        id=report.id,
        manager=report.manager,
        restaurant_code=restaurant.code,
        restaurant_name=restaurant.name,
        reason=report.reason,
        amount=int(report.amount),
        start=report.start or "",
        end=report.end or "",
        duration_hours=duration_hours(report.start, report.end),
        comment=report.comment or "",
        created_at=report.created_at,
    )


def project_reports(reports: Iterable[Report]) -> list[ExportRow]:
    """Project reports to export rows, newest first (ties by higher ID first)."""
    rows = [project_report(r) for r in reports]
    rows.sort(key=lambda row: (row.created_at, row.id), reverse=True)
    return rows


def write_workbook(rows: Iterable[ExportRow], currency_symbol: str = "₸") -> bytes:
    """
    Serialize export rows to an xlsx workbook.

    Args:
        rows: Rows in the order they should appear
        currency_symbol: Suffix used in the amount number format

    Returns:
        The workbook file contents
    """
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = SHEET_TITLE
    sheet.append(list(EXPORT_COLUMNS))

    amount_format = f'#,##0 "{currency_symbol}"'
    for row in rows:
        sheet.append(list(row.as_tuple()))
        sheet.cell(row=sheet.max_row, column=AMOUNT_COLUMN_INDEX + 1).number_format = amount_format

    buffer = BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()
