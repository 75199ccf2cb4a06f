"""Repository layer for data access."""

from loss_reports.repositories.report_repository import ReportRepository

__all__ = [
    "ReportRepository",
]
