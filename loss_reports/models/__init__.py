"""Database models."""

from loss_reports.models.report import Report

__all__ = [
    "Report",
]
