"""Clients for external services."""

from loss_reports.clients.telegram_client import TelegramNotifier, render_report_message

__all__ = ["TelegramNotifier", "render_report_message"]
