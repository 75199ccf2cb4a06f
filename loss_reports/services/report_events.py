"""Post-commit hooks for report lifecycle events."""

from typing import Awaitable, Callable, List

from loss_reports.models.report import Report
from loss_reports.utils.logger import get_logger

log = get_logger(__name__)

ReportHook = Callable[[Report], Awaitable[None]]


class ReportEvents:
    """
    Subscribers notified after a new report row is committed.

    Emitted only when an insert actually created a row, never for a
    duplicate identity. A failing subscriber is logged and skipped; it
    never affects the create that triggered it.
    """

    def __init__(self) -> None:
        self._created_hooks: List[ReportHook] = []

    def on_created(self, hook: ReportHook) -> None:
        """Subscribe a coroutine function to the "report created" event."""
        self._created_hooks.append(hook)
        log.debug("report created hook subscribed", hook=getattr(hook, "__qualname__", repr(hook)))

    async def emit_created(self, report: Report) -> None:
        """Run every "report created" hook, swallowing their failures."""
        for hook in self._created_hooks:
            try:
                await hook(report)
            except Exception as e:
                log.warning(
                    "report created hook failed",
                    report_id=report.id,
                    error=str(e),
                    error_type=type(e).__name__,
                )

    @property
    def subscriber_count(self) -> int:
        return len(self._created_hooks)
