"""Health check router."""

from datetime import datetime, timezone
from typing import Annotated

from fastapi import APIRouter, Depends

from loss_reports import __version__
from loss_reports.config import Settings, get_settings
from loss_reports.dependencies import DatabaseDep
from loss_reports.schemas.health import HealthResponse, ServiceStatus
from loss_reports.utils.logger import get_logger

router = APIRouter()
log = get_logger(__name__)


@router.get("/health", response_model=HealthResponse)
async def health_check(
    database: DatabaseDep,
    settings: Annotated[Settings, Depends(get_settings)],
) -> HealthResponse:
    """
    Health check for the report store and the notifier.

    Returns:
        HealthResponse with status and service details
    """
    services = {}
    overall_status = "ok"

    try:
        await database.ping()
        services["database"] = ServiceStatus(
            status="healthy",
            message="Connected",
            details={"dialect": database.engine.dialect.name},
        )
    except Exception as e:
        log.error("health check failed", service="database", error=str(e))
        services["database"] = ServiceStatus(status="unhealthy", message="Service unavailable")
        overall_status = "degraded"

    if settings.notifications_enabled:
        services["telegram"] = ServiceStatus(status="healthy", message="Notifications enabled")
    else:
        services["telegram"] = ServiceStatus(
            status="disabled", message="BOT_TOKEN or TG_CHAT_ID not set"
        )

    return HealthResponse(
        status=overall_status,
        version=__version__,
        services=services,
        timestamp=datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
    )
