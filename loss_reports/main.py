"""FastAPI application entry point."""

from contextlib import asynccontextmanager
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from loss_reports import __version__
from loss_reports.config import get_settings
from loss_reports.database import Database, StoreConfig
from loss_reports.factories.client_factories import build_telegram_notifier
from loss_reports.services.report_events import ReportEvents
from loss_reports.utils.idempotency import InFlightCreates

# Import routers
from loss_reports.routers import health, reports

# Import middleware
from loss_reports.middleware import logging_middleware, register_exception_handlers
from loss_reports.utils.logger import configure_logging, get_logger

settings = get_settings()

# Configure logging early
configure_logging(log_level=settings.log_level, debug=settings.debug)
log = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    log.info("starting application", debug=settings.debug, log_level=settings.log_level)

    database = Database(StoreConfig.from_settings(settings))
    await database.init()
    app.state.database = database

    app.state.in_flight_creates = InFlightCreates()
    events = ReportEvents()
    notifier = build_telegram_notifier(settings)
    if notifier is not None:
        events.on_created(notifier.notify_report_created)
        log.info("telegram notifications enabled", chat_id=settings.tg_chat_id)
    else:
        log.info("telegram notifications disabled")
    app.state.report_events = events

    yield

    log.info("shutting down application")
    await database.dispose()


app = FastAPI(
    title="Loss Reports API",
    description="Loss incident reports: idempotent intake, Telegram alerts, xlsx export",
    version=__version__,
    lifespan=lifespan,
)

# Register exception handlers first
register_exception_handlers(app)

_cors_origins = settings.get_cors_origins_list()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_cors_origins or ["*"],
    allow_credentials=bool(_cors_origins),
    allow_methods=["*"],
    allow_headers=["*"],
)

# Request logging middleware
app.middleware("http")(logging_middleware)

# Register routers
app.include_router(health.router, prefix="/api/v1", tags=["Health"])
app.include_router(reports.router, prefix="/api/v1", tags=["Reports"])


@app.get("/")
async def root():
    """Root endpoint with API information."""
    return {
        "name": "Loss Reports API",
        "version": __version__,
        "endpoints": {
            "health": "/api/v1/health",
            "reports": "/api/v1/reports",
            "export": "/api/v1/reports/export.xlsx",
        },
        "docs": "/docs",
    }


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "loss_reports.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug,
        log_level=settings.log_level.lower(),
    )
