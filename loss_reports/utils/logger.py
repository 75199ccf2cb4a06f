"""Structured logging setup built on structlog."""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional

import structlog

_request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)


def get_request_id() -> Optional[str]:
    """Return the request ID bound to the current context, if any."""
    return _request_id_var.get()


def set_request_id(request_id: Optional[str] = None) -> str:
    """Bind a request ID to the current context, generating one if needed."""
    value = request_id or uuid.uuid4().hex
    _request_id_var.set(value)
    return value


def clear_request_id() -> None:
    """Drop the request ID from the current context."""
    _request_id_var.set(None)


def _add_request_id(logger, method_name, event_dict):
    """structlog processor that stamps every event with the request ID."""
    request_id = _request_id_var.get()
    if request_id is not None:
        event_dict.setdefault("request_id", request_id)
    return event_dict


def configure_logging(log_level: str = "INFO", debug: bool = False) -> None:
    """
    Configure structlog and the stdlib root logger.

    Debug mode renders colored console output; otherwise one JSON object
    is emitted per line.

    Args:
        log_level: Minimum level name (e.g. "INFO")
        debug: Use the human-friendly console renderer
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    renderer = (
        structlog.dev.ConsoleRenderer()
        if debug
        else structlog.processors.JSONRenderer(ensure_ascii=False)
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            _add_request_id,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for the given module name."""
    return structlog.get_logger(name)


def truncate(value: Optional[str], limit: int = 200) -> str:
    """Shorten free text for log output."""
    if not value:
        return ""
    if len(value) <= limit:
        return value
    return value[:limit] + "..."
