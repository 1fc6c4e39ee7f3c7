"""
Structured logging with structlog.

Every module logs through `get_logger(__name__)` with an event name plus
keyword fields; the request id bound by the middleware rides along on all
lines emitted while a request is served.
"""

import logging
import sys
import time
from typing import Any, Optional

import structlog
from starlette.requests import Request
from structlog.contextvars import bind_contextvars, merge_contextvars, reset_contextvars

from billboard_api.core.config import settings

# Chatty libraries whose own request/SQL logging duplicates ours
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "aiosqlite", "httpx")


def setup_logging() -> None:
    """Configure stdlib logging and structlog from LOG_LEVEL / LOG_FORMAT."""
    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)
    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))

    renderer = (
        structlog.processors.JSONRenderer()
        if settings.log_format == "json"
        else structlog.dev.ConsoleRenderer()
    )
    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


class LogContext:
    """Bind fields (e.g. request_id) to every log line inside the block."""

    def __init__(self, **fields: Any):
        self.fields = fields
        self._tokens = None

    def __enter__(self) -> "LogContext":
        self._tokens = bind_contextvars(**self.fields)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        reset_contextvars(**self._tokens)


def log_error(logger: structlog.stdlib.BoundLogger, error: Exception, **context: Any) -> None:
    """Log an unhandled exception with its traceback."""
    logger.error(
        "unhandled_error",
        error_type=type(error).__name__,
        error_message=str(error),
        exc_info=error,
        **context,
    )


def log_request(
    logger: structlog.stdlib.BoundLogger,
    request: Request,
    status_code: int,
    started: float,
    error: Optional[Exception] = None,
) -> None:
    """One line per served request; `started` is a time.perf_counter() reading."""
    fields = {
        "method": request.method,
        "path": request.url.path,
        "status_code": status_code,
        "duration_ms": round((time.perf_counter() - started) * 1000, 2),
        "client_host": request.client.host if request.client else None,
    }
    if error is not None:
        logger.error("request_failed", error=str(error), exc_info=error, **fields)
    else:
        logger.info("http_request", **fields)
