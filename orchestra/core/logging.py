from __future__ import annotations

import logging
import logging.config
import time
from typing import Any
from uuid import uuid4

import structlog
from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.responses import Response

from orchestra.core.config import Settings

TRACE_HEADER = "X-Trace-ID"

# Third-party loggers that keep their own handlers unless routed here.
_ROUTED_LOGGERS = ("uvicorn", "uvicorn.error", "uvicorn.access", "sqlalchemy")

_LOG_FILE_MAX_BYTES = 5 * 1024 * 1024


def bind_log_context(
    *,
    trace_id: str | None = None,
    user_id: int | None = None,
    task_id: int | None = None,
) -> None:
    """Attach request fields to every event logged from the current context."""
    fields = {"trace_id": trace_id, "user_id": user_id, "task_id": task_id}
    bound = {key: value for key, value in fields.items() if value is not None}
    if bound:
        structlog.contextvars.bind_contextvars(**bound)


def clear_log_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.stdlib.get_logger(name)


def _build_handlers(settings: Settings) -> dict[str, dict[str, Any]]:
    handlers: dict[str, dict[str, Any]] = {
        "stdout": {"class": "logging.StreamHandler", "formatter": "structured"},
    }
    if settings.log_file:
        handlers["file"] = {
            "class": "logging.handlers.RotatingFileHandler",
            "formatter": "structured",
            "filename": settings.log_file,
            "maxBytes": _LOG_FILE_MAX_BYTES,
            "backupCount": 3,
            "encoding": "utf-8",
        }
    return handlers


def configure_logging(settings: Settings) -> None:
    """
    Route stdlib and structlog output through one structured formatter.

    Events are rendered as JSON lines, or with the console renderer when
    ``LOG_FORMAT=console``. Request context bound with ``bind_log_context``
    is merged into every event, including uvicorn and SQLAlchemy records.
    """
    level = settings.log_level.upper()
    pre_chain: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]
    renderer: Any = (
        structlog.dev.ConsoleRenderer()
        if settings.log_format == "console"
        else structlog.processors.JSONRenderer()
    )

    handlers = _build_handlers(settings)
    handler_names = list(handlers)
    loggers: dict[str, dict[str, Any]] = {
        name: {"handlers": handler_names, "level": level, "propagate": False}
        for name in _ROUTED_LOGGERS
    }
    loggers[""] = {"handlers": handler_names, "level": level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structured": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        structlog.processors.format_exc_info,
                        renderer,
                    ],
                }
            },
            "handlers": handlers,
            "loggers": loggers,
        }
    )

    structlog.configure(
        processors=[
            *pre_chain,
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


class TraceContextMiddleware(BaseHTTPMiddleware):
    """Give each request a trace id, echo it back and log the request outcome."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        trace_id = (request.headers.get(TRACE_HEADER) or "").strip() or f"trace-{uuid4().hex}"
        clear_log_context()
        bind_log_context(trace_id=trace_id)
        logger = get_logger("orchestra.api.request")
        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception:
            logger.exception("request.failed", method=request.method, path=request.url.path)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
        response.headers[TRACE_HEADER] = trace_id
        logger.info(
            "request.completed",
            method=request.method,
            path=request.url.path,
            status_code=response.status_code,
            duration_ms=elapsed_ms,
        )
        clear_log_context()
        return response
