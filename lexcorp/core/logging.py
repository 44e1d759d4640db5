"""
core/logging.py
---------------
Structured logging using structlog.
DEBUG=true  → human-readable console output
DEBUG=false → JSON (for log aggregators like Datadog, CloudWatch)

Request context (path, user, organization, role) is carried through
structlog.contextvars, so service-level log lines are attributable to the
principal without passing it to every logger call.
"""

import logging
import sys

import structlog

from lexcorp.core.config import settings


def configure_logging() -> None:
    log_level = logging.DEBUG if settings.DEBUG else logging.INFO

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=log_level,
    )

    if not settings.DEBUG:
        logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
        logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
        logging.getLogger("botocore").setLevel(logging.WARNING)
        logging.getLogger("httpx").setLevel(logging.WARNING)

    shared_processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    renderer = (
        structlog.dev.ConsoleRenderer()
        if settings.DEBUG
        else structlog.processors.JSONRenderer()
    )

    structlog.configure(
        processors=shared_processors + [renderer],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str = __name__):
    return structlog.get_logger(name)


def start_request_context(path: str, method: str) -> None:
    """Reset per-request log context; called once per incoming request."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_path=path, request_method=method)


def bind_principal_context(
    user_id: str,
    organization_id: str | None = None,
    role: str | None = None,
) -> None:
    structlog.contextvars.bind_contextvars(
        user_id=user_id,
        organization_id=organization_id,
        role=role,
    )
