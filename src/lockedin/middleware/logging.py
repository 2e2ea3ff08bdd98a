"""Structured logging configuration with structlog.

Every event is stamped with the service name and environment so logs from
several deployments can share one sink. Request-scoped fields (request_id,
method, path) are bound by ``RequestIdMiddleware`` through contextvars.
"""

import logging

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from lockedin.config import Settings


def service_context(settings: Settings) -> Processor:
    """Processor adding ``service`` and ``environment`` unless the event already set them."""
    static = {"service": settings.service_name, "environment": settings.environment}

    def _add(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
        for key, value in static.items():
            event_dict.setdefault(key, value)
        return event_dict

    return _add


def setup_logging(settings: Settings) -> None:
    """Configure structlog for JSON (deployments) or console (local, tests) output."""
    renderer: Processor = (
        structlog.processors.JSONRenderer() if settings.log_format == "json" else structlog.dev.ConsoleRenderer()
    )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            service_context(settings),
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    level = getattr(logging, settings.log_level.upper(), logging.INFO)
    logging.basicConfig(level=level)
    # SQL echo goes through the engine's own flag, not the root level.
    logging.getLogger("sqlalchemy.engine").setLevel(logging.INFO if settings.database_echo else logging.WARNING)
