"""
structlog setup.

Development gets a coloured console renderer; staging and production emit
one JSON object per line. Events are snake_case with keyword fields, e.g.
``logger.info("day_closed", outlet_id=1, business_date="2024-03-10")``.
"""

import logging
import sys

import structlog
from structlog.types import EventDict, Processor, WrappedLogger

from cafe_ledger.config.settings import Settings, get_settings

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("aiosqlite", "uvicorn.access", "httpx")


def app_context_processor(settings: Settings) -> Processor:
    """Processor stamping every event with app name, version and environment."""
    context = {
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.environment,
    }

    def add_app_context(_: WrappedLogger, __: str, event_dict: EventDict) -> EventDict:
        for key, value in context.items():
            event_dict.setdefault(key, value)
        return event_dict

    return add_app_context


def _renderer(settings: Settings) -> list[Processor]:
    if settings.environment == "development":
        return [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]
    return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog and the stdlib root logger it writes through."""
    settings = settings or get_settings()

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        app_context_processor(settings),
        *_renderer(settings),
    ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, settings.log_level),
    )
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
