"""
structlog setup for AgroStock.

Development gets a colored console renderer; staging and production emit
one JSON object per line. Event names are snake_case, context goes in
keyword arguments: ``logger.info("count_created", count_id=..., items=...)``.
"""

import logging
import sys
from typing import Any

import structlog
from structlog.types import Processor

from agrostock.config.settings import Settings, get_settings


def add_app_context(
    logger: logging.Logger, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Stamp every event with the app name, version and environment."""
    settings = get_settings()
    event_dict.setdefault("app", settings.app_name)
    event_dict.setdefault("version", settings.app_version)
    event_dict.setdefault("environment", settings.environment)
    return event_dict


def _processors(settings: Settings) -> list[Processor]:
    chain: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        add_app_context,
    ]
    if settings.environment == "development":
        chain.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))
    else:
        chain.extend(
            [
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(ensure_ascii=False),
            ]
        )
    return chain


def configure_logging(settings: Settings | None = None) -> None:
    """Route structlog through stdlib logging at the configured level."""
    settings = settings or get_settings()
    level = logging.getLevelName(settings.log_level)

    structlog.configure(
        processors=_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level, force=True)

    # aiosqlite logs every statement at DEBUG
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Module logger: ``logger = get_logger(__name__)``."""
    return structlog.get_logger(name)
