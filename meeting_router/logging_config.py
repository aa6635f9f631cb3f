"""
structlog setup for the router.

Every line carries the service name and, inside a request, the method and
route the request middleware binds. Events are snake_case names with the
details as key/values, e.g. ``agents_resolved`` or ``quota_fallback_used``.
"""

import logging
import sys
from typing import Any

import structlog
from meeting_router.config import config

SERVICE_NAME = "meeting-router"


def _add_service(logger: Any, method_name: str, event_dict: dict) -> dict:
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def configure_logging():
    """
    Route structlog through the stdlib root logger on stdout.

    DEBUG=true gives coloured console lines; otherwise one JSON object per
    line, with Hebrew agent names kept readable.
    """

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, config.LOG_LEVEL.upper(), logging.INFO),
    )

    # Every Airtable and Cal.com page fetch would otherwise show up at INFO
    for noisy_logger in ["httpx", "httpcore", "urllib3"]:
        logging.getLogger(noisy_logger).setLevel(logging.WARNING)

    processors = [
        structlog.contextvars.merge_contextvars,
        _add_service,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.format_exc_info,
    ]

    if config.DEBUG:
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer(ensure_ascii=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(**fields: Any) -> None:
    """Replace the per-request log context (method, endpoint, ...)."""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**fields)


def get_logger(name: str = None) -> Any:
    """Module logger, e.g. ``logger = get_logger(__name__)``."""
    return structlog.get_logger(name)


configure_logging()

logger = get_logger("meeting_router")
