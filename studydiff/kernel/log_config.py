from __future__ import annotations

import logging

import structlog

from studydiff.config import Settings, get_settings


def _get_log_level(settings: Settings) -> int:
    return getattr(logging, settings.log_level.upper(), logging.INFO)


def configure_logging(settings: Settings | None = None) -> None:
    """Configure structlog for studydiff callers (CLIs, report jobs, tests).

    Library modules only call `structlog.get_logger()`; nothing here runs at import.
    """
    settings = settings or get_settings()
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.JSONRenderer()
            if settings.log_format == "json"
            else structlog.dev.ConsoleRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(_get_log_level(settings)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=False,
    )
