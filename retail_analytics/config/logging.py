"""
Logging Configuration for Electronics Retailer Analytics

Structured logging routed through the stdlib logging tree. Report frames are
printed on stdout, so every log record goes to stderr.
"""

import logging
import sys
from typing import Any, List, Optional

import structlog
from structlog.processors import JSONRenderer, TimeStamper
from structlog.stdlib import add_log_level, ProcessorFormatter

from retail_analytics.config.settings import get_settings

# Libraries that log per query or per file at INFO
QUIET_LOGGERS = ("sqlalchemy.engine", "sqlalchemy.pool", "faker")


def _shared_processors() -> List[Any]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        add_log_level,
        TimeStamper(fmt="iso"),
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]


def configure_logging(log_level: Optional[str] = None, log_format: Optional[str] = None) -> None:
    """
    Configure structured logging for a report run.

    Args:
        log_level: Override log level (DEBUG, INFO, WARNING, ERROR)
        log_format: Override renderer, "json" or "text"
    """
    settings = get_settings()
    level = (log_level or settings.monitoring.log_level).upper()
    log_format = (log_format or settings.monitoring.log_format).lower()
    numeric_level = getattr(logging, level, logging.INFO)

    processors = _shared_processors()
    structlog.configure(
        processors=processors + [ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if log_format == "json":
        renderer = JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)
    handler.setFormatter(ProcessorFormatter(processor=renderer, foreign_pre_chain=processors))

    root_logger = logging.getLogger()
    for existing in root_logger.handlers[:]:
        root_logger.removeHandler(existing)
    root_logger.addHandler(handler)
    root_logger.setLevel(numeric_level)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    structlog.get_logger(__name__).debug(
        "Logging configured",
        level=level,
        format=log_format,
        environment=settings.app_env,
    )


def bind_run_context(**fields: Any) -> None:
    """Attach fields (source, run mode) to every log line of the current run"""
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(**fields)
