"""
Centralized Logging Configuration.

All modules must use this logging setup. Do not create standalone loggers.

Loggers are structlog loggers wrapping the stdlib logger of the same name,
so stdlib levels and handlers decide what is emitted. Output is never
coloured. The package installs a NullHandler on the "tfe" logger: nothing
is printed until the application configures logging, either its own way
or with setup_logging().

Structured fields in every record rendered by setup_logging():
    timestamp   - ISO 8601 UTC timestamp
    level       - Log level (debug, info, warning, error, critical)
    logger      - Module path (e.g., tfe.client)
    event       - Log message
    func_name   - Function that emitted the log
    lineno      - Line number in source file

Usage:
    from tfe.core.logging import get_logger, setup_logging

    # Optional, at application start (defaults from TFE_LOG_* variables)
    setup_logging(level="DEBUG", format_type="console")

    # Get logger in modules
    logger = get_logger(__name__)
    logger.debug("API request", method="GET", path="/api/v2/ping")
"""

import logging
import sys
from typing import Any

import structlog
from structlog.typing import Processor

from tfe.core.config import get_settings

VALID_FORMATS = frozenset({"console", "json"})


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.processors.CallsiteParameterAdder(
            parameters=[
                structlog.processors.CallsiteParameter.FUNC_NAME,
                structlog.processors.CallsiteParameter.LINENO,
            ],
        ),
    ]


def setup_logging(
    level: str | None = None,
    format_type: str | None = None,
) -> None:
    """
    Configure structured logging on stdout.

    Defaults are read from Settings (TFE_LOG_LEVEL, TFE_LOG_FORMAT).
    Parameters passed to this function override them.

    Args:
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
        format_type: Output format ('json' or 'console').

    Raises:
        ValueError: If the format is not recognised.
        AttributeError: If the level is not a valid log level.
    """
    settings = get_settings()

    effective_level = level if level is not None else settings.log_level
    effective_format = format_type if format_type is not None else settings.log_format

    if effective_format not in VALID_FORMATS:
        raise ValueError(f"Unknown log format: {effective_format}")

    log_level = getattr(logging, effective_level.upper())

    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    if effective_format == "console":
        renderer: Processor = structlog.dev.ConsoleRenderer(colors=False)
    else:
        renderer = structlog.processors.JSONRenderer()

    formatter = structlog.stdlib.ProcessorFormatter(
        processor=renderer,
        foreign_pre_chain=shared_processors,
    )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def get_logger(name: str) -> Any:
    """
    Get a logger instance for the given name.

    Records carry the processed event dict. The setup_logging() formatter
    renders it; any other handler prints it as plain text.

    Args:
        name: Logger name, typically __name__

    Returns:
        structlog logger bound to the stdlib logger of that name
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=_shared_processors() + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )
