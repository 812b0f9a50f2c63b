"""Structured logging configuration using structlog.

The client never configures logging on import; applications call
configure_logging() once at startup. Events emitted by the client carry:
- operation: The client method being executed (e.g. "upload_file")
- timestamp: ISO8601 formatted timestamp

Request and response bodies and credentials are never logged.

Usage:
    from supastore.logging import configure_logging, get_logger

    configure_logging()
    logger = get_logger(__name__)
    logger.info("something_happened", extra_field="value")
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar

import structlog

from supastore.config import LogSettings

# Name of the client operation in progress for the current async context
operation_var: ContextVar[str | None] = ContextVar("operation", default=None)


def add_operation_context(logger: logging.Logger, method_name: str, event_dict: dict) -> dict:
    """Add the current operation name to all log entries."""
    operation = operation_var.get()
    if operation:
        event_dict["operation"] = operation
    return event_dict


def configure_logging(json_format: bool = True, level: str | int = logging.INFO) -> None:
    """Configure structlog and the stdlib root logger.

    Args:
        json_format: If True, output JSON logs. If False, output console-friendly logs.
        level: Root log level, as a name ("DEBUG") or a logging constant.
    """
    # Shared processors for both stdlib and structlog loggers
    shared_processors = [
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_operation_context,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_format:
        # JSON format for production/structured logging
        renderer = structlog.processors.JSONRenderer()
    else:
        # Console format for development
        renderer = structlog.dev.ConsoleRenderer()

    structlog.configure(
        processors=shared_processors
        + [
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # Route stdlib logging (including httpx) through the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # Configure root logger
    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(level.upper() if isinstance(level, str) else level)

    # Silence noisy loggers
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


def configure_logging_from_settings() -> None:
    """Configure logging from SUPASTORE_LOG_LEVEL / SUPASTORE_LOG_JSON.

    Does not require SUPABASE_URL or SUPABASE_API_KEY.
    """
    settings = LogSettings()
    configure_logging(json_format=settings.log_json, level=settings.log_level)


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger for the given name.

    Args:
        name: Logger name (typically __name__).

    Returns:
        A bound structlog logger.
    """
    return structlog.get_logger(name)


@contextmanager
def bind_operation(operation: str) -> Iterator[None]:
    """Set the operation name for the duration of a block.

    The previous value is restored on exit.
    """
    token = operation_var.set(operation)
    try:
        yield
    finally:
        operation_var.reset(token)
