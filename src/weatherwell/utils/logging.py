"""Logging for the WeatherWell services.

Modules log through ``logging.getLogger(__name__)``. ``setup_logging`` gives
the package logger a single handler whose structlog ``ProcessorFormatter``
renders each record as JSON or as a console line. The adapters log their own
provider traffic, so the HTTP client's per-request lines are held at WARNING.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

import structlog
from structlog.stdlib import ProcessorFormatter
from structlog.typing import Processor

from weatherwell.constants import BYTES_PER_MEGABYTE
from weatherwell.models.config import LoggingConfig
from weatherwell.utils.startup_errors import report_startup_error

# Applied to structlog events and to plain stdlib records alike
SHARED_PROCESSORS: list[Processor] = [
    structlog.stdlib.add_log_level,
    structlog.stdlib.add_logger_name,
    structlog.processors.TimeStamper(fmt="iso"),
]

HTTP_CLIENT_LOGGERS = ("httpx", "httpcore")


def _renderer(log_format: str) -> Processor:
    if log_format.lower() == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def build_handler(config: LoggingConfig) -> tuple[logging.Handler, str | None]:
    """Create the handler for the configured destination.

    A log file that cannot be opened falls back to stdout.

    Args:
        config: Logging configuration.

    Returns:
        The handler, and the reason for falling back when there was one.
    """
    if not config.file:
        return logging.StreamHandler(sys.stdout), None

    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        handler = RotatingFileHandler(
            path,
            maxBytes=config.max_size_mb * BYTES_PER_MEGABYTE,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        return logging.StreamHandler(sys.stdout), f"Failed to set up file logging: {e}"
    return handler, None


def setup_logging(config: LoggingConfig, name: str) -> logging.Logger:
    """Set up logging with the specified configuration.

    Calling it again replaces the handler rather than adding a second one.

    Args:
        config: Logging configuration.
        name: Logger name; "weatherwell" covers every module of the package.

    Returns:
        Configured logger instance.
    """
    level = getattr(logging, config.level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *SHARED_PROCESSORS,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        cache_logger_on_first_use=True,
    )

    handler, fallback_reason = build_handler(config)
    handler.setFormatter(
        ProcessorFormatter(processor=_renderer(config.format), foreign_pre_chain=SHARED_PROCESSORS)
    )
    handler.setLevel(level)

    logger = logging.getLogger(name)
    logger.handlers = [handler]
    logger.setLevel(level)
    for client_logger in HTTP_CLIENT_LOGGERS:
        logging.getLogger(client_logger).setLevel(max(level, logging.WARNING))

    if fallback_reason:
        report_startup_error("LOGGING_FILE_ERROR", fallback_reason, {"log_file": config.file})
        logger.error(fallback_reason)
    return logger
