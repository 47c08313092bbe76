"""Tests for the logging module.

Tests cover the setup_logging function, including configuration of log levels,
formatters, and handlers with various output formats.
"""

import logging
from io import StringIO
from logging.handlers import RotatingFileHandler
from pathlib import Path
from unittest.mock import patch

import pytest
import structlog
from structlog.stdlib import ProcessorFormatter

from weatherwell.models.config import LoggingConfig
from weatherwell.utils.logging import build_handler, setup_logging


@pytest.fixture()
def basic_config() -> LoggingConfig:
    """Create a basic logging configuration with no file output."""
    return LoggingConfig(level="INFO", file=None, format="json")


@pytest.fixture()
def file_config(tmp_path: Path) -> LoggingConfig:
    """Create a logging configuration with JSON file output in a missing directory."""
    return LoggingConfig(
        level="DEBUG",
        file=str(tmp_path / "logs" / "weatherwell.log"),
        format="json",
        max_size_mb=2,
        backup_count=4,
    )


def test_setup_logging_basic(basic_config: LoggingConfig) -> None:
    """Test basic logger setup with no file output."""
    logger = setup_logging(basic_config, "test_basic")

    assert logger.name == "test_basic"
    assert logger.level == logging.INFO
    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, logging.StreamHandler)
    assert isinstance(handler.formatter, ProcessorFormatter)


def test_setup_logging_replaces_handlers(basic_config: LoggingConfig) -> None:
    """Test calling setup twice does not duplicate handlers."""
    setup_logging(basic_config, "test_repeat")
    logger = setup_logging(basic_config, "test_repeat")
    assert len(logger.handlers) == 1


@pytest.mark.parametrize(
    ("level", "expected"),
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), ("bogus", logging.INFO)],
)
def test_log_levels(level: str, expected: int) -> None:
    """Test level names are case-insensitive and unknown names mean INFO."""
    logger = setup_logging(LoggingConfig(level=level), f"test_level_{level}")
    assert logger.level == expected


@pytest.mark.parametrize(
    ("log_format", "renderer"),
    [("json", structlog.processors.JSONRenderer), ("console", structlog.dev.ConsoleRenderer)],
)
def test_renderer_by_format(log_format: str, renderer: type) -> None:
    """Test the output format picks the structlog renderer."""
    logger = setup_logging(LoggingConfig(format=log_format), f"test_format_{log_format}")
    formatter = logger.handlers[0].formatter

    assert isinstance(formatter, ProcessorFormatter)
    assert isinstance(formatter.processors[-1], renderer)


def test_json_output(basic_config: LoggingConfig) -> None:
    """Test records from standard loggers are rendered as JSON."""
    stream = StringIO()
    with patch("sys.stdout", stream):
        logger = setup_logging(basic_config, "test_json_output")
    logger.info("Resolved weather from Open-Meteo")

    output = stream.getvalue()
    assert '"event": "Resolved weather from Open-Meteo"' in output
    assert '"level": "info"' in output


def test_file_logging(file_config: LoggingConfig) -> None:
    """Test a rotating file handler is created along with its directory."""
    logger = setup_logging(file_config, "test_file")

    assert len(logger.handlers) == 1
    handler = logger.handlers[0]
    assert isinstance(handler, RotatingFileHandler)
    assert handler.maxBytes == 2 * 1024 * 1024
    assert handler.backupCount == 4
    assert file_config.file is not None
    assert Path(file_config.file).parent.is_dir()

    logger.info("written to file")
    handler.flush()
    assert "written to file" in Path(file_config.file).read_text(encoding="utf-8")
    handler.close()


def test_file_logging_failure_falls_back_to_console(file_config: LoggingConfig) -> None:
    """Test an unusable log file is reported and console logging is used instead."""
    with (
        patch(
            "weatherwell.utils.logging.RotatingFileHandler",
            side_effect=PermissionError("denied"),
        ),
        patch("weatherwell.utils.logging.report_startup_error") as startup_error,
    ):
        logger = setup_logging(file_config, "test_file_failure")

    startup_error.assert_called_once()
    assert startup_error.call_args.args[0] == "LOGGING_FILE_ERROR"
    assert len(logger.handlers) == 1
    assert not isinstance(logger.handlers[0], RotatingFileHandler)
    assert startup_error.call_args.args[2] == {"log_file": file_config.file}


def test_build_handler_reports_fallback_reason(file_config: LoggingConfig) -> None:
    with patch(
        "weatherwell.utils.logging.RotatingFileHandler", side_effect=PermissionError("denied")
    ):
        handler, reason = build_handler(file_config)

    assert type(handler) is logging.StreamHandler
    assert reason == "Failed to set up file logging: denied"


def test_build_handler_console(basic_config: LoggingConfig) -> None:
    handler, reason = build_handler(basic_config)
    assert type(handler) is logging.StreamHandler
    assert reason is None


@pytest.mark.parametrize(
    ("level", "expected"), [("DEBUG", logging.WARNING), ("ERROR", logging.ERROR)]
)
def test_http_client_loggers_are_quieted(level: str, expected: int) -> None:
    """Test per-request HTTP client lines stay below the configured level."""
    setup_logging(LoggingConfig(level=level), f"test_http_{level}")

    assert logging.getLogger("httpx").level == expected
    assert logging.getLogger("httpcore").level == expected
