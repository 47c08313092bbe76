"""Stderr reports for failures outside the logging system.

Used before logging is configured (an unreadable config file, a log file
that cannot be opened) and when a command line entry point ends abnormally.
Each report is a short block such as::

    [2025-06-01T08:00:00] CONFIG_ERROR: Configuration file not found
    Details:
      path: /etc/weatherwell/config.yaml
"""

import sys
from datetime import datetime
from typing import Any

from weatherwell.exceptions import ConfigurationError


def _write(*lines: str) -> None:
    sys.stderr.write("\n" + "\n".join(lines) + "\n")
    sys.stderr.flush()


def _stamped(headline: str) -> str:
    return f"[{datetime.now().isoformat()}] {headline}"


def report_startup_error(tag: str, message: str, details: dict[str, Any] | None = None) -> None:
    """Write a startup failure and its details to stderr.

    Args:
        tag: Short upper-case label, e.g. "CONFIG_ERROR" or "LOGGING_FILE_ERROR"
        message: What went wrong
        details: Extra context, one line per key
    """
    lines = [_stamped(f"{tag}: {message}")]
    if details:
        lines.append("Details:")
        lines.extend(f"  {key}: {value}" for key, value in details.items())
    _write(*lines)


def report_config_error(error: ConfigurationError) -> None:
    """Report a configuration file that could not be loaded."""
    report_startup_error("CONFIG_ERROR", error.message, error.details)


def report_interrupt() -> None:
    _write("", "Shutdown requested by user (Ctrl+C)")


def report_crash(error: Exception) -> None:
    """Report an exception that ended an entry point."""
    _write(_stamped(f"Unexpected Error: {type(error).__name__}: {error}"))
