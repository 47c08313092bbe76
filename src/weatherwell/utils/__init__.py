"""Module initialization."""

from weatherwell.utils.logging import setup_logging
from weatherwell.utils.startup_errors import (
    report_config_error,
    report_crash,
    report_interrupt,
    report_startup_error,
)

__all__ = [
    # Startup error reporting
    "report_config_error",
    "report_crash",
    "report_interrupt",
    "report_startup_error",
    # Logging
    "setup_logging",
]
