"""Command line entry point for background weather alerts.

The last known device location is read from a small JSON file
(``{"latitude": ..., "longitude": ..., "timestamp": ...}``) at the start of
every cycle, so whatever writes that file controls where alerts are checked.
"""

import argparse
import asyncio
import logging
from pathlib import Path

from pydantic import ValidationError

from weatherwell.alerts.cycle import AlertCycle
from weatherwell.alerts.notifier import LoggingNotificationSink
from weatherwell.alerts.scheduler import AlertScheduler
from weatherwell.constants import DEFAULT_CONFIG_PATH
from weatherwell.exceptions import ConfigurationError
from weatherwell.models.alerts import ForecastKind, StoredLocation
from weatherwell.orchestrator import WeatherOrchestrator
from weatherwell.server.main import load_config
from weatherwell.utils.logging import setup_logging
from weatherwell.utils.startup_errors import report_config_error, report_crash, report_interrupt

logger = logging.getLogger(__name__)


class FileLocationSource:
    """Reads the stored device location from a JSON file."""

    def __init__(self, path: Path) -> None:
        self.path = path

    async def __call__(self) -> StoredLocation | None:
        if not self.path.is_file():
            return None
        try:
            return StoredLocation.model_validate_json(self.path.read_text(encoding="utf-8"))
        except (OSError, ValidationError) as e:
            logger.warning(f"Unreadable location file {self.path}: {e}")
            return None


def main() -> None:
    """Run alert cycles until interrupted, once with ``--once``, or send one summary."""
    parser = argparse.ArgumentParser(description="WeatherWell background alerts")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--location-file",
        type=Path,
        required=True,
        help="JSON file holding the last known device location",
    )
    parser.add_argument("--once", action="store_true", help="Run a single cycle and exit")
    parser.add_argument(
        "--forecast",
        choices=[kind.value for kind in ForecastKind],
        default=None,
        help="Send one forecast summary now and exit",
    )
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        report_config_error(e)
        raise SystemExit(1) from e

    setup_logging(config.logging, "weatherwell")
    cycle = AlertCycle(
        WeatherOrchestrator(),
        LoggingNotificationSink(),
        FileLocationSource(args.location_file),
        max_location_age_hours=config.scheduler.max_location_age_hours,
    )
    scheduler = AlertScheduler(cycle, config)

    try:
        if args.forecast:
            result = asyncio.run(scheduler.send_forecast(ForecastKind(args.forecast)))
            logger.info(f"Forecast {args.forecast} {result.status.value}")
        elif args.once:
            result = asyncio.run(scheduler.trigger())
            logger.info(f"Alert cycle {result.status.value}")
        else:
            asyncio.run(scheduler.run_forever())
    except KeyboardInterrupt:
        report_interrupt()
    except Exception as e:
        report_crash(e)
        raise SystemExit(1) from e


if __name__ == "__main__":
    main()
