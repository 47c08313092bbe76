"""One background alert evaluation cycle.

A cycle walks ``IDLE -> FETCHING -> EVALUATING -> NOTIFYING -> IDLE``. It
reads the stored device location once, resolves a single snapshot through
the orchestrator, evaluates the thresholds and hands every firing alert to
the notification sink. Forecast summaries reuse the same steps with a
summary builder in place of the evaluator.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import datetime

from weatherwell.alerts.evaluator import AlertEvaluator
from weatherwell.alerts.forecast import FORECAST_BUILDERS
from weatherwell.alerts.notifier import NotificationSink
from weatherwell.constants import MAX_LOCATION_AGE_HOURS
from weatherwell.models.alerts import (
    CycleResult,
    CycleState,
    CycleStatus,
    ForecastKind,
    StoredLocation,
)
from weatherwell.models.config import ProviderConfig, ThresholdConfig
from weatherwell.models.weather import ResolvedSnapshot
from weatherwell.orchestrator import WeatherOrchestrator

logger = logging.getLogger(__name__)

LocationSource = Callable[[], Awaitable[StoredLocation | None]]


class AlertCycle:
    """Runs evaluation cycles against the last known device location."""

    def __init__(
        self,
        orchestrator: WeatherOrchestrator,
        sink: NotificationSink,
        location_source: LocationSource,
        max_location_age_hours: float = MAX_LOCATION_AGE_HOURS,
    ) -> None:
        """Initialize the cycle runner.

        Args:
            orchestrator: Resolves the snapshot to evaluate
            sink: Receives the notifications
            location_source: Async callable returning the stored location, if any
            max_location_age_hours: Older locations skip the cycle
        """
        self.orchestrator = orchestrator
        self.sink = sink
        self.location_source = location_source
        self.max_location_age_hours = max_location_age_hours
        self.state = CycleState.IDLE

    async def run(
        self,
        thresholds: ThresholdConfig,
        providers: ProviderConfig | None = None,
        now: datetime | None = None,
    ) -> CycleResult:
        """Run one cycle.

        Args:
            thresholds: Thresholds and enable flags, read once for this cycle
            providers: Provider preference and credentials
            now: Reference time; the current time when omitted

        Returns:
            What the cycle did

        Raises:
            AllProvidersUnavailableError: If no provider could supply a snapshot
        """
        now = now or datetime.now()

        if not thresholds.enable_notifications:
            logger.info("Notifications disabled, skipping alert cycle")
            return CycleResult(status=CycleStatus.SKIPPED_DISABLED)

        location = await self._current_location(now)
        if isinstance(location, CycleResult):
            return location

        try:
            resolved = await self._resolve(location, providers)

            self.state = CycleState.EVALUATING
            events, failed = AlertEvaluator(thresholds).evaluate(resolved.snapshot, now)

            self.state = CycleState.NOTIFYING
            sent = []
            for event in events:
                try:
                    await self.sink.notify(event)
                    sent.append(event)
                except Exception as e:
                    logger.error(f"Failed to deliver {event.title}: {e}")
                    if event.category is not None:
                        failed.append(event.category)
        finally:
            self.state = CycleState.IDLE

        return CycleResult(
            status=CycleStatus.COMPLETED,
            source=resolved.source,
            notifications=sent,
            failed_categories=failed,
        )

    async def run_forecast(
        self,
        kind: ForecastKind,
        thresholds: ThresholdConfig,
        providers: ProviderConfig | None = None,
        now: datetime | None = None,
    ) -> CycleResult:
        """Send one forecast summary for the stored location.

        Args:
            kind: Which summary to send
            thresholds: Enable flags, read once for this run
            providers: Provider preference and credentials
            now: Reference time; the current time when omitted

        Returns:
            What the run did; ``notifications`` is empty when delivery failed
            or there was nothing to summarize

        Raises:
            AllProvidersUnavailableError: If no provider could supply a snapshot
        """
        now = now or datetime.now()

        if thresholds.forecast_at(kind) is None:
            logger.info(f"{kind.value} disabled, skipping")
            return CycleResult(status=CycleStatus.SKIPPED_DISABLED, forecast=kind)

        location = await self._current_location(now)
        if isinstance(location, CycleResult):
            return location.model_copy(update={"forecast": kind})

        try:
            resolved = await self._resolve(location, providers)

            self.state = CycleState.EVALUATING
            event = FORECAST_BUILDERS[kind](resolved.snapshot, now)

            self.state = CycleState.NOTIFYING
            sent = []
            if event is None:
                logger.info(f"No upcoming weather for {kind.value}")
            else:
                try:
                    await self.sink.notify(event)
                    sent.append(event)
                    logger.info(f"Forecast sent: {event.title}")
                except Exception as e:
                    logger.error(f"Failed to deliver {event.title}: {e}")
        finally:
            self.state = CycleState.IDLE

        return CycleResult(
            status=CycleStatus.COMPLETED,
            source=resolved.source,
            notifications=sent,
            forecast=kind,
        )

    async def _current_location(self, now: datetime) -> StoredLocation | CycleResult:
        """The stored location, or the skipped result when it is missing or stale."""
        location = await self.location_source()
        if location is None:
            logger.info("No stored location, skipping alert cycle")
            return CycleResult(status=CycleStatus.SKIPPED_NO_LOCATION)
        if location.is_stale(now, self.max_location_age_hours):
            logger.warning(
                f"Stored location is {location.age(now)} old, skipping alert cycle"
            )
            return CycleResult(status=CycleStatus.SKIPPED_STALE_LOCATION)
        return location

    async def _resolve(
        self, location: StoredLocation, providers: ProviderConfig | None
    ) -> ResolvedSnapshot:
        providers = providers or ProviderConfig()
        self.state = CycleState.FETCHING
        resolved = await self.orchestrator.resolve(
            location.latitude,
            location.longitude,
            preferred_provider=providers.preferred,
            credentials=providers.credentials,
            days=providers.forecast_days,
            timeout=providers.timeout_seconds,
        )
        logger.info(f"Alert cycle weather fetched from {resolved.source}")
        return resolved
