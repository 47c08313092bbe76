"""Periodic alert cycles on asyncio.

Cycles are serialized by a single lock: a manual trigger while a scheduled
cycle is running waits for it rather than overlapping. Forecast summaries
share the lock and are sent at most once a day each, within one interval of
their configured time.
"""

import asyncio
import logging
from datetime import date, datetime, timedelta

from weatherwell.alerts.cycle import AlertCycle
from weatherwell.constants import SECONDS_PER_MINUTE
from weatherwell.models.alerts import CycleResult, CycleStatus, ForecastKind
from weatherwell.models.config import AppConfig


class AlertScheduler:
    """Runs an alert cycle every configured interval."""

    def __init__(self, cycle: AlertCycle, config: AppConfig) -> None:
        """Initialize the scheduler.

        Args:
            cycle: Cycle runner
            config: Application configuration; thresholds are re-read every cycle
        """
        self.cycle = cycle
        self.config = config
        self.logger = logging.getLogger(__name__)
        self._lock = asyncio.Lock()
        self._stop = asyncio.Event()
        self._running = False
        self._forecast_sent: dict[ForecastKind, date] = {}

    @property
    def running(self) -> bool:
        return self._running

    @property
    def interval_seconds(self) -> int:
        return self.config.scheduler.interval_minutes * SECONDS_PER_MINUTE

    async def trigger(self) -> CycleResult:
        """Run one cycle now, waiting for any cycle already in progress.

        Raises:
            AllProvidersUnavailableError: If no provider could supply a snapshot
        """
        async with self._lock:
            return await self.cycle.run(self.config.alerts, self.config.providers)

    async def send_forecast(self, kind: ForecastKind) -> CycleResult:
        """Send one forecast summary now, waiting for any cycle in progress.

        Raises:
            AllProvidersUnavailableError: If no provider could supply a snapshot
        """
        async with self._lock:
            return await self.cycle.run_forecast(
                kind, self.config.alerts, self.config.providers
            )

    def due_forecasts(self, now: datetime) -> list[ForecastKind]:
        """Summaries whose time passed less than one interval ago and not yet sent today."""
        window = timedelta(seconds=self.interval_seconds)
        due = []
        for kind in ForecastKind:
            at = self.config.alerts.forecast_at(kind)
            if at is None or self._forecast_sent.get(kind) == now.date():
                continue
            scheduled = datetime.combine(now.date(), at)
            if scheduled <= now < scheduled + window:
                due.append(kind)
        return due

    def seconds_until_next_forecast(self, now: datetime) -> float | None:
        """Time until the next enabled summary is scheduled, if any is enabled."""
        waits = []
        for kind in ForecastKind:
            at = self.config.alerts.forecast_at(kind)
            if at is None:
                continue
            scheduled = datetime.combine(now.date(), at)
            if scheduled <= now:
                scheduled += timedelta(days=1)
            waits.append((scheduled - now).total_seconds())
        return min(waits, default=None)

    async def send_due_forecasts(self, now: datetime | None = None) -> list[CycleResult]:
        """Send every summary that is due. Failures are logged and retried next pass."""
        now = now or datetime.now()
        results = []
        for kind in self.due_forecasts(now):
            try:
                result = await self.send_forecast(kind)
            except Exception as e:
                self.logger.error(f"Forecast {kind.value} failed: {e}")
                continue
            if result.status == CycleStatus.COMPLETED:
                self._forecast_sent[kind] = now.date()
            results.append(result)
        return results

    def _sleep_seconds(self) -> float:
        until_forecast = self.seconds_until_next_forecast(datetime.now())
        if until_forecast is None:
            return self.interval_seconds
        return min(self.interval_seconds, until_forecast)

    async def run_forever(self) -> None:
        """Run cycles until ``stop()`` is called. Cycle failures are logged."""
        self._running = True
        self._stop.clear()
        self.logger.info(
            f"Alert scheduler started, interval {self.config.scheduler.interval_minutes} min"
        )
        try:
            while not self._stop.is_set():
                try:
                    result = await self.trigger()
                    self.logger.info(
                        f"Alert cycle {result.status.value}, "
                        f"{len(result.notifications)} notification(s) sent"
                    )
                except Exception as e:
                    self.logger.error(f"Alert cycle failed: {e}")
                await self.send_due_forecasts()

                try:
                    await asyncio.wait_for(self._stop.wait(), timeout=self._sleep_seconds())
                except asyncio.TimeoutError:
                    pass
        finally:
            self._running = False
            self.logger.info("Alert scheduler stopped")

    def stop(self) -> None:
        """Ask the loop to end after the current cycle."""
        self._stop.set()
