"""Tests for the periodic alert scheduler."""

import asyncio
import logging
from datetime import datetime
from typing import Any
from unittest.mock import AsyncMock, PropertyMock, patch

import pytest
from freezegun import freeze_time

from weatherwell.alerts.cycle import AlertCycle
from weatherwell.alerts.scheduler import AlertScheduler
from weatherwell.exceptions import AllProvidersUnavailableError
from weatherwell.models.alerts import CycleResult, CycleStatus, ForecastKind
from weatherwell.models.config import AppConfig, SchedulerConfig, ThresholdConfig

COMPLETED = CycleResult(status=CycleStatus.COMPLETED, source="Open-Meteo")


@pytest.fixture()
def cycle() -> AsyncMock:
    mock = AsyncMock(spec=AlertCycle)
    mock.run.return_value = COMPLETED
    return mock


def test_interval_seconds(cycle: AsyncMock) -> None:
    """Test the interval is read from the scheduler settings."""
    config = AppConfig(scheduler=SchedulerConfig(interval_minutes=30))
    assert AlertScheduler(cycle, config).interval_seconds == 1800


@pytest.mark.asyncio()
async def test_trigger_passes_current_settings(cycle: AsyncMock, app_config: AppConfig) -> None:
    """Test a manual trigger runs one cycle with the configured thresholds."""
    scheduler = AlertScheduler(cycle, app_config)
    result = await scheduler.trigger()

    assert result is COMPLETED
    cycle.run.assert_awaited_once_with(app_config.alerts, app_config.providers)


@pytest.mark.asyncio()
async def test_trigger_propagates_errors(cycle: AsyncMock, app_config: AppConfig) -> None:
    """Test a manual trigger surfaces cycle failures to the caller."""
    cycle.run.side_effect = AllProvidersUnavailableError("All weather services are unavailable")
    with pytest.raises(AllProvidersUnavailableError):
        await AlertScheduler(cycle, app_config).trigger()


@pytest.mark.asyncio()
async def test_run_forever_until_stopped(cycle: AsyncMock, app_config: AppConfig) -> None:
    """Test the loop ends once stop is requested."""
    scheduler = AlertScheduler(cycle, app_config)

    async def run_and_stop(*args: Any) -> CycleResult:
        assert scheduler.running
        scheduler.stop()
        return COMPLETED

    cycle.run.side_effect = run_and_stop
    await asyncio.wait_for(scheduler.run_forever(), timeout=5)

    assert cycle.run.await_count == 1
    assert not scheduler.running


@pytest.mark.asyncio()
async def test_failed_cycle_is_logged_and_loop_continues(
    cycle: AsyncMock, app_config: AppConfig, caplog: pytest.LogCaptureFixture
) -> None:
    """Test a failing cycle does not end the loop."""
    caplog.set_level(logging.INFO, logger="weatherwell")
    scheduler = AlertScheduler(cycle, app_config)

    calls = 0

    async def flaky(*args: Any) -> CycleResult:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise AllProvidersUnavailableError("unavailable")
        scheduler.stop()
        return COMPLETED

    cycle.run.side_effect = flaky
    with patch.object(
        AlertScheduler, "interval_seconds", new_callable=PropertyMock, return_value=0
    ):
        await asyncio.wait_for(scheduler.run_forever(), timeout=5)

    assert calls == 2
    assert "Alert cycle failed: unavailable" in caplog.text


@pytest.mark.asyncio()
async def test_cycles_do_not_overlap(cycle: AsyncMock, app_config: AppConfig) -> None:
    """Test concurrent triggers run one after the other."""
    events: list[str] = []

    async def slow_cycle(*args: Any) -> CycleResult:
        events.append("start")
        await asyncio.sleep(0.01)
        events.append("end")
        return COMPLETED

    cycle.run.side_effect = slow_cycle
    scheduler = AlertScheduler(cycle, app_config)
    await asyncio.gather(scheduler.trigger(), scheduler.trigger())

    assert events == ["start", "end", "start", "end"]


class TestForecasts:
    """Tests for scheduling the forecast summaries."""

    @pytest.fixture()
    def config(self) -> AppConfig:
        """Both summaries on, with a 30 minute alert interval."""
        return AppConfig(
            alerts=ThresholdConfig(enable_hourly_forecast=True, hourly_forecast_time="19:00"),
            scheduler=SchedulerConfig(interval_minutes=30),
        )

    @pytest.mark.parametrize(
        ("now", "expected"),
        [
            (datetime(2025, 6, 1, 7, 59), []),
            (datetime(2025, 6, 1, 8, 0), [ForecastKind.DAILY]),
            (datetime(2025, 6, 1, 8, 29), [ForecastKind.DAILY]),
            (datetime(2025, 6, 1, 8, 30), []),
            (datetime(2025, 6, 1, 19, 10), [ForecastKind.HOURLY]),
        ],
    )
    def test_due_within_one_interval(
        self, cycle: AsyncMock, config: AppConfig, now: datetime, expected: list[ForecastKind]
    ) -> None:
        assert AlertScheduler(cycle, config).due_forecasts(now) == expected

    def test_disabled_summaries_are_never_due(self, cycle: AsyncMock) -> None:
        config = AppConfig(alerts=ThresholdConfig(enable_daily_forecast=False))
        scheduler = AlertScheduler(cycle, config)

        assert scheduler.due_forecasts(datetime(2025, 6, 1, 8, 5)) == []
        assert scheduler.seconds_until_next_forecast(datetime(2025, 6, 1, 8, 5)) is None

    def test_seconds_until_next_forecast(self, cycle: AsyncMock, config: AppConfig) -> None:
        """Test the wait runs to the nearest summary, rolling over to tomorrow."""
        scheduler = AlertScheduler(cycle, config)

        assert scheduler.seconds_until_next_forecast(datetime(2025, 6, 1, 7, 45)) == 900
        assert scheduler.seconds_until_next_forecast(datetime(2025, 6, 1, 18, 0)) == 3600
        assert scheduler.seconds_until_next_forecast(datetime(2025, 6, 1, 20, 0)) == 12 * 3600

    @pytest.mark.asyncio()
    async def test_sent_once_a_day(self, cycle: AsyncMock, config: AppConfig) -> None:
        """Test a delivered summary is not sent again the same day."""
        cycle.run_forecast.return_value = CycleResult(
            status=CycleStatus.COMPLETED, forecast=ForecastKind.DAILY
        )
        scheduler = AlertScheduler(cycle, config)

        first = await scheduler.send_due_forecasts(datetime(2025, 6, 1, 8, 1))
        again = await scheduler.send_due_forecasts(datetime(2025, 6, 1, 8, 20))
        tomorrow = await scheduler.send_due_forecasts(datetime(2025, 6, 2, 8, 1))

        assert len(first) == 1
        assert again == []
        assert len(tomorrow) == 1
        cycle.run_forecast.assert_awaited_with(
            ForecastKind.DAILY, config.alerts, config.providers
        )

    @pytest.mark.asyncio()
    async def test_skipped_summary_is_retried(self, cycle: AsyncMock, config: AppConfig) -> None:
        """Test a summary skipped for lack of a location is tried again next pass."""
        cycle.run_forecast.return_value = CycleResult(status=CycleStatus.SKIPPED_NO_LOCATION)
        scheduler = AlertScheduler(cycle, config)

        await scheduler.send_due_forecasts(datetime(2025, 6, 1, 8, 1))
        await scheduler.send_due_forecasts(datetime(2025, 6, 1, 8, 20))

        assert cycle.run_forecast.await_count == 2

    @pytest.mark.asyncio()
    async def test_failure_is_logged(
        self, cycle: AsyncMock, config: AppConfig, caplog: pytest.LogCaptureFixture
    ) -> None:
        cycle.run_forecast.side_effect = AllProvidersUnavailableError("unavailable")
        scheduler = AlertScheduler(cycle, config)

        assert await scheduler.send_due_forecasts(datetime(2025, 6, 1, 19, 5)) == []
        assert "Forecast hourly-forecast failed: unavailable" in caplog.text

    @pytest.mark.asyncio()
    @freeze_time("2025-06-01 08:10:00", real_asyncio=True)
    async def test_loop_sends_due_summary(self, cycle: AsyncMock, config: AppConfig) -> None:
        """Test the loop sends a due summary after its alert cycle."""
        scheduler = AlertScheduler(cycle, config)

        async def run_and_stop(*args: Any) -> CycleResult:
            scheduler.stop()
            return COMPLETED

        cycle.run.side_effect = run_and_stop
        cycle.run_forecast.return_value = CycleResult(status=CycleStatus.COMPLETED)
        await asyncio.wait_for(scheduler.run_forever(), timeout=5)

        cycle.run_forecast.assert_awaited_once_with(
            ForecastKind.DAILY, config.alerts, config.providers
        )
