"""Tests for the forecast summary notifications."""

from datetime import date, datetime, timedelta, timezone
from typing import Any

from weatherwell.alerts.forecast import daily_forecast_event, hourly_forecast_event
from weatherwell.models.weather import DailyEntry

MORNING = datetime(2025, 6, 1, 8, 0)
EVENING = datetime(2025, 6, 1, 19, 20)


def evening_hours(hour_factory: Any) -> list[Any]:
    """Hours from 18:00 to 02:00, cooling by a degree an hour."""
    chances = [0, 10, 40, 80, 20, 31, 30, 90, 90]
    start = datetime(2025, 6, 1, 18, 0)
    return [
        hour_factory(start + timedelta(hours=i), chance, temperature=20.0 - i)
        for i, chance in enumerate(chances)
    ]


class TestDailyForecast:
    """Tests for the morning summary."""

    def test_summary(self, snapshot_factory: Any) -> None:
        event = daily_forecast_event(snapshot_factory(), MORNING)

        assert event.title == "🌤️ Today's Weather"
        assert event.body == "London: 20°C, Partly cloudy. High 23°C, Low 15°C"
        assert event.payload == {
            "type": "daily-forecast",
            "temperature": 20,
            "condition": "Partly cloudy",
            "location": "London",
            "rain_chance": 10,
        }
        assert event.category is None

    def test_rain_and_uv_are_mentioned(self, snapshot_factory: Any) -> None:
        """Test a wet day with very high UV adds both notes."""
        today = DailyEntry(
            date=date(2025, 6, 1),
            max_temp=24.4,
            min_temp=13.6,
            condition="Showers",
            icon="wi-showers",
            wind_speed=12.0,
            precipitation_probability=45,
        )
        event = daily_forecast_event(snapshot_factory(uv_index=9.0, daily=[today]), MORNING)

        assert event.body == (
            "London: 20°C, Partly cloudy. High 24°C, Low 14°C. "
            "45% chance of rain. High UV - wear sunscreen!"
        )
        assert event.payload["rain_chance"] == 45

    def test_without_daily_entries(self, snapshot_factory: Any) -> None:
        """Test high and low fall back to the current temperature."""
        event = daily_forecast_event(snapshot_factory(temperature=12.4, daily=[]), MORNING)

        assert event.body == "London: 12°C, Partly cloudy. High 12°C, Low 12°C"
        assert event.payload["rain_chance"] == 0


class TestHourlyForecast:
    """Tests for the next-hours summary."""

    def test_summary(self, snapshot_factory: Any, hour_factory: Any) -> None:
        """Test six hours from the current one are summarized."""
        snapshot = snapshot_factory(hourly=evening_hours(hour_factory))
        event = hourly_forecast_event(snapshot, EVENING)

        assert event is not None
        assert event.title == "⏰ Next 6 Hours Weather"
        assert event.body == (
            "London next 6h: 14-19°C. Rain expected in 3 hour(s). "
            "Currently 20°C, Partly cloudy"
        )
        assert event.payload == {
            "type": "hourly-forecast",
            "location": "London",
            "min_temp": 14,
            "max_temp": 19,
            "rain_hours": 3,
        }

    def test_dry_hours(self, snapshot_factory: Any, hour_factory: Any) -> None:
        hours = [hour_factory(datetime(2025, 6, 1, 20, 0), 5.0, temperature=16.0)]
        event = hourly_forecast_event(snapshot_factory(hourly=hours), EVENING)

        assert event is not None
        assert event.body == "London next 6h: 16-16°C. Currently 20°C, Partly cloudy"
        assert event.payload["rain_hours"] == 0

    def test_nothing_upcoming(self, snapshot_factory: Any, hour_factory: Any) -> None:
        hours = [hour_factory(datetime(2025, 6, 1, 17, 0), 50.0)]
        assert hourly_forecast_event(snapshot_factory(hourly=hours), EVENING) is None

    def test_judged_on_location_clock(self, snapshot_factory: Any, hour_factory: Any) -> None:
        """Test the first hour is picked on the location's clock, not the host's."""
        snapshot = snapshot_factory(
            hourly=evening_hours(hour_factory), utc_offset_seconds=9 * 3600
        )
        event = hourly_forecast_event(snapshot, datetime(2025, 6, 1, 10, 30, tzinfo=timezone.utc))

        assert event is not None
        assert event.payload["max_temp"] == 19
