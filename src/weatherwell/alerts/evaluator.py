"""Threshold alert evaluation.

Checks a snapshot against the user's thresholds and builds one notification
per firing category. Categories are evaluated in a fixed order and each one
is isolated: an error while checking one category is logged and the rest
are still checked.
"""

import logging
from collections.abc import Callable
from datetime import datetime

from weatherwell.constants import AQI_ALERT_THRESHOLD, UV_EXTREME, UV_VERY_HIGH
from weatherwell.models.alerts import AlertCategory, NotificationEvent
from weatherwell.models.config import ThresholdConfig
from weatherwell.models.weather import Snapshot
from weatherwell.normalize.air_quality import aqi_level

logger = logging.getLogger(__name__)

# (display name, keywords); the first group with a matching keyword wins
SEVERE_WEATHER_GROUPS: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Thunderstorm", ("thunderstorm", "thunder", "lightning")),
    ("Heavy Rain", ("heavy rain", "torrential")),
    ("Snow", ("snow", "blizzard", "snowstorm")),
    ("Hail", ("hail",)),
)


def uv_level(uv_index: float) -> str:
    """Describe a UV index that already crossed the alert threshold."""
    if uv_index >= UV_EXTREME:
        return "Extreme"
    if uv_index >= UV_VERY_HIGH:
        return "Very High"
    return "High"


def severe_condition(condition: str) -> str | None:
    """Find the severe weather group named by a condition text.

    Args:
        condition: Provider condition text, any case

    Returns:
        The group name, or None when no keyword matches
    """
    text = condition.lower()
    for name, keywords in SEVERE_WEATHER_GROUPS:
        if any(keyword in text for keyword in keywords):
            return name
    return None


class AlertEvaluator:
    """Evaluates alert thresholds against a snapshot."""

    def __init__(self, thresholds: ThresholdConfig) -> None:
        """Initialize the evaluator.

        Args:
            thresholds: Thresholds and enable flags for this evaluation
        """
        self.thresholds = thresholds

    def evaluate(
        self, snapshot: Snapshot, now: datetime | None = None
    ) -> tuple[list[NotificationEvent], list[AlertCategory]]:
        """Evaluate every enabled category in order.

        Args:
            snapshot: Weather to check
            now: Reference time for "later today"; the current time when omitted.
                Judged on the location's clock when the snapshot reports its offset

        Returns:
            The notifications to send, and the categories whose check raised
        """
        now = snapshot.local_now(now)
        checks: list[tuple[AlertCategory, bool, Callable[[], NotificationEvent | None]]] = [
            (
                AlertCategory.UMBRELLA,
                self.thresholds.enable_umbrella_alerts,
                lambda: self.check_umbrella(snapshot, now),
            ),
            (
                AlertCategory.WIND,
                self.thresholds.enable_wind_alerts,
                lambda: self.check_wind(snapshot),
            ),
            (AlertCategory.UV, self.thresholds.enable_uv_alerts, lambda: self.check_uv(snapshot)),
            (
                AlertCategory.TEMPERATURE_HIGH,
                self.thresholds.enable_temperature_alerts,
                lambda: self.check_temperature(snapshot),
            ),
            (
                AlertCategory.AIR_QUALITY,
                self.thresholds.enable_aqi_alerts,
                lambda: self.check_air_quality(snapshot),
            ),
            (
                AlertCategory.SEVERE_WEATHER,
                self.thresholds.enable_severe_weather_alerts,
                lambda: self.check_severe_weather(snapshot),
            ),
        ]

        events: list[NotificationEvent] = []
        failed: list[AlertCategory] = []
        for category, enabled, check in checks:
            if not enabled:
                continue
            try:
                event = check()
            except Exception as e:
                logger.error(f"Error checking {category.value}: {e}")
                failed.append(category)
                continue
            if event is not None:
                logger.info(f"Alert fired: {event.title}")
                events.append(event)
        return events, failed

    def check_umbrella(self, snapshot: Snapshot, now: datetime) -> NotificationEvent | None:
        """Rain chance over the rest of today against the rain threshold.

        Historical snapshots have nothing upcoming and never fire.
        """
        if snapshot.is_historical:
            return None

        chances = [
            hour.precipitation_probability
            for hour in snapshot.hourly
            if hour.time > now
            and hour.time.date() == now.date()
            and hour.precipitation_probability is not None
        ]
        today = snapshot.day(now.date())
        if today is not None and today.precipitation_probability is not None:
            chances.append(today.precipitation_probability)
        if not chances:
            return None

        rain_chance = round(max(chances))
        if rain_chance < self.thresholds.rain_threshold:
            return None
        return NotificationEvent(
            title="☂️ Umbrella Alert",
            body=f"{rain_chance}% chance of rain upcoming. Don't forget your umbrella!",
            payload={"type": AlertCategory.UMBRELLA.value, "rain_chance": rain_chance},
        )

    def check_wind(self, snapshot: Snapshot) -> NotificationEvent | None:
        wind_speed = snapshot.current.wind_speed
        if wind_speed < self.thresholds.wind_speed_threshold:
            return None
        return NotificationEvent(
            title="💨 Strong Wind Alert",
            body=f"Wind speed is {round(wind_speed)} km/h. Take precautions when outdoors.",
            payload={"type": AlertCategory.WIND.value, "wind_speed": wind_speed},
        )

    def check_uv(self, snapshot: Snapshot) -> NotificationEvent | None:
        uv_index = snapshot.current.uv_index
        if uv_index is None or uv_index < self.thresholds.uv_threshold:
            return None
        return NotificationEvent(
            title="☀️ UV Index Alert",
            body=(
                f"UV Index is {uv_index:g} ({uv_level(uv_index)}). "
                "Wear sunscreen and protective clothing!"
            ),
            payload={"type": AlertCategory.UV.value, "uv_index": uv_index},
        )

    def check_temperature(self, snapshot: Snapshot) -> NotificationEvent | None:
        """High or low temperature; the low check only runs when high did not fire."""
        temperature = snapshot.current.temperature
        limits = self.thresholds.temperature_threshold
        if temperature >= limits.high:
            return NotificationEvent(
                title="🔥 High Temperature Alert",
                body=(
                    f"Temperature is {round(temperature)}°C. "
                    "Stay hydrated and avoid prolonged sun exposure."
                ),
                payload={
                    "type": AlertCategory.TEMPERATURE_HIGH.value,
                    "temperature": temperature,
                },
            )
        if temperature <= limits.low:
            return NotificationEvent(
                title="❄️ Low Temperature Alert",
                body=f"Temperature is {round(temperature)}°C. Bundle up and stay warm!",
                payload={
                    "type": AlertCategory.TEMPERATURE_LOW.value,
                    "temperature": temperature,
                },
            )
        return None

    def check_air_quality(self, snapshot: Snapshot) -> NotificationEvent | None:
        if snapshot.air_quality is None:
            return None
        aqi = snapshot.air_quality.aqi
        if aqi < AQI_ALERT_THRESHOLD:
            return None
        return NotificationEvent(
            title="🌫️ Air Quality Alert",
            body=f"AQI is {aqi} ({aqi_level(aqi)}). Consider limiting outdoor activities.",
            payload={"type": AlertCategory.AIR_QUALITY.value, "aqi": aqi},
        )

    def check_severe_weather(self, snapshot: Snapshot) -> NotificationEvent | None:
        group = severe_condition(snapshot.current.condition)
        if group is None:
            return None
        return NotificationEvent(
            title=f"⚠️ Severe Weather: {group}",
            body=f"{group} detected in your area. Take necessary precautions.",
            payload={"type": AlertCategory.SEVERE_WEATHER.value, "condition": group},
        )
