"""Forecast summary notifications.

A morning digest of the day and an evening digest of the next few hours.
These are sent on a schedule and carry their own payload types, so they are
never reported as threshold alert categories.
"""

from datetime import datetime

from weatherwell.constants import FORECAST_RAIN_MENTION, FORECAST_SUMMARY_HOURS, UV_VERY_HIGH
from weatherwell.models.alerts import ForecastKind, NotificationEvent
from weatherwell.models.weather import Snapshot


def daily_forecast_event(snapshot: Snapshot, now: datetime | None = None) -> NotificationEvent:
    """Summarize today's weather.

    Args:
        snapshot: Weather to summarize
        now: Reference time; the location's current time when omitted

    Returns:
        The daily summary notification
    """
    now = snapshot.local_now(now)
    current = snapshot.current
    today = snapshot.day(now.date())
    location = snapshot.location.name

    temperature = round(current.temperature)
    high = round(today.max_temp if today else current.temperature)
    low = round(today.min_temp if today else current.temperature)
    rain_chance = 0
    if today is not None and today.precipitation_probability is not None:
        rain_chance = round(today.precipitation_probability)

    body = f"{location}: {temperature}°C, {current.condition}. High {high}°C, Low {low}°C"
    if rain_chance > FORECAST_RAIN_MENTION:
        body += f". {rain_chance}% chance of rain"
    if current.uv_index is not None and current.uv_index >= UV_VERY_HIGH:
        body += ". High UV - wear sunscreen!"

    return NotificationEvent(
        title="🌤️ Today's Weather",
        body=body,
        payload={
            "type": ForecastKind.DAILY.value,
            "temperature": temperature,
            "condition": current.condition,
            "location": location,
            "rain_chance": rain_chance,
        },
    )


def hourly_forecast_event(
    snapshot: Snapshot, now: datetime | None = None
) -> NotificationEvent | None:
    """Summarize the next hours, starting with the current one.

    Args:
        snapshot: Weather to summarize
        now: Reference time; the location's current time when omitted

    Returns:
        The summary notification, or None when no upcoming hours are known
    """
    now = snapshot.local_now(now)
    hour_start = now.replace(minute=0, second=0, microsecond=0)
    upcoming = [hour for hour in snapshot.hourly if hour.time >= hour_start]
    upcoming = upcoming[:FORECAST_SUMMARY_HOURS]
    if not upcoming:
        return None

    location = snapshot.location.name
    temperatures = [round(hour.temperature) for hour in upcoming]
    min_temp, max_temp = min(temperatures), max(temperatures)
    rain_hours = sum(
        1
        for hour in upcoming
        if hour.precipitation_probability is not None
        and hour.precipitation_probability > FORECAST_RAIN_MENTION
    )

    body = f"{location} next {FORECAST_SUMMARY_HOURS}h: {min_temp}-{max_temp}°C. "
    if rain_hours:
        body += f"Rain expected in {rain_hours} hour(s). "
    body += f"Currently {round(snapshot.current.temperature)}°C, {snapshot.current.condition}"

    return NotificationEvent(
        title=f"⏰ Next {FORECAST_SUMMARY_HOURS} Hours Weather",
        body=body,
        payload={
            "type": ForecastKind.HOURLY.value,
            "location": location,
            "min_temp": min_temp,
            "max_temp": max_temp,
            "rain_hours": rain_hours,
        },
    )


FORECAST_BUILDERS = {
    ForecastKind.DAILY: daily_forecast_event,
    ForecastKind.HOURLY: hourly_forecast_event,
}
