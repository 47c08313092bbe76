"""Alert models for threshold evaluation cycles.

Defines the alert categories, the notification events handed to the
notification collaborator, the stored location read once per cycle and the
outcome of a cycle.
"""

from datetime import datetime, timedelta
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class AlertCategory(str, Enum):
    """Alert categories, in evaluation order."""

    UMBRELLA = "umbrella-alert"
    WIND = "wind-alert"
    UV = "uv-alert"
    TEMPERATURE_HIGH = "temp-high-alert"
    TEMPERATURE_LOW = "temp-low-alert"
    AIR_QUALITY = "aqi-alert"
    SEVERE_WEATHER = "severe-weather"


class ForecastKind(str, Enum):
    """Scheduled forecast summaries, sent apart from threshold alerts."""

    DAILY = "daily-forecast"
    HOURLY = "hourly-forecast"


class NotificationEvent(BaseModel):
    """A notification handed to the external delivery collaborator."""

    title: str
    body: str
    payload: dict[str, Any] = Field(default_factory=dict)

    @property
    def category(self) -> AlertCategory | None:
        """Alert category carried in the payload, if any."""
        try:
            return AlertCategory(self.payload.get("type"))
        except ValueError:
            return None


class StoredLocation(BaseModel):
    """Last known device location, supplied by the location collaborator."""

    latitude: float
    longitude: float
    timestamp: datetime

    def age(self, now: datetime) -> timedelta:
        """How long ago the location was recorded.

        Args:
            now: Reference time.

        Returns:
            Elapsed time since the location was stored.
        """
        if self.timestamp.tzinfo is not None and now.tzinfo is None:
            now = now.astimezone()
        elif self.timestamp.tzinfo is None and now.tzinfo is not None:
            now = now.replace(tzinfo=None)
        return now - self.timestamp

    def is_stale(self, now: datetime, max_age_hours: float) -> bool:
        """Check whether the location is too old to use.

        Args:
            now: Reference time.
            max_age_hours: Maximum accepted age in hours.

        Returns:
            True if the location is older than the allowed age.
        """
        return self.age(now) > timedelta(hours=max_age_hours)


class CycleState(str, Enum):
    """States of one evaluation cycle."""

    IDLE = "idle"
    FETCHING = "fetching"
    EVALUATING = "evaluating"
    NOTIFYING = "notifying"


class CycleStatus(str, Enum):
    """How a cycle ended."""

    COMPLETED = "completed"
    SKIPPED_NO_LOCATION = "skipped-no-location"
    SKIPPED_STALE_LOCATION = "skipped-stale-location"
    SKIPPED_DISABLED = "skipped-disabled"


class CycleResult(BaseModel):
    """Outcome of one evaluation cycle."""

    status: CycleStatus
    source: str | None = None
    notifications: list[NotificationEvent] = Field(default_factory=list)
    failed_categories: list[AlertCategory] = Field(default_factory=list)
    forecast: ForecastKind | None = None

    @property
    def skipped(self) -> bool:
        """Whether the cycle did no work."""
        return self.status != CycleStatus.COMPLETED
