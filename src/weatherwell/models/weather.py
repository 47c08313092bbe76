"""Normalized weather data models used throughout the application.

Defines the Pydantic models every provider adapter produces: the snapshot,
its current conditions, hourly and daily entries, astronomy and air quality.
All values are canonical units: Celsius, km/h, km and hPa.
"""

from datetime import date, datetime, timedelta, timezone
from enum import Enum

from pydantic import BaseModel, Field, field_validator

from weatherwell.constants import (
    AQI_MAX,
    AQI_MIN,
    MAX_DAILY_ENTRIES,
    MAX_HOURLY_ENTRIES,
    MOON_ILLUMINATION_UNKNOWN,
    PERCENT_MAX,
)


class ProviderId(str, Enum):
    """Identifiers of the supported upstream providers."""

    WEATHERAPI = "weatherapi"
    OPENWEATHERMAP = "openweathermap"
    VISUALCROSSING = "visualcrossing"
    OPENMETEO = "openmeteo"
    QWEATHER = "qweather"
    METEOSTAT = "meteostat"


class Location(BaseModel):
    """A named place with coordinates."""

    name: str
    country: str = ""
    region: str = ""
    lat: float
    lon: float


class CurrentConditions(BaseModel):
    """Current weather conditions.

    Measurements a provider does not report are None rather than zero.
    """

    temperature: float
    condition: str
    icon: str
    humidity: float | None = None  # %
    wind_speed: float  # km/h
    wind_direction: str = ""  # 16-point compass label
    pressure: float | None = None  # hPa
    uv_index: float | None = None
    visibility: float | None = None  # km
    feels_like: float


class HourlyEntry(BaseModel):
    """Hourly forecast (or observation) entry."""

    time: datetime
    temperature: float
    condition: str
    icon: str
    humidity: float | None = None
    wind_speed: float
    wind_direction: str = ""
    pressure: float | None = None
    uv_index: float | None = None
    visibility: float | None = None
    feels_like: float
    precipitation_probability: float | None = None  # %
    precipitation_mm: float = 0.0


class Astronomy(BaseModel):
    """Sun and moon data for a day.

    ``moon_illumination`` is a fraction in [0, 1], or exactly -1 when the
    provider has no moon data.
    """

    sunrise: str = ""
    sunset: str = ""
    moon_phase: str = ""
    moon_illumination: float = MOON_ILLUMINATION_UNKNOWN

    @field_validator("moon_illumination")
    @classmethod
    def validate_moon_illumination(cls, v: float) -> float:
        """Validate illumination is a fraction or the unknown sentinel.

        Args:
            v: Illumination value.

        Returns:
            The validated illumination value.

        Raises:
            ValueError: If the value is neither -1 nor within [0, 1].
        """
        if v != MOON_ILLUMINATION_UNKNOWN and not 0.0 <= v <= 1.0:
            raise ValueError("Moon illumination must be within [0, 1] or -1 when unknown")
        return v

    @property
    def has_moon_data(self) -> bool:
        """Whether the provider supplied moon illumination."""
        return self.moon_illumination != MOON_ILLUMINATION_UNKNOWN

    @property
    def illumination_percent(self) -> int | None:
        """Moon illumination as a whole percentage.

        Returns:
            Percentage 0-100, or None when illumination is not available.
        """
        if not self.has_moon_data:
            return None
        return round(self.moon_illumination * PERCENT_MAX)


class DailyEntry(BaseModel):
    """Daily forecast (or observation) entry."""

    date: date
    max_temp: float
    min_temp: float
    condition: str
    icon: str
    humidity: float | None = None
    wind_speed: float
    uv_index: float | None = None
    precipitation_probability: float | None = None
    precipitation_mm: float = 0.0
    astronomy: Astronomy | None = None  # Absent when the provider has no per-day values


class AirQuality(BaseModel):
    """Air quality on the EPA 0-500 scale with raw concentrations in μg/m3."""

    aqi: int = Field(ge=AQI_MIN, le=AQI_MAX)
    co: float | None = None
    no2: float | None = None
    o3: float | None = None
    so2: float | None = None
    pm2_5: float | None = None
    pm10: float | None = None


class Snapshot(BaseModel):
    """Complete normalized weather data from one provider."""

    location: Location
    current: CurrentConditions
    hourly: list[HourlyEntry] = Field(default_factory=list)
    daily: list[DailyEntry] = Field(default_factory=list)
    astronomy: Astronomy = Field(default_factory=Astronomy)
    air_quality: AirQuality | None = None
    provider: ProviderId
    is_historical: bool = False  # Observations of the past, not a forecast
    fetched_at: datetime = Field(default_factory=datetime.now)
    utc_offset_seconds: int | None = None  # Location's offset from UTC, when reported

    @field_validator("hourly")
    @classmethod
    def validate_hourly_length(cls, v: list[HourlyEntry]) -> list[HourlyEntry]:
        """Validate the hourly sequence holds at most 24 entries.

        Args:
            v: The hourly entries.

        Returns:
            The validated entries.

        Raises:
            ValueError: If there are more than 24 entries.
        """
        if len(v) > MAX_HOURLY_ENTRIES:
            raise ValueError(f"Snapshot holds at most {MAX_HOURLY_ENTRIES} hourly entries")
        return v

    @field_validator("daily")
    @classmethod
    def validate_daily_length(cls, v: list[DailyEntry]) -> list[DailyEntry]:
        """Validate the daily sequence holds at most 16 entries.

        Args:
            v: The daily entries.

        Returns:
            The validated entries.

        Raises:
            ValueError: If there are more than 16 entries.
        """
        if len(v) > MAX_DAILY_ENTRIES:
            raise ValueError(f"Snapshot holds at most {MAX_DAILY_ENTRIES} daily entries")
        return v

    def local_now(self, reference: datetime | None = None) -> datetime:
        """Wall clock time at the snapshot's location, without tzinfo.

        Hourly times are naive local times of the location, so comparisons
        against them must use this clock rather than the host's. Without a
        reported offset the host's local time is used.

        Args:
            reference: Moment to convert; now when omitted. Naive values are
                taken as host local time.

        Returns:
            The location's local time.
        """
        if self.utc_offset_seconds is None:
            if reference is None:
                return datetime.now()
            if reference.tzinfo is None:
                return reference
            return reference.astimezone().replace(tzinfo=None)

        moment = (reference or datetime.now(timezone.utc)).astimezone(timezone.utc)
        return (moment + timedelta(seconds=self.utc_offset_seconds)).replace(tzinfo=None)

    def day(self, on: date) -> DailyEntry | None:
        """The daily entry for a date, falling back to the first one."""
        for entry in self.daily:
            if entry.date == on:
                return entry
        return self.daily[0] if self.daily else None


class ResolvedSnapshot(BaseModel):
    """A snapshot together with the provenance of the provider that answered."""

    snapshot: Snapshot
    source: str
    provider: ProviderId
    fallback_used: bool = False
