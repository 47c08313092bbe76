"""Visual Crossing adapter.

Uses the Timeline API with ``unitGroup=metric``. Times in the payload are
local clock strings. Visual Crossing offers no air quality and no place
search.
"""

from datetime import date, datetime, time, timedelta
from typing import ClassVar

from pydantic import BaseModel, Field

from weatherwell.constants import (
    DEFAULT_FORECAST_DAYS,
    MAX_HOURLY_ENTRIES,
    MIN_LONG_KEY_LENGTH,
    SECONDS_PER_HOUR,
    UNKNOWN_CONDITION,
    VISUALCROSSING_BASE_URL,
    VISUALCROSSING_HOURLY_DAYS,
    VISUALCROSSING_MAX_FORECAST_DAYS,
)
from weatherwell.models.weather import (
    Astronomy,
    CurrentConditions,
    DailyEntry,
    HourlyEntry,
    Location,
    ProviderId,
    Snapshot,
)
from weatherwell.normalize.icon_mapper import CLEAR_CODE, WIND_CODE, WeatherIconMapper
from weatherwell.normalize.moon_phase_helper import MoonPhaseHelper
from weatherwell.normalize.time_formatter import format_time
from weatherwell.normalize.wind_helper import WindHelper
from weatherwell.providers.base import WeatherProvider


class VCConditions(BaseModel):
    """Measurements shared by current conditions, days and hours."""

    datetime: str = ""
    temp: float | None = None
    feelslike: float | None = None
    humidity: float | None = None
    precip: float | None = None
    precipprob: float | None = None
    windspeed: float | None = None
    winddir: float | None = None
    pressure: float | None = None
    visibility: float | None = None
    uvindex: float | None = None
    conditions: str = UNKNOWN_CONDITION
    icon: str = "clear-day"
    sunrise: str | None = None
    sunset: str | None = None
    moonphase: float | None = None


class VCHour(VCConditions):
    """One hour of a day."""

    datetime: time  # type: ignore[assignment]


class VCDay(VCConditions):
    """One day of the timeline."""

    datetime: date  # type: ignore[assignment]
    tempmax: float
    tempmin: float
    hours: list[VCHour] = Field(default_factory=list)


class VCTimelineResponse(BaseModel):
    """Response of the Timeline API."""

    latitude: float
    longitude: float
    resolved_address: str = Field(default="", alias="resolvedAddress")
    tzoffset: float | None = None  # Hours from UTC
    days: list[VCDay] = Field(min_length=1)
    current_conditions: VCConditions | None = Field(default=None, alias="currentConditions")


class VisualCrossingProvider(WeatherProvider):
    """Adapter for Visual Crossing."""

    provider_id = ProviderId.VISUALCROSSING
    BASE_URL = VISUALCROSSING_BASE_URL

    # Icon set names to the shared condition code and day flag
    ICON_CODES: ClassVar[dict[str, tuple[int, bool]]] = {
        "clear-day": (113, True),
        "clear-night": (113, False),
        "partly-cloudy-day": (116, True),
        "partly-cloudy-night": (116, False),
        "cloudy": (119, True),
        "rain": (296, True),
        "snow": (332, True),
        "wind": (WIND_CODE, True),
        "fog": (248, True),
    }

    async def fetch_snapshot(
        self, lat: float, lon: float, days: int = DEFAULT_FORECAST_DAYS
    ) -> Snapshot:
        """Fetch the timeline from today over the requested number of days.

        Args:
            lat: Latitude
            lon: Longitude
            days: Forecast days, capped at 15

        Returns:
            Normalized snapshot
        """
        days = max(1, min(days, VISUALCROSSING_MAX_FORECAST_DAYS))
        start = date.today()
        end = start + timedelta(days=days - 1)
        params = {
            "key": self.api_key,
            "unitGroup": "metric",
            "include": "days,hours,current,alerts",
        }
        url = f"{self.BASE_URL}/{lat},{lon}/{start.isoformat()}/{end.isoformat()}"
        async with self._client() as client:
            data = await self._get_json(client, url, params=params)

        response = self._parse(VCTimelineResponse, data)
        return self._to_snapshot(response, days)

    async def fetch_historical(self, lat: float, lon: float, day: date) -> Snapshot:
        """Fetch a single past day of the timeline."""
        params = {"key": self.api_key, "unitGroup": "metric", "include": "days,hours"}
        url = f"{self.BASE_URL}/{lat},{lon}/{day.isoformat()}"
        async with self._client() as client:
            data = await self._get_json(client, url, params=params)

        response = self._parse(VCTimelineResponse, data)
        return self._to_snapshot(response, 1, is_historical=True)

    def is_configured(self) -> bool:
        """Visual Crossing keys are long; shorter values are placeholders."""
        return len(self.api_key) > MIN_LONG_KEY_LENGTH

    def source_label(self) -> str:
        """Provenance label."""
        return "Visual Crossing" if self.uses_default_key else "Visual Crossing (Custom)"

    def _icon(self, icon_name: str) -> str:
        code, is_day = self.ICON_CODES.get(icon_name, (CLEAR_CODE, True))
        return WeatherIconMapper.get_icon(code, is_day=is_day)

    @staticmethod
    def _location(response: VCTimelineResponse) -> Location:
        """Split "London, England, United Kingdom" into name, region and country."""
        parts = [part.strip() for part in response.resolved_address.split(",") if part.strip()]
        if not parts:
            return Location(
                name=WeatherProvider.coordinate_name(response.latitude, response.longitude),
                lat=response.latitude,
                lon=response.longitude,
            )
        return Location(
            name=parts[0],
            region=parts[1] if len(parts) > 2 else "",
            country=parts[-1] if len(parts) > 1 else "",
            lat=response.latitude,
            lon=response.longitude,
        )

    @staticmethod
    def _astronomy(values: VCConditions) -> Astronomy:
        return Astronomy(
            sunrise=format_time(values.sunrise),
            sunset=format_time(values.sunset),
            moon_phase=MoonPhaseHelper.get_moon_phase_label(values.moonphase),
            moon_illumination=MoonPhaseHelper.illumination_from_phase(values.moonphase),
        )

    def _current(self, values: VCConditions, day: VCDay) -> CurrentConditions:
        """Current conditions; the day's mean stands in for a missing temperature."""
        temperature = values.temp if values.temp is not None else (day.tempmax + day.tempmin) / 2
        return CurrentConditions(
            temperature=temperature,
            condition=values.conditions,
            icon=self._icon(values.icon),
            humidity=values.humidity,
            wind_speed=values.windspeed or 0.0,
            wind_direction=WindHelper.get_wind_direction_cardinal(values.winddir),
            pressure=values.pressure,
            uv_index=values.uvindex,
            visibility=values.visibility,
            feels_like=values.feelslike if values.feelslike is not None else temperature,
        )

    def _hourly_entry(self, day: VCDay, hour: VCHour, temperature: float) -> HourlyEntry:
        return HourlyEntry(
            time=datetime.combine(day.datetime, hour.datetime),
            temperature=temperature,
            condition=hour.conditions,
            icon=self._icon(hour.icon),
            humidity=hour.humidity,
            wind_speed=hour.windspeed or 0.0,
            wind_direction=WindHelper.get_wind_direction_cardinal(hour.winddir),
            pressure=hour.pressure,
            uv_index=hour.uvindex,
            visibility=hour.visibility,
            feels_like=hour.feelslike if hour.feelslike is not None else temperature,
            precipitation_probability=hour.precipprob,
            precipitation_mm=hour.precip or 0.0,
        )

    def _daily_entry(self, day: VCDay) -> DailyEntry:
        return DailyEntry(
            date=day.datetime,
            max_temp=day.tempmax,
            min_temp=day.tempmin,
            condition=day.conditions,
            icon=self._icon(day.icon),
            humidity=day.humidity,
            wind_speed=day.windspeed or 0.0,
            uv_index=day.uvindex,
            precipitation_probability=day.precipprob,
            precipitation_mm=day.precip or 0.0,
            astronomy=self._astronomy(day),
        )

    def _to_snapshot(
        self, response: VCTimelineResponse, days: int, is_historical: bool = False
    ) -> Snapshot:
        first_day = response.days[0]
        hourly = [
            self._hourly_entry(day, hour, hour.temp)
            for day in response.days[:VISUALCROSSING_HOURLY_DAYS]
            for hour in day.hours
            if hour.temp is not None
        ][:MAX_HOURLY_ENTRIES]

        offset = response.tzoffset
        return Snapshot(
            location=self._location(response),
            current=self._current(response.current_conditions or first_day, first_day),
            hourly=hourly,
            daily=[self._daily_entry(day) for day in response.days[:days]],
            astronomy=self._astronomy(first_day),
            provider=self.provider_id,
            is_historical=is_historical,
            utc_offset_seconds=round(offset * SECONDS_PER_HOUR) if offset is not None else None,
        )
