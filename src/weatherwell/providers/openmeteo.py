"""Open-Meteo adapter.

Open-Meteo needs no key and returns hourly and daily values as parallel
arrays indexed by ``time``. It reports WMO weather codes, visibility in
metres, and has neither moon data nor current UV. It has no reverse
geocoding, so snapshots are named after their coordinates.
"""

from datetime import date, datetime
from typing import Any, ClassVar

from pydantic import BaseModel, Field

from weatherwell.constants import (
    DEFAULT_FORECAST_DAYS,
    DEFAULT_TIMEOUT_SECONDS,
    MAX_HOURLY_ENTRIES,
    OPENMETEO_BASE_URL,
    OPENMETEO_GEOCODING_URL,
    OPENMETEO_MAX_FORECAST_DAYS,
    OPENMETEO_SEARCH_COUNT,
    UNKNOWN_CONDITION,
)
from weatherwell.exceptions import InvalidAPIResponseError
from weatherwell.models.weather import (
    Astronomy,
    CurrentConditions,
    DailyEntry,
    HourlyEntry,
    Location,
    ProviderId,
    Snapshot,
)
from weatherwell.normalize.icon_mapper import CLEAR_CODE, WeatherIconMapper
from weatherwell.normalize.time_formatter import format_time
from weatherwell.normalize.units import meters_to_km
from weatherwell.normalize.wind_helper import WindHelper
from weatherwell.providers.base import WeatherProvider

CURRENT_VARIABLES = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,precipitation,weather_code,"
    "cloud_cover,pressure_msl,surface_pressure,wind_speed_10m,wind_direction_10m,is_day"
)
HOURLY_VARIABLES = (
    "temperature_2m,relative_humidity_2m,apparent_temperature,precipitation_probability,"
    "precipitation,weather_code,pressure_msl,wind_speed_10m,wind_direction_10m,uv_index,"
    "visibility,is_day"
)
DAILY_VARIABLES = (
    "weather_code,temperature_2m_max,temperature_2m_min,sunrise,sunset,uv_index_max,"
    "precipitation_sum,precipitation_probability_max,wind_speed_10m_max"
)


class OMCurrent(BaseModel):
    """Current values."""

    temperature_2m: float
    relative_humidity_2m: float | None = None
    apparent_temperature: float | None = None
    weather_code: int | None = None
    pressure_msl: float | None = None
    wind_speed_10m: float | None = None
    wind_direction_10m: float | None = None
    is_day: int = 1


class OMHourly(BaseModel):
    """Hourly values as parallel arrays."""

    time: list[datetime]
    temperature_2m: list[float | None] = Field(default_factory=list)
    relative_humidity_2m: list[float | None] = Field(default_factory=list)
    apparent_temperature: list[float | None] = Field(default_factory=list)
    precipitation_probability: list[float | None] = Field(default_factory=list)
    precipitation: list[float | None] = Field(default_factory=list)
    weather_code: list[int | None] = Field(default_factory=list)
    pressure_msl: list[float | None] = Field(default_factory=list)
    wind_speed_10m: list[float | None] = Field(default_factory=list)
    wind_direction_10m: list[float | None] = Field(default_factory=list)
    uv_index: list[float | None] = Field(default_factory=list)
    visibility: list[float | None] = Field(default_factory=list)
    is_day: list[int | None] = Field(default_factory=list)


class OMDaily(BaseModel):
    """Daily values as parallel arrays."""

    time: list[date] = Field(min_length=1)
    weather_code: list[int | None] = Field(default_factory=list)
    temperature_2m_max: list[float | None] = Field(default_factory=list)
    temperature_2m_min: list[float | None] = Field(default_factory=list)
    sunrise: list[str | None] = Field(default_factory=list)
    sunset: list[str | None] = Field(default_factory=list)
    uv_index_max: list[float | None] = Field(default_factory=list)
    precipitation_sum: list[float | None] = Field(default_factory=list)
    precipitation_probability_max: list[float | None] = Field(default_factory=list)
    wind_speed_10m_max: list[float | None] = Field(default_factory=list)


class OMForecastResponse(BaseModel):
    """Response of the ``forecast`` endpoint."""

    latitude: float
    longitude: float
    utc_offset_seconds: int | None = None
    current: OMCurrent | None = None
    hourly: OMHourly | None = None
    daily: OMDaily


class OMGeocodingResult(BaseModel):
    """One geocoding result."""

    name: str
    admin1: str | None = None
    country: str | None = None
    latitude: float
    longitude: float


class OMGeocodingResponse(BaseModel):
    """Response of the geocoding ``search`` endpoint."""

    results: list[OMGeocodingResult] = Field(default_factory=list)


def _at(values: list[Any], index: int) -> Any:
    """Value at index, or None when the array is short."""
    return values[index] if index < len(values) else None


class OpenMeteoProvider(WeatherProvider):
    """Adapter for Open-Meteo."""

    provider_id = ProviderId.OPENMETEO
    BASE_URL = OPENMETEO_BASE_URL
    GEOCODING_URL = OPENMETEO_GEOCODING_URL

    # WMO weather code to (condition text, shared condition code)
    WMO_CODES: ClassVar[dict[int, tuple[str, int]]] = {
        0: ("Clear sky", 113),
        1: ("Mainly clear", 116),
        2: ("Partly cloudy", 116),
        3: ("Overcast", 119),
        45: ("Foggy", 248),
        48: ("Depositing rime fog", 248),
        51: ("Light drizzle", 263),
        53: ("Moderate drizzle", 266),
        55: ("Dense drizzle", 266),
        61: ("Slight rain", 293),
        63: ("Moderate rain", 296),
        65: ("Heavy rain", 308),
        71: ("Slight snow", 326),
        73: ("Moderate snow", 332),
        75: ("Heavy snow", 338),
        77: ("Snow grains", 332),
        80: ("Slight rain showers", 353),
        81: ("Moderate rain showers", 356),
        82: ("Violent rain showers", 359),
        85: ("Slight snow showers", 368),
        86: ("Heavy snow showers", 371),
        95: ("Thunderstorm", 386),
        96: ("Thunderstorm with slight hail", 389),
        99: ("Thunderstorm with heavy hail", 392),
    }

    def __init__(
        self, api_key: str | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        """Initialize the adapter; Open-Meteo ignores the key."""
        super().__init__(api_key=None, timeout=timeout)

    async def fetch_snapshot(
        self, lat: float, lon: float, days: int = DEFAULT_FORECAST_DAYS
    ) -> Snapshot:
        """Fetch current conditions and forecast.

        Args:
            lat: Latitude
            lon: Longitude
            days: Forecast days, capped at 16

        Returns:
            Normalized snapshot
        """
        params = {
            "latitude": lat,
            "longitude": lon,
            "current": CURRENT_VARIABLES,
            "hourly": HOURLY_VARIABLES,
            "daily": DAILY_VARIABLES,
            "timezone": "auto",
            "forecast_days": min(days, OPENMETEO_MAX_FORECAST_DAYS),
        }
        async with self._client() as client:
            data = await self._get_json(client, f"{self.BASE_URL}/forecast", params=params)

        response = self._parse(OMForecastResponse, data)
        return self._to_snapshot(response, lat, lon)

    async def fetch_historical(self, lat: float, lon: float, day: date) -> Snapshot:
        """Fetch a single past day.

        Current conditions are taken from the midday hour of that day.
        """
        params = {
            "latitude": lat,
            "longitude": lon,
            "start_date": day.isoformat(),
            "end_date": day.isoformat(),
            "hourly": HOURLY_VARIABLES,
            "daily": DAILY_VARIABLES,
            "timezone": "auto",
        }
        async with self._client() as client:
            data = await self._get_json(client, f"{self.BASE_URL}/forecast", params=params)

        response = self._parse(OMForecastResponse, data)
        return self._to_snapshot(response, lat, lon, is_historical=True)

    async def search_locations(self, query: str) -> list[Location]:
        """Search places through the Open-Meteo geocoding API."""
        params = {
            "name": query,
            "count": OPENMETEO_SEARCH_COUNT,
            "language": "en",
            "format": "json",
        }
        async with self._client() as client:
            data = await self._get_json(client, self.GEOCODING_URL, params=params)

        response = self._parse(OMGeocodingResponse, data)
        return [
            Location(
                name=result.name,
                region=result.admin1 or "",
                country=result.country or "",
                lat=result.latitude,
                lon=result.longitude,
            )
            for result in response.results
        ]

    def is_configured(self) -> bool:
        """Open-Meteo is keyless and always available."""
        return True

    def source_label(self) -> str:
        """Provenance label."""
        return "Open-Meteo"

    def _condition(self, code: int | None, is_day: bool = True) -> tuple[str, str]:
        """Condition text and icon for a WMO code."""
        if code is None or code not in self.WMO_CODES:
            return UNKNOWN_CONDITION, WeatherIconMapper.get_icon(CLEAR_CODE, is_day=is_day)
        text, shared_code = self.WMO_CODES[code]
        return text, WeatherIconMapper.get_icon(shared_code, is_day=is_day)

    def _hourly_entries(self, hourly: OMHourly | None) -> list[HourlyEntry]:
        if hourly is None:
            return []

        entries = []
        for i, timestamp in enumerate(hourly.time[:MAX_HOURLY_ENTRIES]):
            temperature = _at(hourly.temperature_2m, i)
            if temperature is None:
                continue
            feels_like = _at(hourly.apparent_temperature, i)
            condition, icon = self._condition(
                _at(hourly.weather_code, i), is_day=_at(hourly.is_day, i) != 0
            )
            entries.append(
                HourlyEntry(
                    time=timestamp,
                    temperature=temperature,
                    condition=condition,
                    icon=icon,
                    humidity=_at(hourly.relative_humidity_2m, i),
                    wind_speed=_at(hourly.wind_speed_10m, i) or 0.0,
                    wind_direction=WindHelper.get_wind_direction_cardinal(
                        _at(hourly.wind_direction_10m, i)
                    ),
                    pressure=_at(hourly.pressure_msl, i),
                    uv_index=_at(hourly.uv_index, i),
                    visibility=meters_to_km(_at(hourly.visibility, i)),
                    feels_like=feels_like if feels_like is not None else temperature,
                    precipitation_probability=_at(hourly.precipitation_probability, i),
                    precipitation_mm=_at(hourly.precipitation, i) or 0.0,
                )
            )
        return entries

    def _daily_entries(self, daily: OMDaily) -> list[DailyEntry]:
        entries = []
        for i, day in enumerate(daily.time):
            max_temp = _at(daily.temperature_2m_max, i)
            min_temp = _at(daily.temperature_2m_min, i)
            if max_temp is None or min_temp is None:
                continue
            condition, icon = self._condition(_at(daily.weather_code, i))
            entries.append(
                DailyEntry(
                    date=day,
                    max_temp=max_temp,
                    min_temp=min_temp,
                    condition=condition,
                    icon=icon,
                    wind_speed=_at(daily.wind_speed_10m_max, i) or 0.0,
                    uv_index=_at(daily.uv_index_max, i),
                    precipitation_probability=_at(daily.precipitation_probability_max, i),
                    precipitation_mm=_at(daily.precipitation_sum, i) or 0.0,
                    astronomy=self._astronomy(daily, i),
                )
            )
        return entries

    @staticmethod
    def _astronomy(daily: OMDaily, index: int) -> Astronomy:
        """Sunrise and sunset only; Open-Meteo has no moon data."""
        return Astronomy(
            sunrise=format_time(_at(daily.sunrise, index)),
            sunset=format_time(_at(daily.sunset, index)),
        )

    def _current(self, current: OMCurrent) -> CurrentConditions:
        condition, icon = self._condition(current.weather_code, is_day=current.is_day != 0)
        return CurrentConditions(
            temperature=current.temperature_2m,
            condition=condition,
            icon=icon,
            humidity=current.relative_humidity_2m,
            wind_speed=current.wind_speed_10m or 0.0,
            wind_direction=WindHelper.get_wind_direction_cardinal(current.wind_direction_10m),
            pressure=current.pressure_msl,
            feels_like=(
                current.apparent_temperature
                if current.apparent_temperature is not None
                else current.temperature_2m
            ),
        )

    @staticmethod
    def _current_from_hour(hour: HourlyEntry) -> CurrentConditions:
        return CurrentConditions(
            temperature=hour.temperature,
            condition=hour.condition,
            icon=hour.icon,
            humidity=hour.humidity,
            wind_speed=hour.wind_speed,
            wind_direction=hour.wind_direction,
            pressure=hour.pressure,
            uv_index=hour.uv_index,
            visibility=hour.visibility,
            feels_like=hour.feels_like,
        )

    def _to_snapshot(
        self, response: OMForecastResponse, lat: float, lon: float, is_historical: bool = False
    ) -> Snapshot:
        hourly = self._hourly_entries(response.hourly)
        daily = self._daily_entries(response.daily)

        if response.current is not None:
            current = self._current(response.current)
        elif hourly:
            current = self._current_from_hour(hourly[min(12, len(hourly) - 1)])
        elif daily:
            first_day = daily[0]
            current = CurrentConditions(
                temperature=first_day.max_temp,
                condition=first_day.condition,
                icon=first_day.icon,
                wind_speed=first_day.wind_speed,
                uv_index=first_day.uv_index,
                feels_like=first_day.max_temp,
            )
        else:
            raise InvalidAPIResponseError(
                "Open-Meteo returned no temperature readings",
                {"lat": lat, "lon": lon},
                provider=self.provider_id.value,
            )

        return Snapshot(
            location=Location(name=self.coordinate_name(lat, lon), lat=lat, lon=lon),
            current=current,
            hourly=hourly,
            daily=daily[:OPENMETEO_MAX_FORECAST_DAYS],
            astronomy=self._astronomy(response.daily, 0),
            provider=self.provider_id,
            is_historical=is_historical,
            utc_offset_seconds=response.utc_offset_seconds,
        )
