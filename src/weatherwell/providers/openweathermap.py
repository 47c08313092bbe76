"""OpenWeatherMap adapter.

The free 5 day / 3 hour ``forecast`` endpoint drives the snapshot: its first
entry stands in for current conditions, the 3-hourly entries become the
hourly sequence and are grouped per local calendar day into daily entries.
Air quality comes from a separate ``air_pollution`` call that is allowed to
fail. Wind arrives in m/s and visibility in metres.
"""

from datetime import date, datetime, time, timezone
from typing import ClassVar

import httpx
from pydantic import BaseModel, Field

from weatherwell.constants import (
    DEFAULT_FORECAST_DAYS,
    MAX_HOURLY_ENTRIES,
    OWM_BASE_URL,
    OWM_FORECASTS_PER_DAY,
    OWM_GEOCODING_URL,
    OWM_MAX_DAILY_GROUPS,
    OWM_MAX_FORECAST_ITEMS,
    OWM_SEARCH_LIMIT,
    OWM_TIMEMACHINE_URL,
    PERCENT_MAX,
    UNKNOWN_CONDITION,
)
from weatherwell.exceptions import ProviderFetchError
from weatherwell.models.weather import (
    AirQuality,
    Astronomy,
    CurrentConditions,
    DailyEntry,
    HourlyEntry,
    Location,
    ProviderId,
    Snapshot,
)
from weatherwell.normalize.air_quality import aqi_from_owm_category
from weatherwell.normalize.icon_mapper import CLEAR_CODE, WeatherIconMapper
from weatherwell.normalize.time_formatter import format_time
from weatherwell.normalize.units import meters_to_km, ms_to_kmh
from weatherwell.normalize.wind_helper import WindHelper
from weatherwell.providers.base import WeatherProvider


class OWMWeather(BaseModel):
    """Weather condition entry."""

    id: int | None = None
    description: str = UNKNOWN_CONDITION
    icon: str = "01d"


class OWMMain(BaseModel):
    """Main measurements."""

    temp: float
    feels_like: float | None = None
    pressure: float | None = None
    humidity: float | None = None


class OWMWind(BaseModel):
    """Wind, speed in m/s."""

    speed: float = 0.0
    deg: float | None = None


class OWMPrecipitation(BaseModel):
    """Rain or snow volume for the last 3 hours."""

    three_hours: float = Field(default=0.0, alias="3h")


class OWMForecastItem(BaseModel):
    """One 3-hourly forecast step."""

    dt: int
    main: OWMMain
    weather: list[OWMWeather] = Field(min_length=1)
    wind: OWMWind = Field(default_factory=OWMWind)
    visibility: float | None = None
    pop: float | None = None
    rain: OWMPrecipitation | None = None
    snow: OWMPrecipitation | None = None

    @property
    def precipitation_mm(self) -> float:
        """Rain, or snow when no rain is reported."""
        if self.rain is not None and self.rain.three_hours:
            return self.rain.three_hours
        if self.snow is not None:
            return self.snow.three_hours
        return 0.0


class OWMCoord(BaseModel):
    """Coordinates."""

    lat: float
    lon: float


class OWMCity(BaseModel):
    """City block of the forecast response."""

    name: str = ""
    country: str = ""
    coord: OWMCoord
    timezone: int = 0  # Shift in seconds from UTC
    sunrise: int | None = None
    sunset: int | None = None


class OWMForecastResponse(BaseModel):
    """Response of the ``forecast`` endpoint."""

    items: list[OWMForecastItem] = Field(alias="list", min_length=1)
    city: OWMCity


class OWMAirComponents(BaseModel):
    """Pollutant concentrations in μg/m3."""

    co: float | None = None
    no2: float | None = None
    o3: float | None = None
    so2: float | None = None
    pm2_5: float | None = None
    pm10: float | None = None


class OWMAirMain(BaseModel):
    """Air quality category."""

    aqi: int


class OWMAirItem(BaseModel):
    """One air pollution reading."""

    main: OWMAirMain
    components: OWMAirComponents = Field(default_factory=OWMAirComponents)


class OWMAirPollutionResponse(BaseModel):
    """Response of the ``air_pollution`` endpoint."""

    items: list[OWMAirItem] = Field(alias="list", min_length=1)


class OWMTimemachineData(BaseModel):
    """One historical observation."""

    dt: int
    sunrise: int | None = None
    sunset: int | None = None
    temp: float
    feels_like: float | None = None
    pressure: float | None = None
    humidity: float | None = None
    uvi: float | None = None
    visibility: float | None = None
    wind_speed: float = 0.0
    wind_deg: float | None = None
    weather: list[OWMWeather] = Field(min_length=1)


class OWMTimemachineResponse(BaseModel):
    """Response of the One Call ``timemachine`` endpoint."""

    lat: float
    lon: float
    timezone_offset: int = 0
    data: list[OWMTimemachineData] = Field(min_length=1)


class OWMGeocodingResult(BaseModel):
    """One direct geocoding result."""

    name: str
    country: str = ""
    state: str | None = None
    lat: float
    lon: float


class OWMGeocodingResults(BaseModel):
    """Wrapper for the top-level geocoding array."""

    results: list[OWMGeocodingResult]


class OpenWeatherMapProvider(WeatherProvider):
    """Adapter for OpenWeatherMap."""

    provider_id = ProviderId.OPENWEATHERMAP
    BASE_URL = OWM_BASE_URL
    GEOCODING_URL = OWM_GEOCODING_URL
    TIMEMACHINE_URL = OWM_TIMEMACHINE_URL

    # Icon code prefix ("10" of "10d") to the shared condition code
    ICON_CODES: ClassVar[dict[str, int]] = {
        "01": 113,  # clear sky
        "02": 116,  # few clouds
        "03": 119,  # scattered clouds
        "04": 122,  # broken clouds
        "09": 353,  # shower rain
        "10": 296,  # rain
        "11": 389,  # thunderstorm
        "13": 332,  # snow
        "50": 143,  # mist
    }

    async def fetch_snapshot(
        self, lat: float, lon: float, days: int = DEFAULT_FORECAST_DAYS
    ) -> Snapshot:
        """Fetch the 3-hourly forecast and, when available, air quality.

        Args:
            lat: Latitude
            lon: Longitude
            days: Forecast days; OpenWeatherMap returns at most 5

        Returns:
            Normalized snapshot
        """
        params = {
            "lat": lat,
            "lon": lon,
            "appid": self.api_key,
            "units": "metric",
            "cnt": min(days * OWM_FORECASTS_PER_DAY, OWM_MAX_FORECAST_ITEMS),
        }
        async with self._client() as client:
            data = await self._get_json(client, f"{self.BASE_URL}/forecast", params=params)
            forecast = self._parse(OWMForecastResponse, data)
            air_quality = await self._fetch_air_quality(client, lat, lon)

        return self._to_snapshot(forecast, air_quality)

    async def fetch_historical(self, lat: float, lon: float, day: date) -> Snapshot:
        """Fetch observations for a past date from the One Call time machine."""
        timestamp = int(datetime.combine(day, time(12), tzinfo=timezone.utc).timestamp())
        params = {
            "lat": lat,
            "lon": lon,
            "dt": timestamp,
            "appid": self.api_key,
            "units": "metric",
        }
        async with self._client() as client:
            data = await self._get_json(client, self.TIMEMACHINE_URL, params=params)

        response = self._parse(OWMTimemachineResponse, data)
        observed = response.data[0]
        offset = response.timezone_offset

        return Snapshot(
            location=Location(
                name=self.coordinate_name(response.lat, response.lon),
                lat=response.lat,
                lon=response.lon,
            ),
            current=CurrentConditions(
                temperature=observed.temp,
                condition=observed.weather[0].description,
                icon=self._icon(observed.weather[0].icon),
                humidity=observed.humidity,
                wind_speed=ms_to_kmh(observed.wind_speed),
                wind_direction=WindHelper.get_wind_direction_cardinal(observed.wind_deg),
                pressure=observed.pressure,
                uv_index=observed.uvi,
                visibility=meters_to_km(observed.visibility),
                feels_like=(
                    observed.feels_like if observed.feels_like is not None else observed.temp
                ),
            ),
            astronomy=Astronomy(
                sunrise=format_time(observed.sunrise, utc_offset_seconds=offset),
                sunset=format_time(observed.sunset, utc_offset_seconds=offset),
            ),
            provider=self.provider_id,
            is_historical=True,
            utc_offset_seconds=offset,
        )

    async def search_locations(self, query: str) -> list[Location]:
        """Search places through direct geocoding."""
        params = {"q": query, "limit": OWM_SEARCH_LIMIT, "appid": self.api_key}
        async with self._client() as client:
            data = await self._get_json(client, self.GEOCODING_URL, params=params)

        results = self._parse(OWMGeocodingResults, {"results": data})
        return [
            Location(
                name=result.name,
                country=result.country,
                region=result.state or result.country,
                lat=result.lat,
                lon=result.lon,
            )
            for result in results.results
        ]

    def is_configured(self) -> bool:
        """Any non-empty key."""
        return bool(self.api_key)

    def source_label(self) -> str:
        """Provenance label."""
        return "OpenWeatherMap" if self.uses_default_key else "OpenWeatherMap (Custom)"

    async def _fetch_air_quality(
        self, client: httpx.AsyncClient, lat: float, lon: float
    ) -> AirQuality | None:
        """Fetch air quality; failures leave the snapshot without it."""
        params = {"lat": lat, "lon": lon, "appid": self.api_key}
        try:
            data = await self._get_json(client, f"{self.BASE_URL}/air_pollution", params=params)
            response = self._parse(OWMAirPollutionResponse, data)
        except ProviderFetchError as e:
            self.logger.warning(f"Air quality data not available from OpenWeatherMap: {e}")
            return None

        reading = response.items[0]
        components = reading.components
        return AirQuality(
            aqi=aqi_from_owm_category(reading.main.aqi, components.pm2_5),
            co=components.co,
            no2=components.no2,
            o3=components.o3,
            so2=components.so2,
            pm2_5=components.pm2_5,
            pm10=components.pm10,
        )

    def _icon(self, icon_code: str) -> str:
        code = self.ICON_CODES.get(icon_code[:2], CLEAR_CODE)
        return WeatherIconMapper.get_icon(code, is_day=not icon_code.endswith("n"))

    @staticmethod
    def _local_time(timestamp: int, offset: int) -> datetime:
        """Wall clock time at the location, without tzinfo."""
        return datetime.fromtimestamp(timestamp + offset, tz=timezone.utc).replace(tzinfo=None)

    def _hourly_entry(self, item: OWMForecastItem, offset: int) -> HourlyEntry:
        return HourlyEntry(
            time=self._local_time(item.dt, offset),
            temperature=item.main.temp,
            condition=item.weather[0].description,
            icon=self._icon(item.weather[0].icon),
            humidity=item.main.humidity,
            wind_speed=ms_to_kmh(item.wind.speed),
            wind_direction=WindHelper.get_wind_direction_cardinal(item.wind.deg),
            pressure=item.main.pressure,
            visibility=meters_to_km(item.visibility),
            feels_like=(
                item.main.feels_like if item.main.feels_like is not None else item.main.temp
            ),
            precipitation_probability=item.pop * PERCENT_MAX if item.pop is not None else None,
            precipitation_mm=item.precipitation_mm,
        )

    def _daily_entries(self, items: list[OWMForecastItem], offset: int) -> list[DailyEntry]:
        """Group 3-hourly steps by local calendar day."""
        groups: dict[date, list[OWMForecastItem]] = {}
        for item in items:
            groups.setdefault(self._local_time(item.dt, offset).date(), []).append(item)

        daily = []
        for day, day_items in list(groups.items())[:OWM_MAX_DAILY_GROUPS]:
            temps = [item.main.temp for item in day_items]
            humidities = [
                item.main.humidity for item in day_items if item.main.humidity is not None
            ]
            chances = [item.pop * PERCENT_MAX for item in day_items if item.pop is not None]
            first = day_items[0].weather[0]

            daily.append(
                DailyEntry(
                    date=day,
                    max_temp=max(temps),
                    min_temp=min(temps),
                    condition=first.description,
                    icon=self._icon(first.icon),
                    humidity=round(sum(humidities) / len(humidities)) if humidities else None,
                    wind_speed=max(ms_to_kmh(item.wind.speed) for item in day_items),
                    precipitation_probability=max(chances) if chances else None,
                    precipitation_mm=sum(item.precipitation_mm for item in day_items),
                )
            )
        return daily

    def _to_snapshot(
        self, forecast: OWMForecastResponse, air_quality: AirQuality | None
    ) -> Snapshot:
        city = forecast.city
        offset = city.timezone
        hourly = [self._hourly_entry(item, offset) for item in forecast.items[:MAX_HOURLY_ENTRIES]]
        now = hourly[0]

        return Snapshot(
            location=Location(
                name=city.name or self.coordinate_name(city.coord.lat, city.coord.lon),
                country=city.country,
                region=city.country,
                lat=city.coord.lat,
                lon=city.coord.lon,
            ),
            current=CurrentConditions(
                temperature=now.temperature,
                condition=now.condition,
                icon=now.icon,
                humidity=now.humidity,
                wind_speed=now.wind_speed,
                wind_direction=now.wind_direction,
                pressure=now.pressure,
                visibility=now.visibility,
                feels_like=now.feels_like,
            ),
            hourly=hourly,
            daily=self._daily_entries(forecast.items, offset),
            astronomy=Astronomy(
                sunrise=format_time(city.sunrise, utc_offset_seconds=offset),
                sunset=format_time(city.sunset, utc_offset_seconds=offset),
            ),
            air_quality=air_quality,
            provider=self.provider_id,
            utc_offset_seconds=offset,
        )
