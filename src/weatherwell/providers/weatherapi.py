"""WeatherAPI.com adapter.

Uses the ``forecast.json``, ``history.json`` and ``search.json`` endpoints.
WeatherAPI already reports metric values, and its condition icons are the
shared code space every other adapter maps into.
"""

from datetime import date, datetime, timezone

from pydantic import BaseModel, Field

from weatherwell.constants import (
    DEFAULT_FORECAST_DAYS,
    MAX_HOURLY_ENTRIES,
    MIN_LONG_KEY_LENGTH,
    SECONDS_PER_MINUTE,
    WEATHERAPI_BASE_URL,
    WEATHERAPI_MAX_FORECAST_DAYS,
)
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
from weatherwell.normalize.air_quality import aqi_from_pm25
from weatherwell.normalize.icon_mapper import WeatherIconMapper
from weatherwell.normalize.moon_phase_helper import MoonPhaseHelper
from weatherwell.normalize.time_formatter import format_time
from weatherwell.normalize.wind_helper import WindHelper
from weatherwell.providers.base import WeatherProvider


class WAPICondition(BaseModel):
    """Condition block."""

    text: str
    icon: str = ""
    code: int | None = None


class WAPIAirQuality(BaseModel):
    """Air quality block, concentrations in μg/m3."""

    co: float | None = None
    no2: float | None = None
    o3: float | None = None
    so2: float | None = None
    pm2_5: float | None = None
    pm10: float | None = None


class WAPILocation(BaseModel):
    """Resolved location."""

    name: str
    region: str = ""
    country: str = ""
    lat: float
    lon: float
    localtime: str | None = None  # "2025-06-01 9:15"
    localtime_epoch: int | None = None

    @property
    def utc_offset_seconds(self) -> int | None:
        """Offset of the local clock from UTC, rounded to the quarter hour."""
        if self.localtime is None or self.localtime_epoch is None:
            return None
        try:
            local = datetime.strptime(self.localtime, "%Y-%m-%d %H:%M")
        except ValueError:
            return None
        utc = datetime.fromtimestamp(self.localtime_epoch, tz=timezone.utc).replace(tzinfo=None)
        quarter_hour = 15 * SECONDS_PER_MINUTE
        return round((local - utc).total_seconds() / quarter_hour) * quarter_hour


class WAPICurrent(BaseModel):
    """Current conditions."""

    temp_c: float
    is_day: int = 1
    condition: WAPICondition
    wind_kph: float
    wind_degree: float | None = None
    wind_dir: str = ""
    pressure_mb: float | None = None
    humidity: float | None = None
    feelslike_c: float | None = None
    vis_km: float | None = None
    uv: float | None = None
    air_quality: WAPIAirQuality | None = None


class WAPIHour(BaseModel):
    """One hourly forecast entry."""

    time: str
    temp_c: float
    is_day: int = 1
    condition: WAPICondition
    wind_kph: float
    wind_degree: float | None = None
    wind_dir: str = ""
    pressure_mb: float | None = None
    humidity: float | None = None
    feelslike_c: float | None = None
    vis_km: float | None = None
    uv: float | None = None
    chance_of_rain: float | None = None
    precip_mm: float = 0.0


class WAPIDay(BaseModel):
    """Daily aggregate values."""

    maxtemp_c: float
    mintemp_c: float
    avgtemp_c: float
    maxwind_kph: float
    totalprecip_mm: float = 0.0
    avgvis_km: float | None = None
    avghumidity: float | None = None
    daily_chance_of_rain: float | None = None
    uv: float | None = None
    condition: WAPICondition


class WAPIAstro(BaseModel):
    """Sun and moon values, clock strings like "06:45 AM"."""

    sunrise: str = ""
    sunset: str = ""
    moon_phase: str = ""
    moon_illumination: str | float | None = None


class WAPIForecastDay(BaseModel):
    """One forecast (or history) day."""

    date: date
    day: WAPIDay
    astro: WAPIAstro | None = None
    hour: list[WAPIHour] = Field(default_factory=list)


class WAPIForecast(BaseModel):
    """Forecast container."""

    forecastday: list[WAPIForecastDay] = Field(min_length=1)


class WAPIForecastResponse(BaseModel):
    """Response of ``forecast.json``."""

    location: WAPILocation
    current: WAPICurrent
    forecast: WAPIForecast


class WAPIHistoryResponse(BaseModel):
    """Response of ``history.json``."""

    location: WAPILocation
    forecast: WAPIForecast


class WAPISearchResult(BaseModel):
    """One ``search.json`` result."""

    name: str
    region: str = ""
    country: str = ""
    lat: float
    lon: float


class WAPISearchResults(BaseModel):
    """Wrapper for the top-level ``search.json`` array."""

    results: list[WAPISearchResult]


class WeatherAPIProvider(WeatherProvider):
    """Adapter for WeatherAPI.com."""

    provider_id = ProviderId.WEATHERAPI
    BASE_URL = WEATHERAPI_BASE_URL

    async def fetch_snapshot(
        self, lat: float, lon: float, days: int = DEFAULT_FORECAST_DAYS
    ) -> Snapshot:
        """Fetch current conditions, forecast and air quality.

        Args:
            lat: Latitude
            lon: Longitude
            days: Forecast days, capped at 10

        Returns:
            Normalized snapshot
        """
        params = {
            "key": self.api_key,
            "q": f"{lat},{lon}",
            "days": min(days, WEATHERAPI_MAX_FORECAST_DAYS),
            "aqi": "yes",
            "alerts": "yes",
        }
        async with self._client() as client:
            data = await self._get_json(client, f"{self.BASE_URL}/forecast.json", params=params)

        response = self._parse(WAPIForecastResponse, data)
        self.logger.debug(f"WeatherAPI forecast received for {response.location.name}")
        return self._to_snapshot(response)

    async def fetch_historical(self, lat: float, lon: float, day: date) -> Snapshot:
        """Fetch observations for a past date from ``history.json``."""
        params = {"key": self.api_key, "q": f"{lat},{lon}", "dt": day.isoformat()}
        async with self._client() as client:
            data = await self._get_json(client, f"{self.BASE_URL}/history.json", params=params)

        response = self._parse(WAPIHistoryResponse, data)
        return self._history_to_snapshot(response)

    async def search_locations(self, query: str) -> list[Location]:
        """Search places through ``search.json``."""
        params = {"key": self.api_key, "q": query}
        async with self._client() as client:
            data = await self._get_json(client, f"{self.BASE_URL}/search.json", params=params)

        results = self._parse(WAPISearchResults, {"results": data})
        return [
            Location(
                name=result.name,
                country=result.country,
                region=result.region,
                lat=result.lat,
                lon=result.lon,
            )
            for result in results.results
        ]

    def is_configured(self) -> bool:
        """WeatherAPI keys are long; shorter values are placeholders."""
        return len(self.api_key) > MIN_LONG_KEY_LENGTH

    def source_label(self) -> str:
        """Provenance label."""
        return "WeatherAPI" if self.uses_default_key else "WeatherAPI (Custom)"

    def _to_snapshot(self, response: WAPIForecastResponse) -> Snapshot:
        current = response.current
        forecast_days = response.forecast.forecastday
        hours = [hour for day in forecast_days for hour in day.hour][:MAX_HOURLY_ENTRIES]

        return Snapshot(
            location=self._location(response.location),
            current=CurrentConditions(
                temperature=current.temp_c,
                condition=current.condition.text,
                icon=WeatherIconMapper.get_icon_for_weatherapi_url(current.condition.icon),
                humidity=current.humidity,
                wind_speed=current.wind_kph,
                wind_direction=self._wind_direction(current.wind_degree, current.wind_dir),
                pressure=current.pressure_mb,
                uv_index=current.uv,
                visibility=current.vis_km,
                feels_like=(
                    current.feelslike_c if current.feelslike_c is not None else current.temp_c
                ),
            ),
            hourly=[self._hourly_entry(hour) for hour in hours],
            daily=[self._daily_entry(day) for day in forecast_days],
            astronomy=self._astronomy(forecast_days[0].astro),
            air_quality=self._air_quality(current.air_quality),
            provider=self.provider_id,
            utc_offset_seconds=response.location.utc_offset_seconds,
        )

    def _history_to_snapshot(self, response: WAPIHistoryResponse) -> Snapshot:
        observed = response.forecast.forecastday[0]
        day = observed.day

        return Snapshot(
            location=self._location(response.location),
            current=CurrentConditions(
                temperature=day.avgtemp_c,
                condition=day.condition.text,
                icon=WeatherIconMapper.get_icon_for_weatherapi_url(day.condition.icon),
                humidity=day.avghumidity,
                wind_speed=day.maxwind_kph,
                uv_index=day.uv,
                visibility=day.avgvis_km,
                feels_like=day.avgtemp_c,
            ),
            hourly=[self._hourly_entry(hour) for hour in observed.hour[:MAX_HOURLY_ENTRIES]],
            daily=[self._daily_entry(observed)],
            astronomy=self._astronomy(observed.astro),
            provider=self.provider_id,
            is_historical=True,
            utc_offset_seconds=response.location.utc_offset_seconds,
        )

    @staticmethod
    def _location(location: WAPILocation) -> Location:
        return Location(
            name=location.name,
            country=location.country,
            region=location.region,
            lat=location.lat,
            lon=location.lon,
        )

    @staticmethod
    def _wind_direction(degrees: float | None, label: str) -> str:
        if degrees is not None:
            return WindHelper.get_wind_direction_cardinal(degrees)
        return label

    def _hourly_entry(self, hour: WAPIHour) -> HourlyEntry:
        return HourlyEntry(
            time=datetime.fromisoformat(hour.time),
            temperature=hour.temp_c,
            condition=hour.condition.text,
            icon=WeatherIconMapper.get_icon_for_weatherapi_url(hour.condition.icon),
            humidity=hour.humidity,
            wind_speed=hour.wind_kph,
            wind_direction=self._wind_direction(hour.wind_degree, hour.wind_dir),
            pressure=hour.pressure_mb,
            uv_index=hour.uv,
            visibility=hour.vis_km,
            feels_like=hour.feelslike_c if hour.feelslike_c is not None else hour.temp_c,
            precipitation_probability=hour.chance_of_rain,
            precipitation_mm=hour.precip_mm,
        )

    def _daily_entry(self, forecast_day: WAPIForecastDay) -> DailyEntry:
        day = forecast_day.day
        return DailyEntry(
            date=forecast_day.date,
            max_temp=day.maxtemp_c,
            min_temp=day.mintemp_c,
            condition=day.condition.text,
            icon=WeatherIconMapper.get_icon_for_weatherapi_url(day.condition.icon),
            humidity=day.avghumidity,
            wind_speed=day.maxwind_kph,
            uv_index=day.uv,
            precipitation_probability=day.daily_chance_of_rain,
            precipitation_mm=day.totalprecip_mm,
            astronomy=self._astronomy(forecast_day.astro) if forecast_day.astro else None,
        )

    @staticmethod
    def _astronomy(astro: WAPIAstro | None) -> Astronomy:
        if astro is None:
            return Astronomy()
        return Astronomy(
            sunrise=format_time(astro.sunrise),
            sunset=format_time(astro.sunset),
            moon_phase=astro.moon_phase,
            moon_illumination=MoonPhaseHelper.illumination_from_percent(astro.moon_illumination),
        )

    @staticmethod
    def _air_quality(air: WAPIAirQuality | None) -> AirQuality | None:
        if air is None:
            return None
        return AirQuality(
            aqi=aqi_from_pm25(air.pm2_5),
            co=air.co,
            no2=air.no2,
            o3=air.o3,
            so2=air.so2,
            pm2_5=air.pm2_5,
            pm10=air.pm10,
        )

