"""QWeather adapter.

QWeather answers with HTTP 200 and an in-body ``code`` field, and encodes
every number as a string. Locations are addressed as "lon,lat" with two
decimals. Air quality comes from a separate ``air/now`` call that is allowed
to fail.
"""

from datetime import date, datetime
from typing import Any, ClassVar

import httpx
from pydantic import BaseModel, Field

from weatherwell.constants import (
    DEFAULT_FORECAST_DAYS,
    MAX_DAILY_ENTRIES,
    MAX_HOURLY_ENTRIES,
    QWEATHER_BASE_URL,
    QWEATHER_GEO_URL,
    QWEATHER_SEARCH_COUNT,
    UNKNOWN_CONDITION,
)
from weatherwell.exceptions import (
    APIAuthenticationError,
    APIRateLimitError,
    InvalidAPIResponseError,
    ProviderFetchError,
    ProviderHTTPError,
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
from weatherwell.normalize.icon_mapper import CLEAR_CODE, WeatherIconMapper
from weatherwell.normalize.time_formatter import format_time
from weatherwell.normalize.units import parse_float
from weatherwell.normalize.wind_helper import WindHelper
from weatherwell.providers.base import WeatherProvider

QWEATHER_OK = "200"
QWEATHER_AUTH_CODES = ("401", "402", "403")
QWEATHER_RATE_LIMIT_CODE = "429"


class QWNow(BaseModel):
    """Current observation; all values are strings."""

    temp: str
    feelsLike: str | None = None
    icon: str = "100"
    text: str = UNKNOWN_CONDITION
    wind360: str | None = None
    windDir: str | None = None
    windSpeed: str | None = None
    humidity: str | None = None
    pressure: str | None = None
    vis: str | None = None


class QWHour(BaseModel):
    """One hourly forecast entry."""

    fxTime: datetime
    temp: str
    icon: str = "100"
    text: str = UNKNOWN_CONDITION
    wind360: str | None = None
    windSpeed: str | None = None
    humidity: str | None = None
    pop: str | None = None
    precip: str | None = None
    pressure: str | None = None


class QWDay(BaseModel):
    """One daily forecast entry."""

    fxDate: date
    sunrise: str | None = None
    sunset: str | None = None
    moonPhase: str | None = None
    tempMax: str
    tempMin: str
    iconDay: str = "100"
    textDay: str = UNKNOWN_CONDITION
    windSpeedDay: str | None = None
    humidity: str | None = None
    precip: str | None = None
    pressure: str | None = None
    uvIndex: str | None = None


class QWNowResponse(BaseModel):
    """Response of ``weather/now``."""

    now: QWNow


class QWDailyResponse(BaseModel):
    """Response of ``weather/{n}d``."""

    daily: list[QWDay] = Field(min_length=1)


class QWHourlyResponse(BaseModel):
    """Response of ``weather/24h``."""

    hourly: list[QWHour] = Field(default_factory=list)


class QWAir(BaseModel):
    """Air quality reading."""

    pm2p5: str | None = None
    pm10: str | None = None
    no2: str | None = None
    so2: str | None = None
    co: str | None = None
    o3: str | None = None


class QWAirResponse(BaseModel):
    """Response of ``air/now``."""

    now: QWAir


class QWHistoricalDay(BaseModel):
    """Daily summary of ``historical/weather``."""

    date: date
    sunrise: str | None = None
    sunset: str | None = None
    moonPhase: str | None = None
    tempMax: str
    tempMin: str
    humidity: str | None = None
    precip: str | None = None
    pressure: str | None = None


class QWHistoricalHour(BaseModel):
    """Hourly observation of ``historical/weather``."""

    time: datetime
    temp: str
    icon: str = "100"
    text: str = UNKNOWN_CONDITION
    precip: str | None = None
    wind360: str | None = None
    windSpeed: str | None = None
    humidity: str | None = None
    pressure: str | None = None


class QWHistoricalResponse(BaseModel):
    """Response of ``historical/weather``."""

    weatherDaily: QWHistoricalDay
    weatherHourly: list[QWHistoricalHour] = Field(default_factory=list)


class QWCity(BaseModel):
    """One city lookup result."""

    name: str
    lat: str
    lon: str
    adm1: str | None = None
    adm2: str | None = None
    country: str = ""


class QWCityLookupResponse(BaseModel):
    """Response of ``city/lookup``."""

    location: list[QWCity] = Field(default_factory=list)


class QWeatherProvider(WeatherProvider):
    """Adapter for QWeather."""

    provider_id = ProviderId.QWEATHER
    BASE_URL = QWEATHER_BASE_URL
    GEO_URL = QWEATHER_GEO_URL

    # QWeather icon code to the shared condition code
    ICON_CODES: ClassVar[dict[str, int]] = {
        "100": 113,  # Sunny
        "101": 116,  # Cloudy
        "102": 119,  # Few Clouds
        "103": 122,  # Partly Cloudy
        "104": 122,  # Overcast
        "150": 113,  # Clear night
        "151": 116,  # Partly cloudy night
        "300": 176,  # Shower rain
        "301": 266,  # Heavy shower rain
        "302": 386,  # Thundershower
        "303": 389,  # Heavy thunderstorm
        "304": 350,  # Thundershower with hail
        "305": 296,  # Light rain
        "306": 302,  # Moderate rain
        "307": 308,  # Heavy rain
        "308": 308,  # Extreme rain
        "309": 263,  # Drizzle
        "310": 359,  # Storm
        "311": 359,  # Heavy storm
        "312": 359,  # Severe storm
        "313": 311,  # Freezing rain
        "314": 296,  # Light to moderate rain
        "315": 305,  # Moderate to heavy rain
        "316": 308,  # Heavy rain to storm
        "317": 359,  # Storm to heavy storm
        "318": 359,  # Heavy to severe storm
        "399": 296,  # Rain
        "400": 326,  # Light snow
        "401": 332,  # Moderate snow
        "402": 338,  # Heavy snow
        "403": 395,  # Snowstorm
        "404": 317,  # Sleet
        "405": 365,  # Rain and snow
        "406": 362,  # Shower rain and snow
        "407": 368,  # Snow flurry
        "408": 332,  # Light to moderate snow
        "409": 338,  # Moderate to heavy snow
        "410": 338,  # Heavy snow to snowstorm
        "499": 332,  # Snow
        "500": 143,  # Mist
        "501": 248,  # Foggy
        "502": 143,  # Haze
        "503": 143,  # Sand
        "504": 143,  # Dust
        "507": 143,  # Duststorm
        "508": 143,  # Sandstorm
        "509": 248,  # Dense fog
        "510": 248,  # Strong fog
        "511": 143,  # Moderate haze
        "512": 143,  # Heavy haze
        "513": 143,  # Severe haze
        "514": 248,  # Heavy fog
        "515": 248,  # Extra heavy fog
        "900": 113,  # Hot
        "901": 113,  # Cold
        "999": 119,  # Unknown
    }
    NIGHT_ICON_CODES: ClassVar[frozenset[str]] = frozenset({"150", "151", "152", "153"})

    async def fetch_snapshot(
        self, lat: float, lon: float, days: int = DEFAULT_FORECAST_DAYS
    ) -> Snapshot:
        """Fetch current conditions, daily and hourly forecast, and air quality.

        Args:
            lat: Latitude
            lon: Longitude
            days: Forecast days; rounded up to the nearest QWeather product

        Returns:
            Normalized snapshot
        """
        params = self._params(lat, lon)
        async with self._client() as client:
            now = self._parse(
                QWNowResponse,
                await self._get_payload(client, f"{self.BASE_URL}/weather/now", params),
            )
            daily = self._parse(
                QWDailyResponse,
                await self._get_payload(
                    client, f"{self.BASE_URL}/weather/{self._days_param(days)}", params
                ),
            )
            hourly = self._parse(
                QWHourlyResponse,
                await self._get_payload(client, f"{self.BASE_URL}/weather/24h", params),
            )
            air_quality = await self._fetch_air_quality(client, params)

        return self._to_snapshot(lat, lon, now.now, daily.daily[:days], hourly.hourly, air_quality)

    async def fetch_historical(self, lat: float, lon: float, day: date) -> Snapshot:
        """Fetch observations for a past date from ``historical/weather``."""
        params = {**self._params(lat, lon), "date": day.strftime("%Y%m%d")}
        async with self._client() as client:
            data = await self._get_payload(client, f"{self.BASE_URL}/historical/weather", params)

        response = self._parse(QWHistoricalResponse, data)
        observed = response.weatherDaily
        hourly = [
            entry
            for entry in map(self._historical_hour, response.weatherHourly)
            if entry is not None
        ][:MAX_HOURLY_ENTRIES]
        max_temp = parse_float(observed.tempMax)
        min_temp = parse_float(observed.tempMin)
        midday = hourly[min(12, len(hourly) - 1)] if hourly else None
        astronomy = Astronomy(
            sunrise=format_time(observed.sunrise),
            sunset=format_time(observed.sunset),
            moon_phase=observed.moonPhase or "",
        )

        if midday is not None:
            current = CurrentConditions(
                temperature=midday.temperature,
                condition=midday.condition,
                icon=midday.icon,
                humidity=midday.humidity,
                wind_speed=midday.wind_speed,
                wind_direction=midday.wind_direction,
                pressure=midday.pressure,
                feels_like=midday.feels_like,
            )
        elif max_temp is not None and min_temp is not None:
            current = CurrentConditions(
                temperature=(max_temp + min_temp) / 2,
                condition=UNKNOWN_CONDITION,
                icon=WeatherIconMapper.get_icon(CLEAR_CODE),
                humidity=parse_float(observed.humidity),
                wind_speed=0.0,
                pressure=parse_float(observed.pressure),
                feels_like=(max_temp + min_temp) / 2,
            )
        else:
            raise InvalidAPIResponseError(
                "QWeather returned no temperature readings",
                {"date": day.isoformat()},
                provider=self.provider_id.value,
            )

        daily: list[DailyEntry] = []
        if max_temp is not None and min_temp is not None:
            daily.append(
                DailyEntry(
                    date=observed.date,
                    max_temp=max_temp,
                    min_temp=min_temp,
                    condition=current.condition,
                    icon=current.icon,
                    humidity=parse_float(observed.humidity),
                    wind_speed=current.wind_speed,
                    precipitation_mm=parse_float(observed.precip) or 0.0,
                    astronomy=astronomy,
                )
            )

        return Snapshot(
            location=Location(name=self.coordinate_name(lat, lon), lat=lat, lon=lon),
            current=current,
            hourly=hourly,
            daily=daily,
            astronomy=astronomy,
            provider=self.provider_id,
            is_historical=True,
        )

    async def search_locations(self, query: str) -> list[Location]:
        """Search places through the city lookup; "no match" yields no results."""
        params = {
            "location": query,
            "key": self.api_key,
            "lang": "en",
            "number": QWEATHER_SEARCH_COUNT,
        }
        async with self._client() as client:
            data = await self._get_json(client, f"{self.GEO_URL}/city/lookup", params=params)

        if not isinstance(data, dict) or data.get("code") != QWEATHER_OK:
            return []
        response = self._parse(QWCityLookupResponse, data)
        return [
            Location(
                name=city.name,
                region=city.adm2 or city.adm1 or "",
                country=city.country,
                lat=float(city.lat),
                lon=float(city.lon),
            )
            for city in response.location
        ]

    def is_configured(self) -> bool:
        """Any non-empty key."""
        return bool(self.api_key)

    def source_label(self) -> str:
        """Provenance label."""
        return "QWeather"

    def _params(self, lat: float, lon: float) -> dict[str, str]:
        return {"location": f"{lon:.2f},{lat:.2f}", "key": self.api_key, "lang": "en"}

    @staticmethod
    def _days_param(days: int) -> str:
        """Smallest daily product covering the requested days."""
        for available in (3, 7, 10, 15):
            if days <= available:
                return f"{available}d"
        return "30d"

    async def _get_payload(
        self, client: httpx.AsyncClient, url: str, params: dict[str, Any]
    ) -> dict[str, Any]:
        """GET a QWeather endpoint and check the in-body status code.

        Raises:
            APIAuthenticationError: If the key is rejected
            APIRateLimitError: If the quota is exhausted
            ProviderHTTPError: For any other non-success code
        """
        data = await self._get_json(client, url, params=params)
        code = str(data.get("code", "")) if isinstance(data, dict) else ""
        if code == QWEATHER_OK:
            return data

        details = {"endpoint": url, "code": code}
        if code in QWEATHER_AUTH_CODES:
            raise APIAuthenticationError(
                "QWeather rejected the API key", details, provider=self.provider_id.value
            )
        if code == QWEATHER_RATE_LIMIT_CODE:
            raise APIRateLimitError(
                "QWeather quota exceeded", details, provider=self.provider_id.value
            )
        raise ProviderHTTPError(
            "QWeather request failed", details, provider=self.provider_id.value
        )

    async def _fetch_air_quality(
        self, client: httpx.AsyncClient, params: dict[str, str]
    ) -> AirQuality | None:
        """Fetch air quality; failures leave the snapshot without it."""
        try:
            data = await self._get_payload(client, f"{self.BASE_URL}/air/now", params)
            air = self._parse(QWAirResponse, data).now
        except ProviderFetchError as e:
            self.logger.warning(f"Air quality data not available from QWeather: {e}")
            return None

        pm2_5 = parse_float(air.pm2p5)
        return AirQuality(
            aqi=aqi_from_pm25(pm2_5),
            co=parse_float(air.co),
            no2=parse_float(air.no2),
            o3=parse_float(air.o3),
            so2=parse_float(air.so2),
            pm2_5=pm2_5,
            pm10=parse_float(air.pm10),
        )

    def _icon(self, icon_code: str) -> str:
        code = self.ICON_CODES.get(icon_code, CLEAR_CODE)
        return WeatherIconMapper.get_icon(code, is_day=icon_code not in self.NIGHT_ICON_CODES)

    def _hourly_entry(self, hour: QWHour) -> HourlyEntry | None:
        temperature = parse_float(hour.temp)
        if temperature is None:
            return None
        return HourlyEntry(
            time=hour.fxTime.replace(tzinfo=None),
            temperature=temperature,
            condition=hour.text,
            icon=self._icon(hour.icon),
            humidity=parse_float(hour.humidity),
            wind_speed=parse_float(hour.windSpeed) or 0.0,
            wind_direction=WindHelper.get_wind_direction_cardinal(parse_float(hour.wind360)),
            pressure=parse_float(hour.pressure),
            feels_like=temperature,
            precipitation_probability=parse_float(hour.pop),
            precipitation_mm=parse_float(hour.precip) or 0.0,
        )

    def _historical_hour(self, hour: QWHistoricalHour) -> HourlyEntry | None:
        temperature = parse_float(hour.temp)
        if temperature is None:
            return None
        return HourlyEntry(
            time=hour.time.replace(tzinfo=None),
            temperature=temperature,
            condition=hour.text,
            icon=self._icon(hour.icon),
            humidity=parse_float(hour.humidity),
            wind_speed=parse_float(hour.windSpeed) or 0.0,
            wind_direction=WindHelper.get_wind_direction_cardinal(parse_float(hour.wind360)),
            pressure=parse_float(hour.pressure),
            feels_like=temperature,
            precipitation_mm=parse_float(hour.precip) or 0.0,
        )

    def _daily_entry(self, day: QWDay) -> DailyEntry | None:
        max_temp = parse_float(day.tempMax)
        min_temp = parse_float(day.tempMin)
        if max_temp is None or min_temp is None:
            return None
        return DailyEntry(
            date=day.fxDate,
            max_temp=max_temp,
            min_temp=min_temp,
            condition=day.textDay,
            icon=self._icon(day.iconDay),
            humidity=parse_float(day.humidity),
            wind_speed=parse_float(day.windSpeedDay) or 0.0,
            uv_index=parse_float(day.uvIndex),
            precipitation_mm=parse_float(day.precip) or 0.0,
            astronomy=Astronomy(
                sunrise=format_time(day.sunrise),
                sunset=format_time(day.sunset),
                moon_phase=day.moonPhase or "",
            ),
        )

    def _to_snapshot(
        self,
        lat: float,
        lon: float,
        now: QWNow,
        daily: list[QWDay],
        hourly: list[QWHour],
        air_quality: AirQuality | None,
    ) -> Snapshot:
        temperature = parse_float(now.temp)
        if temperature is None:
            raise InvalidAPIResponseError(
                "QWeather returned no current temperature",
                {"temp": now.temp},
                provider=self.provider_id.value,
            )
        feels_like = parse_float(now.feelsLike)
        # Entries without a temperature reading are dropped, not zero-filled
        daily_entries = [
            entry for entry in map(self._daily_entry, daily) if entry is not None
        ][:MAX_DAILY_ENTRIES]
        hourly_entries = [
            entry for entry in map(self._hourly_entry, hourly) if entry is not None
        ][:MAX_HOURLY_ENTRIES]
        wind_degrees = parse_float(now.wind360)
        offset = hourly[0].fxTime.utcoffset() if hourly else None

        return Snapshot(
            location=Location(name=self.coordinate_name(lat, lon), lat=lat, lon=lon),
            current=CurrentConditions(
                temperature=temperature,
                condition=now.text,
                icon=self._icon(now.icon),
                humidity=parse_float(now.humidity),
                wind_speed=parse_float(now.windSpeed) or 0.0,
                wind_direction=(
                    WindHelper.get_wind_direction_cardinal(wind_degrees)
                    if wind_degrees is not None
                    else ""
                ),
                pressure=parse_float(now.pressure),
                visibility=parse_float(now.vis),
                feels_like=feels_like if feels_like is not None else temperature,
            ),
            hourly=hourly_entries,
            daily=daily_entries,
            astronomy=(daily_entries[0].astronomy if daily_entries else None) or Astronomy(),
            air_quality=air_quality,
            provider=self.provider_id,
            utc_offset_seconds=int(offset.total_seconds()) if offset is not None else None,
        )
