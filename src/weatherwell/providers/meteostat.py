"""Meteostat adapter.

Meteostat serves observations only, through RapidAPI. A "forecast" from
this adapter is the recent past: the last 7 of 30 daily records and the last
24 hourly records, and every snapshot is flagged as historical. There is no
astronomy and no place search.
"""

from datetime import date, datetime, timedelta
from typing import ClassVar

from pydantic import BaseModel, Field

from weatherwell.constants import (
    DEFAULT_FORECAST_DAYS,
    MAX_HOURLY_ENTRIES,
    METEOSTAT_BASE_URL,
    METEOSTAT_DAILY_KEEP,
    METEOSTAT_DAILY_LOOKBACK_DAYS,
    METEOSTAT_RAPIDAPI_HOST,
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
from weatherwell.normalize.wind_helper import WindHelper
from weatherwell.providers.base import WeatherProvider

# Daily records carry no condition code
DAILY_CONDITION = "Partly Cloudy"
DAILY_CONDITION_CODE = 116


class MSDailyRecord(BaseModel):
    """One daily observation."""

    date: date
    tavg: float | None = None
    tmin: float | None = None
    tmax: float | None = None
    prcp: float | None = None
    wspd: float | None = None
    pres: float | None = None


class MSHourlyRecord(BaseModel):
    """One hourly observation."""

    time: datetime
    temp: float | None = None
    rhum: float | None = None
    prcp: float | None = None
    wspd: float | None = None
    wdir: float | None = None
    pres: float | None = None
    coco: int | None = None


class MSDailyResponse(BaseModel):
    """Response of ``point/daily``."""

    data: list[MSDailyRecord] = Field(default_factory=list)


class MSHourlyResponse(BaseModel):
    """Response of ``point/hourly``."""

    data: list[MSHourlyRecord] = Field(default_factory=list)


class MeteostatProvider(WeatherProvider):
    """Adapter for Meteostat (historical observations)."""

    provider_id = ProviderId.METEOSTAT
    BASE_URL = METEOSTAT_BASE_URL

    # Meteostat condition code to (condition text, shared condition code)
    CONDITION_CODES: ClassVar[dict[int, tuple[str, int]]] = {
        1: ("Clear", 113),
        2: ("Fair", 116),
        3: ("Cloudy", 119),
        4: ("Overcast", 122),
        5: ("Fog", 248),
        6: ("Freezing Fog", 260),
        7: ("Light Rain", 293),
        8: ("Rain", 296),
        9: ("Heavy Rain", 302),
        10: ("Freezing Rain", 311),
        11: ("Heavy Freezing Rain", 314),
        12: ("Sleet", 317),
        13: ("Heavy Sleet", 320),
        14: ("Light Snowfall", 326),
        15: ("Snowfall", 332),
        16: ("Heavy Snowfall", 338),
        17: ("Rain Shower", 353),
        18: ("Heavy Rain Shower", 359),
        19: ("Sleet Shower", 362),
        20: ("Heavy Sleet Shower", 365),
        21: ("Snow Shower", 368),
        22: ("Heavy Snow Shower", 371),
        23: ("Lightning", 386),
        24: ("Hail", 374),
        25: ("Thunderstorm", 389),
        26: ("Heavy Thunderstorm", 392),
        27: ("Storm", 395),
    }

    async def fetch_snapshot(
        self, lat: float, lon: float, days: int = DEFAULT_FORECAST_DAYS
    ) -> Snapshot:
        """Fetch the most recent observations.

        Args:
            lat: Latitude
            lon: Longitude
            days: Ignored; Meteostat has no forecast

        Returns:
            Snapshot of recent observations, flagged as historical
        """
        today = date.today()
        daily = await self._fetch_daily(
            lat, lon, today - timedelta(days=METEOSTAT_DAILY_LOOKBACK_DAYS), today
        )
        hourly = await self._fetch_hourly(lat, lon, today - timedelta(days=1), today)
        return self._to_snapshot(lat, lon, daily[-METEOSTAT_DAILY_KEEP:], hourly)

    async def fetch_historical(self, lat: float, lon: float, day: date) -> Snapshot:
        """Fetch daily and hourly observations for a past date."""
        daily = await self._fetch_daily(lat, lon, day, day)
        hourly = await self._fetch_hourly(lat, lon, day, day)
        return self._to_snapshot(lat, lon, daily, hourly)

    def is_configured(self) -> bool:
        """Any non-empty RapidAPI key."""
        return bool(self.api_key)

    def source_label(self) -> str:
        """Provenance label; always marks the data as historical."""
        return "Meteostat (Historical)"

    def _headers(self) -> dict[str, str]:
        return {"X-RapidAPI-Key": self.api_key, "X-RapidAPI-Host": METEOSTAT_RAPIDAPI_HOST}

    async def _fetch_daily(
        self, lat: float, lon: float, start: date, end: date
    ) -> list[MSDailyRecord]:
        params = {"lat": lat, "lon": lon, "start": start.isoformat(), "end": end.isoformat()}
        async with self._client() as client:
            data = await self._get_json(
                client, f"{self.BASE_URL}/point/daily", params=params, headers=self._headers()
            )
        return self._parse(MSDailyResponse, data).data

    async def _fetch_hourly(
        self, lat: float, lon: float, start: date, end: date
    ) -> list[MSHourlyRecord]:
        params = {"lat": lat, "lon": lon, "start": start.isoformat(), "end": end.isoformat()}
        async with self._client() as client:
            data = await self._get_json(
                client, f"{self.BASE_URL}/point/hourly", params=params, headers=self._headers()
            )
        return self._parse(MSHourlyResponse, data).data

    def _condition(self, code: int | None) -> tuple[str, str]:
        if code is None or code not in self.CONDITION_CODES:
            return UNKNOWN_CONDITION, WeatherIconMapper.get_icon(CLEAR_CODE)
        text, shared_code = self.CONDITION_CODES[code]
        return text, WeatherIconMapper.get_icon(shared_code)

    def _hourly_entry(self, record: MSHourlyRecord, temperature: float) -> HourlyEntry:
        condition, icon = self._condition(record.coco)
        return HourlyEntry(
            time=record.time,
            temperature=temperature,
            condition=condition,
            icon=icon,
            humidity=record.rhum,
            wind_speed=record.wspd or 0.0,
            wind_direction=WindHelper.get_wind_direction_cardinal(record.wdir),
            pressure=record.pres,
            feels_like=temperature,
            precipitation_mm=record.prcp or 0.0,
        )

    @staticmethod
    def _daily_entry(record: MSDailyRecord, max_temp: float, min_temp: float) -> DailyEntry:
        return DailyEntry(
            date=record.date,
            max_temp=max_temp,
            min_temp=min_temp,
            condition=DAILY_CONDITION,
            icon=WeatherIconMapper.get_icon(DAILY_CONDITION_CODE),
            wind_speed=record.wspd or 0.0,
            precipitation_mm=record.prcp or 0.0,
        )

    @staticmethod
    def _mean_temperature(record: MSDailyRecord) -> float | None:
        if record.tavg is not None:
            return record.tavg
        if record.tmax is not None and record.tmin is not None:
            return (record.tmax + record.tmin) / 2
        return None

    def _to_snapshot(
        self,
        lat: float,
        lon: float,
        daily: list[MSDailyRecord],
        hourly: list[MSHourlyRecord],
    ) -> Snapshot:
        # Records without a temperature reading are dropped, not zero-filled
        hourly_entries = [
            self._hourly_entry(record, record.temp)
            for record in hourly
            if record.temp is not None
        ][-MAX_HOURLY_ENTRIES:]
        daily_entries = [
            self._daily_entry(record, record.tmax, record.tmin)
            for record in daily
            if record.tmax is not None and record.tmin is not None
        ]

        latest_day = next(
            (record for record in reversed(daily) if self._mean_temperature(record) is not None),
            None,
        )
        # Most recent measured hour stands in for current conditions
        if hourly_entries:
            latest_hour = hourly_entries[-1]
            current = CurrentConditions(
                temperature=latest_hour.temperature,
                condition=latest_hour.condition,
                icon=latest_hour.icon,
                humidity=latest_hour.humidity,
                wind_speed=latest_hour.wind_speed,
                wind_direction=latest_hour.wind_direction,
                pressure=latest_hour.pressure,
                feels_like=latest_hour.feels_like,
            )
        elif latest_day is not None:
            temperature = self._mean_temperature(latest_day)
            current = CurrentConditions(
                temperature=temperature,
                condition=DAILY_CONDITION,
                icon=WeatherIconMapper.get_icon(DAILY_CONDITION_CODE),
                wind_speed=latest_day.wspd or 0.0,
                pressure=latest_day.pres,
                feels_like=temperature,
            )
        else:
            raise InvalidAPIResponseError(
                "Meteostat returned no observations",
                {"lat": lat, "lon": lon},
                provider=self.provider_id.value,
            )

        return Snapshot(
            location=Location(name=self.coordinate_name(lat, lon), lat=lat, lon=lon),
            current=current,
            hourly=hourly_entries,
            daily=daily_entries,
            astronomy=Astronomy(),
            provider=self.provider_id,
            is_historical=True,
        )
