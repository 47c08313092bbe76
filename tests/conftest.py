"""Common fixtures for testing the WeatherWell core."""

import json
from collections.abc import Generator
from datetime import date, datetime
from pathlib import Path
from typing import Any
from unittest.mock import AsyncMock, patch

import pytest
from httpx import Request, Response

from weatherwell.models.config import AppConfig, LoggingConfig
from weatherwell.models.weather import (
    AirQuality,
    CurrentConditions,
    DailyEntry,
    HourlyEntry,
    Location,
    ProviderId,
    Snapshot,
)

DATA_DIR = Path(__file__).parent / "data"

# Define a recursive type for JSON data
JSONType = dict[str, "JSONType"] | list["JSONType"] | str | int | float | bool | None


def load_json(name: str) -> Any:
    """Load a JSON response fixture from tests/data."""
    return json.loads((DATA_DIR / name).read_text(encoding="utf-8"))


def create_mock_response(
    status_code: int = 200,
    json_data: JSONType | None = None,
    headers: dict[str, str] | None = None,
) -> Response:
    """Create a Response with its request attached so raise_for_status works."""
    response = Response(status_code, json=json_data, headers=headers)
    response._request = Request("GET", "https://example.com")
    return response


@pytest.fixture()
def mock_httpx_client() -> Generator[AsyncMock, None, None]:
    """Mock httpx.AsyncClient to avoid actual HTTP requests."""
    with patch("httpx.AsyncClient") as mock:
        mock_client = AsyncMock()
        mock.return_value.__aenter__.return_value = mock_client
        mock.return_value.__aexit__.return_value = None
        yield mock_client


@pytest.fixture()
def test_config_path() -> Path:
    """Path to the test config file."""
    return DATA_DIR / "test_config.yaml"


@pytest.fixture()
def app_config() -> AppConfig:
    """Default configuration logging to the console."""
    return AppConfig(logging=LoggingConfig(level="DEBUG", format="console"))


def make_snapshot(
    temperature: float = 20.0,
    condition: str = "Partly cloudy",
    wind_speed: float = 10.0,
    uv_index: float | None = 3.0,
    hourly: list[HourlyEntry] | None = None,
    daily: list[DailyEntry] | None = None,
    air_quality: AirQuality | None = None,
    provider: ProviderId = ProviderId.WEATHERAPI,
    is_historical: bool = False,
    utc_offset_seconds: int | None = None,
) -> Snapshot:
    """Build a small snapshot for alert and orchestration tests."""
    return Snapshot(
        location=Location(name="London", country="United Kingdom", lat=51.5, lon=-0.12),
        current=CurrentConditions(
            temperature=temperature,
            condition=condition,
            icon="wi-day-cloudy",
            humidity=60,
            wind_speed=wind_speed,
            wind_direction="SW",
            uv_index=uv_index,
            feels_like=temperature,
        ),
        hourly=hourly or [],
        daily=daily
        if daily is not None
        else [
            DailyEntry(
                date=date(2025, 6, 1),
                max_temp=temperature + 3,
                min_temp=temperature - 5,
                condition=condition,
                icon="wi-day-cloudy",
                wind_speed=wind_speed,
                precipitation_probability=10,
            )
        ],
        air_quality=air_quality,
        provider=provider,
        is_historical=is_historical,
        utc_offset_seconds=utc_offset_seconds,
    )


def make_hour(time: datetime, chance: float | None, temperature: float = 18.0) -> HourlyEntry:
    """Build an hourly entry with a given rain chance."""
    return HourlyEntry(
        time=time,
        temperature=temperature,
        condition="Cloudy",
        icon="wi-cloudy",
        wind_speed=8.0,
        feels_like=temperature,
        precipitation_probability=chance,
    )


@pytest.fixture()
def response_factory() -> Any:
    """Factory for mock HTTP responses."""
    return create_mock_response


@pytest.fixture()
def fixture_data() -> Any:
    """Loader for JSON fixtures in tests/data."""
    return load_json


@pytest.fixture()
def snapshot_factory() -> Any:
    """Factory for small snapshots."""
    return make_snapshot


@pytest.fixture()
def hour_factory() -> Any:
    """Factory for hourly entries."""
    return make_hour
