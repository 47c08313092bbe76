"""Tests for the WeatherAPI.com adapter."""

from datetime import date, datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from weatherwell.exceptions import InvalidAPIResponseError
from weatherwell.models.weather import ProviderId
from weatherwell.providers.weatherapi import WeatherAPIProvider

KEY = "wapi-test-key-0123456789"


@pytest.fixture()
def provider() -> WeatherAPIProvider:
    """Adapter with a user key."""
    return WeatherAPIProvider(api_key=KEY)


class TestFetchSnapshot:
    """Tests for forecast.json normalization."""

    @pytest.mark.asyncio()
    async def test_request(
        self,
        provider: WeatherAPIProvider,
        mock_httpx_client: AsyncMock,
        response_factory: Any,
        fixture_data: Any,
    ) -> None:
        """Test the forecast request parameters."""
        mock_httpx_client.get.return_value = response_factory(
            200, fixture_data("weatherapi_forecast.json")
        )
        await provider.fetch_snapshot(51.52, -0.11, days=14)

        url = mock_httpx_client.get.call_args.args[0]
        params = mock_httpx_client.get.call_args.kwargs["params"]
        assert url.endswith("/forecast.json")
        assert params["q"] == "51.52,-0.11"
        assert params["days"] == 10
        assert params["aqi"] == "yes"
        assert params["key"] == KEY

    @pytest.mark.asyncio()
    async def test_current_and_location(
        self,
        provider: WeatherAPIProvider,
        mock_httpx_client: AsyncMock,
        response_factory: Any,
        fixture_data: Any,
    ) -> None:
        """Test current conditions and location are copied in canonical units."""
        mock_httpx_client.get.return_value = response_factory(
            200, fixture_data("weatherapi_forecast.json")
        )
        snapshot = await provider.fetch_snapshot(51.52, -0.11)

        assert snapshot.provider == ProviderId.WEATHERAPI
        assert snapshot.location.name == "London"
        assert snapshot.location.country == "United Kingdom"
        assert snapshot.utc_offset_seconds == 3600
        assert snapshot.current.temperature == 18.0
        assert snapshot.current.wind_speed == 14.4
        assert snapshot.current.wind_direction == "SW"
        assert snapshot.current.icon == "wi-day-cloudy"
        assert snapshot.current.uv_index == 5.0
        assert snapshot.current.visibility == 10.0
        assert not snapshot.is_historical

    @pytest.mark.asyncio()
    async def test_air_quality_from_pm25(
        self,
        provider: WeatherAPIProvider,
        mock_httpx_client: AsyncMock,
        response_factory: Any,
        fixture_data: Any,
    ) -> None:
        """Test a PM2.5 of 40 μg/m3 lands in the 101-150 band."""
        mock_httpx_client.get.return_value = response_factory(
            200, fixture_data("weatherapi_forecast.json")
        )
        snapshot = await provider.fetch_snapshot(51.52, -0.11)

        assert snapshot.air_quality is not None
        assert snapshot.air_quality.pm2_5 == 40.0
        assert 101 <= snapshot.air_quality.aqi <= 150

    @pytest.mark.asyncio()
    async def test_hourly_and_daily(
        self,
        provider: WeatherAPIProvider,
        mock_httpx_client: AsyncMock,
        response_factory: Any,
        fixture_data: Any,
    ) -> None:
        """Test hourly entries are flattened and daily entries keep astronomy."""
        mock_httpx_client.get.return_value = response_factory(
            200, fixture_data("weatherapi_forecast.json")
        )
        snapshot = await provider.fetch_snapshot(51.52, -0.11)

        assert len(snapshot.hourly) == 2
        first, night = snapshot.hourly
        assert first.time == datetime(2025, 6, 1, 10, 0)
        assert first.wind_direction == "N"
        assert first.precipitation_probability == 10
        # Falls back to the label when no degrees are given
        assert night.wind_direction == "WSW"
        assert night.feels_like == 13.1
        assert night.icon == "wi-night-alt-showers"

        assert [day.date for day in snapshot.daily] == [date(2025, 6, 1), date(2025, 6, 2)]
        assert snapshot.daily[1].precipitation_probability == 85
        assert snapshot.daily[1].astronomy is not None
        assert snapshot.daily[1].astronomy.moon_illumination == pytest.approx(0.31)

    @pytest.mark.asyncio()
    async def test_astronomy(
        self,
        provider: WeatherAPIProvider,
        mock_httpx_client: AsyncMock,
        response_factory: Any,
        fixture_data: Any,
    ) -> None:
        """Test astronomy times and illumination are normalized."""
        mock_httpx_client.get.return_value = response_factory(
            200, fixture_data("weatherapi_forecast.json")
        )
        snapshot = await provider.fetch_snapshot(51.52, -0.11)

        assert snapshot.astronomy.sunrise == "4:45 AM"
        assert snapshot.astronomy.sunset == "9:11 PM"
        assert snapshot.astronomy.moon_phase == "Waxing Crescent"
        assert snapshot.astronomy.moon_illumination == pytest.approx(0.23)
        assert snapshot.astronomy.illumination_percent == 23

    @pytest.mark.asyncio()
    async def test_malformed_payload(
        self, provider: WeatherAPIProvider, mock_httpx_client: AsyncMock, response_factory: Any
    ) -> None:
        """Test a payload without forecast days is rejected, not half-filled."""
        mock_httpx_client.get.return_value = response_factory(
            200, {"location": {"name": "X", "lat": 1, "lon": 2}, "current": {}}
        )
        with pytest.raises(InvalidAPIResponseError):
            await provider.fetch_snapshot(1, 2)


class TestHistoricalAndSearch:
    """Tests for history.json and search.json."""

    @pytest.mark.asyncio()
    async def test_fetch_historical(
        self,
        provider: WeatherAPIProvider,
        mock_httpx_client: AsyncMock,
        response_factory: Any,
        fixture_data: Any,
    ) -> None:
        """Test history uses day averages as current conditions."""
        data = fixture_data("weatherapi_forecast.json")
        del data["current"]
        data["forecast"]["forecastday"] = data["forecast"]["forecastday"][:1]
        mock_httpx_client.get.return_value = response_factory(200, data)

        snapshot = await provider.fetch_historical(51.52, -0.11, date(2025, 6, 1))

        params = mock_httpx_client.get.call_args.kwargs["params"]
        assert params["dt"] == "2025-06-01"
        assert snapshot.is_historical
        assert snapshot.current.temperature == 17.0
        assert snapshot.current.wind_speed == 20.2
        assert snapshot.air_quality is None
        assert len(snapshot.daily) == 1

    @pytest.mark.asyncio()
    async def test_search(
        self, provider: WeatherAPIProvider, mock_httpx_client: AsyncMock, response_factory: Any
    ) -> None:
        """Test search results become locations."""
        mock_httpx_client.get.return_value = response_factory(
            200,
            [
                {
                    "id": 2801268,
                    "name": "London",
                    "region": "City of London, Greater London",
                    "country": "United Kingdom",
                    "lat": 51.52,
                    "lon": -0.11,
                }
            ],
        )
        results = await provider.search_locations("Lond")
        assert len(results) == 1
        assert results[0].name == "London"
        assert results[0].region == "City of London, Greater London"
        assert mock_httpx_client.get.call_args.args[0].endswith("/search.json")
