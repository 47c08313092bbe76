"""Tests for the OpenWeatherMap adapter."""

from datetime import date, datetime
from typing import Any
from unittest.mock import AsyncMock

import pytest

from weatherwell.models.weather import ProviderId
from weatherwell.providers.openweathermap import OpenWeatherMapProvider


@pytest.fixture()
def provider() -> OpenWeatherMapProvider:
    """Adapter with a user key."""
    return OpenWeatherMapProvider(api_key="owm-test-key")


@pytest.fixture()
def forecast_responses(response_factory: Any, fixture_data: Any) -> list[Any]:
    """Forecast followed by air pollution responses."""
    return [
        response_factory(200, fixture_data("owm_forecast.json")),
        response_factory(200, fixture_data("owm_air_pollution.json")),
    ]


class TestFetchSnapshot:
    """Tests for 3-hourly forecast normalization."""

    @pytest.mark.asyncio()
    async def test_request(
        self,
        provider: OpenWeatherMapProvider,
        mock_httpx_client: AsyncMock,
        forecast_responses: list[Any],
    ) -> None:
        """Test forecast and air pollution are both requested in metric units."""
        mock_httpx_client.get.side_effect = forecast_responses
        await provider.fetch_snapshot(51.5, -0.12, days=7)

        forecast_call, air_call = mock_httpx_client.get.call_args_list
        assert forecast_call.args[0].endswith("/forecast")
        assert forecast_call.kwargs["params"]["units"] == "metric"
        assert forecast_call.kwargs["params"]["cnt"] == 40
        assert air_call.args[0].endswith("/air_pollution")

    @pytest.mark.asyncio()
    async def test_wind_in_kmh(
        self,
        provider: OpenWeatherMapProvider,
        mock_httpx_client: AsyncMock,
        forecast_responses: list[Any],
    ) -> None:
        """Test m/s wind speeds are converted to km/h."""
        mock_httpx_client.get.side_effect = forecast_responses
        snapshot = await provider.fetch_snapshot(51.5, -0.12)

        assert snapshot.current.wind_speed == pytest.approx(18.0)
        assert snapshot.current.wind_direction == "SW"
        assert snapshot.hourly[1].wind_speed == pytest.approx(23.4)

    @pytest.mark.asyncio()
    async def test_current_and_hourly(
        self,
        provider: OpenWeatherMapProvider,
        mock_httpx_client: AsyncMock,
        forecast_responses: list[Any],
    ) -> None:
        """Test the first step stands in for current conditions in local time."""
        mock_httpx_client.get.side_effect = forecast_responses
        snapshot = await provider.fetch_snapshot(51.5, -0.12)

        assert snapshot.provider == ProviderId.OPENWEATHERMAP
        assert snapshot.location.name == "London"
        assert snapshot.location.country == "GB"
        assert snapshot.utc_offset_seconds == 3600
        assert snapshot.current.temperature == 17.5
        assert snapshot.current.condition == "scattered clouds"
        assert snapshot.current.visibility == 10.0

        assert [hour.time for hour in snapshot.hourly] == [
            datetime(2025, 6, 1, 10, 0),
            datetime(2025, 6, 1, 13, 0),
            datetime(2025, 6, 1, 19, 0),
            datetime(2025, 6, 2, 1, 0),
        ]
        assert snapshot.hourly[1].precipitation_probability == pytest.approx(72.0)
        assert snapshot.hourly[1].precipitation_mm == 0.8
        assert snapshot.hourly[2].icon == "wi-night-clear"
        assert snapshot.hourly[2].feels_like == 15.2
        assert snapshot.hourly[3].precipitation_mm == 0.5

    @pytest.mark.asyncio()
    async def test_daily_groups(
        self,
        provider: OpenWeatherMapProvider,
        mock_httpx_client: AsyncMock,
        forecast_responses: list[Any],
    ) -> None:
        """Test steps are grouped per local calendar day."""
        mock_httpx_client.get.side_effect = forecast_responses
        snapshot = await provider.fetch_snapshot(51.5, -0.12)

        assert [day.date for day in snapshot.daily] == [date(2025, 6, 1), date(2025, 6, 2)]
        today = snapshot.daily[0]
        assert today.max_temp == 20.3
        assert today.min_temp == 15.2
        assert today.humidity == 63
        assert today.wind_speed == pytest.approx(23.4)
        assert today.precipitation_probability == pytest.approx(72.0)
        assert today.precipitation_mm == pytest.approx(0.8)
        assert today.icon == "wi-cloudy"
        assert snapshot.daily[1].icon == "wi-snow"

    @pytest.mark.asyncio()
    async def test_astronomy_and_air_quality(
        self,
        provider: OpenWeatherMapProvider,
        mock_httpx_client: AsyncMock,
        forecast_responses: list[Any],
    ) -> None:
        """Test sun times use the city offset and there is no moon data."""
        mock_httpx_client.get.side_effect = forecast_responses
        snapshot = await provider.fetch_snapshot(51.5, -0.12)

        assert snapshot.astronomy.sunrise == "4:45 AM"
        assert snapshot.astronomy.sunset == "9:11 PM"
        assert snapshot.astronomy.moon_illumination == -1
        assert snapshot.air_quality is not None
        assert snapshot.air_quality.aqi == 35
        assert snapshot.air_quality.pm2_5 == 8.4

    @pytest.mark.asyncio()
    async def test_air_quality_failure_is_tolerated(
        self,
        provider: OpenWeatherMapProvider,
        mock_httpx_client: AsyncMock,
        response_factory: Any,
        fixture_data: Any,
    ) -> None:
        """Test a failing air pollution call leaves the snapshot without air quality."""
        mock_httpx_client.get.side_effect = [
            response_factory(200, fixture_data("owm_forecast.json")),
            response_factory(500, {"message": "internal error"}),
        ]
        snapshot = await provider.fetch_snapshot(51.5, -0.12)

        assert snapshot.air_quality is None
        assert snapshot.current.temperature == 17.5


class TestHistoricalAndSearch:
    """Tests for the time machine and direct geocoding."""

    @pytest.mark.asyncio()
    async def test_fetch_historical(
        self, provider: OpenWeatherMapProvider, mock_httpx_client: AsyncMock, response_factory: Any
    ) -> None:
        """Test the observation at noon UTC becomes current conditions."""
        mock_httpx_client.get.return_value = response_factory(
            200,
            {
                "lat": 51.5,
                "lon": -0.12,
                "timezone": "Europe/London",
                "timezone_offset": 3600,
                "data": [
                    {
                        "dt": 1748779200,
                        "sunrise": 1748749500,
                        "sunset": 1748808660,
                        "temp": 21.0,
                        "feels_like": 20.4,
                        "pressure": 1014,
                        "humidity": 48,
                        "uvi": 6.1,
                        "visibility": 10000,
                        "wind_speed": 4.0,
                        "wind_deg": 90,
                        "weather": [{"id": 800, "description": "clear sky", "icon": "01d"}],
                    }
                ],
            },
        )
        snapshot = await provider.fetch_historical(51.5, -0.12, date(2025, 6, 1))

        assert mock_httpx_client.get.call_args.kwargs["params"]["dt"] == 1748779200
        assert snapshot.is_historical
        assert snapshot.current.wind_speed == pytest.approx(14.4)
        assert snapshot.current.wind_direction == "E"
        assert snapshot.current.uv_index == 6.1
        assert snapshot.astronomy.sunrise == "4:45 AM"

    @pytest.mark.asyncio()
    async def test_search(
        self, provider: OpenWeatherMapProvider, mock_httpx_client: AsyncMock, response_factory: Any
    ) -> None:
        """Test geocoding results use the state, or the country, as region."""
        mock_httpx_client.get.return_value = response_factory(
            200,
            [
                {
                    "name": "Paris",
                    "lat": 48.85,
                    "lon": 2.35,
                    "country": "FR",
                    "state": "Ile-de-France",
                },
                {"name": "Paris", "lat": 33.66, "lon": -95.55, "country": "US"},
            ],
        )
        results = await provider.search_locations("Paris")
        assert [r.region for r in results] == ["Ile-de-France", "US"]


def test_labels() -> None:
    """Test configuration and provenance label rules."""
    assert OpenWeatherMapProvider(api_key="abc").is_configured()
    assert OpenWeatherMapProvider(api_key="abc").source_label() == "OpenWeatherMap (Custom)"
