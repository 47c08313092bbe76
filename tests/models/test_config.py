"""Tests for the configuration models.

Tests validate the behavior of Pydantic models in config.py, including:
- Default values
- Validators
- Configuration loading from YAML
"""

from datetime import time
from pathlib import Path

import pytest
from pydantic import ValidationError

from weatherwell.exceptions import ConfigFileNotFoundError, InvalidConfigError
from weatherwell.models.alerts import ForecastKind
from weatherwell.models.config import (
    AppConfig,
    ProviderConfig,
    ProviderCredentials,
    SchedulerConfig,
    ThresholdConfig,
)
from weatherwell.models.weather import ProviderId


class TestProviderCredentials:
    """Test cases for ProviderCredentials."""

    def test_key_for(self) -> None:
        """Test keys are looked up by provider identifier."""
        credentials = ProviderCredentials(qweather="qw-key")

        assert credentials.key_for(ProviderId.QWEATHER) == "qw-key"
        assert credentials.key_for(ProviderId.WEATHERAPI) is None

    def test_openmeteo_never_has_a_key(self) -> None:
        assert ProviderCredentials().key_for(ProviderId.OPENMETEO) is None


class TestProviderConfig:
    """Test cases for ProviderConfig."""

    def test_default_values(self) -> None:
        config = ProviderConfig()

        assert config.preferred is None
        assert config.timeout_seconds == 10.0
        assert config.forecast_days == 7

    def test_preferred_accepts_identifier(self) -> None:
        assert ProviderConfig(preferred="openmeteo").preferred == ProviderId.OPENMETEO

    def test_unknown_preferred_provider(self) -> None:
        with pytest.raises(ValidationError):
            ProviderConfig(preferred="darksky")

    @pytest.mark.parametrize("timeout", [0.5, 61])
    def test_invalid_timeout(self, timeout: float) -> None:
        """Test timeouts outside 1-60 seconds are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            ProviderConfig(timeout_seconds=timeout)
        assert "Timeout must be between 1 and 60 seconds" in str(exc_info.value)

    @pytest.mark.parametrize("days", [0, 17])
    def test_invalid_forecast_days(self, days: int) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ProviderConfig(forecast_days=days)
        assert "Forecast days must be between 1 and 16" in str(exc_info.value)


class TestThresholdConfig:
    """Test cases for ThresholdConfig."""

    def test_default_values(self) -> None:
        """Test every category is enabled with the documented defaults."""
        config = ThresholdConfig()

        assert config.enable_notifications
        assert config.enable_umbrella_alerts
        assert config.enable_severe_weather_alerts
        assert config.rain_threshold == 70.0
        assert config.wind_speed_threshold == 50.0
        assert config.uv_threshold == 8.0
        assert config.temperature_threshold.high == 35.0
        assert config.temperature_threshold.low == 0.0

    @pytest.mark.parametrize("rain", [-1, 101])
    def test_invalid_rain_threshold(self, rain: float) -> None:
        with pytest.raises(ValidationError):
            ThresholdConfig(rain_threshold=rain)

    def test_negative_wind_threshold(self) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ThresholdConfig(wind_speed_threshold=-5)
        assert "Threshold must not be negative" in str(exc_info.value)

    def test_forecast_defaults(self) -> None:
        """Test the morning summary is on and the evening one is off."""
        config = ThresholdConfig()

        assert config.forecast_at(ForecastKind.DAILY) == time(8, 0)
        assert config.forecast_at(ForecastKind.HOURLY) is None
        assert config.hourly_forecast_time == "19:00"

    def test_forecast_at(self) -> None:
        config = ThresholdConfig(enable_hourly_forecast=True, hourly_forecast_time="18:45")
        assert config.forecast_at(ForecastKind.HOURLY) == time(18, 45)

    def test_master_switch_disables_forecasts(self) -> None:
        config = ThresholdConfig(enable_notifications=False)
        assert config.forecast_at(ForecastKind.DAILY) is None

    @pytest.mark.parametrize("value", ["8am", "24:00", "07:60", ""])
    def test_invalid_forecast_time(self, value: str) -> None:
        with pytest.raises(ValidationError) as exc_info:
            ThresholdConfig(daily_forecast_time=value)
        assert "Forecast time must be HH:MM" in str(exc_info.value)


class TestSchedulerConfig:
    """Test cases for SchedulerConfig."""

    def test_default_values(self) -> None:
        config = SchedulerConfig()
        assert config.interval_minutes == 60
        assert config.max_location_age_hours == 24

    def test_interval_too_short(self) -> None:
        """Test intervals under 15 minutes are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            SchedulerConfig(interval_minutes=5)
        assert "Alert interval must be at least 15 minutes" in str(exc_info.value)


class TestAppConfig:
    """Test cases for AppConfig."""

    def test_default_values(self) -> None:
        """Test an empty configuration is usable."""
        config = AppConfig()

        assert config.search.min_query_length == 2
        assert config.server.host == "127.0.0.1"
        assert config.server.port == 8000
        assert config.logging.level == "INFO"
        assert config.logging.format == "json"
        assert not config.debug

    def test_from_yaml(self, test_config_path: Path) -> None:
        """Test loading the test configuration file."""
        config = AppConfig.from_yaml(test_config_path)

        assert config.providers.preferred == ProviderId.OPENWEATHERMAP
        assert config.providers.credentials.weatherapi == "wapi-test-key-0123456789"
        assert config.providers.credentials.qweather is None
        assert config.providers.timeout_seconds == 8
        assert config.providers.forecast_days == 5
        assert not config.alerts.enable_uv_alerts
        assert config.alerts.rain_threshold == 60
        assert config.alerts.temperature_threshold.low == -2
        assert config.alerts.forecast_at(ForecastKind.HOURLY) == time(18, 30)
        assert config.scheduler.interval_minutes == 30
        assert config.search.min_query_length == 3
        assert config.server.port == 8080
        assert config.logging.format == "console"
        assert config.debug

    def test_from_yaml_accepts_str_path(self, test_config_path: Path) -> None:
        assert AppConfig.from_yaml(str(test_config_path)).server.host == "0.0.0.0"

    def test_empty_file(self, tmp_path: Path) -> None:
        """Test an empty file gives the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("", encoding="utf-8")
        assert AppConfig.from_yaml(path) == AppConfig()

    def test_missing_file(self, tmp_path: Path) -> None:
        missing = tmp_path / "missing.yaml"
        with pytest.raises(ConfigFileNotFoundError) as exc_info:
            AppConfig.from_yaml(missing)
        assert exc_info.value.details["path"] == str(missing)

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        path = tmp_path / "config.yaml"
        path.write_text("providers: [unclosed", encoding="utf-8")

        with pytest.raises(InvalidConfigError) as exc_info:
            AppConfig.from_yaml(path)
        assert exc_info.value.message == "Configuration file is not valid YAML"

    def test_invalid_values(self, tmp_path: Path) -> None:
        """Test schema violations are reported with the validator messages."""
        path = tmp_path / "config.yaml"
        path.write_text("scheduler:\n  interval_minutes: 1\n", encoding="utf-8")

        with pytest.raises(InvalidConfigError) as exc_info:
            AppConfig.from_yaml(path)
        assert exc_info.value.message == "Configuration values are invalid"
        assert any("15 minutes" in error for error in exc_info.value.details["errors"])
