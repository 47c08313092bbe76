"""Configuration models for the WeatherWell core.

Defines Pydantic models for provider preference and credentials, alert
thresholds, scheduling, search, the HTTP service and logging. The settings
collaborator owns these values; the core only reads them.
"""

from datetime import datetime, time
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError, field_validator

from weatherwell.constants import (
    DEFAULT_ALERT_INTERVAL_MINUTES,
    DEFAULT_DAILY_FORECAST_TIME,
    DEFAULT_FORECAST_DAYS,
    DEFAULT_HOURLY_FORECAST_TIME,
    DEFAULT_MIN_QUERY_LENGTH,
    DEFAULT_RAIN_THRESHOLD,
    DEFAULT_SERVER_HOST,
    DEFAULT_SERVER_PORT,
    DEFAULT_TEMPERATURE_HIGH,
    DEFAULT_TEMPERATURE_LOW,
    DEFAULT_TIMEOUT_SECONDS,
    DEFAULT_UV_THRESHOLD,
    DEFAULT_WIND_THRESHOLD,
    MAX_DAILY_ENTRIES,
    MAX_LOCATION_AGE_HOURS,
    MIN_ALERT_INTERVAL_MINUTES,
)
from weatherwell.exceptions import ConfigFileNotFoundError, InvalidConfigError
from weatherwell.models.alerts import ForecastKind
from weatherwell.models.weather import ProviderId


class ProviderCredentials(BaseModel):
    """Per-provider API keys.

    A missing key means "use the adapter's built-in default key".
    """

    weatherapi: str | None = None
    openweathermap: str | None = None
    visualcrossing: str | None = None
    qweather: str | None = None
    meteostat: str | None = None

    def key_for(self, provider: ProviderId) -> str | None:
        """Get the configured key for a provider.

        Args:
            provider: Provider identifier.

        Returns:
            The key, or None when no key is configured (Open-Meteo never has one).
        """
        return getattr(self, provider.value, None)


class ProviderConfig(BaseModel):
    """Provider selection configuration."""

    preferred: ProviderId | None = None
    credentials: ProviderCredentials = Field(default_factory=ProviderCredentials)
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    forecast_days: int = DEFAULT_FORECAST_DAYS

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate the per-call timeout.

        Args:
            v: Timeout in seconds.

        Returns:
            The validated timeout.

        Raises:
            ValueError: If the timeout is outside 1-60 seconds.
        """
        if v < 1 or v > 60:
            raise ValueError("Timeout must be between 1 and 60 seconds")
        return v

    @field_validator("forecast_days")
    @classmethod
    def validate_forecast_days(cls, v: int) -> int:
        """Validate the number of forecast days requested.

        Args:
            v: Number of days.

        Returns:
            The validated number of days.

        Raises:
            ValueError: If the count is less than 1 or greater than 16.
        """
        if v < 1 or v > MAX_DAILY_ENTRIES:
            raise ValueError(f"Forecast days must be between 1 and {MAX_DAILY_ENTRIES}")
        return v


class TemperatureThreshold(BaseModel):
    """High and low temperature thresholds in Celsius."""

    high: float = DEFAULT_TEMPERATURE_HIGH
    low: float = DEFAULT_TEMPERATURE_LOW


class ThresholdConfig(BaseModel):
    """Alert thresholds and per-category enable flags.

    Passed by value into every evaluation cycle.
    """

    enable_notifications: bool = True
    enable_umbrella_alerts: bool = True
    enable_wind_alerts: bool = True
    enable_uv_alerts: bool = True
    enable_temperature_alerts: bool = True
    enable_aqi_alerts: bool = True
    enable_severe_weather_alerts: bool = True
    rain_threshold: float = DEFAULT_RAIN_THRESHOLD  # % chance
    wind_speed_threshold: float = DEFAULT_WIND_THRESHOLD  # km/h
    uv_threshold: float = DEFAULT_UV_THRESHOLD
    temperature_threshold: TemperatureThreshold = Field(default_factory=TemperatureThreshold)
    # Forecast summaries are scheduled digests, not threshold alerts
    enable_daily_forecast: bool = True
    enable_hourly_forecast: bool = False
    daily_forecast_time: str = DEFAULT_DAILY_FORECAST_TIME  # HH:MM, device local time
    hourly_forecast_time: str = DEFAULT_HOURLY_FORECAST_TIME

    @field_validator("rain_threshold")
    @classmethod
    def validate_rain_threshold(cls, v: float) -> float:
        """Validate the rain threshold is a percentage.

        Args:
            v: Rain threshold.

        Returns:
            The validated threshold.

        Raises:
            ValueError: If the threshold is outside 0-100.
        """
        if v < 0 or v > 100:
            raise ValueError("Rain threshold must be between 0 and 100 percent")
        return v

    @field_validator("wind_speed_threshold", "uv_threshold")
    @classmethod
    def validate_non_negative(cls, v: float) -> float:
        """Validate wind and UV thresholds are not negative.

        Args:
            v: Threshold value.

        Returns:
            The validated threshold.

        Raises:
            ValueError: If the threshold is negative.
        """
        if v < 0:
            raise ValueError("Threshold must not be negative")
        return v

    @field_validator("daily_forecast_time", "hourly_forecast_time")
    @classmethod
    def validate_forecast_time(cls, v: str) -> str:
        """Validate a forecast time is a 24-hour HH:MM string."""
        try:
            datetime.strptime(v, "%H:%M")
        except ValueError as e:
            raise ValueError(f"Forecast time must be HH:MM, got {v!r}") from e
        return v

    def forecast_at(self, kind: ForecastKind) -> time | None:
        """Scheduled time of a forecast summary, or None when it is switched off."""
        if not self.enable_notifications:
            return None
        if kind == ForecastKind.DAILY:
            enabled, at = self.enable_daily_forecast, self.daily_forecast_time
        else:
            enabled, at = self.enable_hourly_forecast, self.hourly_forecast_time
        return datetime.strptime(at, "%H:%M").time() if enabled else None


class SchedulerConfig(BaseModel):
    """Background alert scheduling configuration."""

    interval_minutes: int = DEFAULT_ALERT_INTERVAL_MINUTES
    max_location_age_hours: float = MAX_LOCATION_AGE_HOURS

    @field_validator("interval_minutes")
    @classmethod
    def validate_interval(cls, v: int) -> int:
        """Validate the alert interval is not too frequent.

        Args:
            v: The interval in minutes.

        Returns:
            The validated interval.

        Raises:
            ValueError: If the interval is shorter than 15 minutes.
        """
        if v < MIN_ALERT_INTERVAL_MINUTES:
            raise ValueError(
                f"Alert interval must be at least {MIN_ALERT_INTERVAL_MINUTES} minutes"
            )
        return v


class SearchConfig(BaseModel):
    """Location search configuration."""

    min_query_length: int = DEFAULT_MIN_QUERY_LENGTH


class ServerConfig(BaseModel):
    """HTTP service configuration."""

    host: str = DEFAULT_SERVER_HOST
    port: int = DEFAULT_SERVER_PORT


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    file: str | None = None
    format: str = "json"
    max_size_mb: int = 5
    backup_count: int = 3


class AppConfig(BaseModel):
    """Main application configuration."""

    providers: ProviderConfig = Field(default_factory=ProviderConfig)
    alerts: ThresholdConfig = Field(default_factory=ThresholdConfig)
    scheduler: SchedulerConfig = Field(default_factory=SchedulerConfig)
    search: SearchConfig = Field(default_factory=SearchConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    debug: bool = False

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> "AppConfig":
        """Load configuration from YAML file.

        Args:
            config_path: Path to the YAML configuration file. Can be a string path
                or a Path object.

        Returns:
            An initialized AppConfig object with values from the YAML file.

        Raises:
            ConfigFileNotFoundError: If the specified config file doesn't exist.
            InvalidConfigError: If the YAML is malformed or values don't match the schema.
        """
        import yaml

        path = Path(config_path)
        if not path.is_file():
            raise ConfigFileNotFoundError("Configuration file not found", {"path": str(path)})

        try:
            config_data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
            return cls.model_validate(config_data)
        except yaml.YAMLError as e:
            raise InvalidConfigError(
                "Configuration file is not valid YAML", {"path": str(path), "error": str(e)}
            ) from e
        except ValidationError as e:
            raise InvalidConfigError(
                "Configuration values are invalid",
                {"path": str(path), "errors": [err["msg"] for err in e.errors()]},
            ) from e
