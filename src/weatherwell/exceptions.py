"""Custom exception hierarchy for the WeatherWell core.

This module defines domain-specific exceptions to provide better error handling,
clearer intent, and improved debugging capabilities throughout the application.

Exception Hierarchy:
    WeatherWellError (Base)
    ├── ConfigurationError
    │   ├── InvalidConfigError
    │   ├── MissingConfigError
    │   └── ConfigFileNotFoundError
    ├── ProviderError
    │   ├── UnknownProviderError
    │   └── ProviderFetchError
    │       ├── ProviderHTTPError
    │       ├── APIRateLimitError
    │       ├── APIAuthenticationError
    │       ├── APITimeoutError
    │       ├── ProviderConnectionError
    │       └── InvalidAPIResponseError
    └── AllProvidersUnavailableError
"""

from typing import Any


# Base Exception
class WeatherWellError(Exception):
    """Base exception for all WeatherWell errors.

    This is the root exception that all custom exceptions inherit from,
    allowing for broad exception handling when needed.

    Attributes:
        message: Human-readable error description
        details: Optional dictionary containing additional error context
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        """Initialize the exception with message and optional details.

        Args:
            message: Human-readable error description
            details: Optional dictionary containing additional error context
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        """Return string representation of the exception."""
        if self.details:
            return f"{self.message} - Details: {self.details}"
        return self.message


# Configuration Exceptions
class ConfigurationError(WeatherWellError):
    """Base exception for configuration-related errors."""
    pass


class InvalidConfigError(ConfigurationError):
    """Raised when configuration contains invalid values.

    Example:
        raise InvalidConfigError(
            "Invalid alert interval",
            {"field": "interval_minutes", "value": 5, "reason": "Must be at least 15"}
        )
    """
    pass


class MissingConfigError(ConfigurationError):
    """Raised when required configuration is missing.

    Example:
        raise MissingConfigError(
            "Required configuration missing",
            {"field": "providers", "config_section": "root"}
        )
    """
    pass


class ConfigFileNotFoundError(ConfigurationError):
    """Raised when configuration file cannot be found.

    Example:
        raise ConfigFileNotFoundError(
            "Configuration file not found",
            {"path": "/etc/weatherwell/config.yaml"}
        )
    """
    pass


# Provider Exceptions
class ProviderError(WeatherWellError):
    """Base exception for provider adapter errors."""
    pass


class UnknownProviderError(ProviderError):
    """Raised when a provider identifier has no registered adapter.

    Example:
        raise UnknownProviderError(
            "No adapter registered for provider",
            {"provider": "darksky", "registered": ["weatherapi", "openmeteo"]}
        )
    """
    pass


class ProviderFetchError(ProviderError):
    """Typed fetch failure raised by an adapter.

    An adapter raises this (or a subclass) instead of returning a partially
    populated snapshot.
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        provider: str | None = None,
        status_code: int | None = None,
        response_body: str | None = None,
    ) -> None:
        """Initialize fetch exception with additional context.

        Args:
            message: Human-readable error description
            details: Optional dictionary containing additional error context
            provider: Identifier of the adapter that failed
            status_code: HTTP status code if applicable
            response_body: Raw response body for debugging
        """
        super().__init__(message, details)
        self.provider = provider
        self.status_code = status_code
        self.response_body = response_body


class ProviderHTTPError(ProviderFetchError):
    """Raised when a provider answers with a non-2xx status.

    Example:
        raise ProviderHTTPError(
            "Weather request failed",
            {"endpoint": "https://api.weatherapi.com/v1/forecast.json"},
            provider="weatherapi",
            status_code=500,
            response_body="Internal Server Error"
        )
    """
    pass


class APIRateLimitError(ProviderFetchError):
    """Raised when a provider's rate limit is exceeded.

    Example:
        raise APIRateLimitError(
            "API rate limit exceeded",
            {"retry_after": 3600},
            provider="openweathermap",
            status_code=429
        )
    """
    pass


class APIAuthenticationError(ProviderFetchError):
    """Raised when a provider rejects the API key.

    Example:
        raise APIAuthenticationError(
            "Invalid API key",
            {"api_key_prefix": "abc123..."},
            provider="visualcrossing",
            status_code=401
        )
    """
    pass


class APITimeoutError(ProviderFetchError):
    """Raised when a provider request exceeds the per-call timeout.

    Example:
        raise APITimeoutError(
            "API request timed out",
            {"endpoint": "https://api.open-meteo.com/v1/forecast", "timeout": 10.0},
            provider="openmeteo"
        )
    """
    pass


class ProviderConnectionError(ProviderFetchError):
    """Raised when the provider cannot be reached at all.

    Example:
        raise ProviderConnectionError(
            "Could not connect to provider",
            {"endpoint": "https://devapi.qweather.com/v7/weather/now"},
            provider="qweather"
        )
    """
    pass


class InvalidAPIResponseError(ProviderFetchError):
    """Raised when a provider returns invalid or malformed data.

    Example:
        raise InvalidAPIResponseError(
            "Invalid API response format",
            {"errors": ["current.temp_c: Field required"]},
            provider="weatherapi",
            status_code=200,
            response_body='{"current": {}}'
        )
    """
    pass


# Orchestration Exceptions
class AllProvidersUnavailableError(WeatherWellError):
    """Raised when the primary and the fallback provider both fail.

    Attributes:
        attempts: (provider, error) pairs in the order they were tried
    """

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
        attempts: list[tuple[str, Exception]] | None = None,
    ) -> None:
        """Initialize the aggregate failure.

        Args:
            message: Human-readable error description
            details: Optional dictionary containing additional error context
            attempts: Provider identifiers paired with the error each raised
        """
        super().__init__(message, details)
        self.attempts = attempts or []


# Utility function for exception chaining
def chain_exception(new_exception: WeatherWellError, cause: Exception) -> WeatherWellError:
    """Chain a new exception with its underlying cause.

    This utility function ensures proper exception chaining for better
    debugging and error tracking.

    Args:
        new_exception: The new domain-specific exception to raise
        cause: The underlying exception that caused this error

    Returns:
        The new exception with cause properly chained

    Example:
        try:
            response = await client.get(url)
        except httpx.RequestError as e:
            raise chain_exception(
                ProviderConnectionError("Failed to reach provider", {"url": url}),
                e
            ) from e
    """
    new_exception.__cause__ = cause
    return new_exception
