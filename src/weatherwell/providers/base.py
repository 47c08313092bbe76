"""Provider adapter contract and shared HTTP handling.

Every upstream weather service is wrapped in a ``WeatherProvider`` subclass
that turns the provider's payloads into a normalized ``Snapshot``. This
module owns the parts all adapters share: the per-call timeout, mapping of
transport and HTTP failures onto the typed exception hierarchy, and
validation of raw payloads into per-provider response models.
"""

import logging
from abc import ABC, abstractmethod
from datetime import date
from typing import Any, ClassVar, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from weatherwell.constants import DEFAULT_API_KEYS, DEFAULT_FORECAST_DAYS, DEFAULT_TIMEOUT_SECONDS
from weatherwell.exceptions import (
    APIAuthenticationError,
    APIRateLimitError,
    APITimeoutError,
    InvalidAPIResponseError,
    ProviderConnectionError,
    ProviderHTTPError,
    chain_exception,
)
from weatherwell.models.weather import Location, ProviderId, Snapshot

ResponseModelT = TypeVar("ResponseModelT", bound=BaseModel)


class WeatherProvider(ABC):
    """Base class for provider adapters.

    An adapter holds only its API key and request timeout. It is cheap to
    build, so the registry constructs a fresh instance for every request and
    no state is shared between concurrent resolutions.

    Attributes:
        provider_id: Identifier of the provider this adapter wraps
        api_key: Key sent with requests (the built-in default when none is configured)
        timeout: Per-call HTTP timeout in seconds
    """

    provider_id: ClassVar[ProviderId]

    def __init__(
        self, api_key: str | None = None, timeout: float = DEFAULT_TIMEOUT_SECONDS
    ) -> None:
        """Initialize the adapter.

        Args:
            api_key: User supplied key; the built-in default key is used when empty
            timeout: Per-call HTTP timeout in seconds
        """
        self.default_key = DEFAULT_API_KEYS.get(self.provider_id.value, "")
        self.api_key = api_key or self.default_key
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)

    @property
    def uses_default_key(self) -> bool:
        """Whether the adapter runs on the built-in default key."""
        return self.api_key == self.default_key

    @abstractmethod
    async def fetch_snapshot(
        self, lat: float, lon: float, days: int = DEFAULT_FORECAST_DAYS
    ) -> Snapshot:
        """Fetch current conditions and forecast for a coordinate.

        Args:
            lat: Latitude
            lon: Longitude
            days: Number of forecast days requested

        Returns:
            A fully populated snapshot

        Raises:
            ProviderFetchError: On any transport, HTTP or payload failure
        """

    @abstractmethod
    async def fetch_historical(self, lat: float, lon: float, day: date) -> Snapshot:
        """Fetch observations for a past date.

        Args:
            lat: Latitude
            lon: Longitude
            day: Calendar date to fetch

        Returns:
            A snapshot built from historical data

        Raises:
            ProviderFetchError: On any transport, HTTP or payload failure
        """

    async def search_locations(self, query: str) -> list[Location]:
        """Search places by name.

        Providers without a search endpoint return no results.

        Args:
            query: Free text place name

        Returns:
            Matching locations, possibly empty
        """
        return []

    @abstractmethod
    def is_configured(self) -> bool:
        """Whether the adapter has what it needs to make requests."""

    @abstractmethod
    def source_label(self) -> str:
        """Human readable provenance label for snapshots from this adapter."""

    def _client(self) -> httpx.AsyncClient:
        """Create an HTTP client carrying the per-call timeout."""
        return httpx.AsyncClient(timeout=self.timeout)

    async def _get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> Any:
        """Perform a GET request and decode the JSON body.

        Args:
            client: HTTP client
            url: Endpoint URL
            params: Query parameters
            headers: Extra request headers

        Returns:
            Decoded JSON payload

        Raises:
            APIAuthenticationError: If the provider rejects the key (401/403)
            APIRateLimitError: If the provider's rate limit is exceeded (429)
            ProviderHTTPError: For any other non-2xx status
            APITimeoutError: If the request exceeds the timeout
            ProviderConnectionError: If the provider cannot be reached
            InvalidAPIResponseError: If the body is not valid JSON
        """
        provider = self.provider_id.value
        try:
            response = await client.get(url, params=params, headers=headers)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status in (401, 403):
                raise chain_exception(
                    APIAuthenticationError(
                        "Provider rejected the API key",
                        {"endpoint": url, "api_key_prefix": self.api_key[:4] + "..."},
                        provider=provider,
                        status_code=status,
                        response_body=e.response.text,
                    ),
                    e,
                ) from e
            elif status == 429:
                retry_after = e.response.headers.get("Retry-After", "")
                raise chain_exception(
                    APIRateLimitError(
                        "Provider rate limit exceeded",
                        {
                            "endpoint": url,
                            "retry_after": int(retry_after) if retry_after.isdigit() else 3600,
                        },
                        provider=provider,
                        status_code=status,
                        response_body=e.response.text,
                    ),
                    e,
                ) from e
            else:
                raise chain_exception(
                    ProviderHTTPError(
                        "Provider request failed",
                        {"endpoint": url},
                        provider=provider,
                        status_code=status,
                        response_body=e.response.text,
                    ),
                    e,
                ) from e
        except httpx.TimeoutException as e:
            raise chain_exception(
                APITimeoutError(
                    "Provider request timed out",
                    {"endpoint": url, "timeout": self.timeout},
                    provider=provider,
                ),
                e,
            ) from e
        except httpx.RequestError as e:
            raise chain_exception(
                ProviderConnectionError(
                    "Could not connect to provider",
                    {"endpoint": url, "error": str(e)},
                    provider=provider,
                ),
                e,
            ) from e

        try:
            return response.json()
        except ValueError as e:
            raise chain_exception(
                InvalidAPIResponseError(
                    "Provider returned a body that is not JSON",
                    {"endpoint": url},
                    provider=provider,
                    status_code=response.status_code,
                    response_body=response.text[:500],
                ),
                e,
            ) from e

    def _parse(self, model: type[ResponseModelT], data: Any) -> ResponseModelT:
        """Validate a raw payload into a response model.

        Args:
            model: Pydantic response model class
            data: Decoded JSON payload

        Returns:
            The validated model

        Raises:
            InvalidAPIResponseError: If the payload does not match the model
        """
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise chain_exception(
                InvalidAPIResponseError(
                    "Invalid API response format",
                    {
                        "model": model.__name__,
                        "errors": [
                            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}"
                            for err in e.errors()
                        ],
                    },
                    provider=self.provider_id.value,
                ),
                e,
            ) from e

    @staticmethod
    def coordinate_name(lat: float, lon: float) -> str:
        """Location name for providers without reverse geocoding."""
        return f"{lat:.2f}°, {lon:.2f}°"
