"""Two-tier provider fallback.

A resolve makes at most two adapter calls: one to the provider asked for (or
the first configured primary provider) and, if that fails, one to the first
configured provider of the secondary order. Adapters are built per request
from the registry, so concurrent resolves share nothing.
"""

import logging
from collections.abc import Awaitable, Callable
from datetime import date

from weatherwell.constants import DEFAULT_FORECAST_DAYS, DEFAULT_TIMEOUT_SECONDS
from weatherwell.exceptions import AllProvidersUnavailableError, UnknownProviderError
from weatherwell.models.config import ProviderCredentials
from weatherwell.models.weather import ProviderId, ResolvedSnapshot, Snapshot
from weatherwell.providers.base import WeatherProvider
from weatherwell.providers.registry import ProviderRegistry, create_default_registry

logger = logging.getLogger(__name__)

PRIMARY_ORDER = (ProviderId.WEATHERAPI, ProviderId.OPENWEATHERMAP, ProviderId.VISUALCROSSING)
# Open-Meteo is keyless and always configured, so it comes last
SECONDARY_ORDER = (
    ProviderId.OPENWEATHERMAP,
    ProviderId.VISUALCROSSING,
    ProviderId.WEATHERAPI,
    ProviderId.OPENMETEO,
)
FALLBACK_SUFFIX = " (Fallback)"

FetchCall = Callable[[WeatherProvider], Awaitable[Snapshot]]


class WeatherOrchestrator:
    """Resolves a snapshot from the first provider that answers."""

    def __init__(self, registry: ProviderRegistry | None = None) -> None:
        """Initialize the orchestrator.

        Args:
            registry: Registry used to build adapters; the built-in one when omitted
        """
        self.registry = registry or create_default_registry()

    async def resolve(
        self,
        lat: float,
        lon: float,
        preferred_provider: ProviderId | None = None,
        credentials: ProviderCredentials | None = None,
        days: int = DEFAULT_FORECAST_DAYS,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> ResolvedSnapshot:
        """Fetch current conditions and forecast with one fallback.

        Args:
            lat: Latitude
            lon: Longitude
            preferred_provider: Provider to try first, if configured
            credentials: User API keys
            days: Forecast days requested
            timeout: Per-call HTTP timeout in seconds

        Returns:
            The snapshot together with its source label

        Raises:
            AllProvidersUnavailableError: If both attempts fail or nothing is configured
        """
        return await self._resolve(
            lambda adapter: adapter.fetch_snapshot(lat, lon, days),
            preferred_provider,
            credentials,
            timeout,
        )

    async def resolve_historical(
        self,
        lat: float,
        lon: float,
        day: date,
        preferred_provider: ProviderId | None = None,
        credentials: ProviderCredentials | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> ResolvedSnapshot:
        """Fetch observations for a past date with the same fallback policy."""
        return await self._resolve(
            lambda adapter: adapter.fetch_historical(lat, lon, day),
            preferred_provider,
            credentials,
            timeout,
        )

    def _build(
        self, provider: ProviderId, credentials: ProviderCredentials | None, timeout: float
    ) -> WeatherProvider | None:
        """Build an adapter, or None when the provider is unknown or unconfigured."""
        try:
            adapter = self.registry.create(provider, credentials, timeout)
        except UnknownProviderError as e:
            logger.warning(f"Skipping provider {provider.value}: {e}")
            return None
        return adapter if adapter.is_configured() else None

    def _first_configured(
        self,
        order: tuple[ProviderId, ...],
        credentials: ProviderCredentials | None,
        timeout: float,
        exclude: ProviderId | None = None,
    ) -> WeatherProvider | None:
        for provider in order:
            if provider == exclude:
                continue
            adapter = self._build(provider, credentials, timeout)
            if adapter is not None:
                return adapter
        return None

    async def _resolve(
        self,
        fetch: FetchCall,
        preferred_provider: ProviderId | None,
        credentials: ProviderCredentials | None,
        timeout: float,
    ) -> ResolvedSnapshot:
        attempts: list[tuple[str, Exception]] = []

        primary = None
        if preferred_provider is not None:
            primary = self._build(preferred_provider, credentials, timeout)
            if primary is None:
                logger.info(
                    f"Preferred provider {preferred_provider.value} is not configured, "
                    "using the primary order"
                )
        if primary is None:
            primary = self._first_configured(PRIMARY_ORDER, credentials, timeout)
        requested = preferred_provider or (primary.provider_id if primary else None)

        if primary is not None:
            try:
                snapshot = await fetch(primary)
                return self._resolved(snapshot, primary, requested)
            except Exception as e:
                logger.warning(
                    f"Primary provider {primary.provider_id.value} failed, trying secondary: {e}"
                )
                attempts.append((primary.provider_id.value, e))

        secondary = self._first_configured(
            SECONDARY_ORDER,
            credentials,
            timeout,
            exclude=primary.provider_id if primary else None,
        )
        if secondary is not None:
            try:
                snapshot = await fetch(secondary)
                return self._resolved(snapshot, secondary, requested)
            except Exception as e:
                logger.error(f"Secondary provider {secondary.provider_id.value} failed: {e}")
                attempts.append((secondary.provider_id.value, e))

        raise AllProvidersUnavailableError(
            "All weather services are unavailable",
            {"tried": [provider for provider, _ in attempts]},
            attempts=attempts,
        )

    @staticmethod
    def _resolved(
        snapshot: Snapshot, adapter: WeatherProvider, requested: ProviderId | None
    ) -> ResolvedSnapshot:
        fallback_used = requested is not None and adapter.provider_id != requested
        source = adapter.source_label()
        if fallback_used:
            source += FALLBACK_SUFFIX
        logger.info(f"Resolved weather from {source}")
        return ResolvedSnapshot(
            snapshot=snapshot,
            source=source,
            provider=adapter.provider_id,
            fallback_used=fallback_used,
        )
