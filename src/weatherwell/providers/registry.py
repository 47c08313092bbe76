"""Provider registry mapping identifiers to adapter factories.

The orchestrator receives a registry instead of reaching for module level
singletons, so tests can register fakes and every request gets freshly built
adapters.
"""

import logging
from collections.abc import Callable

from weatherwell.constants import DEFAULT_TIMEOUT_SECONDS
from weatherwell.exceptions import UnknownProviderError
from weatherwell.models.config import ProviderCredentials
from weatherwell.models.weather import ProviderId
from weatherwell.providers.base import WeatherProvider
from weatherwell.providers.meteostat import MeteostatProvider
from weatherwell.providers.openmeteo import OpenMeteoProvider
from weatherwell.providers.openweathermap import OpenWeatherMapProvider
from weatherwell.providers.qweather import QWeatherProvider
from weatherwell.providers.visualcrossing import VisualCrossingProvider
from weatherwell.providers.weatherapi import WeatherAPIProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str | None, float], WeatherProvider]


class ProviderRegistry:
    """Builds adapters by provider identifier."""

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._factories: dict[ProviderId, ProviderFactory] = {}

    def register(self, provider: ProviderId, factory: ProviderFactory) -> None:
        """Register (or replace) the factory for a provider.

        Args:
            provider: Provider identifier
            factory: Callable taking (api_key, timeout) and returning an adapter
        """
        self._factories[provider] = factory

    def registered(self) -> list[ProviderId]:
        """Identifiers with a registered factory, in registration order."""
        return list(self._factories)

    def create(
        self,
        provider: ProviderId,
        credentials: ProviderCredentials | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> WeatherProvider:
        """Build a fresh adapter for a provider.

        Args:
            provider: Provider identifier
            credentials: User keys; the adapter's default key is used when absent
            timeout: Per-call HTTP timeout in seconds

        Returns:
            A new adapter instance

        Raises:
            UnknownProviderError: If no factory is registered for the provider
        """
        factory = self._factories.get(provider)
        if factory is None:
            raise UnknownProviderError(
                "No adapter registered for provider",
                {"provider": str(provider), "registered": [p.value for p in self._factories]},
            )
        api_key = credentials.key_for(provider) if credentials is not None else None
        return factory(api_key, timeout)


def create_default_registry() -> ProviderRegistry:
    """Create a registry with all six built-in adapters."""
    registry = ProviderRegistry()
    registry.register(ProviderId.WEATHERAPI, WeatherAPIProvider)
    registry.register(ProviderId.OPENWEATHERMAP, OpenWeatherMapProvider)
    registry.register(ProviderId.VISUALCROSSING, VisualCrossingProvider)
    registry.register(ProviderId.OPENMETEO, OpenMeteoProvider)
    registry.register(ProviderId.QWEATHER, QWeatherProvider)
    registry.register(ProviderId.METEOSTAT, MeteostatProvider)
    logger.debug(f"Registered {len(registry.registered())} weather providers")
    return registry
