"""Location search with an offline fallback.

Remote search goes through a provider adapter. When the remote search fails
or finds nothing, a small built-in gazetteer of European capitals is searched
instead, so callers always get an answer and never an exception.
"""

import logging

from weatherwell.constants import DEFAULT_MIN_QUERY_LENGTH, DEFAULT_TIMEOUT_SECONDS
from weatherwell.models.config import ProviderCredentials
from weatherwell.models.weather import Location, ProviderId
from weatherwell.providers.registry import ProviderRegistry, create_default_registry

logger = logging.getLogger(__name__)

FALLBACK_LOCATIONS: tuple[Location, ...] = (
    Location(name="London", country="United Kingdom", region="England", lat=51.5074, lon=-0.1278),
    Location(name="Paris", country="France", region="Île-de-France", lat=48.8566, lon=2.3522),
    Location(name="Berlin", country="Germany", region="Berlin", lat=52.52, lon=13.405),
    Location(name="Madrid", country="Spain", region="Madrid", lat=40.4168, lon=-3.7038),
    Location(name="Rome", country="Italy", region="Lazio", lat=41.9028, lon=12.4964),
    Location(
        name="Amsterdam", country="Netherlands", region="North Holland", lat=52.3676, lon=4.9041
    ),
    Location(name="Vienna", country="Austria", region="Vienna", lat=48.2082, lon=16.3738),
    Location(name="Prague", country="Czech Republic", region="Prague", lat=50.0755, lon=14.4378),
    Location(name="Stockholm", country="Sweden", region="Stockholm", lat=59.3293, lon=18.0686),
    Location(
        name="Copenhagen", country="Denmark", region="Capital Region", lat=55.6761, lon=12.5683
    ),
)


def search_fallback(query: str) -> list[Location]:
    """Case-insensitive substring match over the built-in gazetteer.

    Args:
        query: Search text

    Returns:
        Matching locations, in gazetteer order
    """
    needle = query.strip().lower()
    return [
        location
        for location in FALLBACK_LOCATIONS
        if needle in location.name.lower()
        or needle in location.country.lower()
        or needle in location.region.lower()
    ]


class LocationSearchService:
    """Searches places by name through a provider, with an offline fallback."""

    def __init__(
        self,
        registry: ProviderRegistry | None = None,
        provider: ProviderId = ProviderId.WEATHERAPI,
        credentials: ProviderCredentials | None = None,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        """Initialize the search service.

        Args:
            registry: Registry used to build the search adapter
            provider: Provider whose search endpoint is used
            credentials: User API keys
            timeout: Per-call HTTP timeout in seconds
        """
        self.registry = registry or create_default_registry()
        self.provider = provider
        self.credentials = credentials
        self.timeout = timeout

    async def search(
        self, query: str, min_length: int = DEFAULT_MIN_QUERY_LENGTH
    ) -> list[Location]:
        """Search places by name.

        Args:
            query: Free text place name
            min_length: Shortest trimmed query that triggers a search

        Returns:
            Matching locations; empty for short queries. Never raises.
        """
        trimmed = query.strip()
        if len(trimmed) < min_length:
            return []

        try:
            adapter = self.registry.create(self.provider, self.credentials, self.timeout)
            results = await adapter.search_locations(trimmed)
        except Exception as e:
            logger.warning(f"Location search via {self.provider.value} failed: {e}")
            return search_fallback(trimmed)

        if not results:
            logger.info(f"No remote results for {trimmed!r}, using built-in locations")
            return search_fallback(trimmed)
        return results
