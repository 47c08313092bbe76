"""Foreground HTTP service.

Exposes the orchestrator and location search over FastAPI. Every request is
an independent resolve: nothing is cached or shared between requests.
"""

import argparse
import logging
from collections.abc import AsyncIterator, Awaitable, Callable
from contextlib import asynccontextmanager
from datetime import date
from pathlib import Path

from fastapi import FastAPI, HTTPException, Query

from weatherwell import __version__
from weatherwell.constants import DEFAULT_CONFIG_PATH, DEFAULT_SERVER_HOST
from weatherwell.exceptions import AllProvidersUnavailableError, ConfigurationError
from weatherwell.location_search import LocationSearchService
from weatherwell.models.config import AppConfig
from weatherwell.models.weather import Location, ProviderId, ResolvedSnapshot
from weatherwell.orchestrator import WeatherOrchestrator
from weatherwell.utils.logging import setup_logging
from weatherwell.utils.startup_errors import report_config_error

SERVICE_NAME = "WeatherWell"


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Log service startup and shutdown."""
    logger = logging.getLogger(__name__)
    logger.info("Starting WeatherWell server")
    yield
    logger.info("Shutting down WeatherWell server")


class WeatherWellServer:
    """FastAPI application serving normalized weather.

    Attributes:
        config: Application configuration
        logger: Configured logger instance
        app: FastAPI application instance
        orchestrator: Resolves snapshots with provider fallback
        search_service: Location search with the offline fallback
    """

    def __init__(
        self,
        config: AppConfig,
        orchestrator: WeatherOrchestrator | None = None,
        app_factory: Callable[[], FastAPI] = lambda: FastAPI(
            title="WeatherWell Server", version=__version__, lifespan=lifespan
        ),
    ) -> None:
        """Initialize the server.

        Args:
            config: Application configuration
            orchestrator: Orchestrator to use; one over the built-in registry when omitted
            app_factory: Optional factory function to create the FastAPI app
        """
        self.config = config
        self.logger = setup_logging(self.config.logging, "weatherwell")
        self.app = app_factory()

        self.orchestrator = orchestrator or WeatherOrchestrator()
        self.search_service = LocationSearchService(
            registry=self.orchestrator.registry,
            credentials=self.config.providers.credentials,
            timeout=self.config.providers.timeout_seconds,
        )

        self._setup_routes()
        self.logger.info("WeatherWell server initialized")

    def _setup_routes(self) -> None:
        """Set up FastAPI routes.

        - GET /: health check
        - GET /weather: current conditions and forecast
        - GET /history: observations for a past date
        - GET /search: place search
        """

        @self.app.get("/")
        async def root() -> dict[str, str]:
            return {"status": "ok", "service": SERVICE_NAME, "version": __version__}

        @self.app.get("/weather")
        async def get_weather(
            lat: float = Query(ge=-90, le=90),
            lon: float = Query(ge=-180, le=180),
            provider: ProviderId | None = None,
            days: int | None = Query(default=None, ge=1, le=16),
        ) -> ResolvedSnapshot:
            """Resolve a snapshot, falling back to a secondary provider on failure."""
            providers = self.config.providers
            return await self._handle(
                self.orchestrator.resolve(
                    lat,
                    lon,
                    preferred_provider=provider or providers.preferred,
                    credentials=providers.credentials,
                    days=days or providers.forecast_days,
                    timeout=providers.timeout_seconds,
                )
            )

        @self.app.get("/history")
        async def get_history(
            lat: float = Query(ge=-90, le=90),
            lon: float = Query(ge=-180, le=180),
            day: date = Query(alias="date"),
            provider: ProviderId | None = None,
        ) -> ResolvedSnapshot:
            """Resolve observations for a past date."""
            providers = self.config.providers
            return await self._handle(
                self.orchestrator.resolve_historical(
                    lat,
                    lon,
                    day,
                    preferred_provider=provider or providers.preferred,
                    credentials=providers.credentials,
                    timeout=providers.timeout_seconds,
                )
            )

        @self.app.get("/search")
        async def search(q: str = "") -> list[Location]:
            """Search places by name. Never fails; short queries give no results."""
            return await self.search_service.search(q, self.config.search.min_query_length)

    async def _handle(self, resolve: Awaitable[ResolvedSnapshot]) -> ResolvedSnapshot:
        """Await a resolve and map failures onto HTTP errors.

        Raises:
            HTTPException: 503 when every provider failed, 500 otherwise
        """
        try:
            return await resolve
        except AllProvidersUnavailableError as e:
            self.logger.error(f"No weather provider available: {e}")
            raise HTTPException(status_code=503, detail=e.message) from e
        except Exception as e:
            self.logger.error(f"Error resolving weather data: {e}")
            raise HTTPException(status_code=500, detail=str(e)) from e

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Run the server under uvicorn.

        Args:
            host: Host to bind to. Defaults to server config or 127.0.0.1 (localhost).
            port: Port to bind to. Defaults to server config or 8000.
        """
        import uvicorn

        bind_host = host or self.config.server.host or DEFAULT_SERVER_HOST
        bind_port = port or self.config.server.port

        self.logger.info(f"Starting WeatherWell server on {bind_host}:{bind_port}")
        uvicorn.run(self.app, host=bind_host, port=bind_port)


def load_config(config_path: Path | None) -> AppConfig:
    """Load configuration, falling back to defaults when no file is given or found.

    Raises:
        ConfigurationError: If an explicitly given file is missing or invalid
    """
    if config_path is not None:
        return AppConfig.from_yaml(config_path)
    default_path = Path(DEFAULT_CONFIG_PATH)
    if default_path.is_file():
        return AppConfig.from_yaml(default_path)
    return AppConfig()


def main() -> None:
    """Main entry point for the server."""
    parser = argparse.ArgumentParser(description="WeatherWell Server")
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH})",
    )
    parser.add_argument(
        "--host", type=str, help="Host to bind to (default: 127.0.0.1 or config value)"
    )
    parser.add_argument("--port", type=int, help="Port to bind to (default: 8000 or config value)")
    args = parser.parse_args()

    try:
        config = load_config(args.config)
    except ConfigurationError as e:
        report_config_error(e)
        raise SystemExit(1) from e

    server = WeatherWellServer(config)
    server.run(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
