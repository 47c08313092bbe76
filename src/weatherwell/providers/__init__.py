"""Weather provider adapters."""

from weatherwell.providers.base import WeatherProvider
from weatherwell.providers.meteostat import MeteostatProvider
from weatherwell.providers.openmeteo import OpenMeteoProvider
from weatherwell.providers.openweathermap import OpenWeatherMapProvider
from weatherwell.providers.qweather import QWeatherProvider
from weatherwell.providers.registry import ProviderRegistry, create_default_registry
from weatherwell.providers.visualcrossing import VisualCrossingProvider
from weatherwell.providers.weatherapi import WeatherAPIProvider

__all__ = [
    "MeteostatProvider",
    "OpenMeteoProvider",
    "OpenWeatherMapProvider",
    "ProviderRegistry",
    "QWeatherProvider",
    "VisualCrossingProvider",
    "WeatherAPIProvider",
    "WeatherProvider",
    "create_default_registry",
]
