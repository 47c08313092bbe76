"""WeatherWell core: provider adapters, normalization, fallback and alerts."""

__version__ = "1.0.0"
