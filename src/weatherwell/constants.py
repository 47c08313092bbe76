"""Application-wide constants for the WeatherWell core.

This module centralizes all constants used throughout the application to
ensure consistency and maintainability. Constants are organized into logical
categories for easier reference and documentation.

Constants are grouped into the following categories:
- Network Constants: Timeouts and request limits
- Provider Endpoints: Base URLs for each upstream weather provider
- Provider Limits: Per-provider caps on forecast length and result counts
- Snapshot Limits: Shape limits of the normalized snapshot
- Unit Conversion Constants: Factors for converting provider units
- Air Quality Constants: EPA breakpoints and alert levels
- Moon Phase Constants: Thresholds for phase naming
- Alert Constants: Default thresholds and scheduling values
"""

import os

# Network constants
DEFAULT_TIMEOUT_SECONDS = 10.0  # Per-call HTTP timeout, applied to every upstream request
DEFAULT_FORECAST_DAYS = 7  # Days requested when the caller does not specify
DEFAULT_CONFIG_PATH = "/etc/weatherwell/config.yaml"  # Default config location
DEFAULT_SERVER_HOST = "127.0.0.1"  # Default host for the HTTP service
DEFAULT_SERVER_PORT = 8000  # Default port for the HTTP service

# Provider endpoints
WEATHERAPI_BASE_URL = "https://api.weatherapi.com/v1"
OWM_BASE_URL = "https://api.openweathermap.org/data/2.5"
OWM_TIMEMACHINE_URL = "https://api.openweathermap.org/data/3.0/onecall/timemachine"
OWM_GEOCODING_URL = "https://api.openweathermap.org/geo/1.0/direct"
VISUALCROSSING_BASE_URL = (
    "https://weather.visualcrossing.com/VisualCrossingWebServices/rest/services/timeline"
)
OPENMETEO_BASE_URL = "https://api.open-meteo.com/v1"
OPENMETEO_GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
QWEATHER_BASE_URL = "https://devapi.qweather.com/v7"
QWEATHER_GEO_URL = "https://geoapi.qweather.com/v2"
METEOSTAT_BASE_URL = "https://meteostat.p.rapidapi.com"
METEOSTAT_RAPIDAPI_HOST = "meteostat.p.rapidapi.com"

# Built-in default keys, used when the settings collaborator supplies none
DEFAULT_API_KEYS = {
    "weatherapi": os.environ.get("WEATHERWELL_WEATHERAPI_DEFAULT_KEY", ""),
    "openweathermap": os.environ.get("WEATHERWELL_OPENWEATHERMAP_DEFAULT_KEY", ""),
    "visualcrossing": os.environ.get("WEATHERWELL_VISUALCROSSING_DEFAULT_KEY", ""),
    "qweather": os.environ.get("WEATHERWELL_QWEATHER_DEFAULT_KEY", ""),
    "meteostat": os.environ.get("WEATHERWELL_METEOSTAT_DEFAULT_KEY", ""),
}
MIN_LONG_KEY_LENGTH = 10  # WeatherAPI and Visual Crossing keys must be longer than this

# Provider limits
WEATHERAPI_MAX_FORECAST_DAYS = 10
OWM_FORECASTS_PER_DAY = 8  # 3-hour steps
OWM_MAX_FORECAST_ITEMS = 40
OWM_MAX_DAILY_GROUPS = 7
OWM_SEARCH_LIMIT = 5
VISUALCROSSING_MAX_FORECAST_DAYS = 15
VISUALCROSSING_HOURLY_DAYS = 2  # Hourly entries are drawn from the first two days
OPENMETEO_MAX_FORECAST_DAYS = 16
OPENMETEO_SEARCH_COUNT = 10
QWEATHER_SEARCH_COUNT = 10
METEOSTAT_DAILY_LOOKBACK_DAYS = 30
METEOSTAT_DAILY_KEEP = 7

# Snapshot limits
MAX_HOURLY_ENTRIES = 24
MAX_DAILY_ENTRIES = 16
MOON_ILLUMINATION_UNKNOWN = -1.0  # The only legal "not available" illumination value
UNKNOWN_CONDITION = "Unknown"

# Unit conversion constants
MS_TO_KMH = 3.6  # Metres per second to kilometres per hour
METERS_PER_KILOMETER = 1000.0
PERCENT_MAX = 100.0

# Compass constants
CARDINAL_DIRECTIONS_COUNT = 16
DEGREES_PER_CARDINAL = 360 / CARDINAL_DIRECTIONS_COUNT  # 22.5 degrees per label

# Air quality constants
# EPA PM2.5 breakpoints: (C_low, C_high, I_low, I_high)
PM25_BREAKPOINTS = (
    (0.0, 12.0, 0, 50),
    (12.1, 35.4, 51, 100),
    (35.5, 55.4, 101, 150),
    (55.5, 150.4, 151, 200),
    (150.5, 250.4, 201, 300),
    (250.5, 350.4, 301, 400),
    (350.5, 500.4, 401, 500),
)
AQI_MIN = 0
AQI_MAX = 500
# Lower PM2.5 bound (μg/m3) of each OpenWeatherMap 1-5 air quality category
OWM_AQI_CATEGORY_PM25 = {1: 0.0, 2: 10.0, 3: 25.0, 4: 50.0, 5: 75.0}
AQI_ALERT_THRESHOLD = 101  # Unhealthy for sensitive groups and above
AQI_LEVELS = (
    (301, "Hazardous"),
    (201, "Very Unhealthy"),
    (151, "Unhealthy"),
    (101, "Unhealthy for Sensitive Groups"),
    (51, "Moderate"),
    (0, "Good"),
)

# Moon phase thresholds for phase detection
MOON_PHASE_NEW_THRESHOLD = 0.03  # Below this or above 0.97 = new moon
MOON_PHASE_FIRST_QUARTER_MIN = 0.24  # First quarter starts
MOON_PHASE_FIRST_QUARTER_MAX = 0.27  # First quarter ends
MOON_PHASE_FULL_MIN = 0.49  # Full moon starts
MOON_PHASE_FULL_MAX = 0.52  # Full moon ends
MOON_PHASE_LAST_QUARTER_MIN = 0.74  # Last quarter starts
MOON_PHASE_LAST_QUARTER_MAX = 0.77  # Last quarter ends

# Alert constants
DEFAULT_RAIN_THRESHOLD = 70.0  # Percent chance
DEFAULT_WIND_THRESHOLD = 50.0  # km/h
DEFAULT_UV_THRESHOLD = 8.0
DEFAULT_TEMPERATURE_HIGH = 35.0  # Celsius
DEFAULT_TEMPERATURE_LOW = 0.0  # Celsius
UV_VERY_HIGH = 8
UV_EXTREME = 11
DEFAULT_ALERT_INTERVAL_MINUTES = 60
MIN_ALERT_INTERVAL_MINUTES = 15
MAX_LOCATION_AGE_HOURS = 24
DEFAULT_DAILY_FORECAST_TIME = "08:00"  # Local time of the daily summary
DEFAULT_HOURLY_FORECAST_TIME = "19:00"  # Local time of the next-hours summary
FORECAST_RAIN_MENTION = 30  # Rain chances above this percent are mentioned in summaries
FORECAST_SUMMARY_HOURS = 6
SECONDS_PER_MINUTE = 60
SECONDS_PER_HOUR = 3600

# Search constants
DEFAULT_MIN_QUERY_LENGTH = 2

# Logging constants
BYTES_PER_MEGABYTE = 1024 * 1024
