"""Air quality index calculations on the US EPA scale."""

from weatherwell.constants import (
    AQI_LEVELS,
    AQI_MAX,
    AQI_MIN,
    OWM_AQI_CATEGORY_PM25,
    PM25_BREAKPOINTS,
)


def aqi_from_pm25(pm25: float | None) -> int:
    """Convert a PM2.5 concentration to the EPA air quality index.

    Uses piecewise-linear interpolation over the EPA breakpoint table. A value
    falling between two tiers (e.g. 12.05) is interpolated on the upper tier,
    which keeps the index monotonic.

    Args:
        pm25: PM2.5 concentration in μg/m3, or None when not reported

    Returns:
        Integer AQI clamped to 0-500; 0 for a missing reading
    """
    if pm25 is None or pm25 <= 0:
        return AQI_MIN

    for c_low, c_high, i_low, i_high in PM25_BREAKPOINTS:
        if pm25 <= c_high:
            aqi = round(((i_high - i_low) / (c_high - c_low)) * (pm25 - c_low) + i_low)
            return max(AQI_MIN, min(AQI_MAX, aqi))

    return AQI_MAX


def aqi_from_owm_category(category: int | None, pm25: float | None = None) -> int:
    """Convert OpenWeatherMap's 1-5 air quality category to the EPA scale.

    The PM2.5 component is used when present; otherwise the category's
    lower PM2.5 bound stands in for the concentration.

    Args:
        category: OpenWeatherMap category (1 = Good ... 5 = Very Poor)
        pm25: PM2.5 concentration from the same response, if any

    Returns:
        Integer AQI clamped to 0-500
    """
    if pm25 is not None:
        return aqi_from_pm25(pm25)
    if category is None:
        return AQI_MIN
    return aqi_from_pm25(OWM_AQI_CATEGORY_PM25.get(category, 0.0))


def aqi_level(aqi: int) -> str:
    """Get the EPA level name for an AQI value."""
    for minimum, label in AQI_LEVELS:
        if aqi >= minimum:
            return label
    return AQI_LEVELS[-1][1]
