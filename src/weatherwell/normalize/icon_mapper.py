"""Weather icon mapping functionality.

Every adapter translates its native condition codes into the shared
WeatherAPI-style icon code space (113 = clear, 116 = partly cloudy, ...).
This module maps that shared space to Weather Icons font class names, the
canonical icon identifiers carried by a snapshot.
"""

import logging
import re
from typing import ClassVar

logger = logging.getLogger(__name__)

# Shared code used when an adapter meets a native code it does not know
CLEAR_CODE = 113
CLEAR_ICON = "wi-day-sunny"
WIND_CODE = 264


class WeatherIconMapper:
    """Maps shared condition codes to Weather Icons class names.

    Codes with a distinct night rendering carry a (day, night) pair; the rest
    use the same class for both.
    """

    ICON_CLASSES: ClassVar[dict[int, tuple[str, str]]] = {
        113: ("wi-day-sunny", "wi-night-clear"),
        116: ("wi-day-cloudy", "wi-night-alt-cloudy"),
        119: ("wi-cloudy", "wi-cloudy"),
        122: ("wi-cloudy", "wi-cloudy"),
        143: ("wi-day-fog", "wi-night-fog"),
        176: ("wi-day-showers", "wi-night-alt-showers"),
        179: ("wi-day-snow", "wi-night-alt-snow"),
        182: ("wi-day-sleet", "wi-night-alt-sleet"),
        185: ("wi-day-sleet", "wi-night-alt-sleet"),
        200: ("wi-day-thunderstorm", "wi-night-alt-thunderstorm"),
        227: ("wi-snow-wind", "wi-snow-wind"),
        230: ("wi-snow-wind", "wi-snow-wind"),
        248: ("wi-fog", "wi-fog"),
        260: ("wi-fog", "wi-fog"),
        263: ("wi-day-sprinkle", "wi-night-alt-sprinkle"),
        264: ("wi-strong-wind", "wi-strong-wind"),
        266: ("wi-sprinkle", "wi-sprinkle"),
        281: ("wi-sleet", "wi-sleet"),
        284: ("wi-sleet", "wi-sleet"),
        293: ("wi-day-rain", "wi-night-alt-rain"),
        296: ("wi-rain", "wi-rain"),
        299: ("wi-day-rain", "wi-night-alt-rain"),
        302: ("wi-rain", "wi-rain"),
        305: ("wi-day-rain-wind", "wi-night-alt-rain-wind"),
        308: ("wi-rain-wind", "wi-rain-wind"),
        311: ("wi-rain-mix", "wi-rain-mix"),
        314: ("wi-rain-mix", "wi-rain-mix"),
        317: ("wi-sleet", "wi-sleet"),
        320: ("wi-sleet", "wi-sleet"),
        323: ("wi-day-snow", "wi-night-alt-snow"),
        326: ("wi-snow", "wi-snow"),
        329: ("wi-day-snow", "wi-night-alt-snow"),
        332: ("wi-snow", "wi-snow"),
        335: ("wi-day-snow-wind", "wi-night-alt-snow-wind"),
        338: ("wi-snow-wind", "wi-snow-wind"),
        350: ("wi-hail", "wi-hail"),
        353: ("wi-day-showers", "wi-night-alt-showers"),
        356: ("wi-showers", "wi-showers"),
        359: ("wi-rain-wind", "wi-rain-wind"),
        362: ("wi-day-sleet", "wi-night-alt-sleet"),
        365: ("wi-sleet", "wi-sleet"),
        368: ("wi-day-snow", "wi-night-alt-snow"),
        371: ("wi-snow", "wi-snow"),
        374: ("wi-day-hail", "wi-night-alt-hail"),
        377: ("wi-hail", "wi-hail"),
        386: ("wi-day-thunderstorm", "wi-night-alt-thunderstorm"),
        389: ("wi-thunderstorm", "wi-thunderstorm"),
        392: ("wi-day-snow-thunderstorm", "wi-night-alt-snow-thunderstorm"),
        395: ("wi-day-snow-thunderstorm", "wi-night-alt-snow-thunderstorm"),
    }

    # Matches ".../64x64/day/113.png" as delivered by WeatherAPI.com
    _WEATHERAPI_ICON_PATTERN: ClassVar[re.Pattern[str]] = re.compile(
        r"/(day|night)/(\d+)\.png$"
    )

    @classmethod
    def get_icon(cls, code: int | str | None, is_day: bool = True) -> str:
        """Get the Weather Icons class for a shared condition code.

        Args:
            code: Shared condition code (e.g. 113), possibly as a string
            is_day: Whether to use the daytime variant

        Returns:
            Weather Icons class name, the clear icon for unknown codes
        """
        try:
            day_icon, night_icon = cls.ICON_CLASSES[int(code)]  # type: ignore[arg-type]
        except (KeyError, TypeError, ValueError):
            logger.debug(f"No icon mapping for condition code {code!r}, using clear icon")
            return CLEAR_ICON
        return day_icon if is_day else night_icon

    @classmethod
    def get_icon_for_weatherapi_url(cls, icon_url: str | None) -> str:
        """Get the icon class for a WeatherAPI.com condition icon URL.

        Args:
            icon_url: URL such as "//cdn.weatherapi.com/weather/64x64/night/116.png"

        Returns:
            Weather Icons class name
        """
        match = cls._WEATHERAPI_ICON_PATTERN.search(icon_url or "")
        if not match:
            return CLEAR_ICON
        return cls.get_icon(match.group(2), is_day=match.group(1) == "day")
