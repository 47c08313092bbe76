"""Wind direction utilities."""

from typing import ClassVar

from weatherwell.constants import CARDINAL_DIRECTIONS_COUNT, DEGREES_PER_CARDINAL


class WindHelper:
    """Helper class for wind-related calculations."""

    # Define the 16 cardinal directions
    CARDINAL_DIRECTIONS: ClassVar[list[str]] = [
        "N",
        "NNE",
        "NE",
        "ENE",
        "E",
        "ESE",
        "SE",
        "SSE",
        "S",
        "SSW",
        "SW",
        "WSW",
        "W",
        "WNW",
        "NW",
        "NNW",
    ]

    @classmethod
    def get_wind_direction_cardinal(cls, degrees: float | None) -> str:
        """Convert wind degrees to 16-point cardinal direction.

        Args:
            degrees: Wind direction in degrees (0-360). None is treated as 0.

        Returns:
            Cardinal direction as string (N, NNE, NE, etc.)
        """
        if degrees is None:
            degrees = 0.0

        # Normalize the angle to 0-360 range
        degrees = degrees % 360

        # round() uses banker's rounding; half-up matches the compass sectors
        index = int(degrees / DEGREES_PER_CARDINAL + 0.5) % CARDINAL_DIRECTIONS_COUNT

        return cls.CARDINAL_DIRECTIONS[index]
