"""Unit conversion helpers for provider values."""

from typing import Any

from weatherwell.constants import METERS_PER_KILOMETER, MS_TO_KMH


def ms_to_kmh(speed: float | None) -> float:
    """Convert a speed in metres per second to kilometres per hour.

    Args:
        speed: Speed in m/s; None is treated as calm

    Returns:
        Speed in km/h
    """
    if speed is None:
        return 0.0
    return speed * MS_TO_KMH


def meters_to_km(distance: float | None) -> float | None:
    """Convert metres to kilometres, keeping None for unreported values."""
    if distance is None:
        return None
    return distance / METERS_PER_KILOMETER


def parse_float(value: Any) -> float | None:
    """Parse a numeric value that may arrive as a string.

    Args:
        value: Number, numeric string, empty string or None

    Returns:
        The value as a float, or None when it is missing or not numeric
    """
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None
