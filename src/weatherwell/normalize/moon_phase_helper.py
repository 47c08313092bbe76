"""Moon phase naming utilities."""

import math
from typing import ClassVar

from weatherwell.constants import (
    MOON_ILLUMINATION_UNKNOWN,
    MOON_PHASE_FIRST_QUARTER_MAX,
    MOON_PHASE_FIRST_QUARTER_MIN,
    MOON_PHASE_FULL_MAX,
    MOON_PHASE_FULL_MIN,
    MOON_PHASE_LAST_QUARTER_MAX,
    MOON_PHASE_LAST_QUARTER_MIN,
    MOON_PHASE_NEW_THRESHOLD,
    PERCENT_MAX,
)


class MoonPhaseHelper:
    """Helper class for moon phase names and illumination values."""

    # Moon phase labels
    PHASE_LABELS: ClassVar[list[str]] = [
        "New Moon",  # 0
        "Waxing Crescent",  # 0.04-0.24
        "First Quarter",  # 0.25
        "Waxing Gibbous",  # 0.29-0.49
        "Full Moon",  # 0.5
        "Waning Gibbous",  # 0.54-0.74
        "Last Quarter",  # 0.75
        "Waning Crescent",  # 0.79-0.99
    ]

    @classmethod
    def get_moon_phase_label(cls, phase: float | None) -> str:
        """Get text label for moon phase based on the lunar cycle fraction (0-1).

        The phase is a floating value between 0 and 1 representing the moon cycle:
        0: New Moon
        0.25: First Quarter
        0.5: Full Moon
        0.75: Last Quarter

        Args:
            phase: Moon phase value (0-1), or None when the provider has no moon data

        Returns:
            Text label describing the moon phase, or an empty string when unknown
        """
        if phase is None:
            return ""

        # Get the general phase category
        if phase < MOON_PHASE_NEW_THRESHOLD or phase >= (1 - MOON_PHASE_NEW_THRESHOLD):
            return cls.PHASE_LABELS[0]  # New Moon
        elif phase < MOON_PHASE_FIRST_QUARTER_MIN:
            return cls.PHASE_LABELS[1]  # Waxing Crescent
        elif phase < MOON_PHASE_FIRST_QUARTER_MAX:
            return cls.PHASE_LABELS[2]  # First Quarter
        elif phase < MOON_PHASE_FULL_MIN:
            return cls.PHASE_LABELS[3]  # Waxing Gibbous
        elif phase < MOON_PHASE_FULL_MAX:
            return cls.PHASE_LABELS[4]  # Full Moon
        elif phase < MOON_PHASE_LAST_QUARTER_MIN:
            return cls.PHASE_LABELS[5]  # Waning Gibbous
        elif phase < MOON_PHASE_LAST_QUARTER_MAX:
            return cls.PHASE_LABELS[6]  # Last Quarter
        else:
            return cls.PHASE_LABELS[7]  # Waning Crescent

    @classmethod
    def illumination_from_phase(cls, phase: float | None) -> float:
        """Estimate the illuminated fraction of the disc from the cycle fraction.

        Args:
            phase: Moon phase value (0-1), or None when the provider has no moon data

        Returns:
            Fraction in [0, 1] (0 at new moon, 1 at full moon), or -1 when unknown
        """
        if phase is None:
            return MOON_ILLUMINATION_UNKNOWN
        return round((1 - math.cos(2 * math.pi * phase)) / 2, 2)

    @classmethod
    def illumination_from_percent(cls, percent: str | float | None) -> float:
        """Convert a provider's illumination percentage to a fraction.

        Args:
            percent: Illumination 0-100, possibly as a string

        Returns:
            Fraction in [0, 1], or -1 when the value is missing or unparsable
        """
        if percent is None or percent == "":
            return MOON_ILLUMINATION_UNKNOWN
        try:
            value = float(percent)
        except (TypeError, ValueError):
            return MOON_ILLUMINATION_UNKNOWN
        return min(max(value / PERCENT_MAX, 0.0), 1.0)
