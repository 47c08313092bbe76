"""Time formatting utilities for astronomy values.

Providers report sunrise and sunset as local clock strings ("06:45 AM",
"06:45:12", "06:45") or as Unix timestamps. Snapshots carry one format:
12-hour clock without a leading zero, e.g. "6:45 AM".
"""

import logging
from datetime import datetime, timezone

logger = logging.getLogger(__name__)

_CLOCK_FORMATS = ("%I:%M %p", "%H:%M:%S", "%H:%M")


def format_time(dt: datetime | int | str | None, utc_offset_seconds: int | None = None) -> str:
    """Format a time for a snapshot.

    Args:
        dt: Datetime object, Unix timestamp or clock string
        utc_offset_seconds: Offset applied to Unix timestamps; local time when None

    Returns:
        Formatted time string, or an empty string when the value is missing
        or cannot be parsed
    """
    if dt is None or dt == "":
        return ""

    if isinstance(dt, int | float):
        if utc_offset_seconds is None:
            dt = datetime.fromtimestamp(dt)
        else:
            dt = datetime.fromtimestamp(dt + utc_offset_seconds, tz=timezone.utc)
    elif isinstance(dt, str):
        parsed = _parse_clock(dt)
        if parsed is None:
            logger.debug(f"Unrecognized time value {dt!r}")
            return ""
        dt = parsed

    # 12-hour format without leading zeros
    hour = dt.hour % 12
    if hour == 0:
        hour = 12  # 12-hour clock shows 12 for noon/midnight
    return f"{hour}:{dt.minute:02d} {'AM' if dt.hour < 12 else 'PM'}"


def _parse_clock(value: str) -> datetime | None:
    """Parse a clock string or ISO datetime string."""
    value = value.strip()
    for fmt in _CLOCK_FORMATS:
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None
