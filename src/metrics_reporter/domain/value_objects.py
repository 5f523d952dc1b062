"""
Value Objects for Domain Layer.

Time units and interval conversion. All scheduling math happens in
seconds; callers may express intervals in any supported unit.
"""

from __future__ import annotations

from enum import Enum
from typing import Union


class TimeUnit(str, Enum):
    """Unit of an interval magnitude."""

    MILLISECONDS = "milliseconds"
    SECONDS = "seconds"
    MINUTES = "minutes"
    HOURS = "hours"
    DAYS = "days"

    @property
    def seconds(self) -> float:
        """Length of one unit in seconds."""
        return _UNIT_SECONDS[self]


_UNIT_SECONDS = {
    TimeUnit.MILLISECONDS: 0.001,
    TimeUnit.SECONDS: 1.0,
    TimeUnit.MINUTES: 60.0,
    TimeUnit.HOURS: 3600.0,
    TimeUnit.DAYS: 86400.0,
}


def to_seconds(
    magnitude: Union[int, float],
    unit: Union[TimeUnit, str] = TimeUnit.SECONDS,
) -> float:
    """
    Convert an interval to seconds.

    Args:
        magnitude: Interval length, must be positive
        unit: TimeUnit or its string value

    Returns:
        Interval length in seconds

    Raises:
        ValueError: If magnitude is not positive or unit is unknown
    """
    if isinstance(magnitude, bool) or magnitude <= 0:
        raise ValueError(f"Interval must be positive, got {magnitude!r}")
    return magnitude * TimeUnit(unit).seconds
