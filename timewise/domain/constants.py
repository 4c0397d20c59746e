"""
Weekday and time-of-day catalogs.
"""

from datetime import date
from enum import IntEnum
from typing import Tuple

import pendulum


class Weekday(IntEnum):
    """Day of the week, numbered 0=Sunday .. 6=Saturday."""
    SUNDAY = 0
    MONDAY = 1
    TUESDAY = 2
    WEDNESDAY = 3
    THURSDAY = 4
    FRIDAY = 5
    SATURDAY = 6

    @property
    def label(self) -> str:
        return self.name.capitalize()


# Display order used by the settings page: week starts on Monday
WEEKDAY_CATALOG: Tuple[Weekday, ...] = (
    Weekday.MONDAY,
    Weekday.TUESDAY,
    Weekday.WEDNESDAY,
    Weekday.THURSDAY,
    Weekday.FRIDAY,
    Weekday.SATURDAY,
    Weekday.SUNDAY,
)

TIME_SLOT_FORMAT = "HH:mm"

DATE_FORMAT = "YYYY-MM-DD"


def weekday_of(value: date) -> Weekday:
    """Return the weekday of a calendar date (Sunday is 0)."""
    return Weekday(value.isoweekday() % 7)


def build_time_catalog(
    start_hour: int = 8,
    end_hour: int = 20,
    interval_minutes: int = 30
) -> Tuple[str, ...]:
    """
    Build the ordered catalog of schedulable time-of-day tokens.
    
    Tokens cover ``[start_hour, end_hour)`` in steps of ``interval_minutes``.
    
    Args:
        start_hour: First hour of the catalog (inclusive)
        end_hour: Last hour of the catalog (exclusive), at most 24
        interval_minutes: Distance between two consecutive slots
        
    Returns:
        Tuple of ``HH:mm`` strings in chronological order
        
    Raises:
        ValueError: If the bounds or the interval are invalid
    """
    if not 0 <= start_hour < end_hour <= 24:
        raise ValueError(
            f"Catalog hours must satisfy 0 <= start < end <= 24, got {start_hour}-{end_hour}"
        )
    if interval_minutes <= 0:
        raise ValueError(f"interval_minutes must be positive, got {interval_minutes}")
    if 60 % interval_minutes and interval_minutes % 60:
        raise ValueError(
            f"interval_minutes must divide 60 or be a multiple of 60, got {interval_minutes}"
        )

    tokens = []
    minute = start_hour * 60
    while minute < end_hour * 60:
        tokens.append(f"{minute // 60:02d}:{minute % 60:02d}")
        minute += interval_minutes
    return tuple(tokens)


ALL_POSSIBLE_TIMES: Tuple[str, ...] = build_time_catalog()


def format_time_slot_label(slot: str) -> str:
    """Render a ``HH:mm`` token as a 12-hour label, e.g. ``1:30 PM``."""
    return pendulum.from_format(slot, TIME_SLOT_FORMAT).format("h:mm A")
