"""
Domain layer - Pure business logic without external dependencies.
"""

from .codec import decode_settings, encode_settings
from .constants import ALL_POSSIBLE_TIMES, WEEKDAY_CATALOG, Weekday, build_time_catalog, weekday_of
from .models import AvailabilitySettings, to_calendar_date
from .resolver import AvailabilityResolver, DateDisplayState

__all__ = [
    "ALL_POSSIBLE_TIMES",
    "WEEKDAY_CATALOG",
    "AvailabilityResolver",
    "AvailabilitySettings",
    "DateDisplayState",
    "Weekday",
    "build_time_catalog",
    "decode_settings",
    "encode_settings",
    "to_calendar_date",
    "weekday_of",
]
