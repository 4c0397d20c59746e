"""
Availability resolution - answers whether a date and time can be booked.

Pure domain logic: reads an AvailabilitySettings value and never mutates it.
"""

from datetime import date
from enum import Enum
from typing import List, Tuple

import pendulum

from .constants import weekday_of
from .models import AvailabilitySettings, DateLike, to_calendar_date


class DateDisplayState(str, Enum):
    """Calendar rendering state of a single date."""
    CLOSED_BY_WEEKDAY = "closed-by-weekday"
    OPEN_AVAILABLE = "open-available"
    OPEN_BUT_EXCEPTED = "open-but-excepted"


class AvailabilityResolver:
    """
    Resolves bookability against weekday, exception-date and time-slot sets.

    Precedence rules:
    1. A date whose weekday is closed is never open
    2. An exception date is never open, even on an open weekday
    3. A date/time pair is bookable only if the date is open and the slot offered

    The resolver keeps a reference to the settings object, so queries always
    reflect the current draft.
    """

    def __init__(self, settings: AvailabilitySettings):
        self.settings = settings

    def is_weekday_open(self, value: DateLike) -> bool:
        """Check whether the weekday of a date is in the open set."""
        return weekday_of(to_calendar_date(value)) in self.settings.available_weekdays

    def is_exception(self, value: DateLike) -> bool:
        """Check whether a date is a configured exception (holiday)."""
        return to_calendar_date(value) in self.settings.disabled_dates

    def is_date_open(self, value: DateLike) -> bool:
        """A date is open when its weekday is open and it is not an exception."""
        day = to_calendar_date(value)
        return self.is_weekday_open(day) and not self.is_exception(day)

    def is_slot_offered(self, slot: str) -> bool:
        return slot in self.settings.available_time_slots

    def is_bookable(self, value: DateLike, slot: str) -> bool:
        """Check whether a booking at ``slot`` on the given date is possible."""
        return self.is_date_open(value) and self.is_slot_offered(slot)

    def classify_date(self, value: DateLike) -> DateDisplayState:
        """
        Classify a date into exactly one calendar display state.

        The weekday gate is checked first, so an exception on a closed
        weekday is still reported as closed by weekday.
        """
        day = to_calendar_date(value)

        if not self.is_weekday_open(day):
            return DateDisplayState.CLOSED_BY_WEEKDAY

        if self.is_exception(day):
            return DateDisplayState.OPEN_BUT_EXCEPTED

        return DateDisplayState.OPEN_AVAILABLE

    def is_exception_toggleable(self, value: DateLike) -> bool:
        """Exceptions can only be edited interactively on open weekdays."""
        return self.classify_date(value) != DateDisplayState.CLOSED_BY_WEEKDAY

    def bookable_slots(self, value: DateLike) -> List[str]:
        """
        Get the slots that can be booked on a date, in catalog order.

        Returns an empty list when the date is closed.
        """
        if not self.is_date_open(value):
            return []
        return self.settings.sorted_time_slots()

    def month_view(self, year: int, month: int) -> List[Tuple[date, DateDisplayState]]:
        """
        Classify every day of a month for calendar rendering.

        Args:
            year: Calendar year
            month: Month number (1-12)

        Returns:
            List of (date, state) tuples ordered by day
        """
        first = pendulum.date(year, month, 1)

        return [
            (day, self.classify_date(day))
            for day in (date(year, month, n) for n in range(1, first.days_in_month + 1))
        ]
