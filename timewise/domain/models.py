"""
Domain models for weekday, exception-date and time-slot availability.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import FrozenSet, Iterable, List, Set, Tuple, Union

import pendulum

from .constants import ALL_POSSIBLE_TIMES, DATE_FORMAT, Weekday, weekday_of
from .exceptions import InvalidToggleValue

DateLike = Union[str, date]


def to_calendar_date(value: DateLike) -> date:
    """
    Normalize a date-like value to a calendar date.

    Strings must be ``YYYY-MM-DD``. ``datetime`` values keep their local
    year/month/day and lose the time component; no zone conversion happens.

    Raises:
        ValueError: If a string is not a zero-padded ISO calendar date
    """
    if isinstance(value, str):
        parsed = pendulum.from_format(value, DATE_FORMAT)
        if parsed.format(DATE_FORMAT) != value:
            raise ValueError(f"Not a calendar date in {DATE_FORMAT} form: {value!r}")
        return date(parsed.year, parsed.month, parsed.day)

    if isinstance(value, date):
        return date(value.year, value.month, value.day)

    raise TypeError(f"Expected a date or {DATE_FORMAT} string, got {type(value).__name__}")


def format_calendar_date(value: date) -> str:
    """Format a calendar date as ``YYYY-MM-DD``."""
    return pendulum.date(value.year, value.month, value.day).format(DATE_FORMAT)


def validate_weekday(value: int) -> Weekday:
    """Return the Weekday for ``value`` or raise InvalidToggleValue."""
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidToggleValue(f"Weekday must be an integer between 0 and 6, got {value!r}")
    try:
        return Weekday(value)
    except ValueError:
        raise InvalidToggleValue(f"Weekday must be between 0 and 6, got {value}") from None


def validate_time_slot(value: str, catalog: Iterable[str] = ALL_POSSIBLE_TIMES) -> str:
    """Return ``value`` if it is a catalog token, else raise InvalidToggleValue."""
    if value not in catalog:
        raise InvalidToggleValue(f"Unknown time slot: {value!r}")
    return value


@dataclass
class AvailabilitySettings:
    """
    Weekday, exception-date and time-slot availability for bookings.

    Toggle operations mutate the sets in place and return ``self``; toggling
    the same value twice restores the previous state. Values outside the
    weekday range or the time-slot catalog are rejected before any change.
    """
    available_weekdays: Set[Weekday] = field(default_factory=set)
    disabled_dates: Set[date] = field(default_factory=set)
    available_time_slots: Set[str] = field(default_factory=set)
    catalog: Tuple[str, ...] = field(default=ALL_POSSIBLE_TIMES, compare=False, repr=False)

    def __post_init__(self):
        self.catalog = tuple(self.catalog)
        self.available_weekdays = {validate_weekday(w) for w in self.available_weekdays}
        self.disabled_dates = {to_calendar_date(d) for d in self.disabled_dates}
        self.available_time_slots = {
            validate_time_slot(t, self._catalog_set) for t in self.available_time_slots
        }

    @property
    def _catalog_set(self) -> FrozenSet[str]:
        return frozenset(self.catalog)

    def toggle_weekday(self, weekday: int) -> "AvailabilitySettings":
        """Open a closed weekday or close an open one.

        Exception dates falling on the weekday are left in place.
        """
        day = validate_weekday(weekday)
        if day in self.available_weekdays:
            self.available_weekdays.remove(day)
        else:
            self.available_weekdays.add(day)
        return self

    def toggle_time_slot(self, slot: str) -> "AvailabilitySettings":
        """Offer or withdraw a catalog time slot."""
        token = validate_time_slot(slot, self._catalog_set)
        self.available_time_slots ^= {token}
        return self

    def toggle_disabled_date(self, value: DateLike) -> "AvailabilitySettings":
        """Add or remove an exception date, compared by year/month/day."""
        try:
            day = to_calendar_date(value)
        except (TypeError, ValueError) as exc:
            raise InvalidToggleValue(f"Invalid exception date {value!r}: {exc}") from exc
        self.disabled_dates ^= {day}
        return self

    def copy(self) -> "AvailabilitySettings":
        """Return an independent snapshot of these settings."""
        return AvailabilitySettings(
            available_weekdays=set(self.available_weekdays),
            disabled_dates=set(self.disabled_dates),
            available_time_slots=set(self.available_time_slots),
            catalog=self.catalog,
        )

    def sorted_weekdays(self) -> List[Weekday]:
        return sorted(self.available_weekdays)

    def sorted_disabled_dates(self) -> List[date]:
        return sorted(self.disabled_dates)

    def sorted_time_slots(self) -> List[str]:
        """Offered slots in catalog order."""
        return [slot for slot in self.catalog if slot in self.available_time_slots]

    def redundant_disabled_dates(self) -> List[date]:
        """
        Exception dates whose weekday is already closed.

        These are kept so they apply again if the weekday is re-opened.
        """
        return [
            day for day in self.sorted_disabled_dates()
            if weekday_of(day) not in self.available_weekdays
        ]

