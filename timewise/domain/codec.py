"""
Conversion between AvailabilitySettings and its serialized transport form.

Serialized form::

    {
        "availableWeekdays": [1, 2, 3],
        "disabledDates": ["2024-12-25"],
        "availableTimeSlots": ["09:00", "09:30"]
    }
"""

import re
from typing import Any, Dict, List, Sequence

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, ValidationError, field_validator

from .constants import ALL_POSSIBLE_TIMES
from .exceptions import SettingsFormatError
from .models import AvailabilitySettings, format_calendar_date, to_calendar_date

_TIME_SLOT_PATTERN = re.compile(r"^\d{2}:\d{2}$")


class SettingsPayload(BaseModel):
    """Validated serialized settings document."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    available_weekdays: List[StrictInt] = Field(default_factory=list, alias="availableWeekdays")
    disabled_dates: List[StrictStr] = Field(default_factory=list, alias="disabledDates")
    available_time_slots: List[StrictStr] = Field(default_factory=list, alias="availableTimeSlots")

    @field_validator("available_weekdays")
    @classmethod
    def validate_weekdays(cls, value: List[int]) -> List[int]:
        """Ensure weekdays are in valid range."""
        invalid_days = [day for day in value if day not in range(7)]
        if invalid_days:
            raise ValueError(f"availableWeekdays must be between 0 and 6, got {invalid_days}")
        return value

    @field_validator("disabled_dates")
    @classmethod
    def validate_dates(cls, value: List[str]) -> List[str]:
        """Ensure every exception date is a zero-padded YYYY-MM-DD string."""
        for item in value:
            try:
                to_calendar_date(item)
            except ValueError as exc:
                raise ValueError(f"Invalid disabled date {item!r}: {exc}") from exc
        return value

    @field_validator("available_time_slots")
    @classmethod
    def validate_slot_format(cls, value: List[str]) -> List[str]:
        """Ensure time slots look like HH:mm tokens."""
        malformed = [slot for slot in value if not _TIME_SLOT_PATTERN.match(slot)]
        if malformed:
            raise ValueError(f"availableTimeSlots must be HH:mm tokens, got {malformed}")
        return value


def encode_settings(settings: AvailabilitySettings) -> Dict[str, Any]:
    """Serialize settings to the transport shape with deterministic ordering."""
    return {
        "availableWeekdays": [int(day) for day in settings.sorted_weekdays()],
        "disabledDates": [format_calendar_date(day) for day in settings.sorted_disabled_dates()],
        "availableTimeSlots": settings.sorted_time_slots(),
    }


def decode_settings(
    payload: Any,
    catalog: Sequence[str] = ALL_POSSIBLE_TIMES
) -> AvailabilitySettings:
    """
    Deserialize the transport shape into AvailabilitySettings.

    Duplicates collapse into sets; list order is irrelevant.

    Args:
        payload: Mapping in serialized form
        catalog: Time-slot catalog the slots must belong to

    Returns:
        AvailabilitySettings instance

    Raises:
        SettingsFormatError: If the payload is malformed or references
            slots outside the catalog
    """
    if not isinstance(payload, dict):
        raise SettingsFormatError(
            f"Settings document must be a mapping, got {type(payload).__name__}"
        )

    try:
        document = SettingsPayload.model_validate(payload)
    except ValidationError as exc:
        raise SettingsFormatError(f"Invalid settings document: {exc}") from exc

    unknown_slots = sorted(set(document.available_time_slots) - set(catalog))
    if unknown_slots:
        raise SettingsFormatError(f"Unknown time slot(s) in settings: {unknown_slots}")

    return AvailabilitySettings(
        available_weekdays=document.available_weekdays,
        disabled_dates=document.disabled_dates,
        available_time_slots=document.available_time_slots,
        catalog=catalog,
    )
