"""
Domain-specific exception hierarchy for the timewise scheduler.
"""


class TimewiseError(Exception):
    """Base class for all application-level errors."""


class InvalidToggleValue(TimewiseError, ValueError):
    """Raised when a weekday or time slot falls outside its fixed catalog."""


class SettingsFormatError(TimewiseError, ValueError):
    """Raised when a serialized settings document is malformed."""


class SettingsStoreError(TimewiseError):
    """Raised when settings cannot be read from or written to the store."""


class LoadFailure(TimewiseError):
    """Settings could not be fetched or decoded."""


class SaveFailure(TimewiseError):
    """Settings could not be persisted."""


class SessionStateError(TimewiseError, RuntimeError):
    """Raised when an operation is not accepted in the current session state."""
