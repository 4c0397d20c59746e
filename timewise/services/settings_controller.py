"""
Editing session for availability settings.

The controller owns a single draft of AvailabilitySettings, hydrates it from a
settings store, applies toggle edits to it and writes it back. Store access is
expressed as a protocol so the JSON-file adapter, the HTTP adapter or a test
stub can be plugged in.

Session states::

    IDLE -> LOADING -> READY -> SAVING -> READY
               |
               +-> FAILED (no draft; load() may be retried)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Optional, Protocol

from ..domain.exceptions import (
    InvalidToggleValue,
    LoadFailure,
    SaveFailure,
    SessionStateError,
    TimewiseError,
)
from ..domain.models import AvailabilitySettings
from ..domain.resolver import AvailabilityResolver

logger = logging.getLogger(__name__)


LOAD_FAILED_MESSAGE = "Could not load scheduler settings."
SAVE_FAILED_MESSAGE = "Could not save settings."
SAVE_SUCCEEDED_MESSAGE = "Settings saved successfully."


@dataclass(frozen=True)
class SaveResult:
    """Outcome reported by a settings store after a write."""
    success: bool
    message: Optional[str] = None


class SettingsStoreProtocol(Protocol):
    """Protocol describing the persistence behaviour needed by the controller."""

    async def fetch_settings(self) -> AvailabilitySettings:
        """Return the persisted settings."""

    async def save_settings(self, settings: AvailabilitySettings) -> SaveResult:
        """Replace the persisted settings."""


class SessionState(str, Enum):
    IDLE = "idle"
    LOADING = "loading"
    READY = "ready"
    SAVING = "saving"
    FAILED = "failed"


class ToggleKind(str, Enum):
    WEEKDAY = "weekday"
    TIME_SLOT = "time_slot"
    DISABLED_DATE = "disabled_date"


class NotificationLevel(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True)
class Notification:
    """User-visible, non-fatal message about a load or save outcome."""
    level: NotificationLevel
    title: str
    message: str


Notifier = Callable[[Notification], None]


class SettingsController:
    """
    Orchestrates fetch, edit, and save of the availability draft.

    Only ``load()`` and ``save()`` await the store; toggles and resolver
    queries are synchronous. Load and save failures are recorded in
    ``last_error`` and reported through the notifier instead of being raised.
    """

    def __init__(
        self,
        store: SettingsStoreProtocol,
        notifier: Optional[Notifier] = None,
        preview_url: str = "/booking",
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._preview_url = preview_url
        self._state = SessionState.IDLE
        self._draft: Optional[AvailabilitySettings] = None
        self._persisted: Optional[AvailabilitySettings] = None
        self._resolver: Optional[AvailabilityResolver] = None
        self._load_generation = 0
        self.last_error: Optional[TimewiseError] = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def is_loading(self) -> bool:
        return self._state == SessionState.LOADING

    @property
    def is_saving(self) -> bool:
        return self._state == SessionState.SAVING

    @property
    def preview_url(self) -> str:
        """Link target of the public booking page."""
        return self._preview_url

    @property
    def draft(self) -> Optional[AvailabilitySettings]:
        return self._draft

    @property
    def resolver(self) -> AvailabilityResolver:
        """Resolver bound to the live draft."""
        if self._resolver is None:
            raise SessionStateError("No settings loaded")
        return self._resolver

    @property
    def has_unsaved_changes(self) -> bool:
        """True when the draft differs from the last loaded or saved copy."""
        if self._draft is None:
            return False
        return self._draft != self._persisted

    async def load(self) -> Optional[AvailabilitySettings]:
        """
        Hydrate the draft from the store.

        If several loads overlap, only the most recently issued one may
        update the session; older results are discarded when they arrive.

        Returns:
            The new draft, or None if the load failed or was superseded

        Raises:
            SessionStateError: If a save is in progress
        """
        if self._state == SessionState.SAVING:
            raise SessionStateError("Cannot load settings while a save is in progress")

        self._load_generation += 1
        generation = self._load_generation
        self._state = SessionState.LOADING
        logger.debug("Loading settings (request %d)", generation)

        try:
            settings = await self._store.fetch_settings()
            if not isinstance(settings, AvailabilitySettings):
                raise LoadFailure(
                    f"Store returned {type(settings).__name__} instead of settings"
                )
        except Exception as exc:
            if generation != self._load_generation:
                logger.debug("Discarding failed stale load (request %d)", generation)
                return None
            self._fail_load(exc)
            return None

        if generation != self._load_generation:
            logger.debug("Discarding stale load result (request %d)", generation)
            return None

        self._draft = settings
        self._persisted = settings.copy()
        self._resolver = AvailabilityResolver(settings)
        self.last_error = None
        self._state = SessionState.READY
        logger.info(
            "Loaded settings: %d weekday(s), %d exception date(s), %d time slot(s)",
            len(settings.available_weekdays),
            len(settings.disabled_dates),
            len(settings.available_time_slots),
        )
        return settings

    def apply_toggle(self, kind: ToggleKind | str, value: Any) -> AvailabilitySettings:
        """
        Toggle a weekday, time slot, or exception date in the draft.

        Raises:
            SessionStateError: If the session is not ready
            InvalidToggleValue: If the kind or value is invalid; the draft
                is left unchanged
        """
        draft = self._require_ready("toggle")

        try:
            toggle_kind = ToggleKind(kind)
        except ValueError:
            raise InvalidToggleValue(f"Unknown toggle kind: {kind!r}") from None

        if toggle_kind == ToggleKind.WEEKDAY:
            draft.toggle_weekday(value)
        elif toggle_kind == ToggleKind.TIME_SLOT:
            draft.toggle_time_slot(value)
        else:
            draft.toggle_disabled_date(value)

        logger.debug("Toggled %s %r", toggle_kind.value, value)
        return draft

    async def save(self) -> bool:
        """
        Persist a snapshot of the draft.

        A save requested while another is in flight is ignored and never
        reaches the store.

        Returns:
            True if the store accepted the settings

        Raises:
            SessionStateError: If no draft is loaded
        """
        if self._state == SessionState.SAVING:
            logger.warning("Save already in progress; ignoring duplicate request")
            return False

        snapshot = self._require_ready("save").copy()
        self._state = SessionState.SAVING
        failure: Optional[SaveFailure] = None

        try:
            result = await self._store.save_settings(snapshot)
            if not result.success:
                failure = SaveFailure(result.message or SAVE_FAILED_MESSAGE)
        except Exception as exc:
            failure = SaveFailure(str(exc) or SAVE_FAILED_MESSAGE)
            failure.__cause__ = exc
        finally:
            self._state = SessionState.READY

        if failure is not None:
            logger.error("Failed to save settings: %s", failure)
            self.last_error = failure
            self._notify(NotificationLevel.ERROR, "Save Failed", str(failure))
            return False

        self._persisted = snapshot
        self.last_error = None
        logger.info("Settings saved")
        self._notify(NotificationLevel.SUCCESS, "Success", SAVE_SUCCEEDED_MESSAGE)
        return True

    def _fail_load(self, exc: Exception) -> None:
        failure = exc if isinstance(exc, LoadFailure) else LoadFailure(str(exc) or LOAD_FAILED_MESSAGE)
        if failure is not exc:
            failure.__cause__ = exc

        logger.error("Failed to fetch settings: %s", exc)
        self._draft = None
        self._persisted = None
        self._resolver = None
        self.last_error = failure
        self._state = SessionState.FAILED
        self._notify(NotificationLevel.ERROR, "Error", LOAD_FAILED_MESSAGE)

    def _require_ready(self, operation: str) -> AvailabilitySettings:
        if self._state != SessionState.READY or self._draft is None:
            raise SessionStateError(
                f"Cannot {operation} while session is {self._state.value}"
            )
        return self._draft

    def _notify(self, level: NotificationLevel, title: str, message: str) -> None:
        if self._notifier is not None:
            self._notifier(Notification(level=level, title=title, message=message))

