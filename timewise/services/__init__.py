"""
Service layer helpers that orchestrate adapters and domain logic.
"""

from .settings_controller import (
    Notification,
    NotificationLevel,
    SaveResult,
    SessionState,
    SettingsController,
    SettingsStoreProtocol,
    ToggleKind,
)

__all__ = [
    "Notification",
    "NotificationLevel",
    "SaveResult",
    "SessionState",
    "SettingsController",
    "SettingsStoreProtocol",
    "ToggleKind",
]
