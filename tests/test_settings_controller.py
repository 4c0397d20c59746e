"""
Tests for the SettingsController editing session.
"""

import asyncio
from typing import List, Optional

import pytest

from timewise.domain.constants import Weekday
from timewise.domain.exceptions import (
    InvalidToggleValue,
    LoadFailure,
    SaveFailure,
    SessionStateError,
    SettingsStoreError,
)
from timewise.domain.models import AvailabilitySettings
from timewise.services.settings_controller import (
    Notification,
    NotificationLevel,
    SaveResult,
    SessionState,
    SettingsController,
    ToggleKind,
)


class StubSettingsStore:
    """Minimal stub matching SettingsStoreProtocol."""

    def __init__(self, settings: Optional[AvailabilitySettings] = None):
        self.settings = settings or AvailabilitySettings(
            available_weekdays=[1, 2, 3, 4, 5],
            disabled_dates=["2024-12-25"],
            available_time_slots=["09:00", "09:30"]
        )
        self.fetch_error: Optional[Exception] = None
        self.save_error: Optional[Exception] = None
        self.save_result = SaveResult(success=True)
        self.save_gate: Optional[asyncio.Event] = None
        self.fetch_calls = 0
        self.saved: List[AvailabilitySettings] = []

    async def fetch_settings(self):
        self.fetch_calls += 1
        if self.fetch_error is not None:
            raise self.fetch_error
        return self.settings.copy()

    async def save_settings(self, settings):
        if self.save_gate is not None:
            await self.save_gate.wait()
        self.saved.append(settings)
        if self.save_error is not None:
            raise self.save_error
        return self.save_result


def _build_controller(store=None):
    store = store or StubSettingsStore()
    notifications: List[Notification] = []
    controller = SettingsController(store=store, notifier=notifications.append)
    return controller, store, notifications


def _loaded_controller():
    controller, store, notifications = _build_controller()
    asyncio.run(controller.load())
    return controller, store, notifications


class TestLoad:
    """Tests for hydrating the draft."""

    def test_initial_state_is_idle(self):
        controller, _, _ = _build_controller()

        assert controller.state == SessionState.IDLE
        assert controller.draft is None
        assert not controller.has_unsaved_changes

    def test_load_hydrates_draft(self):
        controller, store, notifications = _build_controller()

        draft = asyncio.run(controller.load())

        assert draft == store.settings
        assert controller.draft is draft
        assert controller.state == SessionState.READY
        assert controller.last_error is None
        assert notifications == []

    def test_load_failure_leaves_no_draft(self):
        controller, store, notifications = _build_controller()
        store.fetch_error = SettingsStoreError("connection refused")

        result = asyncio.run(controller.load())

        assert result is None
        assert controller.draft is None
        assert controller.state == SessionState.FAILED
        assert isinstance(controller.last_error, LoadFailure)
        assert notifications == [
            Notification(NotificationLevel.ERROR, "Error", "Could not load scheduler settings.")
        ]
        with pytest.raises(SessionStateError):
            controller.resolver

    def test_load_recovers_after_failure(self):
        controller, store, _ = _build_controller()
        store.fetch_error = SettingsStoreError("timeout")
        asyncio.run(controller.load())

        store.fetch_error = None
        draft = asyncio.run(controller.load())

        assert draft == store.settings
        assert controller.state == SessionState.READY
        assert controller.last_error is None
        assert store.fetch_calls == 2

    def test_load_rejects_non_settings_result(self):
        controller, store, _ = _build_controller()
        store.settings = AvailabilitySettings()

        async def fetch_dict():
            return {"availableWeekdays": [1]}

        store.fetch_settings = fetch_dict

        assert asyncio.run(controller.load()) is None
        assert isinstance(controller.last_error, LoadFailure)

    def test_stale_load_result_is_discarded(self):
        """Test that a slow earlier load cannot overwrite a later one."""
        stale = AvailabilitySettings(available_weekdays=[0])
        fresh = AvailabilitySettings(available_weekdays=[6])

        class SlowFirstStore:
            def __init__(self):
                self.release_first = asyncio.Event()
                self.calls = 0

            async def fetch_settings(self):
                call = self.calls
                self.calls += 1
                if call == 0:
                    await self.release_first.wait()
                    return stale
                return fresh

            async def save_settings(self, settings):
                return SaveResult(success=True)

        async def scenario():
            store = SlowFirstStore()
            controller = SettingsController(store=store)
            first = asyncio.create_task(controller.load())
            await asyncio.sleep(0)
            assert controller.is_loading

            second = await controller.load()
            store.release_first.set()
            first_result = await first
            return controller, first_result, second

        controller, first_result, second = asyncio.run(scenario())

        assert first_result is None
        assert second is fresh
        assert controller.draft is fresh
        assert controller.state == SessionState.READY

    def test_stale_load_failure_is_discarded(self):
        fresh = AvailabilitySettings(available_weekdays=[2])

        class FailingFirstStore:
            def __init__(self):
                self.release_first = asyncio.Event()
                self.calls = 0

            async def fetch_settings(self):
                call = self.calls
                self.calls += 1
                if call == 0:
                    await self.release_first.wait()
                    raise SettingsStoreError("late failure")
                return fresh

            async def save_settings(self, settings):
                return SaveResult(success=True)

        async def scenario():
            store = FailingFirstStore()
            notifications = []
            controller = SettingsController(store=store, notifier=notifications.append)
            first = asyncio.create_task(controller.load())
            await asyncio.sleep(0)
            await controller.load()
            store.release_first.set()
            await first
            return controller, notifications

        controller, notifications = asyncio.run(scenario())

        assert controller.state == SessionState.READY
        assert controller.draft is fresh
        assert controller.last_error is None
        assert notifications == []


class TestToggle:
    """Tests for editing the draft."""

    def test_toggle_requires_loaded_session(self):
        controller, _, _ = _build_controller()

        with pytest.raises(SessionStateError):
            controller.apply_toggle(ToggleKind.WEEKDAY, 1)

    def test_apply_each_toggle_kind(self):
        controller, _, _ = _loaded_controller()

        controller.apply_toggle(ToggleKind.WEEKDAY, 6)
        controller.apply_toggle("time_slot", "10:00")
        controller.apply_toggle(ToggleKind.DISABLED_DATE, "2024-12-25")

        assert Weekday.SATURDAY in controller.draft.available_weekdays
        assert "10:00" in controller.draft.available_time_slots
        assert controller.draft.disabled_dates == set()
        assert controller.has_unsaved_changes

    def test_toggle_back_clears_unsaved_changes(self):
        controller, _, _ = _loaded_controller()

        controller.apply_toggle(ToggleKind.WEEKDAY, 6)
        controller.apply_toggle(ToggleKind.WEEKDAY, 6)

        assert not controller.has_unsaved_changes

    def test_invalid_toggle_is_rejected_without_ending_session(self):
        controller, store, _ = _loaded_controller()

        with pytest.raises(InvalidToggleValue):
            controller.apply_toggle(ToggleKind.TIME_SLOT, "25:00")
        with pytest.raises(InvalidToggleValue):
            controller.apply_toggle(ToggleKind.WEEKDAY, 9)
        with pytest.raises(InvalidToggleValue):
            controller.apply_toggle("holiday", "2024-12-24")

        assert controller.state == SessionState.READY
        assert controller.draft == store.settings

    def test_resolver_previews_draft(self):
        controller, _, _ = _loaded_controller()

        assert not controller.resolver.is_bookable("2024-12-25", "09:00")

        controller.apply_toggle(ToggleKind.DISABLED_DATE, "2024-12-25")

        assert controller.resolver.is_bookable("2024-12-25", "09:00")


class TestSave:
    """Tests for persisting the draft."""

    def test_save_success(self):
        controller, store, notifications = _loaded_controller()
        controller.apply_toggle(ToggleKind.WEEKDAY, 6)

        assert asyncio.run(controller.save()) is True

        assert store.saved == [controller.draft]
        assert controller.state == SessionState.READY
        assert not controller.has_unsaved_changes
        assert notifications == [
            Notification(NotificationLevel.SUCCESS, "Success", "Settings saved successfully.")
        ]

    def test_saved_snapshot_is_independent_of_draft(self):
        controller, store, _ = _loaded_controller()
        asyncio.run(controller.save())

        controller.apply_toggle(ToggleKind.WEEKDAY, 6)

        assert Weekday.SATURDAY not in store.saved[0].available_weekdays

    def test_save_rejected_by_store(self):
        controller, store, notifications = _loaded_controller()
        store.save_result = SaveResult(success=False, message="Quota exceeded")
        controller.apply_toggle(ToggleKind.WEEKDAY, 6)

        assert asyncio.run(controller.save()) is False

        assert controller.state == SessionState.READY
        assert controller.has_unsaved_changes
        assert isinstance(controller.last_error, SaveFailure)
        assert notifications[-1] == Notification(NotificationLevel.ERROR, "Save Failed", "Quota exceeded")

    def test_save_rejection_without_message_uses_default(self):
        controller, store, notifications = _loaded_controller()
        store.save_result = SaveResult(success=False)

        asyncio.run(controller.save())

        assert notifications[-1].message == "Could not save settings."

    def test_transport_error_is_handled_like_rejection(self):
        controller, store, notifications = _loaded_controller()
        store.save_error = SettingsStoreError("connection reset")

        assert asyncio.run(controller.save()) is False

        assert controller.state == SessionState.READY
        assert isinstance(controller.last_error, SaveFailure)
        assert notifications[-1].level == NotificationLevel.ERROR
        assert notifications[-1].title == "Save Failed"
        assert "connection reset" in notifications[-1].message

    def test_save_requires_loaded_session(self):
        controller, _, _ = _build_controller()

        with pytest.raises(SessionStateError):
            asyncio.run(controller.save())

    def test_concurrent_save_is_ignored(self):
        """Test that only one write reaches the store while a save is pending."""
        controller, store, _ = _loaded_controller()

        async def scenario():
            store.save_gate = asyncio.Event()
            first = asyncio.create_task(controller.save())
            await asyncio.sleep(0)
            assert controller.is_saving

            second = await controller.save()
            store.save_gate.set()
            return await first, second

        first, second = asyncio.run(scenario())

        assert first is True
        assert second is False
        assert len(store.saved) == 1
        assert controller.state == SessionState.READY

    def test_toggle_and_load_rejected_while_saving(self):
        controller, store, _ = _loaded_controller()

        async def scenario():
            store.save_gate = asyncio.Event()
            pending = asyncio.create_task(controller.save())
            await asyncio.sleep(0)

            with pytest.raises(SessionStateError):
                controller.apply_toggle(ToggleKind.WEEKDAY, 6)
            with pytest.raises(SessionStateError):
                await controller.load()

            store.save_gate.set()
            await pending

        asyncio.run(scenario())

        assert controller.state == SessionState.READY
