"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from kbview.core.mode import Mode, ModeState
from kbview.services.commands import CommandRegistry
from kbview.services.notifications import NotificationService
from kbview.services.settings import Settings
from kbview.ui.events import EventBus
from kbview.ui.infrastructure.headless_shell import HeadlessApplicationShell, HeadlessWidget, WidgetRegistry
from kbview.ui.infrastructure.settings_adapter import SettingsAdapter


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def mode_state() -> ModeState:
    return ModeState(Mode.KB_VIEW)


@pytest.fixture
def commands() -> CommandRegistry:
    return CommandRegistry()


@pytest.fixture
def notifications(event_bus: EventBus) -> NotificationService:
    return NotificationService(event_bus)


@pytest.fixture
def fast_settings() -> Settings:
    """Settings that keep readiness polling near-instant."""
    return Settings(shell_ready_attempts=3, shell_ready_min_wait=0.0, shell_ready_max_wait=0.0)


@pytest.fixture
def preferences(fast_settings: Settings, event_bus: EventBus) -> SettingsAdapter:
    return SettingsAdapter(fast_settings, event_bus)


@pytest.fixture
def shell(event_bus: EventBus) -> HeadlessApplicationShell:
    return HeadlessApplicationShell(event_bus)


@pytest.fixture
def widget_registry() -> WidgetRegistry:
    registry = WidgetRegistry()
    for widget_id in ("quallaa-ribbon", "quallaa-vault-selector", "kb-backlinks", "kb-tags", "kb-graph"):
        registry.register_factory(widget_id, _factory(widget_id))
    return registry


def _factory(widget_id: str):
    def _create() -> HeadlessWidget:
        return HeadlessWidget(widget_id)

    return _create
