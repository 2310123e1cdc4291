"""Settings adapter exposing runtime settings as a preference store.

Components read preferences through ``get(key, default)`` at the moment they
need them, so replacing the settings mid-session takes effect on the next
read. Replacements are announced with :class:`SettingsChanged`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict, fields, replace
from typing import Any, Mapping

from ...services.settings import AUTO_SWITCH_PREFERENCE, Settings
from ..events import EventBus, SettingsChanged

_LOGGER = logging.getLogger(__name__)

PREFERENCE_KEYS: Mapping[str, str] = {
    AUTO_SWITCH_PREFERENCE: "auto_switch_widgets",
    "kbView.surfaceBacklinkErrors": "surface_backlink_errors",
    "kbView.startupMode": "startup_mode",
    "kbView.persistMode": "persist_mode",
}


class SettingsAdapter:
    """Holds the live :class:`Settings` and answers preference lookups."""

    __slots__ = ("_settings", "_event_bus")

    def __init__(self, settings: Settings, event_bus: EventBus | None = None) -> None:
        self._settings = settings
        self._event_bus = event_bus

    @property
    def settings(self) -> Settings:
        return self._settings

    def get(self, key: str, default: Any = None) -> Any:
        field_name = PREFERENCE_KEYS.get(key, key)
        if field_name not in _FIELD_NAMES:
            return default
        value = getattr(self._settings, field_name)
        return default if value is None else value

    def set(self, key: str, value: Any) -> None:
        field_name = PREFERENCE_KEYS.get(key, key)
        if field_name not in _FIELD_NAMES:
            raise KeyError(f"Unknown preference '{key}'")
        self.apply(replace(self._settings, **{field_name: value}))

    def apply(self, settings: Settings) -> None:
        if settings == self._settings:
            return
        self._settings = settings
        _LOGGER.debug("Settings applied")
        if self._event_bus is not None:
            self._event_bus.publish(SettingsChanged(settings=asdict(settings)))


_FIELD_NAMES = frozenset(field.name for field in fields(Settings))


__all__ = ["SettingsAdapter", "PREFERENCE_KEYS"]
