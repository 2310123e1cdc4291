"""Infrastructure adapters that stand in for host services."""

from .headless_shell import HeadlessApplicationShell, HeadlessWidget, WidgetRegistry
from .settings_adapter import PREFERENCE_KEYS, SettingsAdapter

__all__ = [
    "HeadlessApplicationShell",
    "HeadlessWidget",
    "WidgetRegistry",
    "SettingsAdapter",
    "PREFERENCE_KEYS",
]
