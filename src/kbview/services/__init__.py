"""Service layer: host interfaces, settings and in-process collaborators."""

from .backlinks import InMemoryBacklinkIndex
from .commands import Command, CommandHandler, CommandRegistry
from .host import (
    ActiveDocument,
    ApplicationShell,
    BacklinkService,
    CommandService,
    MessageService,
    PreferenceService,
    Widget,
    WidgetFactory,
    WorkspaceService,
)
from .notifications import Notice, NotificationService
from .settings import AUTO_SWITCH_PREFERENCE, Settings, SettingsStore
from .workspace import StaticWorkspace

__all__ = [
    "ActiveDocument",
    "ApplicationShell",
    "BacklinkService",
    "Command",
    "CommandHandler",
    "CommandRegistry",
    "CommandService",
    "InMemoryBacklinkIndex",
    "MessageService",
    "Notice",
    "NotificationService",
    "PreferenceService",
    "Settings",
    "SettingsStore",
    "StaticWorkspace",
    "AUTO_SWITCH_PREFERENCE",
    "Widget",
    "WidgetFactory",
    "WorkspaceService",
]
