"""Core state shared by every kbview component."""

from .disposables import Disposable, DisposableCollection
from .errors import (
    BacklinkServiceUnavailable,
    CommandExecutionError,
    CommandNotFoundError,
    KBViewError,
    WidgetAttachError,
    WidgetCreationError,
)
from .mode import Mode, ModeState
from .widget_ids import AUTO_OPEN_ORDER, DESIGNATED_AREAS, ManagedWidgetId, PlacementArea

__all__ = [
    "Disposable",
    "DisposableCollection",
    "KBViewError",
    "WidgetCreationError",
    "WidgetAttachError",
    "CommandNotFoundError",
    "CommandExecutionError",
    "BacklinkServiceUnavailable",
    "Mode",
    "ModeState",
    "ManagedWidgetId",
    "PlacementArea",
    "AUTO_OPEN_ORDER",
    "DESIGNATED_AREAS",
]
