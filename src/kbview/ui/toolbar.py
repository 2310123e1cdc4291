"""Tab-bar toolbar registry with per-widget visibility predicates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..core.disposables import Disposable
from .events import ActiveWidgetChanged, EventBus

LOGGER = logging.getLogger(__name__)

VisibilityPredicate = Callable[[Any], bool]


@dataclass(frozen=True, slots=True)
class ToolbarItem:
    """A toolbar button bound to a command.

    ``priority`` only orders buttons left to right; ``is_visible`` is asked
    again every time the toolbar is computed, never cached.
    """

    id: str
    command: str
    tooltip: str = ""
    icon: str | None = None
    priority: int = 0
    is_visible: VisibilityPredicate | None = None

    def visible_for(self, widget: Any) -> bool:
        if self.is_visible is None:
            return True
        try:
            return bool(self.is_visible(widget))
        except Exception:
            LOGGER.exception("Visibility predicate for %s failed", self.id)
            return False


class TabBarToolbarRegistry:
    """Holds toolbar items and recomputes the visible set on focus changes."""

    def __init__(self, event_bus: EventBus | None = None) -> None:
        self._items: dict[str, ToolbarItem] = {}
        self._current: tuple[ToolbarItem, ...] = ()
        self._subscription: Disposable | None = None
        if event_bus is not None:
            self._subscription = event_bus.subscribe(ActiveWidgetChanged, self._handle_active_widget_changed)

    def register_item(self, item: ToolbarItem) -> Disposable:
        if item.id in self._items:
            LOGGER.warning("Toolbar item %s registered twice; replacing", item.id)
        self._items[item.id] = item
        return Disposable(lambda: self._unregister(item))

    def items(self) -> tuple[ToolbarItem, ...]:
        return tuple(sorted(self._items.values(), key=lambda entry: entry.priority))

    def get_item(self, item_id: str) -> ToolbarItem | None:
        return self._items.get(item_id)

    def visible_items(self, widget: Any) -> tuple[ToolbarItem, ...]:
        return tuple(item for item in self.items() if item.visible_for(widget))

    @property
    def current_items(self) -> tuple[ToolbarItem, ...]:
        """Items computed for the most recent active widget."""
        return self._current

    def refresh(self, widget: Any) -> tuple[ToolbarItem, ...]:
        self._current = self.visible_items(widget)
        return self._current

    def dispose(self) -> None:
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None

    def _handle_active_widget_changed(self, event: ActiveWidgetChanged) -> None:
        self.refresh(event.widget)

    def _unregister(self, item: ToolbarItem) -> None:
        if self._items.get(item.id) is item:
            del self._items[item.id]


__all__ = ["ToolbarItem", "TabBarToolbarRegistry", "VisibilityPredicate"]
