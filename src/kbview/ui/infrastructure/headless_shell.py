"""Headless shell, widget and factory adapters.

These implement the host interfaces from :mod:`kbview.services.host` with
plain Python objects so the runtime can be driven without a GUI toolkit
(tests, ``--headless`` runs, scripted demos).
"""

from __future__ import annotations

import inspect
import logging
from typing import Any, Callable, Sequence

from ...core.errors import WidgetAttachError, WidgetCreationError
from ...core.widget_ids import PlacementArea
from ..events import ActiveWidgetChanged, EventBus

LOGGER = logging.getLogger(__name__)

WidgetConstructor = Callable[[], Any]


class HeadlessWidget:
    """Minimal widget: an id, a title and attachment bookkeeping."""

    def __init__(self, widget_id: str, *, label: str = "", closable: bool = True, kind: str = "panel") -> None:
        self.id = widget_id
        self.label = label or widget_id
        self.closable = closable
        self.kind = kind
        self._area: PlacementArea | None = None
        self._detach: Callable[["HeadlessWidget"], None] | None = None
        self.close_count = 0

    @property
    def is_attached(self) -> bool:
        return self._area is not None

    @property
    def area(self) -> PlacementArea | None:
        return self._area

    def close(self) -> None:
        if self._area is None:
            return
        self.close_count += 1
        detach, self._detach = self._detach, None
        self._area = None
        if detach is not None:
            detach(self)

    def _attach(self, area: PlacementArea, detach: Callable[["HeadlessWidget"], None]) -> None:
        self._area = area
        self._detach = detach

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r}, area={self._area})"


class HeadlessApplicationShell:
    """Keeps attached widgets per area and tracks the contextual widget."""

    def __init__(self, event_bus: EventBus | None = None, *, ready: bool = True) -> None:
        self._bus = event_bus
        self._ready = ready
        self._areas: dict[PlacementArea, list[Any]] = {area: [] for area in PlacementArea}
        self._revealed: list[str] = []
        self._active_widget: Any | None = None

    # ------------------------------------------------------------------
    # Readiness
    # ------------------------------------------------------------------
    def is_ready(self) -> bool:
        return self._ready

    def mark_ready(self, ready: bool = True) -> None:
        self._ready = ready

    # ------------------------------------------------------------------
    # Placement
    # ------------------------------------------------------------------
    async def add_widget(self, widget: Any, area: PlacementArea) -> None:
        if not self._ready:
            raise WidgetAttachError(widget.id, "shell is not ready")
        target = PlacementArea(area)
        if widget.is_attached:
            return
        self._areas[target].append(widget)
        attach = getattr(widget, "_attach", None)
        if attach is not None:
            attach(target, self._remove)
        LOGGER.debug("Attached %s to %s", widget.id, target.value)

    async def reveal_widget(self, widget_id: str) -> Any | None:
        widget = self.find_widget(widget_id)
        if widget is None:
            raise WidgetAttachError(widget_id, "cannot reveal a detached widget")
        self._revealed.append(widget_id)
        return widget

    def get_widgets(self, area: PlacementArea) -> Sequence[Any]:
        return tuple(self._areas[PlacementArea(area)])

    def find_widget(self, widget_id: str) -> Any | None:
        for widgets in self._areas.values():
            for widget in widgets:
                if widget.id == widget_id:
                    return widget
        return None

    def attached_ids(self) -> set[str]:
        return {widget.id for widgets in self._areas.values() for widget in widgets}

    @property
    def revealed(self) -> tuple[str, ...]:
        return tuple(self._revealed)

    # ------------------------------------------------------------------
    # Contextual widget
    # ------------------------------------------------------------------
    @property
    def active_widget(self) -> Any | None:
        return self._active_widget

    def set_active_widget(self, widget: Any | None) -> None:
        self._active_widget = widget
        if self._bus is not None:
            self._bus.publish(ActiveWidgetChanged(widget=widget))

    def _remove(self, widget: Any) -> None:
        for widgets in self._areas.values():
            if widget in widgets:
                widgets.remove(widget)
        if self._active_widget is widget:
            self.set_active_widget(None)


class WidgetRegistry:
    """Idempotent widget factory keyed by widget id."""

    def __init__(self) -> None:
        self._constructors: dict[str, WidgetConstructor] = {}
        self._instances: dict[str, Any] = {}
        self.creation_count: dict[str, int] = {}

    def register_factory(self, widget_id: str, constructor: WidgetConstructor) -> None:
        self._constructors[widget_id] = constructor

    def has_factory(self, widget_id: str) -> bool:
        return widget_id in self._constructors

    def get_widget(self, widget_id: str) -> Any | None:
        return self._instances.get(widget_id)

    async def get_or_create_widget(self, widget_id: str) -> Any:
        existing = self._instances.get(widget_id)
        if existing is not None:
            return existing
        constructor = self._constructors.get(widget_id)
        if constructor is None:
            raise WidgetCreationError(widget_id, "no factory registered")
        try:
            widget = constructor()
            if inspect.isawaitable(widget):
                widget = await widget
        except WidgetCreationError:
            raise
        except Exception as exc:
            raise WidgetCreationError(widget_id, str(exc)) from exc
        if widget is None:
            raise WidgetCreationError(widget_id, "factory returned nothing")
        self._instances[widget_id] = widget
        self.creation_count[widget_id] = self.creation_count.get(widget_id, 0) + 1
        LOGGER.debug("Created widget %s", widget_id)
        return widget


__all__ = ["HeadlessWidget", "HeadlessApplicationShell", "WidgetRegistry"]
