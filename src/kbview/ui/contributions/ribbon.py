"""Obsidian-style ribbon: the slim vertical action bar on the far left.

Top to bottom it carries toggle sidebar, search, bookmarks, graph view,
templates and connections. Bookmarks, templates and connections are
placeholders until those features land.
"""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from ...core.widget_ids import ManagedWidgetId
from ..infrastructure.headless_shell import HeadlessWidget, WidgetRegistry
from .base import VisibilityContribution

LOGGER = logging.getLogger(__name__)

RIBBON_WIDGET_ID = ManagedWidgetId.RIBBON.value
PLACEHOLDER_CLASS = "quallaa-ribbon-action-placeholder"
PLACEHOLDER_TOOLTIP_SUFFIX = " (Coming Soon)"


class RibbonCommands:
    TOGGLE_SIDEBAR = "workbench.action.toggleSidebarVisibility"
    QUICK_OPEN = "workbench.action.quickOpen"
    SHOW_GRAPH = "knowledge-base.show-graph"


@dataclass(frozen=True, slots=True)
class RibbonAction:
    """One ribbon button; exactly one of ``command``/``handler`` is set."""

    id: str
    icon: str
    label: str
    command: str | None = None
    handler: Callable[[], Any] | None = None
    placeholder: bool = False

    def __post_init__(self) -> None:
        if (self.command is None) == (self.handler is None):
            raise ValueError(f"Ribbon action '{self.id}' needs exactly one of command or handler")

    @property
    def tooltip(self) -> str:
        return f"{self.label}{PLACEHOLDER_TOOLTIP_SUFFIX}" if self.placeholder else self.label

    @property
    def css_class(self) -> str:
        base = "quallaa-ribbon-action"
        return f"{base} {PLACEHOLDER_CLASS}" if self.placeholder else base


class RibbonWidget(HeadlessWidget):
    """The ribbon surface. Its action list is fixed at construction."""

    LABEL = "Ribbon"

    def __init__(self, contribution: "RibbonContribution") -> None:
        super().__init__(RIBBON_WIDGET_ID, label=self.LABEL, closable=False, kind="ribbon")
        self._contribution = contribution
        self._actions: tuple[RibbonAction, ...] = (
            RibbonAction(
                id="toggle-sidebar",
                icon="codicon-layout-sidebar-left",
                label="Toggle Sidebar",
                command=RibbonCommands.TOGGLE_SIDEBAR,
            ),
            RibbonAction(
                id="search",
                icon="codicon-search",
                label="Search",
                command=RibbonCommands.QUICK_OPEN,
            ),
            RibbonAction(
                id="bookmarks",
                icon="codicon-bookmark",
                label="Bookmarks",
                handler=contribution.placeholder("Bookmarks"),
                placeholder=True,
            ),
            RibbonAction(
                id="graph",
                icon="codicon-type-hierarchy-sub",
                label="Graph View",
                command=RibbonCommands.SHOW_GRAPH,
            ),
            RibbonAction(
                id="templates",
                icon="codicon-file-code",
                label="Templates",
                handler=contribution.placeholder("Templates"),
                placeholder=True,
            ),
            RibbonAction(
                id="connections",
                icon="codicon-git-merge",
                label="Connections",
                handler=contribution.placeholder("Connections"),
                placeholder=True,
            ),
        )
        LOGGER.debug("Ribbon created with %d actions", len(self._actions))

    @property
    def actions(self) -> tuple[RibbonAction, ...]:
        return self._actions

    def get_action(self, action_id: str) -> RibbonAction:
        for action in self._actions:
            if action.id == action_id:
                return action
        raise KeyError(action_id)

    def visible_actions(self) -> tuple[RibbonAction, ...]:
        return self._actions if self._contribution.is_visible(self) else ()

    async def trigger(self, action_id: str) -> bool:
        action = self.get_action(action_id)
        if action.handler is not None:
            result = action.handler()
            if inspect.isawaitable(result):
                await result
            return True
        return await self._contribution.run_delegate(action.command or "", action.label)


class RibbonContribution(VisibilityContribution):
    """Registers the ribbon widget and gates its contents on kb-view."""

    feature_name = "Ribbon"

    def matches_widget(self, widget: Any) -> bool:
        return getattr(widget, "id", None) == RIBBON_WIDGET_ID

    def create_widget(self) -> RibbonWidget:
        return RibbonWidget(self)

    def register_widgets(self, factory: WidgetRegistry) -> None:
        factory.register_factory(RIBBON_WIDGET_ID, self.create_widget)


__all__ = [
    "RibbonAction",
    "RibbonWidget",
    "RibbonContribution",
    "RibbonCommands",
    "RIBBON_WIDGET_ID",
    "PLACEHOLDER_CLASS",
    "PLACEHOLDER_TOOLTIP_SUFFIX",
]
