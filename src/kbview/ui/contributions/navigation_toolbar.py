"""Back/forward buttons at the left of the editor tab bar."""

from __future__ import annotations

from typing import Any

from ...core.widget_ids import EDITOR_WIDGET_KIND
from ..toolbar import TabBarToolbarRegistry, ToolbarItem
from .base import VisibilityContribution, widget_kind

GO_BACK_COMMAND = "editor.action.goBack"
GO_FORWARD_COMMAND = "editor.action.goForward"


class NavigationToolbarContribution(VisibilityContribution):
    """Obsidian-style per-pane navigation shown for text editors in kb-view."""

    feature_name = "Navigation"

    def matches_widget(self, widget: Any) -> bool:
        return widget_kind(widget) == EDITOR_WIDGET_KIND

    def register_toolbar_items(self, toolbar: TabBarToolbarRegistry) -> None:
        self._track(
            toolbar.register_item(
                ToolbarItem(
                    id="kb-navigation-back",
                    command=GO_BACK_COMMAND,
                    icon="codicon-arrow-left",
                    tooltip="Go Back",
                    priority=-100,
                    is_visible=self.is_visible,
                )
            )
        )
        self._track(
            toolbar.register_item(
                ToolbarItem(
                    id="kb-navigation-forward",
                    command=GO_FORWARD_COMMAND,
                    icon="codicon-arrow-right",
                    tooltip="Go Forward",
                    priority=-99,
                    is_visible=self.is_visible,
                )
            )
        )


__all__ = ["NavigationToolbarContribution", "GO_BACK_COMMAND", "GO_FORWARD_COMMAND"]
