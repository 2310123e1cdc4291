"""Centralized widget ids and placement areas for managed kb-view surfaces."""

from __future__ import annotations

from enum import Enum


class PlacementArea(str, Enum):
    """Shell areas a widget can be attached to."""

    MAIN = "main"
    LEFT = "left"
    RIGHT = "right"


class ManagedWidgetId(str, Enum):
    """Surfaces whose attach/close lifecycle follows the presentation mode."""

    RIBBON = "quallaa-ribbon"
    VAULT_SELECTOR = "quallaa-vault-selector"
    BACKLINKS = "kb-backlinks"
    TAGS = "kb-tags"
    GRAPH = "kb-graph"

    @property
    def area(self) -> PlacementArea:
        return DESIGNATED_AREAS[self]

    @classmethod
    def lookup(cls, widget_id: str) -> "ManagedWidgetId | None":
        for member in cls:
            if member.value == widget_id:
                return member
        return None


DESIGNATED_AREAS: dict[ManagedWidgetId, PlacementArea] = {
    ManagedWidgetId.RIBBON: PlacementArea.LEFT,
    ManagedWidgetId.VAULT_SELECTOR: PlacementArea.LEFT,
    ManagedWidgetId.BACKLINKS: PlacementArea.RIGHT,
    ManagedWidgetId.TAGS: PlacementArea.RIGHT,
    ManagedWidgetId.GRAPH: PlacementArea.MAIN,
}

# Opened automatically on entering kb-view, in this order. GRAPH is on demand.
AUTO_OPEN_ORDER: tuple[ManagedWidgetId, ...] = (
    ManagedWidgetId.RIBBON,
    ManagedWidgetId.VAULT_SELECTOR,
    ManagedWidgetId.BACKLINKS,
    ManagedWidgetId.TAGS,
)

# Areas probed when looking for an attached instance.
SEARCH_ORDER: tuple[PlacementArea, ...] = (
    PlacementArea.MAIN,
    PlacementArea.LEFT,
    PlacementArea.RIGHT,
)

# Host widget identity the visibility predicates match against.
EDITOR_WIDGET_KIND = "editor"
NAVIGATOR_WIDGET_KIND = "navigator"
FILE_NAVIGATOR_ID = "files"


__all__ = [
    "PlacementArea",
    "ManagedWidgetId",
    "DESIGNATED_AREAS",
    "AUTO_OPEN_ORDER",
    "SEARCH_ORDER",
    "EDITOR_WIDGET_KIND",
    "NAVIGATOR_WIDGET_KIND",
    "FILE_NAVIGATOR_ID",
]
