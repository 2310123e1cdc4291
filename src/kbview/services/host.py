"""Narrow interfaces for the host collaborators the core consumes.

The coordination core never looks these up ambiently; each one is handed in
at construction time. Only the calls listed here are relied upon, so any
shell (Qt, a web front-end, the headless adapters in
:mod:`kbview.ui.infrastructure.headless_shell`) can sit behind them.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, Sequence, runtime_checkable

from ..core.widget_ids import PlacementArea


@runtime_checkable
class Widget(Protocol):
    """A shell surface. Closing detaches it; the instance stays reusable."""

    id: str

    @property
    def is_attached(self) -> bool: ...

    def close(self) -> None: ...


class CommandService(Protocol):
    async def execute_command(self, command_id: str, *args: Any) -> Any: ...


class ApplicationShell(Protocol):
    async def add_widget(self, widget: Widget, area: PlacementArea) -> None: ...

    async def reveal_widget(self, widget_id: str) -> Widget | None: ...

    def get_widgets(self, area: PlacementArea) -> Sequence[Widget]: ...

    def is_ready(self) -> bool: ...


class WidgetFactory(Protocol):
    async def get_or_create_widget(self, widget_id: str) -> Widget: ...


class PreferenceService(Protocol):
    def get(self, key: str, default: Any = None) -> Any: ...


class MessageService(Protocol):
    def info(self, text: str) -> None: ...

    def error(self, text: str) -> None: ...


class BacklinkService(Protocol):
    async def get_backlinks(self, document_id: str) -> Sequence[str]: ...


class WorkspaceService(Protocol):
    @property
    def workspace(self) -> str | None: ...


@dataclass(frozen=True, slots=True)
class ActiveDocument:
    """What the editor reports about the document that just became active."""

    uri: str
    text: str

    @property
    def path(self) -> str:
        return self.uri


__all__ = [
    "Widget",
    "CommandService",
    "ApplicationShell",
    "WidgetFactory",
    "PreferenceService",
    "MessageService",
    "BacklinkService",
    "WorkspaceService",
    "ActiveDocument",
]
