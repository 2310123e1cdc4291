"""Workspace holder that announces changes on the event bus."""

from __future__ import annotations

import logging

from ..ui.events import EventBus, WorkspaceChanged

LOGGER = logging.getLogger(__name__)


class StaticWorkspace:
    """Tracks the resource locator of the open workspace root, if any."""

    def __init__(self, event_bus: EventBus, workspace: str | None = None) -> None:
        self._bus = event_bus
        self._workspace = workspace or None

    @property
    def workspace(self) -> str | None:
        return self._workspace

    def set_workspace(self, workspace: str | None) -> None:
        normalized = workspace or None
        if normalized == self._workspace:
            return
        self._workspace = normalized
        LOGGER.info("Workspace changed: %s", normalized or "<none>")
        self._bus.publish(WorkspaceChanged(workspace=normalized))


__all__ = ["StaticWorkspace"]
