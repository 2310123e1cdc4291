"""Shared machinery for kb-view contributions.

A contribution registers named actions with the command dispatcher and UI
affordances (toolbar buttons, panel contents) whose visibility predicate is
``widget identity matches AND mode == kb-view``. Both halves are evaluated
on every call.

Actions come in two flavours:

* delegates forward to an existing host command; a missing command or a
  failing handler is reported to the user by label,
* placeholders only announce that the feature is coming soon.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable

from ...core.disposables import Disposable, DisposableCollection
from ...core.mode import Mode, ModeState
from ...services.commands import CommandRegistry
from ...services.host import CommandService, MessageService
from ..toolbar import TabBarToolbarRegistry

LOGGER = logging.getLogger(__name__)

COMING_SOON_SUFFIX = "Coming Soon!"


def coming_soon_message(feature: str) -> str:
    return f"{feature} - {COMING_SOON_SUFFIX}"


def command_unavailable_message(label: str) -> str:
    return f"Command not available: {label}"


def widget_kind(widget: Any) -> str | None:
    kind = getattr(widget, "kind", None)
    return kind if isinstance(kind, str) else None


class VisibilityContribution:
    """Base class for the mode-gated overlay features."""

    feature_name: str = ""

    def __init__(
        self,
        mode_state: ModeState,
        commands: CommandService,
        notifications: MessageService,
    ) -> None:
        self._mode_state = mode_state
        self._commands = commands
        self._notifications = notifications
        self._disposables = DisposableCollection()

    # ------------------------------------------------------------------
    # Registration hooks
    # ------------------------------------------------------------------
    def register_commands(self, registry: CommandRegistry) -> None:
        """Register named actions; the default contributes none."""

    def register_toolbar_items(self, toolbar: TabBarToolbarRegistry) -> None:
        """Register toolbar affordances; the default contributes none."""

    def contribute(self, registry: CommandRegistry, toolbar: TabBarToolbarRegistry) -> None:
        self.register_commands(registry)
        self.register_toolbar_items(toolbar)

    def dispose(self) -> None:
        self._disposables.dispose()

    # ------------------------------------------------------------------
    # Visibility
    # ------------------------------------------------------------------
    def is_kb_view(self) -> bool:
        return self._mode_state.get_current_mode() is Mode.KB_VIEW

    def matches_widget(self, widget: Any) -> bool:
        return False

    def is_visible(self, widget: Any) -> bool:
        if widget is None:
            return False
        return self.matches_widget(widget) and self.is_kb_view()

    # ------------------------------------------------------------------
    # Action helpers
    # ------------------------------------------------------------------
    async def run_delegate(self, command_id: str, label: str, *args: Any) -> bool:
        """Execute ``command_id``; failures become an error notification."""
        try:
            await self._commands.execute_command(command_id, *args)
        except Exception as exc:
            LOGGER.error("Failed to execute command %s (%s): %s", command_id, label, exc)
            self._notifications.error(command_unavailable_message(label))
            return False
        return True

    def show_coming_soon(self, feature: str) -> None:
        self._notifications.info(coming_soon_message(feature))

    def delegate(self, command_id: str, label: str) -> Callable[[], Awaitable[bool]]:
        async def _run() -> bool:
            return await self.run_delegate(command_id, label)

        return _run

    def placeholder(self, feature: str) -> Callable[[], None]:
        def _run() -> None:
            self.show_coming_soon(feature)

        return _run

    def _track(self, disposable: Disposable) -> Disposable:
        return self._disposables.push(disposable)


__all__ = [
    "VisibilityContribution",
    "coming_soon_message",
    "command_unavailable_message",
    "widget_kind",
    "COMING_SOON_SUFFIX",
]
