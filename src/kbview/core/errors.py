"""Exception hierarchy shared by the kbview coordination core."""

from __future__ import annotations


class KBViewError(RuntimeError):
    """Base class for recoverable kbview failures."""


class WidgetCreationError(KBViewError):
    """Raised when the widget factory cannot produce a widget for an id."""

    def __init__(self, widget_id: str, reason: str = "") -> None:
        self.widget_id = widget_id
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Unable to create widget '{widget_id}'{detail}")


class WidgetAttachError(KBViewError):
    """Raised when the shell refuses to attach or reveal a widget."""

    def __init__(self, widget_id: str, reason: str = "") -> None:
        self.widget_id = widget_id
        self.reason = reason
        detail = f": {reason}" if reason else ""
        super().__init__(f"Unable to attach widget '{widget_id}'{detail}")


class CommandNotFoundError(KBViewError):
    """Raised when a command id has no registered handler."""

    def __init__(self, command_id: str) -> None:
        self.command_id = command_id
        super().__init__(f"Command '{command_id}' is not registered")


class CommandExecutionError(KBViewError):
    """Raised when a registered command handler fails."""

    def __init__(self, command_id: str, cause: BaseException | None = None) -> None:
        self.command_id = command_id
        self.cause = cause
        suffix = f": {cause}" if cause is not None else ""
        super().__init__(f"Command '{command_id}' failed{suffix}")


class BacklinkServiceUnavailable(KBViewError):
    """Raised when backlink lookups cannot be served."""


__all__ = [
    "KBViewError",
    "WidgetCreationError",
    "WidgetAttachError",
    "CommandNotFoundError",
    "CommandExecutionError",
    "BacklinkServiceUnavailable",
]
