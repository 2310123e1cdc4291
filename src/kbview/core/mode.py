"""Process-wide presentation mode state.

``ModeState`` is the single source of truth for whether the shell is showing
the knowledge-base presentation or the plain developer layout. Every other
component either queries it or subscribes to it.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Callable

from .disposables import Disposable

LOGGER = logging.getLogger(__name__)

ModeListener = Callable[["Mode"], None]


class Mode(str, Enum):
    """The two mutually exclusive presentation modes."""

    KB_VIEW = "kb-view"
    DEVELOPER = "developer"

    @classmethod
    def parse(cls, value: "str | Mode") -> "Mode":
        """Return the mode for ``value`` (case-insensitive wire string)."""

        if isinstance(value, Mode):
            return value
        normalized = str(value).strip().lower().replace("_", "-")
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ValueError(f"Unknown mode '{value}'")

    def other(self) -> "Mode":
        return Mode.DEVELOPER if self is Mode.KB_VIEW else Mode.KB_VIEW


class ModeState:
    """Holds the active mode and notifies subscribers of real changes.

    Listeners are invoked synchronously, in subscription order, exactly once
    per change, after :meth:`get_current_mode` already reports the new value.
    A listener that raises is logged and the remaining listeners still run.
    """

    __slots__ = ("_mode", "_listeners")

    def __init__(self, initial: Mode = Mode.KB_VIEW) -> None:
        self._mode = Mode.parse(initial)
        self._listeners: list[ModeListener] = []

    def get_current_mode(self) -> Mode:
        return self._mode

    def is_kb_view(self) -> bool:
        return self._mode is Mode.KB_VIEW

    def set_mode(self, mode: Mode | str) -> bool:
        """Switch to ``mode``; returns ``False`` for a no-op set."""

        target = Mode.parse(mode)
        if target is self._mode:
            LOGGER.debug("ModeState.set_mode: already in %s", target.value)
            return False
        previous, self._mode = self._mode, target
        LOGGER.info("Mode changed: %s -> %s", previous.value, target.value)
        for listener in tuple(self._listeners):
            try:
                listener(target)
            except Exception:
                LOGGER.exception("Mode listener %r failed for %s", listener, target.value)
        return True

    def toggle(self) -> Mode:
        self.set_mode(self._mode.other())
        return self._mode

    def subscribe(self, listener: ModeListener) -> Disposable:
        """Register ``listener``; dispose the returned handle to unsubscribe."""

        self._listeners.append(listener)

        def _release() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return Disposable(_release)

    def listener_count(self) -> int:
        return len(self._listeners)


__all__ = ["Mode", "ModeState", "ModeListener"]
