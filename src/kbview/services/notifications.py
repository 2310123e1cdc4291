"""User-visible notification service backed by the event bus."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..ui.events import EventBus, NoticePosted

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Notice:
    message: str
    severity: str


class NotificationService:
    """Fire-and-forget ``info``/``error`` notifications.

    Each notice is recorded, logged and, when a bus is attached, published as
    :class:`~kbview.ui.events.NoticePosted` for whichever front-end renders
    toasts.
    """

    def __init__(self, event_bus: EventBus | None = None, *, history_limit: int = 200) -> None:
        self._bus = event_bus
        self._history: list[Notice] = []
        self._history_limit = max(1, history_limit)

    def info(self, text: str) -> None:
        self._post(text, "info")

    def error(self, text: str) -> None:
        self._post(text, "error")

    @property
    def history(self) -> tuple[Notice, ...]:
        return tuple(self._history)

    def messages(self, severity: str | None = None) -> list[str]:
        return [n.message for n in self._history if severity is None or n.severity == severity]

    def clear(self) -> None:
        self._history.clear()

    def _post(self, text: str, severity: str) -> None:
        notice = Notice(message=text, severity=severity)
        self._history.append(notice)
        if len(self._history) > self._history_limit:
            del self._history[0]
        level = logging.ERROR if severity == "error" else logging.INFO
        LOGGER.log(level, "Notice (%s): %s", severity, text)
        if self._bus is not None:
            self._bus.publish(NoticePosted(message=text, severity=severity))


__all__ = ["Notice", "NotificationService"]
