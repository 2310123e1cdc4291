"""Typed event bus connecting the shell, the runtime and the contributions.

Host adapters publish what happened (the active widget changed, a different
document became active, the workspace folder moved); contributions subscribe
and keep the returned handle so teardown is deterministic.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Generic, TypeVar
from weakref import WeakMethod

from ..core.disposables import Disposable

if TYPE_CHECKING:  # pragma: no cover - imports for type checking only
    from typing import DefaultDict

    from ..core.mode import Mode
    from ..services.host import ActiveDocument, Widget

logger = logging.getLogger(__name__)

E = TypeVar("E", bound="Event")

Handler = Callable[[E], None]


@dataclass(slots=True)
class Event:
    """Base class for all bus events."""


# Published on every focus change; not worth a debug line each time.
_QUIET_EVENT_TYPES: set[type] = set()


@dataclass(slots=True)
class ModeChanged(Event):
    """Mirrors a :class:`ModeState` change onto the bus.

    Attributes:
        mode: The mode that just became active.
        previous: The mode that was active before.
    """

    mode: Mode
    previous: Mode


@dataclass(slots=True)
class ActiveWidgetChanged(Event):
    """The contextual widget (the one toolbars are drawn for) changed."""

    widget: Widget | None


_QUIET_EVENT_TYPES.add(ActiveWidgetChanged)


@dataclass(slots=True)
class ActiveDocumentChanged(Event):
    """A different document (or none) became active in the editor area."""

    document: ActiveDocument | None


@dataclass(slots=True)
class WorkspaceChanged(Event):
    """The open workspace changed.

    Attributes:
        workspace: Resource locator of the workspace root, or ``None``.
    """

    workspace: str | None


@dataclass(slots=True)
class NoticePosted(Event):
    """A user-visible notification was emitted.

    Attributes:
        message: The notification text.
        severity: ``"info"`` or ``"error"``.
    """

    message: str
    severity: str = "info"


@dataclass(slots=True)
class SettingsChanged(Event):
    """Runtime settings were replaced."""

    settings: dict[str, Any]


class EventBus(Generic[E]):
    """A typed publish-subscribe event bus.

    Handlers run synchronously in registration order; a raising handler is
    logged and the rest still run. Bound methods are held weakly so a
    forgotten subscription does not keep its owner alive.

    Not thread-safe: publish and subscribe from the event loop thread.
    """

    __slots__ = ("_handlers",)

    def __init__(self) -> None:
        self._handlers: DefaultDict[type[Event], list[_HandlerRef]] = defaultdict(list)

    def subscribe(self, event_type: type[E], handler: Handler[E]) -> Disposable:
        """Register ``handler`` for ``event_type``.

        Returns a handle whose ``dispose()`` removes this registration.
        Subscribing the same handler twice registers it twice.
        """
        handler_ref = _HandlerRef.create(handler)
        self._handlers[event_type].append(handler_ref)
        logger.debug(
            "Subscribed handler %s to event type %s",
            _handler_name(handler),
            event_type.__name__,
        )
        return Disposable(lambda: self._remove_ref(event_type, handler_ref))

    def unsubscribe(self, event_type: type[E], handler: Handler[E]) -> None:
        """Remove the first registration of ``handler``; unknown handlers are ignored."""
        handlers = self._handlers.get(event_type)
        if handlers is None:
            return
        for i, handler_ref in enumerate(handlers):
            if handler_ref.matches(handler):
                handlers.pop(i)
                logger.debug(
                    "Unsubscribed handler %s from event type %s",
                    _handler_name(handler),
                    event_type.__name__,
                )
                return

    def publish(self, event: E) -> None:
        """Deliver ``event`` to the handlers registered for its exact type."""
        event_type = type(event)
        handlers = self._handlers.get(event_type)
        is_quiet = event_type in _QUIET_EVENT_TYPES

        if not handlers:
            if not is_quiet:
                logger.debug("No handlers for event type %s", event_type.__name__)
            return

        if not is_quiet:
            logger.debug("Publishing %s to %d handler(s)", event_type.__name__, len(handlers))

        dead: list[_HandlerRef] = []
        # Snapshot so handlers may subscribe/unsubscribe while we iterate.
        for handler_ref in tuple(handlers):
            handler = handler_ref.resolve()
            if handler is None:
                dead.append(handler_ref)
                continue
            try:
                handler(event)
            except Exception:
                logger.exception(
                    "Handler %s raised exception for event %s",
                    _handler_name(handler),
                    event_type.__name__,
                )

        for handler_ref in dead:
            self._remove_ref(event_type, handler_ref)

    def clear(self) -> None:
        self._handlers.clear()
        logger.debug("Cleared all event handlers")

    def handler_count(self, event_type: type[E] | None = None) -> int:
        if event_type is not None:
            return len(self._handlers.get(event_type, []))
        return sum(len(handlers) for handlers in self._handlers.values())

    def _remove_ref(self, event_type: type[Event], handler_ref: _HandlerRef) -> None:
        handlers = self._handlers.get(event_type)
        if not handlers:
            return
        for i, candidate in enumerate(handlers):
            if candidate is handler_ref:
                handlers.pop(i)
                return


class _HandlerRef:
    """Weak reference for bound methods, strong reference for everything else."""

    __slots__ = ("_ref", "_is_weak")

    def __init__(self, handler_ref: Any, is_weak: bool) -> None:
        self._ref = handler_ref
        self._is_weak = is_weak

    @classmethod
    def create(cls, handler: Handler) -> _HandlerRef:
        if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
            try:
                return cls(WeakMethod(handler), is_weak=True)
            except TypeError:
                pass
        return cls(handler, is_weak=False)

    def resolve(self) -> Handler | None:
        if not self._is_weak:
            return self._ref
        return self._ref()

    def matches(self, handler: Handler) -> bool:
        resolved = self.resolve()
        if resolved is None:
            return False
        return resolved == handler


def _handler_name(handler: Handler) -> str:
    if hasattr(handler, "__self__") and hasattr(handler, "__func__"):
        cls_name = type(handler.__self__).__name__
        return f"{cls_name}.{handler.__func__.__name__}"
    if hasattr(handler, "__name__"):
        return handler.__name__
    return repr(handler)


__all__ = [
    "Event",
    "EventBus",
    "Handler",
    "ModeChanged",
    "ActiveWidgetChanged",
    "ActiveDocumentChanged",
    "WorkspaceChanged",
    "NoticePosted",
    "SettingsChanged",
]
