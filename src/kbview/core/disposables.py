"""Unsubscribe handles returned by publish/subscribe channels."""

from __future__ import annotations

import logging
from typing import Callable

LOGGER = logging.getLogger(__name__)


class Disposable:
    """Handle that runs a release callback at most once."""

    __slots__ = ("_release",)

    def __init__(self, release: Callable[[], None] | None = None) -> None:
        self._release = release

    @property
    def disposed(self) -> bool:
        return self._release is None

    def dispose(self) -> None:
        release, self._release = self._release, None
        if release is not None:
            release()

    def __enter__(self) -> "Disposable":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.dispose()


class DisposableCollection:
    """Groups handles so an owner can release them in one call."""

    __slots__ = ("_items",)

    def __init__(self, *items: Disposable) -> None:
        self._items: list[Disposable] = list(items)

    def push(self, item: Disposable) -> Disposable:
        self._items.append(item)
        return item

    def __len__(self) -> int:
        return len(self._items)

    def dispose(self) -> None:
        # Release in reverse registration order.
        items, self._items = self._items, []
        for item in reversed(items):
            try:
                item.dispose()
            except Exception:
                LOGGER.exception("Failed to dispose %r", item)


__all__ = ["Disposable", "DisposableCollection"]
