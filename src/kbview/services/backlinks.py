"""In-memory backlink lookup used by the headless runtime and tests."""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence

from ..core.errors import BacklinkServiceUnavailable

LOGGER = logging.getLogger(__name__)


class InMemoryBacklinkIndex:
    """Holds ``target -> sources`` link edges fed in by the host."""

    def __init__(self) -> None:
        self._incoming: defaultdict[str, set[str]] = defaultdict(set)
        self._available = True

    @property
    def available(self) -> bool:
        return self._available

    def set_available(self, available: bool) -> None:
        self._available = bool(available)

    def add_link(self, source: str, target: str) -> None:
        if source == target:
            return
        self._incoming[target].add(source)

    def remove_document(self, document_id: str) -> None:
        self._incoming.pop(document_id, None)
        for sources in self._incoming.values():
            sources.discard(document_id)

    async def get_backlinks(self, document_id: str) -> Sequence[str]:
        if not self._available:
            raise BacklinkServiceUnavailable("backlink index is offline")
        return sorted(self._incoming.get(document_id, ()))


__all__ = ["InMemoryBacklinkIndex"]
