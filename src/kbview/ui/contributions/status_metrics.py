"""Backlink, word and character counts in the status bar for markdown notes."""

from __future__ import annotations

import asyncio
import logging
from enum import Enum
from typing import Any, Callable

from ...core.mode import ModeState
from ...services.host import ActiveDocument, BacklinkService, CommandService, MessageService, PreferenceService
from ...utils.text_metrics import count_characters, count_words, is_markdown_path
from ...widgets.status_bar import StatusBar, StatusBarAlignment, StatusSegment
from ..events import ActiveDocumentChanged, EventBus
from .base import VisibilityContribution

LOGGER = logging.getLogger(__name__)


class StatusSegmentId(str, Enum):
    BACKLINKS = "kb-status-backlinks"
    WORDS = "kb-status-words"
    CHARS = "kb-status-chars"


BACKLINKS_ID = StatusSegmentId.BACKLINKS
WORD_COUNT_ID = StatusSegmentId.WORDS
CHAR_COUNT_ID = StatusSegmentId.CHARS
STATUS_IDS: tuple[StatusSegmentId, ...] = tuple(StatusSegmentId)

SURFACE_BACKLINK_ERRORS_PREFERENCE = "kbView.surfaceBacklinkErrors"


def _plural(count: int, noun: str) -> str:
    return f"{count} {noun}{'' if count == 1 else 's'}"


class StatusMetricsContribution(VisibilityContribution):
    """Recomputes the three note metrics whenever the active document changes."""

    feature_name = "Status Bar"

    def __init__(
        self,
        mode_state: ModeState,
        commands: CommandService,
        notifications: MessageService,
        *,
        status_bar: StatusBar,
        event_bus: EventBus,
        backlinks: BacklinkService | None,
        preferences: PreferenceService | None = None,
        active_document: Callable[[], ActiveDocument | None] | None = None,
    ) -> None:
        super().__init__(mode_state, commands, notifications)
        self._status_bar = status_bar
        self._bus = event_bus
        self._backlinks = backlinks
        self._preferences = preferences
        self._active_document = active_document
        self._generation = 0
        self._tasks: set[asyncio.Task[Any]] = set()
        self._started = False

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        if self._started:
            return
        self._started = True
        self._track(self._bus.subscribe(ActiveDocumentChanged, self._handle_active_document_changed))
        current = self._active_document() if self._active_document is not None else None
        if current is not None:
            self.handle_active_document(current)

    def stop(self) -> None:
        self.clear_status_bar_items()
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self.dispose()
        self._started = False

    async def wait_idle(self) -> None:
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    # ------------------------------------------------------------------
    # Document handling
    # ------------------------------------------------------------------
    def matches_widget(self, widget: Any) -> bool:
        return is_markdown_path(getattr(widget, "uri", None))

    def handle_active_document(self, document: ActiveDocument | None) -> None:
        self._generation += 1
        if document is None or not is_markdown_path(document.uri):
            self.clear_status_bar_items()
            return
        self._schedule(self.update_status_bar(document, generation=self._generation))

    async def update_status_bar(self, document: ActiveDocument, *, generation: int | None = None) -> bool:
        """Compute all three metrics and publish them together.

        Returns ``False`` when a newer document superseded this one while the
        backlink lookup was in flight.
        """
        text = document.text
        word_count = count_words(text)
        char_count = count_characters(text)
        backlink_count = await self._fetch_backlink_count(document.uri)

        if generation is not None and generation != self._generation:
            LOGGER.debug("Discarding stale status metrics for %s", document.uri)
            return False

        self._status_bar.set_elements(
            {
                BACKLINKS_ID: StatusSegment(
                    text=f"$(link-external) {_plural(backlink_count, 'backlink')}",
                    tooltip="Number of notes linking to this note",
                    alignment=StatusBarAlignment.RIGHT,
                    priority=100,
                ),
                WORD_COUNT_ID: StatusSegment(
                    text=_plural(word_count, "word"),
                    tooltip="Word count",
                    alignment=StatusBarAlignment.RIGHT,
                    priority=99,
                ),
                CHAR_COUNT_ID: StatusSegment(
                    text=_plural(char_count, "character"),
                    tooltip="Character count",
                    alignment=StatusBarAlignment.RIGHT,
                    priority=98,
                ),
            }
        )
        return True

    def clear_status_bar_items(self) -> None:
        self._status_bar.remove_elements(STATUS_IDS)

    async def _fetch_backlink_count(self, document_id: str) -> int:
        if self._backlinks is None:
            return 0
        try:
            backlinks = await self._backlinks.get_backlinks(document_id)
        except Exception as exc:
            LOGGER.debug("Backlink lookup failed for %s: %s", document_id, exc)
            if self._surface_backlink_errors():
                self._notifications.error(f"Backlinks unavailable for {document_id}")
            return 0
        return len(backlinks)

    def _surface_backlink_errors(self) -> bool:
        if self._preferences is None:
            return False
        return bool(self._preferences.get(SURFACE_BACKLINK_ERRORS_PREFERENCE, False))

    def _handle_active_document_changed(self, event: ActiveDocumentChanged) -> None:
        self.handle_active_document(event.document)

    def _schedule(self, coro: Any) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            coro.close()
            raise
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)


__all__ = [
    "StatusMetricsContribution",
    "StatusSegmentId",
    "BACKLINKS_ID",
    "WORD_COUNT_ID",
    "CHAR_COUNT_ID",
    "STATUS_IDS",
    "SURFACE_BACKLINK_ERRORS_PREFERENCE",
]
