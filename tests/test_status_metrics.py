"""Tests for the status metrics contribution."""

from __future__ import annotations

import asyncio
from typing import Sequence

import pytest

from kbview.core.errors import BacklinkServiceUnavailable
from kbview.core.mode import ModeState
from kbview.services.backlinks import InMemoryBacklinkIndex
from kbview.services.commands import CommandRegistry
from kbview.services.host import ActiveDocument
from kbview.services.notifications import NotificationService
from kbview.ui.contributions.status_metrics import (
    BACKLINKS_ID,
    CHAR_COUNT_ID,
    STATUS_IDS,
    WORD_COUNT_ID,
    StatusMetricsContribution,
)
from kbview.ui.events import ActiveDocumentChanged, EventBus
from kbview.ui.infrastructure.settings_adapter import SettingsAdapter
from kbview.widgets.status_bar import StatusBar, StatusBarAlignment

NOTE_TEXT = "---\ntitle: X\n---\nHello **world**!"


class GatedBacklinks:
    """Backlink service whose answers are released per document."""

    def __init__(self) -> None:
        self.gates: dict[str, asyncio.Event] = {}

    def gate(self, document_id: str) -> asyncio.Event:
        return self.gates.setdefault(document_id, asyncio.Event())

    async def get_backlinks(self, document_id: str) -> Sequence[str]:
        await self.gate(document_id).wait()
        return [f"{document_id}-source"]


@pytest.fixture
def status_bar() -> StatusBar:
    return StatusBar()


@pytest.fixture
def backlinks() -> InMemoryBacklinkIndex:
    index = InMemoryBacklinkIndex()
    index.add_link("notes/b.md", "notes/a.md")
    index.add_link("notes/c.md", "notes/a.md")
    return index


@pytest.fixture
def build_contribution(
    mode_state: ModeState,
    commands: CommandRegistry,
    notifications: NotificationService,
    status_bar: StatusBar,
    event_bus: EventBus,
    preferences: SettingsAdapter,
):
    def _build(backlink_service, **kwargs) -> StatusMetricsContribution:
        contribution = StatusMetricsContribution(
            mode_state,
            commands,
            notifications,
            status_bar=status_bar,
            event_bus=event_bus,
            backlinks=backlink_service,
            preferences=preferences,
            **kwargs,
        )
        contribution.start()
        return contribution

    return _build


def _text(bar: StatusBar, element_id: str) -> str | None:
    segment = bar.get_element(element_id)
    return None if segment is None else segment.text


class TestStatusMetrics:
    @pytest.mark.asyncio
    async def test_markdown_document_sets_all_three(
        self, build_contribution, backlinks, status_bar: StatusBar, event_bus: EventBus
    ) -> None:
        contribution = build_contribution(backlinks)

        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="notes/a.md", text=NOTE_TEXT)))
        await contribution.wait_idle()

        assert _text(status_bar, BACKLINKS_ID) == "$(link-external) 2 backlinks"
        assert _text(status_bar, WORD_COUNT_ID) == "2 words"
        assert _text(status_bar, CHAR_COUNT_ID) == f"{len(NOTE_TEXT)} characters"
        # One atomic update for all three segments.
        assert status_bar.revision == 1
        assert [key for key, _ in status_bar.ordered(StatusBarAlignment.RIGHT)] == [
            BACKLINKS_ID,
            WORD_COUNT_ID,
            CHAR_COUNT_ID,
        ]

    @pytest.mark.asyncio
    async def test_singular_texts(self, build_contribution, status_bar: StatusBar, event_bus: EventBus) -> None:
        index = InMemoryBacklinkIndex()
        index.add_link("b.md", "one.md")
        contribution = build_contribution(index)

        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="one.md", text="a")))
        await contribution.wait_idle()

        assert _text(status_bar, BACKLINKS_ID) == "$(link-external) 1 backlink"
        assert _text(status_bar, WORD_COUNT_ID) == "1 word"
        assert _text(status_bar, CHAR_COUNT_ID) == "1 character"

    @pytest.mark.asyncio
    async def test_non_markdown_clears_segments(
        self, build_contribution, backlinks, status_bar: StatusBar, event_bus: EventBus
    ) -> None:
        contribution = build_contribution(backlinks)
        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="notes/a.md", text=NOTE_TEXT)))
        await contribution.wait_idle()

        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="src/main.py", text="print()")))
        await contribution.wait_idle()

        for element_id in STATUS_IDS:
            assert status_bar.get_element(element_id) is None

    @pytest.mark.asyncio
    async def test_no_document_clears_segments(
        self, build_contribution, backlinks, status_bar: StatusBar, event_bus: EventBus
    ) -> None:
        contribution = build_contribution(backlinks)
        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="notes/a.md", text=NOTE_TEXT)))
        await contribution.wait_idle()

        event_bus.publish(ActiveDocumentChanged(document=None))

        assert status_bar.element_ids == ()

    @pytest.mark.asyncio
    async def test_backlink_failure_is_silent_zero(
        self,
        build_contribution,
        backlinks: InMemoryBacklinkIndex,
        status_bar: StatusBar,
        notifications: NotificationService,
    ) -> None:
        backlinks.set_available(False)
        contribution = build_contribution(backlinks)

        updated = await contribution.update_status_bar(ActiveDocument(uri="notes/a.md", text=NOTE_TEXT))

        assert updated is True
        assert _text(status_bar, BACKLINKS_ID) == "$(link-external) 0 backlinks"
        assert _text(status_bar, WORD_COUNT_ID) == "2 words"
        assert notifications.history == ()

    @pytest.mark.asyncio
    async def test_backlink_failure_surfaced_when_configured(
        self,
        build_contribution,
        backlinks: InMemoryBacklinkIndex,
        preferences: SettingsAdapter,
        notifications: NotificationService,
    ) -> None:
        backlinks.set_available(False)
        preferences.set("kbView.surfaceBacklinkErrors", True)
        contribution = build_contribution(backlinks)

        await contribution.update_status_bar(ActiveDocument(uri="notes/a.md", text=NOTE_TEXT))

        assert notifications.messages("error") == ["Backlinks unavailable for notes/a.md"]

    @pytest.mark.asyncio
    async def test_unexpected_backlink_error_counts_zero(
        self, build_contribution, status_bar: StatusBar
    ) -> None:
        class Broken:
            async def get_backlinks(self, document_id: str) -> Sequence[str]:
                raise BacklinkServiceUnavailable(document_id)

        contribution = build_contribution(Broken())

        await contribution.update_status_bar(ActiveDocument(uri="x.md", text=""))

        assert _text(status_bar, BACKLINKS_ID) == "$(link-external) 0 backlinks"
        assert _text(status_bar, WORD_COUNT_ID) == "0 words"

    @pytest.mark.asyncio
    async def test_stale_result_is_discarded(
        self, build_contribution, status_bar: StatusBar, event_bus: EventBus
    ) -> None:
        gated = GatedBacklinks()
        contribution = build_contribution(gated)

        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="first.md", text="one two three")))
        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="second.md", text="four")))
        await asyncio.sleep(0)
        gated.gate("second.md").set()
        await asyncio.sleep(0)
        gated.gate("first.md").set()
        await contribution.wait_idle()

        assert _text(status_bar, WORD_COUNT_ID) == "1 word"
        assert status_bar.revision == 1

    @pytest.mark.asyncio
    async def test_start_handles_current_document(
        self, build_contribution, backlinks, status_bar: StatusBar
    ) -> None:
        document = ActiveDocument(uri="notes/a.md", text=NOTE_TEXT)

        contribution = build_contribution(backlinks, active_document=lambda: document)
        await contribution.wait_idle()

        assert _text(status_bar, WORD_COUNT_ID) == "2 words"

    @pytest.mark.asyncio
    async def test_stop_clears_and_unsubscribes(
        self, build_contribution, backlinks, status_bar: StatusBar, event_bus: EventBus
    ) -> None:
        contribution = build_contribution(backlinks)
        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="notes/a.md", text=NOTE_TEXT)))
        await contribution.wait_idle()

        contribution.stop()
        event_bus.publish(ActiveDocumentChanged(document=ActiveDocument(uri="notes/a.md", text=NOTE_TEXT)))
        await contribution.wait_idle()

        assert status_bar.element_ids == ()
        assert event_bus.handler_count(ActiveDocumentChanged) == 0

    def test_update_without_running_loop_raises(
        self, build_contribution, backlinks, status_bar: StatusBar
    ) -> None:
        contribution = build_contribution(backlinks)

        with pytest.raises(RuntimeError):
            contribution.handle_active_document(ActiveDocument(uri="notes/a.md", text=NOTE_TEXT))

        assert status_bar.element_ids == ()
