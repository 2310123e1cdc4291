"""Tests for the headless shell and widget factory adapters."""

from __future__ import annotations

import pytest

from kbview.core.errors import WidgetAttachError, WidgetCreationError
from kbview.core.widget_ids import PlacementArea
from kbview.ui.events import ActiveWidgetChanged, EventBus
from kbview.ui.infrastructure.headless_shell import HeadlessApplicationShell, HeadlessWidget, WidgetRegistry


class TestHeadlessApplicationShell:
    @pytest.mark.asyncio
    async def test_add_reveal_and_close(self, shell: HeadlessApplicationShell) -> None:
        widget = HeadlessWidget("panel")

        await shell.add_widget(widget, PlacementArea.RIGHT)
        await shell.reveal_widget("panel")

        assert widget.is_attached
        assert widget.area is PlacementArea.RIGHT
        assert shell.get_widgets(PlacementArea.RIGHT) == (widget,)
        assert shell.revealed == ("panel",)

        widget.close()

        assert not widget.is_attached
        assert shell.attached_ids() == set()

    @pytest.mark.asyncio
    async def test_adding_attached_widget_is_noop(self, shell: HeadlessApplicationShell) -> None:
        widget = HeadlessWidget("panel")
        await shell.add_widget(widget, PlacementArea.LEFT)
        await shell.add_widget(widget, PlacementArea.RIGHT)

        assert widget.area is PlacementArea.LEFT
        assert shell.get_widgets(PlacementArea.RIGHT) == ()

    @pytest.mark.asyncio
    async def test_not_ready_shell_refuses_widgets(self) -> None:
        shell = HeadlessApplicationShell(ready=False)

        with pytest.raises(WidgetAttachError):
            await shell.add_widget(HeadlessWidget("panel"), PlacementArea.MAIN)

    @pytest.mark.asyncio
    async def test_reveal_unknown_widget_raises(self, shell: HeadlessApplicationShell) -> None:
        with pytest.raises(WidgetAttachError):
            await shell.reveal_widget("ghost")

    @pytest.mark.asyncio
    async def test_closing_active_widget_clears_it(self, event_bus: EventBus) -> None:
        shell = HeadlessApplicationShell(event_bus)
        seen: list[object] = []
        event_bus.subscribe(ActiveWidgetChanged, lambda event: seen.append(event.widget))
        widget = HeadlessWidget("editor", kind="editor")
        await shell.add_widget(widget, PlacementArea.MAIN)

        shell.set_active_widget(widget)
        widget.close()

        assert shell.active_widget is None
        assert seen == [widget, None]


class TestWidgetRegistry:
    @pytest.mark.asyncio
    async def test_get_or_create_is_idempotent(self) -> None:
        registry = WidgetRegistry()
        registry.register_factory("panel", lambda: HeadlessWidget("panel"))

        first = await registry.get_or_create_widget("panel")
        second = await registry.get_or_create_widget("panel")

        assert first is second
        assert registry.creation_count["panel"] == 1

    @pytest.mark.asyncio
    async def test_missing_factory(self) -> None:
        with pytest.raises(WidgetCreationError):
            await WidgetRegistry().get_or_create_widget("panel")

    @pytest.mark.asyncio
    async def test_factory_failure_is_wrapped(self) -> None:
        registry = WidgetRegistry()

        def _broken() -> HeadlessWidget:
            raise OSError("disk full")

        registry.register_factory("panel", _broken)

        with pytest.raises(WidgetCreationError) as excinfo:
            await registry.get_or_create_widget("panel")
        assert excinfo.value.widget_id == "panel"
        assert registry.get_widget("panel") is None
