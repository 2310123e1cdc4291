"""Tests for the tab-bar toolbar registry."""

from __future__ import annotations

from kbview.ui.events import ActiveWidgetChanged, EventBus
from kbview.ui.infrastructure.headless_shell import HeadlessWidget
from kbview.ui.toolbar import TabBarToolbarRegistry, ToolbarItem


def test_items_sorted_by_priority() -> None:
    toolbar = TabBarToolbarRegistry()
    toolbar.register_item(ToolbarItem(id="b", command="b", priority=5))
    toolbar.register_item(ToolbarItem(id="a", command="a", priority=-5))

    assert [item.id for item in toolbar.items()] == ["a", "b"]


def test_predicate_evaluated_on_every_call() -> None:
    toolbar = TabBarToolbarRegistry()
    state = {"show": True}
    toolbar.register_item(ToolbarItem(id="x", command="x", is_visible=lambda _w: state["show"]))

    assert len(toolbar.visible_items(None)) == 1
    state["show"] = False
    assert toolbar.visible_items(None) == ()


def test_failing_predicate_hides_item() -> None:
    def _broken(widget: object) -> bool:
        raise RuntimeError("predicate blew up")

    toolbar = TabBarToolbarRegistry()
    toolbar.register_item(ToolbarItem(id="x", command="x", is_visible=_broken))

    assert toolbar.visible_items(HeadlessWidget("w")) == ()


def test_active_widget_change_recomputes_current_items() -> None:
    bus = EventBus()
    toolbar = TabBarToolbarRegistry(bus)
    toolbar.register_item(
        ToolbarItem(id="editor-only", command="c", is_visible=lambda w: getattr(w, "kind", None) == "editor")
    )

    bus.publish(ActiveWidgetChanged(widget=HeadlessWidget("e", kind="editor")))
    assert [item.id for item in toolbar.current_items] == ["editor-only"]

    bus.publish(ActiveWidgetChanged(widget=HeadlessWidget("t", kind="terminal")))
    assert toolbar.current_items == ()

    toolbar.dispose()
    assert bus.handler_count(ActiveWidgetChanged) == 0


def test_dispose_handle_removes_item() -> None:
    toolbar = TabBarToolbarRegistry()
    handle = toolbar.register_item(ToolbarItem(id="x", command="x"))

    handle.dispose()

    assert toolbar.get_item("x") is None
