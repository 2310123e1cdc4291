"""Tests for the ribbon contribution."""

from __future__ import annotations

import pytest

from kbview.core.mode import Mode, ModeState
from kbview.services.commands import Command, CommandHandler, CommandRegistry
from kbview.services.notifications import NotificationService
from kbview.ui.contributions.ribbon import (
    PLACEHOLDER_CLASS,
    RIBBON_WIDGET_ID,
    RibbonAction,
    RibbonCommands,
    RibbonContribution,
    RibbonWidget,
)
from kbview.ui.infrastructure.headless_shell import WidgetRegistry


@pytest.fixture
def contribution(
    mode_state: ModeState, commands: CommandRegistry, notifications: NotificationService
) -> RibbonContribution:
    return RibbonContribution(mode_state, commands, notifications)


@pytest.fixture
def ribbon(contribution: RibbonContribution) -> RibbonWidget:
    return contribution.create_widget()


class TestRibbonAction:
    def test_requires_exactly_one_target(self) -> None:
        with pytest.raises(ValueError):
            RibbonAction(id="x", icon="i", label="X")
        with pytest.raises(ValueError):
            RibbonAction(id="x", icon="i", label="X", command="a", handler=lambda: None)

    def test_placeholder_tooltip_and_class(self) -> None:
        action = RibbonAction(id="x", icon="i", label="Later", handler=lambda: None, placeholder=True)
        assert action.tooltip == "Later (Coming Soon)"
        assert PLACEHOLDER_CLASS in action.css_class

    def test_regular_action_has_plain_tooltip(self) -> None:
        action = RibbonAction(id="x", icon="i", label="Now", command="do.it")
        assert action.tooltip == "Now"
        assert PLACEHOLDER_CLASS not in action.css_class


class TestRibbonWidget:
    def test_six_actions_in_order(self, ribbon: RibbonWidget) -> None:
        assert [action.id for action in ribbon.actions] == [
            "toggle-sidebar",
            "search",
            "bookmarks",
            "graph",
            "templates",
            "connections",
        ]

    def test_exactly_three_placeholders(self, ribbon: RibbonWidget) -> None:
        placeholders = [action.id for action in ribbon.actions if action.placeholder]
        assert placeholders == ["bookmarks", "templates", "connections"]
        for action in ribbon.actions:
            assert action.tooltip.endswith(" (Coming Soon)") is action.placeholder

    def test_delegates_point_at_host_commands(self, ribbon: RibbonWidget) -> None:
        assert ribbon.get_action("toggle-sidebar").command == RibbonCommands.TOGGLE_SIDEBAR
        assert ribbon.get_action("search").command == RibbonCommands.QUICK_OPEN
        assert ribbon.get_action("graph").command == "knowledge-base.show-graph"

    def test_not_user_closable(self, ribbon: RibbonWidget) -> None:
        assert ribbon.closable is False
        assert ribbon.id == RIBBON_WIDGET_ID

    def test_actions_hidden_outside_kb_view(self, ribbon: RibbonWidget, mode_state: ModeState) -> None:
        assert len(ribbon.visible_actions()) == 6
        mode_state.set_mode(Mode.DEVELOPER)
        assert ribbon.visible_actions() == ()

    @pytest.mark.asyncio
    async def test_placeholder_shows_coming_soon(
        self, ribbon: RibbonWidget, notifications: NotificationService
    ) -> None:
        assert await ribbon.trigger("bookmarks") is True
        assert notifications.messages() == ["Bookmarks - Coming Soon!"]

    @pytest.mark.asyncio
    async def test_delegate_executes_command(self, ribbon: RibbonWidget, commands: CommandRegistry) -> None:
        calls: list[str] = []
        commands.register_command(
            Command(id=RibbonCommands.QUICK_OPEN, label="Quick Open"),
            CommandHandler(execute=lambda: calls.append("open")),
        )

        assert await ribbon.trigger("search") is True
        assert calls == ["open"]

    @pytest.mark.asyncio
    async def test_missing_command_reports_by_label(
        self, ribbon: RibbonWidget, notifications: NotificationService
    ) -> None:
        assert await ribbon.trigger("toggle-sidebar") is False
        assert notifications.messages("error") == ["Command not available: Toggle Sidebar"]

    @pytest.mark.asyncio
    async def test_unknown_action(self, ribbon: RibbonWidget) -> None:
        with pytest.raises(KeyError):
            await ribbon.trigger("nope")


class TestRibbonContribution:
    @pytest.mark.asyncio
    async def test_registers_widget_factory(self, contribution: RibbonContribution) -> None:
        registry = WidgetRegistry()
        contribution.register_widgets(registry)

        widget = await registry.get_or_create_widget(RIBBON_WIDGET_ID)

        assert isinstance(widget, RibbonWidget)
        assert await registry.get_or_create_widget(RIBBON_WIDGET_ID) is widget

    def test_predicate_matches_ribbon_only(self, contribution: RibbonContribution, ribbon: RibbonWidget) -> None:
        assert contribution.is_visible(ribbon)
        assert not contribution.is_visible(object())
