"""Runtime bootstrap for kb-view.

This module wires every kb-view component onto one event bus and hands back
a :class:`KBViewRuntime` that owns them.

The bootstrap process:
1. Creates the event bus and the mode state (seeded from settings)
2. Creates the headless host adapters (shell, widget factory, commands,
   notifications, workspace, backlinks, preferences)
3. Instantiates the five contributions and registers their commands,
   toolbar items and widget factories
4. Creates the widget lifecycle manager

Usage:
    from kbview.ui.bootstrap import KBViewRuntime

    runtime = KBViewRuntime(settings, settings_store=store)
    runtime.initialize()          # inside a running event loop
    ...
    runtime.dispose()
"""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Any

from ..core.disposables import Disposable, DisposableCollection
from ..core.mode import Mode, ModeState
from ..core.widget_ids import ManagedWidgetId
from ..services.backlinks import InMemoryBacklinkIndex
from ..services.commands import Command, CommandHandler, CommandRegistry
from ..services.host import ActiveDocument
from ..services.notifications import NotificationService
from ..services.settings import Settings, SettingsStore
from ..services.workspace import StaticWorkspace
from ..widgets.status_bar import StatusBar
from .contributions import (
    FileTreeToolbarContribution,
    NavigationToolbarContribution,
    RibbonContribution,
    StatusMetricsContribution,
    VaultSelectorContribution,
    VisibilityContribution,
)
from .domain import WidgetLifecycleManager
from .events import ActiveDocumentChanged, EventBus, ModeChanged
from .infrastructure import HeadlessApplicationShell, HeadlessWidget, SettingsAdapter, WidgetRegistry
from .toolbar import TabBarToolbarRegistry

_LOGGER = logging.getLogger(__name__)

SHOW_GRAPH = Command(id="knowledge-base.show-graph", label="Show Graph", category="Knowledge Base")
TOGGLE_MODE = Command(id="kb-view.toggleMode", label="Toggle KB View", category="KB View")

# Panels rendered by the knowledge-base extension; kb-view only places them.
_PANEL_LABELS: dict[ManagedWidgetId, str] = {
    ManagedWidgetId.BACKLINKS: "Backlinks",
    ManagedWidgetId.TAGS: "Tags",
    ManagedWidgetId.GRAPH: "Graph",
}


class KBViewRuntime:
    """Owns one fully wired kb-view instance."""

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        settings_store: SettingsStore | None = None,
        event_bus: EventBus | None = None,
        shell: HeadlessApplicationShell | None = None,
        backlinks: Any | None = None,
        status_bar: StatusBar | None = None,
    ) -> None:
        _LOGGER.info("Bootstrapping kb-view runtime...")
        settings = settings or Settings()
        self.settings_store = settings_store

        # =====================================================================
        # 1. Event bus and mode state
        # =====================================================================
        self.event_bus = event_bus or EventBus()
        self.mode_state = ModeState(_resolve_startup_mode(settings.startup_mode))
        _LOGGER.debug("Created mode state (mode=%s)", self.mode_state.get_current_mode().value)

        # =====================================================================
        # 2. Host adapters
        # =====================================================================
        self.preferences = SettingsAdapter(settings, self.event_bus)
        self.commands = CommandRegistry()
        self.notifications = NotificationService(self.event_bus)
        self.shell = shell or HeadlessApplicationShell(self.event_bus)
        self.widgets = WidgetRegistry()
        self.workspace = StaticWorkspace(self.event_bus, settings.workspace)
        self.backlinks = backlinks if backlinks is not None else InMemoryBacklinkIndex()
        self.toolbar = TabBarToolbarRegistry(self.event_bus)
        self.status_bar = status_bar or StatusBar()
        self._active_document: ActiveDocument | None = None
        _LOGGER.debug("Created host adapters")

        # =====================================================================
        # 3. Contributions
        # =====================================================================
        core_args = (self.mode_state, self.commands, self.notifications)
        self.navigation_toolbar = NavigationToolbarContribution(*core_args)
        self.file_tree_toolbar = FileTreeToolbarContribution(*core_args)
        self.ribbon = RibbonContribution(*core_args)
        self.vault_selector = VaultSelectorContribution(
            *core_args, workspace=self.workspace, event_bus=self.event_bus
        )
        self.status_metrics = StatusMetricsContribution(
            *core_args,
            status_bar=self.status_bar,
            event_bus=self.event_bus,
            backlinks=self.backlinks,
            preferences=self.preferences,
            active_document=lambda: self._active_document,
        )
        self.contributions: tuple[VisibilityContribution, ...] = (
            self.navigation_toolbar,
            self.file_tree_toolbar,
            self.ribbon,
            self.vault_selector,
            self.status_metrics,
        )

        self.ribbon.register_widgets(self.widgets)
        self.vault_selector.register_widgets(self.widgets)
        for widget_id, label in _PANEL_LABELS.items():
            self.widgets.register_factory(widget_id.value, _panel_factory(widget_id, label))

        # =====================================================================
        # 4. Widget lifecycle
        # =====================================================================
        self.lifecycle = WidgetLifecycleManager(
            self.mode_state,
            self.shell,
            self.widgets,
            self.preferences,
            startup_delay=settings.startup_delay_seconds,
            shell_ready_attempts=settings.shell_ready_attempts,
            shell_ready_min_wait=settings.shell_ready_min_wait,
            shell_ready_max_wait=settings.shell_ready_max_wait,
        )

        self._disposables = DisposableCollection()
        self._initialized = False
        _LOGGER.info("kb-view runtime ready (initialize() to start)")

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------
    def initialize(self) -> None:
        """Register everything and start reconciling; needs a running loop."""
        if self._initialized:
            _LOGGER.debug("KBViewRuntime.initialize: already initialized")
            return
        self._initialized = True

        for contribution in self.contributions:
            contribution.contribute(self.commands, self.toolbar)
        self._register_runtime_commands()

        self._disposables.push(self.mode_state.subscribe(self._publish_mode_change))
        self._disposables.push(self.mode_state.subscribe(self._persist_mode))
        self._disposables.push(self.event_bus.subscribe(ActiveDocumentChanged, self._remember_active_document))

        self.lifecycle.initialize()
        self.status_metrics.start()

    def dispose(self) -> None:
        if not self._initialized:
            return
        self._initialized = False
        self.status_metrics.stop()
        self.lifecycle.dispose()
        for contribution in self.contributions:
            contribution.dispose()
        self._disposables.dispose()
        self.toolbar.dispose()
        _LOGGER.debug("KBViewRuntime disposed")

    @property
    def initialized(self) -> bool:
        return self._initialized

    async def wait_idle(self) -> None:
        await self.lifecycle.wait_idle()
        await self.status_metrics.wait_idle()

    # ------------------------------------------------------------------
    # Host-facing helpers
    # ------------------------------------------------------------------
    def set_active_document(self, uri: str | None, text: str = "") -> None:
        document = ActiveDocument(uri=uri, text=text) if uri is not None else None
        self.event_bus.publish(ActiveDocumentChanged(document=document))

    async def show_graph(self) -> Any:
        return await self.lifecycle.open_on_demand(ManagedWidgetId.GRAPH)

    def toggle_mode(self) -> Mode:
        return self.mode_state.toggle()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _register_runtime_commands(self) -> None:
        self._disposables.push(self.commands.register_command(SHOW_GRAPH, CommandHandler(execute=self.show_graph)))
        self._disposables.push(self.commands.register_command(TOGGLE_MODE, CommandHandler(execute=self.toggle_mode)))

    def _publish_mode_change(self, mode: Mode) -> None:
        self.event_bus.publish(ModeChanged(mode=mode, previous=mode.other()))

    def _persist_mode(self, mode: Mode) -> None:
        settings = self.preferences.settings
        if not settings.persist_mode:
            return
        updated = replace(settings, startup_mode=mode.value)
        self.preferences.apply(updated)
        if self.settings_store is None:
            return
        try:
            self.settings_store.save(updated)
        except OSError as exc:
            _LOGGER.warning("Failed to persist mode %s: %s", mode.value, exc)

    def _remember_active_document(self, event: ActiveDocumentChanged) -> None:
        self._active_document = event.document


def _resolve_startup_mode(value: str) -> Mode:
    try:
        return Mode.parse(value)
    except ValueError:
        _LOGGER.warning("Unknown startup mode %r; falling back to %s", value, Mode.KB_VIEW.value)
        return Mode.KB_VIEW


def _panel_factory(widget_id: ManagedWidgetId, label: str) -> Any:
    def _create() -> HeadlessWidget:
        return HeadlessWidget(widget_id.value, label=label, kind="kb-panel")

    return _create


__all__ = ["KBViewRuntime", "SHOW_GRAPH", "TOGGLE_MODE"]
