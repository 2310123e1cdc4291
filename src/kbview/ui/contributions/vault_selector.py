"""Vault selector pinned to the bottom of the left sidebar."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from ...core.widget_ids import ManagedWidgetId
from ...services.host import WorkspaceService
from ..events import EventBus, WorkspaceChanged
from ..infrastructure.headless_shell import HeadlessWidget, WidgetRegistry
from .base import VisibilityContribution

LOGGER = logging.getLogger(__name__)

VAULT_SELECTOR_WIDGET_ID = ManagedWidgetId.VAULT_SELECTOR.value
NO_VAULT_LABEL = "No Vault Open"
OPEN_WORKSPACE_COMMAND = "workspace:openWorkspace"
ABOUT_COMMAND = "core.about"
OPEN_PREFERENCES_COMMAND = "preferences:open"


def vault_name_for(workspace: str | None) -> str:
    """Folder name shown for ``workspace`` (the last locator segment)."""
    if not workspace:
        return NO_VAULT_LABEL
    return workspace.split("/")[-1] or "Vault"


@dataclass(frozen=True, slots=True)
class VaultButton:
    id: str
    label: str
    icon: str
    command: str


SECONDARY_BUTTONS: tuple[VaultButton, ...] = (
    VaultButton(id="help", label="Help", icon="codicon-question", command=ABOUT_COMMAND),
    VaultButton(id="settings", label="Settings", icon="codicon-settings-gear", command=OPEN_PREFERENCES_COMMAND),
)


class VaultSelectorWidget(HeadlessWidget):
    """Shows the active vault and its help/settings buttons."""

    LABEL = "Vault"

    def __init__(self, contribution: "VaultSelectorContribution", workspace: WorkspaceService) -> None:
        super().__init__(VAULT_SELECTOR_WIDGET_ID, label=self.LABEL, closable=False, kind="vault-selector")
        self._contribution = contribution
        self._workspace = workspace
        self.vault_name = NO_VAULT_LABEL
        self.vault_path = ""
        self.update_vault_info()

    def update_vault_info(self) -> None:
        resource = self._workspace.workspace
        self.vault_name = vault_name_for(resource)
        self.vault_path = resource or ""

    @property
    def tooltip(self) -> str:
        return self.vault_path or "Click to open a vault"

    @property
    def secondary_buttons(self) -> tuple[VaultButton, ...]:
        return SECONDARY_BUTTONS

    def is_content_visible(self) -> bool:
        return self._contribution.is_visible(self)

    async def open_vault(self) -> bool:
        return await self._contribution.run_delegate(OPEN_WORKSPACE_COMMAND, "Open Vault")

    async def press(self, button_id: str) -> bool:
        for button in SECONDARY_BUTTONS:
            if button.id == button_id:
                return await self._contribution.run_delegate(button.command, button.label)
        raise KeyError(button_id)


class VaultSelectorContribution(VisibilityContribution):
    """Registers the vault selector and keeps it in sync with the workspace."""

    feature_name = "Vault"

    def __init__(self, *args: Any, workspace: WorkspaceService, event_bus: EventBus, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self._workspace = workspace
        self._bus = event_bus
        self._widget: VaultSelectorWidget | None = None

    def matches_widget(self, widget: Any) -> bool:
        return getattr(widget, "id", None) == VAULT_SELECTOR_WIDGET_ID

    def create_widget(self) -> VaultSelectorWidget:
        widget = VaultSelectorWidget(self, self._workspace)
        if self._widget is None:
            self._track(self._bus.subscribe(WorkspaceChanged, self._handle_workspace_changed))
        self._widget = widget
        return widget

    def register_widgets(self, factory: WidgetRegistry) -> None:
        factory.register_factory(VAULT_SELECTOR_WIDGET_ID, self.create_widget)

    def _handle_workspace_changed(self, event: WorkspaceChanged) -> None:
        if self._widget is None:
            return
        self._widget.update_vault_info()
        LOGGER.debug("Vault selector now shows %s", self._widget.vault_name)


__all__ = [
    "VaultSelectorWidget",
    "VaultSelectorContribution",
    "VaultButton",
    "vault_name_for",
    "VAULT_SELECTOR_WIDGET_ID",
    "NO_VAULT_LABEL",
    "OPEN_WORKSPACE_COMMAND",
    "ABOUT_COMMAND",
    "OPEN_PREFERENCES_COMMAND",
]
