"""Mode-gated features layered onto the host shell."""

from __future__ import annotations

from .base import VisibilityContribution, coming_soon_message, command_unavailable_message
from .file_tree_toolbar import FileTreeToolbarContribution
from .navigation_toolbar import NavigationToolbarContribution
from .ribbon import RibbonAction, RibbonContribution, RibbonWidget
from .status_metrics import StatusMetricsContribution
from .vault_selector import VaultSelectorContribution, VaultSelectorWidget

__all__: list[str] = [
    "VisibilityContribution",
    "coming_soon_message",
    "command_unavailable_message",
    "FileTreeToolbarContribution",
    "NavigationToolbarContribution",
    "RibbonAction",
    "RibbonContribution",
    "RibbonWidget",
    "StatusMetricsContribution",
    "VaultSelectorContribution",
    "VaultSelectorWidget",
]
