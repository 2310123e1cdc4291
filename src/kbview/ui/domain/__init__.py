"""Domain layer for kb-view.

Domain managers own state that reacts to mode changes. They receive their
collaborators through constructor injection and never touch Qt directly.

Domain Managers:
    - WidgetLifecycleManager: opens, closes, snapshots and restores the
      knowledge-base widgets as the interface mode flips
"""

from __future__ import annotations

from .widget_lifecycle import WidgetLifecycleManager

__all__: list[str] = [
    "WidgetLifecycleManager",
]
