"""Obsidian-style buttons in the file navigator header.

Buttons, left to right: New Note, New Folder, Sort Files, Collapse All.
They show only when the file navigator is the contextual widget and the
shell is in kb-view.
"""

from __future__ import annotations

import logging
from typing import Any

from ...core.widget_ids import FILE_NAVIGATOR_ID, NAVIGATOR_WIDGET_KIND
from ...services.commands import Command, CommandHandler, CommandRegistry
from ..toolbar import TabBarToolbarRegistry, ToolbarItem
from .base import VisibilityContribution, widget_kind

LOGGER = logging.getLogger(__name__)

NEW_NOTE = Command(id="kb-view.newNote", label="New Note", category="KB View")
SORT_FILES = Command(id="kb-view.sortFiles", label="Sort Files", category="KB View")

SORT_OPTIONS_FEATURE = "Sort options"

WORKSPACE_NEW_FILE = "workspace:newFile"
WORKSPACE_NEW_FOLDER_TOOLBAR = "workspace:newFolder.toolbar"
NAVIGATOR_COLLAPSE_ALL = "navigator.collapse.all"


class FileTreeToolbarContribution(VisibilityContribution):
    """Contributes the note-centric file tree toolbar."""

    feature_name = "File Tree"

    def matches_widget(self, widget: Any) -> bool:
        return widget_kind(widget) == NAVIGATOR_WIDGET_KIND and getattr(widget, "id", None) == FILE_NAVIGATOR_ID

    def register_commands(self, registry: CommandRegistry) -> None:
        self._track(
            registry.register_command(
                NEW_NOTE,
                CommandHandler(
                    execute=self.create_note,
                    is_enabled=self.is_kb_view,
                    is_visible=self.is_kb_view,
                ),
            )
        )
        self._track(
            registry.register_command(
                SORT_FILES,
                CommandHandler(
                    execute=self.placeholder(SORT_OPTIONS_FEATURE),
                    is_enabled=self.is_kb_view,
                    is_visible=self.is_kb_view,
                ),
            )
        )
        LOGGER.debug("File tree commands registered: %s, %s", NEW_NOTE.id, SORT_FILES.id)

    def register_toolbar_items(self, toolbar: TabBarToolbarRegistry) -> None:
        items = (
            ToolbarItem(
                id=NEW_NOTE.id,
                command=NEW_NOTE.id,
                tooltip="New Note",
                icon="codicon-new-file",
                priority=0,
                is_visible=self.is_visible,
            ),
            ToolbarItem(
                id="kb-view.newFolder.toolbar",
                command=WORKSPACE_NEW_FOLDER_TOOLBAR,
                tooltip="New Folder",
                icon="codicon-new-folder",
                priority=1,
                is_visible=self.is_visible,
            ),
            ToolbarItem(
                id=SORT_FILES.id,
                command=SORT_FILES.id,
                tooltip="Sort Files",
                icon="codicon-list-filter",
                priority=2,
                is_visible=self.is_visible,
            ),
            ToolbarItem(
                id="kb-view.collapseAll.toolbar",
                command=NAVIGATOR_COLLAPSE_ALL,
                tooltip="Collapse All",
                icon="codicon-collapse-all",
                priority=3,
                is_visible=self.is_visible,
            ),
        )
        for item in items:
            self._track(toolbar.register_item(item))

    async def create_note(self) -> bool:
        # TODO: prompt for a note name and seed the file with frontmatter once
        # the workspace command accepts an initial name.
        try:
            await self._commands.execute_command(WORKSPACE_NEW_FILE)
        except Exception as exc:
            LOGGER.error("Failed to create new note: %s", exc)
            self._notifications.error("Failed to create new note")
            return False
        return True


__all__ = [
    "FileTreeToolbarContribution",
    "NEW_NOTE",
    "SORT_FILES",
    "WORKSPACE_NEW_FILE",
    "WORKSPACE_NEW_FOLDER_TOOLBAR",
    "NAVIGATOR_COLLAPSE_ALL",
]
