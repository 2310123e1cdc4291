"""Status bar element store with optional Qt widgets."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Iterable, Mapping

try:  # pragma: no cover - Qt imports are optional during tests
    from PySide6.QtWidgets import QApplication, QLabel, QStatusBar
except Exception:  # pragma: no cover - PySide6 not available
    QApplication = None  # type: ignore[assignment]
    QLabel = None  # type: ignore[assignment]
    QStatusBar = None  # type: ignore[assignment]

LOGGER = logging.getLogger(__name__)


class StatusBarAlignment(str, Enum):
    LEFT = "left"
    RIGHT = "right"


@dataclass(frozen=True, slots=True)
class StatusSegment:
    """One status bar entry; higher ``priority`` sits further left."""

    text: str
    tooltip: str = ""
    alignment: StatusBarAlignment = StatusBarAlignment.LEFT
    priority: int = 0


class StatusBar:
    """Keyed status bar entries that stay test friendly without Qt.

    ``set_elements``/``remove_elements`` change several entries as one
    update, so observers never see half of a group.
    """

    def __init__(self, parent: Any | None = None) -> None:
        self._elements: dict[str, StatusSegment] = {}
        self._revision = 0
        self._qt_bar = self._build_qt_status_bar(parent)
        self._labels: dict[str, Any] = {}

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def set_element(self, element_id: str, segment: StatusSegment) -> None:
        self.set_elements({element_id: segment})

    def set_elements(self, segments: Mapping[str, StatusSegment]) -> None:
        if not segments:
            return
        self._elements.update({_key(element_id): segment for element_id, segment in segments.items()})
        self._revision += 1
        self._sync_qt()

    def remove_element(self, element_id: str) -> None:
        self.remove_elements((element_id,))

    def remove_elements(self, element_ids: Iterable[str]) -> None:
        removed = [element_id for element_id in element_ids if self._elements.pop(_key(element_id), None) is not None]
        if removed:
            self._revision += 1
            self._sync_qt()

    def get_element(self, element_id: str) -> StatusSegment | None:
        return self._elements.get(_key(element_id))

    def has_element(self, element_id: str) -> bool:
        return _key(element_id) in self._elements

    def widget(self) -> Any | None:
        """Return the underlying :class:`QStatusBar` when available."""

        return self._qt_bar

    # ------------------------------------------------------------------
    # Introspection helpers (handy for tests)
    # ------------------------------------------------------------------
    @property
    def revision(self) -> int:
        return self._revision

    @property
    def element_ids(self) -> tuple[str, ...]:
        return tuple(self._elements)

    def ordered(self, alignment: StatusBarAlignment) -> list[tuple[str, StatusSegment]]:
        """Entries for one side, left to right."""
        entries = [(key, seg) for key, seg in self._elements.items() if seg.alignment is alignment]
        entries.sort(key=lambda item: item[1].priority, reverse=True)
        return entries

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _sync_qt(self) -> None:
        if self._qt_bar is None or QLabel is None:
            return
        for element_id in list(self._labels):
            if element_id not in self._elements:
                label = self._labels.pop(element_id)
                try:
                    self._qt_bar.removeWidget(label)
                except Exception:
                    pass
        for element_id, segment in self._elements.items():
            label = self._labels.get(element_id)
            if label is None:
                label = QLabel(segment.text)
                label.setObjectName(element_id)
                label.setContentsMargins(8, 0, 8, 0)
                try:
                    if segment.alignment is StatusBarAlignment.RIGHT:
                        self._qt_bar.addPermanentWidget(label)
                    else:
                        self._qt_bar.addWidget(label)
                except Exception:
                    continue
                self._labels[element_id] = label
            try:
                label.setText(segment.text)
                label.setToolTip(segment.tooltip)
            except Exception:
                pass

    def _build_qt_status_bar(self, parent: Any | None) -> Any | None:
        if QStatusBar is None or QApplication is None:
            return None
        try:
            if QApplication.instance() is None:
                return None
        except Exception:
            return None

        try:
            bar = QStatusBar(parent)
        except Exception:
            return None

        try:
            bar.setObjectName("kb-status-bar")
        except Exception:
            pass
        return bar


def _key(element_id: str) -> str:
    # Enum-valued ids are stored by their plain string value.
    return str(getattr(element_id, "value", element_id))


__all__ = ["StatusBar", "StatusSegment", "StatusBarAlignment"]
