"""Log routing for the kbview process.

One rotating ``kbview.log`` (plus stderr unless disabled) receives every
record. The ``debug_logging`` setting or ``--debug`` lowers the level to
DEBUG, which is where the mode transitions and widget reconciliation trace
themselves; the event-loop loggers stay at WARNING regardless.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..services.settings import Settings

__all__ = [
    "LogConfig",
    "setup_logging",
    "teardown_logging",
    "route_qt_messages",
    "LOG_DIR_ENV",
    "LOG_FILENAME",
]

LOGGER = logging.getLogger(__name__)

LOG_DIR_ENV = "KBVIEW_LOG_DIR"
LOG_FILENAME = "kbview.log"
LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
EVENT_LOOP_LOGGERS: tuple[str, ...] = ("asyncio", "qasync")

_installed: list[logging.Handler] = []


@dataclass(frozen=True, slots=True)
class LogConfig:
    level: int = logging.INFO
    directory: Path | None = None
    console: bool = True
    max_bytes: int = 1_000_000
    backup_count: int = 3

    @classmethod
    def for_settings(cls, settings: "Settings", *, debug: bool = False, console: bool = True) -> "LogConfig":
        verbose = debug or settings.debug_logging
        return cls(level=logging.DEBUG if verbose else logging.INFO, console=console)

    @property
    def log_path(self) -> Path:
        base = self.directory or os.environ.get(LOG_DIR_ENV) or Path.home() / ".kbview" / "logs"
        return Path(base).expanduser() / LOG_FILENAME


def setup_logging(config: LogConfig | None = None) -> Path:
    """Install the kbview handlers on the root logger; returns the log file.

    Calling it again replaces the handlers from the previous call.
    """
    config = config or LogConfig()
    teardown_logging()

    path = config.log_path
    path.parent.mkdir(parents=True, exist_ok=True)
    formatter = logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    handlers: list[logging.Handler] = [
        RotatingFileHandler(path, maxBytes=config.max_bytes, backupCount=config.backup_count, encoding="utf-8")
    ]
    if config.console:
        handlers.append(logging.StreamHandler())

    root = logging.getLogger()
    for handler in handlers:
        handler.setFormatter(formatter)
        root.addHandler(handler)
    root.setLevel(config.level)
    _installed.extend(handlers)

    for name in EVENT_LOOP_LOGGERS:
        logging.getLogger(name).setLevel(max(logging.WARNING, config.level))

    LOGGER.debug("Logging to %s (level=%s)", path, logging.getLevelName(config.level))
    return path


def teardown_logging() -> None:
    """Remove and close the handlers installed by :func:`setup_logging`."""
    root = logging.getLogger()
    while _installed:
        handler = _installed.pop()
        root.removeHandler(handler)
        handler.close()


def route_qt_messages() -> bool:
    """Forward Qt's own diagnostics to the ``kbview.qt`` logger.

    Returns ``False`` when PySide6 is not installed.
    """
    try:
        from PySide6.QtCore import QtMsgType, qInstallMessageHandler
    except ImportError:
        return False

    levels = {
        QtMsgType.QtDebugMsg: logging.DEBUG,
        QtMsgType.QtInfoMsg: logging.INFO,
        QtMsgType.QtWarningMsg: logging.WARNING,
        QtMsgType.QtCriticalMsg: logging.ERROR,
        QtMsgType.QtFatalMsg: logging.CRITICAL,
    }
    qt_logger = logging.getLogger("kbview.qt")

    def _forward(kind, _context, message):  # type: ignore[no-untyped-def]
        qt_logger.log(levels.get(kind, logging.INFO), message)

    qInstallMessageHandler(_forward)
    return True
