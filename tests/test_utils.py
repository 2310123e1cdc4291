"""Tests for the logging helpers."""

from __future__ import annotations

import logging
from pathlib import Path

import pytest

from kbview.services.settings import Settings
from kbview.utils import logging as logging_utils
from kbview.utils.logging import LogConfig


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    level = root.level
    yield
    logging_utils.teardown_logging()
    root.setLevel(level)


def _flush() -> None:
    for handler in logging.getLogger().handlers:
        handler.flush()


def test_setup_logging_writes_rotating_file(tmp_path: Path) -> None:
    log_path = logging_utils.setup_logging(LogConfig(directory=tmp_path / "logs", console=False))

    logging.getLogger("kbview.tests").info("Logging smoke test")
    _flush()

    assert log_path == tmp_path / "logs" / "kbview.log"
    assert "Logging smoke test" in log_path.read_text(encoding="utf-8")


def test_repeated_setup_replaces_handlers(tmp_path: Path) -> None:
    root = logging.getLogger()
    before = len(root.handlers)

    logging_utils.setup_logging(LogConfig(directory=tmp_path, console=True))
    logging_utils.setup_logging(LogConfig(directory=tmp_path, console=True))

    assert len(root.handlers) == before + 2

    logging_utils.teardown_logging()

    assert len(root.handlers) == before


def test_event_loop_loggers_stay_quiet_in_debug(tmp_path: Path) -> None:
    logging_utils.setup_logging(LogConfig(level=logging.DEBUG, directory=tmp_path, console=False))

    assert logging.getLogger().level == logging.DEBUG
    assert logging.getLogger("asyncio").level == logging.WARNING
    assert logging.getLogger("qasync").level == logging.WARNING


def test_log_dir_env_override(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("KBVIEW_LOG_DIR", str(tmp_path / "from-env"))

    log_path = logging_utils.setup_logging(LogConfig(console=False))

    assert log_path.parent == tmp_path / "from-env"


@pytest.mark.parametrize(
    ("debug_setting", "debug_flag", "expected"),
    [
        (False, False, logging.INFO),
        (True, False, logging.DEBUG),
        (False, True, logging.DEBUG),
    ],
)
def test_config_level_follows_settings_and_flag(debug_setting: bool, debug_flag: bool, expected: int) -> None:
    config = LogConfig.for_settings(Settings(debug_logging=debug_setting), debug=debug_flag)

    assert config.level == expected
