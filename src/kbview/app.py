"""Command-line entry point for kbview.

``kbview --headless`` boots the runtime against the in-process shell, runs
the startup reconciliation and prints the resulting layout as JSON. Without
it the runtime drives a PySide6 main window on a qasync event loop.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import os
import sys
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence, TextIO

from .core.mode import Mode
from .services.settings import Settings, SettingsStore, active_environment_overrides
from .ui.bootstrap import KBViewRuntime
from .utils.logging import LogConfig, route_qt_messages, setup_logging
from .widgets.status_bar import StatusBar

LOGGER = logging.getLogger(__name__)

SETTINGS_PATH_ENV = "KBVIEW_SETTINGS_PATH"

_TRUE_WORDS = {"1", "true", "yes", "on"}
_FALSE_WORDS = {"0", "false", "no", "off"}


def _parse_bool(raw: str) -> bool:
    word = raw.lower()
    if word in _TRUE_WORDS:
        return True
    if word in _FALSE_WORDS:
        return False
    raise ValueError(f"expected a boolean, got '{raw}'")


def _parse_mode(raw: str) -> str:
    return Mode.parse(raw).value


def _parse_locator(raw: str) -> str | None:
    return None if raw.lower() in {"", "none", "null"} else raw


# One parser per Settings field accepted by ``--set``.
OVERRIDE_PARSERS: Mapping[str, Callable[[str], Any]] = {
    "auto_switch_widgets": _parse_bool,
    "startup_mode": _parse_mode,
    "persist_mode": _parse_bool,
    "startup_delay_seconds": float,
    "shell_ready_attempts": int,
    "shell_ready_min_wait": float,
    "shell_ready_max_wait": float,
    "surface_backlink_errors": _parse_bool,
    "workspace": _parse_locator,
    "debug_logging": _parse_bool,
}


def parse_overrides(items: Sequence[str]) -> dict[str, Any]:
    """Turn repeated ``KEY=VALUE`` arguments into typed settings overrides."""
    overrides: dict[str, Any] = {}
    for entry in items:
        key, separator, raw = entry.partition("=")
        key = key.strip()
        if not separator or not key:
            raise ValueError(f"'{entry}' is not in KEY=VALUE form")
        parser = OVERRIDE_PARSERS.get(key)
        if parser is None:
            raise ValueError(f"unknown setting '{key}'")
        try:
            overrides[key] = parser(raw.strip())
        except ValueError as exc:
            raise ValueError(f"{key}: {exc}") from exc
    return overrides


def settings_report(settings: Settings, store: SettingsStore, overrides: Mapping[str, Any]) -> dict[str, Any]:
    """Effective settings plus where they came from, as printed by ``--dump-settings``."""
    return {
        "settings": asdict(settings),
        "meta": {
            "path": str(store.path),
            "cli_overrides": sorted(overrides),
            "environment_variables": active_environment_overrides(),
        },
    }


async def run_headless(settings: Settings, store: SettingsStore | None = None) -> dict[str, Any]:
    """Boot the runtime without a GUI, reconcile once and report the result."""
    runtime = KBViewRuntime(settings, settings_store=store)
    runtime.initialize()
    try:
        await runtime.wait_idle()
        return {
            "mode": runtime.mode_state.get_current_mode().value,
            "shell_ready": runtime.lifecycle.shell_ready,
            "attached": sorted(widget_id.value for widget_id in runtime.lifecycle.attached_widget_ids()),
            "commands": list(runtime.commands.command_ids()),
        }
    finally:
        runtime.dispose()


@dataclass(slots=True)
class QtSession:
    app: Any
    loop: asyncio.AbstractEventLoop
    window: Any
    status_bar: StatusBar


def open_qt_session(qt_args: Sequence[str] = ()) -> QtSession:
    """Create the QApplication, its qasync loop and the main window."""
    try:
        from PySide6.QtWidgets import QApplication, QMainWindow
        from qasync import QEventLoop
    except ImportError as exc:  # pragma: no cover - depends on desktop stack
        raise RuntimeError("The kbview window needs PySide6 and qasync installed.") from exc

    program = sys.argv[0] if sys.argv else "kbview"
    app = QApplication.instance() or QApplication([program, *qt_args])
    app.setApplicationName("kbview")
    route_qt_messages()

    loop = QEventLoop(app)
    asyncio.set_event_loop(loop)
    app.aboutToQuit.connect(loop.stop)

    window = QMainWindow()
    window.setWindowTitle("KB View")
    status_bar = StatusBar(window)
    qt_bar = status_bar.widget()
    if qt_bar is not None:
        window.setStatusBar(qt_bar)
    return QtSession(app=app, loop=loop, window=window, status_bar=status_bar)


def run_qt(settings: Settings, store: SettingsStore, qt_args: Sequence[str] = ()) -> None:  # pragma: no cover - GUI
    session = open_qt_session(qt_args)
    runtime = KBViewRuntime(settings, settings_store=store, status_bar=session.status_bar)
    # initialize() schedules the startup pass, so it has to run on the live loop.
    session.loop.call_soon(runtime.initialize)
    session.window.show()
    try:
        session.loop.run_forever()
    except KeyboardInterrupt:
        LOGGER.info("Interrupted, shutting down")
    finally:
        runtime.dispose()
        shutdown_loop(session.loop)


def shutdown_loop(loop: asyncio.AbstractEventLoop) -> None:
    """Cancel leftover tasks, finalize async generators and close ``loop``."""
    if loop.is_closed():
        return
    leftovers = [task for task in asyncio.all_tasks(loop) if not task.done()]
    if leftovers:
        LOGGER.debug("Cancelling %d leftover task(s)", len(leftovers))
        for task in leftovers:
            task.cancel()
        loop.run_until_complete(asyncio.gather(*leftovers, return_exceptions=True))
    loop.run_until_complete(loop.shutdown_asyncgens())
    loop.close()


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="kbview",
        description="Run the knowledge-base view overlay or inspect its configuration.",
    )
    parser.add_argument("--dump-settings", action="store_true", help="Print the effective settings and exit.")
    parser.add_argument("--settings-path", metavar="PATH", help="Settings file (default ~/.kbview/settings.json).")
    parser.add_argument(
        "--set",
        dest="overrides",
        metavar="KEY=VALUE",
        action="append",
        default=[],
        help="Override one setting for this run (repeatable).",
    )
    parser.add_argument(
        "--mode",
        choices=[mode.value for mode in Mode],
        help="Start in this mode instead of the persisted one.",
    )
    parser.add_argument("--debug", action="store_true", help="Log at DEBUG level.")
    parser.add_argument(
        "--headless",
        action="store_true",
        help="Reconcile once without a window and print the resulting layout.",
    )
    return parser


def main(argv: Sequence[str] | None = None, *, stdout: TextIO | None = None) -> int:
    """Entry point of the ``kbview`` console script."""
    out = stdout or sys.stdout
    # Unrecognised arguments are handed to Qt.
    args, qt_args = build_parser().parse_known_args(argv)

    try:
        overrides = parse_overrides(args.overrides)
    except ValueError as exc:
        print(f"Invalid --set override: {exc}", file=sys.stderr)
        return 2
    if args.mode:
        overrides["startup_mode"] = args.mode

    raw_path = args.settings_path or os.environ.get(SETTINGS_PATH_ENV)
    store = SettingsStore(Path(raw_path).expanduser() if raw_path else None)
    settings = store.load(overrides=overrides or None)

    if args.dump_settings:
        _write_json(settings_report(settings, store, overrides), out)
        return 0

    setup_logging(LogConfig.for_settings(settings, debug=args.debug))

    if args.headless:
        _write_json(asyncio.run(run_headless(settings, store)), out)
        return 0

    run_qt(settings, store, qt_args)
    return 0


def _write_json(payload: Mapping[str, Any], stream: TextIO) -> None:
    json.dump(payload, stream, indent=2)
    stream.write("\n")


if __name__ == "__main__":  # pragma: no cover - manual launch
    raise SystemExit(main())
