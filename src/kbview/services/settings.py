"""Settings dataclass and JSON persistence helpers."""

from __future__ import annotations

import json
import logging
import os
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Any, Dict, Mapping

__all__ = [
    "Settings",
    "SettingsStore",
    "AUTO_SWITCH_PREFERENCE",
    "active_environment_overrides",
]

LOGGER = logging.getLogger(__name__)
_SETTINGS_DIR = Path.home() / ".kbview"
_DEFAULT_SETTINGS_PATH = _SETTINGS_DIR / "settings.json"
_SETTINGS_VERSION = 1
_ENV_OVERRIDES: Mapping[str, str] = {
    "KBVIEW_STARTUP_MODE": "startup_mode",
    "KBVIEW_WORKSPACE": "workspace",
}
_BOOL_ENV_OVERRIDES: Mapping[str, str] = {
    "KBVIEW_AUTO_SWITCH_WIDGETS": "auto_switch_widgets",
    "KBVIEW_DEBUG_LOGGING": "debug_logging",
    "KBVIEW_SURFACE_BACKLINK_ERRORS": "surface_backlink_errors",
}
_FLOAT_ENV_OVERRIDES: Mapping[str, str] = {
    "KBVIEW_STARTUP_DELAY": "startup_delay_seconds",
}
_INT_ENV_OVERRIDES: Mapping[str, str] = {
    "KBVIEW_SHELL_READY_ATTEMPTS": "shell_ready_attempts",
}
_TRUE_VALUES = {"1", "true", "yes", "on", "debug"}

AUTO_SWITCH_PREFERENCE = "kbView.autoSwitchWidgets"


@dataclass(slots=True)
class Settings:
    """User-configurable settings persisted between sessions."""

    auto_switch_widgets: bool = True
    startup_mode: str = "kb-view"
    persist_mode: bool = True
    startup_delay_seconds: float = 0.0
    shell_ready_attempts: int = 8
    shell_ready_min_wait: float = 0.05
    shell_ready_max_wait: float = 2.0
    surface_backlink_errors: bool = False
    workspace: str | None = None
    debug_logging: bool = False


class SettingsStore:
    """Persistence adapter for :class:`Settings`."""

    def __init__(self, path: Path | None = None) -> None:
        self._path = path or _DEFAULT_SETTINGS_PATH

    @property
    def path(self) -> Path:
        """Return the resolved path backing this store."""

        return self._path

    def load(self, *, overrides: Mapping[str, Any] | None = None) -> Settings:
        """Load settings from disk, applying CLI/environment overrides when present."""

        payload = self._read_payload()
        settings = Settings()
        if payload:
            data = _filter_fields(payload)
            try:
                settings = Settings(**data)
            except TypeError as exc:
                LOGGER.warning("Settings payload contained unexpected data: %s", exc)
                settings = Settings()
            if payload.get("version") != _SETTINGS_VERSION:
                try:
                    self.save(settings)
                except OSError as exc:  # pragma: no cover - read-only home dirs
                    LOGGER.warning("Failed to migrate settings payload: %s", exc)

        if overrides:
            settings = self._apply_overrides(settings, overrides, source="CLI")

        return self._apply_env_overrides(settings)

    def save(self, settings: Settings) -> Path:
        """Persist settings to disk with atomic file writes."""

        data = asdict(settings)
        data["version"] = _SETTINGS_VERSION
        body = json.dumps(data, indent=2, sort_keys=True)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(".tmp")
        tmp_path.write_text(body, encoding="utf-8")
        tmp_path.replace(self._path)
        LOGGER.debug("Settings saved to %s", self._path)
        return self._path

    def _read_payload(self) -> Dict[str, Any]:
        if not self._path.exists():
            return {}
        try:
            payload = json.loads(self._path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            LOGGER.warning("Settings file %s is not valid JSON: %s", self._path, exc)
            return {}
        if not isinstance(payload, dict):
            LOGGER.warning("Settings file %s does not hold an object", self._path)
            return {}
        return payload

    def _apply_overrides(
        self,
        settings: Settings,
        overrides: Mapping[str, Any],
        *,
        source: str = "runtime",
    ) -> Settings:
        allowed = {field.name for field in fields(Settings)}
        filtered = {key: value for key, value in overrides.items() if key in allowed}
        if filtered:
            LOGGER.debug("Applying %s settings overrides: %s", source, sorted(filtered))
            settings = replace(settings, **filtered)
        return settings

    def _apply_env_overrides(self, settings: Settings) -> Settings:
        overrides: Dict[str, Any] = {}
        for env_name, field_name in _ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value
        for env_name, field_name in _BOOL_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is not None:
                overrides[field_name] = value.strip().lower() in _TRUE_VALUES
        for env_name, field_name in _INT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = int(value, 10)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid integer",
                    env_name,
                    value,
                )
        for env_name, field_name in _FLOAT_ENV_OVERRIDES.items():
            value = os.environ.get(env_name)
            if value is None:
                continue
            try:
                overrides[field_name] = float(value)
            except ValueError:
                LOGGER.warning(
                    "Environment override %s=%s is not a valid float", env_name, value
                )
        if overrides:
            settings = self._apply_overrides(settings, overrides, source="environment")
        return settings


def _filter_fields(payload: Mapping[str, Any]) -> Dict[str, Any]:
    allowed = {field.name for field in fields(Settings)}
    return {key: value for key, value in payload.items() if key in allowed}


def active_environment_overrides() -> list[str]:
    """Names of the override variables currently set in the environment."""
    known = (*_ENV_OVERRIDES, *_BOOL_ENV_OVERRIDES, *_INT_ENV_OVERRIDES, *_FLOAT_ENV_OVERRIDES)
    return sorted(name for name in known if name in os.environ)
