"""Command registry implementing the host command dispatcher contract."""

from __future__ import annotations

import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable

from ..core.disposables import Disposable
from ..core.errors import CommandExecutionError, CommandNotFoundError

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Command:
    """Descriptor for a named, user-invokable action."""

    id: str
    label: str = ""
    category: str | None = None

    @property
    def display_label(self) -> str:
        if self.category:
            return f"{self.category}: {self.label or self.id}"
        return self.label or self.id


@dataclass(frozen=True, slots=True)
class CommandHandler:
    """Callbacks bound to a command; ``execute`` may be sync or async."""

    execute: Callable[..., Any]
    is_enabled: Callable[[], bool] | None = None
    is_visible: Callable[[], bool] | None = None


class CommandRegistry:
    """In-process command dispatcher.

    ``execute_command`` raises :class:`CommandNotFoundError` for unknown ids
    and wraps handler failures (and disabled commands) in
    :class:`CommandExecutionError` so callers can surface one error type.
    """

    def __init__(self) -> None:
        self._commands: dict[str, tuple[Command, CommandHandler]] = {}

    def register_command(self, command: Command, handler: CommandHandler) -> Disposable:
        if command.id in self._commands:
            LOGGER.warning("Command %s registered twice; replacing handler", command.id)
        self._commands[command.id] = (command, handler)
        LOGGER.debug("Registered command %s", command.id)

        def _release() -> None:
            entry = self._commands.get(command.id)
            if entry is not None and entry[1] is handler:
                del self._commands[command.id]

        return Disposable(_release)

    def get_command(self, command_id: str) -> Command | None:
        entry = self._commands.get(command_id)
        return entry[0] if entry else None

    def has_command(self, command_id: str) -> bool:
        return command_id in self._commands

    def command_ids(self) -> tuple[str, ...]:
        return tuple(self._commands)

    def is_enabled(self, command_id: str) -> bool:
        entry = self._commands.get(command_id)
        if entry is None:
            return False
        check = entry[1].is_enabled
        return True if check is None else bool(check())

    def is_visible(self, command_id: str) -> bool:
        entry = self._commands.get(command_id)
        if entry is None:
            return False
        check = entry[1].is_visible
        return True if check is None else bool(check())

    async def execute_command(self, command_id: str, *args: Any) -> Any:
        entry = self._commands.get(command_id)
        if entry is None:
            raise CommandNotFoundError(command_id)
        _command, handler = entry
        if handler.is_enabled is not None and not handler.is_enabled():
            raise CommandExecutionError(command_id, RuntimeError("command is not enabled"))
        LOGGER.debug("Executing command %s", command_id)
        try:
            result = handler.execute(*args)
            if inspect.isawaitable(result):
                result = await result
        except (CommandNotFoundError, CommandExecutionError):
            raise
        except Exception as exc:
            raise CommandExecutionError(command_id, exc) from exc
        return result


__all__ = ["Command", "CommandHandler", "CommandRegistry"]
