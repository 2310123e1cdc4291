"""Widget lifecycle manager domain service.

Opens, closes, snapshots and restores the managed kb-view surfaces whenever
the presentation mode changes. The manager only asks the widget factory and
the shell to create, attach, reveal and close widgets; instances are never
destroyed here, so a closed widget comes back with its state intact.

Transition policy::

    entering kb-view:   auto-switch preference on  -> open every managed widget
                        auto-switch preference off -> restore the snapshot
    entering developer: snapshot what is attached, then close it all

Mode changes are funnelled through a single-slot queue: while a transition
is running, a newer request replaces any older pending one, and it is only
applied once the running transition has finished. The surviving request
always runs its entry policy, even when it names the mode applied last.
"""

from __future__ import annotations

import asyncio
import logging
from types import MappingProxyType
from typing import Any, Coroutine, Mapping

from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from ...core.disposables import Disposable
from ...core.mode import Mode, ModeState
from ...core.widget_ids import AUTO_OPEN_ORDER, SEARCH_ORDER, ManagedWidgetId
from ...services.host import ApplicationShell, PreferenceService, Widget, WidgetFactory
from ...services.settings import AUTO_SWITCH_PREFERENCE

LOGGER = logging.getLogger(__name__)


class _ShellNotReady(Exception):
    """Internal retry signal while polling the shell."""


class WidgetLifecycleManager:
    """Reconciles managed widgets with the current presentation mode."""

    def __init__(
        self,
        mode_state: ModeState,
        shell: ApplicationShell,
        widget_factory: WidgetFactory,
        preferences: PreferenceService,
        *,
        startup_delay: float = 0.0,
        shell_ready_attempts: int = 8,
        shell_ready_min_wait: float = 0.05,
        shell_ready_max_wait: float = 2.0,
    ) -> None:
        self._mode_state = mode_state
        self._shell = shell
        self._factory = widget_factory
        self._preferences = preferences
        self._startup_delay = max(0.0, float(startup_delay))
        self._ready_attempts = max(1, int(shell_ready_attempts))
        self._ready_min_wait = max(0.0, float(shell_ready_min_wait))
        self._ready_max_wait = max(self._ready_min_wait, float(shell_ready_max_wait))

        self._snapshot: dict[ManagedWidgetId, bool] = {widget_id: False for widget_id in ManagedWidgetId}
        self._initialized = False
        self._subscription: Disposable | None = None
        self._startup_task: asyncio.Task[None] | None = None
        self._startup_done = False
        self._worker: asyncio.Task[None] | None = None
        self._pending: Mode | None = None
        self._applied: Mode | None = None
        self._tasks: set[asyncio.Task[Any]] = set()

        self.startup_reconciliations = 0
        self.transitions_applied = 0
        self.shell_ready: bool | None = None

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def initialize(self) -> None:
        """Subscribe to mode changes and schedule the startup reconciliation.

        Only the first call does anything; the runtime owns the single call
        but a second hook firing is harmless.
        """
        if self._initialized:
            LOGGER.debug("WidgetLifecycleManager.initialize: already initialized, skipping")
            return
        self._initialized = True
        self._snapshot = {widget_id: False for widget_id in ManagedWidgetId}
        self._subscription = self._mode_state.subscribe(self._on_mode_changed)
        LOGGER.debug(
            "WidgetLifecycleManager.initialize: mode=%s",
            self._mode_state.get_current_mode().value,
        )
        self._startup_task = self._spawn(self._startup_reconcile())

    def dispose(self) -> None:
        if self._subscription is not None:
            self._subscription.dispose()
            self._subscription = None
        for task in list(self._tasks):
            task.cancel()
        self._tasks.clear()
        self._pending = None
        LOGGER.debug("WidgetLifecycleManager.dispose")

    @property
    def initialized(self) -> bool:
        return self._initialized

    @property
    def applied_mode(self) -> Mode | None:
        """Mode whose entry policy ran most recently, if any."""
        return self._applied

    async def wait_idle(self) -> None:
        """Wait until startup and every queued transition have finished."""
        while True:
            pending = [task for task in (self._startup_task, self._worker) if task is not None and not task.done()]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    # ------------------------------------------------------------------
    # Query Methods
    # ------------------------------------------------------------------

    @property
    def snapshot(self) -> Mapping[ManagedWidgetId, bool]:
        return MappingProxyType(dict(self._snapshot))

    @staticmethod
    def is_managed_widget(widget_id: str) -> bool:
        return ManagedWidgetId.lookup(widget_id) is not None

    def attached_widget_ids(self) -> set[ManagedWidgetId]:
        return {widget_id for widget_id in ManagedWidgetId if self._find_attached(widget_id) is not None}

    # ------------------------------------------------------------------
    # Transition queue
    # ------------------------------------------------------------------

    def request_transition(self, mode: Mode) -> None:
        """Queue a transition into ``mode``, replacing any pending request."""
        if self._pending is not None and self._pending is not mode:
            LOGGER.debug(
                "WidgetLifecycleManager: coalescing pending %s into %s",
                self._pending.value,
                mode.value,
            )
        self._pending = mode
        if not self._startup_done:
            # The startup pass drains the queue once the shell is ready.
            return
        self._ensure_worker()

    def _on_mode_changed(self, mode: Mode) -> None:
        LOGGER.debug("WidgetLifecycleManager: mode changed to %s", mode.value)
        self.request_transition(mode)

    def _ensure_worker(self) -> None:
        if self._worker is None or self._worker.done():
            self._worker = self._spawn(self._drain_transitions())

    async def _drain_transitions(self) -> None:
        while self._pending is not None:
            target, self._pending = self._pending, None
            # Re-entering the mode last applied still runs its policy; panels
            # may have been closed by hand in between.
            await self._apply_transition(target)

    async def _apply_transition(self, mode: Mode) -> None:
        if mode is Mode.KB_VIEW:
            await self.switch_to_kb_view()
        else:
            await self.switch_to_developer()
        self._applied = mode
        self.transitions_applied += 1

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def _startup_reconcile(self) -> None:
        self.startup_reconciliations += 1
        try:
            self.shell_ready = await self._wait_for_shell()
            if not self.shell_ready:
                LOGGER.warning(
                    "Shell not ready after %d attempt(s); skipping startup reconciliation",
                    self._ready_attempts,
                )
            else:
                current = self._mode_state.get_current_mode()
                LOGGER.debug("WidgetLifecycleManager: startup check, mode=%s", current.value)
                if current is Mode.KB_VIEW and self._pending is None:
                    self._pending = current
        finally:
            self._startup_done = True
        if self._pending is not None:
            self._ensure_worker()
            if self._worker is not None:
                await self._worker

    async def _wait_for_shell(self) -> bool:
        if self._startup_delay:
            await asyncio.sleep(self._startup_delay)
        try:
            async for attempt in AsyncRetrying(
                reraise=True,
                stop=stop_after_attempt(self._ready_attempts),
                wait=wait_exponential(multiplier=self._ready_min_wait, max=self._ready_max_wait),
                retry=retry_if_exception_type(_ShellNotReady),
            ):
                with attempt:
                    if not self._shell.is_ready():
                        raise _ShellNotReady()
        except _ShellNotReady:
            return False
        return True

    # ------------------------------------------------------------------
    # Mode entry policies
    # ------------------------------------------------------------------

    async def switch_to_kb_view(self) -> None:
        # Read on every transition so a changed preference applies next time.
        auto_switch = bool(self._preferences.get(AUTO_SWITCH_PREFERENCE, True))
        LOGGER.debug("WidgetLifecycleManager.switch_to_kb_view: auto_switch=%s", auto_switch)
        if auto_switch:
            await self.open_managed_widgets()
        else:
            await self.restore_snapshot()

    async def switch_to_developer(self) -> None:
        self.snapshot_state()
        self.close_managed_widgets()

    # ------------------------------------------------------------------
    # Widget operations
    # ------------------------------------------------------------------

    async def open_managed_widgets(self) -> tuple[ManagedWidgetId, ...]:
        """Open every auto-managed widget; returns the ids that succeeded."""
        opened: list[ManagedWidgetId] = []
        for widget_id in AUTO_OPEN_ORDER:
            try:
                await self._open_widget(widget_id)
            except Exception:
                LOGGER.exception("Failed to open managed widget %s", widget_id.value)
                continue
            opened.append(widget_id)
        LOGGER.debug("WidgetLifecycleManager.open_managed_widgets: opened=%s", [w.value for w in opened])
        return tuple(opened)

    def close_managed_widgets(self) -> tuple[ManagedWidgetId, ...]:
        closed: list[ManagedWidgetId] = []
        for widget_id in ManagedWidgetId:
            widget = self._find_attached(widget_id)
            if widget is None or not widget.is_attached:
                continue
            try:
                widget.close()
            except Exception:
                LOGGER.exception("Failed to close managed widget %s", widget_id.value)
                continue
            closed.append(widget_id)
        LOGGER.debug("WidgetLifecycleManager.close_managed_widgets: closed=%s", [w.value for w in closed])
        return tuple(closed)

    def snapshot_state(self) -> Mapping[ManagedWidgetId, bool]:
        snapshot: dict[ManagedWidgetId, bool] = {}
        for widget_id in ManagedWidgetId:
            widget = self._find_attached(widget_id)
            snapshot[widget_id] = widget is not None and widget.is_attached
        self._snapshot = snapshot
        LOGGER.debug(
            "WidgetLifecycleManager.snapshot_state: %s",
            {widget_id.value: attached for widget_id, attached in snapshot.items()},
        )
        return self.snapshot

    async def restore_snapshot(self) -> tuple[ManagedWidgetId, ...]:
        # Ids recorded as closed are left alone: this path always follows a
        # close_managed_widgets() pass.
        restored: list[ManagedWidgetId] = []
        for widget_id, was_attached in self._snapshot.items():
            if not was_attached:
                continue
            try:
                await self._open_widget(widget_id)
            except Exception:
                LOGGER.exception("Failed to restore managed widget %s", widget_id.value)
                continue
            restored.append(widget_id)
        return tuple(restored)

    async def open_on_demand(self, widget_id: ManagedWidgetId | str) -> Widget:
        """Open one managed widget (e.g. the graph); errors propagate."""
        target = widget_id if isinstance(widget_id, ManagedWidgetId) else ManagedWidgetId(widget_id)
        return await self._open_widget(target)

    async def _open_widget(self, widget_id: ManagedWidgetId) -> Widget:
        widget = await self._factory.get_or_create_widget(widget_id.value)
        if not widget.is_attached:
            await self._shell.add_widget(widget, widget_id.area)
        await self._shell.reveal_widget(widget.id)
        return widget

    def _find_attached(self, widget_id: ManagedWidgetId) -> Widget | None:
        for area in SEARCH_ORDER:
            for widget in self._shell.get_widgets(area):
                if widget.id == widget_id.value:
                    return widget
        return None

    # ------------------------------------------------------------------
    # Task helpers
    # ------------------------------------------------------------------

    def _spawn(self, coro: Coroutine[Any, Any, None]) -> asyncio.Task[None]:
        loop = asyncio.get_running_loop()
        task = loop.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)
        return task

    def _on_task_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            LOGGER.error("WidgetLifecycleManager task failed", exc_info=exc)


__all__ = ["WidgetLifecycleManager"]
