"""Single-flight update scheduling driven by the debounced watcher."""

from __future__ import annotations

import asyncio
import dataclasses
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Awaitable, Callable, Iterable, Literal, Optional, Sequence

from docpulse.config import WatcherSettings

from .host import WatchHost
from .watcher import DebouncedWatcher, PendingChangeState, WatcherOptions

LOGGER = logging.getLogger(__name__)

WatcherAction = Literal["start", "stop", "restart", "noop"]
RunResult = Literal["success", "failed"]


def decide_watcher_action(previous: WatcherSettings, current: WatcherSettings) -> WatcherAction:
    """Return what a settings change means for the watcher lifecycle."""
    if previous.enabled != current.enabled:
        return "start" if current.enabled else "stop"
    if not current.enabled:
        return "noop"
    if previous.debounce_ms != current.debounce_ms:
        return "restart"
    return "noop"


@dataclass(frozen=True, slots=True)
class AutoUpdateStatus:
    """Observable state of an :class:`AutoUpdateScheduler`.

    Attributes:
        enabled: Whether automatic updates are switched on.
        is_running: Whether an update is in flight.
        has_pending_changes: Whether changes are waiting for a run.
        pending_paths_count: Number of paths in the latest pending batch.
        last_run_at: ISO-8601 completion time of the last run.
        last_run_result: Outcome of the last run.
    """

    enabled: bool = False
    is_running: bool = False
    has_pending_changes: bool = False
    pending_paths_count: int = 0
    last_run_at: Optional[str] = None
    last_run_result: Optional[RunResult] = None


class AutoUpdateScheduler:
    """Run ``run_update`` when watched roots change, never overlapping runs.

    Triggers that arrive while a run is in flight set a single rerun flag, so
    any number of them collapse into exactly one follow-up run started after
    the current one settles. Failures are logged and count as settled.

    Args:
        run_update: Coroutine function performing the update.
        roots: Workspace roots to watch, or a callable returning them.
        options: Watcher options; ``debounce_ms`` is taken from the settings.
        host: Change source used by the watcher.
        loop: Event loop for timers; defaults to the running loop.
        on_status: Observer called with each distinct status.
    """

    def __init__(
        self,
        run_update: Callable[[], Awaitable[Any]],
        *,
        roots: Iterable[Path] | Callable[[], Iterable[Path]],
        options: WatcherOptions,
        host: WatchHost,
        loop: Optional[asyncio.AbstractEventLoop] = None,
        on_status: Optional[Callable[[AutoUpdateStatus], None]] = None,
    ) -> None:
        self._run_update = run_update
        self._roots_provider = roots if callable(roots) else _fixed_roots(list(roots))
        self._options = options
        self._host = host
        self._loop = loop
        self._on_status = on_status
        self._settings = WatcherSettings(enabled=False)
        self._watcher: Optional[DebouncedWatcher] = None
        self._task: Optional[asyncio.Task[None]] = None
        self._rerun_requested = False
        self._status = AutoUpdateStatus()

    @property
    def settings(self) -> WatcherSettings:
        return self._settings

    @property
    def watcher(self) -> Optional[DebouncedWatcher]:
        return self._watcher

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    def get_status(self) -> AutoUpdateStatus:
        return dataclasses.replace(self._status)

    def apply_settings(self, settings: WatcherSettings) -> WatcherAction:
        """Adopt ``settings`` and start, stop or restart the watcher accordingly."""
        action = decide_watcher_action(self._settings, settings)
        self._settings = settings

        if settings.enabled:
            self._update_status(enabled=True)
        else:
            self._update_status(enabled=False, has_pending_changes=False, pending_paths_count=0)

        if action == "start":
            self._start()
        elif action == "stop":
            self._stop()
        elif action == "restart":
            LOGGER.info("Restarting watcher with %d ms debounce", settings.debounce_ms)
            self._restart()
        return action

    def trigger(self) -> None:
        """Start a run now, or request one follow-up run if one is in flight."""
        if self.is_running:
            self._rerun_requested = True
            return
        loop = self._loop or asyncio.get_running_loop()
        self._task = loop.create_task(self._run_update_loop())

    async def wait_idle(self) -> None:
        """Wait until no run is in flight and no follow-up is pending."""
        while self._task is not None and not self._task.done():
            await asyncio.shield(self._task)

    def dispose(self) -> None:
        self._stop()

    def _start(self) -> None:
        self._dispose_watcher()
        roots = list(self._roots_provider())
        if not self._settings.enabled or not roots:
            return
        options = dataclasses.replace(self._options, debounce_ms=self._settings.debounce_ms)
        self._watcher = DebouncedWatcher(
            options,
            self._on_pending_changes,
            host=self._host,
            loop=self._loop,
        )
        self._watcher.start(roots)

    def _restart(self) -> None:
        carried = self._watcher.pending_state.changed_paths if self._watcher else ()
        self._start()
        if not carried:
            return
        if self.is_running:
            # The follow-up run picks these up.
            self._rerun_requested = True
        elif self._watcher is not None:
            for path in carried:
                self._watcher.record_change(path)

    def _stop(self) -> None:
        self._dispose_watcher()
        self._rerun_requested = False
        self._update_status(has_pending_changes=False, pending_paths_count=0)

    def _dispose_watcher(self) -> None:
        if self._watcher is not None:
            self._watcher.dispose()
            self._watcher = None
            LOGGER.info("Watcher stopped")

    def _on_pending_changes(self, state: PendingChangeState) -> None:
        if not state.has_pending_changes:
            return

        self._update_status(
            has_pending_changes=True,
            pending_paths_count=len(state.changed_paths),
        )
        # Changes made during the run accumulate separately.
        if self._watcher is not None:
            self._watcher.clear_pending_changes()
        self.trigger()

    async def _run_update_loop(self) -> None:
        self._update_status(is_running=True, has_pending_changes=False, pending_paths_count=0)
        LOGGER.info("Update started")

        result: RunResult = "success"
        try:
            await self._run_update()
        except Exception:
            result = "failed"
            LOGGER.exception("Update failed")
        finally:
            self._update_status(
                is_running=False,
                last_run_at=datetime.now(timezone.utc).isoformat(),
                last_run_result=result,
            )

        LOGGER.info("Update finished (%s)", result)
        if self._rerun_requested:
            self._rerun_requested = False
            # The current task is still marked running; start the follow-up directly.
            loop = self._loop or asyncio.get_running_loop()
            self._task = loop.create_task(self._run_update_loop())

    def _update_status(self, **changes: Any) -> None:
        candidate = dataclasses.replace(self._status, **changes)
        if candidate == self._status:
            return
        self._status = candidate
        if self._on_status is not None:
            self._on_status(candidate)


def _fixed_roots(roots: Sequence[Path]) -> Callable[[], Sequence[Path]]:
    return lambda: roots


async def update_all(
    roots: Iterable[Path],
    run_for_root: Callable[..., Awaitable[Any]],
    *,
    suppress_notifications: bool = True,
    suppress_open_reports: bool = True,
) -> list[Path]:
    """Run ``run_for_root`` for each root, one after another.

    The suppression flags are passed through as keyword arguments.

    Returns:
        list[Path]: Roots whose update completed without raising.
    """

    completed: list[Path] = []
    for root in roots:
        try:
            await run_for_root(
                root,
                suppress_notifications=suppress_notifications,
                suppress_open_reports=suppress_open_reports,
            )
        except Exception:
            LOGGER.exception("Update failed for %s", root)
            continue
        completed.append(root)
    return completed


__all__ = [
    "AutoUpdateScheduler",
    "AutoUpdateStatus",
    "WatcherAction",
    "decide_watcher_action",
    "update_all",
]
