"""Trailing-edge debounced change accumulation across workspace roots."""

from __future__ import annotations

import asyncio
import logging
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Iterable, Optional

from docpulse.config import AnalysisRootError
from docpulse.paths import compile_glob, matches_any, normalize_fs_path, resolve_analysis_root

from .host import Disposable, WatchHost

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class PendingChangeState:
    """Changes accumulated since the last emission or clear.

    Attributes:
        has_pending_changes: Whether any path is pending.
        changed_paths: Pending paths in the order they were first recorded.
    """

    has_pending_changes: bool
    changed_paths: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class WatcherOptions:
    """Static configuration for :class:`DebouncedWatcher`.

    ``report_directory`` and ``snapshot_file`` are relative to the analysis
    root, which is itself relative to each watched workspace root.
    """

    report_directory: str
    snapshot_file: str
    debounce_ms: int = 1500
    exclude_patterns: tuple[str, ...] = ()
    analysis_root: str = ""


@dataclass(slots=True)
class _RootFilter:
    base: str
    report_directory: str
    snapshot_file: str


PendingChangesCallback = Callable[[PendingChangeState], None]


class DebouncedWatcher:
    """Accumulate file changes and emit them once the stream goes quiet.

    Timer state is the single ``_timer`` handle: ``None`` when idle, a pending
    :class:`asyncio.TimerHandle` while accumulating. Every recorded change
    cancels the pending handle and schedules a new one.
    """

    def __init__(
        self,
        options: WatcherOptions,
        on_pending_changes: PendingChangesCallback,
        *,
        host: WatchHost,
        loop: Optional[asyncio.AbstractEventLoop] = None,
    ) -> None:
        self._options = options
        self._on_pending_changes = on_pending_changes
        self._host = host
        self._loop = loop
        self._exclude_matchers = [
            compile_glob(pattern) for pattern in options.exclude_patterns if pattern.strip()
        ]
        self._filters: list[_RootFilter] = []
        self._subscriptions: list[Disposable] = []
        # dict keeps first-recorded order and drops repeats.
        self._changed_paths: dict[str, None] = {}
        self._timer: Optional[asyncio.TimerHandle] = None

    @property
    def options(self) -> WatcherOptions:
        return self._options

    @property
    def is_running(self) -> bool:
        return bool(self._subscriptions)

    @property
    def pending_state(self) -> PendingChangeState:
        paths = tuple(self._changed_paths)
        return PendingChangeState(has_pending_changes=bool(paths), changed_paths=paths)

    def start(self, roots: Iterable[Path]) -> None:
        """Watch ``roots``, replacing any previous subscriptions.

        Pending changes recorded before the restart are kept.
        """
        self.stop()

        for root in roots:
            resolved = Path(root).expanduser().resolve()
            base = self._analysis_base(resolved)
            self._filters.append(
                _RootFilter(
                    base=normalize_fs_path(base),
                    report_directory=normalize_fs_path(base / self._options.report_directory),
                    snapshot_file=normalize_fs_path(base / self._options.snapshot_file),
                )
            )
            self._subscriptions.append(self._host.subscribe(resolved, self.record_change))

        LOGGER.info(
            "Watching %d root(s) with %d ms debounce",
            len(self._subscriptions),
            self._options.debounce_ms,
        )

    def stop(self) -> None:
        """Cancel the pending timer and release every subscription."""
        self._cancel_timer()
        for subscription in self._subscriptions:
            subscription.dispose()
        self._subscriptions = []
        self._filters = []

    def dispose(self) -> None:
        self.stop()
        self._changed_paths.clear()

    def clear_pending_changes(self) -> None:
        """Drop accumulated paths and notify the observer of the empty state."""
        self._changed_paths.clear()
        self._on_pending_changes(PendingChangeState(has_pending_changes=False))

    def should_track_change(self, path: str) -> bool:
        """Return whether a change at absolute ``path`` should be recorded."""
        normalized = normalize_fs_path(path)

        for root_filter in self._filters:
            if normalized == root_filter.snapshot_file:
                return False
            report_directory = root_filter.report_directory
            if normalized == report_directory or normalized.startswith(report_directory + "/"):
                return False

        if self._exclude_matchers:
            relative = self._relative_to_base(normalized)
            if relative and matches_any(relative, self._exclude_matchers):
                return False

        return True

    def record_change(self, path: str) -> None:
        """Record a change at absolute ``path`` and restart the quiet period."""
        if not self.should_track_change(path):
            LOGGER.debug("Ignoring change to %s", path)
            return

        self._changed_paths[path] = None
        self._schedule_emit()

    def _schedule_emit(self) -> None:
        self._cancel_timer()
        loop = self._loop or asyncio.get_running_loop()
        self._timer = loop.call_later(self._options.debounce_ms / 1000, self._emit)

    def _emit(self) -> None:
        self._timer = None
        state = self.pending_state
        LOGGER.debug("Debounce settled with %d pending path(s)", len(state.changed_paths))
        self._on_pending_changes(state)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _analysis_base(self, workspace_root: Path) -> Path:
        try:
            return resolve_analysis_root(workspace_root, self._options.analysis_root)
        except AnalysisRootError as exc:
            LOGGER.warning("%s; watching %s from its root", exc, workspace_root)
            return workspace_root

    def _relative_to_base(self, normalized: str) -> Optional[str]:
        best: Optional[str] = None
        for root_filter in self._filters:
            base = root_filter.base
            if normalized == base or normalized.startswith(base.rstrip("/") + "/"):
                if best is None or len(base) > len(best):
                    best = base
        if best is None:
            return None
        relative = posixpath.relpath(normalized, best)
        if relative == "." or relative.startswith(".."):
            return None
        return relative


__all__ = ["DebouncedWatcher", "PendingChangeState", "WatcherOptions", "PendingChangesCallback"]
