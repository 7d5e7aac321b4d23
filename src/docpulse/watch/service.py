"""Continuous analysis of workspace roots driven by the update scheduler."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from docpulse.analysis import AnalysisResult, WorkspaceAnalyzer
from docpulse.config import WatcherSettings

from .host import WatchdogHost, WatchHost
from .scheduler import AutoUpdateScheduler, update_all
from .watcher import WatcherOptions

LOGGER = logging.getLogger(__name__)

ResultCallback = Callable[[AnalysisResult], None]


class WatchService:
    """Re-analyze roots whenever the scheduler fires.

    Attributes:
        analyzer: Analyzer shared across runs; it remembers the previous
            snapshot per root, so each result diffs against the last run.
        roots: Workspace roots being monitored.
        settings: Watcher settings applied once serving starts.
        options: Watcher filtering options.
    """

    def __init__(
        self,
        analyzer: WorkspaceAnalyzer,
        roots: Iterable[Path],
        *,
        settings: WatcherSettings,
        options: WatcherOptions,
        on_result: Optional[ResultCallback] = None,
        host: Optional[WatchHost] = None,
    ) -> None:
        self.analyzer = analyzer
        self.roots = [Path(root).expanduser().resolve() for root in roots]
        self.settings = settings
        self.options = options
        self._on_result = on_result
        self._host = host
        self.scheduler: Optional[AutoUpdateScheduler] = None

    async def run_for_root(
        self,
        root: Path,
        *,
        suppress_notifications: bool = False,
        suppress_open_reports: bool = True,
    ) -> AnalysisResult:
        """Analyze ``root`` with a fresh file listing and report the result."""
        del suppress_open_reports  # nothing is opened from a terminal
        self.analyzer.invalidate(root)
        result = await asyncio.to_thread(self.analyzer.analyze, root)
        if not suppress_notifications and self._on_result is not None:
            self._on_result(result)
        return result

    async def run_update(self) -> None:
        await update_all(self.roots, self.run_for_root, suppress_notifications=False)

    async def serve(self, stop: Optional[asyncio.Event] = None) -> None:
        """Run an initial pass, then follow changes until ``stop`` is set.

        With the watcher disabled only the initial pass runs. The in-flight
        update always completes before this returns.
        """

        await self.run_update()
        if not self.settings.enabled:
            LOGGER.info("Watcher disabled; skipping continuous updates")
            return

        stop = stop or asyncio.Event()
        self.scheduler = AutoUpdateScheduler(
            self.run_update,
            roots=self.roots,
            options=self.options,
            host=self._host if self._host is not None else WatchdogHost(),
        )
        self.scheduler.apply_settings(self.settings)
        try:
            await stop.wait()
        finally:
            self.scheduler.dispose()
            await self.scheduler.wait_idle()


__all__ = ["WatchService"]
