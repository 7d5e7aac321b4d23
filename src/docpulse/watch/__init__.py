"""Change watching and update scheduling."""

from .host import Disposable, ManualWatchHost, WatchdogHost, WatchHost
from .scheduler import (
    AutoUpdateScheduler,
    AutoUpdateStatus,
    WatcherAction,
    decide_watcher_action,
    update_all,
)
from .service import WatchService
from .watcher import DebouncedWatcher, PendingChangeState, WatcherOptions

__all__ = [
    "AutoUpdateScheduler",
    "AutoUpdateStatus",
    "DebouncedWatcher",
    "Disposable",
    "ManualWatchHost",
    "PendingChangeState",
    "WatchHost",
    "WatchService",
    "WatchdogHost",
    "WatcherAction",
    "WatcherOptions",
    "decide_watcher_action",
    "update_all",
]
