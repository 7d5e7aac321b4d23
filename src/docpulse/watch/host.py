"""Raw change sources the debounced watcher subscribes to."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import Callable, Optional, Protocol

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer

from docpulse.paths import normalize_fs_path

LOGGER = logging.getLogger(__name__)

ChangeCallback = Callable[[str], None]


class Disposable(Protocol):
    """Handle returned by a subscription."""

    def dispose(self) -> None: ...


class WatchHost(Protocol):
    """Minimal capability a change source must offer."""

    def subscribe(self, root: Path, on_change: ChangeCallback) -> Disposable: ...


class _LoopForwardingHandler(FileSystemEventHandler):
    """Forward watchdog file events onto an asyncio loop."""

    def __init__(self, loop: asyncio.AbstractEventLoop, on_change: ChangeCallback) -> None:
        self._loop = loop
        self._on_change = on_change

    def on_created(self, event: FileSystemEvent) -> None:
        self._forward(event.src_path, event)

    def on_modified(self, event: FileSystemEvent) -> None:
        self._forward(event.src_path, event)

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._forward(event.src_path, event)

    def on_moved(self, event: FileSystemEvent) -> None:  # pragma: no cover - watchdog-specific
        self._forward(event.src_path, event)
        self._forward(getattr(event, "dest_path", ""), event)

    def _forward(self, raw_path: str | bytes, event: FileSystemEvent) -> None:
        if event.is_directory or not raw_path:
            return
        path = raw_path.decode() if isinstance(raw_path, bytes) else raw_path
        if self._loop.is_closed():
            return
        # Runs on the observer thread; the callback must execute on the loop.
        self._loop.call_soon_threadsafe(self._on_change, path)


class _ObserverSubscription:
    def __init__(self, observer: Observer, root: Path) -> None:
        self._observer: Optional[Observer] = observer
        self._root = root

    def dispose(self) -> None:
        if self._observer is None:
            return
        self._observer.stop()
        self._observer.join(timeout=5)
        self._observer = None
        LOGGER.debug("Stopped observer for %s", self._root)


class WatchdogHost:
    """Watch directories recursively with watchdog.

    Each subscription owns its own observer thread. Events are delivered on
    ``loop`` (the running loop at subscription time when omitted), so
    subscribers never run concurrently with the rest of the asyncio code.
    """

    def __init__(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        self._loop = loop

    def subscribe(self, root: Path, on_change: ChangeCallback) -> Disposable:
        loop = self._loop or asyncio.get_running_loop()
        observer = Observer()
        observer.schedule(_LoopForwardingHandler(loop, on_change), str(root), recursive=True)
        observer.start()
        LOGGER.debug("Started observer for %s", root)
        return _ObserverSubscription(observer, root)


class _ManualSubscription:
    def __init__(self, host: "ManualWatchHost", root: str, on_change: ChangeCallback) -> None:
        self._host = host
        self.root = root
        self.on_change = on_change

    def dispose(self) -> None:
        self._host._release(self)


class ManualWatchHost:
    """Change source driven by explicit :meth:`emit` calls.

    Used by tests and by embedders that already receive change notifications
    from elsewhere.
    """

    def __init__(self) -> None:
        self._subscriptions: list[_ManualSubscription] = []

    @property
    def subscribed_roots(self) -> list[str]:
        return [subscription.root for subscription in self._subscriptions]

    def subscribe(self, root: Path, on_change: ChangeCallback) -> Disposable:
        subscription = _ManualSubscription(self, normalize_fs_path(root), on_change)
        self._subscriptions.append(subscription)
        return subscription

    def emit(self, path: str | Path) -> int:
        """Deliver ``path`` to every subscriber whose root contains it.

        Returns:
            int: Number of subscribers notified.
        """
        normalized = normalize_fs_path(path)
        delivered = 0
        for subscription in list(self._subscriptions):
            root = subscription.root
            if normalized == root or normalized.startswith(root.rstrip("/") + "/"):
                subscription.on_change(str(path))
                delivered += 1
        return delivered

    def _release(self, subscription: _ManualSubscription) -> None:
        if subscription in self._subscriptions:
            self._subscriptions.remove(subscription)


__all__ = ["ChangeCallback", "Disposable", "WatchHost", "WatchdogHost", "ManualWatchHost"]
