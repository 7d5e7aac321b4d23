"""Time-to-live cache for expensive listings and scan results."""

from __future__ import annotations

import time
from dataclasses import dataclass
from typing import Any, Callable, Generic, Iterable, TypeVar

T = TypeVar("T")

DEFAULT_TTL_SECONDS = 30.0


@dataclass(slots=True)
class CacheEntry(Generic[T]):
    """A stored value together with the clock reading taken when it was stored."""

    key: str
    value: T
    stored_at: float


@dataclass(frozen=True, slots=True)
class CacheStats:
    """Point-in-time view of the cache contents.

    Attributes:
        size: Number of entries currently held, expired or not.
        keys: Keys in insertion order.
    """

    size: int
    keys: list[str]


class TTLCache:
    """Key/value store whose entries expire a fixed interval after being written.

    Reads never refresh an entry's age. Expired entries are evicted lazily when
    read and proactively on every write, so memory stays bounded without explicit
    calls to :meth:`prune_expired`.

    Args:
        ttl_seconds: Lifetime of an entry.
        clock: Monotonic clock returning seconds; injectable for tests.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be greater than zero.")
        self._ttl = ttl_seconds
        self._clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}

    @property
    def ttl_seconds(self) -> float:
        """Return the configured entry lifetime."""
        return self._ttl

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value stored under ``key``, or ``default`` when absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            return default
        if self._is_expired(entry, self._clock()):
            del self._entries[key]
            return default
        return entry.value

    def set(self, key: str, value: Any) -> None:
        """Store ``value`` under ``key`` after pruning expired entries."""
        self.prune_expired()
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(key=key, value=value, stored_at=self._clock())

    def delete(self, key: str) -> bool:
        """Remove ``key``; return whether an entry was present."""
        return self._entries.pop(key, None) is not None

    def delete_by_prefix(self, prefix: str) -> int:
        """Remove every entry whose key starts with ``prefix``; return the count removed."""
        return self._drop(key for key in self._entries if key.startswith(prefix))

    def clear(self) -> None:
        """Remove all entries."""
        self._entries.clear()

    def prune_expired(self) -> int:
        """Evict expired entries and return how many were removed."""
        now = self._clock()
        return self._drop(
            key for key, entry in self._entries.items() if self._is_expired(entry, now)
        )

    def stats(self) -> CacheStats:
        """Return the current size and keys."""
        return CacheStats(size=len(self._entries), keys=list(self._entries))

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and self.get(key, _MISSING) is not _MISSING

    def __len__(self) -> int:
        return len(self._entries)

    def _is_expired(self, entry: CacheEntry[Any], now: float) -> bool:
        return now - entry.stored_at > self._ttl

    def _drop(self, keys: Iterable[str]) -> int:
        doomed = list(keys)
        for key in doomed:
            del self._entries[key]
        return len(doomed)


_MISSING = object()


__all__ = ["CacheEntry", "CacheStats", "TTLCache", "DEFAULT_TTL_SECONDS"]
