"""In-memory caching shared by the scanners."""

from .keys import create_cache_key, normalize_exclude_patterns
from .ttl import DEFAULT_TTL_SECONDS, CacheEntry, CacheStats, TTLCache

__all__ = [
    "DEFAULT_TTL_SECONDS",
    "CacheEntry",
    "CacheStats",
    "TTLCache",
    "create_cache_key",
    "normalize_exclude_patterns",
]
