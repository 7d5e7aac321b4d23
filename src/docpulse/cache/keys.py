"""Cache key conventions.

Keys take the form ``type:root:discriminator...``. Discriminators built from
user-supplied lists are normalized first so that equivalent configurations
always land on the same entry.
"""

from __future__ import annotations

from typing import Iterable


def create_cache_key(kind: str, root_path: str, *discriminators: object) -> str:
    """Join ``kind``, ``root_path`` and any discriminators with colons."""
    return ":".join([kind, root_path, *(str(part) for part in discriminators)])


def normalize_exclude_patterns(patterns: Iterable[str]) -> list[str]:
    """Trim, drop blanks, de-duplicate and sort exclusion patterns."""
    return sorted({pattern.strip() for pattern in patterns if pattern.strip()})


__all__ = ["create_cache_key", "normalize_exclude_patterns"]
