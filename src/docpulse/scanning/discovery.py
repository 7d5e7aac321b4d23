"""File discovery utilities."""

from __future__ import annotations

import logging
import os
import posixpath
from pathlib import Path
from typing import Iterable, Iterator

from docpulse.cache import TTLCache, create_cache_key, normalize_exclude_patterns
from docpulse.paths import compile_glob, matches_any

from .filters import gitignore_mtime_ns, is_sensitive_path, load_gitignore

LOGGER = logging.getLogger(__name__)


class FileCollector:
    """List files within a directory tree subject to exclusion patterns.

    Listings are memoized in the shared :class:`TTLCache`. The cache key embeds
    the normalized exclusion list, so reordered or duplicated patterns reuse the
    same entry. It also embeds the filter toggles and the ``.gitignore``
    modification time, so editing ignore rules produces a fresh listing.
    """

    def __init__(
        self,
        cache: TTLCache,
        *,
        exclude_patterns: Iterable[str] = (),
        snapshot_file: str = "",
        max_files: int = 5000,
        respect_gitignore: bool = True,
        include_sensitive_files: bool = False,
        follow_symlinks: bool = False,
    ) -> None:
        self._cache = cache
        self.exclude_patterns = normalize_exclude_patterns(exclude_patterns)
        snapshot = snapshot_file.replace("\\", "/").strip()
        self.snapshot_file = posixpath.normpath(snapshot) if snapshot else ""
        self.max_files = max_files
        self.respect_gitignore = respect_gitignore
        self.include_sensitive_files = include_sensitive_files
        self.follow_symlinks = follow_symlinks
        self._matchers = [compile_glob(pattern) for pattern in self.exclude_patterns]

    def cache_key(self, root: Path) -> str:
        """Return the cache key used for listings of ``root``."""
        mtime = gitignore_mtime_ns(root) if self.respect_gitignore else None
        return create_cache_key(
            "file-list",
            root.as_posix(),
            self.max_files,
            f"exclude={','.join(self.exclude_patterns)}",
            f"respectGitignore={self.respect_gitignore}",
            f"includeSensitiveFiles={self.include_sensitive_files}",
            f"gitignoreMtime={mtime}",
            f"snapshotFile={self.snapshot_file}",
        )

    def collect(self, root: Path) -> list[str]:
        """Return root-relative POSIX paths of files under ``root``.

        The snapshot file is always omitted. Git-ignored and sensitive files are
        omitted unless disabled. At most ``max_files`` paths are returned.
        Results come from the cache while the entry is fresh.
        """
        root = root.expanduser().resolve()
        key = self.cache_key(root)
        cached = self._cache.get(key)
        if cached is not None:
            LOGGER.debug("Using cached file list for %s", root)
            return list(cached)

        files: list[str] = []
        for relative in self._iter_files(root):
            if relative == self.snapshot_file:
                continue
            if not self.include_sensitive_files and is_sensitive_path(relative):
                continue
            files.append(relative)
            if len(files) >= self.max_files:
                break

        self._cache.set(key, tuple(files))
        return files

    def _iter_files(self, root: Path) -> Iterator[str]:
        """Walk ``root`` in sorted order, pruning excluded directories."""
        if not root.is_dir():
            return

        ignored = load_gitignore(root).match_file if self.respect_gitignore else None

        for directory, dirnames, filenames in os.walk(root, followlinks=self.follow_symlinks):
            relative_dir = Path(directory).relative_to(root).as_posix()
            prefix = "" if relative_dir == "." else f"{relative_dir}/"
            kept_dirs = []
            for name in sorted(dirnames):
                candidate = f"{prefix}{name}/"
                if matches_any(candidate, self._matchers):
                    continue
                if ignored is not None and ignored(candidate):
                    continue
                kept_dirs.append(name)
            dirnames[:] = kept_dirs
            for name in sorted(filenames):
                relative = f"{prefix}{name}"
                if matches_any(relative, self._matchers):
                    continue
                if ignored is not None and ignored(relative):
                    continue
                yield relative


__all__ = ["FileCollector"]
