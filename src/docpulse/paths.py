"""Path helpers shared by the scanner and the watcher."""

from __future__ import annotations

import os
import posixpath
import re
import sys
from pathlib import Path, PurePosixPath
from typing import Iterable

from docpulse.config.exceptions import AnalysisRootError


def normalize_fs_path(path: str | os.PathLike[str]) -> str:
    """Return a comparable POSIX form of ``path``.

    Backslashes become forward slashes and redundant separators or ``.`` segments
    are collapsed. On Windows the result is lower-cased so comparisons ignore case.
    """
    normalized = posixpath.normpath(os.fspath(path).replace("\\", "/"))
    if sys.platform == "win32":
        return normalized.lower()
    return normalized


_GLOB_CACHE: dict[str, re.Pattern[str]] = {}


def compile_glob(pattern: str) -> re.Pattern[str]:
    """Compile a workspace glob into an anchored regular expression.

    ``**/`` matches zero or more leading directories, ``**`` matches anything,
    ``*`` matches within a single path segment, and every other character is
    literal. Compiled patterns are memoized.
    """
    normalized = pattern.replace("\\", "/").strip()
    cached = _GLOB_CACHE.get(normalized)
    if cached is not None:
        return cached

    parts = ["^"]
    index = 0
    while index < len(normalized):
        if normalized.startswith("**/", index):
            parts.append("(?:.*/)?")
            index += 3
        elif normalized.startswith("**", index):
            parts.append(".*")
            index += 2
        elif normalized[index] == "*":
            parts.append("[^/]*")
            index += 1
        else:
            parts.append(re.escape(normalized[index]))
            index += 1
    parts.append("$")

    compiled = re.compile("".join(parts))
    _GLOB_CACHE[normalized] = compiled
    return compiled


def matches_any(relative_path: str, matchers: Iterable[re.Pattern[str]]) -> bool:
    """Return whether ``relative_path`` (or its directory form) matches a pattern.

    The directory form with a trailing ``/`` lets ``**/dist/**`` exclude the
    ``dist`` directory itself as well as its contents.
    """
    candidates = [relative_path]
    if not relative_path.endswith("/"):
        candidates.append(relative_path + "/")
    return any(matcher.match(candidate) for matcher in matchers for candidate in candidates)


def resolve_analysis_root(workspace_root: Path | str, analysis_root: str) -> Path:
    """Resolve the directory analysis is scoped to.

    Args:
        workspace_root: Root of the workspace.
        analysis_root: Workspace-relative sub-path; blank selects the workspace root.

    Returns:
        Path: Absolute analysis root.

    Raises:
        AnalysisRootError: If ``analysis_root`` is absolute or escapes the workspace.
    """
    base = Path(workspace_root).expanduser().resolve()
    trimmed = analysis_root.strip()
    if not trimmed:
        return base

    if Path(trimmed).is_absolute() or PurePosixPath(trimmed.replace("\\", "/")).is_absolute():
        raise AnalysisRootError("analysis_root must be a subpath of the workspace root")

    resolved = (base / trimmed).resolve()
    try:
        resolved.relative_to(base)
    except ValueError as exc:
        raise AnalysisRootError("analysis_root must be a subpath of the workspace root") from exc
    return resolved


__all__ = [
    "normalize_fs_path",
    "compile_glob",
    "matches_any",
    "resolve_analysis_root",
]
