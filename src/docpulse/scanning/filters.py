"""Gitignore and sensitive-file filters applied to file listings."""

from __future__ import annotations

import logging
import posixpath
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from pathspec import GitIgnoreSpec

LOGGER = logging.getLogger(__name__)

_KEYWORD_EXTENSIONS = {"", ".txt", ".json", ".yaml", ".yml", ".ini", ".conf"}
_SECRET_TOKENS = {"secret", "secrets", "credential", "credentials", "password", "passwd", "apikey"}
_TOKEN_SPLIT = re.compile(r"[^a-z0-9]+")


@dataclass(frozen=True)
class _GitignoreEntry:
    mtime_ns: Optional[int]
    spec: GitIgnoreSpec


_GITIGNORE_CACHE: dict[str, _GitignoreEntry] = {}


def gitignore_mtime_ns(root: Path) -> Optional[int]:
    """Return the modification time of ``root/.gitignore``, or ``None`` when absent."""
    try:
        return (root / ".gitignore").stat().st_mtime_ns
    except OSError:
        return None


def load_gitignore(root: Path) -> GitIgnoreSpec:
    """Return the rules of ``root/.gitignore``, reloading only when the file changes.

    A missing or unreadable file yields an empty rule set.
    """
    key = root.as_posix()
    mtime_ns = gitignore_mtime_ns(root)
    cached = _GITIGNORE_CACHE.get(key)
    if cached is not None and cached.mtime_ns == mtime_ns:
        return cached.spec

    lines: list[str] = []
    if mtime_ns is not None:
        try:
            lines = (root / ".gitignore").read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            LOGGER.debug("Unable to read .gitignore in %s: %s", root, exc)
            mtime_ns = None

    spec = GitIgnoreSpec.from_lines(lines)
    _GITIGNORE_CACHE[key] = _GitignoreEntry(mtime_ns=mtime_ns, spec=spec)
    return spec


def clear_gitignore_cache() -> None:
    _GITIGNORE_CACHE.clear()


def is_sensitive_path(relative_path: str) -> bool:
    """Return whether ``relative_path`` names a file likely to hold secrets.

    Covers ``.env`` files (except ``.env.example``), ``.pem``/``.key`` files,
    SSH private keys, and data or config files whose name carries a token,
    secret, credential, password or API-key word.
    """

    base_name = posixpath.basename(relative_path.replace("\\", "/")).lower()
    if base_name == ".env.example":
        return False
    if base_name.startswith(".env"):
        return True

    stem, ext = posixpath.splitext(base_name)
    if ext in {".pem", ".key"}:
        return True
    if stem in {"id_rsa", "id_ed25519"} and ext != ".pub":
        return True
    if ext not in _KEYWORD_EXTENSIONS:
        return False

    tokens = [token for token in _TOKEN_SPLIT.split(stem) if token]
    if "token" in tokens or stem.endswith("token"):
        return True
    if _SECRET_TOKENS.intersection(tokens):
        return True
    return any(first == "api" and second == "key" for first, second in zip(tokens, tokens[1:]))


__all__ = [
    "clear_gitignore_cache",
    "gitignore_mtime_ns",
    "is_sensitive_path",
    "load_gitignore",
]
