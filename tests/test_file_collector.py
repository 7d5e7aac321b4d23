"""Tests for cached file collection."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Iterator

import pytest

from docpulse.cache import TTLCache
from docpulse.scanning import FileCollector, is_sensitive_path


class CountingCollector(FileCollector):
    """Collector that records how many directory listings it performs."""

    listings = 0

    def _iter_files(self, root: Path) -> Iterator[str]:
        type(self).listings += 1
        yield from super()._iter_files(root)


def _touch(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_collect_lists_sorted_relative_paths_and_prunes_excludes(tmp_path: Path) -> None:
    _touch(tmp_path / "b.py")
    _touch(tmp_path / "a" / "c.ts")
    _touch(tmp_path / "node_modules" / "pkg" / "index.js")
    _touch(tmp_path / "logs" / "run.log")

    collector = FileCollector(
        TTLCache(), exclude_patterns=["**/node_modules/**", "**/*.log"]
    )

    assert collector.collect(tmp_path) == ["b.py", "a/c.ts"]


def test_collect_walks_directories_in_sorted_order(tmp_path: Path) -> None:
    _touch(tmp_path / "z.md")
    _touch(tmp_path / "a" / "one.py")
    _touch(tmp_path / "m" / "two.py")

    files = FileCollector(TTLCache()).collect(tmp_path)

    assert files == ["z.md", "a/one.py", "m/two.py"]


def test_snapshot_file_is_always_skipped(tmp_path: Path) -> None:
    _touch(tmp_path / ".docpulse" / "state.json", "{}")
    _touch(tmp_path / ".docpulse" / "notes.md")

    files = FileCollector(TTLCache(), snapshot_file="./.docpulse/state.json").collect(tmp_path)

    assert files == [".docpulse/notes.md"]


def test_max_files_caps_the_listing(tmp_path: Path) -> None:
    for index in range(5):
        _touch(tmp_path / f"f{index}.py")

    files = FileCollector(TTLCache(), max_files=3).collect(tmp_path)

    assert files == ["f0.py", "f1.py", "f2.py"]


def test_equivalent_exclude_lists_share_one_listing(tmp_path: Path) -> None:
    _touch(tmp_path / "src" / "main.py")
    cache = TTLCache()
    CountingCollector.listings = 0

    first = CountingCollector(cache, exclude_patterns=["**/dist/**", "**/build/**"])
    second = CountingCollector(
        cache, exclude_patterns=[" **/build/** ", "**/dist/**", "**/dist/**", ""]
    )

    assert first.cache_key(tmp_path.resolve()) == second.cache_key(tmp_path.resolve())
    assert first.collect(tmp_path) == ["src/main.py"]
    assert second.collect(tmp_path) == ["src/main.py"]
    assert CountingCollector.listings == 1


def test_listing_is_repeated_once_the_entry_expires(tmp_path: Path) -> None:
    _touch(tmp_path / "main.py")
    now = [0.0]
    cache = TTLCache(30.0, clock=lambda: now[0])
    CountingCollector.listings = 0
    collector = CountingCollector(cache)

    collector.collect(tmp_path)
    now[0] = 29.0
    collector.collect(tmp_path)
    assert CountingCollector.listings == 1

    now[0] = 31.0
    collector.collect(tmp_path)
    assert CountingCollector.listings == 2


def test_returned_list_is_a_copy(tmp_path: Path) -> None:
    _touch(tmp_path / "main.py")
    collector = FileCollector(TTLCache())

    collector.collect(tmp_path).append("bogus")

    assert collector.collect(tmp_path) == ["main.py"]


def test_gitignored_files_and_directories_are_dropped(tmp_path: Path) -> None:
    _touch(tmp_path / ".gitignore", "generated/\n*.tmp\n!keep.tmp\n")
    _touch(tmp_path / "main.py")
    _touch(tmp_path / "scratch.tmp")
    _touch(tmp_path / "keep.tmp")
    _touch(tmp_path / "generated" / "out.py")

    files = FileCollector(TTLCache()).collect(tmp_path)

    assert files == [".gitignore", "keep.tmp", "main.py"]


def test_gitignore_can_be_disabled(tmp_path: Path) -> None:
    _touch(tmp_path / ".gitignore", "*.tmp\n")
    _touch(tmp_path / "scratch.tmp")

    files = FileCollector(TTLCache(), respect_gitignore=False).collect(tmp_path)

    assert files == [".gitignore", "scratch.tmp"]


def test_editing_gitignore_changes_the_cache_key(tmp_path: Path) -> None:
    _touch(tmp_path / ".gitignore", "*.tmp\n")
    _touch(tmp_path / "scratch.tmp")
    collector = FileCollector(TTLCache())
    root = tmp_path.resolve()

    before = collector.cache_key(root)
    assert collector.collect(tmp_path) == [".gitignore"]

    gitignore = tmp_path / ".gitignore"
    gitignore.write_text("", encoding="utf-8")
    stat = gitignore.stat()
    os.utime(gitignore, ns=(stat.st_atime_ns, stat.st_mtime_ns + 5_000_000_000))

    assert collector.cache_key(root) != before
    assert collector.collect(tmp_path) == [".gitignore", "scratch.tmp"]


def test_sensitive_files_are_dropped_unless_included(tmp_path: Path) -> None:
    for name in (".env", ".env.example", "server.pem", "id_rsa", "api-key.json", "main.py"):
        _touch(tmp_path / name)

    default = FileCollector(TTLCache()).collect(tmp_path)
    everything = FileCollector(TTLCache(), include_sensitive_files=True).collect(tmp_path)

    assert default == [".env.example", "main.py"]
    assert len(everything) == 6


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        (".env", True),
        (".env.local", True),
        (".env.example", False),
        ("certs/server.pem", True),
        ("deploy.key", True),
        ("home/.ssh/id_ed25519", True),
        ("home/.ssh/id_rsa.pub", False),
        ("config/github_token.txt", True),
        ("vsctoken.txt", True),
        ("db-password.yaml", True),
        ("api_key.ini", True),
        ("src/password.ts", False),
        ("monkey.json", False),
        ("README.md", False),
    ],
)
def test_is_sensitive_path(path: str, expected: bool) -> None:
    assert is_sensitive_path(path) is expected
