"""Workspace analysis combining listing, marker scanning, and snapshot diffing."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Optional

from docpulse.cache import TTLCache, normalize_exclude_patterns
from docpulse.config import DocpulseConfig
from docpulse.paths import resolve_analysis_root
from docpulse.scanning import FileCollector, TodoScanner
from docpulse.snapshot import Snapshot, SnapshotDiff, build_snapshot, compare_snapshots

LOGGER = logging.getLogger(__name__)

DIFF_LIST_LIMIT = 50


@dataclass(slots=True)
class AnalysisResult:
    """Outcome of analyzing one workspace root.

    Attributes:
        workspace_root: Workspace root that was requested.
        analysis_root: Directory actually scanned.
        snapshot: Snapshot taken during this analysis.
        diff: Delta against the previous snapshot.
    """

    workspace_root: Path
    analysis_root: Path
    snapshot: Snapshot
    diff: SnapshotDiff

    def summary_metrics(self) -> dict[str, object]:
        return {
            "files": self.snapshot.files_count,
            "dirs": self.snapshot.dirs_count,
            "findings": len(self.snapshot.findings),
            "new": len(self.diff.new_files),
            "removed": len(self.diff.removed_files),
            "configs": len(self.diff.changed_configs),
            "changes": self.diff.total_changes,
        }


class WorkspaceAnalyzer:
    """Analyze workspace roots using one shared TTL cache.

    Args:
        config: Loaded configuration.
        cache: Cache shared by the collector and the scanner; a new one is
            created from ``config.cache`` when omitted.
        extra_excludes: Patterns appended to ``config.scan.exclude_patterns``.
    """

    def __init__(
        self,
        config: DocpulseConfig,
        *,
        cache: Optional[TTLCache] = None,
        extra_excludes: Iterable[str] = (),
    ) -> None:
        self._config = config
        self.cache = cache if cache is not None else TTLCache(config.cache.ttl_seconds)
        self.exclude_patterns = normalize_exclude_patterns(
            [*config.scan.exclude_patterns, *extra_excludes]
        )
        self.collector = FileCollector(
            self.cache,
            exclude_patterns=self.exclude_patterns,
            snapshot_file=config.scan.snapshot_file,
            max_files=config.scan.max_files_to_scan,
            respect_gitignore=config.scan.respect_gitignore,
            include_sensitive_files=config.scan.include_sensitive_files,
        )
        self.scanner = TodoScanner(
            self.cache,
            max_files_to_inspect=config.todo.max_files_to_inspect,
            max_file_bytes=config.todo.max_file_bytes,
            max_findings=config.todo.max_findings,
        )
        self._previous: dict[Path, Snapshot] = {}

    def analyze(self, workspace_root: Path, previous: Optional[Snapshot] = None) -> AnalysisResult:
        """Snapshot ``workspace_root`` and diff it against ``previous``.

        When ``previous`` is omitted the snapshot recorded by the last call for
        the same root is used.

        Raises:
            AnalysisRootError: If the configured analysis root is invalid.
        """

        workspace_root = workspace_root.expanduser().resolve()
        analysis_root = resolve_analysis_root(workspace_root, self._config.scan.analysis_root)

        files = self.collector.collect(analysis_root)
        findings = self.scanner.scan(analysis_root, files)
        snapshot = build_snapshot(analysis_root, files, findings=findings)

        baseline = previous if previous is not None else self._previous.get(workspace_root)
        diff = compare_snapshots(baseline, snapshot, limit=DIFF_LIST_LIMIT)
        self._previous[workspace_root] = snapshot

        LOGGER.debug(
            "Analyzed %s: %d files, %d findings, %d changes",
            analysis_root,
            snapshot.files_count,
            len(findings),
            diff.total_changes,
        )
        return AnalysisResult(
            workspace_root=workspace_root,
            analysis_root=analysis_root,
            snapshot=snapshot,
            diff=diff,
        )

    def invalidate(self, workspace_root: Path) -> None:
        """Drop cached listings so the next analysis sees fresh files."""
        analysis_root = resolve_analysis_root(
            workspace_root.expanduser().resolve(), self._config.scan.analysis_root
        )
        self.cache.delete(self.collector.cache_key(analysis_root))


__all__ = ["AnalysisResult", "WorkspaceAnalyzer", "DIFF_LIST_LIMIT"]
