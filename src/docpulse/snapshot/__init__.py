"""Snapshot construction and comparison."""

from .builder import build_snapshot, summarize_config_files
from .diff import compare_snapshots, detect_config_changes, language_stats_delta
from .models import (
    CargoTomlSummary,
    MainConfigFiles,
    PackageJsonSummary,
    PyprojectSummary,
    Snapshot,
    SnapshotDiff,
    TauriConfigSummary,
    TsConfigSummary,
)

__all__ = [
    "build_snapshot",
    "summarize_config_files",
    "compare_snapshots",
    "detect_config_changes",
    "language_stats_delta",
    "Snapshot",
    "SnapshotDiff",
    "MainConfigFiles",
    "PackageJsonSummary",
    "TsConfigSummary",
    "TauriConfigSummary",
    "CargoTomlSummary",
    "PyprojectSummary",
]
