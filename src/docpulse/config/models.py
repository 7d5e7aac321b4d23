"""Configuration models describing docpulse settings."""

from __future__ import annotations

from typing import List

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_EXCLUDE_PATTERNS: tuple[str, ...] = (
    "**/node_modules/**",
    "**/dist/**",
    "**/out/**",
    "**/build/**",
    "**/.git/**",
    "**/target/**",
    "**/.next/**",
    "**/__pycache__/**",
    "**/.venv/**",
    "**/coverage/**",
    "**/*.log",
    "**/*.lock",
)


class DocpulseBaseModel(BaseModel):
    """Shared configuration for docpulse Pydantic models."""

    model_config = ConfigDict(extra="forbid")


class WatcherSettings(DocpulseBaseModel):
    """Auto-update watcher toggles.

    Instances are immutable; the scheduler compares successive values
    structurally to decide whether to start, stop, or restart its watcher.

    Attributes:
        enabled: Whether file changes trigger automatic updates.
        debounce_ms: Quiet period, in milliseconds, before pending changes are emitted.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    enabled: bool = True
    debounce_ms: int = Field(default=1500, ge=0)


class ScanSettings(DocpulseBaseModel):
    """Workspace scanning options shared by the collector and the watcher.

    Attributes:
        report_directory: Workspace-relative directory receiving generated reports.
        snapshot_file: Workspace-relative path of the snapshot/state file.
        analysis_root: Optional sub-path that scopes analysis; blank means the workspace root.
        exclude_patterns: Glob patterns excluded from scans and change tracking.
        max_files_to_scan: Upper bound on files returned by a single listing.
        respect_gitignore: Drop files matched by the root `.gitignore`.
        include_sensitive_files: Keep files that look like secrets (`.env`, keys, tokens).
    """

    report_directory: str = "docs/reports"
    snapshot_file: str = ".docpulse/state.json"
    analysis_root: str = ""
    exclude_patterns: List[str] = Field(default_factory=lambda: list(DEFAULT_EXCLUDE_PATTERNS))
    max_files_to_scan: int = Field(default=5000, ge=1)
    respect_gitignore: bool = True
    include_sensitive_files: bool = False


class TodoScanSettings(DocpulseBaseModel):
    """Limits applied by the TODO/FIXME scanner.

    Attributes:
        max_files_to_inspect: Maximum number of candidate files examined per scan.
        max_file_bytes: Files larger than this are recorded with no findings.
        max_findings: Global cap on findings returned by one scan.
    """

    max_files_to_inspect: int = Field(default=300, ge=0)
    max_file_bytes: int = Field(default=200_000, ge=0)
    max_findings: int = Field(default=200, ge=0)


class CacheSettings(DocpulseBaseModel):
    """In-memory cache options.

    Attributes:
        ttl_seconds: Lifetime of cached listings and scan results.
    """

    ttl_seconds: float = Field(default=30.0, gt=0)


class LoggingSettings(DocpulseBaseModel):
    """Runtime logging configuration.

    Attributes:
        level: Logging verbosity level.
    """

    level: str = "WARNING"


class CLIOptions(DocpulseBaseModel):
    """CLI behavior defaults and presentation preferences.

    Attributes:
        quiet_default: Whether commands suppress non-error output by default.
        summary_default: Whether commands only print summary lines by default.
    """

    quiet_default: bool = False
    summary_default: bool = False


class DocpulseConfig(DocpulseBaseModel):
    """Top-level configuration struct for docpulse.

    Attributes:
        watcher: Auto-update watcher settings.
        scan: Workspace scanning settings.
        todo: TODO/FIXME scanner limits.
        cache: In-memory cache settings.
        logging: Logging configuration.
        cli: CLI presentation defaults.
    """

    watcher: WatcherSettings = Field(default_factory=WatcherSettings)
    scan: ScanSettings = Field(default_factory=ScanSettings)
    todo: TodoScanSettings = Field(default_factory=TodoScanSettings)
    cache: CacheSettings = Field(default_factory=CacheSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    cli: CLIOptions = Field(default_factory=CLIOptions)


__all__ = [
    "DEFAULT_EXCLUDE_PATTERNS",
    "DocpulseBaseModel",
    "WatcherSettings",
    "ScanSettings",
    "TodoScanSettings",
    "CacheSettings",
    "LoggingSettings",
    "CLIOptions",
    "DocpulseConfig",
]
