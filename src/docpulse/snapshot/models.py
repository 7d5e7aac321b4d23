"""Snapshot and snapshot-diff data models."""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from docpulse.scanning.models import Finding


class PackageJsonSummary(BaseModel):
    """Fields of ``package.json`` that matter for change reporting."""

    name: str = ""
    version: str = ""
    description: Optional[str] = None
    scripts: List[str] = Field(default_factory=list)
    dependencies: List[str] = Field(default_factory=list)
    dev_dependencies: List[str] = Field(default_factory=list)
    has_typescript: bool = False
    has_test: bool = False
    has_lint: bool = False


class TsConfigSummary(BaseModel):
    """Compiler options summarized from ``tsconfig.json``."""

    target: Optional[str] = None
    module: Optional[str] = None
    strict: Optional[bool] = None
    out_dir: Optional[str] = None


class TauriConfigSummary(BaseModel):
    """Identity fields from ``tauri.conf.json``."""

    product_name: Optional[str] = None
    version: Optional[str] = None
    identifier: Optional[str] = None


class CargoTomlSummary(BaseModel):
    """Package table and dependency names from ``Cargo.toml``."""

    name: Optional[str] = None
    version: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)


class PyprojectSummary(BaseModel):
    """Project table fields from ``pyproject.toml``."""

    name: Optional[str] = None
    version: Optional[str] = None
    requires_python: Optional[str] = None
    dependencies: List[str] = Field(default_factory=list)


class MainConfigFiles(BaseModel):
    """Structured view of the recognized configuration files in a tree.

    Attributes:
        package_json: ``package.json`` summary, when present and parseable.
        tsconfig: ``tsconfig.json`` summary.
        tauri_config: ``tauri.conf.json`` summary.
        cargo_toml: ``Cargo.toml`` summary.
        pyproject: ``pyproject.toml`` summary.
        docker_compose: Whether a docker-compose file exists.
        other_configs: Other well-known config files that were found.
    """

    package_json: Optional[PackageJsonSummary] = None
    tsconfig: Optional[TsConfigSummary] = None
    tauri_config: Optional[TauriConfigSummary] = None
    cargo_toml: Optional[CargoTomlSummary] = None
    pyproject: Optional[PyprojectSummary] = None
    docker_compose: bool = False
    other_configs: List[str] = Field(default_factory=list)


# Field name on MainConfigFiles -> identifier reported in SnapshotDiff.changed_configs.
CONFIG_IDENTIFIERS: Dict[str, str] = {
    "package_json": "package.json",
    "tsconfig": "tsconfig.json",
    "tauri_config": "tauri.conf.json",
    "cargo_toml": "Cargo.toml",
    "pyproject": "pyproject.toml",
}


class Snapshot(BaseModel):
    """Point-in-time description of a directory tree.

    Attributes:
        generated_at: ISO-8601 timestamp of when the snapshot was taken.
        root_path: Absolute path of the scanned root.
        project_name: Display name for the project.
        files_count: Number of files in the tree.
        dirs_count: Number of directories containing those files.
        language_stats: File counts per known extension.
        config_files: Recognized configuration files.
        important_files: Well-known project files that were found.
        file_list: Full root-relative file list, when captured.
        findings: TODO/FIXME findings, when scanned.
    """

    generated_at: str
    root_path: str
    project_name: str = ""
    files_count: int = 0
    dirs_count: int = 0
    language_stats: Dict[str, int] = Field(default_factory=dict)
    config_files: MainConfigFiles = Field(default_factory=MainConfigFiles)
    important_files: List[str] = Field(default_factory=list)
    file_list: Optional[List[str]] = None
    findings: List[Finding] = Field(default_factory=list)


class SnapshotDiff(BaseModel):
    """Structured delta between two snapshots.

    For the first snapshot of a tree ``is_initial`` is set, ``total_changes``
    carries the file count, and the file lists stay empty.
    """

    previous_snapshot_time: Optional[str] = None
    current_snapshot_time: str
    is_initial: bool
    new_files: List[str] = Field(default_factory=list)
    removed_files: List[str] = Field(default_factory=list)
    changed_configs: List[str] = Field(default_factory=list)
    language_stats_diff: Dict[str, int] = Field(default_factory=dict)
    total_changes: int = 0
    files_count_diff: int = 0
    dirs_count_diff: int = 0


__all__ = [
    "PackageJsonSummary",
    "TsConfigSummary",
    "TauriConfigSummary",
    "CargoTomlSummary",
    "PyprojectSummary",
    "MainConfigFiles",
    "CONFIG_IDENTIFIERS",
    "Snapshot",
    "SnapshotDiff",
]
