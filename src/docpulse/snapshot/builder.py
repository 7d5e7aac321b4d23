"""Build :class:`Snapshot` objects from a collected file list."""

from __future__ import annotations

import json
import logging
import posixpath
import tomllib
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Iterable, Optional, Sequence

from docpulse.scanning.languages import IMPORTANT_CONFIG_FILES, calculate_language_stats
from docpulse.scanning.models import Finding

from .models import (
    CargoTomlSummary,
    MainConfigFiles,
    PackageJsonSummary,
    PyprojectSummary,
    Snapshot,
    TauriConfigSummary,
    TsConfigSummary,
)

LOGGER = logging.getLogger(__name__)

_SUMMARIZED = {"package.json", "tsconfig.json", "tauri.conf.json", "Cargo.toml", "pyproject.toml"}
_DOCKER_COMPOSE = {"docker-compose.yml", "docker-compose.yaml"}
_TAURI_LOCATIONS = ("src-tauri/tauri.conf.json", "tauri.conf.json")


def build_snapshot(
    root: Path,
    files: Sequence[str],
    *,
    findings: Iterable[Finding] = (),
    project_name: Optional[str] = None,
    generated_at: Optional[datetime] = None,
) -> Snapshot:
    """Describe ``root`` given its collected, root-relative ``files``.

    Args:
        root: Directory the files were collected from.
        files: Root-relative POSIX paths.
        findings: TODO/FIXME findings to embed.
        project_name: Display name; defaults to the directory name.
        generated_at: Timestamp override, mainly for tests.

    Returns:
        Snapshot: Snapshot carrying the full file list.
    """

    root = root.expanduser().resolve()
    stamp = (generated_at or datetime.now(timezone.utc)).isoformat()
    directories = {parent for path in files for parent in _parents(path)}
    present = set(files)

    return Snapshot(
        generated_at=stamp,
        root_path=root.as_posix(),
        project_name=project_name or root.name,
        files_count=len(files),
        dirs_count=len(directories),
        language_stats=calculate_language_stats(files),
        config_files=summarize_config_files(root, present),
        important_files=[name for name in IMPORTANT_CONFIG_FILES if name in present],
        file_list=list(files),
        findings=list(findings),
    )


def summarize_config_files(root: Path, present: set[str]) -> MainConfigFiles:
    """Summarize recognized root-level config files that appear in ``present``."""
    tauri_path = next((path for path in _TAURI_LOCATIONS if path in present), None)
    return MainConfigFiles(
        package_json=_summarize_package_json(_load_json(root, "package.json", present)),
        tsconfig=_summarize_tsconfig(_load_json(root, "tsconfig.json", present)),
        tauri_config=_summarize_tauri(_load_json(root, tauri_path, present)),
        cargo_toml=_summarize_cargo(_load_toml(root, "Cargo.toml", present)),
        pyproject=_summarize_pyproject(_load_toml(root, "pyproject.toml", present)),
        docker_compose=bool(_DOCKER_COMPOSE & present),
        other_configs=[
            name
            for name in IMPORTANT_CONFIG_FILES
            if name in present and name not in _SUMMARIZED and name not in _DOCKER_COMPOSE
        ],
    )


def _parents(path: str) -> Iterable[str]:
    parent = posixpath.dirname(path)
    while parent:
        yield parent
        parent = posixpath.dirname(parent)


def _load_json(
    root: Path, relative: Optional[str], present: set[str]
) -> Optional[dict[str, Any]]:
    if relative is None or relative not in present:
        return None
    try:
        data = json.loads((root / relative).read_text(encoding="utf-8"))
    except (OSError, ValueError) as exc:
        LOGGER.debug("Unable to parse %s: %s", relative, exc)
        return None
    return data if isinstance(data, dict) else None


def _load_toml(root: Path, relative: str, present: set[str]) -> Optional[dict[str, Any]]:
    if relative not in present:
        return None
    try:
        with (root / relative).open("rb") as handle:
            return tomllib.load(handle)
    except (OSError, tomllib.TOMLDecodeError) as exc:
        LOGGER.debug("Unable to parse %s: %s", relative, exc)
        return None


def _summarize_package_json(data: Optional[dict[str, Any]]) -> Optional[PackageJsonSummary]:
    if data is None:
        return None
    scripts = sorted(_as_dict(data.get("scripts")))
    dependencies = sorted(_as_dict(data.get("dependencies")))
    dev_dependencies = sorted(_as_dict(data.get("devDependencies")))
    every_dependency = {*dependencies, *dev_dependencies}
    return PackageJsonSummary(
        name=_as_str(data.get("name")) or "",
        version=_as_str(data.get("version")) or "",
        description=_as_str(data.get("description")),
        scripts=scripts,
        dependencies=dependencies,
        dev_dependencies=dev_dependencies,
        has_typescript="typescript" in every_dependency,
        has_test="test" in scripts,
        has_lint="lint" in scripts,
    )


def _summarize_tsconfig(data: Optional[dict[str, Any]]) -> Optional[TsConfigSummary]:
    if data is None:
        return None
    options = _as_dict(data.get("compilerOptions"))
    return TsConfigSummary(
        target=_as_str(options.get("target")),
        module=_as_str(options.get("module")),
        strict=_as_bool(options.get("strict")),
        out_dir=_as_str(options.get("outDir")),
    )


def _summarize_tauri(data: Optional[dict[str, Any]]) -> Optional[TauriConfigSummary]:
    if data is None:
        return None
    # Tauri v1 nests identity under ``package`` and ``tauri.bundle``; v2 keeps it top-level.
    package = _as_dict(data.get("package"))
    bundle = _as_dict(_as_dict(data.get("tauri")).get("bundle"))
    return TauriConfigSummary(
        product_name=_as_str(data.get("productName")) or _as_str(package.get("productName")),
        version=_as_str(data.get("version")) or _as_str(package.get("version")),
        identifier=_as_str(data.get("identifier")) or _as_str(bundle.get("identifier")),
    )


def _summarize_cargo(data: Optional[dict[str, Any]]) -> Optional[CargoTomlSummary]:
    if data is None:
        return None
    package = _as_dict(data.get("package"))
    return CargoTomlSummary(
        name=_as_str(package.get("name")),
        version=_as_str(package.get("version")),
        dependencies=sorted(_as_dict(data.get("dependencies"))),
    )


def _summarize_pyproject(data: Optional[dict[str, Any]]) -> Optional[PyprojectSummary]:
    if data is None:
        return None
    project = _as_dict(data.get("project"))
    dependencies = project.get("dependencies")
    return PyprojectSummary(
        name=_as_str(project.get("name")),
        version=_as_str(project.get("version")),
        requires_python=_as_str(project.get("requires-python")),
        dependencies=[str(item) for item in dependencies] if isinstance(dependencies, list) else [],
    )


def _as_dict(value: Any) -> dict[str, Any]:
    return value if isinstance(value, dict) else {}


def _as_str(value: Any) -> Optional[str]:
    # Manifests may hold tables here, e.g. ``version.workspace = true``.
    return value if isinstance(value, str) else None


def _as_bool(value: Any) -> Optional[bool]:
    return value if isinstance(value, bool) else None


__all__ = ["build_snapshot", "summarize_config_files"]
