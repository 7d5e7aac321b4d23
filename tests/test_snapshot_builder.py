"""Tests for building snapshots from collected files."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

from docpulse.scanning import Finding
from docpulse.snapshot import build_snapshot, compare_snapshots


def _write(root: Path, relative: str, content: str = "") -> str:
    path = root / relative
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return relative


def test_build_snapshot_counts_and_summaries(tmp_path: Path) -> None:
    files = [
        _write(
            tmp_path,
            "package.json",
            json.dumps(
                {
                    "name": "demo",
                    "version": "0.3.0",
                    "scripts": {"lint": "eslint .", "build": "tsc"},
                    "devDependencies": {"typescript": "^5.0.0"},
                }
            ),
        ),
        _write(tmp_path, "tsconfig.json", json.dumps({"compilerOptions": {"strict": True}})),
        _write(tmp_path, "Cargo.toml", '[package]\nname = "core"\nversion = "0.1.0"\n'),
        _write(tmp_path, "docker-compose.yml", "services: {}\n"),
        _write(tmp_path, "src/app/main.ts"),
        _write(tmp_path, "src/util.ts"),
        _write(tmp_path, "src-tauri/tauri.conf.json", json.dumps({"productName": "Demo"})),
    ]
    stamp = datetime(2026, 3, 1, tzinfo=timezone.utc)
    finding = Finding(file="src/util.ts", line=1, tag="TODO", text="later")

    snapshot = build_snapshot(tmp_path, files, findings=[finding], generated_at=stamp)

    assert snapshot.generated_at == "2026-03-01T00:00:00+00:00"
    assert snapshot.project_name == tmp_path.name
    assert snapshot.files_count == 7
    assert snapshot.dirs_count == 3  # src, src/app, src-tauri
    assert snapshot.language_stats == {"json": 3, "ts": 2, "yml": 1}
    assert snapshot.important_files == [
        "package.json",
        "tsconfig.json",
        "Cargo.toml",
        "docker-compose.yml",
    ]
    assert snapshot.file_list == files
    assert snapshot.findings == [finding]

    configs = snapshot.config_files
    assert configs.package_json is not None
    assert configs.package_json.has_typescript is True
    assert configs.package_json.has_lint is True
    assert configs.package_json.has_test is False
    assert configs.package_json.scripts == ["build", "lint"]
    assert configs.tsconfig is not None and configs.tsconfig.strict is True
    assert configs.cargo_toml is not None and configs.cargo_toml.name == "core"
    assert configs.tauri_config is not None and configs.tauri_config.product_name == "Demo"
    assert configs.docker_compose is True
    assert configs.pyproject is None


def test_unparseable_configs_summarize_as_absent(tmp_path: Path) -> None:
    files = [
        _write(tmp_path, "package.json", "{not json"),
        _write(tmp_path, "pyproject.toml", "[project\nname="),
    ]

    snapshot = build_snapshot(tmp_path, files)

    assert snapshot.config_files.package_json is None
    assert snapshot.config_files.pyproject is None
    assert snapshot.important_files == ["package.json", "pyproject.toml"]


def test_pyproject_summary(tmp_path: Path) -> None:
    files = [
        _write(
            tmp_path,
            "pyproject.toml",
            '[project]\nname = "svc"\nversion = "2.0"\nrequires-python = ">=3.11"\n'
            'dependencies = ["click>=8"]\n',
        )
    ]

    summary = build_snapshot(tmp_path, files).config_files.pyproject

    assert summary is not None
    assert summary.name == "svc"
    assert summary.requires_python == ">=3.11"
    assert summary.dependencies == ["click>=8"]


def test_config_edit_is_reported_by_diff(tmp_path: Path) -> None:
    files = [_write(tmp_path, "package.json", json.dumps({"name": "demo", "version": "1.0.0"}))]
    before = build_snapshot(tmp_path, files)

    _write(tmp_path, "package.json", json.dumps({"name": "demo", "version": "1.0.1"}))
    after = build_snapshot(tmp_path, files)

    diff = compare_snapshots(before, after)
    assert diff.changed_configs == ["package.json"]
    assert diff.new_files == []
    assert diff.total_changes == 1


def test_mistyped_config_values_are_dropped(tmp_path: Path) -> None:
    files = [
        _write(tmp_path, "tsconfig.json", json.dumps({"compilerOptions": {"target": 5}})),
        _write(
            tmp_path,
            "package.json",
            json.dumps({"name": "demo", "description": {"en": "y"}, "version": 2}),
        ),
        _write(tmp_path, "pyproject.toml", '[project]\nname = 3\nrequires-python = ["3"]\n'),
        _write(tmp_path, "src-tauri/tauri.conf.json", json.dumps({"productName": ["x"]})),
    ]

    configs = build_snapshot(tmp_path, files).config_files

    assert configs.tsconfig is not None and configs.tsconfig.target is None
    assert configs.package_json is not None
    assert configs.package_json.name == "demo"
    assert configs.package_json.version == ""
    assert configs.package_json.description is None
    assert configs.pyproject is not None
    assert configs.pyproject.name is None
    assert configs.pyproject.requires_python is None
    assert configs.tauri_config is not None and configs.tauri_config.product_name is None
