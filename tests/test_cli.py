"""CLI tests for `docpulse scan` and the command group."""

from __future__ import annotations

import json
import os
from pathlib import Path

from click.testing import CliRunner

from docpulse.cli import cli


def _env_with_home(tmp_path: Path) -> dict[str, str]:
    env = {key: value for key, value in os.environ.items() if not key.startswith("DOCPULSE__")}
    env["HOME"] = str(tmp_path / "home")
    return env


def _workspace(tmp_path: Path) -> Path:
    root = tmp_path / "workspace"
    (root / "src").mkdir(parents=True)
    (root / "src" / "app.py").write_text("# TODO: wire the retry budget\n", encoding="utf-8")
    (root / "src" / "util.ts").write_text("export const x = 1; // FIXME later\n", encoding="utf-8")
    (root / "package.json").write_text(
        json.dumps({"name": "demo", "version": "1.0.0", "scripts": {"test": "jest"}}),
        encoding="utf-8",
    )
    (root / "node_modules" / "lib").mkdir(parents=True)
    (root / "node_modules" / "lib" / "index.js").write_text("// TODO vendored\n", encoding="utf-8")
    return root


def test_cli_help_displays_commands() -> None:
    runner = CliRunner()
    result = runner.invoke(cli, ["--help"])

    assert result.exit_code == 0
    assert "reports what changed" in result.output
    for command in ("scan", "watch", "config"):
        assert command in result.output


def test_scan_json_reports_snapshot_and_initial_diff(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["scan", str(root), "--json"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    snapshot = payload["snapshot"]
    assert snapshot["files_count"] == 3
    assert snapshot["language_stats"] == {"py": 1, "ts": 1, "json": 1}
    assert snapshot["config_files"]["package_json"]["has_test"] is True
    assert {(item["file"], item["tag"]) for item in snapshot["findings"]} == {
        ("src/app.py", "TODO"),
        ("src/util.ts", "FIXME"),
    }
    assert payload["diff"]["is_initial"] is True
    assert payload["diff"]["total_changes"] == 3


def test_scan_extra_exclude_patterns(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli,
        ["scan", str(root), "--json", "--exclude", "**/*.ts"],
        env=_env_with_home(tmp_path),
    )

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["snapshot"]["files_count"] == 2
    assert [item["file"] for item in payload["snapshot"]["findings"]] == ["src/app.py"]


def test_scan_summary_mode_prints_summary_line(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    runner = CliRunner()

    result = runner.invoke(cli, ["scan", str(root), "--summary"], env=_env_with_home(tmp_path))

    assert result.exit_code == 0
    assert "Scan summary for" in result.output
    assert "findings=2" in result.output
    assert "wire the retry budget" not in result.output


def test_scan_rejects_escaping_analysis_root(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    env = _env_with_home(tmp_path)
    env["DOCPULSE__SCAN__ANALYSIS_ROOT"] = "../elsewhere"
    runner = CliRunner()

    result = runner.invoke(cli, ["scan", str(root), "--json"], env=env)

    assert result.exit_code == 1
    assert json.loads(result.output)["error"]["code"] == "analysis_root_error"


def test_scan_json_conflicts_with_quiet(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["scan", str(root), "--json", "--quiet"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "--json cannot be combined with --quiet" in result.output


def test_watch_requires_a_path(tmp_path: Path) -> None:
    runner = CliRunner()

    result = runner.invoke(cli, ["watch"], env=_env_with_home(tmp_path))

    assert result.exit_code != 0
    assert "Provide at least one PATH" in result.output


def test_watch_rejects_negative_debounce(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    runner = CliRunner()

    result = runner.invoke(
        cli, ["watch", str(root), "--debounce", "-1"], env=_env_with_home(tmp_path)
    )

    assert result.exit_code != 0
    assert "--debounce must not be negative" in result.output


def test_watch_with_watcher_disabled_runs_once(tmp_path: Path) -> None:
    root = _workspace(tmp_path)
    env = _env_with_home(tmp_path)
    env["DOCPULSE__WATCHER__ENABLED"] = "false"
    runner = CliRunner()

    result = runner.invoke(cli, ["watch", str(root), "--json"], env=env)

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["snapshot"]["files_count"] == 3
    assert payload["diff"]["is_initial"] is True

    result = runner.invoke(cli, ["watch", str(root)], env=env)

    assert result.exit_code == 0, result.output
    assert "Automatic updates are disabled" in result.output
