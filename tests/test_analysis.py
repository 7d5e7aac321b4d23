"""Tests for workspace analysis."""

from __future__ import annotations

from pathlib import Path

import pytest

from docpulse.analysis import WorkspaceAnalyzer
from docpulse.cache import TTLCache
from docpulse.config import AnalysisRootError, DocpulseConfig, resolve_with_precedence


def _write(path: Path, content: str = "") -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")


def test_second_analysis_diffs_against_the_first(tmp_path: Path) -> None:
    _write(tmp_path / "a.py", "# TODO first\n")
    _write(tmp_path / "b.py")
    analyzer = WorkspaceAnalyzer(DocpulseConfig())

    first = analyzer.analyze(tmp_path)
    assert first.diff.is_initial is True
    assert first.diff.total_changes == 2

    (tmp_path / "a.py").unlink()
    _write(tmp_path / "c.py")
    analyzer.invalidate(tmp_path)
    second = analyzer.analyze(tmp_path)

    assert second.diff.is_initial is False
    assert second.diff.new_files == ["c.py"]
    assert second.diff.removed_files == ["a.py"]
    assert second.snapshot.findings == []


def test_listing_is_served_from_cache_until_invalidated(tmp_path: Path) -> None:
    _write(tmp_path / "a.py")
    analyzer = WorkspaceAnalyzer(DocpulseConfig(), cache=TTLCache(60))

    analyzer.analyze(tmp_path)
    _write(tmp_path / "late.py")

    assert analyzer.analyze(tmp_path).snapshot.files_count == 1
    analyzer.invalidate(tmp_path)
    assert analyzer.analyze(tmp_path).snapshot.files_count == 2


def test_analysis_root_scopes_the_scan(tmp_path: Path) -> None:
    _write(tmp_path / "outside.py")
    _write(tmp_path / "app" / "inside.py", "# FIXME scoped\n")
    config = resolve_with_precedence(
        defaults=DocpulseConfig(), cli_overrides={"scan.analysis_root": "app"}
    )

    result = WorkspaceAnalyzer(config).analyze(tmp_path)

    assert result.analysis_root == (tmp_path / "app").resolve()
    assert result.snapshot.file_list == ["inside.py"]
    assert [item.text for item in result.snapshot.findings] == ["scoped"]


def test_invalid_analysis_root_raises(tmp_path: Path) -> None:
    config = resolve_with_precedence(
        defaults=DocpulseConfig(), cli_overrides={"scan.analysis_root": "../up"}
    )

    with pytest.raises(AnalysisRootError):
        WorkspaceAnalyzer(config).analyze(tmp_path)


def test_summary_metrics(tmp_path: Path) -> None:
    _write(tmp_path / "src" / "a.py", "# TODO one\n")

    metrics = WorkspaceAnalyzer(DocpulseConfig()).analyze(tmp_path).summary_metrics()

    assert metrics == {
        "files": 1,
        "dirs": 1,
        "findings": 1,
        "new": 0,
        "removed": 0,
        "configs": 0,
        "changes": 1,
    }
