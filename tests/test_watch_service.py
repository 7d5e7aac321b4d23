"""Tests for the continuous analysis service."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Callable

from docpulse.analysis import AnalysisResult, WorkspaceAnalyzer
from docpulse.config import DocpulseConfig, WatcherSettings
from docpulse.watch import ManualWatchHost, WatcherOptions, WatchService


def _service(
    root: Path,
    results: list[AnalysisResult],
    *,
    enabled: bool = True,
    host: ManualWatchHost | None = None,
) -> WatchService:
    config = DocpulseConfig()
    return WatchService(
        WorkspaceAnalyzer(config),
        [root],
        settings=WatcherSettings(enabled=enabled, debounce_ms=20),
        options=WatcherOptions(
            report_directory=config.scan.report_directory,
            snapshot_file=config.scan.snapshot_file,
        ),
        on_result=results.append,
        host=host,
    )


async def _wait_until(condition: Callable[[], bool], timeout: float = 5.0) -> None:
    async def poll() -> None:
        while not condition():
            await asyncio.sleep(0.01)

    await asyncio.wait_for(poll(), timeout)


def test_each_run_lists_files_afresh_and_diffs_against_the_last(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    (root / "a.py").write_text("", encoding="utf-8")
    results: list[AnalysisResult] = []
    service = _service(root, results)

    async def scenario() -> tuple[AnalysisResult, AnalysisResult]:
        first = await service.run_for_root(root)
        (root / "b.py").write_text("# TODO later\n", encoding="utf-8")
        second = await service.run_for_root(root)
        return first, second

    first, second = asyncio.run(scenario())

    assert first.diff.is_initial is True
    assert second.diff.is_initial is False
    assert second.diff.new_files == ["b.py"]
    assert [item.file for item in second.snapshot.findings] == ["b.py"]
    assert results == [first, second]


def test_suppressed_runs_are_not_reported(tmp_path: Path) -> None:
    results: list[AnalysisResult] = []
    service = _service(tmp_path, results)

    asyncio.run(service.run_for_root(tmp_path.resolve(), suppress_notifications=True))

    assert results == []


def test_serve_reanalyzes_after_changes_until_stopped(tmp_path: Path) -> None:
    root = tmp_path.resolve()
    (root / "a.py").write_text("", encoding="utf-8")
    results: list[AnalysisResult] = []
    host = ManualWatchHost()
    service = _service(root, results, host=host)

    async def scenario() -> None:
        stop = asyncio.Event()
        serving = asyncio.create_task(service.serve(stop))
        await _wait_until(lambda: bool(host.subscribed_roots))
        assert len(results) == 1

        (root / "b.py").write_text("", encoding="utf-8")
        host.emit(root / "b.py")
        await _wait_until(lambda: len(results) == 2)

        stop.set()
        await serving

    asyncio.run(scenario())

    assert results[0].diff.is_initial is True
    assert results[1].diff.new_files == ["b.py"]
    assert host.subscribed_roots == []


def test_serve_with_watcher_disabled_runs_a_single_pass(tmp_path: Path) -> None:
    results: list[AnalysisResult] = []
    host = ManualWatchHost()
    service = _service(tmp_path, results, enabled=False, host=host)

    asyncio.run(service.serve())

    assert len(results) == 1
    assert service.scheduler is None
    assert host.subscribed_roots == []
