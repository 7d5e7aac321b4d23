"""Compare two snapshots into a :class:`SnapshotDiff`. Performs no I/O."""

from __future__ import annotations

from typing import Optional

from .models import CONFIG_IDENTIFIERS, Snapshot, SnapshotDiff


def compare_snapshots(
    previous: Optional[Snapshot],
    current: Snapshot,
    *,
    limit: Optional[int] = None,
) -> SnapshotDiff:
    """Return the delta from ``previous`` to ``current``.

    Args:
        previous: Earlier snapshot, or ``None`` on the first run.
        current: Snapshot just taken.
        limit: Optional cap on how many new and removed files are listed.
            ``total_changes`` counts the listed entries.

    Returns:
        SnapshotDiff: The structured delta.
    """

    if previous is None:
        return SnapshotDiff(
            previous_snapshot_time=None,
            current_snapshot_time=current.generated_at,
            is_initial=True,
            total_changes=current.files_count,
            files_count_diff=current.files_count,
            dirs_count_diff=current.dirs_count,
        )

    # Older snapshots may lack a full listing; fall back to their important files.
    previous_files = (
        previous.file_list if previous.file_list is not None else previous.important_files
    )
    current_files = current.file_list or []
    previous_set = set(previous_files)
    current_set = set(current_files)

    new_files = list(dict.fromkeys(path for path in current_files if path not in previous_set))
    removed_files = list(dict.fromkeys(path for path in previous_files if path not in current_set))
    if limit is not None:
        new_files = new_files[:limit]
        removed_files = removed_files[:limit]

    changed_configs = detect_config_changes(previous, current)

    return SnapshotDiff(
        previous_snapshot_time=previous.generated_at,
        current_snapshot_time=current.generated_at,
        is_initial=False,
        new_files=new_files,
        removed_files=removed_files,
        changed_configs=changed_configs,
        language_stats_diff=language_stats_delta(previous.language_stats, current.language_stats),
        total_changes=len(new_files) + len(removed_files) + len(changed_configs),
        files_count_diff=current.files_count - previous.files_count,
        dirs_count_diff=current.dirs_count - previous.dirs_count,
    )


def detect_config_changes(previous: Snapshot, current: Snapshot) -> list[str]:
    """Return identifiers of recognized config files whose summaries differ."""
    return [
        identifier
        for field_name, identifier in CONFIG_IDENTIFIERS.items()
        if getattr(previous.config_files, field_name) != getattr(current.config_files, field_name)
    ]


def language_stats_delta(previous: dict[str, int], current: dict[str, int]) -> dict[str, int]:
    """Return signed per-extension deltas, omitting extensions that did not change."""
    delta: dict[str, int] = {}
    for extension in dict.fromkeys([*previous, *current]):
        change = current.get(extension, 0) - previous.get(extension, 0)
        if change:
            delta[extension] = change
    return delta


__all__ = ["compare_snapshots", "detect_config_changes", "language_stats_delta"]
