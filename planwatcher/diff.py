"""Diff utilities for comparing scraped snapshots."""

from __future__ import annotations

from typing import Any, List, Optional, Sequence

from .models import Change, FloorPlan, JSONPath, SnapshotDiff, snapshot_to_data

ADDED = "added"
REMOVED = "removed"
MODIFIED = "modified"


def _diff_values(
    previous: Any,
    current: Any,
    path: JSONPath,
    changes: List[Change],
) -> None:
    if isinstance(previous, list) and isinstance(current, list):
        for index in range(max(len(previous), len(current))):
            item_path = path + (index,)
            if index >= len(previous):
                changes.append(Change(item_path, ADDED, current=current[index]))
            elif index >= len(current):
                changes.append(Change(item_path, REMOVED, previous=previous[index]))
            else:
                _diff_values(previous[index], current[index], item_path, changes)
        return

    if isinstance(previous, dict) and isinstance(current, dict):
        for key in previous:
            if key not in current:
                changes.append(Change(path + (key,), REMOVED, previous=previous[key]))
        for key, value in current.items():
            if key not in previous:
                changes.append(Change(path + (key,), ADDED, current=value))
            else:
                _diff_values(previous[key], value, path + (key,), changes)
        return

    if type(previous) is not type(current) or previous != current:
        changes.append(Change(path, MODIFIED, previous=previous, current=current))


def diff_snapshots(
    previous: Optional[Sequence[FloorPlan]],
    current: Sequence[FloorPlan],
) -> SnapshotDiff:
    """Compute the positional, structural differences between two snapshots."""
    changes: List[Change] = []
    _diff_values(
        snapshot_to_data(previous or []),
        snapshot_to_data(current),
        (),
        changes,
    )
    return SnapshotDiff(changes=changes)


def has_changed(
    previous: Optional[Sequence[FloorPlan]],
    current: Sequence[FloorPlan],
) -> bool:
    """Return True when the snapshots differ in any field, count or order."""
    return bool(diff_snapshots(previous, current))


def describe_changes(diff: SnapshotDiff, limit: int = 10) -> List[str]:
    """Render the first ``limit`` changes as short log-friendly lines."""
    lines = []
    for change in diff.changes[:limit]:
        location = "/".join(str(part) for part in change.path) or "/"
        if change.kind == ADDED:
            lines.append(f"+ {location}: {change.current!r}")
        elif change.kind == REMOVED:
            lines.append(f"- {location}: {change.previous!r}")
        else:
            lines.append(f"~ {location}: {change.previous!r} -> {change.current!r}")
    if len(diff.changes) > limit:
        lines.append(f"... and {len(diff.changes) - limit} more")
    return lines
