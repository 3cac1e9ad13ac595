"""History module: snapshot saving, changelogs and snapshot diffs."""

from .changelog import (
    generate_changelog,
    MATERIALITY_THRESHOLD,
    INITIAL_SNAPSHOT,
    NO_SIGNIFICANT_CHANGE,
)
from .differ import AxisDelta, SnapshotDiff, diff_snapshots, diff_snapshot_ids
from .snapshots import current_compass, save_snapshot, snapshot_history, default_snapshot_name

__all__ = [
    "generate_changelog",
    "MATERIALITY_THRESHOLD",
    "INITIAL_SNAPSHOT",
    "NO_SIGNIFICANT_CHANGE",
    "AxisDelta",
    "SnapshotDiff",
    "diff_snapshots",
    "diff_snapshot_ids",
    "current_compass",
    "save_snapshot",
    "snapshot_history",
    "default_snapshot_name",
]
