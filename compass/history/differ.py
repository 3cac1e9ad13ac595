"""
Snapshot comparison.

For two snapshots (from -> to) this computes, for every axis, the start and
end score and the delta; the total shift (sum of absolute deltas, rounded to
3 decimals); the axis that moved most (ties go to the earlier axis in
canonical order); and the changelog text for the pair.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Any

from ..scoring.axes import AXES, Axis
from ..scoring.schema import Snapshot
from ..storage.interfaces import SnapshotStore
from .changelog import generate_changelog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AxisDelta:
    """Movement on one axis."""
    from_value: float
    to_value: float

    @property
    def delta(self) -> float:
        return self.to_value - self.from_value

    def to_dict(self) -> Dict[str, float]:
        return {"from": self.from_value, "to": self.to_value, "delta": self.delta}


@dataclass(frozen=True)
class SnapshotDiff:
    """
    Result of diffing two snapshots.

    Attributes:
        from_id: Earlier snapshot id
        to_id: Later snapshot id
        axes: Axis -> AxisDelta for all 8 axes
        total_shift: Sum of absolute deltas, rounded to 3 decimals
        biggest_shift: Axis with the largest absolute delta
        changelog: Text summary of the material changes
    """
    from_id: str
    to_id: str
    axes: Dict[Axis, AxisDelta]
    total_shift: float
    biggest_shift: Axis
    changelog: str

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary keyed by axis string value."""
        return {
            "from": self.from_id,
            "to": self.to_id,
            "axes": {axis.value: self.axes[axis].to_dict() for axis in AXES},
            "totalShift": self.total_shift,
            "biggestShift": self.biggest_shift.value,
            "changelog": self.changelog
        }


def diff_snapshots(from_snapshot: Snapshot, to_snapshot: Snapshot) -> SnapshotDiff:
    """
    Compare two snapshots.

    Args:
        from_snapshot: Baseline snapshot
        to_snapshot: Snapshot compared against the baseline

    Returns:
        SnapshotDiff
    """
    old = from_snapshot.vector.dimensions
    new = to_snapshot.vector.dimensions

    axes = {axis: AxisDelta(old[axis], new[axis]) for axis in AXES}

    total_shift = round(sum(abs(d.delta) for d in axes.values()), 3)

    # max() keeps the first maximal element, i.e. canonical order wins ties
    biggest_shift = max(AXES, key=lambda axis: abs(axes[axis].delta))

    return SnapshotDiff(
        from_id=from_snapshot.id,
        to_id=to_snapshot.id,
        axes=axes,
        total_shift=total_shift,
        biggest_shift=biggest_shift,
        changelog=generate_changelog(old, new)
    )


def diff_snapshot_ids(store: SnapshotStore, from_id: str, to_id: str) -> SnapshotDiff:
    """
    Resolve two snapshot ids and diff them.

    Raises:
        SnapshotNotFoundError: If either id is unknown
    """
    from_snapshot = store.get_snapshot(from_id)
    to_snapshot = store.get_snapshot(to_id)
    diff = diff_snapshots(from_snapshot, to_snapshot)
    logger.info(f"Diffed snapshots {from_id} -> {to_id}: total shift {diff.total_shift}")
    return diff
