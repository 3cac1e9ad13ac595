"""
Human readable summaries of compass changes.

Format:
    "Economy ↑ 0.25, Justice ↓ 0.10"

Only axes whose absolute change exceeds the materiality threshold are
listed, in canonical axis order.
"""

from typing import Mapping, Optional, Union

from ..scoring.axes import AXES, Axis, parse_axis

MATERIALITY_THRESHOLD = 0.01
INITIAL_SNAPSHOT = "Initial snapshot"
NO_SIGNIFICANT_CHANGE = "No significant changes"

AxisMapping = Mapping[Union[Axis, str], float]


def _by_axis(dimensions: AxisMapping) -> dict:
    return {parse_axis(k): float(v) for k, v in dimensions.items()}


def generate_changelog(
    old_dimensions: Optional[AxisMapping],
    new_dimensions: AxisMapping,
    threshold: float = MATERIALITY_THRESHOLD
) -> str:
    """
    Summarize per-axis shifts between two vectors.

    Args:
        old_dimensions: Previous scores, or None for a first snapshot
        new_dimensions: Current scores
        threshold: Minimum absolute change that is reported

    Returns:
        Comma-joined shifts, INITIAL_SNAPSHOT or NO_SIGNIFICANT_CHANGE
    """
    if old_dimensions is None:
        return INITIAL_SNAPSHOT

    old = _by_axis(old_dimensions)
    new = _by_axis(new_dimensions)

    parts = []
    for axis in AXES:
        delta = new.get(axis, 0.0) - old.get(axis, 0.0)
        # Rounded so float noise such as 0.51 - 0.5 does not cross the threshold
        if round(abs(delta), 6) > threshold:
            arrow = "↑" if delta > 0 else "↓"
            parts.append(f"{axis.label} {arrow} {abs(delta):.2f}")

    return ", ".join(parts) if parts else NO_SIGNIFICANT_CHANGE
