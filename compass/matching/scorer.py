"""
Pairwise match scoring between two compass vectors.

All three modes build on Euclidean distance between vectors bounded to
[-1, 1] per axis. Over n axes the largest possible distance is sqrt(4n),
since each axis can differ by at most 2.

    closeness(a, b) = max(0, 1 - distance(a, b) / max_distance)

Modes:
- mirror:     closeness(a, b)
- challenger: closeness(-a, b); the ideal candidate is the requester's opposite
- complement: 0.6 * closeness on core axes (governance, justice)
              + 0.4 * normalized distance on the 6 operational axes

The complement operational term is a raw normalized distance, not a
closeness: candidates who share core values but diverge on everyday
policy score highest.
"""

import math
from enum import Enum
from typing import Mapping, Sequence, Union

import numpy as np

from ..scoring.axes import AXES, Axis
from ..scoring.schema import CompassVector

CORE_AXES = (Axis.GOVERNANCE, Axis.JUSTICE)
OPERATIONAL_AXES = tuple(axis for axis in AXES if axis not in CORE_AXES)

CORE_WEIGHT = 0.6
OPERATIONAL_WEIGHT = 0.4

VectorLike = Union[CompassVector, Mapping[Union[Axis, str], float]]


class MatchMode(Enum):
    """Matching semantics."""
    MIRROR = "mirror"               # Similar views on every axis
    CHALLENGER = "challenger"       # Opposite views on every axis
    COMPLEMENT = "complement"       # Shared core values, diverse operational views


def _values(vector: VectorLike, axes: Sequence[Axis]) -> np.ndarray:
    """
    Scores for the given axes.

    Plain mappings go through CompassVector, so missing axes read as 0,
    values are clamped to [-1, 1] and NaN raises ValueError.
    """
    if not isinstance(vector, CompassVector):
        vector = CompassVector(dimensions=dict(vector))
    return np.array([vector.dimensions[axis] for axis in axes], dtype=float)


def max_distance(n_axes: int) -> float:
    """Largest Euclidean distance between two vectors in [-1, 1]^n."""
    return math.sqrt(n_axes * 4)


def euclidean_distance(a: VectorLike, b: VectorLike, axes: Sequence[Axis] = AXES) -> float:
    """Euclidean distance between two vectors restricted to the given axes."""
    return float(np.linalg.norm(_values(a, axes) - _values(b, axes)))


def closeness(a: VectorLike, b: VectorLike, axes: Sequence[Axis] = AXES) -> float:
    """1 - distance / max_distance, floored at 0."""
    return max(0.0, 1.0 - euclidean_distance(a, b, axes) / max_distance(len(axes)))


def _negate(vector: VectorLike) -> dict:
    return {axis: -value for axis, value in zip(AXES, _values(vector, AXES))}


def mirror_score(a: VectorLike, b: VectorLike) -> float:
    """Rewards similarity across all axes equally."""
    return closeness(a, b)


def challenger_score(a: VectorLike, b: VectorLike) -> float:
    """Rewards candidates positioned at the requester's exact opposite."""
    return closeness(_negate(a), b)


def complement_score(a: VectorLike, b: VectorLike) -> float:
    """
    Rewards shared core values combined with operational diversity.

    Formula:
        core_alignment = closeness(a, b) over CORE_AXES
        operational_diversity = distance(a, b) / max_distance over OPERATIONAL_AXES
        score = 0.6 * core_alignment + 0.4 * operational_diversity
    """
    core_alignment = closeness(a, b, CORE_AXES)
    operational_diversity = (
        euclidean_distance(a, b, OPERATIONAL_AXES) / max_distance(len(OPERATIONAL_AXES))
    )
    return CORE_WEIGHT * core_alignment + OPERATIONAL_WEIGHT * operational_diversity


_SCORERS = {
    MatchMode.MIRROR: mirror_score,
    MatchMode.CHALLENGER: challenger_score,
    MatchMode.COMPLEMENT: complement_score,
}


def parse_mode(mode: Union[MatchMode, str]) -> MatchMode:
    """Convert a mode name to MatchMode. Raises ValueError for unknown modes."""
    if isinstance(mode, MatchMode):
        return mode
    return MatchMode(mode)


def score_match(a: VectorLike, b: VectorLike, mode: Union[MatchMode, str]) -> float:
    """
    Score a candidate against a requester.

    Args:
        a: Requester vector
        b: Candidate vector
        mode: MatchMode or its string value

    Returns:
        Score in [0, 1]; 1 is a perfect match for the mode

    Raises:
        ValueError: If mode is not one of the three match modes, or a
            mapping input carries a NaN score
    """
    score = _SCORERS[parse_mode(mode)](a, b)
    return float(np.clip(score, 0.0, 1.0))
