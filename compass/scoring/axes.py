"""
Axis model for the civic compass.

Eight fixed scoring dimensions, each bounded to [-1, 1]. The definition
order of the enumeration is the canonical order used for display and for
deterministic tie-breaking.

Proposition weight vectors enter the engine through parse_weights(), which
rejects unknown axes and malformed weights instead of ignoring them, so the
question catalog and the scorer cannot drift apart silently.
"""

import logging
import math
from enum import Enum
from numbers import Real
from typing import Any, Dict, Mapping, Tuple, Union

from ..errors import InvalidWeightsError

logger = logging.getLogger(__name__)

AXIS_MIN = -1.0
AXIS_MAX = 1.0


class Axis(Enum):
    """Political orientation axes, in canonical order."""
    ECONOMY = "economy"
    GOVERNANCE = "governance"
    CIVIL_LIBERTIES = "civil_liberties"
    SOCIETY = "society"
    DIPLOMACY = "diplomacy"
    ENVIRONMENT = "environment"
    JUSTICE = "justice"
    TECHNOLOGY = "technology"

    @property
    def label(self) -> str:
        """Human readable name, e.g. "Civil Liberties"."""
        return self.value.replace("_", " ").title()

    @property
    def index(self) -> int:
        """Position in the canonical order."""
        return AXES.index(self)


AXES: Tuple[Axis, ...] = tuple(Axis)
NUM_AXES = len(AXES)


def parse_axis(value: Union[Axis, str]) -> Axis:
    """
    Convert an axis identifier to an Axis member.

    Args:
        value: Axis member or its string value (e.g. "civil_liberties")

    Returns:
        The matching Axis

    Raises:
        InvalidWeightsError: If the identifier is not one of the fixed axes
    """
    if isinstance(value, Axis):
        return value
    try:
        return Axis(value)
    except ValueError:
        raise InvalidWeightsError(f"Unknown axis: {value!r}") from None


def clamp(value: float, low: float = AXIS_MIN, high: float = AXIS_MAX) -> float:
    """Clamp a value into [low, high]."""
    return max(low, min(high, value))


def parse_weights(raw: Mapping[Any, Any]) -> Dict[Axis, float]:
    """
    Validate a proposition weight vector.

    A question loads on one or more axes with a weight in [-1, 1]. Weights
    are not normalized; cross-loadings are kept as given.

    Args:
        raw: Mapping from axis identifier to weight

    Returns:
        Dictionary keyed by Axis with float weights

    Raises:
        InvalidWeightsError: If the mapping is not a dict, names an unknown
            axis, or carries a non-numeric, non-finite or out-of-range weight
    """
    if not isinstance(raw, Mapping):
        raise InvalidWeightsError(
            f"Weight vector must be a mapping, got {type(raw).__name__}"
        )

    weights = {}
    for key, weight in raw.items():
        axis = parse_axis(key)
        if axis in weights:
            raise InvalidWeightsError(f"Duplicate weight for axis {axis.value}")
        if isinstance(weight, bool) or not isinstance(weight, Real):
            raise InvalidWeightsError(
                f"Weight for {axis.value} must be numeric, got {weight!r}"
            )
        weight = float(weight)
        if not math.isfinite(weight):
            raise InvalidWeightsError(f"Weight for {axis.value} is not finite: {weight}")
        if not AXIS_MIN <= weight <= AXIS_MAX:
            raise InvalidWeightsError(
                f"Weight for {axis.value} must be in [-1, 1], got {weight}"
            )
        weights[axis] = weight

    return weights

