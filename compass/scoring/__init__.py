"""
Scoring module for compass calculation.

This module provides the axis model, the response and vector data
structures, and the calculator that turns answers into a CompassVector.
"""

from .axes import Axis, AXES, NUM_AXES, parse_axis, parse_weights
from .schema import Response, CompassVector, Snapshot
from .calculator import calculate_compass

__all__ = [
    "Axis",
    "AXES",
    "NUM_AXES",
    "parse_axis",
    "parse_weights",
    "Response",
    "CompassVector",
    "Snapshot",
    "calculate_compass",
]
