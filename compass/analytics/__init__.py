"""Analytics module for population-level compass statistics."""

from .aggregate import (
    AggregateCompass,
    AxisDistribution,
    TrendPoint,
    latest_vectors,
    aggregate_compass,
    axis_distribution,
    compass_trends,
)

__all__ = [
    "AggregateCompass",
    "AxisDistribution",
    "TrendPoint",
    "latest_vectors",
    "aggregate_compass",
    "axis_distribution",
    "compass_trends",
]
