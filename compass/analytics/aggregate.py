"""
Population analytics over compass vectors.

Only discoverable users contribute; callers pass in the vectors (or
snapshots) they are allowed to aggregate.

Outputs:
- Aggregate compass: per-axis mean of users' latest vectors
- Distribution: per-axis histogram over 5 fixed buckets with mean, median
  and standard deviation
- Trends: monthly per-axis mean over snapshots within a time window
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, Any, Iterable, List, Optional

import numpy as np
import pandas as pd

from ..scoring.axes import AXES, Axis
from ..scoring.schema import CompassVector, Snapshot, utcnow
from ..storage.interfaces import SnapshotStore

logger = logging.getLogger(__name__)

# (label, min, max); the last bucket includes its upper bound
BUCKETS = [
    ("-1.0 – -0.6", -1.0, -0.6),
    ("-0.6 – -0.2", -0.6, -0.2),
    ("-0.2 – 0.2", -0.2, 0.2),
    ("0.2 – 0.6", 0.2, 0.6),
    ("0.6 – 1.0", 0.6, 1.0),
]


@dataclass
class AggregateCompass:
    """Mean compass of a population."""
    dimensions: Dict[Axis, float]
    sample_size: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "dimensions": {axis.value: self.dimensions[axis] for axis in AXES},
            "sampleSize": self.sample_size
        }


@dataclass
class AxisDistribution:
    """Histogram and summary statistics of one axis."""
    axis: Axis
    buckets: List[Dict[str, Any]]
    mean: float
    median: float
    std_dev: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "axis": self.axis.value,
            "buckets": self.buckets,
            "mean": self.mean,
            "median": self.median,
            "stdDev": self.std_dev
        }


@dataclass
class TrendPoint:
    """Mean compass for one calendar month."""
    period: str  # e.g. "2026-01"
    dimensions: Dict[Axis, float] = field(default_factory=dict)
    sample_size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "period": self.period,
            "dimensions": {axis.value: self.dimensions[axis] for axis in AXES},
            "sampleSize": self.sample_size
        }


def _matrix(vectors: List[CompassVector]) -> np.ndarray:
    if not vectors:
        return np.zeros((0, len(AXES)))
    return np.vstack([v.to_array() for v in vectors])


def latest_vectors(user_ids: Iterable[str], snapshots: SnapshotStore) -> List[CompassVector]:
    """Latest snapshot vector of each user who has one."""
    vectors = []
    for user_id in user_ids:
        latest = snapshots.get_latest_snapshot(user_id)
        if latest is not None:
            vectors.append(latest.vector)
    return vectors


def aggregate_compass(vectors: List[CompassVector]) -> AggregateCompass:
    """
    Average compass across vectors.

    Returns:
        AggregateCompass with means rounded to 4 decimals; all zeros and a
        sample size of 0 when there are no vectors
    """
    if not vectors:
        return AggregateCompass({axis: 0.0 for axis in AXES}, 0)

    means = _matrix(vectors).mean(axis=0)
    return AggregateCompass(
        dimensions={axis: round(float(means[axis.index]), 4) for axis in AXES},
        sample_size=len(vectors)
    )


def axis_distribution(vectors: List[CompassVector]) -> List[AxisDistribution]:
    """
    Per-axis histograms over BUCKETS.

    Median is the upper median (element n // 2 of the sorted values) and the
    standard deviation is the population standard deviation.
    """
    matrix = _matrix(vectors)
    n = len(vectors)

    distributions = []
    for axis in AXES:
        values = np.sort(matrix[:, axis.index])

        buckets = []
        for i, (label, low, high) in enumerate(BUCKETS):
            if i == len(BUCKETS) - 1:
                count = int(np.sum((values >= low) & (values <= high)))
            else:
                count = int(np.sum((values >= low) & (values < high)))
            buckets.append({"range": label, "min": low, "max": high, "count": count})

        mean = float(values.mean()) if n else 0.0
        median = float(values[n // 2]) if n else 0.0
        std_dev = float(values.std()) if n else 0.0

        distributions.append(AxisDistribution(
            axis=axis,
            buckets=buckets,
            mean=round(mean, 4),
            median=round(median, 4),
            std_dev=round(std_dev, 4)
        ))

    return distributions


def compass_trends(
    snapshots: Iterable[Snapshot],
    months: int = 12,
    now: Optional[datetime] = None
) -> List[TrendPoint]:
    """
    Monthly mean compass over snapshots created in the last `months` months.

    Args:
        snapshots: Snapshots to aggregate
        months: Window length in calendar months
        now: End of the window (defaults to current UTC time)

    Returns:
        TrendPoints in ascending period order
    """
    if months < 1:
        raise ValueError(f"months must be >= 1, got {months}")

    now = pd.Timestamp(now or utcnow())
    if now.tzinfo is None:
        now = now.tz_localize("UTC")
    since = now - pd.DateOffset(months=months)

    rows = []
    for snapshot in snapshots:
        row = {axis.value: snapshot.vector.dimensions[axis] for axis in AXES}
        row["created_at"] = snapshot.created_at
        rows.append(row)

    if not rows:
        return []

    df = pd.DataFrame(rows)
    df["created_at"] = pd.to_datetime(df["created_at"], utc=True)
    df = df[df["created_at"] >= since].copy()
    if df.empty:
        return []

    df["period"] = df["created_at"].dt.strftime("%Y-%m")
    axis_columns = [axis.value for axis in AXES]
    grouped = df.groupby("period", sort=True)
    means = grouped[axis_columns].mean()
    counts = grouped.size()

    trends = []
    for period, row in means.iterrows():
        trends.append(TrendPoint(
            period=period,
            dimensions={axis: round(float(row[axis.value]), 4) for axis in AXES},
            sample_size=int(counts[period])
        ))

    logger.info(f"Computed {len(trends)} trend points from {len(df)} snapshots")
    return trends
