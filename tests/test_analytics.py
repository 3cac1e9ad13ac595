"""
Tests for population analytics.
"""

import math

import pytest

from compass.analytics import aggregate_compass, axis_distribution, compass_trends, latest_vectors
from compass.scoring import AXES, Axis, CompassVector
from compass.storage import InMemorySnapshotStore

from conftest import make_vector, ts


class TestAggregateCompass:

    def test_empty_population(self):
        aggregate = aggregate_compass([])

        assert aggregate.sample_size == 0
        assert aggregate.dimensions == {axis: 0.0 for axis in AXES}

    def test_mean_per_axis(self):
        aggregate = aggregate_compass([
            make_vector(economy=0.5, justice=-1.0),
            make_vector(economy=-0.25, justice=0.0),
            make_vector(economy=1.0, justice=0.0),
        ])

        assert aggregate.sample_size == 3
        assert aggregate.dimensions[Axis.ECONOMY] == pytest.approx(0.4167)
        assert aggregate.dimensions[Axis.JUSTICE] == pytest.approx(-0.3333)
        assert aggregate.to_dict()["sampleSize"] == 3

    def test_latest_vectors(self):
        store = InMemorySnapshotStore()
        store.create_snapshot("u1", make_vector(economy=0.1), created_at=ts(2026, 1, 1))
        store.create_snapshot("u1", make_vector(economy=0.9), created_at=ts(2026, 2, 1))

        vectors = latest_vectors(["u1", "u2"], store)

        assert len(vectors) == 1
        assert vectors[0].dimensions[Axis.ECONOMY] == 0.9


class TestAxisDistribution:
    """Histogram buckets and summary statistics."""

    def test_one_value_per_bucket(self):
        vectors = [make_vector(economy=value) for value in (-1.0, -0.5, 0.0, 0.5, 1.0)]
        economy = axis_distribution(vectors)[Axis.ECONOMY.index]

        assert [b["count"] for b in economy.buckets] == [1, 1, 1, 1, 1]
        assert economy.mean == 0.0
        assert economy.median == 0.0
        assert economy.std_dev == pytest.approx(round(math.sqrt(0.5), 4))

    def test_bucket_edges(self):
        """Lower edges are inclusive; only the last bucket includes 1.0."""
        vectors = [make_vector(economy=value) for value in (-0.6, 0.2, 0.6, 1.0)]
        economy = axis_distribution(vectors)[Axis.ECONOMY.index]

        assert [b["count"] for b in economy.buckets] == [0, 1, 0, 1, 2]

    def test_upper_median(self):
        vectors = [make_vector(justice=value) for value in (1.0, -1.0, 0.5, 0.0)]
        justice = axis_distribution(vectors)[Axis.JUSTICE.index]

        assert justice.median == 0.5

    def test_empty_population(self):
        distributions = axis_distribution([])

        assert [d.axis for d in distributions] == list(AXES)
        assert all(b["count"] == 0 for d in distributions for b in d.buckets)
        assert distributions[0].mean == 0.0
        assert distributions[0].to_dict()["stdDev"] == 0.0


class TestCompassTrends:
    """Monthly means over a trailing window."""

    def _snapshots(self):
        store = InMemorySnapshotStore()
        store.create_snapshot("u1", make_vector(economy=0.5), created_at=ts(2026, 1, 5))
        store.create_snapshot("u2", make_vector(economy=-0.5, justice=1.0), created_at=ts(2026, 1, 20))
        store.create_snapshot("u1", make_vector(economy=1.0), created_at=ts(2026, 3, 1))
        store.create_snapshot("u3", make_vector(economy=-1.0), created_at=ts(2024, 6, 1))
        return store.list_all()

    def test_monthly_means(self):
        trends = compass_trends(self._snapshots(), months=12, now=ts(2026, 4, 1))

        assert [t.period for t in trends] == ["2026-01", "2026-03"]
        assert trends[0].sample_size == 2
        assert trends[0].dimensions[Axis.ECONOMY] == 0.0
        assert trends[0].dimensions[Axis.JUSTICE] == 0.5
        assert trends[1].dimensions[Axis.ECONOMY] == 1.0

    def test_window(self):
        trends = compass_trends(self._snapshots(), months=1, now=ts(2026, 3, 15))

        assert [t.period for t in trends] == ["2026-03"]

    def test_no_snapshots(self):
        assert compass_trends([], now=ts(2026, 1, 1)) == []

    def test_nothing_in_window(self):
        assert compass_trends(self._snapshots(), months=1, now=ts(2030, 1, 1)) == []

    def test_invalid_months(self):
        with pytest.raises(ValueError):
            compass_trends([], months=0)

    def test_serialized_point(self):
        point = compass_trends(self._snapshots(), now=ts(2026, 4, 1))[1].to_dict()

        assert point["period"] == "2026-03"
        assert point["sampleSize"] == 1
        assert list(point["dimensions"]) == [axis.value for axis in AXES]

    def test_zero_vector_snapshot(self):
        store = InMemorySnapshotStore()
        store.create_snapshot("u1", CompassVector.zeros(), created_at=ts(2026, 2, 2))

        trends = compass_trends(store.list_all(), now=ts(2026, 2, 3))

        assert trends[0].dimensions == {axis: 0.0 for axis in AXES}
