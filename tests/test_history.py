"""
Tests for snapshot history: changelog text, snapshot diffs and saving.
"""

from datetime import timezone

import pytest

from compass.errors import SnapshotNotFoundError
from compass.history import (
    INITIAL_SNAPSHOT,
    NO_SIGNIFICANT_CHANGE,
    default_snapshot_name,
    diff_snapshot_ids,
    diff_snapshots,
    generate_changelog,
    save_snapshot,
    snapshot_history,
)
from compass.scoring import AXES, Axis
from compass.storage import InMemoryResponseStore, InMemorySnapshotStore

from conftest import make_vector, ts


class TestGenerateChangelog:
    """Text summary of per-axis movement."""

    def test_no_previous_snapshot(self):
        assert generate_changelog(None, {"economy": 0.5}) == INITIAL_SNAPSHOT

    def test_identical_vectors(self):
        dims = {"economy": 0.5, "justice": -0.2}
        assert generate_changelog(dims, dims) == NO_SIGNIFICANT_CHANGE

    def test_changes_below_threshold_are_dropped(self):
        """A move of exactly 0.01 is not material; the threshold is strict."""
        old = {"economy": 0.50, "justice": 0.0}
        new = {"economy": 0.505, "justice": 0.01}

        assert generate_changelog(old, new) == NO_SIGNIFICANT_CHANGE

    def test_exact_threshold_move_with_float_noise(self):
        """0.51 - 0.5 is slightly above 0.01 in floating point but is not material."""
        assert generate_changelog({"economy": 0.5}, {"economy": 0.51}) == NO_SIGNIFICANT_CHANGE
        assert generate_changelog({"economy": 0.5}, {"economy": 0.49}) == NO_SIGNIFICANT_CHANGE
        assert generate_changelog({"economy": 0.5}, {"economy": 0.52}) == "Economy ↑ 0.02"

    def test_format_and_canonical_order(self):
        """Entries use the axis label, an arrow and two decimals."""
        old = {"justice": 0.3, "economy": 0.0}
        new = {"justice": 0.2, "economy": 0.25}

        assert generate_changelog(old, new) == "Economy ↑ 0.25, Justice ↓ 0.10"

    def test_missing_axes_read_as_zero(self):
        assert generate_changelog({}, {"civil_liberties": -0.5}) == "Civil Liberties ↓ 0.50"

    def test_custom_threshold(self):
        assert generate_changelog({"economy": 0.0}, {"economy": 0.05}, threshold=0.1) == NO_SIGNIFICANT_CHANGE


class TestDiffSnapshots:
    """Per-axis deltas, total shift and biggest mover."""

    def _store(self):
        store = InMemorySnapshotStore()
        store.create_snapshot(
            "u1", make_vector(economy=0.25, justice=-0.4),
            created_at=ts(2026, 1, 1), snapshot_id="s1"
        )
        store.create_snapshot(
            "u1", make_vector(economy=0.75, justice=-0.4, technology=-0.5),
            created_at=ts(2026, 2, 1), snapshot_id="s2"
        )
        return store

    def test_self_diff_is_empty(self):
        """Diffing a snapshot against itself shows no movement."""
        store = self._store()
        diff = diff_snapshot_ids(store, "s1", "s1")

        assert diff.total_shift == 0
        assert diff.changelog == NO_SIGNIFICANT_CHANGE
        assert all(delta.delta == 0 for delta in diff.axes.values())

    def test_deltas_and_total_shift(self):
        store = self._store()
        diff = diff_snapshot_ids(store, "s1", "s2")

        assert diff.axes[Axis.ECONOMY].from_value == pytest.approx(0.25)
        assert diff.axes[Axis.ECONOMY].to_value == pytest.approx(0.75)
        assert diff.axes[Axis.ECONOMY].delta == pytest.approx(0.5)
        assert diff.axes[Axis.JUSTICE].delta == 0
        assert diff.total_shift == pytest.approx(1.0)
        assert diff.changelog == "Economy ↑ 0.50, Technology ↓ 0.50"

    def test_biggest_shift_tie_goes_to_earlier_axis(self):
        """Economy and technology both moved 0.5; economy comes first."""
        store = self._store()
        diff = diff_snapshot_ids(store, "s1", "s2")

        assert diff.biggest_shift is Axis.ECONOMY

    def test_direction_matters(self):
        store = self._store()
        forward = diff_snapshot_ids(store, "s1", "s2")
        backward = diff_snapshot_ids(store, "s2", "s1")

        assert backward.axes[Axis.ECONOMY].delta == pytest.approx(-forward.axes[Axis.ECONOMY].delta)
        assert backward.total_shift == forward.total_shift

    def test_total_shift_rounded(self):
        store = InMemorySnapshotStore()
        a = store.create_snapshot("u1", make_vector(economy=0.0), snapshot_id="a")
        b = store.create_snapshot("u1", make_vector(economy=0.12345), snapshot_id="b")

        assert diff_snapshots(a, b).total_shift == 0.123

    def test_unknown_snapshot(self):
        store = self._store()
        with pytest.raises(SnapshotNotFoundError) as exc_info:
            diff_snapshot_ids(store, "s1", "missing")

        assert exc_info.value.snapshot_id == "missing"

    def test_serialized_shape(self):
        data = diff_snapshot_ids(self._store(), "s1", "s2").to_dict()

        assert data["from"] == "s1"
        assert data["to"] == "s2"
        assert list(data["axes"]) == [axis.value for axis in AXES]
        assert set(data["axes"]["economy"]) == {"from", "to", "delta"}
        assert data["biggestShift"] == "economy"
        assert data["totalShift"] == pytest.approx(1.0)


class TestSaveSnapshot:
    """Freezing the live compass."""

    def _responses(self):
        responses = InMemoryResponseStore()
        responses.add_question("q1", {"economy": 0.8}, questionnaire_id="quick")
        responses.add_question("q2", {"justice": -0.6}, questionnaire_id="quick")
        responses.add_question("q3", {"technology": 0.5}, questionnaire_id="digital")
        return responses

    def test_first_snapshot_is_initial(self):
        responses = self._responses()
        snapshots = InMemorySnapshotStore()
        responses.submit_response("u1", "q1", 1)

        snapshot = save_snapshot("u1", responses, snapshots, now=ts(2026, 2, 23))

        assert snapshot.changelog == INITIAL_SNAPSHOT
        assert snapshot.name == "Snapshot 2026-02-23"
        assert snapshot.vector.dimensions[Axis.ECONOMY] == pytest.approx(1.0)

    def test_changelog_against_previous(self):
        responses = self._responses()
        snapshots = InMemorySnapshotStore()
        responses.submit_response("u1", "q1", 1)
        save_snapshot("u1", responses, snapshots, now=ts(2026, 1, 1))

        responses.submit_response("u1", "q1", 0.5)
        responses.submit_response("u1", "q2", 1)
        second = save_snapshot("u1", responses, snapshots, name="Later", now=ts(2026, 2, 1))

        assert second.name == "Later"
        assert second.changelog == "Economy ↓ 0.50, Justice ↓ 1.00"

    def test_unchanged_answers(self):
        responses = self._responses()
        snapshots = InMemorySnapshotStore()
        responses.submit_response("u1", "q1", 1)
        save_snapshot("u1", responses, snapshots, now=ts(2026, 1, 1))

        again = save_snapshot("u1", responses, snapshots, now=ts(2026, 1, 2))

        assert again.changelog == NO_SIGNIFICANT_CHANGE

    def test_scoped_snapshot_compares_within_scope(self):
        """A digital-scope snapshot ignores earlier unscoped snapshots."""
        responses = self._responses()
        snapshots = InMemorySnapshotStore()
        responses.submit_response("u1", "q1", 1)
        responses.submit_response("u1", "q3", 1)
        save_snapshot("u1", responses, snapshots, now=ts(2026, 1, 1))

        scoped = save_snapshot("u1", responses, snapshots, scope="digital", now=ts(2026, 1, 2))

        assert scoped.changelog == INITIAL_SNAPSHOT
        assert scoped.scope == "digital"
        assert scoped.vector.dimensions[Axis.ECONOMY] == 0.0
        assert scoped.vector.dimensions[Axis.TECHNOLOGY] == pytest.approx(1.0)

    def test_history_newest_first(self):
        responses = self._responses()
        snapshots = InMemorySnapshotStore()
        responses.submit_response("u1", "q1", 1)
        first = save_snapshot("u1", responses, snapshots, now=ts(2026, 1, 1))
        second = save_snapshot("u1", responses, snapshots, now=ts(2026, 3, 1))

        assert [s.id for s in snapshot_history("u1", snapshots)] == [second.id, first.id]
        assert snapshot_history("someone-else", snapshots) == []

    def test_default_timestamp_is_aware_utc(self):
        responses = self._responses()
        responses.submit_response("u1", "q1", 1)

        snapshot = save_snapshot("u1", responses, InMemorySnapshotStore())

        assert snapshot.created_at.tzinfo is timezone.utc
        assert snapshot.name == default_snapshot_name(snapshot.created_at)

    def test_default_name(self):
        assert default_snapshot_name(ts(2026, 10, 5)) == "Snapshot 2026-10-05"
