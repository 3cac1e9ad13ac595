"""
Saving and listing compass snapshots.

A snapshot freezes the user's live compass. Its changelog is computed
against the user's previous snapshot in the same scope, so the history
reads as a sequence of deltas.
"""

import logging
from datetime import datetime
from typing import List, Optional

from ..scoring.calculator import calculate_compass
from ..scoring.schema import CompassVector, Snapshot, utcnow
from ..storage.interfaces import ResponseSource, SnapshotStore
from .changelog import generate_changelog

logger = logging.getLogger(__name__)


def default_snapshot_name(now: datetime) -> str:
    """Name used when the user does not provide one, e.g. "Snapshot 2026-02-23"."""
    return f"Snapshot {now.date().isoformat()}"


def current_compass(
    user_id: str,
    responses: ResponseSource,
    scope: Optional[str] = None
) -> CompassVector:
    """Live compass from the user's current answers."""
    return calculate_compass(responses.list_responses(user_id, scope))


def save_snapshot(
    user_id: str,
    responses: ResponseSource,
    snapshots: SnapshotStore,
    name: Optional[str] = None,
    scope: Optional[str] = None,
    now: Optional[datetime] = None
) -> Snapshot:
    """
    Freeze the user's live compass as a new snapshot.

    Args:
        user_id: Owner of the snapshot
        responses: Source of the user's answers
        snapshots: Store receiving the snapshot
        name: Optional name; defaults to "Snapshot YYYY-MM-DD"
        scope: Optional questionnaire to restrict answers to
        now: Creation time (defaults to current UTC time)

    Returns:
        The created Snapshot
    """
    now = now or utcnow()
    vector = current_compass(user_id, responses, scope)

    previous = snapshots.get_latest_snapshot(user_id, scope)
    changelog = generate_changelog(
        previous.vector.dimensions if previous else None,
        vector.dimensions
    )

    snapshot = snapshots.create_snapshot(
        user_id,
        vector,
        name=name or default_snapshot_name(now),
        changelog=changelog,
        scope=scope,
        created_at=now
    )
    logger.info(f"Saved snapshot {snapshot.id} for user {user_id}: {changelog}")
    return snapshot


def snapshot_history(
    user_id: str,
    snapshots: SnapshotStore,
    scope: Optional[str] = None
) -> List[Snapshot]:
    """All snapshots of a user, newest first."""
    return snapshots.list_snapshots(user_id, scope)
