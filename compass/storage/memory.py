"""
In-process implementations of the collaborator contracts.

These back the command line runner and the test suite. They follow the
same rules a database-backed implementation must follow:
- One response per (user, question); re-answering overwrites
- Snapshots are immutable once created and listed newest first
- Only PUBLIC and SELECTIVE users are discoverable
- Wallet addresses are masked unless the connection was accepted
"""

import itertools
import logging
import math
import threading
import uuid
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Dict, List, Optional, Tuple, Mapping, Any

from ..errors import SnapshotNotFoundError
from ..scoring.axes import Axis, clamp, parse_weights
from ..scoring.schema import CompassVector, Response, Snapshot, utcnow
from .interfaces import Identity

logger = logging.getLogger(__name__)


class SharingMode(Enum):
    """Profile visibility options."""
    GHOST = "GHOST"             # Hidden from matching and analytics
    PUBLIC = "PUBLIC"
    SELECTIVE = "SELECTIVE"


DISCOVERABLE_MODES = (SharingMode.PUBLIC, SharingMode.SELECTIVE)


class ConnectionStatus(Enum):
    """Connection request states."""
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    DECLINED = "DECLINED"
    CANCELLED = "CANCELLED"


def mask_address(address: Optional[str]) -> Optional[str]:
    """
    Mask a wallet address for display, e.g. 0x1234...abcd.

    Addresses of 10 characters or fewer are returned unchanged.
    """
    if address is None or len(address) <= 10:
        return address
    return f"{address[:6]}...{address[-4:]}"


@dataclass
class Question:
    """A proposition in the catalog."""
    id: str
    weights: Dict[Axis, float]
    questionnaire_id: Optional[str] = None
    text: str = ""

    def __post_init__(self):
        """Validate weights at registration time."""
        self.weights = parse_weights(self.weights)


class InMemoryResponseStore:
    """
    Question catalog plus per-user answers.

    Attributes:
        questions: question_id -> Question
    """

    def __init__(self):
        self.questions: Dict[str, Question] = {}
        self._answers: Dict[Tuple[str, str], Tuple[float, datetime]] = {}
        self._lock = threading.Lock()

    def add_question(
        self,
        question_id: str,
        weights: Mapping[Any, float],
        questionnaire_id: Optional[str] = None,
        text: str = ""
    ) -> Question:
        """Register a proposition. Raises InvalidWeightsError on bad weights."""
        question = Question(question_id, dict(weights), questionnaire_id, text)
        self.questions[question_id] = question
        return question

    def submit_response(
        self,
        user_id: str,
        question_id: str,
        answer_value: float,
        answered_at: Optional[datetime] = None
    ) -> Response:
        """
        Record an answer, replacing any earlier answer to the same question.

        Raises:
            KeyError: If the question is not in the catalog
            InvalidWeightsError: If the answer is not a finite number
        """
        if question_id not in self.questions:
            raise KeyError(f"Unknown question: {question_id}")
        question = self.questions[question_id]
        answered_at = answered_at or utcnow()
        response = Response(question_id, question.weights, answer_value, answered_at)
        with self._lock:
            self._answers[(user_id, question_id)] = (response.answer_value, answered_at)
        return response

    def list_responses(self, user_id: str, scope: Optional[str] = None) -> List[Response]:
        """Current answers for a user, optionally limited to one questionnaire."""
        with self._lock:
            answers = [
                (question_id, value, answered_at)
                for (uid, question_id), (value, answered_at) in self._answers.items()
                if uid == user_id
            ]

        responses = []
        for question_id, value, answered_at in answers:
            question = self.questions[question_id]
            if scope is not None and question.questionnaire_id != scope:
                continue
            responses.append(Response(question_id, question.weights, value, answered_at))
        return responses

    def reset_for_scope(self, user_id: str, scope: str) -> int:
        """Delete a user's answers for one questionnaire. Returns the count removed."""
        with self._lock:
            keys = [
                key for key in self._answers
                if key[0] == user_id and self.questions[key[1]].questionnaire_id == scope
            ]
            for key in keys:
                del self._answers[key]
        logger.info(f"Reset {len(keys)} responses for user {user_id} in {scope}")
        return len(keys)


class InMemorySnapshotStore:
    """Thread-safe snapshot store. Each create is a single locked write."""

    def __init__(self):
        self._snapshots: Dict[str, Snapshot] = {}
        self._sequence: Dict[str, int] = {}
        self._counter = itertools.count()
        self._lock = threading.Lock()

    def create_snapshot(
        self,
        user_id: str,
        vector: CompassVector,
        name: Optional[str] = None,
        changelog: Optional[str] = None,
        scope: Optional[str] = None,
        created_at: Optional[datetime] = None,
        snapshot_id: Optional[str] = None
    ) -> Snapshot:
        """Persist a new snapshot and return it. Naive timestamps are taken as UTC."""
        if created_at is not None and created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        snapshot = Snapshot(
            id=snapshot_id or uuid.uuid4().hex,
            user_id=user_id,
            vector=vector,
            created_at=created_at or utcnow(),
            name=name,
            changelog=changelog,
            scope=scope
        )
        with self._lock:
            if snapshot.id in self._snapshots:
                raise ValueError(f"Snapshot id already exists: {snapshot.id}")
            self._snapshots[snapshot.id] = snapshot
            self._sequence[snapshot.id] = next(self._counter)
        logger.debug(f"Created snapshot {snapshot.id} for user {user_id}")
        return snapshot

    def get_snapshot(self, snapshot_id: str) -> Snapshot:
        """Raises SnapshotNotFoundError for unknown ids."""
        with self._lock:
            snapshot = self._snapshots.get(snapshot_id)
        if snapshot is None:
            raise SnapshotNotFoundError(snapshot_id)
        return snapshot

    def list_snapshots(self, user_id: str, scope: Optional[str] = None) -> List[Snapshot]:
        """Snapshots of a user, newest first. Later writes win timestamp ties."""
        with self._lock:
            owned = [
                s for s in self._snapshots.values()
                if s.user_id == user_id and (scope is None or s.scope == scope)
            ]
            sequence = dict(self._sequence)
        return sorted(owned, key=lambda s: (s.created_at, sequence[s.id]), reverse=True)

    def get_latest_snapshot(self, user_id: str, scope: Optional[str] = None) -> Optional[Snapshot]:
        """Most recent snapshot or None."""
        snapshots = self.list_snapshots(user_id, scope)
        return snapshots[0] if snapshots else None

    def list_all(self) -> List[Snapshot]:
        """Every snapshot, oldest first."""
        with self._lock:
            return sorted(self._snapshots.values(), key=lambda s: self._sequence[s.id])

    def delete_for_user(self, user_id: str) -> int:
        """Bulk user-data reset. Returns the count removed."""
        with self._lock:
            ids = [sid for sid, s in self._snapshots.items() if s.user_id == user_id]
            for sid in ids:
                del self._snapshots[sid]
                del self._sequence[sid]
        return len(ids)


def _threshold(value: float) -> float:
    """Threshold preference clamped to [0, 1]. Raises ValueError for NaN or inf."""
    value = float(value)
    if not math.isfinite(value):
        raise ValueError(f"match threshold must be a finite number, got {value}")
    return clamp(value, 0.0, 1.0)


@dataclass
class UserProfile:
    """Matching-related settings of a user."""
    id: str
    wallet_address: Optional[str] = None
    display_name: Optional[str] = None
    sharing_mode: SharingMode = SharingMode.PUBLIC
    match_threshold: Optional[float] = None

    def __post_init__(self):
        """Convert string inputs and clamp the threshold."""
        if isinstance(self.sharing_mode, str):
            self.sharing_mode = SharingMode(self.sharing_mode.upper())
        if self.match_threshold is not None:
            self.match_threshold = _threshold(self.match_threshold)


class UserDirectory:
    """
    User settings and connection states.

    Serves as both the candidate pool (discoverability, threshold
    preferences) and the privacy gate (identity masking).
    """

    def __init__(self):
        self.users: Dict[str, UserProfile] = {}
        self._connections: Dict[frozenset, ConnectionStatus] = {}
        self._lock = threading.Lock()

    def add_user(self, user_id: str, **settings) -> UserProfile:
        """Register a user; keyword arguments are UserProfile fields."""
        profile = UserProfile(id=user_id, **settings)
        with self._lock:
            self.users[user_id] = profile
        return profile

    def set_sharing_mode(self, user_id: str, mode: str) -> UserProfile:
        profile = self._require(user_id)
        profile.sharing_mode = SharingMode(mode.upper())
        return profile

    def set_display_name(self, user_id: str, display_name: Optional[str]) -> UserProfile:
        profile = self._require(user_id)
        profile.display_name = display_name
        return profile

    def set_match_threshold(self, user_id: str, threshold: float) -> UserProfile:
        """Store a threshold preference, clamped to [0, 1]."""
        profile = self._require(user_id)
        profile.match_threshold = _threshold(threshold)
        return profile

    def get_settings(self, user_id: str) -> Dict[str, Any]:
        profile = self._require(user_id)
        return {
            "sharingMode": profile.sharing_mode.value,
            "displayName": profile.display_name,
            "matchThreshold": profile.match_threshold
        }

    def set_connection(self, user_a: str, user_b: str, status: str) -> None:
        """Record the connection state between two users (unordered)."""
        if user_a == user_b:
            raise ValueError("Cannot connect a user to themselves")
        with self._lock:
            self._connections[frozenset((user_a, user_b))] = ConnectionStatus(status.upper())

    def connection_status(self, user_a: str, user_b: str) -> Optional[ConnectionStatus]:
        with self._lock:
            return self._connections.get(frozenset((user_a, user_b)))

    def list_discoverable_users(self, exclude: Optional[str] = None) -> List[str]:
        """Ids of users who allow matching, in registration order."""
        with self._lock:
            return [
                uid for uid, profile in self.users.items()
                if uid != exclude and profile.sharing_mode in DISCOVERABLE_MODES
            ]

    def get_match_threshold(self, user_id: str) -> Optional[float]:
        profile = self.users.get(user_id)
        return profile.match_threshold if profile else None

    def mask_identity(self, candidate_id: str, viewer_id: str) -> Identity:
        """Full wallet address if the two users are connected, masked otherwise."""
        profile = self._require(candidate_id)
        status = self.connection_status(candidate_id, viewer_id)
        connected = status == ConnectionStatus.ACCEPTED
        return Identity(
            user_id=candidate_id,
            display_name=profile.display_name,
            wallet_address=profile.wallet_address if connected else mask_address(profile.wallet_address),
            connection_status=status.value if status else None,
            masked=not connected
        )

    def _require(self, user_id: str) -> UserProfile:
        profile = self.users.get(user_id)
        if profile is None:
            raise KeyError(f"Unknown user: {user_id}")
        return profile
