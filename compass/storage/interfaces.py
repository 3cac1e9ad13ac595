"""
Collaborator contracts consumed by the compass engine.

The engine never talks to a database, a session layer or a privacy policy
directly. It reads through these narrow interfaces, which the hosting
application implements (storage.memory ships in-process versions).
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Any, List, Optional, Protocol

from ..scoring.schema import CompassVector, Response, Snapshot


@dataclass(frozen=True)
class Identity:
    """
    Identity fields of a match candidate as seen by a given viewer.

    Attributes:
        user_id: Candidate identifier
        display_name: Optional public name
        wallet_address: Full address if connected, masked otherwise
        connection_status: PENDING / ACCEPTED / DECLINED / CANCELLED or None
        masked: Whether wallet_address was masked
    """
    user_id: str
    display_name: Optional[str] = None
    wallet_address: Optional[str] = None
    connection_status: Optional[str] = None
    masked: bool = True

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "userId": self.user_id,
            "displayName": self.display_name,
            "walletAddress": self.wallet_address,
            "connectionStatus": self.connection_status
        }


class ResponseSource(Protocol):
    """Supplies a user's current answers with their proposition weights."""

    def list_responses(self, user_id: str, scope: Optional[str] = None) -> List[Response]:
        ...


class SnapshotStore(Protocol):
    """Persists immutable compass snapshots."""

    def create_snapshot(
        self,
        user_id: str,
        vector: CompassVector,
        name: Optional[str] = None,
        changelog: Optional[str] = None,
        scope: Optional[str] = None,
        created_at: Optional[datetime] = None
    ) -> Snapshot:
        ...

    def get_snapshot(self, snapshot_id: str) -> Snapshot:
        """Raises SnapshotNotFoundError for unknown ids."""
        ...

    def get_latest_snapshot(self, user_id: str, scope: Optional[str] = None) -> Optional[Snapshot]:
        ...

    def list_snapshots(self, user_id: str, scope: Optional[str] = None) -> List[Snapshot]:
        """Newest first."""
        ...


class CandidatePool(Protocol):
    """Discoverability and matching preferences of users."""

    def list_discoverable_users(self, exclude: Optional[str] = None) -> List[str]:
        ...

    def get_match_threshold(self, user_id: str) -> Optional[float]:
        ...


class PrivacyGate(Protocol):
    """Decides how much of a candidate's identity a viewer may see."""

    def mask_identity(self, candidate_id: str, viewer_id: str) -> Identity:
        ...
