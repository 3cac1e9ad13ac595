"""
Data structures for compass scoring.

Defines the response records consumed by the calculator, the computed
CompassVector, and the immutable Snapshot that persists a vector over time.

Serialized form of a CompassVector (kept stable for transports and tests):
    {"dimensions": {axis: float, ...}, "confidence": {axis: int, ...}}
"""

import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from numbers import Real
from types import MappingProxyType
from typing import Optional, Dict, Any, Mapping

import numpy as np

from ..errors import InvalidWeightsError
from .axes import AXES, Axis, clamp, parse_axis, parse_weights


def utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


@dataclass
class Response:
    """
    One user's answer to one proposition.

    Attributes:
        question_id: Proposition identifier
        weights: Axis loadings of the proposition (validated on creation)
        answer_value: Answer, typically in [-1, 1]; any finite real is accepted
        answered_at: When the answer was given
    """
    question_id: str
    weights: Dict[Axis, float]
    answer_value: float
    answered_at: Optional[datetime] = None

    def __post_init__(self):
        """Validate weights and answer value."""
        self.weights = parse_weights(self.weights)
        if isinstance(self.answer_value, bool) or not isinstance(self.answer_value, Real):
            raise InvalidWeightsError(
                f"answer_value for {self.question_id} must be numeric, got {self.answer_value!r}"
            )
        self.answer_value = float(self.answer_value)
        if not math.isfinite(self.answer_value):
            raise InvalidWeightsError(
                f"answer_value for {self.question_id} is not finite: {self.answer_value}"
            )


@dataclass(frozen=True)
class CompassVector:
    """
    Per-axis compass scores and evidence counts.

    Every axis is always present and both maps are read-only. A confidence
    of 0 means no response carried weight on that axis, in which case the
    score is exactly 0; callers that need to tell "no evidence" from
    "centrist" must consult confidence.

    Attributes:
        dimensions: Axis -> score in [-1, 1]
        confidence: Axis -> number of contributing responses
    """
    dimensions: Mapping[Axis, float] = field(default_factory=dict)
    confidence: Mapping[Axis, int] = field(default_factory=dict)

    def __post_init__(self):
        """Fill missing axes with zero and enforce bounds."""
        dims = {parse_axis(k): v for k, v in self.dimensions.items()}
        conf = {parse_axis(k): v for k, v in self.confidence.items()}

        dimensions = {}
        confidence = {}
        for axis in AXES:
            value = float(dims.get(axis, 0.0))
            if math.isnan(value):
                raise ValueError(f"Dimension {axis.value} is NaN")
            count = int(conf.get(axis, 0))
            if count < 0:
                raise ValueError(f"Confidence for {axis.value} must be non-negative, got {count}")
            dimensions[axis] = clamp(value)
            confidence[axis] = count

        # Read-only so a stored snapshot cannot be edited through its vector
        object.__setattr__(self, "dimensions", MappingProxyType(dimensions))
        object.__setattr__(self, "confidence", MappingProxyType(confidence))

    @classmethod
    def zeros(cls) -> "CompassVector":
        """Vector with no evidence on any axis."""
        return cls()

    @property
    def has_evidence(self) -> bool:
        """Whether any axis received at least one response."""
        return any(count > 0 for count in self.confidence.values())

    def to_array(self) -> np.ndarray:
        """Scores as a float array in canonical axis order."""
        return np.array([self.dimensions[axis] for axis in AXES], dtype=float)

    def negated(self) -> "CompassVector":
        """The opposite position on every axis, same confidence."""
        return CompassVector(
            dimensions={axis: -value for axis, value in self.dimensions.items()},
            confidence=dict(self.confidence)
        )

    def to_dict(self) -> Dict[str, Dict[str, Any]]:
        """Convert to dictionary keyed by axis string value."""
        return {
            "dimensions": {axis.value: self.dimensions[axis] for axis in AXES},
            "confidence": {axis.value: self.confidence[axis] for axis in AXES}
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CompassVector":
        """Create from dictionary. Missing axes default to 0."""
        return cls(
            dimensions=dict(data.get("dimensions") or {}),
            confidence=dict(data.get("confidence") or {})
        )


@dataclass(frozen=True)
class Snapshot:
    """
    Immutable, timestamped record of a CompassVector.

    Attributes:
        id: Snapshot identifier
        user_id: Owning user
        vector: Frozen compass vector
        created_at: Creation timestamp
        name: Optional human readable name
        changelog: Optional summary of the change since the previous snapshot
        scope: Optional questionnaire the vector was computed from
    """
    id: str
    user_id: str
    vector: CompassVector
    created_at: datetime
    name: Optional[str] = None
    changelog: Optional[str] = None
    scope: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        result = {
            "id": self.id,
            "user_id": self.user_id,
            "created_at": self.created_at.isoformat(),
            "name": self.name,
            "changelog": self.changelog,
            "scope": self.scope
        }
        result.update(self.vector.to_dict())
        return result

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Snapshot":
        """Create from dictionary."""
        created_at = data["created_at"]
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=str(data["id"]),
            user_id=str(data["user_id"]),
            vector=CompassVector.from_dict(data),
            created_at=created_at,
            name=data.get("name"),
            changelog=data.get("changelog"),
            scope=data.get("scope")
        )
