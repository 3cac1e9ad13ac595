"""
Matching module for compass-based matchmaking.

This module provides the three match-scoring modes and the orchestrator
that ranks a candidate pool for a requester.
"""

from .scorer import (
    MatchMode,
    CORE_AXES,
    OPERATIONAL_AXES,
    euclidean_distance,
    max_distance,
    closeness,
    mirror_score,
    challenger_score,
    complement_score,
    score_match,
    parse_mode,
)
from .matchmaker import (
    MatchmakingConfig,
    MatchResult,
    MatchReport,
    Matchmaker,
    resolve_compass,
)

__all__ = [
    "MatchMode",
    "CORE_AXES",
    "OPERATIONAL_AXES",
    "euclidean_distance",
    "max_distance",
    "closeness",
    "mirror_score",
    "challenger_score",
    "complement_score",
    "score_match",
    "parse_mode",
    "MatchmakingConfig",
    "MatchResult",
    "MatchReport",
    "Matchmaker",
    "resolve_compass",
]
