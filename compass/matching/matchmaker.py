"""
Matchmaking over a discoverable candidate pool.

For a requester this module:
1. Resolves the requester's compass (latest snapshot, else live answers)
2. Resolves the effective threshold (override, else stored preference, else 0)
3. Resolves every candidate's compass concurrently on a bounded thread pool
4. Scores candidates with the requested mode and keeps score >= threshold
5. Sorts by score descending (stable in pool order) and truncates to limit
6. Masks candidate identities through the privacy gate

Candidate lookups are independent reads. Results are gathered in pool
order before any aggregation, so the output is deterministic no matter in
which order lookups complete.

Failure policy: a failed candidate lookup is logged and skipped. If more
than `failure_tolerance` of a non-empty pool fails, the request raises
CandidateLookupError rather than returning a list that looks complete.
"""

import logging
import math
from concurrent.futures import ThreadPoolExecutor, wait
from dataclasses import dataclass, field, asdict
from typing import Dict, Any, List, Optional, Union

from ..errors import CandidateLookupError, InvalidWeightsError, MatchmakingTimeout
from ..scoring.axes import clamp
from ..scoring.calculator import calculate_compass
from ..scoring.schema import CompassVector
from ..storage.interfaces import (
    CandidatePool,
    Identity,
    PrivacyGate,
    ResponseSource,
    SnapshotStore,
)
from .scorer import MatchMode, parse_mode, score_match

logger = logging.getLogger(__name__)


@dataclass
class MatchmakingConfig:
    """
    Configuration for matchmaking.

    Attributes:
        default_limit: Result count when the caller gives none
        max_limit: Hard cap on result count
        max_workers: Concurrent candidate lookups in flight
        timeout_seconds: Whole-request timeout (None disables it)
        failure_tolerance: Fraction of the pool allowed to fail
    """
    default_limit: int = 10
    max_limit: int = 50
    max_workers: int = 10
    timeout_seconds: Optional[float] = None
    failure_tolerance: float = 0.5

    def validate(self) -> None:
        """Validate configuration values."""
        if self.max_limit < 1:
            raise ValueError(f"max_limit must be >= 1, got {self.max_limit}")
        if not 1 <= self.default_limit <= self.max_limit:
            raise ValueError(
                f"default_limit must be in [1, {self.max_limit}], got {self.default_limit}"
            )
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")
        if self.timeout_seconds is not None and self.timeout_seconds <= 0:
            raise ValueError(f"timeout_seconds must be positive, got {self.timeout_seconds}")
        if not 0 <= self.failure_tolerance <= 1:
            raise ValueError(f"failure_tolerance must be in [0, 1], got {self.failure_tolerance}")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return asdict(self)

    @classmethod
    def from_config(cls, config: Dict[str, Any]) -> "MatchmakingConfig":
        """Create from main config dictionary."""
        m = config.get("matchmaking", {}) or {}
        return cls(
            default_limit=m.get("default_limit", 10),
            max_limit=m.get("max_limit", 50),
            max_workers=m.get("max_workers", 10),
            timeout_seconds=m.get("timeout_seconds"),
            failure_tolerance=m.get("failure_tolerance", 0.5)
        )


@dataclass(frozen=True)
class MatchResult:
    """
    One ranked candidate.

    Attributes:
        identity: Candidate identity as visible to the requester
        vector: Candidate compass vector
        score: Exact match score in [0, 1]
        mode: Mode the score was computed under
    """
    identity: Identity
    vector: CompassVector
    score: float
    mode: MatchMode

    @property
    def user_id(self) -> str:
        return self.identity.user_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary; score is rounded to 3 decimals for display."""
        result = self.identity.to_dict()
        result.update({
            "dimensions": self.vector.to_dict()["dimensions"],
            "score": round(self.score, 3),
            "mode": self.mode.value
        })
        return result


@dataclass
class MatchReport:
    """
    Ranked matches plus accounting of the candidate pool.

    Attributes:
        results: Ranked matches, at most `limit` long
        mode: Mode used for scoring
        threshold: Effective threshold applied
        pool_size: Discoverable candidates enumerated
        evaluated: Candidates whose vector was resolved and scored
        skipped: Candidates with no answers and no snapshot
        failed: Candidates whose lookup raised
    """
    results: List[MatchResult] = field(default_factory=list)
    mode: MatchMode = MatchMode.MIRROR
    threshold: float = 0.0
    pool_size: int = 0
    evaluated: int = 0
    skipped: int = 0
    failed: int = 0

    @property
    def complete(self) -> bool:
        """Whether every candidate in the pool was accounted for without failure."""
        return self.failed == 0 and self.evaluated + self.skipped == self.pool_size

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "mode": self.mode.value,
            "threshold": self.threshold,
            "poolSize": self.pool_size,
            "evaluated": self.evaluated,
            "skipped": self.skipped,
            "failed": self.failed,
            "matches": [r.to_dict() for r in self.results]
        }


def resolve_compass(
    user_id: str,
    snapshots: SnapshotStore,
    responses: ResponseSource,
    scope: Optional[str] = None
) -> Optional[CompassVector]:
    """
    A user's compass for matching: latest snapshot, else live from answers.

    Returns:
        CompassVector, or None if the user has neither a snapshot nor answers
    """
    latest = snapshots.get_latest_snapshot(user_id, scope)
    if latest is not None:
        return latest.vector

    answers = responses.list_responses(user_id, scope)
    if not answers:
        return None
    return calculate_compass(answers)


class Matchmaker:
    """
    Ranks discoverable users for a requester.

    All storage, discoverability and privacy decisions are delegated to the
    injected collaborators; the matchmaker holds no policy of its own.

    Attributes:
        snapshots: Snapshot store
        responses: Response source
        pool: Candidate pool
        privacy: Privacy gate
        config: MatchmakingConfig
    """

    def __init__(
        self,
        snapshots: SnapshotStore,
        responses: ResponseSource,
        pool: CandidatePool,
        privacy: PrivacyGate,
        config: Optional[MatchmakingConfig] = None
    ):
        self.snapshots = snapshots
        self.responses = responses
        self.pool = pool
        self.privacy = privacy
        self.config = config or MatchmakingConfig()
        self.config.validate()
        logger.info(
            f"Initialized Matchmaker with max_workers={self.config.max_workers}, "
            f"max_limit={self.config.max_limit}"
        )

    def resolve_limit(self, limit: Optional[int]) -> int:
        """Requested limit, defaulted and capped at max_limit."""
        if limit is None:
            return self.config.default_limit
        if limit < 1:
            raise ValueError(f"limit must be >= 1, got {limit}")
        return min(limit, self.config.max_limit)

    def resolve_threshold(self, requester_id: str, threshold: Optional[float]) -> float:
        """
        Explicit override, else the requester's stored preference, else 0.

        Raises:
            ValueError: If the threshold is not a finite number
        """
        if threshold is None:
            threshold = self.pool.get_match_threshold(requester_id)
        if threshold is None:
            return 0.0
        threshold = float(threshold)
        if not math.isfinite(threshold):
            raise ValueError(f"threshold must be a finite number, got {threshold}")
        return clamp(threshold, 0.0, 1.0)

    def find_matches(
        self,
        requester_id: str,
        mode: Union[MatchMode, str] = MatchMode.MIRROR,
        limit: Optional[int] = None,
        threshold: Optional[float] = None
    ) -> MatchReport:
        """
        Rank candidates for a requester.

        Args:
            requester_id: User asking for matches
            mode: MatchMode or its string value
            limit: Maximum results (capped at config.max_limit)
            threshold: Minimum score override in [0, 1]

        Returns:
            MatchReport with ranked results and pool accounting

        Raises:
            ValueError: If mode, limit or threshold is invalid
            CandidateLookupError: If too many candidate lookups failed
            MatchmakingTimeout: If candidate resolution exceeded the timeout
        """
        mode = parse_mode(mode)
        limit = self.resolve_limit(limit)

        requester_vector = resolve_compass(requester_id, self.snapshots, self.responses)
        if requester_vector is None:
            logger.info(f"User {requester_id} has no compass yet; nothing to match on")
            return MatchReport(mode=mode)

        min_threshold = self.resolve_threshold(requester_id, threshold)
        candidate_ids = self.pool.list_discoverable_users(exclude=requester_id)
        report = MatchReport(mode=mode, threshold=min_threshold, pool_size=len(candidate_ids))

        if not candidate_ids:
            return report

        vectors = self._resolve_candidates(candidate_ids, report)

        scored = []
        for candidate_id, vector in vectors:
            score = score_match(requester_vector, vector, mode)
            if score >= min_threshold:
                scored.append((candidate_id, vector, score))

        # sorted() is stable, so equal scores keep pool order
        ranked = sorted(scored, key=lambda item: item[2], reverse=True)[:limit]

        report.results = [
            MatchResult(
                identity=self.privacy.mask_identity(candidate_id, requester_id),
                vector=vector,
                score=score,
                mode=mode
            )
            for candidate_id, vector, score in ranked
        ]

        logger.info(
            f"Matched user {requester_id} ({mode.value}): {len(report.results)} results, "
            f"{report.evaluated}/{report.pool_size} evaluated, "
            f"{report.skipped} skipped, {report.failed} failed"
        )
        return report

    def _resolve_candidates(self, candidate_ids: List[str], report: MatchReport) -> list:
        """
        Resolve candidate vectors concurrently.

        Returns:
            List of (candidate_id, CompassVector) in pool order, excluding
            candidates without a vector and candidates whose lookup failed
        """
        workers = min(self.config.max_workers, len(candidate_ids))
        executor = ThreadPoolExecutor(max_workers=workers, thread_name_prefix="compass-match")
        try:
            futures = [
                executor.submit(resolve_compass, cid, self.snapshots, self.responses)
                for cid in candidate_ids
            ]
            done, not_done = wait(futures, timeout=self.config.timeout_seconds)
            if not_done:
                for future in not_done:
                    future.cancel()
                raise MatchmakingTimeout(
                    f"{len(not_done)} of {len(futures)} candidate lookups did not finish "
                    f"within {self.config.timeout_seconds}s"
                )
        finally:
            executor.shutdown(wait=False)

        resolved = []
        for candidate_id, future in zip(candidate_ids, futures):
            try:
                vector = future.result()
            except InvalidWeightsError as e:
                report.failed += 1
                logger.error(f"Skipping candidate {candidate_id}: invalid response data ({e})")
                continue
            except Exception as e:
                report.failed += 1
                logger.warning(f"Skipping candidate {candidate_id}: lookup failed ({e})")
                continue
            if vector is None:
                report.skipped += 1
                continue
            report.evaluated += 1
            resolved.append((candidate_id, vector))

        if report.failed and report.failed > self.config.failure_tolerance * report.pool_size:
            logger.error(
                f"{report.failed} of {report.pool_size} candidate lookups failed; "
                f"exceeds tolerance {self.config.failure_tolerance}"
            )
            raise CandidateLookupError(report.pool_size, report.failed)

        return resolved
