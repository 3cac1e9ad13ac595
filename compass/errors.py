"""Exception types raised by the compass engine."""


class InvalidWeightsError(ValueError):
    """A proposition weight vector or answer failed validation."""


class SnapshotNotFoundError(LookupError):
    """A snapshot id did not resolve in the snapshot store."""

    def __init__(self, snapshot_id: str):
        super().__init__(f"Snapshot not found: {snapshot_id}")
        self.snapshot_id = snapshot_id


class CandidateLookupError(RuntimeError):
    """Too many candidate lookups failed to trust the match result."""

    def __init__(self, pool_size: int, failed: int):
        super().__init__(
            f"{failed} of {pool_size} candidate lookups failed; "
            f"refusing to return a partial match list"
        )
        self.pool_size = pool_size
        self.failed = failed


class MatchmakingTimeout(TimeoutError):
    """Candidate resolution did not finish within the request timeout."""
