"""Storage module: collaborator contracts and in-memory implementations."""

from .interfaces import Identity, ResponseSource, SnapshotStore, CandidatePool, PrivacyGate
from .memory import (
    InMemoryResponseStore,
    InMemorySnapshotStore,
    UserDirectory,
    SharingMode,
    ConnectionStatus,
    mask_address,
)
from .loaders import Population, build_population, load_population

__all__ = [
    "Identity",
    "ResponseSource",
    "SnapshotStore",
    "CandidatePool",
    "PrivacyGate",
    "InMemoryResponseStore",
    "InMemorySnapshotStore",
    "UserDirectory",
    "SharingMode",
    "ConnectionStatus",
    "mask_address",
    "Population",
    "build_population",
    "load_population",
]
