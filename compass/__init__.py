"""
Civic Compass Engine

This package implements the scoring and matchmaking core of a
political-orientation quiz platform.

Key Design Decisions:
- Eight fixed axes, each scored in [-1, 1] from weighted proposition answers
- Snapshots are immutable; history is reconstructed by diffing snapshots
- Matching is geometric (Euclidean distance) under three modes
- Storage, discoverability and privacy are injected collaborators
"""

__version__ = "1.0.0"
