"""Shared fixtures for compass engine tests."""

from datetime import datetime, timezone
from pathlib import Path

import pytest

from compass.scoring import Axis, AXES, CompassVector
from compass.storage import build_population

PROJECT_ROOT = Path(__file__).parent.parent


def make_vector(**scores) -> CompassVector:
    """CompassVector from axis-name keyword scores; confidence 1 where scored."""
    return CompassVector(
        dimensions={Axis(name): value for name, value in scores.items()},
        confidence={Axis(name): 1 for name in scores}
    )


def uniform_vector(value: float) -> CompassVector:
    """Vector with the same score on every axis."""
    return CompassVector(
        dimensions={axis: value for axis in AXES},
        confidence={axis: 1 for axis in AXES}
    )


def ts(year: int, month: int, day: int, hour: int = 12) -> datetime:
    return datetime(year, month, day, hour, tzinfo=timezone.utc)


@pytest.fixture
def population():
    """Small population: four discoverable users, one ghost, one connection."""
    return build_population({
        "questions": [
            {"id": "econ-left", "weights": {"economy": -0.8}, "questionnaire": "quick"},
            {"id": "econ-right", "weights": {"economy": 0.8}, "questionnaire": "quick"},
            {"id": "gov-direct", "weights": {"governance": 0.8}, "questionnaire": "quick"},
            {"id": "justice-rehab", "weights": {"justice": 0.8}, "questionnaire": "quick"},
            {"id": "tech-crypto", "weights": {"technology": 0.8, "economy": 0.3}, "questionnaire": "digital"},
        ],
        "users": [
            {"id": "alice", "wallet_address": "0xaaaa1111bbbb2222cccc3333dddd4444eeee5555"},
            {"id": "bob", "wallet_address": "0xbbbb1111bbbb2222cccc3333dddd4444eeee5555", "display_name": "Bob"},
            {"id": "carol", "wallet_address": "0xcccc1111bbbb2222cccc3333dddd4444eeee5555", "sharing_mode": "SELECTIVE"},
            {"id": "dave", "wallet_address": "0xdddd1111bbbb2222cccc3333dddd4444eeee5555"},
            {"id": "ghost", "wallet_address": "0xeeee1111bbbb2222cccc3333dddd4444eeee5555", "sharing_mode": "GHOST"},
        ],
        "responses": [
            {"user": "alice", "question": "econ-left", "answer": 1},
            {"user": "alice", "question": "gov-direct", "answer": 1},
            {"user": "bob", "question": "econ-left", "answer": 1},
            {"user": "bob", "question": "gov-direct", "answer": 1},
            {"user": "carol", "question": "econ-right", "answer": 1},
            {"user": "carol", "question": "gov-direct", "answer": -1},
            {"user": "ghost", "question": "econ-left", "answer": 1},
        ],
        "connections": [
            {"a": "alice", "b": "bob", "status": "ACCEPTED"},
        ],
    })
