"""
Population loading for the compass engine.

Reads a YAML document describing questions, users, answers, connections and
(optionally) pre-existing snapshots, and materializes it into the in-memory
stores. No scoring is done here.

Expected layout:
    questions:
      - {id: q1, questionnaire: quick-compass, weights: {economy: 0.8}}
    users:
      - {id: u1, wallet_address: "0x...", sharing_mode: PUBLIC, match_threshold: 0.5}
    responses:
      - {user: u1, question: q1, answer: 1.0}
    connections:
      - {a: u1, b: u2, status: ACCEPTED}
    snapshots:
      - {id: s1, user: u1, created_at: 2026-01-01T00:00:00+00:00,
         dimensions: {economy: 0.5}, confidence: {economy: 1}}
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, Any

import yaml

from ..scoring.schema import CompassVector
from .memory import InMemoryResponseStore, InMemorySnapshotStore, UserDirectory

logger = logging.getLogger(__name__)


@dataclass
class Population:
    """In-memory collaborators holding one loaded population."""
    responses: InMemoryResponseStore = field(default_factory=InMemoryResponseStore)
    snapshots: InMemorySnapshotStore = field(default_factory=InMemorySnapshotStore)
    directory: UserDirectory = field(default_factory=UserDirectory)
    questionnaires: Dict[str, str] = field(default_factory=dict)


def _as_datetime(value: Any) -> datetime:
    if isinstance(value, datetime):
        dt = value
    else:
        dt = datetime.fromisoformat(str(value))
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


def build_population(data: Dict[str, Any]) -> Population:
    """
    Materialize a parsed population document.

    Args:
        data: Parsed YAML document

    Returns:
        Population with filled stores

    Raises:
        InvalidWeightsError: If a question carries malformed weights
        KeyError: If a response references an unknown question
    """
    population = Population()

    for questionnaire in data.get("questionnaires") or []:
        population.questionnaires[questionnaire["id"]] = questionnaire.get("title", questionnaire["id"])

    for question in data.get("questions") or []:
        population.responses.add_question(
            question["id"],
            question["weights"],
            questionnaire_id=question.get("questionnaire"),
            text=question.get("text", "")
        )

    for user in data.get("users") or []:
        population.directory.add_user(
            user["id"],
            wallet_address=user.get("wallet_address"),
            display_name=user.get("display_name"),
            sharing_mode=user.get("sharing_mode", "PUBLIC"),
            match_threshold=user.get("match_threshold")
        )

    for response in data.get("responses") or []:
        answered_at = response.get("answered_at")
        population.responses.submit_response(
            response["user"],
            response["question"],
            response["answer"],
            answered_at=_as_datetime(answered_at) if answered_at else None
        )

    for connection in data.get("connections") or []:
        population.directory.set_connection(connection["a"], connection["b"], connection["status"])

    for snapshot in data.get("snapshots") or []:
        population.snapshots.create_snapshot(
            snapshot["user"],
            CompassVector.from_dict(snapshot),
            name=snapshot.get("name"),
            changelog=snapshot.get("changelog"),
            scope=snapshot.get("scope"),
            created_at=_as_datetime(snapshot["created_at"]),
            snapshot_id=snapshot.get("id")
        )

    logger.info(
        f"Loaded population: {len(population.responses.questions)} questions, "
        f"{len(population.directory.users)} users"
    )
    return population


def load_population(filepath: str) -> Population:
    """
    Load a population document from YAML.

    Args:
        filepath: Path to the YAML file

    Returns:
        Population with filled stores

    Raises:
        FileNotFoundError: If the file doesn't exist
        ValueError: If the file is empty
    """
    path = Path(filepath)
    if not path.exists():
        raise FileNotFoundError(f"Population file not found: {filepath}")

    logger.info(f"Loading population from {filepath}")
    with open(filepath, "r") as f:
        data = yaml.safe_load(f)

    if not data:
        raise ValueError(f"Population file is empty: {filepath}")

    return build_population(data)
