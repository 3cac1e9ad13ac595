"""
Compass calculation from weighted proposition responses.

Formula, per axis A over every response r loading on A:
    total_A      = sum(answer_r * w_rA)
    weight_sum_A = sum(|w_rA|)
    score_A      = clip(total_A / weight_sum_A, -1, 1)   if weight_sum_A > 0
                 = 0                                      otherwise
    confidence_A = number of responses with w_rA != 0

This is a weighted average of answers projected onto each axis, normalized
by the evidence mass on the axis, so a strongly loaded proposition dominates
a weakly loaded one in proportion to its weight.
"""

import logging
from typing import Iterable, Mapping, Tuple, Union

import numpy as np

from .axes import AXES, NUM_AXES, Axis
from .schema import CompassVector, Response

logger = logging.getLogger(__name__)

WeightedAnswer = Tuple[Mapping[Union[Axis, str], float], float]


def _as_response(item: Union[Response, WeightedAnswer], position: int) -> Response:
    if isinstance(item, Response):
        return item
    weights, answer_value = item
    return Response(question_id=f"#{position}", weights=weights, answer_value=answer_value)


def build_weight_matrix(responses: Iterable[Response]) -> Tuple[np.ndarray, np.ndarray]:
    """
    Stack responses into a weight matrix and answer vector.

    Args:
        responses: Validated responses

    Returns:
        Tuple of (weights N x 8 in canonical axis order, answers N)
    """
    responses = list(responses)
    weights = np.zeros((len(responses), NUM_AXES), dtype=float)
    answers = np.zeros(len(responses), dtype=float)
    for i, response in enumerate(responses):
        for axis, weight in response.weights.items():
            weights[i, axis.index] = weight
        answers[i] = response.answer_value
    return weights, answers


def calculate_compass(responses: Iterable[Union[Response, WeightedAnswer]]) -> CompassVector:
    """
    Reduce a user's responses to a CompassVector.

    Args:
        responses: Response objects or (weight_vector, answer_value) pairs;
            pairs are validated the same way Response validates them

    Returns:
        CompassVector with clamped per-axis scores and evidence counts

    Raises:
        InvalidWeightsError: If a weight vector or answer is malformed
    """
    validated = [_as_response(item, i) for i, item in enumerate(responses)]
    if not validated:
        return CompassVector.zeros()

    weights, answers = build_weight_matrix(validated)

    # Rescale answers so the accumulation cannot overflow to inf/nan
    scale = max(1.0, float(np.max(np.abs(answers))))
    totals = (answers / scale) @ weights
    weight_sums = np.abs(weights).sum(axis=0)
    counts = np.count_nonzero(weights, axis=0)

    with np.errstate(divide="ignore", invalid="ignore"):
        ratios = np.where(weight_sums > 0, totals / np.where(weight_sums > 0, weight_sums, 1.0), 0.0)
    scores = np.clip(ratios * scale, -1.0, 1.0)

    vector = CompassVector(
        dimensions={axis: float(scores[axis.index]) for axis in AXES},
        confidence={axis: int(counts[axis.index]) for axis in AXES}
    )
    logger.debug(f"Calculated compass from {len(validated)} responses")
    return vector
