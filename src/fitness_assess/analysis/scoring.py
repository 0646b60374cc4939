"""Cross-test score normalization and weighted aggregation.

This module is pure logic with NO I/O. Nothing here raises: unknown tests
and empty inputs degrade to documented defaults.
"""

from __future__ import annotations

from typing import Callable, Iterable

import numpy as np

from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import FitnessTest, TestResult

logger = get_logger(__name__)

NEUTRAL_SCORE = 50.0
DEFAULT_WEIGHT = 0.10

WEIGHTS: dict[str, float] = {
    FitnessTest.HEIGHT.value: 0.05,
    FitnessTest.WEIGHT.value: 0.05,
    FitnessTest.SIT_AND_REACH.value: 0.10,
    FitnessTest.VERTICAL_JUMP.value: 0.15,
    FitnessTest.BROAD_JUMP.value: 0.15,
    FitnessTest.MEDICINE_BALL_THROW.value: 0.10,
    FitnessTest.SPRINT_30M.value: 0.15,
    FitnessTest.SHUTTLE_RUN.value: 0.10,
    FitnessTest.SIT_UPS.value: 0.10,
    FitnessTest.ENDURANCE_RUN.value: 0.15,
}

# Linear maps from raw score to the common 0-100 scale (before clamping)
NORMALIZERS: dict[str, Callable[[float], float]] = {
    FitnessTest.VERTICAL_JUMP.value: lambda cm: cm / 60 * 100,
    FitnessTest.BROAD_JUMP.value: lambda m: m / 3.0 * 100,
    FitnessTest.SIT_AND_REACH.value: lambda inches: (inches + 5) / 15 * 100,
    FitnessTest.SPRINT_30M.value: lambda s: 100 - (s - 2.5) / 2.0 * 100,
    FitnessTest.SHUTTLE_RUN.value: lambda s: 100 - (s - 9.0) / 4.0 * 100,
    FitnessTest.SIT_UPS.value: lambda reps: reps / 60 * 100,
    FitnessTest.ENDURANCE_RUN.value: lambda minutes: 100 - (minutes - 4.0) / 8.0 * 100,
}


def _test_key(result: TestResult) -> str:
    test_type = result.test_type
    return test_type.value if isinstance(test_type, FitnessTest) else str(test_type)


def normalize(result: TestResult) -> float:
    """Map a result's raw score onto [0, 100].

    Tests without a linear map (height, weight, medicine ball throw, unknown
    types) get the neutral score of 50.
    """
    normalizer = NORMALIZERS.get(_test_key(result))
    if normalizer is None:
        return NEUTRAL_SCORE

    return float(np.clip(normalizer(result.score), 0.0, 100.0))


def weight_for(test_type: str) -> float:
    """Aggregation weight for a test, 0.10 for unknown types."""
    return WEIGHTS.get(test_type, DEFAULT_WEIGHT)


def aggregate(results: Iterable[TestResult]) -> float:
    """Weighted mean of normalized scores.

    Weights are renormalized over the tests actually present, so partial
    result sets still yield a 0-100 score.

    Returns:
        Overall fitness score in [0, 100], 0 for no results
    """
    results = list(results)
    if not results:
        return 0.0

    weights = np.array([weight_for(_test_key(r)) for r in results], dtype=np.float64)
    scores = np.array([normalize(r) for r in results], dtype=np.float64)

    total_weight = float(np.sum(weights))
    if total_weight <= 0:
        return 0.0

    # Normalizing the weights first keeps a single result's score exact
    overall = float(np.dot(scores, weights / total_weight))
    logger.debug("Aggregated %d results -> %.2f", len(results), overall)
    return overall


def normalize_and_aggregate(results: Iterable[TestResult]) -> float:
    """Overall fitness score for a set of test results."""
    return aggregate(results)
