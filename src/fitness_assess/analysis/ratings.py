"""Four-bucket performance ratings per test.

This module is pure logic with NO I/O.
"""

from __future__ import annotations

from dataclasses import dataclass

from fitness_assess.core.exceptions import InvalidInputError
from fitness_assess.core.types import FitnessTest, Rating


@dataclass(frozen=True)
class RatingScale:
    """Thresholds for Excellent, Good and Average; anything else is Poor.

    Attributes:
        excellent: Threshold for Excellent
        good: Threshold for Good
        average: Threshold for Average
        lower_is_better: Compare with <= instead of >=
    """

    excellent: float
    good: float
    average: float
    lower_is_better: bool = False

    def rate(self, score: float) -> Rating:
        """Map a score to exactly one bucket."""
        if self.lower_is_better:
            if score <= self.excellent:
                return Rating.EXCELLENT
            if score <= self.good:
                return Rating.GOOD
            if score <= self.average:
                return Rating.AVERAGE
            return Rating.POOR

        if score >= self.excellent:
            return Rating.EXCELLENT
        if score >= self.good:
            return Rating.GOOD
        if score >= self.average:
            return Rating.AVERAGE
        return Rating.POOR


RATING_SCALES: dict[FitnessTest, RatingScale] = {
    FitnessTest.SIT_AND_REACH: RatingScale(8.0, 6.0, 4.0),
    FitnessTest.VERTICAL_JUMP: RatingScale(50.0, 40.0, 30.0),
    FitnessTest.BROAD_JUMP: RatingScale(2.4, 2.0, 1.6),
    FitnessTest.MEDICINE_BALL_THROW: RatingScale(7.0, 5.5, 4.0),
    FitnessTest.SPRINT_30M: RatingScale(2.8, 3.2, 3.6, lower_is_better=True),
    FitnessTest.SHUTTLE_RUN: RatingScale(10.0, 11.0, 12.0, lower_is_better=True),
    FitnessTest.SIT_UPS: RatingScale(45.0, 35.0, 25.0),
}

# Keyed by target distance in meters, scores in minutes
ENDURANCE_SCALES: dict[int, RatingScale] = {
    800: RatingScale(2.5, 3.0, 3.5, lower_is_better=True),
    1600: RatingScale(6.0, 7.5, 9.0, lower_is_better=True),
}

UNRATED_TESTS = frozenset({FitnessTest.HEIGHT, FitnessTest.WEIGHT})


def endurance_scale(target_distance_m: float) -> RatingScale:
    """Rating scale for an endurance run distance.

    Raises:
        InvalidInputError: If the distance is neither 800 m nor 1600 m
    """
    scale = ENDURANCE_SCALES.get(int(target_distance_m))
    if scale is None or int(target_distance_m) != target_distance_m:
        raise InvalidInputError(
            f"Unsupported endurance distance: {target_distance_m}m (use 800 or 1600)"
        )
    return scale


def rate(
    test: FitnessTest | str,
    score: float,
    target_distance_m: float | None = None,
) -> Rating | None:
    """Rate a raw score for a test.

    Args:
        test: Fitness test
        score: Raw (unrounded) score in the test's unit
        target_distance_m: Course length, required for endurance runs

    Returns:
        Rating bucket, or None for direct measurements (height, weight)
    """
    test = FitnessTest.parse(test)

    if test in UNRATED_TESTS:
        return None

    if test is FitnessTest.ENDURANCE_RUN:
        if target_distance_m is None:
            raise InvalidInputError("Endurance run rating needs a target distance")
        return endurance_scale(target_distance_m).rate(score)

    return RATING_SCALES[test].rate(score)
