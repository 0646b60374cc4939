"""Simulated estimates for uploaded videos without sensor ground truth.

Vertical jump, sprint, shuttle run and endurance run need motion or GPS
sensors. When only an uploaded video is available, a plausible score is
drawn at random and returned as a ``SimulatedEstimate`` so it can never be
mistaken for a measured result.
"""

from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from fitness_assess.analysis.geometry import round_to_step
from fitness_assess.analysis.ratings import rate
from fitness_assess.core.config import SimulationSettings
from fitness_assess.core.exceptions import UnknownTestTypeError
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import FitnessTest, SimulatedEstimate

logger = get_logger(__name__)


@dataclass(frozen=True)
class EstimateProfile:
    """Score range and presentation for one simulated test."""

    low: float
    high: float
    unit: str
    accuracy: float
    step: float
    feedback: str


ESTIMATE_PROFILES: dict[FitnessTest, EstimateProfile] = {
    FitnessTest.VERTICAL_JUMP: EstimateProfile(
        35.0, 60.0, "cm", 85, 1,
        "Video analyzed successfully. Results based on visual movement detection.",
    ),
    FitnessTest.SPRINT_30M: EstimateProfile(
        4.5, 6.5, "seconds", 80, 0.01,
        "Sprint time estimated from video analysis. GPS data recommended for higher accuracy.",
    ),
    FitnessTest.SHUTTLE_RUN: EstimateProfile(
        10.0, 13.0, "seconds", 85, 0.1,
        "Shuttle run time analyzed from video. Motion sensors provide better accuracy.",
    ),
    FitnessTest.ENDURANCE_RUN: EstimateProfile(
        4.0, 7.0, "minutes", 75, 0.01,
        "Endurance run analyzed from video. "
        "GPS tracking recommended for accurate distance measurement.",
    ),
}

SIMULATED_TESTS = frozenset(ESTIMATE_PROFILES)


class SimulatedEstimator:
    """Draws upload-mode estimates from a seedable random generator."""

    def __init__(self, settings: SimulationSettings | None = None) -> None:
        """Initialize estimator.

        Args:
            settings: Simulation settings; a fixed seed makes estimates repeatable
        """
        self.settings = settings or SimulationSettings()
        self._rng = np.random.default_rng(self.settings.seed)

    def estimate(
        self,
        test: FitnessTest | str,
        video_duration_s: float | None = None,
        target_distance_m: float = 800,
    ) -> SimulatedEstimate:
        """Produce a simulated estimate for a sensor-dependent test.

        Args:
            test: Fitness test
            video_duration_s: Length of the uploaded video, kept as diagnostics
            target_distance_m: Course length used to rate endurance runs

        Returns:
            SimulatedEstimate flagged as low confidence

        Raises:
            UnknownTestTypeError: If the test has no simulated path
        """
        test = FitnessTest.parse(test)
        profile = ESTIMATE_PROFILES.get(test)
        if profile is None:
            raise UnknownTestTypeError(f"{test.value} (no simulated estimate)")

        raw = float(self._rng.uniform(profile.low, profile.high))
        score = round_to_step(raw, profile.step)

        rating_distance = target_distance_m if test is FitnessTest.ENDURANCE_RUN else None
        logger.info("Simulated %s estimate: %g %s", test.value, score, profile.unit)

        return SimulatedEstimate(
            test_type=test.value,
            score=score,
            unit=profile.unit,
            accuracy=profile.accuracy,
            raw_data={"method": "video_upload", "duration": video_duration_s},
            feedback=profile.feedback,
            rating=rate(test, raw, rating_distance),
        )
