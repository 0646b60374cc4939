"""Pure analysis logic: geometry, signal analyzers, evaluators and scoring.

This package contains NO I/O operations and NO OpenCV imports.
All functions operate on typed dataclasses and return results.
"""

from fitness_assess.analysis.evaluators import EVALUATORS, evaluate, evaluate_upload
from fitness_assess.analysis.ratings import RatingScale, rate
from fitness_assess.analysis.scoring import aggregate, normalize, normalize_and_aggregate
from fitness_assess.analysis.simulation import SimulatedEstimator

__all__ = [
    "EVALUATORS",
    "evaluate",
    "evaluate_upload",
    "RatingScale",
    "rate",
    "normalize",
    "aggregate",
    "normalize_and_aggregate",
    "SimulatedEstimator",
]
