"""Fitness assessment: raw measurements to standardized test scores."""

from fitness_assess.analysis.evaluators import (
    GpsInputs,
    InertialInputs,
    ManualInputs,
    VisionInputs,
    evaluate,
    evaluate_upload,
)
from fitness_assess.analysis.scoring import aggregate, normalize, normalize_and_aggregate
from fitness_assess.core.types import CalibrationData, FitnessProfile, FitnessTest, TestResult

__version__ = "0.1.0"

__all__ = [
    "evaluate",
    "evaluate_upload",
    "normalize",
    "aggregate",
    "normalize_and_aggregate",
    "VisionInputs",
    "InertialInputs",
    "GpsInputs",
    "ManualInputs",
    "CalibrationData",
    "FitnessProfile",
    "FitnessTest",
    "TestResult",
]
