"""Core infrastructure: config, types, exceptions, and logging."""

from fitness_assess.core.config import Settings, get_settings
from fitness_assess.core.exceptions import (
    CalibrationMissingError,
    DegenerateGeometryError,
    FitnessAssessError,
    ImplausibleTrackError,
    InsufficientSamplesError,
    InsufficientTrajectoryError,
    InvalidInputError,
    InvalidScaleError,
    JumpNotDetectedError,
    MissingLandmarkError,
    PoseEstimationError,
    TestExecutionError,
    UnknownTestTypeError,
)
from fitness_assess.core.logging import get_logger, setup_logging
from fitness_assess.core.types import (
    BodyLandmark,
    CalibrationData,
    FitnessProfile,
    FitnessTest,
    GpsFix,
    InertialSample,
    Keypoint,
    OrientationSample,
    Point2D,
    Pose,
    Rating,
    ReferenceObjectKind,
    SimulatedEstimate,
    TestResult,
    Trajectory,
)

__all__ = [
    # Config
    "Settings",
    "get_settings",
    # Types
    "Point2D",
    "BodyLandmark",
    "Keypoint",
    "Pose",
    "Trajectory",
    "InertialSample",
    "OrientationSample",
    "GpsFix",
    "ReferenceObjectKind",
    "CalibrationData",
    "FitnessTest",
    "Rating",
    "TestResult",
    "SimulatedEstimate",
    "FitnessProfile",
    # Exceptions
    "FitnessAssessError",
    "InvalidScaleError",
    "DegenerateGeometryError",
    "MissingLandmarkError",
    "InsufficientTrajectoryError",
    "CalibrationMissingError",
    "ImplausibleTrackError",
    "InsufficientSamplesError",
    "UnknownTestTypeError",
    "JumpNotDetectedError",
    "InvalidInputError",
    "PoseEstimationError",
    "TestExecutionError",
    # Logging
    "setup_logging",
    "get_logger",
]
