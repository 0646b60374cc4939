"""Custom exceptions for fitness assessment."""

from __future__ import annotations


class FitnessAssessError(Exception):
    """Base exception for all fitness assessment errors."""

    pass


class InvalidScaleError(FitnessAssessError):
    """Pixel-to-centimeter scale is zero, negative or not finite."""

    def __init__(self, message: str = "Scale must be positive and finite") -> None:
        self.message = message
        super().__init__(self.message)


class DegenerateGeometryError(FitnessAssessError):
    """Geometry is undefined, e.g. an angle with a zero-length ray."""

    def __init__(self, message: str = "Degenerate geometry") -> None:
        self.message = message
        super().__init__(self.message)


class MissingLandmarkError(FitnessAssessError):
    """A required body landmark is absent from the pose."""

    def __init__(self, landmark: str, message: str | None = None) -> None:
        self.landmark = landmark
        self.message = message or f"Required landmark not detected: {landmark}"
        super().__init__(self.message)


class InsufficientTrajectoryError(FitnessAssessError):
    """Object trajectory has too few points to analyze."""

    def __init__(self, message: str = "Trajectory not detected") -> None:
        self.message = message
        super().__init__(self.message)


class CalibrationMissingError(FitnessAssessError):
    """No reference object was detected, so no metric scale is known."""

    def __init__(self, message: str = "Reference object not detected") -> None:
        self.message = message
        super().__init__(self.message)


class ImplausibleTrackError(FitnessAssessError):
    """Recorded track deviates from the expected course or pattern."""

    def __init__(self, message: str = "Track is implausible") -> None:
        self.message = message
        super().__init__(self.message)


class InsufficientSamplesError(FitnessAssessError):
    """Fewer samples than the modality's minimum."""

    def __init__(self, required: int, actual: int, message: str | None = None) -> None:
        self.required = required
        self.actual = actual
        self.message = message or f"Need at least {required} samples, got {actual}"
        super().__init__(self.message)


class UnknownTestTypeError(FitnessAssessError):
    """Test type is not one of the supported fitness tests."""

    def __init__(self, test_type: str) -> None:
        self.test_type = test_type
        self.message = f"Unknown test type: {test_type}"
        super().__init__(self.message)


class JumpNotDetectedError(FitnessAssessError):
    """No takeoff/landing pair was found in the motion stream."""

    def __init__(self, message: str = "Jump not detected properly") -> None:
        self.message = message
        super().__init__(self.message)


class InvalidInputError(FitnessAssessError):
    """Evaluator received inputs of the wrong kind or with invalid values."""

    def __init__(self, message: str = "Invalid test input") -> None:
        self.message = message
        super().__init__(self.message)


class PoseEstimationError(FitnessAssessError):
    """Vision backend failed to load or run."""

    def __init__(self, message: str = "Pose estimation failed") -> None:
        self.message = message
        super().__init__(self.message)


class TestExecutionError(FitnessAssessError):
    """A single test evaluation failed.

    Attributes:
        test_type: Value of the test that failed (e.g. "vertical_jump")
        cause: The underlying analyzer error
    """

    def __init__(self, test_type: str, cause: Exception) -> None:
        self.test_type = test_type
        self.cause = cause
        self.message = f"{test_type} test failed: {cause}"
        super().__init__(self.message)
