"""Core data types and structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

import numpy as np
from numpy.typing import NDArray

from fitness_assess.core.exceptions import MissingLandmarkError, UnknownTestTypeError


@dataclass(frozen=True, slots=True)
class Point2D:
    """Pixel coordinates in a single video frame's coordinate space."""

    x: float
    y: float

    def as_array(self) -> NDArray[np.float64]:
        """Return the point as a numpy vector."""
        return np.array([self.x, self.y], dtype=np.float64)


class BodyLandmark(Enum):
    """Body landmarks the analyzers understand."""

    NOSE = "nose"
    LEFT_SHOULDER = "leftShoulder"
    RIGHT_SHOULDER = "rightShoulder"
    LEFT_HIP = "leftHip"
    RIGHT_HIP = "rightHip"
    LEFT_KNEE = "leftKnee"
    RIGHT_KNEE = "rightKnee"


@dataclass(frozen=True, slots=True)
class Keypoint:
    """A single detected body landmark in pixel coordinates.

    Confidence is clamped to [0, 1].
    """

    name: BodyLandmark
    x: float
    y: float
    confidence: float = 1.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "confidence", min(1.0, max(0.0, float(self.confidence))))

    @property
    def point(self) -> Point2D:
        """Keypoint position as a Point2D."""
        return Point2D(self.x, self.y)


@dataclass(frozen=True, slots=True)
class Pose:
    """Keypoints detected in one video frame.

    Attributes:
        keypoints: Detected keypoints (any order, at most one per landmark)
        timestamp: Capture time in seconds
    """

    keypoints: tuple[Keypoint, ...]
    timestamp: float = 0.0

    def get(self, landmark: BodyLandmark) -> Keypoint | None:
        """Get a keypoint by landmark, or None if not detected."""
        for keypoint in self.keypoints:
            if keypoint.name is landmark:
                return keypoint
        return None

    def require(self, landmark: BodyLandmark) -> Keypoint:
        """Get a keypoint by landmark.

        Raises:
            MissingLandmarkError: If the landmark was not detected
        """
        keypoint = self.get(landmark)
        if keypoint is None:
            raise MissingLandmarkError(landmark.value)
        return keypoint


@dataclass(frozen=True, slots=True)
class TrajectoryPoint:
    """Tracked object position at a point in time (seconds)."""

    point: Point2D
    time: float


@dataclass(frozen=True, slots=True)
class Trajectory:
    """Ordered object positions plus the recorded landing point.

    Attributes:
        points: Positions ordered by time
        landing_point: Where the object came down; defaults to the last position
    """

    points: tuple[TrajectoryPoint, ...]
    landing_point: Point2D | None = None

    def __post_init__(self) -> None:
        times = [p.time for p in self.points]
        if any(later < earlier for earlier, later in zip(times, times[1:])):
            raise ValueError("Trajectory points must be ordered by time")

    def __len__(self) -> int:
        return len(self.points)

    @property
    def start(self) -> Point2D:
        """First tracked position."""
        return self.points[0].point

    @property
    def landing(self) -> Point2D:
        """Recorded landing point, or the last tracked position."""
        if self.landing_point is not None:
            return self.landing_point
        return self.points[-1].point


@dataclass(frozen=True, slots=True)
class Acceleration:
    """Linear acceleration in m/s^2."""

    x: float
    y: float
    z: float


@dataclass(frozen=True, slots=True)
class InertialSample:
    """One accelerometer reading."""

    acceleration: Acceleration
    timestamp_ms: float


@dataclass(frozen=True, slots=True)
class OrientationSample:
    """One device orientation reading in degrees."""

    alpha: float
    beta: float
    gamma: float
    timestamp_ms: float


@dataclass(frozen=True, slots=True)
class GpsFix:
    """One geolocation fix."""

    lat: float
    lng: float
    timestamp_ms: float
    accuracy_m: float = 0.0


class ReferenceObjectKind(Enum):
    """Physical objects of known size usable for calibration."""

    CREDIT_CARD = "credit_card"
    COIN_QUARTER = "coin_quarter"
    COIN_PENNY = "coin_penny"
    SMARTPHONE = "smartphone"
    A4_PAPER = "a4_paper"


@dataclass(frozen=True, slots=True)
class ReferenceDimensions:
    """Physical size of a reference object in centimeters.

    Round objects are measured by diameter, stored as both width and height.
    """

    width_cm: float
    height_cm: float
    is_round: bool = False

    @classmethod
    def circle(cls, diameter_cm: float) -> ReferenceDimensions:
        """Dimensions of a round object."""
        return cls(width_cm=diameter_cm, height_cm=diameter_cm, is_round=True)


REFERENCE_OBJECTS: Mapping[ReferenceObjectKind, ReferenceDimensions] = MappingProxyType(
    {
        ReferenceObjectKind.CREDIT_CARD: ReferenceDimensions(width_cm=8.56, height_cm=5.398),
        ReferenceObjectKind.COIN_QUARTER: ReferenceDimensions.circle(2.426),
        ReferenceObjectKind.COIN_PENNY: ReferenceDimensions.circle(1.955),
        # Average handset
        ReferenceObjectKind.SMARTPHONE: ReferenceDimensions(width_cm=7.0, height_cm=14.0),
        ReferenceObjectKind.A4_PAPER: ReferenceDimensions(width_cm=21.0, height_cm=29.7),
    }
)


@dataclass(frozen=True, slots=True)
class PixelBounds:
    """Axis-aligned bounding box in pixels."""

    x: float
    y: float
    width: float
    height: float


@dataclass(frozen=True, slots=True)
class ReferenceDetection:
    """A reference object found in a frame."""

    kind: ReferenceObjectKind
    bounds: PixelBounds


@dataclass(frozen=True, slots=True)
class CalibrationData:
    """Per-session calibration, consumed read-only by evaluators.

    Attributes:
        reference_object: Object the scale was derived from, if any
        pixels_per_cm: Pixels per centimeter at the subject's distance
        camera_height_m: Camera height above the floor
        device_orientation: Orientation reported by the capturing device
    """

    reference_object: ReferenceObjectKind | None = None
    pixels_per_cm: float | None = None
    camera_height_m: float | None = None
    device_orientation: str | None = None

    def resolve_pixels_per_cm(self, default: float) -> float:
        """Return the calibrated scale, or ``default`` when none was recorded."""
        if self.pixels_per_cm is None:
            return default
        return self.pixels_per_cm


@dataclass(slots=True)
class Frame:
    """A decoded video frame handed to a vision backend.

    Attributes:
        image: BGR image array (OpenCV format)
        timestamp: Frame timestamp in seconds
        index: Frame sequence number
    """

    image: NDArray[np.uint8]
    timestamp: float
    index: int

    @property
    def width(self) -> int:
        """Frame width in pixels."""
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        """Frame height in pixels."""
        return int(self.image.shape[0])


class FitnessTest(Enum):
    """The ten supported fitness tests."""

    HEIGHT = "height"
    WEIGHT = "weight"
    SIT_AND_REACH = "sit_and_reach"
    VERTICAL_JUMP = "vertical_jump"
    BROAD_JUMP = "broad_jump"
    MEDICINE_BALL_THROW = "medicine_ball_throw"
    SPRINT_30M = "30m_sprint"
    SHUTTLE_RUN = "shuttle_run"
    SIT_UPS = "sit_ups"
    ENDURANCE_RUN = "endurance_run"

    @classmethod
    def parse(cls, value: FitnessTest | str) -> FitnessTest:
        """Look up a test by enum member or string value.

        Raises:
            UnknownTestTypeError: If the value names no supported test
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError as e:
            raise UnknownTestTypeError(str(value)) from e


class Rating(Enum):
    """Four-bucket performance rating."""

    POOR = "Poor"
    AVERAGE = "Average"
    GOOD = "Good"
    EXCELLENT = "Excellent"

    @property
    def label(self) -> str:
        """Display label."""
        return self.value


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True, slots=True)
class TestResult:
    """Outcome of one fitness test attempt.

    The unit of ``score`` is test-specific (cm, kg, inches, meters, seconds,
    reps, minutes) and is only reconciled during normalization.

    Attributes:
        test_type: Test value, e.g. "vertical_jump"
        score: Rounded test score
        unit: Unit of the score
        accuracy: Expected accuracy of the method, clamped to [0, 100]
        timestamp: When the result was produced
        raw_data: Diagnostic payload
        feedback: Human-readable summary
        rating: Performance bucket, None for direct measurements
    """

    test_type: str
    score: float
    unit: str
    accuracy: float
    timestamp: datetime = field(default_factory=_utcnow)
    raw_data: dict[str, Any] = field(default_factory=dict)
    feedback: str = ""
    rating: Rating | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "accuracy", min(100.0, max(0.0, float(self.accuracy))))

    @property
    def is_simulated(self) -> bool:
        """Whether the score is an estimate without sensor ground truth."""
        return False

    @property
    def low_confidence(self) -> bool:
        """Whether the score should be presented as low confidence."""
        return False


@dataclass(frozen=True, slots=True)
class SimulatedEstimate(TestResult):
    """Estimated result for uploaded videos that lack sensor ground truth.

    Never conflate with sensor-derived results: ``is_simulated`` and
    ``low_confidence`` are always True.
    """

    reason: str = "no sensor ground truth"

    @property
    def is_simulated(self) -> bool:
        return True

    @property
    def low_confidence(self) -> bool:
        return True


@dataclass(slots=True)
class FitnessProfile:
    """Most recent result per test, used for the overall fitness score."""

    latest_results: dict[str, TestResult] = field(default_factory=dict)

    def record(self, result: TestResult) -> None:
        """Store a result unless a newer one for the same test is already held."""
        current = self.latest_results.get(result.test_type)
        if current is None or result.timestamp >= current.timestamp:
            self.latest_results[result.test_type] = result

    def latest(self, test: FitnessTest | str) -> TestResult | None:
        """Most recent result for a test."""
        key = test.value if isinstance(test, FitnessTest) else test
        return self.latest_results.get(key)

    def results(self) -> list[TestResult]:
        """All held results."""
        return list(self.latest_results.values())

    def overall_score(self) -> float:
        """Weighted overall fitness score in [0, 100]."""
        from fitness_assess.analysis.scoring import aggregate

        return aggregate(self.results())

    def __len__(self) -> int:
        return len(self.latest_results)

