"""JSON session documents of recorded samples, as read by the command line.

The core is an in-process library; this format belongs to the CLI only.
A session holds an optional calibration and one entry per test attempt::

    {
      "calibration": {"pixels_per_cm": 10.0},
      "tests": [
        {"test": "height", "head_point": [320, 50], "floor_point": [320, 770]},
        {"test": "weight", "weight_kg": 70.5},
        {"test": "vertical_jump", "motion": [[0.0, -3.0, 0.0, 0], ...]},
        {"test": "30m_sprint", "fixes": [[0.0, 0.0, 0, 3.0], ...]}
      ]
    }

Motion samples are ``[x, y, z, timestamp_ms]``, orientation samples
``[alpha, beta, gamma, timestamp_ms]``, GPS fixes
``[lat, lng, timestamp_ms, accuracy_m]`` and trajectory points
``[x, y, time_s]``.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from fitness_assess.analysis.evaluators import (
    GpsInputs,
    InertialInputs,
    ManualInputs,
    TestInputs,
    VisionInputs,
)
from fitness_assess.core.exceptions import InvalidInputError
from fitness_assess.core.types import (
    Acceleration,
    BodyLandmark,
    CalibrationData,
    FitnessTest,
    GpsFix,
    InertialSample,
    Keypoint,
    OrientationSample,
    PixelBounds,
    Point2D,
    Pose,
    ReferenceDetection,
    ReferenceObjectKind,
    Trajectory,
    TrajectoryPoint,
)

VISION_TESTS = frozenset(
    {
        FitnessTest.HEIGHT,
        FitnessTest.SIT_AND_REACH,
        FitnessTest.BROAD_JUMP,
        FitnessTest.MEDICINE_BALL_THROW,
        FitnessTest.SIT_UPS,
    }
)
INERTIAL_TESTS = frozenset({FitnessTest.VERTICAL_JUMP, FitnessTest.SHUTTLE_RUN})
GPS_TESTS = frozenset({FitnessTest.SPRINT_30M, FitnessTest.ENDURANCE_RUN})


class KeypointModel(BaseModel):
    name: BodyLandmark
    x: float
    y: float
    confidence: float = 1.0


class PoseModel(BaseModel):
    timestamp: float = 0.0
    keypoints: list[KeypointModel]


class TrajectoryModel(BaseModel):
    points: list[tuple[float, float, float]]
    landing_point: tuple[float, float] | None = None


class ReferenceModel(BaseModel):
    kind: ReferenceObjectKind
    bounds: tuple[float, float, float, float]


class CalibrationModel(BaseModel):
    reference_object: ReferenceObjectKind | None = None
    pixels_per_cm: float | None = Field(default=None, gt=0)
    camera_height_m: float | None = None


class AttemptEntry(BaseModel):
    """One recorded test attempt."""

    test: str
    head_point: tuple[float, float] | None = None
    floor_point: tuple[float, float] | None = None
    takeoff_point: tuple[float, float] | None = None
    landing_point: tuple[float, float] | None = None
    reference: ReferenceModel | None = None
    poses: list[PoseModel] = Field(default_factory=list)
    trajectory: TrajectoryModel | None = None
    duration_s: float | None = None
    motion: list[tuple[float, float, float, float]] = Field(default_factory=list)
    orientation: list[tuple[float, float, float, float]] = Field(default_factory=list)
    fixes: list[tuple[float, float, float, float]] = Field(default_factory=list)
    target_distance_m: float | None = None
    weight_kg: float | None = None


class SessionDocument(BaseModel):
    """A recorded assessment session."""

    calibration: CalibrationModel = Field(default_factory=CalibrationModel)
    tests: list[AttemptEntry] = Field(default_factory=list)


def _point(value: tuple[float, float] | None) -> Point2D | None:
    return None if value is None else Point2D(*value)


def to_calibration(model: CalibrationModel) -> CalibrationData:
    """Convert the document's calibration block."""
    return CalibrationData(
        reference_object=model.reference_object,
        pixels_per_cm=model.pixels_per_cm,
        camera_height_m=model.camera_height_m,
    )


def to_inputs(entry: AttemptEntry) -> TestInputs:
    """Build evaluator inputs for an entry's test modality.

    Raises:
        UnknownTestTypeError: If the entry names no supported test
        InvalidInputError: If a trajectory is out of order or a weight is missing
    """
    test = FitnessTest.parse(entry.test)

    if test in VISION_TESTS:
        trajectory = None
        if entry.trajectory is not None:
            try:
                trajectory = Trajectory(
                    points=tuple(
                        TrajectoryPoint(Point2D(x, y), t) for x, y, t in entry.trajectory.points
                    ),
                    landing_point=_point(entry.trajectory.landing_point),
                )
            except ValueError as e:
                raise InvalidInputError(str(e)) from e
        reference = None
        if entry.reference is not None:
            reference = ReferenceDetection(
                kind=entry.reference.kind, bounds=PixelBounds(*entry.reference.bounds)
            )
        return VisionInputs(
            poses=tuple(
                Pose(
                    keypoints=tuple(
                        Keypoint(k.name, k.x, k.y, k.confidence) for k in pose.keypoints
                    ),
                    timestamp=pose.timestamp,
                )
                for pose in entry.poses
            ),
            trajectory=trajectory,
            head_point=_point(entry.head_point),
            floor_point=_point(entry.floor_point),
            takeoff_point=_point(entry.takeoff_point),
            landing_point=_point(entry.landing_point),
            reference=reference,
            duration_s=entry.duration_s,
        )

    if test in INERTIAL_TESTS:
        return InertialInputs(
            motion=tuple(
                InertialSample(Acceleration(x, y, z), t) for x, y, z, t in entry.motion
            ),
            orientation=tuple(OrientationSample(a, b, g, t) for a, b, g, t in entry.orientation),
        )

    if test in GPS_TESTS:
        return GpsInputs(
            fixes=tuple(GpsFix(lat, lng, t, acc) for lat, lng, t, acc in entry.fixes),
            target_distance_m=entry.target_distance_m,
        )

    if entry.weight_kg is None:
        raise InvalidInputError("Weight entry needs weight_kg")
    return ManualInputs(weight_kg=entry.weight_kg)


def load_session(path: Path) -> SessionDocument:
    """Read and validate a session document.

    Raises:
        InvalidInputError: If the file is not valid JSON or fails validation
    """
    try:
        with open(path) as f:
            data = json.load(f)
        return SessionDocument.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as e:
        raise InvalidInputError(f"Invalid session file {path}: {e}") from e
