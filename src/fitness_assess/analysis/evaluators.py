"""Per-test evaluators turning analyzer output into TestResults.

Each evaluator is a pure function of its inputs, the session calibration
and settings. Analyzer failures surface as ``TestExecutionError`` carrying
the test type and the underlying cause.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import functools
import math
from dataclasses import dataclass, replace
from typing import Callable, Union

from fitness_assess.analysis import gps, inertial, vision_signals
from fitness_assess.analysis.geometry import distance, round_to_step, validate_scale
from fitness_assess.analysis.ratings import RATING_SCALES, endurance_scale
from fitness_assess.analysis.simulation import SIMULATED_TESTS, SimulatedEstimator
from fitness_assess.core.config import Settings, get_settings
from fitness_assess.core.exceptions import (
    FitnessAssessError,
    ImplausibleTrackError,
    InsufficientSamplesError,
    InsufficientTrajectoryError,
    InvalidInputError,
    JumpNotDetectedError,
    TestExecutionError,
)
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import (
    CalibrationData,
    FitnessTest,
    GpsFix,
    InertialSample,
    OrientationSample,
    Point2D,
    Pose,
    ReferenceDetection,
    TestResult,
    Trajectory,
)
from fitness_assess.vision.calibration import calibrate

logger = get_logger(__name__)


@dataclass(frozen=True)
class VisionInputs:
    """Video-derived inputs.

    Attributes:
        poses: Pose stream in capture order
        trajectory: Tracked object trajectory
        head_point: Top of the head for height measurement
        floor_point: Floor under the feet for height measurement
        takeoff_point: Toe line before a broad jump
        landing_point: Heel contact after a broad jump
        reference: Reference object detected in the frame
        duration_s: Recording duration for timed tests
    """

    poses: tuple[Pose, ...] = ()
    trajectory: Trajectory | None = None
    head_point: Point2D | None = None
    floor_point: Point2D | None = None
    takeoff_point: Point2D | None = None
    landing_point: Point2D | None = None
    reference: ReferenceDetection | None = None
    duration_s: float | None = None


@dataclass(frozen=True)
class InertialInputs:
    """Device motion recorded during one attempt."""

    motion: tuple[InertialSample, ...] = ()
    orientation: tuple[OrientationSample, ...] = ()


@dataclass(frozen=True)
class GpsInputs:
    """Geolocation fixes recorded during one run."""

    fixes: tuple[GpsFix, ...] = ()
    target_distance_m: float | None = None


@dataclass(frozen=True)
class ManualInputs:
    """Values entered by hand."""

    weight_kg: float


TestInputs = Union[VisionInputs, InertialInputs, GpsInputs, ManualInputs]
Evaluator = Callable[..., TestResult]

EVALUATORS: dict[FitnessTest, Evaluator] = {}


def _fmt(value: float) -> str:
    return f"{value:g}"


def _evaluator(test: FitnessTest, input_type: type) -> Callable[[Callable[..., TestResult]], Evaluator]:
    """Register an evaluator and wrap its failures as TestExecutionError."""

    def decorator(func: Callable[..., TestResult]) -> Evaluator:
        @functools.wraps(func)
        def wrapper(
            inputs: TestInputs,
            calibration: CalibrationData | None = None,
            settings: Settings | None = None,
        ) -> TestResult:
            settings = settings or get_settings()
            calibration = calibration or CalibrationData()
            try:
                if not isinstance(inputs, input_type):
                    raise InvalidInputError(
                        f"{test.value} expects {input_type.__name__}, "
                        f"got {type(inputs).__name__}"
                    )
                return func(inputs, calibration, settings)
            except FitnessAssessError as e:
                logger.warning("%s evaluation failed: %s", test.value, e)
                raise TestExecutionError(test.value, e) from e

        EVALUATORS[test] = wrapper
        return wrapper

    return decorator


@_evaluator(FitnessTest.HEIGHT, VisionInputs)
def evaluate_height(
    inputs: VisionInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Standing height from head and floor points."""
    if inputs.head_point is None or inputs.floor_point is None:
        raise InvalidInputError("Height needs head and floor points")

    if inputs.reference is not None:
        bounds = inputs.reference.bounds
        pixels_per_cm: float | None = calibrate(
            inputs.reference.kind, bounds.width, bounds.height, settings.calibration
        )
    else:
        pixels_per_cm = calibration.pixels_per_cm

    height = vision_signals.height_from_frame(
        inputs.head_point, inputs.floor_point, pixels_per_cm
    )

    return TestResult(
        test_type=FitnessTest.HEIGHT.value,
        score=height,
        unit="cm",
        accuracy=95,
        raw_data={
            "pixels_per_cm": pixels_per_cm,
            "head_point": (inputs.head_point.x, inputs.head_point.y),
            "floor_point": (inputs.floor_point.x, inputs.floor_point.y),
        },
        feedback=f"Height measured: {_fmt(height)}cm (±1-2cm accuracy)",
    )


@_evaluator(FitnessTest.WEIGHT, ManualInputs)
def evaluate_weight(
    inputs: ManualInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Manually entered body weight."""
    weight = inputs.weight_kg
    if not math.isfinite(weight) or weight <= 0:
        raise InvalidInputError(f"Invalid weight: {weight}")

    return TestResult(
        test_type=FitnessTest.WEIGHT.value,
        score=round_to_step(weight, 0.1),
        unit="kg",
        accuracy=100,
        raw_data={"input_method": "manual"},
        feedback=f"Weight recorded: {_fmt(weight)}kg",
    )


@_evaluator(FitnessTest.SIT_AND_REACH, VisionInputs)
def evaluate_sit_and_reach(
    inputs: VisionInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Flexibility from the forward-lean hip angle of the first pose."""
    if not inputs.poses:
        raise InsufficientSamplesError(required=1, actual=0, message="Pose not detected clearly")

    pose = inputs.poses[0]
    hip_angle = vision_signals.flexibility_angle(pose)
    reach = vision_signals.reach_distance_inches(hip_angle)
    score = round_to_step(reach, 0.5)
    rating = RATING_SCALES[FitnessTest.SIT_AND_REACH].rate(reach)

    return TestResult(
        test_type=FitnessTest.SIT_AND_REACH.value,
        score=score,
        unit="inches",
        accuracy=92,
        raw_data={"angle": hip_angle, "keypoints": pose.keypoints},
        feedback=f"Flexibility: {rating.label} ({_fmt(score)} inches)",
        rating=rating,
    )


@_evaluator(FitnessTest.VERTICAL_JUMP, InertialInputs)
def evaluate_vertical_jump(
    inputs: InertialInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Jump height from accelerometer flight time."""
    height = inertial.jump_height(inputs.motion, settings.inertial)
    if height <= 0:
        raise JumpNotDetectedError()

    flight = inertial.detect_flight(inputs.motion, settings.inertial)
    rating = RATING_SCALES[FitnessTest.VERTICAL_JUMP].rate(height)

    return TestResult(
        test_type=FitnessTest.VERTICAL_JUMP.value,
        score=height,
        unit="cm",
        accuracy=93,
        raw_data={
            "sensor_data": "accelerometer",
            "flight_time_s": flight.flight_time_s if flight else None,
        },
        feedback=f"Vertical Jump: {rating.label} ({height}cm)",
        rating=rating,
    )


@_evaluator(FitnessTest.BROAD_JUMP, VisionInputs)
def evaluate_broad_jump(
    inputs: VisionInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Horizontal distance between takeoff and landing points."""
    takeoff, landing = inputs.takeoff_point, inputs.landing_point
    if (takeoff is None or landing is None) and inputs.trajectory is not None:
        if len(inputs.trajectory) == 0:
            raise InsufficientTrajectoryError("Jump trajectory is empty")
        takeoff, landing = inputs.trajectory.start, inputs.trajectory.landing
    if takeoff is None or landing is None:
        raise InvalidInputError("Broad jump needs takeoff and landing points")

    pixels_per_cm = validate_scale(
        calibration.resolve_pixels_per_cm(settings.calibration.default_px_per_cm)
    )
    meters = distance(takeoff, landing, pixels_per_cm) / 100
    score = round_to_step(meters, 0.01)
    rating = RATING_SCALES[FitnessTest.BROAD_JUMP].rate(meters)

    return TestResult(
        test_type=FitnessTest.BROAD_JUMP.value,
        score=score,
        unit="meters",
        accuracy=90,
        raw_data={
            "takeoff_point": (takeoff.x, takeoff.y),
            "landing_point": (landing.x, landing.y),
            "pixels_per_cm": pixels_per_cm,
        },
        feedback=f"Broad Jump: {rating.label} ({_fmt(score)}m)",
        rating=rating,
    )


@_evaluator(FitnessTest.MEDICINE_BALL_THROW, VisionInputs)
def evaluate_medicine_ball_throw(
    inputs: VisionInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Throw distance from the tracked ball trajectory."""
    if inputs.trajectory is None:
        raise InsufficientTrajectoryError("Ball trajectory not detected")

    pixels_per_cm = calibration.resolve_pixels_per_cm(settings.calibration.default_px_per_cm)
    meters = vision_signals.throw_distance(inputs.trajectory, pixels_per_cm)
    score = round_to_step(meters, 0.1)
    rating = RATING_SCALES[FitnessTest.MEDICINE_BALL_THROW].rate(meters)

    return TestResult(
        test_type=FitnessTest.MEDICINE_BALL_THROW.value,
        score=score,
        unit="meters",
        accuracy=88,
        raw_data={"trajectory": inputs.trajectory.points, "pixels_per_cm": pixels_per_cm},
        feedback=f"Medicine Ball Throw: {rating.label} ({_fmt(score)}m)",
        rating=rating,
    )


def _usable_fixes(inputs: GpsInputs, settings: Settings) -> list[GpsFix]:
    fixes = gps.filter_by_accuracy(inputs.fixes, settings.gps.max_accuracy_m)
    if len(fixes) < 2:
        raise InsufficientSamplesError(required=2, actual=len(fixes))
    return fixes


@_evaluator(FitnessTest.SPRINT_30M, GpsInputs)
def evaluate_sprint(
    inputs: GpsInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """30 m sprint time from a GPS track."""
    fixes = _usable_fixes(inputs, settings)
    radius = settings.gps.earth_radius_m

    covered = gps.total_distance(fixes, radius)
    gps.check_course(covered, settings.gps.sprint_distance_m, settings.gps.sprint_tolerance_m)

    seconds = gps.elapsed_time(fixes)
    score = round_to_step(seconds, 0.01)
    rating = RATING_SCALES[FitnessTest.SPRINT_30M].rate(seconds)

    return TestResult(
        test_type=FitnessTest.SPRINT_30M.value,
        score=score,
        unit="seconds",
        accuracy=85,
        raw_data={
            "distance_m": covered,
            "mean_gps_accuracy_m": sum(f.accuracy_m for f in fixes) / len(fixes),
        },
        feedback=f"30m Sprint: {rating.label} ({_fmt(score)}s)",
        rating=rating,
    )


@_evaluator(FitnessTest.SHUTTLE_RUN, InertialInputs)
def evaluate_shuttle_run(
    inputs: InertialInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Shuttle run time, validated against the heading-reversal pattern."""
    changes = inertial.direction_changes(inputs.orientation, settings.inertial)
    expected = settings.inertial.expected_direction_changes

    if abs(changes - expected) > settings.inertial.direction_change_tolerance:
        raise ImplausibleTrackError(
            f"Shuttle run pattern not detected correctly ({changes} changes, expected {expected})"
        )

    seconds = inertial.stream_duration_s(inputs.orientation)
    score = round_to_step(seconds, 0.1)
    rating = RATING_SCALES[FitnessTest.SHUTTLE_RUN].rate(seconds)

    return TestResult(
        test_type=FitnessTest.SHUTTLE_RUN.value,
        score=score,
        unit="seconds",
        accuracy=90,
        raw_data={"direction_changes": changes, "expected_changes": expected},
        feedback=f"Shuttle Run: {rating.label} ({_fmt(score)}s)",
        rating=rating,
    )


@_evaluator(FitnessTest.SIT_UPS, VisionInputs)
def evaluate_sit_ups(
    inputs: VisionInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """Sit-up repetitions counted from the pose stream."""
    duration = inputs.duration_s if inputs.duration_s is not None else settings.pose.situp_duration_s
    reps = vision_signals.situp_reps(inputs.poses, duration, settings.pose)
    rating = RATING_SCALES[FitnessTest.SIT_UPS].rate(reps)

    return TestResult(
        test_type=FitnessTest.SIT_UPS.value,
        score=reps,
        unit="reps",
        accuracy=95,
        raw_data={"duration_s": duration, "detection_method": "computer_vision"},
        feedback=f"Sit-ups: {rating.label} ({reps} reps in {_fmt(duration)}s)",
        rating=rating,
    )


@_evaluator(FitnessTest.ENDURANCE_RUN, GpsInputs)
def evaluate_endurance_run(
    inputs: GpsInputs, calibration: CalibrationData, settings: Settings
) -> TestResult:
    """800 m or 1600 m run time from a GPS track."""
    target = inputs.target_distance_m
    if target is None:
        raise InvalidInputError("Endurance run needs a target distance")
    scale = endurance_scale(target)

    fixes = _usable_fixes(inputs, settings)
    covered = gps.total_distance(fixes, settings.gps.earth_radius_m)
    gps.check_course(covered, target, target * settings.gps.endurance_tolerance_ratio)

    minutes = gps.elapsed_time(fixes) / 60
    score = round_to_step(minutes, 0.01)
    rating = scale.rate(minutes)

    return TestResult(
        test_type=FitnessTest.ENDURANCE_RUN.value,
        score=score,
        unit="minutes",
        accuracy=88,
        raw_data={"actual_distance_m": covered, "target_distance_m": target},
        feedback=f"{_fmt(target)}m Run: {rating.label} ({_fmt(score)} min)",
        rating=rating,
    )


def evaluate(
    test: FitnessTest | str,
    inputs: TestInputs,
    calibration: CalibrationData | None = None,
    *,
    settings: Settings | None = None,
) -> TestResult:
    """Evaluate one test attempt.

    Args:
        test: Fitness test (enum member or value such as "30m_sprint")
        inputs: Inputs of the modality the test needs
        calibration: Session calibration (empty if None)
        settings: Settings (cached defaults if None)

    Returns:
        Immutable TestResult

    Raises:
        UnknownTestTypeError: If the test is not supported
        TestExecutionError: If the evaluation fails
    """
    test = FitnessTest.parse(test)
    return EVALUATORS[test](inputs, calibration, settings)


def evaluate_upload(
    test: FitnessTest | str,
    inputs: TestInputs | None,
    calibration: CalibrationData | None = None,
    *,
    estimator: SimulatedEstimator,
    video_duration_s: float | None = None,
    settings: Settings | None = None,
) -> TestResult:
    """Evaluate a test from an uploaded video.

    Tests that need motion or GPS sensors return a ``SimulatedEstimate``;
    all others are evaluated from the video-derived inputs. Sit-ups are
    counted over the clip, capped at the configured test duration.
    """
    test = FitnessTest.parse(test)
    settings = settings or get_settings()

    if test in SIMULATED_TESTS:
        target = 800.0
        if isinstance(inputs, GpsInputs) and inputs.target_distance_m is not None:
            target = inputs.target_distance_m
        return estimator.estimate(test, video_duration_s, target_distance_m=target)

    if inputs is None:
        raise TestExecutionError(test.value, InvalidInputError("Uploaded video produced no inputs"))

    if (
        test is FitnessTest.SIT_UPS
        and isinstance(inputs, VisionInputs)
        and video_duration_s is not None
    ):
        clip_duration = min(video_duration_s, settings.pose.situp_duration_s)
        logger.debug("Counting sit-ups over %.1f s of uploaded video", clip_duration)
        inputs = replace(inputs, duration_s=clip_duration)

    return evaluate(test, inputs, calibration, settings=settings)
