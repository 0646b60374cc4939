"""Quantities derived from pose keypoints and object trajectories.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import math
from typing import Sequence

from fitness_assess.analysis.geometry import angle, distance, round_to_step
from fitness_assess.core.config import PoseSettings
from fitness_assess.core.exceptions import (
    CalibrationMissingError,
    InsufficientSamplesError,
    InsufficientTrajectoryError,
    MissingLandmarkError,
)
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import BodyLandmark, Keypoint, Point2D, Pose, Trajectory

logger = get_logger(__name__)

# Empirical forward-lean to reach mapping. Not derived from a calibration
# study; treat as a placeholder until real sit-and-reach data is available.
REACH_CM_PER_DEGREE = 0.3
NEUTRAL_HIP_ANGLE_DEG = 90.0
INCHES_PER_CM = 0.393701

MIN_TRAJECTORY_POINTS = 3


def height_from_frame(
    head_point: Point2D,
    floor_point: Point2D,
    pixels_per_cm: float | None,
) -> float:
    """Standing height from head and floor points.

    Args:
        head_point: Top of the head (pixels)
        floor_point: Floor under the feet (pixels)
        pixels_per_cm: Scale from a detected reference object, None if none was found

    Returns:
        Height in centimeters, rounded to the nearest 0.5 cm

    Raises:
        CalibrationMissingError: If no reference scale is available
    """
    if pixels_per_cm is None:
        raise CalibrationMissingError()

    return round_to_step(distance(head_point, floor_point, pixels_per_cm), 0.5)


def _as_pose(keypoints: Pose | Sequence[Keypoint]) -> Pose:
    if isinstance(keypoints, Pose):
        return keypoints
    return Pose(keypoints=tuple(keypoints))


def flexibility_angle(keypoints: Pose | Sequence[Keypoint]) -> float:
    """Forward-lean angle at the hip between shoulder and knee.

    Uses the left hip (right hip if the left is missing), left shoulder and
    left knee.

    Raises:
        MissingLandmarkError: If a required landmark is absent
        DegenerateGeometryError: If landmarks coincide
    """
    pose = _as_pose(keypoints)

    hip = pose.get(BodyLandmark.LEFT_HIP) or pose.get(BodyLandmark.RIGHT_HIP)
    if hip is None:
        raise MissingLandmarkError(BodyLandmark.LEFT_HIP.value)
    shoulder = pose.require(BodyLandmark.LEFT_SHOULDER)
    knee = pose.require(BodyLandmark.LEFT_KNEE)

    return angle(shoulder.point, hip.point, knee.point)


def reach_distance_inches(hip_angle: float) -> float:
    """Unrounded sit-and-reach distance for a forward-lean angle.

    ``max(0, (90 - angle) * 0.3)`` centimeters converted to inches.
    """
    reach_cm = max(0.0, (NEUTRAL_HIP_ANGLE_DEG - hip_angle) * REACH_CM_PER_DEGREE)
    return reach_cm * INCHES_PER_CM


def reach_from_angle(hip_angle: float) -> float:
    """Sit-and-reach distance in inches, rounded to the nearest 0.5 inch."""
    return round_to_step(reach_distance_inches(hip_angle), 0.5)


def throw_distance(trajectory: Trajectory, pixels_per_cm: float) -> float:
    """Distance from release point to landing point.

    Args:
        trajectory: Tracked ball positions and landing point
        pixels_per_cm: Calibrated scale

    Returns:
        Throw distance in meters (unrounded)

    Raises:
        InsufficientTrajectoryError: If fewer than 3 points were tracked
    """
    if len(trajectory) < MIN_TRAJECTORY_POINTS:
        raise InsufficientTrajectoryError(
            f"Ball trajectory not detected ({len(trajectory)} points, "
            f"need {MIN_TRAJECTORY_POINTS})"
        )

    return distance(trajectory.start, trajectory.landing, pixels_per_cm) / 100


def sample_at_cadence(
    poses: Sequence[Pose],
    duration_s: float,
    interval_s: float = 0.5,
) -> list[Pose]:
    """Resample the stream at ``start + k * interval_s`` for k = 1..N.

    ``start`` is the first pose's timestamp and N is the number of whole
    intervals in ``duration_s``. Each instant takes the latest pose at or
    before it, so a held posture is sampled once per instant and the
    first pose itself is only seen through later instants.
    """
    if not poses:
        return []

    start = poses[0].timestamp
    instant_count = math.floor(duration_s / interval_s + 1e-9)
    sampled: list[Pose] = []
    latest = 0

    for k in range(1, instant_count + 1):
        instant = start + k * interval_s
        while latest + 1 < len(poses) and poses[latest + 1].timestamp <= instant + 1e-9:
            latest += 1
        sampled.append(poses[latest])

    return sampled


def situp_reps(
    poses: Sequence[Pose],
    duration_s: float,
    settings: PoseSettings | None = None,
) -> int:
    """Count sit-up repetitions in a pose stream.

    Each sampled shoulder-hip-knee angle above the extension threshold (160°)
    or below the contraction threshold (90°) adds half a rep; the result is
    the floor of the half-rep total. Without debouncing, a noisy signal that
    lingers in either zone is counted once per sample, which over-counts.

    Args:
        poses: Pose stream in capture order
        duration_s: Test duration in seconds
        settings: Pose settings (uses defaults if None). A non-zero
            ``rep_debounce_samples`` deviates from the reference counting.

    Returns:
        Whole repetitions

    Raises:
        InsufficientSamplesError: If the stream is empty
        MissingLandmarkError: If a sampled pose lacks the left shoulder, hip or knee
    """
    settings = settings or PoseSettings()

    if not poses:
        raise InsufficientSamplesError(required=1, actual=0)

    sampled = sample_at_cadence(poses, duration_s, settings.sample_interval_s)
    debounce = settings.rep_debounce_samples
    if debounce:
        logger.info("Sit-up counting with %d-sample debounce (non-reference)", debounce)

    half_reps = 0
    last_zone: str | None = None
    since_count = 0

    for pose in sampled:
        shoulder = pose.require(BodyLandmark.LEFT_SHOULDER)
        hip = pose.require(BodyLandmark.LEFT_HIP)
        knee = pose.require(BodyLandmark.LEFT_KNEE)

        hip_angle = angle(shoulder.point, hip.point, knee.point)
        since_count += 1

        if hip_angle > settings.extension_angle_deg:
            zone = "extended"
        elif hip_angle < settings.contraction_angle_deg:
            zone = "contracted"
        else:
            continue

        if debounce and zone == last_zone and since_count <= debounce:
            continue

        half_reps += 1
        last_zone = zone
        since_count = 0

    logger.debug("Sit-ups: %d half reps over %d samples", half_reps, len(sampled))
    return half_reps // 2
