"""Tests for pose and trajectory derived quantities."""

from __future__ import annotations

import pytest
from conftest import CURLED_SHOULDER, EXTENDED_SHOULDER, make_pose

from fitness_assess.analysis.vision_signals import (
    flexibility_angle,
    height_from_frame,
    reach_distance_inches,
    reach_from_angle,
    sample_at_cadence,
    situp_reps,
    throw_distance,
)
from fitness_assess.core.config import PoseSettings
from fitness_assess.core.exceptions import (
    CalibrationMissingError,
    InsufficientSamplesError,
    InsufficientTrajectoryError,
    MissingLandmarkError,
)
from fitness_assess.core.types import (
    BodyLandmark,
    Keypoint,
    Point2D,
    Pose,
    Trajectory,
    TrajectoryPoint,
)


class TestHeight:
    """Tests for standing height measurement."""

    def test_height_from_points(self) -> None:
        """720 px at 10 px/cm should be 72 cm."""
        assert height_from_frame(Point2D(320, 50), Point2D(320, 770), 10.0) == 72.0

    def test_rounds_to_half_cm(self) -> None:
        """Height should round to the nearest 0.5 cm."""
        assert height_from_frame(Point2D(0, 0), Point2D(0, 1723), 10.0) == 172.5

    def test_missing_calibration_raises(self) -> None:
        """Without a reference scale there is no height."""
        with pytest.raises(CalibrationMissingError):
            height_from_frame(Point2D(320, 50), Point2D(320, 770), None)


class TestFlexibility:
    """Tests for sit-and-reach analysis."""

    def test_flexibility_angle(self, curled_pose: Pose) -> None:
        """Angle at the hip between shoulder and knee."""
        assert flexibility_angle(curled_pose) == pytest.approx(45.0)

    def test_accepts_keypoint_list(self, curled_pose: Pose) -> None:
        """A bare keypoint list should work like a pose."""
        assert flexibility_angle(list(curled_pose.keypoints)) == pytest.approx(45.0)

    def test_right_hip_fallback(self) -> None:
        """The right hip should be used when the left is missing."""
        keypoints = [
            Keypoint(BodyLandmark.LEFT_SHOULDER, 0.0, 100.0),
            Keypoint(BodyLandmark.RIGHT_HIP, 0.0, 0.0),
            Keypoint(BodyLandmark.LEFT_KNEE, 100.0, 0.0),
        ]
        assert flexibility_angle(keypoints) == pytest.approx(90.0)

    def test_missing_shoulder_raises(self) -> None:
        """A missing shoulder should name the landmark."""
        keypoints = [
            Keypoint(BodyLandmark.LEFT_HIP, 0.0, 0.0),
            Keypoint(BodyLandmark.LEFT_KNEE, 100.0, 0.0),
        ]
        with pytest.raises(MissingLandmarkError) as exc_info:
            flexibility_angle(keypoints)
        assert exc_info.value.landmark == "leftShoulder"

    def test_reach_from_angle(self) -> None:
        """45° lean should reach 13.5 cm, about 5.3 inches, rounded to 5.5."""
        assert reach_distance_inches(45.0) == pytest.approx(13.5 * 0.393701)
        assert reach_from_angle(45.0) == 5.5

    def test_upright_reaches_nothing(self) -> None:
        """Angles of 90° or more should give zero reach."""
        assert reach_from_angle(90.0) == 0.0
        assert reach_from_angle(150.0) == 0.0


class TestThrowDistance:
    """Tests for medicine ball throw distance."""

    def test_release_to_landing(self) -> None:
        """Distance should run from the first point to the landing point."""
        trajectory = Trajectory(
            points=(
                TrajectoryPoint(Point2D(0, 0), 0.0),
                TrajectoryPoint(Point2D(200, -150), 0.3),
                TrajectoryPoint(Point2D(400, -50), 0.6),
            ),
            landing_point=Point2D(2500, 0),
        )
        assert throw_distance(trajectory, 5.0) == pytest.approx(5.0)

    def test_landing_defaults_to_last_point(self) -> None:
        """Without a landing point the last tracked point is used."""
        trajectory = Trajectory(
            points=tuple(TrajectoryPoint(Point2D(x, 0), x / 100) for x in (0, 100, 500))
        )
        assert throw_distance(trajectory, 5.0) == pytest.approx(1.0)

    def test_too_few_points_raises(self) -> None:
        """Fewer than three points is not a trajectory."""
        trajectory = Trajectory(
            points=(TrajectoryPoint(Point2D(0, 0), 0.0), TrajectoryPoint(Point2D(10, 0), 0.1))
        )
        with pytest.raises(InsufficientTrajectoryError):
            throw_distance(trajectory, 5.0)

    def test_unordered_points_rejected(self) -> None:
        """Trajectory points must be ordered by time."""
        with pytest.raises(ValueError):
            Trajectory(
                points=(TrajectoryPoint(Point2D(0, 0), 1.0), TrajectoryPoint(Point2D(1, 0), 0.5))
            )


class TestSampling:
    """Tests for fixed-cadence pose sampling."""

    def test_latest_pose_at_each_instant(self) -> None:
        """Each half-second instant takes the latest pose at or before it."""
        poses = [make_pose(EXTENDED_SHOULDER, timestamp=i / 10) for i in range(11)]

        sampled = sample_at_cadence(poses, duration_s=1.0, interval_s=0.5)

        assert [p.timestamp for p in sampled] == [0.5, 1.0]

    def test_held_pose_repeats(self) -> None:
        """A pose is sampled at every instant until a newer one arrives."""
        poses = [make_pose(EXTENDED_SHOULDER, timestamp=t) for t in (0.0, 1.0)]

        sampled = sample_at_cadence(poses, duration_s=2.0)

        assert [p.timestamp for p in sampled] == [0.0, 1.0, 1.0, 1.0]

    def test_instants_relative_to_first_pose(self) -> None:
        """Instants are offsets from the first pose's timestamp."""
        poses = [make_pose(EXTENDED_SHOULDER, timestamp=10.0 + i * 0.5) for i in range(4)]

        sampled = sample_at_cadence(poses, duration_s=1.5)

        assert [p.timestamp for p in sampled] == [10.5, 11.0, 11.5]

    def test_duration_shorter_than_interval(self) -> None:
        """No whole interval means no samples."""
        assert sample_at_cadence([make_pose(EXTENDED_SHOULDER)], duration_s=0.4) == []

    def test_empty_stream(self) -> None:
        """No poses should give no samples."""
        assert sample_at_cadence([], duration_s=60.0) == []


class TestSitUps:
    """Tests for sit-up repetition counting."""

    def test_counts_alternating_reps(self, situp_sequence: list[Pose]) -> None:
        """Each extended/curled pair should count as one rep."""
        assert situp_reps(situp_sequence, duration_s=4.0) == 4

    def test_odd_half_rep_is_floored(self, situp_sequence: list[Pose]) -> None:
        """A trailing half rep should not count."""
        assert situp_reps(situp_sequence[:8], duration_s=3.5) == 3

    def test_mid_range_angles_ignored(self) -> None:
        """Angles between the thresholds add nothing."""
        poses = [make_pose((-50.0, 100.0), timestamp=i * 0.5) for i in range(6)]
        assert situp_reps(poses, duration_s=60.0) == 0

    def test_duration_limits_window(self, situp_sequence: list[Pose]) -> None:
        """Poses after the test duration should be ignored."""
        assert situp_reps(situp_sequence, duration_s=2.0) == 2

    def test_first_pose_not_sampled(self) -> None:
        """The opening pose only counts if it is still held at the first instant."""
        poses = [
            make_pose((-50.0, 100.0), timestamp=0.0),
            make_pose(EXTENDED_SHOULDER, timestamp=0.5),
            make_pose(CURLED_SHOULDER, timestamp=1.0),
        ]
        assert situp_reps(poses, duration_s=1.0) == 1

    def test_held_posture_counts_each_instant(self) -> None:
        """A curl held across instants adds a half rep per instant."""
        poses = [
            make_pose(EXTENDED_SHOULDER, timestamp=0.0),
            make_pose(CURLED_SHOULDER, timestamp=1.0),
        ]
        assert situp_reps(poses, duration_s=2.0) == 2

    def test_missing_knee_raises(self) -> None:
        """A sampled pose without the left knee should raise."""
        pose = Pose(
            keypoints=(
                Keypoint(BodyLandmark.LEFT_SHOULDER, -100.0, 0.0),
                Keypoint(BodyLandmark.LEFT_HIP, 0.0, 0.0),
            )
        )
        with pytest.raises(MissingLandmarkError) as exc_info:
            situp_reps([pose], duration_s=60.0)
        assert exc_info.value.landmark == "leftKnee"

    def test_empty_stream_raises(self) -> None:
        """An empty pose stream cannot be counted."""
        with pytest.raises(InsufficientSamplesError):
            situp_reps([], duration_s=60.0)

    def test_lingering_zone_counts_every_sample(self) -> None:
        """Without debounce, each sample in a zone adds a half rep."""
        shoulders = [EXTENDED_SHOULDER] * 3 + [CURLED_SHOULDER] * 2
        poses = [make_pose(s, timestamp=i * 0.5) for i, s in enumerate(shoulders)]

        assert situp_reps(poses, duration_s=2.0) == 2

    def test_debounce_suppresses_repeats(self) -> None:
        """Debouncing should skip repeated samples in the same zone."""
        shoulders = [EXTENDED_SHOULDER] * 3 + [CURLED_SHOULDER] * 2
        poses = [make_pose(s, timestamp=i * 0.5) for i, s in enumerate(shoulders)]

        assert situp_reps(poses, 2.0, PoseSettings(rep_debounce_samples=1)) == 1
