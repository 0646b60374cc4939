"""Pytest fixtures for fitness assessment tests."""

from __future__ import annotations

import pytest

from fitness_assess.core.config import (
    CalibrationSettings,
    GpsSettings,
    InertialSettings,
    PoseSettings,
    Settings,
)
from fitness_assess.core.exceptions import TestExecutionError
from fitness_assess.core.types import (
    Acceleration,
    BodyLandmark,
    CalibrationData,
    GpsFix,
    InertialSample,
    Keypoint,
    OrientationSample,
    Pose,
    TestResult,
)

# Domain types named Test* are not test classes
TestExecutionError.__test__ = False  # type: ignore[attr-defined]
TestResult.__test__ = False  # type: ignore[attr-defined]


def make_pose(
    shoulder: tuple[float, float],
    hip: tuple[float, float] = (0.0, 0.0),
    knee: tuple[float, float] = (100.0, 0.0),
    timestamp: float = 0.0,
) -> Pose:
    """Create a pose with left shoulder, hip and knee."""
    return Pose(
        keypoints=(
            Keypoint(BodyLandmark.LEFT_SHOULDER, *shoulder),
            Keypoint(BodyLandmark.LEFT_HIP, *hip),
            Keypoint(BodyLandmark.LEFT_KNEE, *knee),
        ),
        timestamp=timestamp,
    )


# Shoulder positions giving a 180° (lying flat) and 45° (curled up) hip angle
# with the hip at the origin and the knee at (100, 0)
EXTENDED_SHOULDER = (-100.0, 0.0)
CURLED_SHOULDER = (100.0, 100.0)


@pytest.fixture
def extended_pose() -> Pose:
    """Pose lying flat (hip angle 180°)."""
    return make_pose(EXTENDED_SHOULDER)


@pytest.fixture
def curled_pose() -> Pose:
    """Pose curled forward (hip angle 45°)."""
    return make_pose(CURLED_SHOULDER)


@pytest.fixture
def situp_sequence() -> list[Pose]:
    """Nine poses 0.5 s apart alternating lying flat and curled up.

    The stream starts lying flat at 0 s, so sampling at 0.5 s .. 4.0 s sees
    eight alternating postures.
    """
    return [
        make_pose(EXTENDED_SHOULDER if i % 2 == 0 else CURLED_SHOULDER, timestamp=i * 0.5)
        for i in range(9)
    ]


@pytest.fixture
def jump_samples() -> list[InertialSample]:
    """Accelerometer stream with takeoff at 0 ms and landing at 400 ms.

    Flight time 0.4 s gives 0.125 * 9.81 * 0.16 m = 19.62 cm.
    """
    vertical = [-3.0, 0.0, 0.0, 0.0, 3.0, 0.0, 0.0, 0.0, 0.0, 0.0]
    return [
        InertialSample(Acceleration(0.0, y, 0.0), timestamp_ms=i * 100)
        for i, y in enumerate(vertical)
    ]


@pytest.fixture
def still_samples() -> list[InertialSample]:
    """Accelerometer stream with no jump."""
    return [InertialSample(Acceleration(0.0, 0.0, 0.0), timestamp_ms=i * 100) for i in range(20)]


@pytest.fixture
def shuttle_orientation() -> list[OrientationSample]:
    """Heading flipping 180° twelve times, 0.9 s apart (10.8 s total)."""
    return [
        OrientationSample(alpha=0.0 if i % 2 == 0 else 180.0, beta=0.0, gamma=0.0, timestamp_ms=i * 900)
        for i in range(13)
    ]


@pytest.fixture
def sprint_fixes() -> list[GpsFix]:
    """About 30 m due north along the prime meridian in 3.1 s."""
    return [
        GpsFix(lat=0.0, lng=0.0, timestamp_ms=0, accuracy_m=3.0),
        GpsFix(lat=0.000135, lng=0.0, timestamp_ms=1500, accuracy_m=3.0),
        GpsFix(lat=0.00027, lng=0.0, timestamp_ms=3100, accuracy_m=3.0),
    ]


@pytest.fixture
def endurance_fixes() -> list[GpsFix]:
    """About 800 m due north in 3 minutes."""
    return [
        GpsFix(lat=0.0, lng=0.0, timestamp_ms=0),
        GpsFix(lat=0.0036, lng=0.0, timestamp_ms=90_000),
        GpsFix(lat=0.0072, lng=0.0, timestamp_ms=180_000),
    ]


@pytest.fixture
def calibration() -> CalibrationData:
    """Session calibrated at 5 px/cm."""
    return CalibrationData(pixels_per_cm=5.0)


@pytest.fixture
def settings() -> Settings:
    """Default settings, independent of the environment cache."""
    return Settings()


@pytest.fixture
def calibration_settings() -> CalibrationSettings:
    """Create calibration settings for testing."""
    return CalibrationSettings()


@pytest.fixture
def inertial_settings() -> InertialSettings:
    """Create inertial settings for testing."""
    return InertialSettings()


@pytest.fixture
def gps_settings() -> GpsSettings:
    """Create GPS settings for testing."""
    return GpsSettings()


@pytest.fixture
def pose_settings() -> PoseSettings:
    """Create pose settings for testing."""
    return PoseSettings()
