"""Tests for the OpenCV and MediaPipe vision backend."""

from __future__ import annotations

from types import SimpleNamespace

import numpy as np
import pytest

cv2 = pytest.importorskip("cv2")

from fitness_assess.core.types import BodyLandmark, Frame, ReferenceObjectKind  # noqa: E402
from fitness_assess.vision.backend import VisionBackend, sample_poses  # noqa: E402
from fitness_assess.vision.detectors import (  # noqa: E402
    BallTracker,
    OpenCVVisionBackend,
    ReferenceObjectDetector,
)


def _frame(image: np.ndarray, index: int = 0, fps: float = 30.0) -> Frame:
    return Frame(image=image, timestamp=index / fps, index=index)


def _blank() -> np.ndarray:
    return np.zeros((480, 640, 3), dtype=np.uint8)


def _ball_frame(center: tuple[int, int], index: int) -> Frame:
    image = _blank()
    cv2.circle(image, center, 20, (255, 255, 255), -1)
    return _frame(image, index)


class TestReferenceObjectDetector:
    """Tests for reference object detection."""

    def test_detects_credit_card(self) -> None:
        """A card-shaped rectangle is reported as a credit card."""
        image = _blank()
        cv2.rectangle(image, (100, 100), (271, 208), (255, 255, 255), -1)

        detection = ReferenceObjectDetector().detect(_frame(image))

        assert detection is not None
        assert detection.kind is ReferenceObjectKind.CREDIT_CARD
        assert detection.bounds.width == pytest.approx(171, abs=8)
        assert detection.bounds.width > detection.bounds.height

    def test_portrait_smartphone_width(self) -> None:
        """A phone's reported width is its short side."""
        image = _blank()
        cv2.rectangle(image, (200, 100), (270, 240), (255, 255, 255), -1)

        detection = ReferenceObjectDetector().detect(_frame(image))

        assert detection is not None
        assert detection.kind is ReferenceObjectKind.SMARTPHONE
        assert detection.bounds.width < detection.bounds.height

    def test_empty_frame(self) -> None:
        """A blank frame has no reference object."""
        assert ReferenceObjectDetector().detect(_frame(_blank())) is None


class TestBallTracker:
    """Tests for Hough circle ball tracking."""

    def test_locate(self) -> None:
        """Finds the center of a drawn ball."""
        center = BallTracker().locate(_ball_frame((320, 240), 0))

        assert center is not None
        assert center.x == pytest.approx(320, abs=4)
        assert center.y == pytest.approx(240, abs=4)

    def test_track_sets_landing(self) -> None:
        """The last tracked position is the landing point."""
        frames = [_ball_frame((100 + 100 * i, 300 - 40 * i), i) for i in range(4)]

        trajectory = BallTracker().track(frames)

        assert trajectory is not None
        assert len(trajectory) == 4
        assert trajectory.landing == trajectory.points[-1].point

    def test_track_without_ball(self) -> None:
        """No ball in any frame gives no trajectory."""
        assert BallTracker().track([_frame(_blank(), i) for i in range(3)]) is None


class TestOpenCVVisionBackend:
    """Tests for the combined backend."""

    def test_satisfies_protocol(self) -> None:
        """The backend implements the vision contract."""
        assert isinstance(OpenCVVisionBackend(), VisionBackend)

    def test_unsupported_object_kind(self) -> None:
        """Only balls can be tracked."""
        with pytest.raises(ValueError):
            OpenCVVisionBackend().track_object([], kind="frisbee")

    def test_sample_poses_skips_empty_frames(self) -> None:
        """Frames without a person are dropped."""

        class NoPoseBackend(OpenCVVisionBackend):
            def detect_pose(self, frame: Frame):
                return None

        frames = [_frame(_blank(), i) for i in range(3)]
        assert sample_poses(NoPoseBackend(), frames) == []


class TestLandmarkConversion:
    """Tests for MediaPipe landmark conversion."""

    def test_landmarks_to_pixel_pose(self) -> None:
        """Normalized landmarks become pixel keypoints."""
        pytest.importorskip("mediapipe")
        from fitness_assess.vision.pose import landmarks_to_pose

        landmarks = [SimpleNamespace(x=0.5, y=0.25, visibility=0.9) for _ in range(33)]

        pose = landmarks_to_pose(landmarks, width=640, height=480, timestamp=1.5)

        knee = pose.require(BodyLandmark.LEFT_KNEE)
        assert (knee.x, knee.y) == (320.0, 120.0)
        assert knee.confidence == pytest.approx(0.9)
        assert pose.timestamp == 1.5
        assert len(pose.keypoints) == len(BodyLandmark)
