"""OpenCV reference-object detection, ball tracking, and the combined backend."""

from __future__ import annotations

import math
from typing import Sequence

import cv2
import numpy as np
from numpy.typing import NDArray

from fitness_assess.core.config import PoseSettings
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import (
    REFERENCE_OBJECTS,
    Frame,
    PixelBounds,
    Point2D,
    Pose,
    ReferenceDetection,
    ReferenceObjectKind,
    Trajectory,
    TrajectoryPoint,
)

logger = get_logger(__name__)

MIN_CONTOUR_AREA_PX = 400.0
ASPECT_TOLERANCE = 0.1
MIN_CIRCULARITY = 0.85


def _rectangular_aspects() -> dict[ReferenceObjectKind, float]:
    """Long-side / short-side ratio of every rectangular reference object."""
    aspects = {}
    for kind, dims in REFERENCE_OBJECTS.items():
        if not dims.is_round:
            aspects[kind] = max(dims.width_cm, dims.height_cm) / min(dims.width_cm, dims.height_cm)
    return aspects


class ReferenceObjectDetector:
    """Finds a reference object of known size by contour shape.

    Quadrilaterals are matched to rectangular objects by aspect ratio;
    near-circular contours are reported as ``coin_kind``. The largest match
    wins.
    """

    def __init__(self, coin_kind: ReferenceObjectKind = ReferenceObjectKind.COIN_QUARTER) -> None:
        self.coin_kind = coin_kind
        self._aspects = _rectangular_aspects()

    def detect(self, frame: Frame) -> ReferenceDetection | None:
        """Detect the most prominent reference object in a frame."""
        gray = cv2.cvtColor(frame.image, cv2.COLOR_BGR2GRAY)
        blurred = cv2.GaussianBlur(gray, (5, 5), 0)
        edges = cv2.Canny(blurred, 50, 150)
        edges = cv2.dilate(edges, np.ones((3, 3), np.uint8), iterations=1)

        contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

        best: ReferenceDetection | None = None
        best_area = 0.0

        for contour in contours:
            area = float(cv2.contourArea(contour))
            if area < MIN_CONTOUR_AREA_PX or area <= best_area:
                continue

            detection = self._classify(contour, area)
            if detection is not None:
                best, best_area = detection, area

        if best is None:
            logger.debug("No reference object in frame %d", frame.index)
        else:
            logger.debug(
                "Reference %s in frame %d (%.0f px wide)",
                best.kind.value,
                frame.index,
                best.bounds.width,
            )
        return best

    def _classify(self, contour: NDArray[np.int32], area: float) -> ReferenceDetection | None:
        perimeter = float(cv2.arcLength(contour, True))
        if perimeter == 0:
            return None

        x, y, w, h = cv2.boundingRect(contour)

        circularity = 4 * math.pi * area / perimeter**2
        if circularity >= MIN_CIRCULARITY:
            diameter = (w + h) / 2
            return ReferenceDetection(
                kind=self.coin_kind,
                bounds=PixelBounds(float(x), float(y), diameter, diameter),
            )

        approx = cv2.approxPolyDP(contour, 0.02 * perimeter, True)
        if len(approx) != 4:
            return None

        (_, _), (side_a, side_b), _ = cv2.minAreaRect(contour)
        long_side, short_side = max(side_a, side_b), min(side_a, side_b)
        if short_side == 0:
            return None
        aspect = long_side / short_side

        kind = min(self._aspects, key=lambda k: abs(self._aspects[k] - aspect))
        if abs(self._aspects[kind] - aspect) > ASPECT_TOLERANCE:
            return None

        # Report the side that corresponds to the object's physical width
        dims = REFERENCE_OBJECTS[kind]
        if dims.width_cm >= dims.height_cm:
            width, height = long_side, short_side
        else:
            width, height = short_side, long_side

        return ReferenceDetection(
            kind=kind,
            bounds=PixelBounds(float(x), float(y), float(width), float(height)),
        )


class BallTracker:
    """Tracks a round object across frames with the Hough circle transform."""

    def __init__(self, min_radius: int = 5, max_radius: int = 120) -> None:
        self.min_radius = min_radius
        self.max_radius = max_radius

    def locate(self, frame: Frame) -> Point2D | None:
        """Center of the most prominent circle in a frame."""
        gray = cv2.cvtColor(frame.image, cv2.COLOR_BGR2GRAY)
        gray = cv2.medianBlur(gray, 5)

        circles = cv2.HoughCircles(
            gray,
            cv2.HOUGH_GRADIENT,
            dp=1.2,
            minDist=50,
            param1=100,
            param2=20,
            minRadius=self.min_radius,
            maxRadius=self.max_radius,
        )
        if circles is None:
            return None

        cx, cy, _ = circles[0][0]
        return Point2D(float(cx), float(cy))

    def track(self, frames: Sequence[Frame]) -> Trajectory | None:
        """Build a trajectory from every frame where the ball was found.

        The last tracked position is used as the landing point.
        """
        points = []
        for frame in frames:
            center = self.locate(frame)
            if center is not None:
                points.append(TrajectoryPoint(point=center, time=frame.timestamp))

        logger.debug("Ball found in %d of %d frames", len(points), len(frames))
        if not points:
            return None
        return Trajectory(points=tuple(points), landing_point=points[-1].point)


class OpenCVVisionBackend:
    """Vision backend built on MediaPipe pose and OpenCV detectors."""

    def __init__(
        self,
        settings: PoseSettings | None = None,
        reference_detector: ReferenceObjectDetector | None = None,
        ball_tracker: BallTracker | None = None,
    ) -> None:
        self.settings = settings or PoseSettings()
        self.reference_detector = reference_detector or ReferenceObjectDetector()
        self.ball_tracker = ball_tracker or BallTracker()
        self._pose_estimator = None

    def detect_pose(self, frame: Frame) -> Pose | None:
        """Detect body keypoints with MediaPipe."""
        if self._pose_estimator is None:
            from fitness_assess.vision.pose import PoseEstimator

            self._pose_estimator = PoseEstimator(self.settings)
        return self._pose_estimator.estimate(frame)

    def track_object(self, frames: Sequence[Frame], kind: str = "ball") -> Trajectory | None:
        """Track a ball across frames."""
        if kind != "ball":
            raise ValueError(f"Unsupported object kind: {kind}")
        return self.ball_tracker.track(frames)

    def detect_reference(self, frame: Frame) -> ReferenceDetection | None:
        """Find a reference object of known size."""
        return self.reference_detector.detect(frame)

    def close(self) -> None:
        """Release the pose model."""
        if self._pose_estimator is not None:
            self._pose_estimator.close()
            self._pose_estimator = None
