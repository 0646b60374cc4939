"""MediaPipe pose estimation wrapper using the Tasks API."""

from __future__ import annotations

import urllib.request
from pathlib import Path

import cv2
import mediapipe as mp
from mediapipe.tasks import python
from mediapipe.tasks.python import vision

from fitness_assess.core.config import PoseSettings
from fitness_assess.core.exceptions import PoseEstimationError
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import BodyLandmark, Frame, Keypoint, Pose

logger = get_logger(__name__)

MODEL_URLS = {
    0: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_lite/float16/latest/pose_landmarker_lite.task",
    1: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_full/float16/latest/pose_landmarker_full.task",
    2: "https://storage.googleapis.com/mediapipe-models/pose_landmarker/pose_landmarker_heavy/float16/latest/pose_landmarker_heavy.task",
}
MODEL_DIR = Path.home() / ".cache" / "fitness_assess" / "models"

# MediaPipe's 33-point model indices for the landmarks the analyzers use
MEDIAPIPE_INDICES: dict[BodyLandmark, int] = {
    BodyLandmark.NOSE: 0,
    BodyLandmark.LEFT_SHOULDER: 11,
    BodyLandmark.RIGHT_SHOULDER: 12,
    BodyLandmark.LEFT_HIP: 23,
    BodyLandmark.RIGHT_HIP: 24,
    BodyLandmark.LEFT_KNEE: 25,
    BodyLandmark.RIGHT_KNEE: 26,
}


def _download_model(complexity: int) -> Path:
    """Download the pose landmarker model if not present.

    Raises:
        PoseEstimationError: If download fails
    """
    url = MODEL_URLS[complexity]
    model_path = MODEL_DIR / url.rsplit("/", 1)[-1]
    if model_path.exists():
        return model_path

    logger.info("Downloading MediaPipe pose landmarker model...")
    MODEL_DIR.mkdir(parents=True, exist_ok=True)

    try:
        urllib.request.urlretrieve(url, model_path)
        logger.info("Model downloaded to %s", model_path)
        return model_path
    except Exception as e:
        raise PoseEstimationError(f"Failed to download model: {e}") from e


def landmarks_to_pose(
    landmarks: list,
    width: int,
    height: int,
    timestamp: float,
) -> Pose:
    """Convert normalized MediaPipe landmarks to a pixel-space Pose.

    Args:
        landmarks: One detected person's 33 normalized landmarks
        width: Frame width in pixels
        height: Frame height in pixels
        timestamp: Frame timestamp in seconds

    Returns:
        Pose with the analyzers' landmark vocabulary
    """
    keypoints = []
    for name, idx in MEDIAPIPE_INDICES.items():
        if idx >= len(landmarks):
            continue
        lm = landmarks[idx]
        visibility = getattr(lm, "visibility", None)
        keypoints.append(
            Keypoint(
                name=name,
                x=float(lm.x) * width,
                y=float(lm.y) * height,
                confidence=1.0 if visibility is None else float(visibility),
            )
        )
    return Pose(keypoints=tuple(keypoints), timestamp=timestamp)


class PoseEstimator:
    """Wrapper for MediaPipe pose estimation using the Tasks API.

    Converts MediaPipe results to Pose/Keypoint types so MediaPipe objects
    never leak into the analyzers.
    """

    def __init__(self, settings: PoseSettings | None = None) -> None:
        """Initialize pose estimator with settings.

        Args:
            settings: Pose settings (uses defaults if None)
        """
        self.settings = settings or PoseSettings()
        self._landmarker: vision.PoseLandmarker | None = None

    @property
    def is_initialized(self) -> bool:
        """Check if the MediaPipe model is loaded."""
        return self._landmarker is not None

    def initialize(self) -> vision.PoseLandmarker:
        """Load the MediaPipe pose model and return the landmarker.

        Raises:
            PoseEstimationError: If the model fails to load
        """
        try:
            model_path = _download_model(self.settings.model_complexity)

            options = vision.PoseLandmarkerOptions(
                base_options=python.BaseOptions(model_asset_path=str(model_path)),
                running_mode=vision.RunningMode.VIDEO,
                num_poses=1,
                min_pose_detection_confidence=self.settings.min_detection_confidence,
                min_pose_presence_confidence=self.settings.min_tracking_confidence,
                min_tracking_confidence=self.settings.min_tracking_confidence,
            )

            landmarker = vision.PoseLandmarker.create_from_options(options)
            logger.info("MediaPipe PoseLandmarker initialized (Tasks API)")
            self._landmarker = landmarker
            return landmarker

        except PoseEstimationError:
            raise
        except Exception as e:
            raise PoseEstimationError(f"Failed to initialize MediaPipe: {e}") from e

    def close(self) -> None:
        """Release MediaPipe resources."""
        if self._landmarker is not None:
            self._landmarker.close()
            self._landmarker = None

    def estimate(self, frame: Frame) -> Pose | None:
        """Run pose estimation on a frame.

        Args:
            frame: Input video frame

        Returns:
            Pose in pixel coordinates, or None if no person was detected

        Raises:
            PoseEstimationError: If estimation fails
        """
        landmarker = self._landmarker or self.initialize()

        try:
            rgb_image = cv2.cvtColor(frame.image, cv2.COLOR_BGR2RGB)
            mp_image = mp.Image(image_format=mp.ImageFormat.SRGB, data=rgb_image)
            results = landmarker.detect_for_video(mp_image, int(frame.timestamp * 1000))
        except Exception as e:
            logger.error("Pose estimation failed: %s", e)
            raise PoseEstimationError(f"Estimation failed: {e}") from e

        if not results.pose_landmarks:
            return None

        return landmarks_to_pose(
            results.pose_landmarks[0], frame.width, frame.height, frame.timestamp
        )

    def __enter__(self) -> PoseEstimator:
        """Context manager entry."""
        self.initialize()
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: object,
    ) -> None:
        """Context manager exit."""
        self.close()
