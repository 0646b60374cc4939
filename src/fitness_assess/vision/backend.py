"""Vision backend contract consumed by calibration and the vision analyzer.

Perception models (pose, ball tracking, reference detection) live behind
this interface so a real model can replace another without touching the
evaluators.
"""

from __future__ import annotations

from typing import Iterable, Protocol, Sequence, runtime_checkable

from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import Frame, Pose, ReferenceDetection, Trajectory

logger = get_logger(__name__)


@runtime_checkable
class VisionBackend(Protocol):
    """Perception capabilities required by the core."""

    def detect_pose(self, frame: Frame) -> Pose | None:
        """Detect body keypoints in a frame, or None if no person is found."""
        ...

    def track_object(self, frames: Sequence[Frame], kind: str = "ball") -> Trajectory | None:
        """Track an object across frames, or None if it was never found."""
        ...

    def detect_reference(self, frame: Frame) -> ReferenceDetection | None:
        """Find a reference object of known size in a frame."""
        ...


def sample_poses(backend: VisionBackend, frames: Iterable[Frame]) -> list[Pose]:
    """Run pose detection over frames, keeping only frames with a pose.

    Args:
        backend: Vision backend
        frames: Frames in capture order

    Returns:
        Detected poses in capture order
    """
    poses: list[Pose] = []
    frame_count = 0

    for frame in frames:
        frame_count += 1
        pose = backend.detect_pose(frame)
        if pose is not None:
            poses.append(pose)

    logger.debug("Detected poses in %d of %d frames", len(poses), frame_count)
    return poses
