"""Calibration and the vision backend contract.

The OpenCV/MediaPipe backend lives in ``fitness_assess.vision.detectors``
and ``fitness_assess.vision.pose`` and needs the ``vision`` extra.
"""

from fitness_assess.vision.backend import VisionBackend, sample_poses
from fitness_assess.vision.calibration import Calibrator, calibrate

__all__ = [
    "VisionBackend",
    "sample_poses",
    "Calibrator",
    "calibrate",
]
