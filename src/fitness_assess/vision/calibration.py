"""Reference-object calibration for pixel-to-cm conversion."""

from __future__ import annotations

from typing import TYPE_CHECKING

from fitness_assess.analysis.geometry import validate_scale
from fitness_assess.core.config import CalibrationSettings
from fitness_assess.core.exceptions import CalibrationMissingError
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import (
    REFERENCE_OBJECTS,
    CalibrationData,
    Frame,
    ReferenceDetection,
    ReferenceObjectKind,
)

if TYPE_CHECKING:
    from fitness_assess.vision.backend import VisionBackend

logger = get_logger(__name__)


def calibrate(
    kind: ReferenceObjectKind | str,
    pixel_width: float,
    pixel_height: float | None = None,
    settings: CalibrationSettings | None = None,
) -> float:
    """Derive pixels-per-cm from a reference object's detected size.

    Coins are measured by diameter, everything else by physical width.
    An unrecognized kind yields the identity scale (1.0 by default) so that
    downstream math stays defined even with a bad detection.

    Args:
        kind: Reference object kind (enum member or its string value)
        pixel_width: Detected width in pixels
        pixel_height: Detected height in pixels, used only as a sanity check
        settings: Calibration settings (uses defaults if None)

    Returns:
        Pixels per centimeter

    Raises:
        InvalidScaleError: If pixel_width is not positive and finite for a
            recognized kind
    """
    settings = settings or CalibrationSettings()

    try:
        kind = ReferenceObjectKind(kind)
    except ValueError:
        logger.warning(
            "Unknown reference object %r, using %.1f px/cm",
            kind,
            settings.unknown_reference_px_per_cm,
        )
        return settings.unknown_reference_px_per_cm

    validate_scale(pixel_width)
    dimensions = REFERENCE_OBJECTS[kind]

    if pixel_height and not dimensions.is_round:
        expected_aspect = dimensions.width_cm / dimensions.height_cm
        detected_aspect = pixel_width / pixel_height
        deviation = abs(detected_aspect - expected_aspect) / expected_aspect
        if deviation > settings.aspect_tolerance:
            logger.warning(
                "%s aspect ratio %.2f deviates %.0f%% from expected %.2f",
                kind.value,
                detected_aspect,
                deviation * 100,
                expected_aspect,
            )

    return pixel_width / dimensions.width_cm


class Calibrator:
    """Establishes the session's pixel-to-cm scale.

    Supports calibration from:
    - A detected reference object (credit card, coin, phone, A4 sheet)
    - A frame, via an injected vision backend
    - A manually specified scale
    """

    def __init__(self, settings: CalibrationSettings | None = None) -> None:
        """Initialize calibrator with settings.

        Args:
            settings: Calibration settings (uses defaults if None)
        """
        self.settings = settings or CalibrationSettings()
        self._current: CalibrationData | None = None

    @property
    def current_calibration(self) -> CalibrationData | None:
        """Get current calibration."""
        return self._current

    @property
    def is_calibrated(self) -> bool:
        """Check if calibration is active."""
        return self._current is not None

    def calibrate_reference(self, detection: ReferenceDetection) -> CalibrationData:
        """Calibrate from a detected reference object.

        Args:
            detection: Reference object kind and pixel bounds

        Returns:
            CalibrationData with computed pixels_per_cm
        """
        px_per_cm = calibrate(
            detection.kind,
            detection.bounds.width,
            detection.bounds.height,
            settings=self.settings,
        )

        calibration = CalibrationData(
            reference_object=detection.kind,
            pixels_per_cm=px_per_cm,
        )

        self._current = calibration
        logger.info(
            "Reference calibration: %.2f px/cm (%s, %.0f px wide)",
            px_per_cm,
            detection.kind.value,
            detection.bounds.width,
        )

        return calibration

    def calibrate_from_frame(self, frame: Frame, backend: VisionBackend) -> CalibrationData:
        """Detect a reference object in a frame and calibrate from it.

        Args:
            frame: Frame expected to show a reference object
            backend: Vision backend providing reference detection

        Returns:
            CalibrationData with computed pixels_per_cm

        Raises:
            CalibrationMissingError: If no reference object is detected
        """
        detection = backend.detect_reference(frame)
        if detection is None:
            raise CalibrationMissingError()
        return self.calibrate_reference(detection)

    def calibrate_manual(self, px_per_cm: float) -> CalibrationData:
        """Set calibration manually.

        Args:
            px_per_cm: Known pixels per centimeter value

        Returns:
            CalibrationData with the specified scale
        """
        calibration = CalibrationData(pixels_per_cm=validate_scale(px_per_cm))

        self._current = calibration
        logger.info("Manual calibration: %.2f px/cm", px_per_cm)

        return calibration

    def get_default_calibration(self) -> CalibrationData:
        """Get default calibration from settings."""
        return CalibrationData(pixels_per_cm=self.settings.default_px_per_cm)

    def reset(self) -> None:
        """Forget the active calibration."""
        self._current = None
