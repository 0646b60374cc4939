"""Planar geometry and unit conversion.

This module is pure logic with NO I/O and NO OpenCV imports.
"""

from __future__ import annotations

import math

import numpy as np

from fitness_assess.core.exceptions import DegenerateGeometryError, InvalidScaleError
from fitness_assess.core.types import Point2D


def validate_scale(pixels_per_cm: float) -> float:
    """Check that a pixels-per-cm scale is usable.

    Raises:
        InvalidScaleError: If the scale is not positive and finite
    """
    if not math.isfinite(pixels_per_cm) or pixels_per_cm <= 0:
        raise InvalidScaleError(f"Invalid scale: {pixels_per_cm} px/cm")
    return float(pixels_per_cm)


def pixel_distance(p1: Point2D, p2: Point2D) -> float:
    """Euclidean distance between two points in pixels."""
    return float(np.linalg.norm(p2.as_array() - p1.as_array()))


def pixels_to_cm(pixels: float, pixels_per_cm: float) -> float:
    """Convert a pixel length to centimeters."""
    return pixels / validate_scale(pixels_per_cm)


def distance(p1: Point2D, p2: Point2D, pixels_per_cm: float) -> float:
    """Physical distance between two points in centimeters.

    Args:
        p1: First point (pixels)
        p2: Second point (pixels)
        pixels_per_cm: Calibrated scale

    Returns:
        Distance in centimeters

    Raises:
        InvalidScaleError: If the scale is not positive and finite
    """
    return pixels_to_cm(pixel_distance(p1, p2), pixels_per_cm)


def angle(p1: Point2D, vertex: Point2D, p3: Point2D) -> float:
    """Angle at ``vertex`` between the rays to ``p1`` and ``p3``.

    Args:
        p1: End of the first ray
        vertex: Point where the angle is measured
        p3: End of the second ray

    Returns:
        Angle in degrees, in [0, 180]

    Raises:
        DegenerateGeometryError: If either ray has zero length
    """
    v1 = p1.as_array() - vertex.as_array()
    v2 = p3.as_array() - vertex.as_array()

    norm1 = float(np.linalg.norm(v1))
    norm2 = float(np.linalg.norm(v2))
    if norm1 == 0.0 or norm2 == 0.0:
        raise DegenerateGeometryError("Angle undefined for a zero-length ray")

    cos_angle = float(np.dot(v1, v2)) / (norm1 * norm2)

    # Floating point error can push the cosine just outside [-1, 1]
    cos_angle = float(np.clip(cos_angle, -1.0, 1.0))

    return float(np.degrees(np.arccos(cos_angle)))


def round_to_step(value: float, step: float) -> float:
    """Round half up to the nearest multiple of ``step``.

    Uses ``floor(value * k + 0.5) / k`` with ``k = 1 / step`` so that halves
    always round up, unlike Python's ``round``.

    Args:
        value: Value to round
        step: Rounding step, e.g. 0.5, 0.1, 0.01 or 1

    Returns:
        Rounded value
    """
    factor = round(1.0 / step)
    return math.floor(value * factor + 0.5) / factor
