"""Great-circle distance and timing over GPS tracks.

This module is pure logic with NO I/O.
"""

from __future__ import annotations

from typing import Sequence

import numpy as np

from fitness_assess.core.exceptions import ImplausibleTrackError
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import GpsFix

logger = get_logger(__name__)

EARTH_RADIUS_M = 6_371_000.0


def haversine_distance(a: GpsFix, b: GpsFix, radius_m: float = EARTH_RADIUS_M) -> float:
    """Great-circle distance between two fixes in meters."""
    return float(
        _haversine(
            np.array([a.lat]), np.array([a.lng]), np.array([b.lat]), np.array([b.lng]), radius_m
        )[0]
    )


def _haversine(
    lat1: np.ndarray,
    lng1: np.ndarray,
    lat2: np.ndarray,
    lng2: np.ndarray,
    radius_m: float,
) -> np.ndarray:
    lat1_rad = np.radians(lat1)
    lat2_rad = np.radians(lat2)
    dlat = np.radians(lat2 - lat1)
    dlng = np.radians(lng2 - lng1)

    a = np.sin(dlat / 2) ** 2 + np.cos(lat1_rad) * np.cos(lat2_rad) * np.sin(dlng / 2) ** 2
    c = 2 * np.arctan2(np.sqrt(a), np.sqrt(1 - a))
    return radius_m * c


def total_distance(fixes: Sequence[GpsFix], radius_m: float = EARTH_RADIUS_M) -> float:
    """Sum of great-circle distances between consecutive fixes.

    Returns:
        Distance in meters, 0 for fewer than two fixes
    """
    if len(fixes) < 2:
        return 0.0

    lat = np.array([f.lat for f in fixes], dtype=np.float64)
    lng = np.array([f.lng for f in fixes], dtype=np.float64)

    legs = _haversine(lat[:-1], lng[:-1], lat[1:], lng[1:], radius_m)
    return float(np.sum(legs))


def elapsed_time(fixes: Sequence[GpsFix]) -> float:
    """Seconds from the first to the last fix, 0 for fewer than two fixes."""
    if len(fixes) < 2:
        return 0.0
    return (fixes[-1].timestamp_ms - fixes[0].timestamp_ms) / 1000


def filter_by_accuracy(fixes: Sequence[GpsFix], max_accuracy_m: float | None) -> list[GpsFix]:
    """Drop fixes whose reported accuracy is worse than ``max_accuracy_m``.

    None disables filtering.
    """
    if max_accuracy_m is None:
        return list(fixes)

    kept = [f for f in fixes if f.accuracy_m <= max_accuracy_m]
    if len(kept) < len(fixes):
        logger.debug("Dropped %d of %d low-accuracy fixes", len(fixes) - len(kept), len(fixes))
    return kept


def check_course(distance_m: float, expected_m: float, tolerance_m: float) -> None:
    """Reject a track whose distance is off-course.

    Raises:
        ImplausibleTrackError: If ``|distance - expected| > tolerance``
    """
    if abs(distance_m - expected_m) > tolerance_m:
        logger.warning(
            "Track rejected: %.1f m recorded, expected %.0f m (±%.1f m)",
            distance_m,
            expected_m,
            tolerance_m,
        )
        raise ImplausibleTrackError(
            f"Distance not accurate: {distance_m:.1f}m (expected ~{expected_m:g}m)"
        )

