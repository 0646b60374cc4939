"""Jump and direction-change detection from motion sensor streams.

This module is pure logic with NO I/O. Samples are caller-owned sequences
ordered by capture time.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Sequence

import numpy as np

from fitness_assess.core.config import InertialSettings
from fitness_assess.core.exceptions import InsufficientSamplesError
from fitness_assess.core.logging import get_logger
from fitness_assess.core.types import InertialSample, OrientationSample

logger = get_logger(__name__)

# Peak height from total flight time: h = g * (t / 2)^2 / 2 = g * t^2 / 8
FLIGHT_HEIGHT_COEFFICIENT = 0.125


@dataclass(frozen=True)
class JumpFlight:
    """Takeoff and landing events found in an acceleration stream."""

    takeoff_index: int
    landing_index: int
    flight_time_s: float

    def peak_height_m(self, gravity: float = 9.81) -> float:
        """Projectile-motion peak height for this flight time."""
        return FLIGHT_HEIGHT_COEFFICIENT * gravity * self.flight_time_s**2


def _require_samples(count: int, minimum: int) -> None:
    if count < minimum:
        raise InsufficientSamplesError(required=minimum, actual=count)


def detect_flight(
    samples: Sequence[InertialSample],
    settings: InertialSettings | None = None,
) -> JumpFlight | None:
    """Find the first takeoff and the landing that follows it.

    Takeoff is the first sample whose vertical acceleration drops below the
    takeoff threshold (-2.0 m/s^2); landing is the first later sample that
    rises above the landing threshold (+2.0 m/s^2).

    Args:
        samples: Acceleration samples ordered by time
        settings: Inertial settings (uses defaults if None)

    Returns:
        Detected flight, or None if either event is missing

    Raises:
        InsufficientSamplesError: If fewer than the minimum samples are given
    """
    settings = settings or InertialSettings()
    _require_samples(len(samples), settings.min_samples)

    vertical = np.array(
        [getattr(s.acceleration, settings.vertical_axis) for s in samples],
        dtype=np.float64,
    )

    below = np.flatnonzero(vertical < settings.takeoff_threshold)
    if below.size == 0:
        return None
    takeoff = int(below[0])

    above = np.flatnonzero(vertical[takeoff + 1 :] > settings.landing_threshold)
    if above.size == 0:
        return None
    landing = takeoff + 1 + int(above[0])

    flight_time = (samples[landing].timestamp_ms - samples[takeoff].timestamp_ms) / 1000
    return JumpFlight(takeoff_index=takeoff, landing_index=landing, flight_time_s=flight_time)


def jump_height(
    samples: Sequence[InertialSample],
    settings: InertialSettings | None = None,
) -> int:
    """Vertical jump height from flight time.

    Returns 0 when no takeoff/landing pair is found. Callers must treat 0
    as "undetected", not as a valid zero-height jump.

    Args:
        samples: Acceleration samples ordered by time
        settings: Inertial settings (uses defaults if None)

    Returns:
        Jump height in whole centimeters

    Raises:
        InsufficientSamplesError: If fewer than the minimum samples are given
    """
    settings = settings or InertialSettings()
    flight = detect_flight(samples, settings)

    if flight is None:
        logger.debug("No takeoff/landing pair in %d samples", len(samples))
        return 0

    height_cm = flight.peak_height_m(settings.gravity) * 100
    logger.debug("Flight time %.3f s -> %.2f cm", flight.flight_time_s, height_cm)
    return int(math.floor(height_cm + 0.5))


def direction_changes(
    samples: Sequence[OrientationSample],
    settings: InertialSettings | None = None,
) -> int:
    """Count shuttle legs from heading reversals.

    A change is a jump in heading (alpha) between successive samples larger
    than the threshold (90°) but smaller than ``360 - threshold``, which
    ignores wraparound near 0°/360°. Two reversals make one leg.

    Raises:
        InsufficientSamplesError: If fewer than the minimum samples are given
    """
    settings = settings or InertialSettings()
    _require_samples(len(samples), settings.min_samples)

    alpha = np.array([s.alpha for s in samples], dtype=np.float64)
    deltas = np.abs(np.diff(alpha))
    threshold = settings.direction_change_threshold_deg

    changes = int(np.count_nonzero((deltas > threshold) & (deltas < 360 - threshold)))
    return changes // 2


def stream_duration_s(samples: Sequence[OrientationSample] | Sequence[InertialSample]) -> float:
    """Seconds between the first and last sample, 0 for fewer than two."""
    if len(samples) < 2:
        return 0.0
    return (samples[-1].timestamp_ms - samples[0].timestamp_ms) / 1000
