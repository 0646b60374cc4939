"""Package configuration via Pydantic Settings."""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class CalibrationSettings(BaseSettings):
    """Reference-object calibration settings."""

    model_config = SettingsConfigDict(env_prefix="CALIBRATION_")

    default_px_per_cm: float = Field(default=5.0, gt=0)
    unknown_reference_px_per_cm: float = Field(default=1.0, gt=0)
    aspect_tolerance: float = 0.25


class InertialSettings(BaseSettings):
    """Accelerometer and orientation stream analysis parameters."""

    model_config = SettingsConfigDict(env_prefix="INERTIAL_")

    min_samples: int = 10
    takeoff_threshold: float = -2.0
    landing_threshold: float = 2.0
    vertical_axis: Literal["x", "y", "z"] = "y"
    gravity: float = 9.81
    direction_change_threshold_deg: float = 90.0
    expected_direction_changes: int = 6
    direction_change_tolerance: int = 2


class GpsSettings(BaseSettings):
    """GPS track analysis and course plausibility settings."""

    model_config = SettingsConfigDict(env_prefix="GPS_")

    earth_radius_m: float = 6_371_000.0
    sprint_distance_m: float = 30.0
    sprint_tolerance_m: float = 5.0
    endurance_tolerance_ratio: float = 0.1
    max_accuracy_m: float | None = None


class PoseSettings(BaseSettings):
    """Pose analysis and MediaPipe backend settings."""

    model_config = SettingsConfigDict(env_prefix="POSE_")

    sample_interval_s: float = Field(default=0.5, gt=0)
    extension_angle_deg: float = 160.0
    contraction_angle_deg: float = 90.0
    situp_duration_s: float = 60.0
    rep_debounce_samples: int = Field(default=0, ge=0)

    model_complexity: Literal[0, 1, 2] = 1
    min_detection_confidence: float = 0.5
    min_tracking_confidence: float = 0.5


class SimulationSettings(BaseSettings):
    """Upload-mode simulated estimate settings."""

    model_config = SettingsConfigDict(env_prefix="SIMULATION_")

    seed: int | None = None


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(env_prefix="LOG_")

    level: str = "INFO"
    file: str | None = None


class Settings(BaseSettings):
    """Root settings aggregating all configuration sections."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    calibration: CalibrationSettings = Field(default_factory=CalibrationSettings)
    inertial: InertialSettings = Field(default_factory=InertialSettings)
    gps: GpsSettings = Field(default_factory=GpsSettings)
    pose: PoseSettings = Field(default_factory=PoseSettings)
    simulation: SimulationSettings = Field(default_factory=SimulationSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
