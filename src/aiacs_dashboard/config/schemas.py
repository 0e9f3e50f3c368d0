"""
Pydantic schemas for configuration validation.

Provides type-safe, declarative validation with clear error messages.
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from ..utils.constants import (
    DEFAULT_CAMERA_POSITION,
    DEFAULT_LOCATION,
    DEFAULT_MAP_CENTER,
    DEFAULT_NVR_CHANNEL,
    DEFAULT_NVR_IP,
    DEFAULT_NVR_PORT,
    DEFAULT_NVR_USERNAME,
    DEFAULT_OUTPUT_DIR,
    DEFAULT_RETRIES,
    DEFAULT_RETRY_DELAY,
    DEFAULT_SERVER_PORT,
    DEFAULT_TIMEOUT,
)


class StrictModel(BaseModel):
    """Base model that rejects unknown fields."""

    model_config = ConfigDict(extra="forbid")


def _check_lat_lng(value: list[float]) -> list[float]:
    if len(value) != 2:
        raise ValueError("Position must be [latitude, longitude]")
    lat, lng = value
    if not -90 <= lat <= 90:
        raise ValueError(f"Latitude out of range: {lat}")
    if not -180 <= lng <= 180:
        raise ValueError(f"Longitude out of range: {lng}")
    return value


class BackendConfig(StrictModel):
    """REST backend connection."""

    base_url: str = Field(..., min_length=1, description="Backend root URL")
    token: str | None = Field(default=None, description="Access token (optional)")
    timeout_seconds: float = Field(default=DEFAULT_TIMEOUT, gt=0)
    retries: int = Field(default=DEFAULT_RETRIES, ge=1)
    retry_delay_seconds: float = Field(default=DEFAULT_RETRY_DELAY, ge=0)

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v


class SiteConfig(StrictModel):
    """Installation site."""

    location: str = DEFAULT_LOCATION
    map_center: list[float] = Field(default_factory=lambda: list(DEFAULT_MAP_CENTER))
    camera_position: list[float] = Field(
        default_factory=lambda: list(DEFAULT_CAMERA_POSITION)
    )

    @field_validator("map_center", "camera_position")
    @classmethod
    def validate_position(cls, v: list[float]) -> list[float]:
        return _check_lat_lng(v)


class CameraConfig(StrictModel):
    """One camera: radar plot sector and map view field."""

    id: int = Field(..., ge=1)
    name: str = Field(..., min_length=1, description="Sector name shown in tooltips")
    color: str = Field(..., min_length=1, description="Plot point color")
    min_angle: float = Field(..., ge=0, le=360)
    max_angle: float = Field(..., ge=0, le=360)
    direction: float = Field(..., ge=0, lt=360, description="Map view-field bearing")
    view_angle: float = Field(default=120, gt=0, le=360)
    label: str = ""
    map_color: str = ""

    @model_validator(mode="after")
    def validate_sector(self):
        if self.min_angle == self.max_angle:
            raise ValueError("min_angle and max_angle must differ")
        return self


class PollingConfig(StrictModel):
    """Refresh intervals in seconds."""

    clock: float = Field(default=1, gt=0)
    left_panel: float = Field(default=30, gt=0)
    detections: float = Field(default=30, gt=0)
    right_panel: float = Field(default=300, gt=0)
    direction_plot: float = Field(default=1, gt=0)
    history: float = Field(default=300, gt=0)


class RadarConfig(StrictModel):
    """Radar plot and map overlay."""

    width: float = Field(default=280, gt=0)
    height: float = Field(default=220, gt=0)
    transition_ms: float = Field(default=300, ge=0)
    view_distance_m: float = Field(default=300, gt=0)


class NVRSettings(StrictModel):
    """NVR used for detection playback."""

    ip: str = DEFAULT_NVR_IP
    port: int = Field(default=DEFAULT_NVR_PORT, ge=1, le=65535)
    username: str = DEFAULT_NVR_USERNAME
    password: str = ""
    default_channel: int = Field(default=DEFAULT_NVR_CHANNEL, ge=1)


class OutputConfig(StrictModel):
    """Rendered dashboard output."""

    dir: str = DEFAULT_OUTPUT_DIR
    serve: bool = True
    port: int = Field(default=DEFAULT_SERVER_PORT, ge=1, le=65535)


class RuntimeConfig(StrictModel):
    """Runtime configuration."""

    default_duration_hours: float = Field(default=24.0, gt=0)


class Config(StrictModel):
    """Complete configuration schema."""

    backend: BackendConfig
    site: SiteConfig = Field(default_factory=SiteConfig)
    cameras: list[CameraConfig] = Field(default_factory=list)
    polling: PollingConfig = Field(default_factory=PollingConfig)
    radar: RadarConfig = Field(default_factory=RadarConfig)
    nvr: NVRSettings = Field(default_factory=NVRSettings)
    output: OutputConfig = Field(default_factory=OutputConfig)
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)

    @model_validator(mode="after")
    def validate_cameras(self):
        """Camera ids must be unique."""
        seen = set()
        for camera in self.cameras:
            if camera.id in seen:
                raise ValueError(f"Duplicate camera id: {camera.id}")
            seen.add(camera.id)
        return self


def validate_config_pydantic(config: dict) -> Config:
    """
    Validate configuration using Pydantic.

    Args:
        config: Raw configuration dictionary

    Returns:
        Validated Config object

    Raises:
        pydantic.ValidationError: If validation fails
    """
    return Config(**config)
