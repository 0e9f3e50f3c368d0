"""
Camera, PTZ and NVR playback models.
"""

from dataclasses import asdict, dataclass
from typing import Any

from .detections import to_float, to_int

PTZ_DIRECTIONS = (
    "up",
    "down",
    "left",
    "right",
    "zoom_in",
    "zoom_out",
    "focus_near",
    "focus_far",
)

CAMERA_STATUSES = ("active", "inactive", "maintenance")


@dataclass
class CameraRecord:
    """Camera as registered with the backend."""

    id: int
    name: str
    location: str = ""
    status: str = "inactive"
    stream_url: str = ""
    ptz_enabled: bool = False
    resolution: str = ""
    last_seen: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CameraRecord":
        """
        Raises:
            ValueError: If the record has no usable id
        """
        camera_id = to_int(data.get("id"))
        if camera_id is None:
            raise ValueError(f"Camera record without a valid id: {data!r}")
        status = data.get("status", "inactive")
        return cls(
            id=camera_id,
            name=data.get("name") or f"Camera {camera_id}",
            location=data.get("location", ""),
            status=status if status in CAMERA_STATUSES else "inactive",
            stream_url=data.get("stream_url", ""),
            ptz_enabled=bool(data.get("ptz_enabled", False)),
            resolution=data.get("resolution", ""),
            last_seen=data.get("last_seen", ""),
        )


@dataclass
class CameraSettingsUpdate:
    """Partial camera settings update; unset fields are not sent."""

    name: str | None = None
    location: str | None = None
    resolution: str | None = None
    frame_rate: int | None = None
    quality: int | None = None
    night_mode: bool | None = None
    motion_detection: bool | None = None

    def to_payload(self) -> dict[str, Any]:
        return {k: v for k, v in asdict(self).items() if v is not None}


@dataclass
class PresetRecord:
    """Saved PTZ position."""

    id: int
    name: str
    pan: float
    tilt: float
    zoom: float
    created_at: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PresetRecord":
        preset_id = to_int(data.get("id"))
        if preset_id is None:
            raise ValueError(f"Preset record without a valid id: {data!r}")
        return cls(
            id=preset_id,
            name=data.get("name") or "",
            pan=to_float(data.get("pan")),
            tilt=to_float(data.get("tilt")),
            zoom=to_float(data.get("zoom")),
            created_at=data.get("created_at", ""),
        )


@dataclass
class PresetCreate:
    name: str
    pan: float
    tilt: float
    zoom: float

    def to_payload(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class NVRConfig:
    """Connection settings for an NVR playback request."""

    ip: str
    port: int
    username: str
    password: str
    channel: int
    start_time: str = ""
    end_time: str = ""

    def to_payload(self) -> dict[str, Any]:
        payload = asdict(self)
        if not payload["end_time"]:
            del payload["end_time"]
        return payload


@dataclass
class PlaybackSession:
    """NVR playback session returned by the backend."""

    id: str
    url: str
    channel: int
    start_time: str
    status: str = "active"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "PlaybackSession":
        return cls(
            id=str(data.get("id", "")),
            url=data.get("url", ""),
            channel=to_int(data.get("channel")) or 0,
            start_time=data.get("start_time", ""),
            status=data.get("status", "active"),
        )


@dataclass
class CameraSector:
    """
    Where a camera looks, for the radar plot and the map overlay.

    Angles are compass degrees (0 = north, clockwise).

    Attributes:
        camera_id: Backend camera id
        name: Sector name shown in tooltips
        color: Plot point color for this camera
        min_angle, max_angle: Radar plot sector [min, max); wraps past 360
            when min_angle > max_angle
        map_direction: Center bearing of the view field on the map
        view_angle: Horizontal field of view in degrees
        label: Map sector label
        map_color: Map polygon and label color
    """

    camera_id: int
    name: str
    color: str
    min_angle: float
    max_angle: float
    map_direction: float
    view_angle: float = 120.0
    label: str = ""
    map_color: str = ""

    @property
    def span(self) -> float:
        span = self.max_angle - self.min_angle
        return span if span > 0 else span + 360

    def contains(self, angle: float) -> bool:
        """True if a compass angle lies in [min_angle, max_angle)."""
        angle %= 360
        if self.min_angle <= self.max_angle:
            return self.min_angle <= angle < self.max_angle
        return angle >= self.min_angle or angle < self.max_angle


DEFAULT_CAMERA_SECTORS = (
    CameraSector(
        camera_id=1,
        name="북서쪽",
        color="#3E6D9C",
        min_angle=240,
        max_angle=360,
        map_direction=60,
        label="CAMERA 1",
        map_color="#00e0e0",
    ),
    CameraSector(
        camera_id=2,
        name="북동쪽",
        color="#5E8C61",
        min_angle=0,
        max_angle=120,
        map_direction=180,
        label="CAMERA 2",
        map_color="#70d070",
    ),
    CameraSector(
        camera_id=3,
        name="남쪽",
        color="#AF7AB3",
        min_angle=120,
        max_angle=240,
        map_direction=300,
        label="CAMERA 3",
        map_color="#e070e0",
    ),
)
