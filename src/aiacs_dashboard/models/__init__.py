"""
Consolidated data models for the dashboard.

Plain data carriers for what the backend returns. Parsing from raw JSON
lives on the models (`from_dict`) so API wrappers stay thin.
"""

from .cameras import (
    DEFAULT_CAMERA_SECTORS,
    PTZ_DIRECTIONS,
    CameraRecord,
    CameraSector,
    CameraSettingsUpdate,
    NVRConfig,
    PlaybackSession,
    PresetCreate,
    PresetRecord,
)
from .detections import BoundingBox, BoundingBoxInfo, DetectionPage, DetectionRecord
from .panels import BirdActivity, DailyCameraStats, SpeciesStat, WeatherData

__all__ = [
    # Cameras / PTZ
    "DEFAULT_CAMERA_SECTORS",
    "PTZ_DIRECTIONS",
    "BirdActivity",
    "BoundingBox",
    "BoundingBoxInfo",
    "CameraRecord",
    "CameraSector",
    "CameraSettingsUpdate",
    "DailyCameraStats",
    "DetectionPage",
    # Detections
    "DetectionRecord",
    "NVRConfig",
    "PlaybackSession",
    "PresetCreate",
    "PresetRecord",
    "SpeciesStat",
    # Panels
    "WeatherData",
]
