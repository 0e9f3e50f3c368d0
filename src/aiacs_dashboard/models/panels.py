"""
Dashboard panel models (weather, bird activity, daily statistics).
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class WeatherData:
    """Current weather at the installation site."""

    location: str
    timestamp: str
    temperature: float = 0.0
    feels_like: float | None = None
    humidity: float = 0.0
    wind_speed: float = 0.0
    wind_direction: float = 0.0
    precipitation: float = 0.0
    weather_condition: str = "none"
    visibility: float = 0.0
    forecast: list[Any] = field(default_factory=list)


@dataclass
class BirdActivity:
    """Latest bird count near one turbine."""

    turbine_id: str
    count: int = 0
    risk: str = "low"
    timestamp: datetime = field(default_factory=datetime.now)
    bbox_width: float = 0.0
    bbox_height: float = 0.0


@dataclass
class DailyCameraStats:
    """Cumulative bounding boxes seen today, total and per camera."""

    total: int = 0
    per_camera: dict[int, int] = field(default_factory=dict)

    def for_camera(self, camera_id: int) -> int:
        return self.per_camera.get(camera_id, 0)


@dataclass
class SpeciesStat:
    name: str
    count: int
    color: str
