"""
Dashboard State - thread-safe holder for the latest data of every panel.

Pollers write from their own thread; the renderer reads a snapshot. Each
panel is replaced wholesale, so the last completed fetch wins.
"""

import logging
import threading
from dataclasses import asdict, dataclass, field, is_dataclass
from datetime import date, datetime
from typing import Any

from ..models import (
    BirdActivity,
    BoundingBox,
    CameraRecord,
    DailyCameraStats,
    DetectionRecord,
    SpeciesStat,
    WeatherData,
)
from ..radar.polar import direction_counts, empty_direction_data

logger = logging.getLogger(__name__)


@dataclass
class PanelData:
    """Everything the dashboard shows, as of one moment."""

    now: datetime = field(default_factory=datetime.now)
    weather: WeatherData | None = None
    bird_activity: list[BirdActivity] = field(default_factory=list)
    detections: list[DetectionRecord] = field(default_factory=list)
    daily_camera_stats: DailyCameraStats = field(default_factory=DailyCameraStats)
    species_stats: list[SpeciesStat] = field(default_factory=list)
    direction_data: dict[str, list[BoundingBox]] = field(default_factory=empty_direction_data)
    cameras: list[CameraRecord] = field(default_factory=list)
    updated: dict[str, datetime] = field(default_factory=dict)


def to_jsonable(value: Any) -> Any:
    """Convert dataclasses, datetimes and containers to JSON-ready values."""
    if is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(asdict(value))
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    return value


class DashboardState:
    """
    Latest panel data behind a lock.

    Every setter replaces its panel and records when it did so.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._data = PanelData()
        self._revision = 0

    def _touch(self, panel: str) -> None:
        self._data.updated[panel] = datetime.now()
        self._revision += 1

    def set_clock(self, now: datetime) -> None:
        with self._lock:
            self._data.now = now

    def set_left_panel(
        self, weather: WeatherData | None, bird_activity: list[BirdActivity]
    ) -> None:
        with self._lock:
            self._data.weather = weather
            self._data.bird_activity = list(bird_activity)
            self._touch("left_panel")

    def set_detections(self, detections: list[DetectionRecord]) -> None:
        with self._lock:
            self._data.detections = list(detections)
            self._touch("detections")

    def set_right_panel(
        self, daily_camera_stats: DailyCameraStats, species_stats: list[SpeciesStat]
    ) -> None:
        with self._lock:
            self._data.daily_camera_stats = daily_camera_stats
            self._data.species_stats = list(species_stats)
            self._touch("right_panel")

    def set_direction_data(self, direction_data: dict[str, list[BoundingBox]]) -> None:
        with self._lock:
            self._data.direction_data = {d: list(b) for d, b in direction_data.items()}
            self._touch("direction_data")

    def set_cameras(self, cameras: list[CameraRecord]) -> None:
        with self._lock:
            self._data.cameras = list(cameras)
            self._touch("cameras")

    @property
    def revision(self) -> int:
        """Incremented on every panel write."""
        with self._lock:
            return self._revision

    def data(self) -> PanelData:
        """Shallow copy of the current panel data."""
        with self._lock:
            current = self._data
            return PanelData(
                now=current.now,
                weather=current.weather,
                bird_activity=list(current.bird_activity),
                detections=list(current.detections),
                daily_camera_stats=current.daily_camera_stats,
                species_stats=list(current.species_stats),
                direction_data={d: list(b) for d, b in current.direction_data.items()},
                cameras=list(current.cameras),
                updated=dict(current.updated),
            )

    def snapshot(self) -> dict[str, Any]:
        """JSON-ready view of the current state."""
        data = self.data()
        snapshot = to_jsonable(data)
        snapshot["direction_counts"] = direction_counts(data.direction_data)
        return snapshot
