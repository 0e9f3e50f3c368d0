"""
Panel data sources.

BackendSource reads the REST backend; SampleSource generates data for
--dry-run. Both expose the same methods so the pollers do not care which
one they drive.
"""

import logging
import random
from collections.abc import Sequence
from datetime import datetime
from typing import Protocol

from ..api import BackendClient
from ..api.cameras import get_cameras
from ..api.dashboard import fetch_bird_activity, fetch_right_panel, fetch_weather
from ..api.detections import fetch_detections_with_bbox_info
from ..api.playback import fetch_detection_page
from ..models import (
    BirdActivity,
    BoundingBox,
    CameraRecord,
    CameraSector,
    DailyCameraStats,
    DetectionPage,
    DetectionRecord,
    SpeciesStat,
    WeatherData,
)
from ..utils import sample_data
from ..utils.constants import DEFAULT_LOCATION, DEFAULT_RETRIES, DEFAULT_RETRY_DELAY
from .history import HistoryQuery

logger = logging.getLogger(__name__)


class PanelSource(Protocol):
    def cameras(self) -> list[CameraRecord]: ...

    def left_panel(self) -> tuple[WeatherData | None, list[BirdActivity]]: ...

    def detections(self) -> list[DetectionRecord]: ...

    def right_panel(
        self,
    ) -> tuple[DailyCameraStats, list[SpeciesStat], dict[str, list[BoundingBox]]]: ...

    def direction_data(self) -> dict[str, list[BoundingBox]] | None: ...

    def history(self, query: HistoryQuery) -> DetectionPage: ...


class BackendSource:
    """
    Panel data from the backend.

    direction_data() returns None: live direction data only changes with
    the right panel refresh, so the plot job just re-renders what it has.
    """

    def __init__(
        self,
        client: BackendClient,
        sectors: Sequence[CameraSector],
        location: str = DEFAULT_LOCATION,
        retries: int = DEFAULT_RETRIES,
        retry_delay: float = DEFAULT_RETRY_DELAY,
    ):
        self.client = client
        self.sectors = tuple(sectors)
        self.location = location
        self.retries = retries
        self.retry_delay = retry_delay

    def cameras(self) -> list[CameraRecord]:
        return get_cameras(self.client)

    def left_panel(self) -> tuple[WeatherData | None, list[BirdActivity]]:
        return fetch_weather(self.client, self.location), fetch_bird_activity(self.client)

    def detections(self) -> list[DetectionRecord]:
        return fetch_detections_with_bbox_info(
            self.client, retries=self.retries, retry_delay=self.retry_delay
        )

    def right_panel(
        self,
    ) -> tuple[DailyCameraStats, list[SpeciesStat], dict[str, list[BoundingBox]]]:
        panel = fetch_right_panel(self.client, self.sectors)
        return panel["daily_camera_stats"], panel["species_stats"], panel["direction_data"]

    def direction_data(self) -> dict[str, list[BoundingBox]] | None:
        return None

    def history(self, query: HistoryQuery) -> DetectionPage:
        """
        Raises:
            BackendError: Backend refused or could not be reached
        """
        return fetch_detection_page(
            self.client,
            page=query.page,
            per_page=query.per_page,
            date_from=query.date_from,
            date_to=query.date_to,
        )


class SampleSource:
    """Generated panel data; direction data changes on every call."""

    def __init__(self, rng: random.Random | None = None):
        self.rng = rng or random.Random()

    def cameras(self) -> list[CameraRecord]:
        return [
            CameraRecord(id=camera_id, name=f"Camera {camera_id}", status="active")
            for camera_id in sample_data.SAMPLE_CAMERAS
        ]

    def left_panel(self) -> tuple[WeatherData | None, list[BirdActivity]]:
        now = datetime.now()
        return (
            sample_data.sample_weather(self.rng, now),
            sample_data.sample_bird_activity(self.rng, now),
        )

    def detections(self) -> list[DetectionRecord]:
        return sample_data.sample_detections(self.rng, datetime.now())

    def right_panel(
        self,
    ) -> tuple[DailyCameraStats, list[SpeciesStat], dict[str, list[BoundingBox]]]:
        daily, species = sample_data.sample_right_panel(self.rng)
        return daily, species, sample_data.sample_direction_data(self.rng)

    def direction_data(self) -> dict[str, list[BoundingBox]] | None:
        return sample_data.sample_direction_data(self.rng)

    def history(self, query: HistoryQuery) -> DetectionPage:
        return sample_data.sample_detection_page(
            self.rng, datetime.now(), page=query.page, per_page=query.per_page
        )
