"""
Dashboard panel fetchers.

Left panel: weather and bird activity near each turbine.
Right panel: daily per-camera totals, species breakdown and the
direction-of-appearance data feeding the radar plot.

Every fetcher degrades to an empty default and logs on failure.
"""

import logging
from collections.abc import Sequence
from datetime import date, datetime
from typing import Any

from ..models import (
    BirdActivity,
    BoundingBox,
    CameraSector,
    DailyCameraStats,
    SpeciesStat,
    WeatherData,
)
from ..radar.polar import direction_counts, empty_direction_data, group_by_direction
from ..utils.constants import (
    DEFAULT_LOCATION,
    FEELS_LIKE_OFFSET,
    MAX_SPECIES,
    SPECIES_COLORS,
    TURBINE_IDS,
)
from ..utils.risk import get_risk_level
from .client import BackendClient
from .errors import BackendError

logger = logging.getLogger(__name__)

STATS_PATH = "/api/dashboard/stats/"


def fetch_weather(
    client: BackendClient, location: str = DEFAULT_LOCATION
) -> WeatherData | None:
    """Current site weather. feels_like is approximated as temperature - 3."""
    try:
        response = client.get("/api/weather/current/")
    except BackendError as e:
        logger.error(f"Failed to fetch weather: {e.message}")
        return None

    if not isinstance(response, dict) or not response.get("current"):
        return None

    current = response["current"]
    temperature = current.get("temperature") or 0
    weather = WeatherData(
        location=location,
        timestamp=response.get("timestamp", ""),
        temperature=temperature,
        feels_like=temperature - FEELS_LIKE_OFFSET if temperature else None,
        humidity=current.get("humidity") or 0,
        wind_speed=current.get("wind_speed") or 0,
        wind_direction=current.get("wind_direction") or 0,
        precipitation=current.get("precipitation") or 0,
        weather_condition=current.get("precipitation_type") or "none",
        visibility=current.get("visibility") or 0,
        forecast=response.get("forecast") or [],
    )
    logger.debug(f"Weather: {weather.temperature}C, wind {weather.wind_speed} m/s")
    return weather


def _idle_turbines(now: datetime) -> list[BirdActivity]:
    return [BirdActivity(turbine_id=t, timestamp=now) for t in TURBINE_IDS.values()]


def fetch_bird_activity(
    client: BackendClient,
    today: date | None = None,
    now: datetime | None = None,
) -> list[BirdActivity]:
    """
    Latest bird count per turbine from today's detections.

    Each turbine takes the bb_count of the newest detection from its camera.
    Turbines without a detection today show 0. Always returns one row per
    turbine, even when the backend is unreachable.
    """
    today = today or date.today()
    now = now or datetime.now()

    try:
        response = client.get(
            "/api/detections/filtered/",
            params={
                "date_from": today.isoformat(),
                "date_to": today.isoformat(),
                "sort_by": "date_desc",
                "per_page": 10,
            },
        )
    except BackendError as e:
        logger.error(f"Failed to fetch bird activity: {e.message}")
        return _idle_turbines(now)

    if not isinstance(response, dict) or response.get("status") != "success":
        return _idle_turbines(now)

    latest: dict[int, int] = {}
    for detection in response.get("detections") or []:
        try:
            camera_id = int(detection.get("camera_id"))
        except (TypeError, ValueError):
            continue
        latest.setdefault(camera_id, detection.get("bb_count") or 0)

    activity = []
    for camera_id, turbine_id in TURBINE_IDS.items():
        count = latest.get(camera_id, 0)
        activity.append(
            BirdActivity(
                turbine_id=turbine_id,
                count=count,
                risk=get_risk_level(count),
                timestamp=now,
            )
        )
    return activity


def fetch_left_panel(
    client: BackendClient, location: str = DEFAULT_LOCATION
) -> dict[str, Any]:
    return {
        "weather": fetch_weather(client, location),
        "bird_activity": fetch_bird_activity(client),
    }


def _fetch_stats(client: BackendClient) -> dict[str, Any] | None:
    try:
        response = client.get(STATS_PATH)
    except BackendError as e:
        logger.error(f"Failed to fetch dashboard stats: {e.message}")
        return None

    if isinstance(response, dict) and response.get("status") == "success":
        return response.get("stats") or {}
    return None


def parse_daily_camera_stats(stats: dict[str, Any]) -> DailyCameraStats:
    per_camera = {}
    for item in stats.get("camera_stats") or []:
        try:
            per_camera[int(item["camera_id"])] = item.get("bb_count") or 0
        except (KeyError, TypeError, ValueError):
            logger.warning(f"Skipping malformed camera stat: {item}")
    return DailyCameraStats(total=stats.get("total_bb_today") or 0, per_camera=per_camera)


def parse_species_stats(stats: dict[str, Any]) -> list[SpeciesStat]:
    """Top species, colored from the chart palette in order."""
    species = stats.get("species_stats") or []
    return [
        SpeciesStat(
            name=item.get("name", ""),
            count=item.get("count") or 0,
            color=SPECIES_COLORS[index % len(SPECIES_COLORS)],
        )
        for index, item in enumerate(species[:MAX_SPECIES])
    ]


def fetch_daily_camera_stats(client: BackendClient) -> DailyCameraStats:
    stats = _fetch_stats(client)
    if stats is None:
        return DailyCameraStats()
    return parse_daily_camera_stats(stats)


def fetch_species_stats(client: BackendClient) -> list[SpeciesStat]:
    stats = _fetch_stats(client)
    if stats is None:
        return []
    return parse_species_stats(stats)


def fetch_direction_bbox_data(
    client: BackendClient,
    sectors: Sequence[CameraSector],
    today: date | None = None,
) -> dict[str, list[BoundingBox]]:
    """
    Today's bounding boxes grouped into the 8 compass directions.

    Boxes missing a camera id get one estimated from their position in
    the frame. Ids are stable for the day so the radar plot can key on them.
    """
    today = today or date.today()

    try:
        response = client.get(
            "/api/bird-analysis/data/",
            params={
                "date_from": today.isoformat(),
                "date_to": today.isoformat(),
                "get_all": True,
            },
        )
    except BackendError as e:
        logger.error(f"Failed to fetch direction data: {e.message}")
        return empty_direction_data()

    if not isinstance(response, dict) or not isinstance(response.get("bb_data"), list):
        return empty_direction_data()

    rows = response["bb_data"]
    bboxes = [BoundingBox.from_dict(b) for b in rows if isinstance(b, dict)]
    if len(bboxes) < len(rows):
        logger.warning(f"Skipped {len(rows) - len(bboxes)} malformed direction row(s)")
    grouped = group_by_direction(bboxes, sectors, id_prefix=f"bbox_{today.isoformat()}")
    logger.debug(f"Direction data: {direction_counts(grouped)}")
    return grouped


def fetch_right_panel(
    client: BackendClient, sectors: Sequence[CameraSector]
) -> dict[str, Any]:
    """Right panel data. Stats come from one request shared by both charts."""
    stats = _fetch_stats(client)
    if stats is None:
        daily, species = DailyCameraStats(), []
    else:
        daily, species = parse_daily_camera_stats(stats), parse_species_stats(stats)

    return {
        "daily_camera_stats": daily,
        "species_stats": species,
        "direction_data": fetch_direction_bbox_data(client, sectors),
    }
