"""
Generated sample data for --dry-run.

Produces plausible direction data, panel data and detections without a
backend so the radar plot and page can be checked offline.
"""

import random
from datetime import datetime, timedelta

from ..models import (
    BirdActivity,
    BoundingBox,
    DailyCameraStats,
    DetectionPage,
    DetectionRecord,
    SpeciesStat,
    WeatherData,
)
from .constants import (
    DEFAULT_LOCATION,
    DEFAULT_PER_PAGE,
    DIRECTIONS,
    FEELS_LIKE_OFFSET,
    SPECIES_COLORS,
    TURBINE_IDS,
)
from .risk import get_risk_level

SAMPLE_SPECIES = ("까마귀", "매", "갈매기", "독수리", "참새", "비둘기")
SAMPLE_CAMERAS = (1, 2, 3)
SAMPLE_HISTORY_RECORDS = 95
MAX_PER_DIRECTION = 6

# direction -> (base x, base y, x spread, y spread) of box centers
_DIRECTION_REGIONS = {
    "N": (0.5, 0.2, 0.3, 0.2),
    "NE": (0.75, 0.2, 0.2, 0.2),
    "E": (0.8, 0.5, 0.15, 0.3),
    "SE": (0.75, 0.8, 0.2, 0.15),
    "S": (0.5, 0.8, 0.3, 0.15),
    "SW": (0.25, 0.8, 0.2, 0.15),
    "W": (0.2, 0.5, 0.15, 0.3),
    "NW": (0.25, 0.2, 0.2, 0.2),
}


def _box_size(rng: random.Random) -> tuple[float, float]:
    kind = rng.random()
    if kind < 0.4:
        low, spread = 0.02, 0.05
    elif kind < 0.7:
        low, spread = 0.05, 0.08
    else:
        low, spread = 0.08, 0.15
    return low + rng.random() * spread, low + rng.random() * spread


def sample_bbox(direction: str, index: int, rng: random.Random) -> BoundingBox:
    """One random box whose center falls in the direction's frame region."""
    base_x, base_y, spread_x, spread_y = _DIRECTION_REGIONS[direction]
    width, height = _box_size(rng)

    cx = max(width / 2, min(1 - width / 2, base_x + (rng.random() - 0.5) * spread_x))
    cy = max(height / 2, min(1 - height / 2, base_y + (rng.random() - 0.5) * spread_y))

    return BoundingBox(
        bb_left=cx - width / 2,
        bb_right=cx + width / 2,
        bb_top=cy - height / 2,
        bb_bottom=cy + height / 2,
        bbox_id=f"{direction}_{index}_{rng.randrange(1_000_000)}",
        species=rng.choice(SAMPLE_SPECIES),
        camera_id=rng.choice(SAMPLE_CAMERAS),
    )


def sample_direction_data(
    rng: random.Random | None = None, max_per_direction: int = MAX_PER_DIRECTION
) -> dict[str, list[BoundingBox]]:
    """0 - max_per_direction random boxes for each compass direction."""
    rng = rng or random.Random()
    return {
        direction: [
            sample_bbox(direction, i, rng)
            for i in range(rng.randint(0, max_per_direction))
        ]
        for direction in DIRECTIONS
    }


def sample_weather(rng: random.Random, now: datetime) -> WeatherData:
    temperature = round(rng.uniform(5, 25), 1)
    return WeatherData(
        location=DEFAULT_LOCATION,
        timestamp=now.isoformat(timespec="seconds"),
        temperature=temperature,
        feels_like=round(temperature - FEELS_LIKE_OFFSET, 1),
        humidity=rng.randint(40, 90),
        wind_speed=round(rng.uniform(0, 12), 1),
        wind_direction=rng.randint(0, 359),
        visibility=rng.randint(2, 20),
    )


def sample_bird_activity(rng: random.Random, now: datetime) -> list[BirdActivity]:
    activity = []
    for turbine_id in TURBINE_IDS.values():
        count = rng.randint(0, 8)
        activity.append(
            BirdActivity(
                turbine_id=turbine_id,
                count=count,
                risk=get_risk_level(count),
                timestamp=now,
            )
        )
    return activity


def sample_detections(
    rng: random.Random, now: datetime, count: int = 10
) -> list[DetectionRecord]:
    """Recent detections, newest first."""
    detections = []
    when = now
    for i in range(count):
        when -= timedelta(seconds=rng.randint(20, 600))
        detections.append(
            DetectionRecord(
                detection_id=1000 - i,
                camera_id=rng.choice(SAMPLE_CAMERAS),
                bb_count=rng.randint(1, 7),
                detection_time=when.isoformat(timespec="seconds"),
                timestamp=when.strftime("%H:%M:%S"),
                species=rng.choice(SAMPLE_SPECIES),
            )
        )
    return detections


def sample_detection_page(
    rng: random.Random,
    now: datetime,
    page: int = 1,
    per_page: int = DEFAULT_PER_PAGE,
    total_records: int = SAMPLE_HISTORY_RECORDS,
) -> DetectionPage:
    """One page of a fixed-size history, newest first."""
    total_pages = max(1, -(-total_records // per_page))
    start = (page - 1) * per_page
    count = max(0, min(per_page, total_records - start))
    detections = sample_detections(rng, now - timedelta(minutes=30 * start), count)
    for offset, detection in enumerate(detections):
        detection.detection_id = total_records - start - offset
    return DetectionPage(
        detections=detections,
        total_pages=total_pages,
        current_page=page,
        total_records=total_records,
    )


def sample_right_panel(rng: random.Random) -> tuple[DailyCameraStats, list[SpeciesStat]]:
    per_camera = {camera_id: rng.randint(0, 120) for camera_id in SAMPLE_CAMERAS}
    species = sorted(
        ((name, rng.randint(1, 60)) for name in SAMPLE_SPECIES),
        key=lambda item: item[1],
        reverse=True,
    )
    return (
        DailyCameraStats(total=sum(per_camera.values()), per_camera=per_camera),
        [
            SpeciesStat(name=name, count=count, color=SPECIES_COLORS[i])
            for i, (name, count) in enumerate(species)
        ],
    )
