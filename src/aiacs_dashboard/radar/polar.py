"""
Polar geometry for the direction-of-appearance radar.

Turns normalized bounding boxes into a compass bucket, an estimated source
camera, and a radial distance. Larger boxes are assumed to be closer birds.

Angle conventions:
    compass angle - 0 = north, increasing clockwise (used for sectors)
    frame bearing - atan2 of the box center around the frame center, in the
                    image's y-down coordinates, normalized to [0, 360)
"""

import math
from collections.abc import Iterable, Sequence

import numpy as np

from ..models import BoundingBox, CameraSector
from ..utils.constants import DIRECTIONS

# (minimum area in %^2, radius fraction, estimated distance label)
DISTANCE_BUCKETS = (
    (50.0, 0.2, "10-30m"),
    (25.0, 0.3, "30-50m"),
    (15.0, 0.4, "50-80m"),
    (10.0, 0.5, "80-120m"),
    (5.0, 0.6, "120-180m"),
)
FARTHEST_RADIUS = 0.7
FARTHEST_LABEL = "180m+"

# Center band of the frame; a box centered in both bands has no direction
CENTER_BAND = (0.4, 0.6)


def classify_direction(bbox: BoundingBox) -> str | None:
    """
    Bucket a box into one of 8 compass directions by its center.

    The frame is split into a 3x3 grid with the middle band spanning
    0.4 - 0.6 on each axis. The middle cell has no direction.

    Returns:
        One of N, NE, E, SE, S, SW, W, NW, or None for the middle cell
    """
    cx, cy = bbox.center
    low, high = CENTER_BAND

    if cx < low:
        column = "W"
    elif cx > high:
        column = "E"
    else:
        column = ""

    if cy < low:
        return "N" + column
    if cy > high:
        return "S" + column
    return column or None


def frame_bearing(bbox: BoundingBox) -> float:
    """Bearing of the box center around the frame center, degrees [0, 360)."""
    cx, cy = bbox.center
    angle = math.degrees(math.atan2(cy - 0.5, cx - 0.5))
    return (angle + 360) % 360


def estimate_camera(
    bbox: BoundingBox, sectors: Iterable[CameraSector]
) -> int | None:
    """
    Guess which camera saw a box from where it sits in the frame.

    Used when the analysis endpoint does not report a camera id.
    Returns None if no sector covers the bearing.
    """
    bearing = frame_bearing(bbox)
    for sector in sectors:
        if sector.contains(bearing):
            return sector.camera_id
    return None


def _bucket(area_pct: float) -> tuple[float, str]:
    for min_area, radius, label in DISTANCE_BUCKETS:
        if area_pct >= min_area:
            return radius, label
    return FARTHEST_RADIUS, FARTHEST_LABEL


def distance_bucket(area_pct: float) -> float:
    """Radius fraction (0.2 near - 0.7 far) for a box area in %^2."""
    return _bucket(area_pct)[0]


def distance_label(area_pct: float) -> str:
    """Estimated distance range for a box area in %^2."""
    return _bucket(area_pct)[1]


def compass_to_screen(
    angle_deg: float, radius: float, cx: float, cy: float
) -> tuple[float, float]:
    """Screen (x, y) of a compass angle at a radius around (cx, cy)."""
    angle_rad = math.radians(angle_deg - 90)
    return cx + radius * math.cos(angle_rad), cy + radius * math.sin(angle_rad)


def compass_to_screen_many(
    angles_deg: Sequence[float], radii: Sequence[float], cx: float, cy: float
) -> np.ndarray:
    """Vectorized compass_to_screen. Returns an (n, 2) array of x, y."""
    angles = np.radians(np.asarray(angles_deg, dtype=float) - 90)
    r = np.asarray(radii, dtype=float)
    return np.column_stack((cx + r * np.cos(angles), cy + r * np.sin(angles)))


def empty_direction_data() -> dict[str, list[BoundingBox]]:
    return {direction: [] for direction in DIRECTIONS}


def group_by_direction(
    bboxes: Iterable[BoundingBox],
    sectors: Sequence[CameraSector],
    id_prefix: str = "bbox",
) -> dict[str, list[BoundingBox]]:
    """
    Sort boxes into compass buckets, filling in camera and id when missing.

    Boxes in the center cell are dropped. Boxes without an id get
    `{id_prefix}_{index}` so they stay keyed across refreshes of the
    same data set.
    """
    grouped = empty_direction_data()

    for index, bbox in enumerate(bboxes):
        direction = classify_direction(bbox)
        if direction is None:
            continue
        if bbox.camera_id is None:
            bbox.camera_id = estimate_camera(bbox, sectors)
        if bbox.bbox_id is None:
            bbox.bbox_id = f"{id_prefix}_{index}"
        grouped[direction].append(bbox)

    return grouped


def direction_counts(direction_data: dict[str, list[BoundingBox]]) -> dict[str, int]:
    """Number of boxes per compass direction, in compass order."""
    return {d: len(direction_data.get(d, [])) for d in DIRECTIONS}


__all__ = [
    "classify_direction",
    "compass_to_screen",
    "compass_to_screen_many",
    "direction_counts",
    "distance_bucket",
    "distance_label",
    "empty_direction_data",
    "estimate_camera",
    "frame_bearing",
    "group_by_direction",
]
