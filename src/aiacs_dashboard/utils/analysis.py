"""
Detection history statistics and pagination.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models import DetectionRecord
from .timefmt import parse_timestamp


@dataclass
class DetectionStats:
    total_detections: int = 0
    average_bounding_boxes: float = 0.0
    most_active_camera_id: int | None = None
    detections_by_hour: dict[int, int] = field(default_factory=dict)


def calculate_detection_stats(detections: Sequence[DetectionRecord]) -> DetectionStats:
    """
    Summary of a page of detections.

    The most active camera is the one with the most detections (not boxes);
    ties go to the camera seen first. Detections with an unparseable time
    are left out of the per-hour counts.
    """
    if not detections:
        return DetectionStats()

    total_boxes = sum(d.bb_count for d in detections)
    per_camera = Counter(d.camera_id for d in detections)

    by_hour: Counter[int] = Counter()
    for detection in detections:
        parsed = parse_timestamp(detection.detection_time)
        if parsed is not None:
            by_hour[parsed.hour] += 1

    return DetectionStats(
        total_detections=len(detections),
        average_bounding_boxes=round(total_boxes / len(detections), 2),
        most_active_camera_id=per_camera.most_common(1)[0][0],
        detections_by_hour=dict(sorted(by_hour.items())),
    )


def generate_page_numbers(current: int, total: int, max_visible: int = 5) -> list[int]:
    """Page links centered on the current page where possible."""
    start = max(1, current - max_visible // 2)
    end = min(total, start + max_visible - 1)
    return list(range(start, end + 1))
