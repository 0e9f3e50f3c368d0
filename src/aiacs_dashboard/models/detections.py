"""
Detection data models.

Bounding boxes arrive from the backend in normalized frame coordinates
(0.0 - 1.0, origin top-left). These models clamp and normalize them so the
radar engine never sees inverted or out-of-frame boxes.
"""

from dataclasses import dataclass, field
from typing import Any


def _clamp01(value: float) -> float:
    return max(0.0, min(1.0, float(value)))


def to_float(value: Any, default: float = 0.0) -> float:
    """Number from a backend field; missing or malformed values give default."""
    try:
        return float(value)
    except (TypeError, ValueError):
        return default


def to_int(value: Any) -> int | None:
    """Integer from a backend field, or None if missing or malformed."""
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@dataclass
class BoundingBox:
    """
    Normalized bounding box of a detected bird.

    Attributes:
        bb_left, bb_right: Horizontal edges (0.0 - 1.0)
        bb_top, bb_bottom: Vertical edges (0.0 - 1.0, top < bottom)
        bbox_id: Stable identifier used to key plot points across refreshes
        species: Species name if known
        camera_id: Camera that produced the box, if known
    """

    bb_left: float
    bb_right: float
    bb_top: float
    bb_bottom: float
    bbox_id: str | None = None
    species: str | None = None
    camera_id: int | None = None

    def __post_init__(self):
        left, right = _clamp01(self.bb_left), _clamp01(self.bb_right)
        top, bottom = _clamp01(self.bb_top), _clamp01(self.bb_bottom)
        self.bb_left, self.bb_right = min(left, right), max(left, right)
        self.bb_top, self.bb_bottom = min(top, bottom), max(top, bottom)

    @property
    def center(self) -> tuple[float, float]:
        return (
            (self.bb_left + self.bb_right) / 2,
            (self.bb_top + self.bb_bottom) / 2,
        )

    @property
    def width_pct(self) -> float:
        return (self.bb_right - self.bb_left) * 100

    @property
    def height_pct(self) -> float:
        return (self.bb_bottom - self.bb_top) * 100

    @property
    def area_pct(self) -> float:
        """Box area in percent-squared of the frame (width% x height%)."""
        return self.width_pct * self.height_pct

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoundingBox":
        return cls(
            bb_left=to_float(data.get("bb_left")),
            bb_right=to_float(data.get("bb_right")),
            bb_top=to_float(data.get("bb_top")),
            bb_bottom=to_float(data.get("bb_bottom")),
            bbox_id=data.get("bbox_id"),
            species=data.get("species"),
            camera_id=to_int(data.get("camera_id")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "bb_left": self.bb_left,
            "bb_right": self.bb_right,
            "bb_top": self.bb_top,
            "bb_bottom": self.bb_bottom,
            "bbox_id": self.bbox_id,
            "species": self.species,
            "camera_id": self.camera_id,
        }


@dataclass
class BoundingBoxInfo:
    """Per-box detail for a single detection record (bb-info endpoint)."""

    record_id: int
    class_name: str
    bb_left: float
    bb_right: float
    bb_top: float
    bb_bottom: float
    confidence: float | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "BoundingBoxInfo":
        return cls(
            record_id=to_int(data.get("record_id")) or 0,
            class_name=data.get("class_name") or "",
            bb_left=to_float(data.get("bb_left")),
            bb_right=to_float(data.get("bb_right")),
            bb_top=to_float(data.get("bb_top")),
            bb_bottom=to_float(data.get("bb_bottom")),
            confidence=data.get("confidence"),
        )


@dataclass
class DetectionRecord:
    """
    One detection event as listed by the backend.

    The backend has used both `detection_id` and `id` for the identifier,
    and both `timestamp` and `detection_time` for the time. `detection_time`
    keeps the raw value; `timestamp` is what the list shows.
    """

    detection_id: int | None
    camera_id: int
    bb_count: int = 0
    detection_time: str = ""
    timestamp: str = ""
    species: str | None = None
    confidence: float | None = None
    image_url: str | None = None
    thumbnail_url: str | None = None
    bbox_info: list[BoundingBoxInfo] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DetectionRecord":
        detection_id = data.get("detection_id") or data.get("id")
        return cls(
            detection_id=detection_id,
            camera_id=to_int(data.get("camera_id")) or 0,
            bb_count=data.get("bb_count") or 0,
            detection_time=data.get("detection_time") or data.get("timestamp") or "",
            timestamp=data.get("timestamp") or data.get("detection_time") or "",
            species=data.get("species"),
            confidence=data.get("confidence"),
            image_url=data.get("image_url"),
            thumbnail_url=data.get("thumbnail_url"),
            bbox_info=[BoundingBoxInfo.from_dict(b) for b in data.get("bbox_info", [])],
        )

    @property
    def primary_species(self) -> str | None:
        """First classified species in the frame."""
        if self.bbox_info:
            return self.bbox_info[0].class_name
        return self.species

    @property
    def additional_species_count(self) -> int:
        return max(0, len(self.bbox_info) - 1)


@dataclass
class DetectionPage:
    """Paginated detection history (video analysis view)."""

    detections: list[DetectionRecord]
    total_pages: int = 1
    current_page: int = 1
    total_records: int = 0

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "DetectionPage":
        detections = [DetectionRecord.from_dict(d) for d in data.get("detections") or []]
        total_records = to_int(data.get("total_records", data.get("total")))
        return cls(
            detections=detections,
            total_pages=to_int(data.get("total_pages")) or 1,
            current_page=to_int(data.get("current_page", data.get("page"))) or 1,
            total_records=len(detections) if total_records is None else total_records,
        )
