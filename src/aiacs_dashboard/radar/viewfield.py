"""
Map overlay geometry - camera view fields and the radar ring overlay.

Distances here are meters on the ground, positions are (lat, lng) degrees.
Offsets use flat-earth approximations, which are fine at the few hundred
meters the overlay spans.
"""

import math
from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models import CameraSector

EARTH_RADIUS_M = 6378137.0
METERS_PER_DEGREE = 111320.0

LatLng = tuple[float, float]

DEFAULT_OVERLAY_RADIUS_M = 300.0
VIEW_FIELD_SEGMENTS = 12

# (radius fraction, stroke weight, opacity, css class)
OVERLAY_RINGS = (
    (1.0, 1.8, 0.7, "neon-circle-outer"),
    (0.7, 1.5, 0.6, "neon-circle-middle"),
    (0.4, 1.2, 0.5, "neon-circle-inner"),
)
SECTOR_LABEL_FRACTION = 0.6
DISTANCE_LABEL_BEARING = 45.0


def create_view_field(
    center: LatLng,
    direction: float,
    angle: float,
    distance: float,
    segments: int = VIEW_FIELD_SEGMENTS,
) -> list[LatLng]:
    """
    Polygon for a camera's field of view.

    Args:
        center: Camera position (lat, lng)
        direction: Center bearing of the view, compass degrees
        angle: Total horizontal field of view, degrees
        distance: Reach of the view field in meters
        segments: Number of arc segments

    Returns:
        Closed polygon: center, segments + 1 arc points, center
    """
    if segments < 1:
        raise ValueError("segments must be >= 1")

    lat, lng = center
    cos_lat = math.cos(math.radians(lat))
    half_angle = angle / 2
    points = [center]

    for i in range(segments + 1):
        bearing = math.radians(direction - half_angle + angle * i / segments)
        d_lat = math.degrees(distance * math.cos(bearing) / EARTH_RADIUS_M)
        d_lng = math.degrees(distance * math.sin(bearing) / (EARTH_RADIUS_M * cos_lat))
        points.append((lat + d_lat, lng + d_lng))

    points.append(center)
    return points


def offset_point(center: LatLng, bearing: float, distance: float) -> LatLng:
    """Point `distance` meters from `center` along a compass bearing."""
    lat, lng = center
    bearing_rad = math.radians(bearing)
    return (
        lat + distance * math.cos(bearing_rad) / METERS_PER_DEGREE,
        lng
        + distance
        * math.sin(bearing_rad)
        / (METERS_PER_DEGREE * math.cos(math.radians(lat))),
    )


def cameras_center(positions: Sequence[LatLng], default: LatLng) -> LatLng:
    """Mean of camera positions, or `default` when there are none."""
    if not positions:
        return default
    return (
        sum(p[0] for p in positions) / len(positions),
        sum(p[1] for p in positions) / len(positions),
    )


@dataclass
class OverlayRing:
    radius_m: float
    weight: float
    opacity: float
    css_class: str


@dataclass
class OverlayLabel:
    position: LatLng
    text: str
    color: str = "#00e0e0"


@dataclass
class RadarOverlay:
    """Everything drawn on the map around the installation."""

    center: LatLng
    rings: list[OverlayRing] = field(default_factory=list)
    sector_lines: list[tuple[LatLng, LatLng]] = field(default_factory=list)
    distance_labels: list[OverlayLabel] = field(default_factory=list)
    sector_labels: list[OverlayLabel] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "center": list(self.center),
            "rings": [vars(ring) for ring in self.rings],
            "sector_lines": [[list(a), list(b)] for a, b in self.sector_lines],
            "distance_labels": [
                {"position": list(l.position), "text": l.text, "color": l.color}
                for l in self.distance_labels
            ],
            "sector_labels": [
                {"position": list(l.position), "text": l.text, "color": l.color}
                for l in self.sector_labels
            ],
        }


def radar_overlay(
    center: LatLng,
    sectors: Sequence[CameraSector],
    radius: float = DEFAULT_OVERLAY_RADIUS_M,
) -> RadarOverlay:
    """
    Build the ring/sector overlay drawn around the installation.

    Sector divider lines run along each camera's view-field edge, labels sit
    on the view-field center line at SECTOR_LABEL_FRACTION of the radius.
    """
    overlay = RadarOverlay(center=center)

    for fraction, weight, opacity, css_class in OVERLAY_RINGS:
        overlay.rings.append(OverlayRing(radius * fraction, weight, opacity, css_class))

    for sector in sectors:
        boundary = (sector.map_direction - sector.view_angle / 2) % 360
        overlay.sector_lines.append((center, offset_point(center, boundary, radius)))

    for fraction in (0.4, 0.7, 1.0):
        distance = radius * fraction
        overlay.distance_labels.append(
            OverlayLabel(
                position=offset_point(center, DISTANCE_LABEL_BEARING, distance),
                text=f"{distance:.0f}m",
            )
        )

    for sector in sectors:
        overlay.sector_labels.append(
            OverlayLabel(
                position=offset_point(
                    center, sector.map_direction, radius * SECTOR_LABEL_FRACTION
                ),
                text=sector.label or f"CAMERA {sector.camera_id}",
                color=sector.map_color or sector.color,
            )
        )

    return overlay


def sector_view_fields(
    position: LatLng,
    sectors: Sequence[CameraSector],
    distance: float = DEFAULT_OVERLAY_RADIUS_M,
) -> dict[int, list[LatLng]]:
    """View-field polygon per camera id, all cameras at one position."""
    return {
        sector.camera_id: create_view_field(
            position, sector.map_direction, sector.view_angle, distance
        )
        for sector in sectors
    }
