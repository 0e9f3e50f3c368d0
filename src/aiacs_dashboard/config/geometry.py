"""
Geometry Configuration Parsing - camera sectors, plot layout and site positions.

Single source of truth for turning the raw config dict into the radar
engine's types. Used by the CLI and the dashboard sources.
"""

from ..models import DEFAULT_CAMERA_SECTORS, CameraSector
from ..radar.plot import PlotLayout
from ..radar.viewfield import LatLng
from ..utils.constants import DEFAULT_CAMERA_POSITION, DEFAULT_MAP_CENTER


def parse_camera_sectors(config: dict) -> tuple[CameraSector, ...]:
    """
    Parse camera sectors from the raw config dict.

    Falls back to the installation's three default cameras when the
    config has no 'cameras' section.
    """
    cameras = config.get("cameras")
    if not cameras:
        return DEFAULT_CAMERA_SECTORS

    return tuple(
        CameraSector(
            camera_id=camera["id"],
            name=camera["name"],
            color=camera["color"],
            min_angle=camera["min_angle"],
            max_angle=camera["max_angle"],
            map_direction=camera["direction"],
            view_angle=camera.get("view_angle", 120),
            label=camera.get("label") or f"CAMERA {camera['id']}",
            map_color=camera.get("map_color", ""),
        )
        for camera in cameras
    )


def parse_plot_layout(config: dict) -> PlotLayout:
    radar = config.get("radar") or {}
    defaults = PlotLayout()
    return PlotLayout(
        width=radar.get("width", defaults.width),
        height=radar.get("height", defaults.height),
    )


def parse_site_positions(config: dict) -> tuple[LatLng, LatLng]:
    """(map_center, camera_position) as (lat, lng) tuples."""
    site = config.get("site") or {}
    map_center = site.get("map_center") or DEFAULT_MAP_CENTER
    camera_position = site.get("camera_position") or DEFAULT_CAMERA_POSITION
    return tuple(map_center), tuple(camera_position)
