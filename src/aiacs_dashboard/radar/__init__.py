"""
Radar - direction-of-appearance geometry and plotting.

polar.py     - bounding box -> compass bucket, camera, radial distance
plot.py      - keyed, animated scatter plot state (enter/update/exit)
viewfield.py - map view-field polygons and ring overlay
svg.py       - SVG rendering of the plot
"""

from .plot import (
    DEFAULT_TRANSITION_MS,
    DirectionPlot,
    PlotDiff,
    PlotLayout,
    PlotPoint,
    RenderedPoint,
)
from .polar import (
    classify_direction,
    direction_counts,
    distance_bucket,
    distance_label,
    empty_direction_data,
    estimate_camera,
    group_by_direction,
)
from .svg import render_radar_svg, tooltip_text
from .viewfield import (
    RadarOverlay,
    cameras_center,
    create_view_field,
    offset_point,
    radar_overlay,
    sector_view_fields,
)

__all__ = [
    "DEFAULT_TRANSITION_MS",
    "DirectionPlot",
    "PlotDiff",
    "PlotLayout",
    "PlotPoint",
    "RadarOverlay",
    "RenderedPoint",
    "cameras_center",
    "classify_direction",
    "create_view_field",
    "direction_counts",
    "distance_bucket",
    "distance_label",
    "empty_direction_data",
    "estimate_camera",
    "group_by_direction",
    "offset_point",
    "radar_overlay",
    "render_radar_svg",
    "sector_view_fields",
    "tooltip_text",
]
