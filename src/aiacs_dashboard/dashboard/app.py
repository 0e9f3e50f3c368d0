"""
Dashboard - ties a panel source, the panel state, the radar plot and the
output writer together, and registers the refresh jobs with a poller.
"""

import logging
import random
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any

from ..api.errors import BackendError
from ..models import CameraSector
from ..radar.plot import DEFAULT_TRANSITION_MS, DirectionPlot, PlotLayout
from ..radar.svg import render_radar_svg
from ..radar.viewfield import (
    DEFAULT_OVERLAY_RADIUS_M,
    LatLng,
    radar_overlay,
    sector_view_fields,
)
from ..settings import AppSettings
from ..utils.constants import (
    CLOCK_INTERVAL,
    DEFAULT_CAMERA_POSITION,
    DEFAULT_MAP_CENTER,
    DETECTIONS_INTERVAL,
    DIRECTION_PLOT_INTERVAL,
    HISTORY_INTERVAL,
    LEFT_PANEL_INTERVAL,
    RIGHT_PANEL_INTERVAL,
)
from .history import HistoryQuery, HistoryView, build_history_view
from .output import DashboardWriter
from .poller import PanelPoller
from .report import render_dashboard_html, render_history_html
from .sources import PanelSource
from .state import DashboardState

logger = logging.getLogger(__name__)

DEFAULT_INTERVALS = {
    "clock": CLOCK_INTERVAL,
    "left_panel": LEFT_PANEL_INTERVAL,
    "detections": DETECTIONS_INTERVAL,
    "right_panel": RIGHT_PANEL_INTERVAL,
    "direction_plot": DIRECTION_PLOT_INTERVAL,
    "history": HISTORY_INTERVAL,
}


class Dashboard:
    """
    Live dashboard.

    Args:
        source: Where panel data comes from (backend or sample data)
        sectors: Camera sectors for the radar plot and map overlay
        settings: User settings
        writer: Output writer for the rendered files
        layout: Radar plot geometry
        transition_ms: Radar plot transition duration
        map_center: Map center (lat, lng)
        camera_position: Where the cameras are mounted (lat, lng)
        view_distance: View-field and overlay radius in meters
        stream_url: camera id -> live stream URL
        rng: Random source for radar angle placement
    """

    def __init__(
        self,
        source: PanelSource,
        sectors: Sequence[CameraSector],
        settings: AppSettings,
        writer: DashboardWriter,
        layout: PlotLayout | None = None,
        transition_ms: float = DEFAULT_TRANSITION_MS,
        map_center: LatLng = DEFAULT_MAP_CENTER,
        camera_position: LatLng = DEFAULT_CAMERA_POSITION,
        view_distance: float = DEFAULT_OVERLAY_RADIUS_M,
        stream_url: Callable[[int], str] | None = None,
        rng: random.Random | None = None,
    ):
        self.source = source
        self.sectors = tuple(sectors)
        self.settings = settings
        self.writer = writer
        self.state = DashboardState()
        self.plot = DirectionPlot(self.sectors, layout, transition_ms, rng)
        self.map_center = map_center
        self.camera_position = camera_position
        self.view_distance = view_distance
        self._stream_url = stream_url

    # ------------------------------------------------------------------
    # Refresh jobs
    # ------------------------------------------------------------------

    def refresh_clock(self) -> None:
        """Tick the clock and re-render the page."""
        self.state.set_clock(datetime.now())
        self.render()

    def refresh_left_panel(self) -> None:
        weather, activity = self.source.left_panel()
        self.state.set_left_panel(weather, activity)

    def refresh_detections(self) -> None:
        self.state.set_detections(self.source.detections())

    def refresh_right_panel(self) -> None:
        daily, species, direction_data = self.source.right_panel()
        self.state.set_right_panel(daily, species)
        self.state.set_direction_data(direction_data)

    def refresh_cameras(self) -> None:
        self.state.set_cameras(self.source.cameras())

    def refresh_direction_plot(self) -> None:
        """Join the latest direction data into the radar plot."""
        fresh = self.source.direction_data()
        if fresh is not None:
            self.state.set_direction_data(fresh)

        diff = self.plot.update_from_bboxes(self.state.data().direction_data)
        if diff.changed:
            logger.debug(
                f"Radar: +{len(diff.entered)} ~{len(diff.updated)} -{len(diff.exited)}"
            )

    def refresh_history(self) -> None:
        """Rewrite the first history page with the default date filter."""
        try:
            self.write_history(HistoryQuery.build())
        except BackendError as e:
            logger.error(f"Failed to fetch detection history: {e.message}")

    def build_poller(self, intervals: dict[str, float] | None = None) -> PanelPoller:
        """Poller with every refresh job registered, in first-run order."""
        intervals = {**DEFAULT_INTERVALS, **(intervals or {})}
        poller = PanelPoller()
        poller.add_job("cameras", intervals["right_panel"], self.refresh_cameras)
        poller.add_job("left_panel", intervals["left_panel"], self.refresh_left_panel)
        poller.add_job("detections", intervals["detections"], self.refresh_detections)
        poller.add_job("right_panel", intervals["right_panel"], self.refresh_right_panel)
        poller.add_job(
            "direction_plot", intervals["direction_plot"], self.refresh_direction_plot
        )
        poller.add_job("history", intervals["history"], self.refresh_history)
        poller.add_job("clock", intervals["clock"], self.refresh_clock)
        return poller

    # ------------------------------------------------------------------
    # Rendering
    # ------------------------------------------------------------------

    def map_data(self) -> dict[str, Any]:
        """View fields and ring overlay for the map view."""
        view_fields = sector_view_fields(
            self.camera_position, self.sectors, self.view_distance
        )
        return {
            "center": list(self.map_center),
            "camera_position": list(self.camera_position),
            "view_fields": {
                str(camera_id): [list(p) for p in polygon]
                for camera_id, polygon in view_fields.items()
            },
            "overlay": radar_overlay(
                self.camera_position, self.sectors, self.view_distance
            ).to_dict(),
        }

    def render(self) -> None:
        """Render the current state and write it out."""
        data = self.state.data()
        language = self.settings.language
        radar_svg = render_radar_svg(self.plot, self.sectors, language)
        map_data = self.map_data()

        stream_urls = {}
        if self._stream_url is not None:
            stream_urls = {camera.id: self._stream_url(camera.id) for camera in data.cameras}

        page = render_dashboard_html(
            data,
            self.settings,
            self.sectors,
            radar_svg=radar_svg if self.settings.radar_enabled else "",
            map_data=map_data,
            stream_urls=stream_urls,
        )

        state = self.state.snapshot()
        state["map"] = map_data
        state["settings"] = self.settings.to_dict()
        self.writer.write(page, radar_svg, state)

    def write_history(self, query: HistoryQuery) -> HistoryView:
        """
        Fetch, render and write one page of detection history.

        Raises:
            BackendError: History could not be fetched
        """
        view = build_history_view(query, self.source.history(query))
        page = render_history_html(view, self.settings.language)
        self.writer.write_history(page, view.page.current_page)
        return view
