"""
Dashboard - live panels rendered to static files.

state.py   - thread-safe panel state (last write wins)
history.py - detection history query, stats and page links
sources.py - backend and sample-data panel sources
poller.py  - interval scheduler for refresh jobs
report.py  - HTML page rendering
output.py  - atomic writes of index.html, history.html, radar.svg, state.json
server.py  - static file server for the output directory
app.py     - wiring of the above
"""

from .app import DEFAULT_INTERVALS, Dashboard
from .history import HistoryQuery, HistoryView, build_history_view
from .output import DashboardWriter
from .poller import PanelPoller
from .report import render_dashboard_html, render_history_html
from .server import start_dashboard_server, stop_dashboard_server
from .sources import BackendSource, SampleSource
from .state import DashboardState, PanelData

__all__ = [
    "DEFAULT_INTERVALS",
    "BackendSource",
    "Dashboard",
    "DashboardState",
    "DashboardWriter",
    "HistoryQuery",
    "HistoryView",
    "PanelData",
    "PanelPoller",
    "SampleSource",
    "build_history_view",
    "render_dashboard_html",
    "render_history_html",
    "start_dashboard_server",
    "stop_dashboard_server",
]
